"""
Legal transitions of Payment.sync_status.

Functions here only mutate the in-memory instance; persisting is the caller's
job (LocalStore). Every change of sync_status in the project goes through
this module.
"""

from pagos.exceptions import InvalidTransition
from pagos.models.payment import DIRTY_STATUSES, SyncStatus

TRANSITIONS = {
    SyncStatus.LOCAL: {SyncStatus.SYNCING},
    SyncStatus.MODIFIED: {SyncStatus.SYNCING},
    # error -> synced happens when a download pass overwrites a failed record
    SyncStatus.ERROR: {SyncStatus.SYNCING, SyncStatus.SYNCED},
    # syncing -> modified/error is the revert of an interrupted upload,
    # syncing -> modified also covers an edit while the upload is in flight
    SyncStatus.SYNCING: {SyncStatus.SYNCED, SyncStatus.ERROR, SyncStatus.MODIFIED},
    SyncStatus.SYNCED: {SyncStatus.MODIFIED, SyncStatus.SYNCED},
}

# Statuses a download pass may overwrite.
MERGEABLE_STATUSES = (SyncStatus.SYNCED, SyncStatus.ERROR, SyncStatus.SYNCING)


def is_dirty(status) -> bool:
    return status in DIRTY_STATUSES


def can_transition(current, target) -> bool:
    return target in TRANSITIONS.get(current, set())


def transition(payment, target) -> None:
    if not can_transition(payment.sync_status, target):
        raise InvalidTransition(payment.sync_status, target)
    payment.sync_status = target


def mark_edited(payment) -> None:
    """Record a local edit of user-visible fields."""
    if payment.sync_status in (SyncStatus.SYNCED, SyncStatus.SYNCING):
        transition(payment, SyncStatus.MODIFIED)
        payment.pre_sync_status = ""
        payment.last_synced_at = None
    # local, modified and error are already dirty


def begin_upload(payment) -> None:
    previous = payment.sync_status
    transition(payment, SyncStatus.SYNCING)
    payment.pre_sync_status = previous


def complete_upload(payment, synced_at) -> None:
    transition(payment, SyncStatus.SYNCED)
    payment.pre_sync_status = ""
    payment.last_synced_at = synced_at


def fail_upload(payment) -> None:
    transition(payment, SyncStatus.ERROR)
    payment.pre_sync_status = ""


def revert_interrupted(payment) -> None:
    """
    Return a stale `syncing` record to a dirty status.

    The remote may already hold the record, so a record that was `local`
    becomes `error`: never `local` again, which would skip its tombstone.
    """
    target = payment.pre_sync_status
    if target not in (SyncStatus.MODIFIED, SyncStatus.ERROR):
        target = SyncStatus.ERROR
    transition(payment, target)
    payment.pre_sync_status = ""


def apply_remote(payment, synced_at) -> None:
    """Accept the remote value during a download merge."""
    if payment.sync_status not in MERGEABLE_STATUSES:
        raise InvalidTransition(payment.sync_status, SyncStatus.SYNCED)
    payment.sync_status = SyncStatus.SYNCED
    payment.pre_sync_status = ""
    payment.last_synced_at = synced_at
