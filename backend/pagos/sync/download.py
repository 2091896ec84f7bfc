import logging
from dataclasses import dataclass

from django.db import DatabaseError, transaction
from django.utils import timezone

from pagos.exceptions import DownloadFailed, RemoteStoreError
from pagos.models import Payment, SyncStatus
from pagos.sync import state_machine

logger = logging.getLogger(__name__)


@dataclass
class DownloadResult:
    inserted: int = 0
    updated: int = 0
    skipped: int = 0
    unchanged: int = 0


class DownloadEngine:
    """
    Full reconciliation pass: pull every remote payment of the owner and merge.

    Local edits win: `local` and `modified` records are never overwritten, and
    a payment deleted locally (tombstoned) is not brought back. Nothing is
    pruned. The remote set is fetched before the first local write and merged
    in one transaction, so a failure leaves the store as it was.
    """

    def __init__(self, local_store, remote, clock=timezone.now):
        self.local_store = local_store
        self.remote = remote
        self.clock = clock

    def run(self, owner_id) -> DownloadResult:
        return self.merge(self.fetch(owner_id))

    def fetch(self, owner_id):
        try:
            remote_payments = self.remote.fetch_all(owner_id)
        except RemoteStoreError as exc:
            logger.error("Download failed: %s", exc)
            raise DownloadFailed(str(exc)) from exc
        logger.info("Downloaded %s payments", len(remote_payments))
        return remote_payments

    def merge(self, remote_payments) -> DownloadResult:
        result = DownloadResult()
        synced_at = self.clock()
        try:
            with transaction.atomic():
                tombstoned = self.local_store.tombstoned_ids()
                existing = self.local_store.fetch_many(remote.id for remote in remote_payments)
                for remote in remote_payments:
                    if remote.id in tombstoned:
                        logger.debug("Skipped %s: deleted locally", remote.id)
                        result.skipped += 1
                        continue
                    local = existing.get(remote.id)
                    if local is None:
                        self._insert(remote, synced_at)
                        result.inserted += 1
                    elif local.sync_status in (SyncStatus.LOCAL, SyncStatus.MODIFIED) or local.delete_requested:
                        logger.debug("Skipped %s: has local modifications", remote.id)
                        result.skipped += 1
                    elif self._matches(local, remote):
                        result.unchanged += 1
                    else:
                        self._overwrite(local, remote, synced_at)
                        result.updated += 1
        except DatabaseError as exc:
            logger.exception("Merge of remote payments rolled back")
            raise DownloadFailed(str(exc)) from exc
        logger.info(
            "Merged remote payments: %s inserted, %s updated, %s skipped, %s unchanged",
            result.inserted,
            result.updated,
            result.skipped,
            result.unchanged,
        )
        return result

    def _insert(self, remote, synced_at) -> None:
        payment = Payment(
            id=remote.id,
            sync_status=SyncStatus.SYNCED,
            last_synced_at=synced_at,
            **remote.field_values(),
        )
        self.local_store.insert(payment)

    def _overwrite(self, local, remote, synced_at) -> None:
        for name, value in remote.field_values().items():
            setattr(local, name, value)
        state_machine.apply_remote(local, synced_at)
        self.local_store.update(local)

    @staticmethod
    def _matches(local, remote) -> bool:
        if local.sync_status != SyncStatus.SYNCED:
            return False
        return all(getattr(local, name) == value for name, value in remote.field_values().items())
