import logging
from dataclasses import dataclass

from django.utils import timezone

from pagos.exceptions import RemoteStoreError, UploadFailed
from pagos.models import SyncStatus
from pagos.sync import state_machine
from pagos.sync.local_store import SYNC_METADATA_FIELDS
from pagos.sync.remote import RemotePayment

logger = logging.getLogger(__name__)


@dataclass
class UploadResult:
    uploaded: int = 0
    deleted: int = 0


class UploadEngine:
    """
    Pushes dirty payments (local, modified, error) and pending tombstones to
    the remote store.

    The batch is all-or-nothing: every record ends `synced` or every record
    ends `error`. Only sync metadata is ever written here; user fields are
    untouched whatever the outcome.
    """

    def __init__(self, local_store, remote, clock=timezone.now):
        self.local_store = local_store
        self.remote = remote
        self.clock = clock

    def recover_interrupted(self) -> int:
        """Revert records left `syncing` by a crashed upload to their prior dirty status."""
        stale = self.local_store.fetch_by_status(SyncStatus.SYNCING)
        for payment in stale:
            state_machine.revert_interrupted(payment)
        if stale:
            self.local_store.save_batch(stale, fields=SYNC_METADATA_FIELDS, expected_status=SyncStatus.SYNCING)
            logger.warning("Reverted %s payments left mid-upload", len(stale))
        return len(stale)

    def run(self, owner_id) -> UploadResult:
        self._flush_deferred_deletions()
        dirty = self.local_store.fetch_dirty()
        has_tombstones = bool(self.local_store.tombstoned_ids())
        if not dirty and not has_tombstones:
            logger.info("No local changes to upload")
            return UploadResult()

        result = UploadResult()
        if dirty:
            result.uploaded = self._upload(dirty, owner_id)
        self._flush_deferred_deletions()
        result.deleted = self._push_deletions()
        return result

    def _upload(self, payments, owner_id) -> int:
        logger.info("Uploading %s payments", len(payments))
        for payment in payments:
            state_machine.begin_upload(payment)
        self.local_store.save_batch(payments, fields=["sync_status", "pre_sync_status", "updated_at"])

        batch = [RemotePayment.from_payment(payment, owner_id) for payment in payments]
        try:
            self.remote.upsert_all(batch, owner_id)
        except RemoteStoreError as exc:
            for payment in payments:
                state_machine.fail_upload(payment)
            self.local_store.save_batch(payments, fields=SYNC_METADATA_FIELDS, expected_status=SyncStatus.SYNCING)
            logger.error("Upload of %s payments failed: %s", len(payments), exc)
            raise UploadFailed(str(exc)) from exc

        synced_at = self.clock()
        for payment in payments:
            state_machine.complete_upload(payment, synced_at)
        written = self.local_store.save_batch(
            payments, fields=SYNC_METADATA_FIELDS, expected_status=SyncStatus.SYNCING
        )
        if written != len(payments):
            logger.info("%s payments were edited during upload and stay dirty", len(payments) - written)
        logger.info("Uploaded %s payments", len(payments))
        return len(payments)

    def _flush_deferred_deletions(self) -> None:
        for payment in self.local_store.fetch_deferred_deletions():
            # an upload was attempted, so the remote may hold a copy
            self.local_store.delete(payment, tombstone=True)
            logger.info("Completed deferred deletion of %s", payment.pk)

    def _push_deletions(self) -> int:
        ids = sorted(self.local_store.tombstoned_ids(), key=str)
        if not ids:
            return 0
        try:
            self.remote.delete_many(ids)
        except RemoteStoreError as exc:
            logger.error("Remote deletion of %s payments failed: %s", len(ids), exc)
            raise UploadFailed(str(exc)) from exc
        self.local_store.discard_tombstones(ids)
        logger.info("Remote acknowledged %s deletions", len(ids))
        return len(ids)
