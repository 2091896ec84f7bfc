import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from django.db import transaction
from django.utils import timezone

from pagos.exceptions import (
    ConfirmationRequired,
    SessionExpired,
    SessionUnavailable,
    SyncAuthenticationRequired,
    SyncError,
    SyncUnavailable,
)
from pagos.models import SyncState
from pagos.signals import sync_completed
from pagos.sync.download import DownloadEngine, DownloadResult
from pagos.sync.upload import UploadEngine, UploadResult

logger = logging.getLogger(__name__)

BOOKKEEPING_FIELDS = [
    "pending_sync_count",
    "last_sync_date",
    "last_sync_error_code",
    "last_sync_error_message",
    "updated_at",
]


@dataclass
class SyncResult:
    upload: UploadResult
    download: DownloadResult
    finished_at: datetime

    def as_dict(self):
        return {
            "uploaded": self.upload.uploaded,
            "deleted": self.upload.deleted,
            "inserted": self.download.inserted,
            "updated": self.download.updated,
            "skipped": self.download.skipped,
            "finished_at": self.finished_at.isoformat(),
        }


class SyncOrchestrator:
    """
    Entry point for a full reconciliation: session check, upload, download,
    bookkeeping, `sync_completed` signal.

    Single flight: a call made while another cycle runs returns None at once.
    Build one instance per process (see pagos.sync.factory) so every caller
    shares the same in-progress flag.
    """

    def __init__(self, local_store, remote, session_gate, upload_engine=None, download_engine=None, clock=timezone.now):
        self.local_store = local_store
        self.remote = remote
        self.session_gate = session_gate
        self.upload_engine = upload_engine or UploadEngine(local_store, remote, clock=clock)
        self.download_engine = download_engine or DownloadEngine(local_store, remote, clock=clock)
        self.clock = clock
        self._in_progress = threading.Lock()

    @property
    def is_syncing(self) -> bool:
        return self._in_progress.locked()

    def perform_sync(self) -> Optional[SyncResult]:
        if not self._in_progress.acquire(blocking=False):
            logger.warning("Sync already in progress; ignoring request")
            return None
        try:
            return self._run_cycle()
        finally:
            self._in_progress.release()

    def _run_cycle(self) -> SyncResult:
        logger.info("Starting payment synchronization")
        try:
            owner_id = self._open_session()
            upload = self.upload_engine.run(owner_id)
            download = self.download_engine.run(owner_id)
        except SyncError as exc:
            logger.error("Synchronization failed: %s (%s)", exc.error_code, exc)
            self._fail(exc)
            raise
        except Exception as exc:
            logger.exception("Synchronization failed unexpectedly")
            error = SyncError(f"Unexpected error: {exc}")
            self._fail(error)
            raise error from exc
        result = SyncResult(upload=upload, download=download, finished_at=self.clock())
        self._record_success(result.finished_at)
        sync_completed.send(sender=self.__class__, orchestrator=self, success=True, result=result, error=None)
        logger.info("Synchronization completed: %s", result.as_dict())
        return result

    def _fail(self, error: SyncError) -> None:
        self._record_failure(error)
        sync_completed.send(sender=self.__class__, orchestrator=self, success=False, result=None, error=error)

    def _open_session(self):
        try:
            session = self.session_gate.ensure_usable_session()
        except SessionUnavailable as exc:
            logger.info("Session unavailable, staying offline: %s", exc)
            raise SyncUnavailable() from exc
        except SessionExpired as exc:
            logger.warning("Session expired: %s", exc)
            raise SyncAuthenticationRequired() from exc
        self.remote.authorize(session.access_token)
        return session.owner_id

    def _record_success(self, finished_at) -> None:
        state = SyncState.load()
        state.pending_sync_count = self.local_store.count_pending()
        state.last_sync_date = finished_at
        state.last_sync_error_code = ""
        state.last_sync_error_message = ""
        state.save(update_fields=BOOKKEEPING_FIELDS)

    def _record_failure(self, error: SyncError) -> None:
        state = SyncState.load()
        state.pending_sync_count = self.local_store.count_pending()
        state.last_sync_error_code = error.error_code
        state.last_sync_error_message = str(error)
        state.save(update_fields=BOOKKEEPING_FIELDS)

    def update_pending_sync_count(self) -> int:
        state = SyncState.load()
        state.pending_sync_count = self.local_store.count_pending()
        state.save(update_fields=["pending_sync_count", "updated_at"])
        logger.debug("Pending sync count: %s", state.pending_sync_count)
        return state.pending_sync_count

    def status(self) -> dict:
        state = SyncState.load()
        return {
            "pending_sync_count": state.pending_sync_count,
            "last_sync_date": state.last_sync_date,
            "last_sync_error": state.last_sync_error,
            "is_syncing": self.is_syncing,
        }

    def recover_interrupted_uploads(self) -> int:
        if not self._in_progress.acquire(blocking=False):
            return 0
        try:
            reverted = self.upload_engine.recover_interrupted()
        finally:
            self._in_progress.release()
        if reverted:
            self.update_pending_sync_count()
        return reverted

    def perform_initial_sync_if_needed(self) -> Optional[SyncResult]:
        """Sync only when the local store holds no payments yet (first run, new device)."""
        if not self.local_store.is_empty():
            logger.info("Local store not empty; skipping initial sync")
            return None
        try:
            return self.perform_sync()
        except SyncError as exc:
            logger.warning("Initial sync failed: %s", exc)
            return None

    def clear_local_store(self, force: bool = False) -> bool:
        """
        Drop every local payment and tombstone. Refuses while changes are
        pending unless `force` is set, and while a sync is running.
        """
        if not self._in_progress.acquire(blocking=False):
            logger.warning("Cannot clear local store while a sync is running")
            return False
        try:
            if not force and (self.local_store.count_pending() or self.local_store.tombstoned_ids()):
                logger.warning("Refusing to clear local store: unsynchronized changes exist")
                return False
            self.local_store.wipe()
            state = SyncState.load()
            state.pending_sync_count = 0
            state.last_sync_date = None
            state.last_sync_error_code = ""
            state.last_sync_error_message = ""
            state.save(update_fields=BOOKKEEPING_FIELDS)
        finally:
            self._in_progress.release()
        return True

    def rebuild_from_remote(self, confirmed: bool = False) -> Optional[DownloadResult]:
        """
        Last-resort recovery for a corrupt local store: replace it with the
        remote set. Discards unsynchronized local changes, so callers must pass
        confirmed=True after asking the user.
        """
        if not confirmed:
            raise ConfirmationRequired("Rebuilding discards local changes; confirmation required.")
        if not self._in_progress.acquire(blocking=False):
            logger.warning("Sync already in progress; not rebuilding")
            return None
        try:
            owner_id = self._open_session()
            remote_payments = self.download_engine.fetch(owner_id)
            with transaction.atomic():
                self.local_store.wipe()
                result = self.download_engine.merge(remote_payments)
            self._record_success(self.clock())
        except SyncError as exc:
            self._record_failure(exc)
            raise
        finally:
            self._in_progress.release()
        logger.warning("Local store rebuilt from remote: %s payments", result.inserted)
        return result
