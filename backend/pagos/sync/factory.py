"""
Composition root: builds the sync collaborators from settings.PAGOS_SYNC.
"""

from functools import lru_cache

from django.utils.module_loading import import_string

from pagos.conf import sync_setting
from pagos.services.payments import PaymentService
from pagos.sync.groups import GroupConsistencyManager
from pagos.sync.local_store import LocalStore
from pagos.sync.orchestrator import SyncOrchestrator


def _build(setting_name):
    return import_string(sync_setting(setting_name)).from_settings()


def build_orchestrator(recover=False) -> SyncOrchestrator:
    """
    With `recover`, revert records left `syncing` by a crashed upload. Only the
    process that runs syncs may recover: another process would revert
    uploads still in flight there.
    """
    orchestrator = SyncOrchestrator(
        local_store=LocalStore(),
        remote=_build("REMOTE_GATEWAY"),
        session_gate=_build("SESSION_GATE"),
    )
    if recover:
        orchestrator.recover_interrupted_uploads()
    return orchestrator


def build_payment_service() -> PaymentService:
    local_store = LocalStore()
    return PaymentService(local_store, GroupConsistencyManager(local_store, _build("MIRROR_SERVICE")))


@lru_cache(maxsize=None)
def get_orchestrator() -> SyncOrchestrator:
    """The process-wide orchestrator shared by the views."""
    return build_orchestrator(recover=True)
