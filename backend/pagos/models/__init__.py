from .payment import Payment, SyncStatus
from .pending_deletion import PendingDeletion
from .sync_state import SyncState

__all__ = [
    "Payment",
    "SyncStatus",
    "PendingDeletion",
    "SyncState",
]
