from .sync_views import run_sync, sync_status

__all__ = ["run_sync", "sync_status"]
