from django.db import models


class SyncState(models.Model):
    """
    Single-row store for the externally observable sync bookkeeping.
    """

    SINGLETON_ID = 1

    pending_sync_count = models.PositiveIntegerField(default=0)
    last_sync_date = models.DateTimeField(null=True, blank=True)
    last_sync_error_code = models.CharField(max_length=32, blank=True)
    last_sync_error_message = models.TextField(blank=True)
    # rotated by the auth server on refresh; empty until the first refresh
    access_token = models.TextField(blank=True)
    refresh_token = models.TextField(blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "sync state"

    @classmethod
    def load(cls):
        state, _ = cls.objects.get_or_create(pk=cls.SINGLETON_ID)
        return state

    @classmethod
    def store_tokens(cls, access_token, refresh_token):
        state = cls.load()
        state.access_token = access_token
        state.refresh_token = refresh_token
        state.save(update_fields=["access_token", "refresh_token", "updated_at"])

    @property
    def last_sync_error(self):
        if not self.last_sync_error_code:
            return None
        return {"code": self.last_sync_error_code, "message": self.last_sync_error_message}

    def __str__(self):
        return f"pending={self.pending_sync_count} last={self.last_sync_date}"
