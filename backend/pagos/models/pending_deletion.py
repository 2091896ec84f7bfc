from django.db import models


class PendingDeletion(models.Model):
    """
    Tombstone for a payment deleted locally after it reached the remote store.
    Kept until the remote acknowledges the delete.
    """

    payment_id = models.UUIDField(unique=True)
    deleted_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["deleted_at"]

    def __str__(self):
        return f"delete {self.payment_id}"
