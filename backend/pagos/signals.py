from django.dispatch import Signal

# Sent once per reconciliation pass, success or failure.
# kwargs: success (bool), result (SyncResult | None), error (SyncError | None)
sync_completed = Signal()

# Sent by the payment use cases after a local write.
# kwargs: payment_id (UUID), action ("created" | "updated" | "deleted" | "toggled")
payments_changed = Signal()
