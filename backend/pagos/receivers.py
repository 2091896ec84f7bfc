import logging

from django.dispatch import receiver

from pagos.models import Payment, SyncState
from pagos.signals import payments_changed

logger = logging.getLogger(__name__)


@receiver(payments_changed, sender=Payment, dispatch_uid="pagos.refresh_pending_count")
def refresh_pending_count(sender, payment_id=None, action=None, **kwargs):
    state = SyncState.load()
    state.pending_sync_count = Payment.objects.dirty().count()
    state.save(update_fields=["pending_sync_count", "updated_at"])
    logger.debug("Payment %s %s; %s pending", payment_id, action, state.pending_sync_count)
