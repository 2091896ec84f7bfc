"""
Local store gateway over the Django ORM.

All reads and writes the sync engine makes to Payment and PendingDeletion
rows go through LocalStore. Batch writes are atomic.
"""

import logging
from typing import Iterable, List, Optional

from django.db import transaction
from django.utils import timezone

from pagos.models import Payment, PendingDeletion, SyncStatus

logger = logging.getLogger(__name__)

SYNC_METADATA_FIELDS = ["sync_status", "pre_sync_status", "last_synced_at", "updated_at"]


class LocalStore:
    def fetch_all(self) -> List[Payment]:
        return list(Payment.objects.all())

    def fetch(self, payment_id) -> Optional[Payment]:
        return Payment.all_objects.filter(pk=payment_id).first()

    def fetch_many(self, payment_ids: Iterable) -> dict:
        return {payment.pk: payment for payment in Payment.all_objects.filter(pk__in=list(payment_ids))}

    def fetch_dirty(self) -> List[Payment]:
        return list(Payment.objects.dirty().order_by("created_at"))

    def fetch_by_status(self, status) -> List[Payment]:
        return list(Payment.all_objects.filter(sync_status=status))

    def fetch_group(self, group_id) -> List[Payment]:
        if group_id is None:
            return []
        return list(Payment.objects.in_group(group_id))

    def fetch_deferred_deletions(self) -> List[Payment]:
        return list(Payment.all_objects.filter(delete_requested=True).exclude(sync_status=SyncStatus.SYNCING))

    def count_pending(self) -> int:
        return Payment.objects.dirty().count()

    def is_empty(self) -> bool:
        return not Payment.all_objects.exists()

    def insert(self, payment: Payment) -> Payment:
        payment.save(force_insert=True)
        return payment

    def update(self, payment: Payment, fields=None) -> Payment:
        payment.save(update_fields=fields)
        return payment

    def save_batch(self, payments: Iterable[Payment], fields=None, expected_status=None) -> int:
        """
        Persist `payments` in one transaction.

        With `expected_status`, a row is written only if its stored status still
        equals it; rows changed meanwhile (edited mid-upload) are left alone.
        Returns the number of rows written.
        """
        written = 0
        with transaction.atomic():
            for payment in payments:
                if expected_status is None:
                    payment.save(update_fields=fields)
                    written += 1
                    continue
                values = {name: getattr(payment, name) for name in (fields or SYNC_METADATA_FIELDS)}
                values["updated_at"] = timezone.now()
                written += Payment.all_objects.filter(pk=payment.pk, sync_status=expected_status).update(**values)
        return written

    def delete(self, payment: Payment, tombstone: bool) -> None:
        with transaction.atomic():
            if tombstone:
                PendingDeletion.objects.get_or_create(payment_id=payment.pk)
            Payment.all_objects.filter(pk=payment.pk).delete()
        logger.debug("Deleted payment %s locally (tombstone=%s)", payment.pk, tombstone)

    def tombstones(self) -> List[PendingDeletion]:
        return list(PendingDeletion.objects.all())

    def tombstoned_ids(self) -> set:
        return set(PendingDeletion.objects.values_list("payment_id", flat=True))

    def discard_tombstones(self, payment_ids: Iterable) -> int:
        deleted, _ = PendingDeletion.objects.filter(payment_id__in=list(payment_ids)).delete()
        return deleted

    def wipe(self) -> None:
        with transaction.atomic():
            Payment.all_objects.all().delete()
            PendingDeletion.objects.all().delete()
        logger.warning("Local payment store wiped")
