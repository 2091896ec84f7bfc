"""
Payment use cases: the only code that edits user-visible payment fields
outside a download merge.
"""

import logging
import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import transaction

from pagos.exceptions import MirrorUnavailable, PaymentNotFound
from pagos.models import Payment, SyncStatus
from pagos.signals import payments_changed
from pagos.sync import state_machine

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "amount", "currency", "due_date", "is_paid", "category")


class PaymentService:
    def __init__(self, local_store, groups):
        self.local_store = local_store
        self.groups = groups

    def get(self, payment_id) -> Payment:
        payment = self.local_store.fetch(payment_id)
        if payment is None or payment.delete_requested:
            raise PaymentNotFound(f"Payment {payment_id} not found")
        return payment

    def create(self, *, mirror=True, **fields) -> Payment:
        unknown = set(fields) - set(EDITABLE_FIELDS) - {"group_id"}
        if unknown:
            raise TypeError(f"Unexpected payment fields: {', '.join(sorted(unknown))}")
        payment = Payment(sync_status=SyncStatus.LOCAL, **fields)
        payment.full_clean()
        self.local_store.insert(payment)
        logger.info("Created payment %s (%s)", payment.pk, payment.name)
        if mirror:
            self._attach_mirror(payment)
        self._notify(payment.pk, "created")
        return payment

    def create_dual_currency(
        self,
        *,
        name,
        amount_pen,
        amount_usd,
        due_date,
        category=Payment.Category.TARJETA_CREDITO,
        is_paid=False,
        mirror=True,
    ):
        """Create the PEN and USD legs of one credit-card bill as a group."""
        group_id = uuid.uuid4()
        legs = [
            Payment(
                name=name,
                amount=amount,
                currency=currency,
                due_date=due_date,
                category=category,
                is_paid=is_paid,
                group_id=group_id,
                sync_status=SyncStatus.LOCAL,
            )
            for currency, amount in ((Payment.Currency.PEN, amount_pen), (Payment.Currency.USD, amount_usd))
        ]
        for leg in legs:
            leg.full_clean()
        with transaction.atomic():
            for leg in legs:
                self.local_store.insert(leg)
        logger.info("Created dual-currency payment group %s", group_id)
        if mirror:
            self._attach_mirror(legs[0])
            for leg in legs[1:]:
                leg.refresh_from_db()
        for leg in legs:
            self._notify(leg.pk, "created")
        return legs[0], legs[1]

    def update(self, payment_id, **changes) -> Payment:
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise TypeError(f"Unexpected payment fields: {', '.join(sorted(unknown))}")
        payment = self.get(payment_id)
        changed = [name for name, value in changes.items() if getattr(payment, name) != value]
        if not changed:
            return payment
        for name in changed:
            setattr(payment, name, changes[name])
        payment.full_clean()

        state_machine.mark_edited(payment)
        self.local_store.update(payment)
        logger.info("Updated payment %s: %s", payment.pk, ", ".join(changed))

        if any(name in Payment.SHARED_FIELDS for name in changed):
            self.groups.propagate(payment)
        if payment.external_mirror_ref or payment.group_id:
            self._attach_mirror(payment)
        self._notify(payment.pk, "updated")
        return payment

    def toggle_paid(self, payment_id) -> Payment:
        payment = self.get(payment_id)
        payment.is_paid = not payment.is_paid
        state_machine.mark_edited(payment)
        self.local_store.update(payment)
        logger.info("Payment %s marked %s", payment.pk, "paid" if payment.is_paid else "unpaid")
        if payment.external_mirror_ref and self.groups.mirror.enabled:
            self.groups.mirror.update_mirror(
                payment.external_mirror_ref, payment.mirror_title, payment.due_date, payment.is_paid
            )
        self._notify(payment.pk, "toggled")
        return payment

    def delete(self, payment_id) -> None:
        """
        Delete locally. Records the remote may hold get a tombstone; a record
        that is mid-upload is only flagged and removed once the upload ends.
        """
        payment = self.get(payment_id)
        if payment.sync_status == SyncStatus.SYNCING:
            payment.delete_requested = True
            self.local_store.update(payment, fields=["delete_requested", "updated_at"])
            logger.info("Deferred deletion of %s until its upload finishes", payment.pk)
        else:
            self.local_store.delete(payment, tombstone=payment.sync_status != SyncStatus.LOCAL)
            logger.info("Deleted payment %s", payment.pk)
        try:
            self.groups.release_mirror(payment)
        except MirrorUnavailable:
            logger.warning("Could not remove mirror %s", payment.external_mirror_ref)
        self._notify(payment.pk, "deleted")

    def _attach_mirror(self, payment) -> None:
        try:
            self.groups.attach_mirror(payment)
        except MirrorUnavailable as exc:
            logger.warning("Calendar mirror skipped for %s: %s", payment.pk, exc)

    @staticmethod
    def _notify(payment_id, action) -> None:
        payments_changed.send(sender=Payment, payment_id=payment_id, action=action)


def parse_amount(raw) -> Decimal:
    """Parse a user-entered amount; raises ValidationError for junk or non-positive values."""
    try:
        amount = Decimal(str(raw).strip().replace(",", "."))
    except ArithmeticError:
        raise ValidationError({"amount": "Amount is invalid."})
    if amount <= 0:
        raise ValidationError({"amount": "Amount must be greater than zero."})
    return amount.quantize(Decimal("0.01"))
