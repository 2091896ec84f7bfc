import logging
from typing import List, Optional

from django.db import DatabaseError, transaction

from pagos.exceptions import MirrorUnavailable
from pagos.models import Payment
from pagos.sync import state_machine
from pagos.sync.local_store import SYNC_METADATA_FIELDS

logger = logging.getLogger(__name__)

MIRROR_REF_FIELDS = ["external_mirror_ref"] + SYNC_METADATA_FIELDS


class GroupConsistencyManager:
    """
    Keeps the legs of one bill (payments sharing a group_id) consistent.

    Shared fields (Payment.SHARED_FIELDS) follow the edited leg; amount,
    currency and paid flag stay per leg. A group owns at most one mirror
    reference. Sibling writes are best effort: the primary write has already
    happened, a failing sibling is logged and skipped.
    """

    def __init__(self, local_store, mirror_service):
        self.local_store = local_store
        self.mirror = mirror_service

    def siblings_of(self, payment) -> List[Payment]:
        return [member for member in self.local_store.fetch_group(payment.group_id) if member.pk != payment.pk]

    def propagate(self, payment) -> List[Payment]:
        if payment.group_id is None:
            return []
        updated = []
        for sibling in self.siblings_of(payment):
            changed = [name for name in Payment.SHARED_FIELDS if getattr(sibling, name) != getattr(payment, name)]
            if not changed:
                continue
            for name in changed:
                setattr(sibling, name, getattr(payment, name))
            state_machine.mark_edited(sibling)
            if self._save_sibling(sibling, changed + SYNC_METADATA_FIELDS):
                updated.append(sibling)
        if updated:
            logger.info("Propagated shared fields of %s to %s siblings", payment.pk, len(updated))
        return updated

    def attach_mirror(self, payment) -> Optional[str]:
        """
        Make sure the payment's group has exactly one mirror and every member
        references it. Reuses an existing reference when any member has one.
        """
        if not self.mirror.enabled:
            return payment.external_mirror_ref
        siblings = self.siblings_of(payment)
        ref = payment.external_mirror_ref or next(
            (sibling.external_mirror_ref for sibling in siblings if sibling.external_mirror_ref), None
        )
        if ref:
            self.mirror.update_mirror(ref, payment.mirror_title, payment.due_date, payment.is_paid)
        else:
            ref = self.mirror.create_mirror(payment.mirror_title, payment.due_date)
            if not ref:
                raise MirrorUnavailable(f"Could not create a calendar event for {payment.name}")
            logger.info("Created mirror %s for %s", ref, payment.pk)

        if payment.external_mirror_ref != ref:
            payment.external_mirror_ref = ref
            state_machine.mark_edited(payment)
            self.local_store.update(payment, fields=MIRROR_REF_FIELDS)
        for sibling in siblings:
            if sibling.external_mirror_ref == ref:
                continue
            sibling.external_mirror_ref = ref
            state_machine.mark_edited(sibling)
            self._save_sibling(sibling, MIRROR_REF_FIELDS)
        return ref

    def release_mirror(self, payment) -> bool:
        """
        Remove the payment's mirror unless another group member still uses it.
        Call after the payment has been removed from the visible store.
        """
        ref = payment.external_mirror_ref
        if not ref:
            return False
        if any(sibling.external_mirror_ref == ref for sibling in self.siblings_of(payment)):
            logger.info("Keeping mirror %s: other group members still use it", ref)
            return False
        self.mirror.remove_mirror(ref)
        logger.info("Removed mirror %s", ref)
        return True

    def _save_sibling(self, sibling, fields) -> bool:
        try:
            with transaction.atomic():
                self.local_store.update(sibling, fields=fields)
        except DatabaseError:
            logger.exception("Could not update group sibling %s", sibling.pk)
            return False
        return True
