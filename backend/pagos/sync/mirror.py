"""
Mirror service: external calendar-like artifacts referenced by
Payment.external_mirror_ref. Used by the group manager and the payment use
cases only, never by the sync loop.
"""

import logging

logger = logging.getLogger(__name__)


class MirrorService:
    enabled = True

    @classmethod
    def from_settings(cls):
        return cls()

    def create_mirror(self, title, date):
        """Return the new artifact's reference, or None if it could not be created."""
        raise NotImplementedError

    def update_mirror(self, ref, title, date, is_paid=False):
        raise NotImplementedError

    def remove_mirror(self, ref):
        raise NotImplementedError


class NullMirrorService(MirrorService):
    """Used when calendar mirroring is switched off."""

    enabled = False

    def create_mirror(self, title, date):
        logger.debug("Mirroring disabled; not creating %r", title)
        return None

    def update_mirror(self, ref, title, date, is_paid=False):
        logger.debug("Mirroring disabled; not updating %s", ref)

    def remove_mirror(self, ref):
        logger.debug("Mirroring disabled; not removing %s", ref)
