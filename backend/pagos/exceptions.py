class PaymentError(Exception):
    """Base class for payment use-case failures."""

    error_code = "PAYMENT_UNKNOWN"

    def __init__(self, message="", *, error_code=None):
        super().__init__(message or self.__class__.__doc__)
        if error_code:
            self.error_code = error_code


class PaymentNotFound(PaymentError):
    """Payment does not exist in the local store."""

    error_code = "PAYMENT_NOT_FOUND"


class MirrorUnavailable(PaymentError):
    """The mirror service could not create a calendar event."""

    error_code = "PAYMENT_CALENDAR_FAILED"


class InvalidTransition(Exception):
    def __init__(self, current, target):
        super().__init__(f"Illegal sync transition {current!r} -> {target!r}")
        self.current = current
        self.target = target


class SessionError(Exception):
    pass


class SessionUnavailable(SessionError):
    """Session could not be checked (offline, auth server unreachable)."""


class SessionExpired(SessionError):
    """Session is definitely invalid; the user must sign in again."""


class RemoteStoreError(Exception):
    """A remote store call failed (network, timeout or non-2xx response)."""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class SyncError(Exception):
    """
    Cycle-level synchronization failure surfaced to the orchestrator's caller.

    `recoverable` means "try later"; `needs_user_action` means the user must
    do something (sign in again) before a sync can succeed.
    """

    error_code = "SYNC_UNKNOWN"
    recoverable = True
    needs_user_action = False

    def __init__(self, message=""):
        super().__init__(message or self.__class__.__doc__)

    def as_dict(self):
        return {
            "code": self.error_code,
            "message": str(self),
            "recoverable": self.recoverable,
            "needs_user_action": self.needs_user_action,
        }


class SyncUnavailable(SyncError):
    """Cannot sync right now; keep working locally and retry later."""

    error_code = "SYNC_NETWORK_ERROR"


class SyncAuthenticationRequired(SyncError):
    """Session expired; sign in again to resume synchronization."""

    error_code = "SYNC_SESSION_EXPIRED"
    recoverable = False
    needs_user_action = True


class UploadFailed(SyncError):
    """Local changes could not be uploaded."""

    error_code = "SYNC_UPLOAD_FAILED"


class DownloadFailed(SyncError):
    """Remote changes could not be downloaded."""

    error_code = "SYNC_DOWNLOAD_FAILED"


class ConfirmationRequired(Exception):
    """Destructive operation attempted without explicit confirmation."""
