"""
Session gate: "is my session usable right now".

Two failure modes are kept apart: SessionUnavailable (offline, keep working
locally) and SessionExpired (credentials rejected, the user must sign in).
"""

import logging
import uuid
from dataclasses import dataclass, field

import requests

from pagos.conf import sync_setting
from pagos.exceptions import SessionExpired, SessionUnavailable
from pagos.models import SyncState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Session:
    owner_id: uuid.UUID
    access_token: str = ""


class SessionGate:
    @classmethod
    def from_settings(cls):
        return cls()

    def ensure_usable_session(self) -> Session:
        raise NotImplementedError


@dataclass
class RestSessionGate(SessionGate):
    """
    Validates the stored access token against a GoTrue-style auth API and
    refreshes it once when rejected.

    With `persist_tokens`, rotated tokens are saved on SyncState and win over
    the configured ones at the next start.
    """

    auth_url: str
    api_key: str = ""
    access_token: str = ""
    refresh_token: str = ""
    timeout: float = 10.0
    persist_tokens: bool = False
    http: requests.Session = field(default_factory=requests.Session, repr=False)

    @classmethod
    def from_settings(cls):
        state = SyncState.load()
        return cls(
            auth_url=sync_setting("AUTH_URL"),
            api_key=sync_setting("REMOTE_API_KEY"),
            access_token=state.access_token or sync_setting("ACCESS_TOKEN"),
            refresh_token=state.refresh_token or sync_setting("REFRESH_TOKEN"),
            timeout=float(sync_setting("REMOTE_TIMEOUT")),
            persist_tokens=True,
        )

    def _headers(self, token=None):
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["apikey"] = self.api_key
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def ensure_usable_session(self) -> Session:
        if not self.auth_url:
            raise SessionUnavailable("No auth endpoint configured")
        if not self.access_token:
            return self._refresh()
        try:
            response = self.http.get(
                f"{self.auth_url.rstrip('/')}/user",
                headers=self._headers(self.access_token),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.info("Session check unreachable: %s", exc)
            raise SessionUnavailable(str(exc)) from exc

        if response.status_code == 200:
            return Session(owner_id=self._owner_from(self._json(response)), access_token=self.access_token)
        if response.status_code in (401, 403):
            logger.info("Access token rejected, attempting refresh")
            return self._refresh()
        raise SessionUnavailable(f"Auth server returned {response.status_code}")

    def _refresh(self) -> Session:
        if not self.refresh_token:
            raise SessionExpired("No refresh token stored")
        try:
            response = self.http.post(
                f"{self.auth_url.rstrip('/')}/token",
                params={"grant_type": "refresh_token"},
                json={"refresh_token": self.refresh_token},
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise SessionUnavailable(str(exc)) from exc

        if response.status_code in (400, 401, 403):
            logger.warning("Refresh token rejected; session expired")
            raise SessionExpired("Refresh token rejected")
        if response.status_code != 200:
            raise SessionUnavailable(f"Auth server returned {response.status_code}")

        data = self._json(response)
        access_token = data.get("access_token")
        if not access_token:
            raise SessionUnavailable("Refresh response did not include an access token")
        owner_id = self._owner_from(data.get("user") or {})
        self.access_token = access_token
        self.refresh_token = data.get("refresh_token") or self.refresh_token
        if self.persist_tokens:
            SyncState.store_tokens(self.access_token, self.refresh_token)
        logger.info("Session refreshed")
        return Session(owner_id=owner_id, access_token=self.access_token)

    @staticmethod
    def _json(response) -> dict:
        try:
            data = response.json()
        except ValueError as exc:
            raise SessionUnavailable("Auth server returned a non-JSON body") from exc
        if not isinstance(data, dict):
            raise SessionUnavailable("Auth server returned an unexpected body")
        return data

    @staticmethod
    def _owner_from(user: dict) -> uuid.UUID:
        try:
            return uuid.UUID(str(user["id"]))
        except (KeyError, TypeError, ValueError) as exc:
            raise SessionUnavailable("Auth response did not include a user id") from exc
