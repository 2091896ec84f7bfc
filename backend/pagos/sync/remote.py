"""
Remote store gateway: the payments table of the remote source of truth.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, time, timezone as dt_timezone
from decimal import Decimal, InvalidOperation
from typing import Iterable, List, Optional

import requests
from django.utils.dateparse import parse_date, parse_datetime

from pagos.conf import sync_setting
from pagos.exceptions import RemoteStoreError
from pagos.models import Payment

logger = logging.getLogger(__name__)


def parse_remote_datetime(value) -> Optional[datetime]:
    """
    Accept ISO 8601, PostgreSQL timestamps ("2025-12-03 20:30:48.731+00")
    and bare dates. Naive values are taken as UTC.
    """
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        parsed = parse_datetime(text)
        if parsed is None:
            day = parse_date(text)
            if day is None:
                raise ValueError(f"Unrecognised date value: {value!r}")
            parsed = datetime.combine(day, time.min)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt_timezone.utc)
    return parsed


@dataclass
class RemotePayment:
    """Wire shape of a payment row in the remote store."""

    id: uuid.UUID
    name: str
    amount: Decimal
    due_date: datetime
    currency: str = Payment.Currency.PEN
    is_paid: bool = False
    category: str = Payment.Category.OTRO
    event_identifier: Optional[str] = None
    group_id: Optional[uuid.UUID] = None
    user_id: Optional[uuid.UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_payment(cls, payment: Payment, owner_id) -> "RemotePayment":
        return cls(
            id=payment.id,
            user_id=owner_id,
            name=payment.name,
            amount=Decimal(payment.amount),
            currency=payment.currency,
            due_date=payment.due_date,
            is_paid=payment.is_paid,
            category=payment.category,
            event_identifier=payment.external_mirror_ref,
            group_id=payment.group_id,
        )

    @classmethod
    def from_dict(cls, data: dict) -> "RemotePayment":
        try:
            amount = Decimal(str(data["amount"])).quantize(Decimal("0.01"))
        except (InvalidOperation, TypeError) as exc:
            raise ValueError(f"Invalid amount for payment {data.get('id')}") from exc
        currency = data.get("currency") or Payment.Currency.PEN
        if currency not in Payment.Currency.values:
            currency = Payment.Currency.PEN
        category = data.get("category") or Payment.Category.OTRO
        if category not in Payment.Category.values:
            category = Payment.Category.OTRO
        group_id = data.get("group_id")
        user_id = data.get("user_id")
        return cls(
            id=uuid.UUID(str(data["id"])),
            user_id=uuid.UUID(str(user_id)) if user_id else None,
            name=data["name"],
            amount=amount,
            currency=currency,
            due_date=parse_remote_datetime(data["due_date"]),
            is_paid=bool(data.get("is_paid", False)),
            category=category,
            event_identifier=data.get("event_identifier"),
            group_id=uuid.UUID(str(group_id)) if group_id else None,
            created_at=parse_remote_datetime(data.get("created_at")),
            updated_at=parse_remote_datetime(data.get("updated_at")),
        )

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "user_id": str(self.user_id) if self.user_id else None,
            "name": self.name,
            "amount": float(self.amount),
            "currency": self.currency,
            "due_date": self.due_date.isoformat(),
            "is_paid": self.is_paid,
            "category": self.category,
            "event_identifier": self.event_identifier,
            "group_id": str(self.group_id) if self.group_id else None,
        }

    def field_values(self) -> dict:
        """User-visible Payment fields carried by this row."""
        values = {
            "name": self.name,
            "amount": self.amount,
            "currency": self.currency,
            "due_date": self.due_date,
            "is_paid": self.is_paid,
            "category": self.category,
            "external_mirror_ref": self.event_identifier,
        }
        if self.group_id is not None:
            values["group_id"] = self.group_id
        return values


class RemoteStoreGateway:
    """
    List/upsert/delete against the remote store, scoped by owner.
    Every failure is raised as RemoteStoreError.
    """

    @classmethod
    def from_settings(cls):
        return cls()

    def authorize(self, access_token: str) -> None:
        """Receive the access token of the session validated for this cycle."""

    def fetch_all(self, owner_id) -> List[RemotePayment]:
        raise NotImplementedError

    def upsert_all(self, payments: List[RemotePayment], owner_id) -> None:
        raise NotImplementedError

    def delete(self, payment_id) -> None:
        raise NotImplementedError

    def delete_many(self, payment_ids: Iterable) -> None:
        for payment_id in payment_ids:
            self.delete(payment_id)


@dataclass
class RestRemoteGateway(RemoteStoreGateway):
    """PostgREST-style table endpoint (e.g. Supabase `/rest/v1/payments`)."""

    base_url: str
    api_key: str = ""
    table: str = "payments"
    timeout: float = 15.0
    access_token: str = ""
    http: requests.Session = field(default_factory=requests.Session, repr=False)

    @classmethod
    def from_settings(cls):
        return cls(
            base_url=sync_setting("REMOTE_URL"),
            api_key=sync_setting("REMOTE_API_KEY"),
            table=sync_setting("REMOTE_TABLE"),
            timeout=float(sync_setting("REMOTE_TIMEOUT")),
        )

    @property
    def endpoint(self) -> str:
        return f"{self.base_url.rstrip('/')}/{self.table}"

    def authorize(self, access_token: str) -> None:
        self.access_token = access_token

    def _headers(self, prefer: str = "") -> dict:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.api_key:
            headers["apikey"] = self.api_key
        token = self.access_token or self.api_key
        if token:
            headers["Authorization"] = f"Bearer {token}"
        if prefer:
            headers["Prefer"] = prefer
        return headers

    def _request(self, method: str, *, params=None, json=None, prefer: str = ""):
        try:
            response = self.http.request(
                method,
                self.endpoint,
                params=params,
                json=json,
                headers=self._headers(prefer),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise RemoteStoreError(f"{method} {self.table} failed: {exc}") from exc
        if not 200 <= response.status_code < 300:
            raise RemoteStoreError(
                f"{method} {self.table} returned {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )
        return response

    def fetch_all(self, owner_id) -> List[RemotePayment]:
        response = self._request("GET", params={"select": "*", "user_id": f"eq.{owner_id}"})
        try:
            rows = response.json()
            payments = [RemotePayment.from_dict(row) for row in rows]
        except (ValueError, KeyError, TypeError) as exc:
            raise RemoteStoreError(f"Malformed payments response: {exc}") from exc
        logger.info("Fetched %s remote payments for %s", len(payments), owner_id)
        return payments

    def upsert_all(self, payments: List[RemotePayment], owner_id) -> None:
        if not payments:
            return
        body = []
        for payment in payments:
            row = payment.to_dict()
            row["user_id"] = str(owner_id)
            body.append(row)
        self._request(
            "POST",
            params={"on_conflict": "id"},
            json=body,
            prefer="resolution=merge-duplicates,return=minimal",
        )
        logger.info("Upserted %s payments", len(body))

    def delete(self, payment_id) -> None:
        self._request("DELETE", params={"id": f"eq.{payment_id}"})

    def delete_many(self, payment_ids: Iterable) -> None:
        ids = [str(payment_id) for payment_id in payment_ids]
        if not ids:
            return
        self._request("DELETE", params={"id": f"in.({','.join(ids)})"})
        logger.info("Deleted %s remote payments", len(ids))
