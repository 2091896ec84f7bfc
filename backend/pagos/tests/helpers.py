import uuid
from datetime import datetime, timezone as dt_timezone
from decimal import Decimal
from unittest import mock

import requests

from pagos.models import Payment, SyncStatus
from pagos.sync.remote import RemotePayment

OWNER_ID = uuid.UUID("8f14e45f-ceea-467e-a5d4-3f1b0d2c9a11")
T1 = datetime(2025, 1, 10, 12, 0, tzinfo=dt_timezone.utc)
T2 = datetime(2025, 1, 11, 12, 0, tzinfo=dt_timezone.utc)
DUE = datetime(2025, 2, 5, 5, 0, tzinfo=dt_timezone.utc)


def make_payment(**overrides) -> Payment:
    fields = {
        "name": "Luz del Sur",
        "amount": Decimal("100.00"),
        "currency": Payment.Currency.PEN,
        "due_date": DUE,
        "category": Payment.Category.SERVICIOS,
        "sync_status": SyncStatus.LOCAL,
    }
    fields.update(overrides)
    return Payment.all_objects.create(**fields)


def make_remote(**overrides) -> RemotePayment:
    fields = {
        "id": uuid.uuid4(),
        "name": "Internet",
        "amount": Decimal("89.90"),
        "due_date": DUE,
        "category": Payment.Category.SERVICIOS,
        "user_id": OWNER_ID,
    }
    fields.update(overrides)
    return RemotePayment(**fields)


def fake_response(status_code=200, payload=None, text=""):
    response = mock.Mock(spec=requests.Response)
    response.status_code = status_code
    response.json.return_value = payload
    response.text = text
    return response


class FixedClock:
    def __init__(self, *moments):
        self.moments = list(moments) or [T1]

    def __call__(self):
        if len(self.moments) > 1:
            return self.moments.pop(0)
        return self.moments[0]
