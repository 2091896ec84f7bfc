import uuid
from datetime import datetime, timezone as dt_timezone
from decimal import Decimal
from unittest import mock

import requests
from django.test import SimpleTestCase

from pagos.exceptions import RemoteStoreError
from pagos.models import Payment
from pagos.sync.remote import RemotePayment, RestRemoteGateway, parse_remote_datetime
from pagos.tests.helpers import OWNER_ID, fake_response, make_remote


class ParseRemoteDatetimeTests(SimpleTestCase):
    def test_formats(self):
        expected = datetime(2025, 12, 3, 20, 30, 48, 731000, tzinfo=dt_timezone.utc)
        self.assertEqual(parse_remote_datetime("2025-12-03T20:30:48.731Z"), expected)
        self.assertEqual(parse_remote_datetime("2025-12-03 20:30:48.731+00"), expected)
        self.assertEqual(parse_remote_datetime("2025-12-03 20:30:48.731"), expected)
        self.assertEqual(
            parse_remote_datetime("2025-12-03"), datetime(2025, 12, 3, tzinfo=dt_timezone.utc)
        )
        self.assertIsNone(parse_remote_datetime(None))

    def test_garbage_rejected(self):
        with self.assertRaises(ValueError):
            parse_remote_datetime("next tuesday")


class RemotePaymentTests(SimpleTestCase):
    def test_from_dict_defaults(self):
        payment_id = uuid.uuid4()
        remote = RemotePayment.from_dict(
            {
                "id": str(payment_id),
                "user_id": str(OWNER_ID),
                "name": "Netflix",
                "amount": 44.9,
                "due_date": "2025-02-15",
                "category": "Streaming",
            }
        )
        self.assertEqual(remote.id, payment_id)
        self.assertEqual(remote.amount, Decimal("44.90"))
        self.assertEqual(remote.currency, Payment.Currency.PEN)
        self.assertEqual(remote.category, Payment.Category.OTRO)
        self.assertFalse(remote.is_paid)
        self.assertIsNone(remote.group_id)

    def test_to_dict_wire_keys(self):
        group_id = uuid.uuid4()
        row = make_remote(name="Visa", currency="USD", group_id=group_id, event_identifier="evt-1").to_dict()
        self.assertEqual(row["currency"], "USD")
        self.assertEqual(row["amount"], 89.9)
        self.assertEqual(row["event_identifier"], "evt-1")
        self.assertEqual(row["group_id"], str(group_id))
        self.assertEqual(row["user_id"], str(OWNER_ID))
        self.assertEqual(row["due_date"], "2025-02-05T05:00:00+00:00")


class RestRemoteGatewayTests(SimpleTestCase):
    def setUp(self):
        self.http = mock.Mock(spec=requests.Session)
        self.gateway = RestRemoteGateway(
            base_url="https://remote.example.test/rest/v1/",
            api_key="anon-key",
            timeout=5.0,
            http=self.http,
        )
        self.gateway.authorize("user-token")

    def test_fetch_all_scoped_by_owner(self):
        row = make_remote().to_dict()
        self.http.request.return_value = fake_response(payload=[row])

        payments = self.gateway.fetch_all(OWNER_ID)

        self.assertEqual(len(payments), 1)
        method, url = self.http.request.call_args.args
        kwargs = self.http.request.call_args.kwargs
        self.assertEqual((method, url), ("GET", "https://remote.example.test/rest/v1/payments"))
        self.assertEqual(kwargs["params"], {"select": "*", "user_id": f"eq.{OWNER_ID}"})
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer user-token")
        self.assertEqual(kwargs["headers"]["apikey"], "anon-key")
        self.assertEqual(kwargs["timeout"], 5.0)

    def test_upsert_all_merges_duplicates(self):
        self.http.request.return_value = fake_response(status_code=201)
        payment = make_remote(user_id=None)

        self.gateway.upsert_all([payment], OWNER_ID)

        kwargs = self.http.request.call_args.kwargs
        self.assertEqual(kwargs["params"], {"on_conflict": "id"})
        self.assertIn("resolution=merge-duplicates", kwargs["headers"]["Prefer"])
        self.assertEqual(kwargs["json"][0]["user_id"], str(OWNER_ID))
        self.assertEqual(kwargs["json"][0]["id"], str(payment.id))

    def test_upsert_nothing_makes_no_request(self):
        self.gateway.upsert_all([], OWNER_ID)
        self.http.request.assert_not_called()

    def test_delete_many(self):
        self.http.request.return_value = fake_response(status_code=204)
        first, second = uuid.uuid4(), uuid.uuid4()

        self.gateway.delete_many([first, second])

        method = self.http.request.call_args.args[0]
        self.assertEqual(method, "DELETE")
        self.assertEqual(self.http.request.call_args.kwargs["params"], {"id": f"in.({first},{second})"})

    def test_http_error_raised_as_remote_store_error(self):
        self.http.request.return_value = fake_response(status_code=500, text="boom")
        with self.assertRaises(RemoteStoreError) as ctx:
            self.gateway.fetch_all(OWNER_ID)
        self.assertEqual(ctx.exception.status_code, 500)

    def test_network_error_raised_as_remote_store_error(self):
        self.http.request.side_effect = requests.Timeout("timed out")
        with self.assertRaises(RemoteStoreError):
            self.gateway.upsert_all([make_remote()], OWNER_ID)

    def test_malformed_rows_rejected(self):
        self.http.request.return_value = fake_response(payload=[{"id": "not-a-uuid"}])
        with self.assertRaises(RemoteStoreError):
            self.gateway.fetch_all(OWNER_ID)
