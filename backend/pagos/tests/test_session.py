from unittest import mock

import requests
from django.test import SimpleTestCase, TestCase

from pagos.exceptions import SessionExpired, SessionUnavailable
from pagos.models import SyncState
from pagos.sync.session import RestSessionGate
from pagos.tests.helpers import OWNER_ID, fake_response


class RestSessionGateTests(SimpleTestCase):
    def setUp(self):
        self.http = mock.Mock(spec=requests.Session)
        self.gate = RestSessionGate(
            auth_url="https://remote.example.test/auth/v1",
            api_key="anon-key",
            access_token="old-access",
            refresh_token="old-refresh",
            http=self.http,
        )

    def test_valid_token(self):
        self.http.get.return_value = fake_response(payload={"id": str(OWNER_ID)})

        session = self.gate.ensure_usable_session()

        self.assertEqual(session.owner_id, OWNER_ID)
        self.assertEqual(session.access_token, "old-access")
        self.assertEqual(self.http.get.call_args.args[0], "https://remote.example.test/auth/v1/user")
        self.http.post.assert_not_called()

    def test_rejected_token_refreshed(self):
        self.http.get.return_value = fake_response(status_code=401)
        self.http.post.return_value = fake_response(
            payload={"access_token": "new-access", "refresh_token": "new-refresh", "user": {"id": str(OWNER_ID)}}
        )

        session = self.gate.ensure_usable_session()

        self.assertEqual(session.access_token, "new-access")
        self.assertEqual(self.gate.refresh_token, "new-refresh")
        self.assertEqual(self.http.post.call_args.kwargs["params"], {"grant_type": "refresh_token"})
        self.assertEqual(self.http.post.call_args.kwargs["json"], {"refresh_token": "old-refresh"})

    def test_rejected_refresh_expires_session(self):
        self.http.get.return_value = fake_response(status_code=401)
        self.http.post.return_value = fake_response(status_code=400)
        with self.assertRaises(SessionExpired):
            self.gate.ensure_usable_session()

    def test_missing_refresh_token_expires_session(self):
        self.gate.access_token = ""
        self.gate.refresh_token = ""
        with self.assertRaises(SessionExpired):
            self.gate.ensure_usable_session()

    def test_unreachable_auth_server(self):
        self.http.get.side_effect = requests.ConnectionError("offline")
        with self.assertRaises(SessionUnavailable):
            self.gate.ensure_usable_session()

    def test_server_error_is_unavailable(self):
        self.http.get.return_value = fake_response(status_code=503)
        with self.assertRaises(SessionUnavailable):
            self.gate.ensure_usable_session()

    def test_not_configured(self):
        self.gate.auth_url = ""
        with self.assertRaises(SessionUnavailable):
            self.gate.ensure_usable_session()

    def test_non_json_body_is_unavailable(self):
        response = fake_response()
        response.json.side_effect = requests.exceptions.JSONDecodeError("Expecting value", "<html>", 0)
        self.http.get.return_value = response
        with self.assertRaises(SessionUnavailable):
            self.gate.ensure_usable_session()

    def test_unexpected_json_shape_is_unavailable(self):
        self.http.get.return_value = fake_response(payload=[{"id": str(OWNER_ID)}])
        with self.assertRaises(SessionUnavailable):
            self.gate.ensure_usable_session()

    def test_refresh_without_access_token_is_unavailable(self):
        self.http.get.return_value = fake_response(status_code=401)
        self.http.post.return_value = fake_response(payload={"user": {"id": str(OWNER_ID)}})
        with self.assertRaises(SessionUnavailable):
            self.gate.ensure_usable_session()
        self.assertEqual(self.gate.access_token, "old-access")
        self.assertEqual(self.gate.refresh_token, "old-refresh")


class PersistedTokenTests(TestCase):
    def test_rotated_tokens_survive_restart(self):
        gate = RestSessionGate.from_settings()
        gate.refresh_token = "configured-refresh"
        gate.http = mock.Mock(spec=requests.Session)
        gate.http.post.return_value = fake_response(
            payload={"access_token": "new-access", "refresh_token": "new-refresh", "user": {"id": str(OWNER_ID)}}
        )

        gate.ensure_usable_session()

        state = SyncState.load()
        self.assertEqual((state.access_token, state.refresh_token), ("new-access", "new-refresh"))
        restarted = RestSessionGate.from_settings()
        self.assertEqual(restarted.access_token, "new-access")
        self.assertEqual(restarted.refresh_token, "new-refresh")

    def test_gate_built_by_hand_does_not_persist(self):
        gate = RestSessionGate(
            auth_url="https://remote.example.test/auth/v1",
            refresh_token="old-refresh",
            http=mock.Mock(spec=requests.Session),
        )
        gate.http.post.return_value = fake_response(
            payload={"access_token": "new-access", "user": {"id": str(OWNER_ID)}}
        )
        gate.ensure_usable_session()
        self.assertEqual(SyncState.load().refresh_token, "")
