import json
from io import StringIO
from unittest import mock

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase

from pagos.models import Payment, SyncStatus
from pagos.sync.local_store import LocalStore
from pagos.sync.orchestrator import SyncOrchestrator
from pagos.tests.fakes import InMemoryRemoteGateway, StaticSessionGate
from pagos.tests.helpers import OWNER_ID, make_payment, make_remote


class SyncPaymentsCommandTests(TestCase):
    def setUp(self):
        self.remote = InMemoryRemoteGateway()
        self.gate = StaticSessionGate(OWNER_ID)
        self.orchestrator = SyncOrchestrator(LocalStore(), self.remote, self.gate)
        patcher = mock.patch(
            "pagos.management.commands.sync_payments.build_orchestrator", return_value=self.orchestrator
        )
        patcher.start()
        self.addCleanup(patcher.stop)

    def call(self, *args):
        out = StringIO()
        call_command("sync_payments", *args, stdout=out)
        return out.getvalue()

    def test_sync(self):
        make_payment()
        output = self.call()
        self.assertIn("Sync completed", output)
        self.assertIn("uploaded=1", output)
        self.assertEqual(Payment.objects.get().sync_status, SyncStatus.SYNCED)

    def test_status(self):
        make_payment()
        self.orchestrator.update_pending_sync_count()
        status = json.loads(self.call("--status"))
        self.assertEqual(status["pending_sync_count"], 1)

    def test_sync_failure_raises_command_error(self):
        self.gate.mode = "expired"
        with self.assertRaisesMessage(CommandError, "SYNC_SESSION_EXPIRED"):
            self.call()

    def test_initial_skipped_when_not_empty(self):
        make_payment()
        self.assertIn("not performed", self.call("--initial"))

    def test_clear_requires_force_with_pending_changes(self):
        make_payment()
        with self.assertRaises(CommandError):
            self.call("--clear")
        self.assertIn("cleared", self.call("--clear", "--force"))
        self.assertFalse(Payment.all_objects.exists())

    def test_rebuild_requires_yes(self):
        with self.assertRaises(CommandError):
            self.call("--rebuild")

    def test_rebuild(self):
        make_payment(name="Mine")
        self.remote.seed(make_remote(name="Theirs"), OWNER_ID)
        self.assertIn("1 payments", self.call("--rebuild", "--yes"))
        self.assertEqual(list(Payment.objects.values_list("name", flat=True)), ["Theirs"])

    def test_recover(self):
        payment = make_payment(sync_status=SyncStatus.SYNCING, pre_sync_status=SyncStatus.LOCAL)
        self.assertIn("Reverted 1", self.call("--recover"))
        payment.refresh_from_db()
        self.assertEqual(payment.sync_status, SyncStatus.ERROR)


class ConfiguredCommandTests(TestCase):
    def test_status_does_not_revert_uploads_in_flight(self):
        payment = make_payment(sync_status=SyncStatus.SYNCING, pre_sync_status=SyncStatus.LOCAL)
        call_command("sync_payments", "--status", stdout=StringIO())
        payment.refresh_from_db()
        self.assertEqual(payment.sync_status, SyncStatus.SYNCING)
