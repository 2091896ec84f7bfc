from django.test import SimpleTestCase

from pagos.exceptions import InvalidTransition
from pagos.models import Payment, SyncStatus
from pagos.sync import state_machine
from pagos.tests.helpers import T1


class StateMachineTests(SimpleTestCase):
    def test_dirty_statuses(self):
        self.assertTrue(state_machine.is_dirty(SyncStatus.LOCAL))
        self.assertTrue(state_machine.is_dirty(SyncStatus.MODIFIED))
        self.assertTrue(state_machine.is_dirty(SyncStatus.ERROR))
        self.assertFalse(state_machine.is_dirty(SyncStatus.SYNCED))
        self.assertFalse(state_machine.is_dirty(SyncStatus.SYNCING))

    def test_illegal_transitions_rejected(self):
        self.assertFalse(state_machine.can_transition(SyncStatus.LOCAL, SyncStatus.SYNCED))
        self.assertFalse(state_machine.can_transition(SyncStatus.SYNCED, SyncStatus.SYNCING))
        payment = Payment(sync_status=SyncStatus.SYNCED)
        with self.assertRaises(InvalidTransition):
            state_machine.begin_upload(payment)

    def test_upload_success_path(self):
        payment = Payment(sync_status=SyncStatus.MODIFIED)
        state_machine.begin_upload(payment)
        self.assertEqual(payment.sync_status, SyncStatus.SYNCING)
        self.assertEqual(payment.pre_sync_status, SyncStatus.MODIFIED)
        state_machine.complete_upload(payment, T1)
        self.assertEqual(payment.sync_status, SyncStatus.SYNCED)
        self.assertEqual(payment.last_synced_at, T1)
        self.assertEqual(payment.pre_sync_status, "")

    def test_upload_failure_path(self):
        payment = Payment(sync_status=SyncStatus.LOCAL)
        state_machine.begin_upload(payment)
        state_machine.fail_upload(payment)
        self.assertEqual(payment.sync_status, SyncStatus.ERROR)
        state_machine.begin_upload(payment)
        self.assertEqual(payment.pre_sync_status, SyncStatus.ERROR)

    def test_edit_of_synced_record(self):
        payment = Payment(sync_status=SyncStatus.SYNCED, last_synced_at=T1)
        state_machine.mark_edited(payment)
        self.assertEqual(payment.sync_status, SyncStatus.MODIFIED)
        self.assertIsNone(payment.last_synced_at)

    def test_edit_keeps_other_dirty_statuses(self):
        for status in (SyncStatus.LOCAL, SyncStatus.MODIFIED, SyncStatus.ERROR):
            payment = Payment(sync_status=status)
            state_machine.mark_edited(payment)
            self.assertEqual(payment.sync_status, status)

    def test_revert_interrupted(self):
        modified = Payment(sync_status=SyncStatus.SYNCING, pre_sync_status=SyncStatus.MODIFIED)
        state_machine.revert_interrupted(modified)
        self.assertEqual(modified.sync_status, SyncStatus.MODIFIED)

        # the remote may hold it already, so it must not look never-uploaded
        was_local = Payment(sync_status=SyncStatus.SYNCING, pre_sync_status=SyncStatus.LOCAL)
        state_machine.revert_interrupted(was_local)
        self.assertEqual(was_local.sync_status, SyncStatus.ERROR)

        unknown = Payment(sync_status=SyncStatus.SYNCING, pre_sync_status="")
        state_machine.revert_interrupted(unknown)
        self.assertEqual(unknown.sync_status, SyncStatus.ERROR)

    def test_apply_remote_refuses_local_edits(self):
        for status in (SyncStatus.LOCAL, SyncStatus.MODIFIED):
            with self.assertRaises(InvalidTransition):
                state_machine.apply_remote(Payment(sync_status=status), T1)
        payment = Payment(sync_status=SyncStatus.ERROR)
        state_machine.apply_remote(payment, T1)
        self.assertEqual(payment.sync_status, SyncStatus.SYNCED)
