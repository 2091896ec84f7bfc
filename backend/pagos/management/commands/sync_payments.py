import json

from django.core.management.base import BaseCommand, CommandError
from django.core.serializers.json import DjangoJSONEncoder

from pagos.exceptions import ConfirmationRequired, SyncError
from pagos.sync.factory import build_orchestrator


class Command(BaseCommand):
    help = "Synchronize local payments with the remote store."

    def add_arguments(self, parser):
        group = parser.add_mutually_exclusive_group()
        group.add_argument("--status", action="store_true", help="Print sync status as JSON and exit.")
        group.add_argument(
            "--initial", action="store_true", help="Sync only if the local store is empty."
        )
        group.add_argument(
            "--recover",
            action="store_true",
            help="Revert payments left mid-upload by a crash. Run only while the web server is stopped.",
        )
        group.add_argument("--clear", action="store_true", help="Delete every local payment.")
        group.add_argument(
            "--rebuild",
            action="store_true",
            help="Replace the local store with the remote set, discarding local changes.",
        )
        parser.add_argument(
            "--force", action="store_true", help="With --clear, discard unsynchronized changes too."
        )
        parser.add_argument("--yes", action="store_true", help="Confirm --rebuild.")

    def handle(self, *args, **options):
        orchestrator = build_orchestrator()

        if options["status"]:
            self.stdout.write(json.dumps(orchestrator.status(), cls=DjangoJSONEncoder, indent=2))
            return

        if options["recover"]:
            reverted = orchestrator.recover_interrupted_uploads()
            self.stdout.write(self.style.SUCCESS(f"Reverted {reverted} interrupted payments."))
            return

        if options["clear"]:
            if not orchestrator.clear_local_store(force=options["force"]):
                raise CommandError("Local store not cleared: unsynchronized changes exist (use --force).")
            self.stdout.write(self.style.SUCCESS("Local payment store cleared."))
            return

        try:
            if options["rebuild"]:
                result = orchestrator.rebuild_from_remote(confirmed=options["yes"])
                self.stdout.write(self.style.SUCCESS(f"Rebuilt local store: {result.inserted} payments."))
                return
            if options["initial"]:
                result = orchestrator.perform_initial_sync_if_needed()
                if result is None:
                    self.stdout.write("Initial sync not performed.")
                    return
            else:
                result = orchestrator.perform_sync()
        except ConfirmationRequired as exc:
            raise CommandError(f"{exc} Pass --yes.") from exc
        except SyncError as exc:
            raise CommandError(f"{exc.error_code}: {exc}") from exc

        if result is None:
            self.stdout.write(self.style.WARNING("Sync already in progress."))
            return
        summary = ", ".join(f"{key}={value}" for key, value in result.as_dict().items())
        self.stdout.write(self.style.SUCCESS(f"Sync completed: {summary}"))
