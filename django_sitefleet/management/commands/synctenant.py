from django.core.management.base import BaseCommand, CommandError

from django_sitefleet.exceptions import MigrationError, StoreNotFound, TenantNotFound
from django_sitefleet.fleet import FleetSyncDriver
from django_sitefleet.registry import TenantRegistry
from django_sitefleet.store import CONTROL_PLANE_STORE_NAME


class Command(BaseCommand):
    help = "Synchronize the schema of a single tenant."

    def add_arguments(self, parser):
        parser.add_argument("name", nargs="?", help="Tenant name to synchronize")
        parser.add_argument(
            "--control-plane",
            action="store_true",
            help="Synchronize the control-plane store instead of a tenant.",
        )

    def handle(self, *args, **options):
        if options["control_plane"]:
            store_name = CONTROL_PLANE_STORE_NAME
        elif options.get("name"):
            try:
                store_name = TenantRegistry().get(options["name"]).store_name
            except TenantNotFound as exc:
                raise CommandError(str(exc))
        else:
            raise CommandError("Give a tenant name or --control-plane.")

        self.stdout.write(self.style.MIGRATE_HEADING(f"Synchronizing {store_name}"))
        try:
            report = FleetSyncDriver(workers=1).sync_store(store_name)
        except (MigrationError, StoreNotFound) as exc:
            raise CommandError(str(exc))

        if options["verbosity"] > 1:
            for outcome in report.outcomes:
                self.stdout.write(f"  {outcome.status:8} {outcome.name}")
        self.stdout.write(
            self.style.SUCCESS(
                f"{report.applied_count} unit(s) applied, "
                f"{report.skipped_count} already present."
            )
        )
