from django.core.management.base import BaseCommand, CommandError

from django_sitefleet.fleet import FleetSyncDriver


class Command(BaseCommand):
    """
    Synchronize every active tenant store with the current migration catalog.

    One tenant failing is reported and does not stop the others. Failures are
    part of the report, not a failed command, unless ``--fail-on-error`` is
    given.
    """

    help = "Synchronize the schema of all active tenants."

    def add_arguments(self, parser):
        parser.add_argument(
            "--workers",
            type=int,
            help="Number of tenants synchronized concurrently.",
        )
        parser.add_argument(
            "--timeout",
            type=float,
            help="Seconds to wait for a single tenant before giving up on it.",
        )
        parser.add_argument(
            "--fail-on-error",
            action="store_true",
            help="Exit with an error if any tenant failed to synchronize.",
        )

    def handle(self, *args, **options):
        workers = options.get("workers")
        if workers is not None and workers < 1:
            raise CommandError("--workers must be at least 1.")

        driver = FleetSyncDriver(workers=workers, timeout=options.get("timeout"))
        result = driver.sync_all()

        for store_name in result.succeeded:
            self.stdout.write(self.style.SUCCESS(f"Synchronized {store_name}"))
        for store_name in result.cancelled:
            self.stdout.write(self.style.WARNING(f"Cancelled {store_name}"))
        for store_name, error in result.failed:
            self.stdout.write(self.style.ERROR(f"Failed {store_name}: {error}"))

        self.stdout.write(
            f"{len(result.succeeded)} succeeded, {len(result.failed)} failed, "
            f"{len(result.cancelled)} cancelled."
        )
        if result.failed and options["fail_on_error"]:
            raise CommandError(f"{len(result.failed)} tenant(s) failed to synchronize.")
