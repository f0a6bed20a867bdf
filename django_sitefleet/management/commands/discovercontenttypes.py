"""
Discover Content Types From Templates

Scans a templates root and registers one content type per top-level folder
in a tenant store, refreshes the store's template rows and, unless told
otherwise, flags content types whose templates are gone as stale. Record
tables for newly registered types are created right away.

Usage:
    ```bash
    python manage.py discovercontenttypes shop1
    python manage.py discovercontenttypes shop1 --root ./themes/default --prune
    ```
"""

from django.core.management.base import BaseCommand, CommandError

from django_sitefleet.conf import settings
from django_sitefleet.content_types import content_type_units
from django_sitefleet.discovery.engine import ContentTypeDiscoveryEngine
from django_sitefleet.exceptions import MigrationError, StoreNotFound, TenantNotFound
from django_sitefleet.registry import TenantRegistry
from django_sitefleet.store import StoreHandle
from django_sitefleet.synchronizer import SchemaSynchronizer


class Command(BaseCommand):
    help = "Discover content types from template folders for one tenant."

    def add_arguments(self, parser):
        parser.add_argument("name", help="Tenant name")
        parser.add_argument(
            "--root",
            help="Templates root to scan (defaults to SITEFLEET['TEMPLATES_ROOT']).",
        )
        parser.add_argument(
            "--no-mark-stale",
            action="store_true",
            help="Do not flag content types that have no templates left.",
        )
        parser.add_argument(
            "--prune",
            action="store_true",
            help="Delete template rows whose file is gone and nothing references.",
        )

    def handle(self, *args, **options):
        root = options.get("root") or settings.TEMPLATES_ROOT
        if root is None:
            raise CommandError("No templates root configured; pass --root.")

        try:
            tenant = TenantRegistry().get(options["name"])
            with StoreHandle.open(tenant.store_name) as store:
                result = ContentTypeDiscoveryEngine(store).discover_from_root(
                    root,
                    mark_stale=not options["no_mark_stale"],
                    prune_templates=options["prune"],
                )
                SchemaSynchronizer().apply(store, content_type_units(store))
        except (TenantNotFound, StoreNotFound, MigrationError) as exc:
            raise CommandError(str(exc))

        for name in result.created:
            self.stdout.write(self.style.SUCCESS(f"Created content type {name}"))
        for name in result.updated:
            self.stdout.write(f"Updated content type {name}")
        for name in result.stale:
            self.stdout.write(self.style.WARNING(f"Stale content type {name}"))
        for filename, reason in result.skipped:
            self.stdout.write(self.style.ERROR(f"Skipped {filename}: {reason}"))
        for filename in result.templates_pruned:
            self.stdout.write(f"Pruned template {filename}")
        self.stdout.write(f"{result.templates_synced} template(s) synchronized.")
