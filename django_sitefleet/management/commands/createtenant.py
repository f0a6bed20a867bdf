"""
Create and Provision a Tenant

Django management command that provisions a new tenant site end to end.

Purpose:
    Wraps ``ProvisioningOrchestrator.provision`` for operators: the name is
    validated and reserved, a fresh store is created, the canonical schema and
    extension tables are applied, baseline data is seeded and the upload
    namespace is created. On any failure the run is rolled back and the tenant
    is left ``failed``.

Usage:
    ```bash
    # Provision with the default admin account
    python manage.py createtenant shop1

    # Provision with an explicit admin account
    python manage.py createtenant shop1 --admin-email owner@shop1.test --admin-password s3cret
    ```

Error Handling:
    - Malformed names and names already taken exit with ``CommandError``
    - A failed provisioning run reports the failed step and whether rollback
      succeeded, then exits with ``CommandError``

Related:
    - synctenant: Bring one existing tenant up to date
    - showtenants: List tenants and their status
"""

from django.core.exceptions import ValidationError
from django.core.management.base import BaseCommand, CommandError

from django_sitefleet.exceptions import DuplicateTenantError, ProvisioningFailedError
from django_sitefleet.provisioning import ProvisioningOrchestrator


class Command(BaseCommand):
    help = "Provision a new tenant site with its own store."

    def add_arguments(self, parser):
        parser.add_argument("name", help="Tenant name (subdomain), e.g. shop1")
        parser.add_argument(
            "--admin-email",
            help="Email of the store's first admin user.",
        )
        parser.add_argument(
            "--admin-password",
            help="Password of the store's first admin user.",
        )

    def handle(self, *args, **options):
        name = options["name"]
        self.stdout.write(self.style.MIGRATE_HEADING(f"Provisioning tenant: {name}"))

        try:
            store_name = ProvisioningOrchestrator().provision(
                name,
                admin_email=options.get("admin_email"),
                admin_password=options.get("admin_password"),
            )
        except ValidationError as exc:
            raise CommandError("; ".join(exc.messages))
        except DuplicateTenantError as exc:
            raise CommandError(str(exc))
        except ProvisioningFailedError as exc:
            if not exc.rollback_succeeded:
                for error in exc.rollback_errors:
                    self.stderr.write(self.style.WARNING(f"Rollback: {error}"))
            raise CommandError(
                f"Provisioning failed at step '{exc.step}': {exc.original}"
            )

        self.stdout.write(
            self.style.SUCCESS(f"Tenant '{name}' is live on store '{store_name}'.")
        )
