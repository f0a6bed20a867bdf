from django.core.management.base import BaseCommand

from django_sitefleet.models import Tenant
from django_sitefleet.registry import TenantRegistry


class Command(BaseCommand):
    help = "List registered tenants and their status."

    STATUS_STYLES = {
        Tenant.Status.ACTIVE: "SUCCESS",
        Tenant.Status.PENDING: "WARNING",
        Tenant.Status.FAILED: "ERROR",
    }

    def add_arguments(self, parser):
        parser.add_argument(
            "--status",
            choices=Tenant.Status.values,
            help="Only show tenants with this status.",
        )

    def handle(self, *args, **options):
        tenants = TenantRegistry().list(status=options.get("status"))
        if not tenants:
            self.stdout.write("No tenants.")
            return

        for tenant in tenants:
            style = getattr(self.style, self.STATUS_STYLES[tenant.status])
            self.stdout.write(
                f"{tenant.name:30} {tenant.store_name:35} {style(tenant.status)}"
            )
