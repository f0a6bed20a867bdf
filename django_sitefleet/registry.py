import logging

from django.db import IntegrityError, transaction
from django.utils import timezone

from .conf import settings
from .exceptions import DuplicateTenantError, TenantNotFound
from .models import ProvisioningRecord, Tenant
from .utils import store_name_for

logger = logging.getLogger(__name__)


class TenantRegistry:
    """
    The authoritative catalog of tenants, kept in the control-plane database.

    Status transitions are the only mutation of a tenant row; nothing here
    deletes one.
    """

    def __init__(self, using=None):
        self.using = using or settings.CONTROL_PLANE_DB_ALIAS

    @property
    def tenants(self):
        return Tenant.objects.using(self.using)

    @property
    def records(self):
        return ProvisioningRecord.objects.using(self.using)

    def get(self, name) -> Tenant:
        try:
            return self.tenants.get(name=name)
        except Tenant.DoesNotExist:
            raise TenantNotFound(f"Tenant '{name}' is not registered.")

    def exists(self, name) -> bool:
        return self.tenants.filter(name=name).exists()

    def list(self, status=None):
        queryset = self.tenants.all()
        if status is not None:
            queryset = queryset.filter(status=status)
        return list(queryset)

    def active_tenants(self):
        return self.list(status=Tenant.Status.ACTIVE)

    def reserve(self, name, admin_email="", store_exists=False) -> Tenant:
        """
        Claim ``name`` with a ``pending`` row.

        A ``failed`` tenant whose store is gone is taken back to ``pending``
        so provisioning can be retried. Anything else already holding the
        name or the store raises ``DuplicateTenantError``.
        """
        with transaction.atomic(using=self.using):
            tenant = self.tenants.select_for_update().filter(name=name).first()
            if tenant is not None:
                if tenant.status != Tenant.Status.FAILED or store_exists:
                    raise DuplicateTenantError(
                        f"Tenant '{name}' already exists ({tenant.status})."
                    )
                tenant.status = Tenant.Status.PENDING
                tenant.admin_email = admin_email
                tenant.save(update_fields=["status", "admin_email", "updated_at"])
                logger.info("Retrying provisioning of failed tenant %s", name)
                return tenant

            if store_exists:
                raise DuplicateTenantError(
                    f"Store '{store_name_for(name)}' for tenant '{name}' already exists."
                )

            try:
                with transaction.atomic(using=self.using):
                    return self.tenants.create(
                        name=name,
                        store_name=store_name_for(name),
                        status=Tenant.Status.PENDING,
                        admin_email=admin_email,
                    )
            except IntegrityError as exc:
                raise DuplicateTenantError(f"Tenant '{name}' already exists.") from exc

    def mark_active(self, tenant):
        self._set_status(tenant, Tenant.Status.ACTIVE)

    def mark_failed(self, tenant):
        self._set_status(tenant, Tenant.Status.FAILED)

    def _set_status(self, tenant, status):
        tenant.status = status
        tenant.save(using=self.using, update_fields=["status", "updated_at"])
        logger.info("Tenant %s is now %s", tenant.name, status)

    def start_record(self, tenant_name, step) -> ProvisioningRecord:
        return self.records.create(tenant_name=tenant_name, step=step)

    def update_record(self, record, **changes):
        finished = changes.get("outcome") in (
            ProvisioningRecord.Outcome.SUCCEEDED,
            ProvisioningRecord.Outcome.FAILED,
        )
        if finished:
            changes["finished_at"] = timezone.now()
        for field_name, value in changes.items():
            setattr(record, field_name, value)
        record.save(using=self.using, update_fields=list(changes))
