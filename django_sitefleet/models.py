"""Control-plane models for django_sitefleet.

Two tables live in the control-plane database and nowhere else:

- ``Tenant``: the authoritative registry row for one customer site. Its
    ``store_name`` is a deterministic function of ``name`` and identifies
    the tenant's physical store. ``status`` moves ``pending`` -> ``active``
    or ``pending`` -> ``failed``; rows are never deleted automatically.

- ``ProvisioningRecord``: one row per provisioning attempt, recording the
    step reached, the outcome and the error detail so a failed run can be
    diagnosed and retried.

Tenant stores never hold a foreign key to these tables.
"""

from django.db import models
from django.utils import timezone

from .utils import store_name_for
from .validators import MAX_TENANT_NAME_LENGTH, validate_tenant_name


class Tenant(models.Model):
    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        ACTIVE = "active", "Active"
        FAILED = "failed", "Failed"

    name = models.CharField(
        max_length=MAX_TENANT_NAME_LENGTH,
        unique=True,
        validators=[validate_tenant_name],
        help_text="Subdomain the site is served on.",
    )
    store_name = models.CharField(max_length=100, unique=True, editable=False)
    status = models.CharField(
        max_length=10, choices=Status.choices, default=Status.PENDING
    )
    admin_email = models.EmailField(blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "sitefleet_tenants"
        ordering = ["name"]

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.store_name:
            self.store_name = store_name_for(self.name)
        super().save(*args, **kwargs)

    @property
    def is_active(self) -> bool:
        return self.status == self.Status.ACTIVE


class ProvisioningRecord(models.Model):
    class Outcome(models.TextChoices):
        RUNNING = "running", "Running"
        SUCCEEDED = "succeeded", "Succeeded"
        FAILED = "failed", "Failed"

    tenant_name = models.CharField(max_length=MAX_TENANT_NAME_LENGTH, db_index=True)
    step = models.CharField(max_length=32)
    outcome = models.CharField(
        max_length=10, choices=Outcome.choices, default=Outcome.RUNNING
    )
    error = models.TextField(blank=True, default="")
    rollback_succeeded = models.BooleanField(null=True)
    started_at = models.DateTimeField(default=timezone.now)
    finished_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "sitefleet_provisioning_records"
        ordering = ["-started_at", "-id"]

    def __str__(self):
        return f"{self.tenant_name}: {self.step} ({self.outcome})"
