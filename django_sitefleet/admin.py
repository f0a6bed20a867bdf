"""Admin views over the control-plane registry.

Tenant rows change state only through the provisioning orchestrator, so the
admin is a read-only window onto them: operators can see which tenants exist,
which store each one lives in and how every provisioning attempt ended.
Creating a tenant is done with ``manage.py createtenant``.
"""

from django.contrib import admin

from .models import ProvisioningRecord, Tenant


class ReadOnlyAdminMixin:
    """Hide add, change and delete actions; keep list and detail views."""

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Tenant)
class TenantAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ("name", "store_name", "status", "admin_email", "created_at")
    list_filter = ("status",)
    search_fields = ("name", "store_name", "admin_email")


@admin.register(ProvisioningRecord)
class ProvisioningRecordAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = (
        "tenant_name",
        "step",
        "outcome",
        "rollback_succeeded",
        "started_at",
        "finished_at",
    )
    list_filter = ("outcome", "step")
    search_fields = ("tenant_name", "error")
