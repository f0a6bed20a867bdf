"""
Django Signals for Tenant Store Events

This module defines the signals emitted at key points of a tenant store's life:
store creation and removal, provisioning success or failure, schema
synchronization, and content-type discovery.

Signal Documentation:
    - store_created: Emitted after an empty physical store is created
    - store_dropped: Emitted after a physical store is destroyed
    - tenant_provisioned: Emitted once a tenant reaches ``active``
    - tenant_provisioning_failed: Emitted after a failed provisioning run was rolled back
    - tenant_synced: Emitted after a store finished a schema synchronization
    - content_types_discovered: Emitted after discovery committed its rows

Usage:
    ```python
    from django.dispatch import receiver
    from django_sitefleet.signals import tenant_provisioned

    @receiver(tenant_provisioned)
    def announce_new_site(sender, tenant, **kwargs):
        notify_team(f"Site {tenant.name} is live")
    ```

Related:
    - Django Signals: https://docs.djangoproject.com/en/stable/topics/signals/
    - ProvisioningOrchestrator and FleetSyncDriver: the senders of most signals
"""

from django.dispatch import Signal


# Store Lifecycle Signals
# =======================

store_created = Signal()
"""
Signal emitted after a physical tenant store is created.

Sender: The store backend class
Providing Arguments:
    - store_name (str): Identifier of the new store

Timing: Sent right after the empty store exists, before any schema is applied.
"""


store_dropped = Signal()
"""
Signal emitted after a physical tenant store is destroyed.

Sender: The store backend class
Providing Arguments:
    - store_name (str): Identifier of the dropped store

Note:
    During provisioning this only happens as part of a rollback.
"""


# Tenant Lifecycle Signals
# ========================

tenant_provisioned = Signal()
"""
Signal emitted after a tenant was provisioned and marked ``active``.

Sender: ProvisioningOrchestrator
Providing Arguments:
    - tenant (Tenant): The now active tenant
    - store_name (str): Identifier of its store

Use Cases:
    - Send welcome emails to the site owner
    - Register the subdomain with a DNS or CDN provider
"""


tenant_provisioning_failed = Signal()
"""
Signal emitted after a provisioning run failed and its rollback finished.

Sender: ProvisioningOrchestrator
Providing Arguments:
    - tenant_name (str): The tenant that could not be provisioned
    - step (str): The step that failed
    - error (ProvisioningFailedError): The error about to be raised to the caller

Warning:
    Handlers run before the error reaches the caller; an exception raised by a
    handler replaces the provisioning error.
"""


tenant_synced = Signal()
"""
Signal emitted after a store completed a schema synchronization.

Sender: SchemaSynchronizer
Providing Arguments:
    - store_name (str): The synchronized store
    - report (SyncReport): Per-unit outcomes of the run

Note:
    Fleet synchronization sends this from worker threads.
"""


content_types_discovered = Signal()
"""
Signal emitted after discovery committed content-type and template rows.

Sender: ContentTypeDiscoveryEngine
Providing Arguments:
    - store_name (str): The store discovery ran against
    - result (DiscoveryResult): Created, updated, stale and skipped entries
"""
