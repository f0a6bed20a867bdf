"""
Custom Exception Classes for django-sitefleet

This module defines the exceptions raised while provisioning tenant stores,
synchronizing their schema and discovering content types.

Exceptions in this module:
    - SiteFleetError: Base class for everything below
    - ProvisioningError: Base class for failures inside the provisioning state machine
    - DuplicateTenantError: The tenant name or its store is already taken
    - StoreCreationError: The physical store could not be created
    - SeedError: Baseline data could not be written
    - NamespaceError: The per-tenant upload namespace could not be created
    - ProvisioningFailedError: What ``provision()`` raises after rolling back
    - MigrationError: A migration unit failed for a reason other than "already applied"
    - RollbackError: Best-effort cleanup failed (diagnostic only)
    - TenantNotFound / StoreNotFound: Lookups that came back empty
    - TenantSyncTimeout: A tenant did not finish syncing in time
    - TemplateMetadataError: A template artifact carries unusable region metadata
    - ContentTypeProtectedError: An operator tried to change a system content type

Malformed tenant names raise ``django.core.exceptions.ValidationError`` from
:mod:`django_sitefleet.validators`.

Usage:
    from django_sitefleet.exceptions import DuplicateTenantError, ProvisioningFailedError

    try:
        orchestrator.provision("shop1")
    except DuplicateTenantError:
        ...
    except ProvisioningFailedError as exc:
        logger.error("Provisioning failed at %s: %s", exc.step, exc.original)
"""


class SiteFleetError(Exception):
    """Base class for all django-sitefleet errors."""


class ProvisioningError(SiteFleetError):
    """
    Base class for errors raised by one step of the provisioning state machine.

    Attributes:
        step (str | None): The provisioning step the error belongs to, when known.
    """

    step = None

    def __init__(self, message, step=None):
        super().__init__(message)
        if step is not None:
            self.step = step


class DuplicateTenantError(ProvisioningError):
    """
    Raised when a tenant name is already registered or its store already exists.

    Never retried automatically; the caller has to choose another name.
    """

    step = "reserve"


class StoreCreationError(ProvisioningError):
    step = "create_store"


class SeedError(ProvisioningError):
    step = "seed"


class NamespaceError(ProvisioningError):
    step = "namespace"


class ProvisioningFailedError(ProvisioningError):
    """
    Raised by ``ProvisioningOrchestrator.provision`` once a failed run was rolled back.

    The original error is kept on ``original`` (and chained as ``__cause__``);
    rollback problems are only attached as diagnostic context.

    Attributes:
        tenant_name (str): The tenant being provisioned
        step (str): The step that failed
        original (Exception): The error that made the step fail
        rollback_succeeded (bool): Whether every cleanup action worked
        rollback_errors (list[RollbackError]): Cleanup failures, if any
    """

    def __init__(self, tenant_name, step, original, rollback_errors=()):
        self.tenant_name = tenant_name
        self.original = original
        self.rollback_errors = list(rollback_errors)
        rollback = (
            "rollback succeeded"
            if self.rollback_succeeded
            else "rollback failed: "
            + "; ".join(str(error) for error in self.rollback_errors)
        )
        super().__init__(
            f"Provisioning tenant '{tenant_name}' failed at step '{step}': "
            f"{original} ({rollback})",
            step=step,
        )

    @property
    def rollback_succeeded(self) -> bool:
        return not self.rollback_errors


class MigrationError(SiteFleetError):
    """
    Raised when a migration unit fails with a cause other than "already applied".

    Stops the run for the store it happened on. During provisioning it fails the
    whole run; during a fleet sync it only marks that one tenant as failed.

    Attributes:
        unit_name (str): Name of the failing unit
        store_name (str): Store the unit was applied to
        report (SyncReport | None): Outcomes collected before the failure
    """

    def __init__(self, unit_name, store_name, cause, report=None):
        self.unit_name = unit_name
        self.store_name = store_name
        self.cause = cause
        self.report = report
        super().__init__(
            f"Migration unit '{unit_name}' failed on store '{store_name}': {cause}"
        )


class RollbackError(SiteFleetError):
    """
    Raised (and logged, never propagated on its own) when cleanup after a failed
    provisioning run could not complete, for example when the store could not
    be dropped.
    """


class TenantNotFound(SiteFleetError):
    """
    Exception raised when a tenant cannot be found in the registry.

    Examples:
        ```python
        from django_sitefleet.exceptions import TenantNotFound

        try:
            tenant = registry.get("shop1")
        except TenantNotFound:
            raise CommandError("Unknown tenant")
        ```
    """


class StoreNotFound(SiteFleetError):
    """Raised when a registered tenant's physical store does not exist."""


class TenantSyncTimeout(SiteFleetError):
    """Raised for a tenant whose synchronization exceeded the configured timeout."""


class TemplateMetadataError(SiteFleetError):
    """
    Raised for a template artifact whose metadata cannot be used: an invalid
    repeater field schema or a folder name that is not a valid content-type name.
    Discovery skips and reports the artifact instead of failing the run.
    """


class ContentTypeProtectedError(SiteFleetError):
    """Raised when an operator tries to edit or delete a system content type."""
