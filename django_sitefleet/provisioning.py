"""
ProvisioningOrchestrator: turns a tenant name into a live, seeded store.

Steps, in order:

    validate -> reserve -> create_store -> canonical_schema
        -> extension_tables -> seed -> namespace -> finalize

``validate`` and ``reserve`` create nothing. A failure in any later step rolls
the run back: the store created by this run is dropped, the upload namespace
is removed if this run created it, and the tenant row is marked ``failed``.
Cleanup is best effort; its problems are attached to the raised
``ProvisioningFailedError`` and never replace the original error.

Usage:
    ```python
    from django_sitefleet.provisioning import ProvisioningOrchestrator

    store_name = ProvisioningOrchestrator().provision("shop1")
    ```
"""

import logging
import shutil

from .cache import template_cache
from .conf import settings
from .content_types import content_type_units
from .discovery.engine import ContentTypeDiscoveryEngine
from .exceptions import (
    NamespaceError,
    ProvisioningError,
    ProvisioningFailedError,
    RollbackError,
    SeedError,
    SiteFleetError,
    StoreCreationError,
)
from .models import ProvisioningRecord
from .registry import TenantRegistry
from .schema.catalog import MigrationCatalog
from .seeding import BaselineSeeder
from .signals import tenant_provisioned, tenant_provisioning_failed
from .store import StoreHandle
from .synchronizer import SchemaSynchronizer
from .utils import get_store_backend, store_name_for
from .validators import validate_tenant_name

logger = logging.getLogger(__name__)

RESERVE = "reserve"
CREATE_STORE = "create_store"
CANONICAL_SCHEMA = "canonical_schema"
EXTENSION_TABLES = "extension_tables"
SEED = "seed"
NAMESPACE = "namespace"
FINALIZE = "finalize"

STEP_ERRORS = {
    CREATE_STORE: StoreCreationError,
    SEED: SeedError,
    NAMESPACE: NamespaceError,
}


class ProvisioningRun:
    """State of one ``provision()`` call, shared by its steps and the rollback."""

    def __init__(self, tenant, backend, record, admin_email=None, admin_password=None):
        self.tenant = tenant
        self.backend = backend
        self.record = record
        self.admin_email = admin_email
        self.admin_password = admin_password
        self.step = RESERVE
        self.store = None
        self.store_created = False
        self.namespace = None
        self.namespace_created = False

    @property
    def store_name(self):
        return self.backend.store_name

    def close_store(self):
        if self.store is not None:
            self.store.close()


class ProvisioningOrchestrator:
    steps = (
        (CREATE_STORE, "_create_store"),
        (CANONICAL_SCHEMA, "_apply_canonical_schema"),
        (EXTENSION_TABLES, "_apply_extension_tables"),
        (SEED, "_seed_baseline"),
        (NAMESPACE, "_provision_namespace"),
        (FINALIZE, "_finalize"),
    )

    def __init__(self, registry=None, synchronizer=None, catalog=None, seeder=None):
        self.registry = registry or TenantRegistry()
        self.synchronizer = synchronizer or SchemaSynchronizer()
        self.catalog = catalog or MigrationCatalog.default()
        self.seeder = seeder or BaselineSeeder()

    def provision(self, name, admin_email=None, admin_password=None) -> str:
        """
        Provision tenant ``name`` and return its store name.

        Raises:
            django.core.exceptions.ValidationError: malformed name
            DuplicateTenantError: the name or its store is already taken
            ProvisioningFailedError: a later step failed and the run was rolled back
        """
        validate_tenant_name(name)

        backend = get_store_backend(store_name_for(name))
        admin_email = admin_email or settings.DEFAULT_ADMIN_EMAIL
        tenant = self.registry.reserve(
            name, admin_email=admin_email, store_exists=backend.exists()
        )
        record = self.registry.start_record(name, RESERVE)
        run = ProvisioningRun(tenant, backend, record, admin_email, admin_password)
        logger.info("Provisioning tenant %s into %s", name, run.store_name)

        try:
            for step, method_name in self.steps:
                run.step = step
                self.registry.update_record(record, step=step)
                try:
                    getattr(self, method_name)(run)
                except SiteFleetError:
                    raise
                except Exception as exc:
                    error_class = STEP_ERRORS.get(step, ProvisioningError)
                    raise error_class(str(exc), step=step) from exc
        except Exception as exc:
            self._rollback(run, exc)
        finally:
            run.close_store()

        logger.info("Tenant %s is live on %s", name, run.store_name)
        return run.store_name

    def _create_store(self, run):
        run.backend.create()
        run.store_created = True
        run.store = StoreHandle.open(run.store_name)

    def _apply_canonical_schema(self, run):
        self.synchronizer.sync(run.store, catalog=self.catalog, include_auxiliary=False)

    def _apply_extension_tables(self, run):
        self.synchronizer.apply(run.store, self.catalog.auxiliary)

    def _seed_baseline(self, run):
        self.seeder.seed(
            run.store, admin_email=run.admin_email, admin_password=run.admin_password
        )
        if settings.TEMPLATES_ROOT is None:
            return

        ContentTypeDiscoveryEngine(run.store).discover_from_root(settings.TEMPLATES_ROOT)
        self.synchronizer.apply(run.store, content_type_units(run.store))
        self.seeder.seed_starter_pages(run.store)

    def _provision_namespace(self, run):
        run.namespace = settings.UPLOADS_ROOT / run.tenant.name
        try:
            run.namespace.mkdir(parents=True)
        except FileExistsError:
            if not run.namespace.is_dir():
                raise NamespaceError(f"{run.namespace} exists and is not a directory.")
            logger.info("Reusing existing upload namespace %s", run.namespace)
            return
        except OSError as exc:
            raise NamespaceError(
                f"Could not create upload namespace {run.namespace}: {exc}"
            ) from exc
        run.namespace_created = True

    def _finalize(self, run):
        self.registry.mark_active(run.tenant)
        template_cache.invalidate(run.store_name)
        self.registry.update_record(
            run.record, outcome=ProvisioningRecord.Outcome.SUCCEEDED
        )
        tenant_provisioned.send(
            sender=self.__class__, tenant=run.tenant, store_name=run.store_name
        )

    def _rollback(self, run, original):
        logger.error(
            "Provisioning tenant %s failed at %s: %s", run.tenant.name, run.step, original
        )
        rollback_errors = []

        def attempt(description, action):
            try:
                action()
            except Exception as exc:
                error = RollbackError(f"Could not {description}: {exc}")
                error.__cause__ = exc
                logger.error("Rollback of tenant %s: %s", run.tenant.name, error)
                rollback_errors.append(error)

        attempt("close store connection", run.close_store)
        if run.store_created:
            attempt(f"drop store {run.store_name}", run.backend.drop)
        if run.namespace_created:
            attempt(
                f"remove upload namespace {run.namespace}",
                lambda: shutil.rmtree(run.namespace),
            )
        attempt("mark tenant failed", lambda: self.registry.mark_failed(run.tenant))

        error = ProvisioningFailedError(
            run.tenant.name, run.step, original, rollback_errors=rollback_errors
        )
        attempt(
            "record the failed run",
            lambda: self.registry.update_record(
                run.record,
                outcome=ProvisioningRecord.Outcome.FAILED,
                error=str(original),
                rollback_succeeded=not rollback_errors,
            ),
        )
        tenant_provisioning_failed.send(
            sender=self.__class__,
            tenant_name=run.tenant.name,
            step=run.step,
            error=error,
        )
        raise error from original
