import threading
import time

from django.test import TransactionTestCase

from django_sitefleet.backends.database_backend import DatabaseStoreBackend
from django_sitefleet.exceptions import MigrationError, StoreNotFound, TenantSyncTimeout
from django_sitefleet.fleet import FleetSyncDriver
from django_sitefleet.models import Tenant
from django_sitefleet.provisioning import ProvisioningOrchestrator
from django_sitefleet.store import CONTROL_PLANE_STORE_NAME, StoreHandle
from django_sitefleet.synchronizer import SyncReport

from .base import BLOG_POST, SiteFleetTestMixin, StoreTestCase


class RecordingSynchronizer:
    def __init__(self, on_sync=None):
        self.synced = []
        self.on_sync = on_sync
        self.lock = threading.Lock()

    def sync(self, store, discover=None, **kwargs):
        with self.lock:
            self.synced.append(store.store_name)
        if self.on_sync is not None:
            self.on_sync(store)
        return SyncReport(store.store_name)


class FleetSyncDriverTests(StoreTestCase):
    def add_tenant(self, name, status=Tenant.Status.ACTIVE, create_store=True):
        tenant = Tenant.objects.create(name=name, status=status)
        if create_store:
            DatabaseStoreBackend(tenant.store_name).create()
        return tenant

    def open_store(self, store_name):
        store = StoreHandle.open(store_name)
        self.addCleanup(store.close)
        return store

    def test_one_failing_tenant_does_not_stop_the_others(self):
        orchestrator = ProvisioningOrchestrator()
        for name in ("shop1", "shop2", "shop3"):
            orchestrator.provision(name)
        # A store that is no longer a database at all.
        (self.store_root / "site_shop2.sqlite3").write_bytes(b"this is not sqlite" * 100)

        for workers in (1, 3):
            with self.subTest(workers=workers):
                result = FleetSyncDriver(workers=workers).sync_all()

                self.assertEqual(sorted(result.succeeded), ["site_shop1", "site_shop3"])
                self.assertEqual([name for name, _ in result.failed], ["site_shop2"])
                self.assertIsInstance(result.failed[0][1], MigrationError)
                self.assertEqual(result.cancelled, [])
                self.assertFalse(result.ok)

    def test_only_active_tenants_are_synced(self):
        self.add_tenant("shop1")
        self.add_tenant("shop2", status=Tenant.Status.FAILED)
        self.add_tenant("shop3", status=Tenant.Status.PENDING)
        synchronizer = RecordingSynchronizer()

        result = FleetSyncDriver(synchronizer=synchronizer).sync_all()

        self.assertEqual(result.succeeded, ["site_shop1"])
        self.assertEqual(synchronizer.synced, ["site_shop1"])

    def test_missing_store_is_a_failure(self):
        self.add_tenant("shop1")
        self.add_tenant("shop2", create_store=False)

        result = FleetSyncDriver(synchronizer=RecordingSynchronizer()).sync_all()

        self.assertEqual(result.succeeded, ["site_shop1"])
        self.assertEqual(result.failed[0][0], "site_shop2")
        self.assertIsInstance(result.failed[0][1], StoreNotFound)

    def test_control_plane_is_a_target_when_enabled(self):
        self.add_tenant("shop1")
        synchronizer = RecordingSynchronizer()

        driver = FleetSyncDriver(include_control_plane=True, synchronizer=synchronizer)

        self.assertEqual(driver.targets(), [CONTROL_PLANE_STORE_NAME, "site_shop1"])
        result = driver.sync_all()
        self.assertEqual(result.succeeded, [CONTROL_PLANE_STORE_NAME, "site_shop1"])

    def test_slow_tenant_times_out(self):
        self.add_tenant("shop1")
        synchronizer = RecordingSynchronizer(on_sync=lambda store: time.sleep(0.5))

        result = FleetSyncDriver(timeout=0.05, synchronizer=synchronizer).sync_all()

        self.assertEqual(result.succeeded, [])
        self.assertEqual(result.failed[0][0], "site_shop1")
        self.assertIsInstance(result.failed[0][1], TenantSyncTimeout)

    def test_timeout_counts_from_when_a_worker_starts_on_the_tenant(self):
        for name in ("aslow", "fast1", "fast2"):
            self.add_tenant(name)

        def slow_first(store):
            if store.store_name == "site_aslow":
                time.sleep(0.6)

        synchronizer = RecordingSynchronizer(on_sync=slow_first)

        result = FleetSyncDriver(workers=1, timeout=0.3, synchronizer=synchronizer).sync_all()

        self.assertEqual([name for name, _ in result.failed], ["site_aslow"])
        self.assertIsInstance(result.failed[0][1], TenantSyncTimeout)
        self.assertEqual(result.succeeded, ["site_fast1", "site_fast2"])
        self.assertEqual(synchronizer.synced, ["site_aslow", "site_fast1", "site_fast2"])

    def test_cancel_skips_tenants_not_started(self):
        for name in ("shop1", "shop2", "shop3"):
            self.add_tenant(name)
        driver = FleetSyncDriver(workers=1)
        driver.synchronizer = RecordingSynchronizer(on_sync=lambda store: driver.cancel())

        result = driver.sync_all()

        self.assertEqual(result.succeeded, ["site_shop1"])
        self.assertEqual(result.cancelled, ["site_shop2", "site_shop3"])
        self.assertEqual(result.failed, [])

    def test_discovery_runs_when_a_templates_root_is_configured(self):
        ProvisioningOrchestrator().provision("shop1")
        self.use_templates_root({"blog/post.njk": BLOG_POST})

        result = FleetSyncDriver().sync_all()

        self.assertEqual(result.succeeded, ["site_shop1"])
        self.assertIn("ct_blog", self.open_store("site_shop1").table_names())


class ControlPlaneSyncTests(SiteFleetTestMixin, TransactionTestCase):
    def test_control_plane_store_gets_the_canonical_schema(self):
        driver = FleetSyncDriver(include_control_plane=True)

        report = driver.sync_store(CONTROL_PLANE_STORE_NAME)

        self.assertFalse(report.failed)
        second = driver.sync_store(CONTROL_PLANE_STORE_NAME)
        self.assertEqual(second.applied_count, 0)
