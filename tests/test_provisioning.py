from unittest import mock

from django.contrib.auth.hashers import check_password
from django.core.exceptions import ValidationError

from django_sitefleet.backends.database_backend import DatabaseStoreBackend
from django_sitefleet.exceptions import (
    DuplicateTenantError,
    MigrationError,
    ProvisioningError,
    ProvisioningFailedError,
    SeedError,
    StoreCreationError,
)
from django_sitefleet.models import ProvisioningRecord, Tenant
from django_sitefleet.provisioning import ProvisioningOrchestrator
from django_sitefleet.schema.canonical import (
    ContentTypeDefinition,
    Page,
    SiteSetting,
    StoreUser,
)
from django_sitefleet.schema.catalog import CreateTable, MigrationCatalog, RunSQL
from django_sitefleet.schema.canonical import MigrationLedgerEntry
from django_sitefleet.signals import tenant_provisioned, tenant_provisioning_failed
from django_sitefleet.store import StoreHandle

from .base import BLOG_POST, HOMEPAGE, LAYOUT, STANDARD, StoreTestCase


def failing_after(method_name):
    """Patch a provisioning step so it does its work and then fails."""
    original = getattr(ProvisioningOrchestrator, method_name)

    def step(self, run):
        original(self, run)
        raise RuntimeError(f"{method_name} exploded")

    return mock.patch.object(ProvisioningOrchestrator, method_name, step)


class ProvisioningTestCase(StoreTestCase):
    def setUp(self):
        super().setUp()
        self.orchestrator = ProvisioningOrchestrator()

    def open_store(self, store_name="site_shop1"):
        store = StoreHandle.open(store_name)
        self.addCleanup(store.close)
        return store

    def store_exists(self, store_name="site_shop1"):
        return DatabaseStoreBackend(store_name).exists()


class ProvisionTests(ProvisioningTestCase):
    def test_shop1_baseline(self):
        store_name = self.orchestrator.provision("shop1")

        self.assertEqual(store_name, "site_shop1")
        tenant = Tenant.objects.get(name="shop1")
        self.assertEqual(tenant.status, Tenant.Status.ACTIVE)
        self.assertEqual(tenant.store_name, "site_shop1")

        store = self.open_store()
        theme = store.manager(SiteSetting).get(setting_key="active_theme")
        self.assertEqual(theme.setting_value, "default")

        admin = store.manager(StoreUser).get()
        self.assertEqual(admin.email, "admin@example.com")
        self.assertEqual(admin.role, "admin")
        self.assertNotEqual(admin.password, "admin123")
        self.assertTrue(check_password("admin123", admin.password))

        self.assertIn("imported_sites", store.table_names())
        self.assertTrue((self.uploads_root / "shop1").is_dir())

        record = ProvisioningRecord.objects.get(tenant_name="shop1")
        self.assertEqual(record.outcome, ProvisioningRecord.Outcome.SUCCEEDED)
        self.assertEqual(record.step, "finalize")
        self.assertIsNotNone(record.finished_at)

    def test_custom_admin_credentials(self):
        self.orchestrator.provision(
            "shop2", admin_email="owner@shop2.test", admin_password="s3cret-pass"
        )

        admin = self.open_store("site_shop2").manager(StoreUser).get()
        self.assertEqual(admin.email, "owner@shop2.test")
        self.assertTrue(check_password("s3cret-pass", admin.password))
        self.assertEqual(Tenant.objects.get(name="shop2").admin_email, "owner@shop2.test")

    def test_hyphenated_name(self):
        self.assertEqual(self.orchestrator.provision("my-shop"), "site_my_shop")
        self.assertTrue(self.store_exists("site_my_shop"))

    def test_sends_tenant_provisioned(self):
        received = []
        tenant_provisioned.connect(
            lambda sender, tenant, store_name, **kw: received.append((tenant.name, store_name)),
            weak=False,
            dispatch_uid="test-provisioned",
        )
        self.addCleanup(tenant_provisioned.disconnect, dispatch_uid="test-provisioned")

        self.orchestrator.provision("shop1")

        self.assertEqual(received, [("shop1", "site_shop1")])

    def test_templates_root_registers_content_types_and_starter_pages(self):
        self.use_templates_root(
            {
                "pages/homepage.njk": HOMEPAGE,
                "pages/standard.njk": STANDARD,
                "blog/post.njk": BLOG_POST,
                "layouts/base.njk": LAYOUT,
            }
        )

        self.orchestrator.provision("shop1")

        store = self.open_store()
        self.assertTrue(store.manager(ContentTypeDefinition).filter(name="blog").exists())
        self.assertIn("ct_blog", store.table_names())

        pages = store.manager(Page)
        self.assertEqual(sorted(pages.values_list("slug", flat=True)), ["about", "home"])
        home = pages.get(slug="home")
        self.assertEqual(home.status, "published")
        home_setting = store.manager(SiteSetting).get(setting_key="home_page_id")
        self.assertEqual(home_setting.setting_value, str(home.pk))


class DuplicateAndInvalidTests(ProvisioningTestCase):
    def test_duplicate_name(self):
        self.orchestrator.provision("shop1")

        with self.assertRaises(DuplicateTenantError):
            self.orchestrator.provision("shop1")

        self.assertEqual(Tenant.objects.filter(name="shop1").count(), 1)
        self.assertEqual(Tenant.objects.get(name="shop1").status, Tenant.Status.ACTIVE)
        self.assertTrue(self.store_exists())

    def test_pending_tenant_blocks_a_second_run(self):
        Tenant.objects.create(name="shop1", status=Tenant.Status.PENDING)

        with self.assertRaises(DuplicateTenantError):
            self.orchestrator.provision("shop1")
        self.assertFalse(self.store_exists())

    def test_existing_store_without_registry_row(self):
        DatabaseStoreBackend("site_shop1").create()

        with self.assertRaises(DuplicateTenantError):
            self.orchestrator.provision("shop1")
        self.assertFalse(Tenant.objects.filter(name="shop1").exists())

    def test_invalid_names_create_nothing(self):
        for name in ("Shop1", "-shop", "shop_1", "a" * 59, ""):
            with self.subTest(name=name):
                with self.assertRaises(ValidationError):
                    self.orchestrator.provision(name)

        self.assertFalse(Tenant.objects.exists())
        self.assertFalse(ProvisioningRecord.objects.exists())
        self.assertFalse(self.store_root.exists())


class RollbackTests(ProvisioningTestCase):
    def assertRolledBack(self, error, step):
        self.assertEqual(error.step, step)
        self.assertTrue(error.rollback_succeeded)
        self.assertIs(error.__cause__, error.original)

        tenant = Tenant.objects.get(name="shop1")
        self.assertEqual(tenant.status, Tenant.Status.FAILED)
        self.assertFalse(self.store_exists())
        self.assertFalse((self.uploads_root / "shop1").exists())

        record = ProvisioningRecord.objects.get(tenant_name="shop1")
        self.assertEqual(record.outcome, ProvisioningRecord.Outcome.FAILED)
        self.assertEqual(record.step, step)
        self.assertTrue(record.rollback_succeeded)
        self.assertIn("exploded", record.error)

    def test_failure_at_every_step_is_rolled_back(self):
        for step, method_name in ProvisioningOrchestrator.steps:
            with self.subTest(step=step):
                with failing_after(method_name):
                    with self.assertRaises(ProvisioningFailedError) as ctx:
                        self.orchestrator.provision("shop1")

                self.assertRolledBack(ctx.exception, step)
                self.assertFalse(Tenant.objects.filter(status=Tenant.Status.ACTIVE).exists())
                Tenant.objects.all().delete()
                ProvisioningRecord.objects.all().delete()

    def test_step_errors_keep_their_type(self):
        cases = (
            ("_create_store", StoreCreationError),
            ("_seed_baseline", SeedError),
            ("_apply_canonical_schema", ProvisioningError),
        )
        for method_name, error_class in cases:
            with self.subTest(method=method_name):
                with failing_after(method_name):
                    with self.assertRaises(ProvisioningFailedError) as ctx:
                        self.orchestrator.provision("shop1")
                original = ctx.exception.original
                self.assertIsInstance(original, error_class)
                self.assertIsInstance(original.__cause__, RuntimeError)
                Tenant.objects.all().delete()

    def test_migration_failure_is_the_original_error(self):
        catalog = MigrationCatalog(
            canonical=[
                CreateTable(MigrationLedgerEntry),
                RunSQL("broken", ["UPDATE no_such_table SET x = 1"]),
            ]
        )
        orchestrator = ProvisioningOrchestrator(catalog=catalog)

        with self.assertRaises(ProvisioningFailedError) as ctx:
            orchestrator.provision("shop1")

        self.assertEqual(ctx.exception.step, "canonical_schema")
        self.assertIsInstance(ctx.exception.original, MigrationError)
        self.assertEqual(ctx.exception.original.unit_name, "broken")
        self.assertFalse(self.store_exists())

    def test_rollback_problems_do_not_replace_the_original_error(self):
        with failing_after("_seed_baseline"), mock.patch.object(
            DatabaseStoreBackend, "drop", side_effect=OSError("device busy")
        ):
            with self.assertRaises(ProvisioningFailedError) as ctx:
                self.orchestrator.provision("shop1")

        error = ctx.exception
        self.assertEqual(error.step, "seed")
        self.assertIn("exploded", str(error.original))
        self.assertFalse(error.rollback_succeeded)
        self.assertEqual(len(error.rollback_errors), 1)
        self.assertIn("device busy", str(error.rollback_errors[0]))
        self.assertEqual(Tenant.objects.get(name="shop1").status, Tenant.Status.FAILED)
        self.assertFalse(ProvisioningRecord.objects.get(tenant_name="shop1").rollback_succeeded)

    def test_existing_namespace_is_left_alone(self):
        namespace = self.uploads_root / "shop1"
        namespace.mkdir(parents=True)
        (namespace / "logo.png").write_bytes(b"png")

        with failing_after("_provision_namespace"):
            with self.assertRaises(ProvisioningFailedError):
                self.orchestrator.provision("shop1")

        self.assertTrue((namespace / "logo.png").exists())

    def test_sends_tenant_provisioning_failed(self):
        received = []
        tenant_provisioning_failed.connect(
            lambda sender, tenant_name, step, error, **kw: received.append((tenant_name, step)),
            weak=False,
            dispatch_uid="test-provisioning-failed",
        )
        self.addCleanup(
            tenant_provisioning_failed.disconnect, dispatch_uid="test-provisioning-failed"
        )

        with failing_after("_finalize"):
            with self.assertRaises(ProvisioningFailedError):
                self.orchestrator.provision("shop1")

        self.assertEqual(received, [("shop1", "finalize")])

    def test_failed_tenant_can_be_retried(self):
        with failing_after("_seed_baseline"):
            with self.assertRaises(ProvisioningFailedError):
                self.orchestrator.provision("shop1")

        self.assertEqual(self.orchestrator.provision("shop1"), "site_shop1")

        self.assertEqual(Tenant.objects.get(name="shop1").status, Tenant.Status.ACTIVE)
        self.assertEqual(ProvisioningRecord.objects.filter(tenant_name="shop1").count(), 2)
