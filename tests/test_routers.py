from django.contrib.auth.models import User
from django.test import SimpleTestCase, override_settings

from django_sitefleet.models import Tenant
from django_sitefleet.routers import ControlPlaneRouter


class ControlPlaneRouterTests(SimpleTestCase):
    def setUp(self):
        self.router = ControlPlaneRouter()

    def test_registry_models_use_the_control_plane(self):
        self.assertEqual(self.router.db_for_read(Tenant), "default")
        self.assertEqual(self.router.db_for_write(Tenant), "default")
        self.assertIsNone(self.router.db_for_read(User))

    @override_settings(SITEFLEET={"CONTROL_PLANE_DB_ALIAS": "registry"})
    def test_control_plane_alias_is_configurable(self):
        self.assertEqual(self.router.db_for_write(Tenant), "registry")
        self.assertFalse(self.router.allow_migrate("default", "django_sitefleet"))
        self.assertTrue(self.router.allow_migrate("registry", "django_sitefleet"))

    def test_migrations_are_refused_on_store_aliases(self):
        alias = "sitefleet_store__site_shop1"
        self.assertFalse(self.router.allow_migrate(alias, "auth"))
        self.assertFalse(self.router.allow_migrate(alias, "django_sitefleet"))
        self.assertIsNone(self.router.allow_migrate("default", "auth"))
