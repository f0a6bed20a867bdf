from django.core.exceptions import ValidationError
from django.test import SimpleTestCase, override_settings

from django_sitefleet.utils import store_name_for
from django_sitefleet.validators import (
    MAX_STORE_NAME_LENGTH,
    is_valid_content_type_name,
    is_valid_tenant_name,
    validate_tenant_name,
)


class TenantNameTests(SimpleTestCase):
    def test_accepts_subdomain_names(self):
        for name in ("shop1", "a", "my-shop", "0day", "a" * 58):
            with self.subTest(name=name):
                self.assertTrue(is_valid_tenant_name(name))
                validate_tenant_name(name)

    def test_rejects_malformed_names(self):
        for name in ("", "-shop", "shop-", "Shop", "my_shop", "shop.one", "a" * 59, None):
            with self.subTest(name=name):
                self.assertFalse(is_valid_tenant_name(name))
                with self.assertRaises(ValidationError) as ctx:
                    validate_tenant_name(name)
                self.assertEqual(ctx.exception.code, "invalid_tenant_name")

    def test_store_name_fits_a_database_identifier(self):
        longest = "a" * 58
        self.assertEqual(len(store_name_for(longest)), MAX_STORE_NAME_LENGTH)

    @override_settings(SITEFLEET={"STORE_PREFIX": "tenant_store_"})
    def test_limit_follows_the_store_prefix(self):
        self.assertTrue(is_valid_tenant_name("a" * 50))
        self.assertFalse(is_valid_tenant_name("a" * 51))

    @override_settings(SITEFLEET={"STORE_PREFIX": ""})
    def test_limit_without_a_prefix(self):
        self.assertTrue(is_valid_tenant_name("a" * 63))
        self.assertFalse(is_valid_tenant_name("a" * 64))


class ContentTypeNameTests(SimpleTestCase):
    def test_folder_names(self):
        self.assertTrue(is_valid_content_type_name("blog"))
        self.assertTrue(is_valid_content_type_name("case-studies"))
        self.assertTrue(is_valid_content_type_name("team_members"))
        self.assertFalse(is_valid_content_type_name("Blog"))
        self.assertFalse(is_valid_content_type_name("2024"))
        self.assertFalse(is_valid_content_type_name("my blog"))
        self.assertFalse(is_valid_content_type_name(""))
