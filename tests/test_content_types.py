from django.test import SimpleTestCase

from django_sitefleet.content_types import (
    ContentTypeRepository,
    build_record_model,
    derive_defaults,
    record_table_name,
    record_units,
)
from django_sitefleet.exceptions import ContentTypeProtectedError
from django_sitefleet.schema.canonical import ContentTypeDefinition

from .base import StoreTestCase


class DerivedDefaultsTests(SimpleTestCase):
    def test_labels(self):
        cases = {
            "blog": ("Blog", "Blogs"),
            "products": ("Product", "Products"),
            "case-studies": ("Case Study", "Case Studies"),
            "team_members": ("Team Member", "Team Members"),
            "class": ("Class", "Classes"),
            "news": ("News", "News"),
            "latest-news": ("Latest News", "Latest News"),
            "series": ("Series", "Series"),
            "status": ("Status", "Statuses"),
            "menus": ("Menu", "Menus"),
        }
        for name, (label, plural_label) in cases.items():
            with self.subTest(name=name):
                defaults = derive_defaults(name)
                self.assertEqual(defaults["label"], label)
                self.assertEqual(defaults["plural_label"], plural_label)

    def test_capabilities(self):
        defaults = derive_defaults("blog")
        self.assertEqual(defaults["icon"], "FileText")
        self.assertEqual(defaults["color"], "gray")
        self.assertEqual(defaults["menu_order"], 999)
        self.assertTrue(defaults["has_status"])
        self.assertFalse(defaults["has_seo"])
        self.assertFalse(defaults["is_system"])


class RecordModelTests(SimpleTestCase):
    def test_record_table_follows_the_capability_flags(self):
        definition = ContentTypeDefinition(name="case-studies", has_status=False, has_seo=True)

        model = build_record_model(definition)
        columns = {field.column for field in model._meta.fields}

        self.assertEqual(record_table_name("case-studies"), "ct_case_studies")
        self.assertEqual(model._meta.db_table, "ct_case_studies")
        self.assertIn("meta_title", columns)
        self.assertNotIn("status", columns)
        self.assertEqual(
            [unit.name for unit in record_units(definition)],
            [
                "content_type.case-studies.create_table",
                "content_type.case-studies.add_meta_title",
                "content_type.case-studies.add_meta_description",
            ],
        )


class ContentTypeRepositoryTests(StoreTestCase):
    def setUp(self):
        super().setUp()
        self.store = self.create_synced_store("site_shop1")
        self.repository = ContentTypeRepository(self.store)
        self.repository.create("blog", **derive_defaults("blog"))

    def test_edit_records_edited_fields(self):
        definition = self.repository.edit("blog", label="Journal", icon="Book")

        self.assertEqual(definition.edited, {"label", "icon"})
        self.assertEqual(self.repository.get("blog").label, "Journal")

    def test_system_types_are_protected(self):
        with self.assertRaises(ContentTypeProtectedError):
            self.repository.edit("pages", label="Sheets")
        with self.assertRaises(ContentTypeProtectedError):
            self.repository.delete("blocks")
        self.assertEqual(self.repository.get("pages").label, "Page")

    def test_unknown_fields_are_rejected(self):
        with self.assertRaises(ValueError):
            self.repository.edit("blog", is_system=True)

    def test_delete_keeps_the_record_table(self):
        self.store.execute("CREATE TABLE ct_blog (id integer)")

        self.repository.delete("blog")

        self.assertFalse(self.repository.objects.filter(name="blog").exists())
        self.assertIn("ct_blog", self.store.table_names())
