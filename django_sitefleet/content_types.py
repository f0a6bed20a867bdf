"""
Content types: derived defaults, operator edits and backing record tables.

Each non-system content type gets a record table ``ct_<name>`` (hyphens
become underscores). The table is described by a model built on the fly from
the definition's capability flags; its units are named
``content_type.<name>.*`` and run in the synchronizer's content-type pass.
"""

import logging

from django.apps.registry import Apps
from django.db import models

from .constants import constants
from .exceptions import ContentTypeProtectedError
from .schema.canonical import ContentTypeDefinition
from .schema.catalog import AddColumn, CreateTable

logger = logging.getLogger(__name__)

DEFAULT_ICON = "FileText"
DEFAULT_COLOR = "gray"
DEFAULT_MENU_ORDER = 999

# Fields discovery derives from the folder name and may refresh.
DERIVED_FIELDS = ("label", "plural_label", "icon")

EDITABLE_FIELDS = (
    "label",
    "plural_label",
    "icon",
    "color",
    "menu_order",
    "show_in_menu",
    "has_status",
    "has_seo",
)


def titleize(name: str) -> str:
    """``blog-post`` -> ``Blog Post``"""
    words = name.replace("_", " ").replace("-", " ").split()
    return " ".join(word.capitalize() for word in words)


# Folder names that are their own singular and plural.
UNCOUNTABLE = frozenset({"news", "series", "species", "media", "data", "info"})

# Singular words that end in "s".
SINGULAR_ENDING_IN_S = frozenset({"status", "campus", "bonus", "census", "alias", "canvas", "atlas"})


def _last_word(word: str) -> str:
    return word.replace("_", "-").rsplit("-", 1)[-1]


def is_uncountable(word: str) -> bool:
    return _last_word(word) in UNCOUNTABLE


def singularize(word: str) -> str:
    if is_uncountable(word) or word.endswith("ss"):
        return word
    if _last_word(word) in SINGULAR_ENDING_IN_S:
        return word
    if word.endswith("ies") and len(word) > 3:
        return word[:-3] + "y"
    if word.endswith("s") and len(word) > 1:
        return word[:-1]
    return word


def pluralize(word: str) -> str:
    if word.endswith("y") and len(word) > 1 and word[-2] not in "aeiou":
        return word[:-1] + "ies"
    if word.endswith(("s", "x", "z", "ch", "sh")):
        return word + "es"
    return word + "s"


def derive_defaults(name: str) -> dict:
    """
    Defaults for a newly discovered content type.

    ``blog`` -> Blog / Blogs, ``products`` -> Product / Products,
    ``case-studies`` -> Case Study / Case Studies.
    """
    singular = singularize(name)
    if singular != name or is_uncountable(name):
        plural = name
    else:
        plural = pluralize(singular)
    return {
        "label": titleize(singular),
        "plural_label": titleize(plural),
        "icon": DEFAULT_ICON,
        "color": DEFAULT_COLOR,
        "menu_order": DEFAULT_MENU_ORDER,
        "show_in_menu": True,
        "has_status": True,
        "has_seo": False,
        "is_system": False,
    }


def record_table_name(name: str) -> str:
    return f"{constants.RECORD_TABLE_PREFIX}{name.replace('-', '_')}"


def build_record_model(definition):
    """Unmanaged model describing ``definition``'s record table."""
    table = record_table_name(definition.name)
    attrs = {
        "__module__": __name__,
        "Meta": type(
            "Meta",
            (),
            {
                "apps": Apps(()),
                "app_label": constants.STORE_APP_LABEL,
                "db_table": table,
            },
        ),
        "id": models.AutoField(primary_key=True),
        "content_id": models.IntegerField(null=True, db_index=True),
        "template_id": models.IntegerField(null=True),
        "title": models.CharField(max_length=255),
        "slug": models.CharField(max_length=191, unique=True),
        "created_at": models.DateTimeField(auto_now_add=True),
        "updated_at": models.DateTimeField(auto_now=True),
    }
    if definition.has_status:
        attrs["status"] = models.CharField(max_length=10, default="draft")
    if definition.has_seo:
        attrs["meta_title"] = models.CharField(max_length=255, null=True)
        attrs["meta_description"] = models.TextField(null=True)

    class_name = "".join(part.capitalize() for part in table.split("_")) + "Record"
    return type(class_name, (models.Model,), attrs)


def record_units(definition):
    model = build_record_model(definition)
    prefix = f"content_type.{definition.name}"
    units = [CreateTable(model, name=f"{prefix}.create_table")]
    # A flag switched on after the table exists still gets its columns.
    optional = []
    if definition.has_status:
        optional.append("status")
    if definition.has_seo:
        optional.extend(["meta_title", "meta_description"])
    units.extend(
        AddColumn(model, field_name, name=f"{prefix}.add_{field_name}")
        for field_name in optional
    )
    return units


def content_type_units(store):
    """Units for every non-system content type registered in ``store``."""
    units = []
    for definition in ContentTypeRepository(store).non_system():
        units.extend(record_units(definition))
    return units


class ContentTypeRepository:
    """Reads and operator edits of a store's ``content_types`` rows."""

    def __init__(self, store):
        self.store = store

    @property
    def objects(self):
        return self.store.manager(ContentTypeDefinition)

    def all(self):
        return list(self.objects.order_by("menu_order", "name"))

    def non_system(self):
        return list(self.objects.filter(is_system=False).order_by("name"))

    def get(self, name):
        return self.objects.get(name=name)

    def create(self, name, **values):
        return self.objects.create(name=name, **values)

    def edit(self, name, **changes):
        definition = self.get(name)
        if definition.is_system:
            raise ContentTypeProtectedError(f"Content type '{name}' is built in.")

        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot edit fields: {', '.join(sorted(unknown))}")

        for field, value in changes.items():
            setattr(definition, field, value)
        definition.mark_edited(*changes)
        definition.save()
        logger.info(
            "Content type %s edited on %s: %s",
            name,
            self.store.store_name,
            sorted(changes),
        )
        return definition

    def delete(self, name):
        """Remove the definition row. The record table and its rows are kept."""
        definition = self.get(name)
        if definition.is_system:
            raise ContentTypeProtectedError(f"Content type '{name}' is built in.")

        definition.delete()
        logger.info("Content type %s deleted from %s", name, self.store.store_name)
