"""
Canonical tenant-store schema.

Every tenant store carries the same tables. They are described here as Django
models registered in a private app registry (``store_apps``), so they are
invisible to ``manage.py migrate`` and to the project's app registry, and are
only ever created through migration units. Cross-table references are plain
integer columns: rows in one store never point at another store, and seed
data can be inserted in any order.
"""

from django.apps.registry import Apps
from django.db import models

from django_sitefleet.constants import constants

from .catalog import AddColumn, CreateTable, InsertRow

store_apps = Apps(())


class StoreModel(models.Model):
    id = models.AutoField(primary_key=True)

    class Meta:
        abstract = True
        apps = store_apps
        app_label = constants.STORE_APP_LABEL


class MigrationLedgerEntry(StoreModel):
    name = models.CharField(max_length=191, unique=True)
    applied_at = models.DateTimeField(auto_now_add=True)

    class Meta(StoreModel.Meta):
        db_table = constants.LEDGER_TABLE


class SiteSetting(StoreModel):
    setting_key = models.CharField(max_length=191, unique=True)
    setting_value = models.TextField(null=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta(StoreModel.Meta):
        db_table = "settings"


class StoreUser(StoreModel):
    ROLES = [("admin", "Admin"), ("editor", "Editor"), ("viewer", "Viewer")]

    email = models.CharField(max_length=191, unique=True)
    password = models.CharField(max_length=255)
    name = models.CharField(max_length=255, null=True)
    role = models.CharField(max_length=10, choices=ROLES, default="editor")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta(StoreModel.Meta):
        db_table = "users"


class Template(StoreModel):
    name = models.CharField(max_length=255)
    filename = models.CharField(max_length=191, unique=True)
    description = models.TextField(null=True)
    regions = models.JSONField(null=True)
    content_type = models.CharField(max_length=50, null=True, db_index=True)
    content = models.TextField(null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta(StoreModel.Meta):
        db_table = "templates"


class Content(StoreModel):
    module = models.CharField(max_length=50, db_index=True)
    data = models.TextField(null=True)
    title = models.CharField(max_length=255, null=True)
    slug = models.CharField(max_length=191, unique=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta(StoreModel.Meta):
        db_table = "content"


class ContentTypeDefinition(StoreModel):
    """
    One class of editable content in a tenant store.

    ``edited_fields`` is a comma separated list of fields an operator changed
    by hand; discovery never resets those.
    """

    name = models.CharField(max_length=50, unique=True)
    label = models.CharField(max_length=100)
    plural_label = models.CharField(max_length=100)
    icon = models.CharField(max_length=50, default="FileText")
    color = models.CharField(max_length=20, default="gray")
    menu_order = models.IntegerField(default=999)
    show_in_menu = models.BooleanField(default=True)
    has_status = models.BooleanField(default=True)
    has_seo = models.BooleanField(default=False)
    is_system = models.BooleanField(default=False)
    is_stale = models.BooleanField(default=False)
    edited_fields = models.CharField(max_length=255, default="", blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta(StoreModel.Meta):
        db_table = "content_types"
        ordering = ["menu_order", "name"]

    def __str__(self):
        return self.name

    @property
    def edited(self) -> set:
        return {field for field in self.edited_fields.split(",") if field}

    def mark_edited(self, *fields):
        self.edited_fields = ",".join(sorted(self.edited | set(fields)))


class ContentTypeExtension(StoreModel):
    content_type_name = models.CharField(max_length=50)
    extension_name = models.CharField(max_length=50)
    config = models.JSONField(null=True)
    enabled = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta(StoreModel.Meta):
        db_table = "content_type_extensions"
        unique_together = [("content_type_name", "extension_name")]


class Page(StoreModel):
    STATUSES = [("draft", "Draft"), ("published", "Published"), ("archived", "Archived")]

    template_id = models.IntegerField(null=True, db_index=True)
    content_id = models.IntegerField(null=True, db_index=True)
    title = models.CharField(max_length=255)
    slug = models.CharField(max_length=191, unique=True)
    content_type = models.CharField(max_length=50, default="pages", db_index=True)
    status = models.CharField(max_length=10, choices=STATUSES, default="draft")
    published_at = models.DateTimeField(null=True)
    meta_title = models.CharField(max_length=255, null=True)
    meta_description = models.TextField(null=True)
    og_title = models.CharField(max_length=255, null=True)
    og_description = models.TextField(null=True)
    og_image = models.CharField(max_length=500, null=True)
    canonical_url = models.CharField(max_length=500, null=True)
    robots = models.CharField(max_length=100, default="index, follow")
    schema_markup = models.JSONField(null=True)
    subscription_only = models.BooleanField(default=False)
    created_by = models.IntegerField(null=True)
    updated_by = models.IntegerField(null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta(StoreModel.Meta):
        db_table = "pages"


class Block(StoreModel):
    template_id = models.IntegerField(null=True, db_index=True)
    content_id = models.IntegerField(null=True, db_index=True)
    name = models.CharField(max_length=255)
    slug = models.CharField(max_length=191, unique=True)
    description = models.TextField(null=True)
    content_type = models.CharField(max_length=50, default="blocks", db_index=True)
    created_by = models.IntegerField(null=True)
    updated_by = models.IntegerField(null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta(StoreModel.Meta):
        db_table = "blocks"


class Media(StoreModel):
    filename = models.CharField(max_length=255)
    original_name = models.CharField(max_length=255)
    mime_type = models.CharField(max_length=100)
    size = models.IntegerField()
    path = models.CharField(max_length=500)
    alt_text = models.CharField(max_length=255, null=True)
    title = models.CharField(max_length=255, null=True)
    uploaded_by = models.IntegerField(null=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta(StoreModel.Meta):
        db_table = "media"


class Menu(StoreModel):
    name = models.CharField(max_length=255)
    slug = models.CharField(max_length=191, unique=True)
    description = models.TextField(null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta(StoreModel.Meta):
        db_table = "menus"


class MenuItem(StoreModel):
    TARGETS = [("_self", "Same window"), ("_blank", "New window")]

    menu_id = models.IntegerField(db_index=True)
    parent_id = models.IntegerField(null=True, db_index=True)
    title = models.CharField(max_length=255)
    url = models.CharField(max_length=500, null=True)
    page_id = models.IntegerField(null=True, db_index=True)
    target = models.CharField(max_length=10, choices=TARGETS, default="_self")
    position = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta(StoreModel.Meta):
        db_table = "menu_items"


class Redirect(StoreModel):
    source_path = models.CharField(max_length=191, unique=True)
    target_path = models.CharField(max_length=500)
    status_code = models.IntegerField(default=301)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta(StoreModel.Meta):
        db_table = "redirects"


class Customer(StoreModel):
    user_id = models.IntegerField(null=True, db_index=True)
    email = models.CharField(max_length=191, unique=True)
    first_name = models.CharField(max_length=100, null=True)
    last_name = models.CharField(max_length=100, null=True)
    phone = models.CharField(max_length=20, null=True)
    password = models.CharField(max_length=255, null=True)
    email_verified = models.BooleanField(default=False)
    stripe_customer_id = models.CharField(max_length=255, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta(StoreModel.Meta):
        db_table = "customers"


class Product(StoreModel):
    STATUSES = [("active", "Active"), ("draft", "Draft"), ("archived", "Archived")]

    content_id = models.IntegerField(null=True, db_index=True)
    template_id = models.IntegerField(null=True)
    title = models.CharField(max_length=255, null=True)
    sku = models.CharField(max_length=100, unique=True)
    price = models.DecimalField(max_digits=10, decimal_places=2)
    compare_at_price = models.DecimalField(max_digits=10, decimal_places=2, null=True)
    inventory_quantity = models.IntegerField(default=0)
    requires_shipping = models.BooleanField(default=True)
    subscription_only = models.BooleanField(default=False)
    is_digital = models.BooleanField(default=False)
    download_url = models.CharField(max_length=500, null=True)
    download_limit = models.IntegerField(default=5)
    download_expiry_days = models.IntegerField(default=30)
    status = models.CharField(max_length=10, choices=STATUSES, default="draft", db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta(StoreModel.Meta):
        db_table = "products"


class ProductVariant(StoreModel):
    product_id = models.IntegerField(db_index=True)
    title = models.CharField(max_length=255)
    sku = models.CharField(max_length=100, unique=True, null=True)
    price = models.DecimalField(max_digits=10, decimal_places=2, null=True)
    inventory_quantity = models.IntegerField(default=0)
    position = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta(StoreModel.Meta):
        db_table = "product_variants"


class Order(StoreModel):
    STATUSES = [
        ("pending", "Pending"),
        ("processing", "Processing"),
        ("shipped", "Shipped"),
        ("completed", "Completed"),
        ("cancelled", "Cancelled"),
        ("refunded", "Refunded"),
    ]
    PAYMENT_STATUSES = [
        ("pending", "Pending"),
        ("paid", "Paid"),
        ("failed", "Failed"),
        ("refunded", "Refunded"),
    ]

    order_number = models.CharField(max_length=50, unique=True)
    customer_id = models.IntegerField(db_index=True)
    status = models.CharField(max_length=12, choices=STATUSES, default="pending", db_index=True)
    payment_status = models.CharField(max_length=10, choices=PAYMENT_STATUSES, default="pending")
    subtotal = models.DecimalField(max_digits=10, decimal_places=2)
    tax = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    shipping = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    discount = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    total = models.DecimalField(max_digits=10, decimal_places=2)
    email = models.CharField(max_length=255)
    billing_address = models.JSONField()
    shipping_address = models.JSONField()
    payment_method = models.CharField(max_length=10)
    payment_intent_id = models.CharField(max_length=255, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta(StoreModel.Meta):
        db_table = "orders"


class OrderItem(StoreModel):
    order_id = models.IntegerField(db_index=True)
    product_id = models.IntegerField(db_index=True)
    variant_id = models.IntegerField(null=True)
    product_title = models.CharField(max_length=255)
    sku = models.CharField(max_length=100)
    price = models.DecimalField(max_digits=10, decimal_places=2)
    quantity = models.IntegerField()
    subtotal = models.DecimalField(max_digits=10, decimal_places=2)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta(StoreModel.Meta):
        db_table = "order_items"


class DigitalDownload(StoreModel):
    order_id = models.IntegerField(db_index=True)
    product_id = models.IntegerField(db_index=True)
    customer_id = models.IntegerField(db_index=True)
    download_url = models.CharField(max_length=500)
    download_count = models.IntegerField(default=0)
    download_limit = models.IntegerField()
    expires_at = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta(StoreModel.Meta):
        db_table = "digital_downloads"


# Import-job bookkeeping, always present but owned by the site importer.


class ImportedSite(StoreModel):
    root_url = models.CharField(max_length=255)
    status = models.CharField(max_length=50, default="pending")
    page_count = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta(StoreModel.Meta):
        db_table = "imported_sites"


class ImportedPage(StoreModel):
    site = models.ForeignKey(ImportedSite, on_delete=models.CASCADE)
    url = models.CharField(max_length=255)
    title = models.CharField(max_length=255, null=True)
    raw_html = models.TextField(null=True)
    structural_hash = models.CharField(max_length=64, null=True, db_index=True)
    metadata = models.JSONField(null=True)
    status = models.CharField(max_length=50, default="pending")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta(StoreModel.Meta):
        db_table = "imported_pages"


CANONICAL_MODELS = (
    MigrationLedgerEntry,
    SiteSetting,
    StoreUser,
    Template,
    Content,
    ContentTypeDefinition,
    ContentTypeExtension,
    Page,
    Block,
    Media,
    Menu,
    MenuItem,
    Redirect,
    Customer,
    Product,
    ProductVariant,
    Order,
    OrderItem,
    DigitalDownload,
)

AUXILIARY_MODELS = (ImportedSite, ImportedPage)

# Columns added after the first release that discovery itself reads, so they
# have to exist before the discovery hook runs.
EARLY_COLUMNS = (
    (Template, "content"),
    (ContentTypeDefinition, "is_stale"),
    (ContentTypeDefinition, "edited_fields"),
)

SYSTEM_CONTENT_TYPES = (
    {
        "name": "pages",
        "label": "Page",
        "plural_label": "Pages",
        "icon": "FileText",
        "color": "gray",
        "menu_order": 1,
        "show_in_menu": True,
        "has_status": True,
        "has_seo": True,
        "is_system": True,
    },
    {
        "name": "blocks",
        "label": "Block",
        "plural_label": "Blocks",
        "icon": "Boxes",
        "color": "gray",
        "menu_order": 2,
        "show_in_menu": True,
        "has_status": False,
        "has_seo": False,
        "is_system": True,
    },
)


def canonical_units():
    units = [CreateTable(model) for model in CANONICAL_MODELS]
    units.extend(AddColumn(model, field_name) for model, field_name in EARLY_COLUMNS)
    units.extend(
        InsertRow(
            ContentTypeDefinition,
            values,
            name=f"seed.content_types.{values['name']}",
        )
        for values in SYSTEM_CONTENT_TYPES
    )
    return units


def auxiliary_units():
    return [CreateTable(model) for model in AUXILIARY_MODELS]
