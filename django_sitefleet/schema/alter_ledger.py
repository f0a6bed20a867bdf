"""
Structural changes accumulated since the first canonical schema.

Fresh stores already have every column here, so on them these units are
skipped; stores created by older releases pick them up on the next sync.
Append new changes at the end and never rename a unit: ``RunSQL`` names are
recorded in each store's ledger.
"""

from django.db import models

from .canonical import Customer, Page, Product
from .catalog import AddColumn, AddIndex, RunSQL


def alter_ledger_units():
    return [
        AddColumn(Product, "subscription_only"),
        AddColumn(Product, "is_digital"),
        AddColumn(Product, "download_url"),
        AddColumn(Product, "download_limit"),
        AddColumn(Product, "download_expiry_days"),
        AddColumn(Page, "subscription_only"),
        AddColumn(Customer, "stripe_customer_id"),
        AddIndex(
            Page,
            models.Index(fields=["content_type", "status"], name="idx_pages_type_status"),
        ),
        RunSQL(
            "backfill_pages_content_type",
            [
                "UPDATE pages SET content_type = 'pages' "
                "WHERE content_type IS NULL OR content_type = ''",
            ],
        ),
        RunSQL(
            "backfill_blocks_content_type",
            [
                "UPDATE blocks SET content_type = 'blocks' "
                "WHERE content_type IS NULL OR content_type = ''",
            ],
        ),
    ]
