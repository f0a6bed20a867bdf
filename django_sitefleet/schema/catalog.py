"""
Migration units and the catalog that orders them.

A ``MigrationUnit`` is one named schema change applied to one store. Units
never check whether they were applied before; they attempt the change and let
the store's vendor decide whether the resulting error only means "already
there" (see ``StoreHandle.is_benign_already_applied_error``). ``RunSQL`` is the
exception: raw statements cannot be made idempotent that way, so they are
tracked in the per-store ``sitefleet_migrations`` ledger.

Unit kinds:
    - CreateTable: ``schema_editor.create_model`` for an unmanaged store model
    - AddColumn: ``ALTER TABLE ... ADD COLUMN`` built from a Django field,
      including its default so existing rows are filled
    - AddIndex: ``schema_editor.add_index``
    - InsertRow: one seed row guarded by a unique key
    - RunSQL: raw statements, optionally per vendor, recorded in the ledger
"""

import logging

from django.db import DatabaseError

logger = logging.getLogger(__name__)

APPLIED = "applied"
SKIPPED = "skipped"
FAILED = "failed"


class MigrationUnit:
    kind = None

    def __init__(self, name):
        self.name = name

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.name}>"

    def apply(self, store) -> str:
        """Apply the change to ``store`` and return ``APPLIED`` or ``SKIPPED``.

        Database errors propagate; the synchronizer classifies them.
        """
        raise NotImplementedError


class CreateTable(MigrationUnit):
    kind = "create_table"

    def __init__(self, model, name=None):
        self.model = model
        super().__init__(name or f"create_table.{model._meta.db_table}")

    def apply(self, store):
        with store.schema_editor() as editor:
            editor.create_model(self.model)
        return APPLIED


class AddColumn(MigrationUnit):
    kind = "add_column"

    def __init__(self, model, field_name, name=None):
        field = model._meta.get_field(field_name)
        if field.is_relation or field.unique or field.primary_key:
            raise ValueError(
                f"AddColumn only supports plain columns, not '{field_name}' "
                f"on {model._meta.db_table}."
            )
        self.model = model
        self.field = field
        super().__init__(name or f"add_column.{model._meta.db_table}.{field.column}")

    def apply(self, store):
        with store.schema_editor() as editor:
            definition, params = editor.column_sql(
                self.model, self.field, include_default=True
            )
            editor.execute(
                "ALTER TABLE %s ADD COLUMN %s %s"
                % (
                    editor.quote_name(self.model._meta.db_table),
                    editor.quote_name(self.field.column),
                    definition,
                ),
                params,
            )
        return APPLIED


class AddIndex(MigrationUnit):
    kind = "add_index"

    def __init__(self, model, index, name=None):
        if not index.name:
            raise ValueError("AddIndex requires a named index.")
        self.model = model
        self.index = index
        super().__init__(name or f"add_index.{model._meta.db_table}.{index.name}")

    def apply(self, store):
        with store.schema_editor() as editor:
            editor.add_index(self.model, self.index)
        return APPLIED


class InsertRow(MigrationUnit):
    kind = "insert_row"

    def __init__(self, model, values, name):
        self.model = model
        self.values = dict(values)
        super().__init__(name)

    def apply(self, store):
        with store.atomic():
            store.manager(self.model).create(**self.values)
        return APPLIED


class RunSQL(MigrationUnit):
    """
    Raw statements tracked in the store's applied-migrations ledger.

    ``statements`` is either a list of SQL strings run on every vendor, or a
    dict mapping a vendor name (``sqlite``, ``postgresql``, ``mysql``) to its
    list. A vendor without statements gets the unit recorded as skipped.
    """

    kind = "run_sql"

    def __init__(self, name, statements):
        self.statements = statements
        super().__init__(name)

    def statements_for(self, vendor):
        if isinstance(self.statements, dict):
            return list(self.statements.get(vendor, ()))
        return list(self.statements)

    def apply(self, store):
        from .canonical import MigrationLedgerEntry

        ledger = store.manager(MigrationLedgerEntry)
        if ledger.filter(name=self.name).exists():
            return SKIPPED

        statements = self.statements_for(store.vendor.vendor)
        outcome = APPLIED if statements else SKIPPED
        try:
            with store.atomic():
                for statement in statements:
                    store.execute(statement)
        except DatabaseError as exc:
            if not store.is_benign_already_applied_error(exc):
                raise
            logger.debug("%s already in place on %s: %s", self.name, store.store_name, exc)
            outcome = SKIPPED

        ledger.create(name=self.name)
        return outcome


class MigrationCatalog:
    """
    Ordered lists of units: canonical, auxiliary and the alter ledger.

    Declaration order is dependency order. Content-type units are not part of
    the catalog; the synchronizer derives them from each store's
    ``content_types`` rows at sync time.
    """

    def __init__(self, canonical=(), auxiliary=(), alter_ledger=()):
        self.canonical = list(canonical)
        self.auxiliary = list(auxiliary)
        self.alter_ledger = list(alter_ledger)

        names = [unit.name for unit in self]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate migration unit names: {', '.join(duplicates)}")

    def __iter__(self):
        yield from self.canonical
        yield from self.auxiliary
        yield from self.alter_ledger

    def __len__(self):
        return len(self.canonical) + len(self.auxiliary) + len(self.alter_ledger)

    @classmethod
    def default(cls):
        from .alter_ledger import alter_ledger_units
        from .canonical import auxiliary_units, canonical_units

        return cls(
            canonical=canonical_units(),
            auxiliary=auxiliary_units(),
            alter_ledger=alter_ledger_units(),
        )
