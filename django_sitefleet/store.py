"""
StoreHandle: one connection to exactly one tenant store.

A handle binds the store's connection alias when it is opened and unbinds
it (closing the calling thread's connection) when it is closed, so the alias
only exists in ``settings.DATABASES`` for the duration of one operation. Use
it as a context manager:

    ```python
    from django_sitefleet.store import StoreHandle

    with StoreHandle.open("site_shop1") as store:
        with store.atomic():
            store.manager(SiteSetting).update_or_create(...)
    ```

The control-plane database can be wrapped too (``StoreHandle.for_control_plane()``);
that alias belongs to the project and is never unbound.
"""

import logging

from django.db import connections, transaction

from .conf import settings
from .exceptions import StoreNotFound
from .utils import get_store_backend

logger = logging.getLogger(__name__)

CONTROL_PLANE_STORE_NAME = "control-plane"


class StoreHandle:
    def __init__(self, store_name, alias, vendor, backend=None):
        self.store_name = store_name
        self.alias = alias
        self.vendor = vendor
        self.backend = backend
        self.closed = False

    def __repr__(self):
        return f"<StoreHandle {self.store_name} ({self.alias})>"

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    @classmethod
    def open(cls, store_name):
        """Bind an existing store. Raises ``StoreNotFound`` when it is missing."""
        backend = get_store_backend(store_name)
        if not backend.exists():
            raise StoreNotFound(f"Store '{store_name}' does not exist.")

        backend.bind()
        return cls(store_name, backend.alias, backend.vendor, backend=backend)

    @classmethod
    def for_control_plane(cls):
        from .backends.database_backend import get_store_vendor

        alias = settings.CONTROL_PLANE_DB_ALIAS
        vendor = get_store_vendor(settings.DATABASES[alias])
        return cls(CONTROL_PLANE_STORE_NAME, alias, vendor)

    @property
    def is_control_plane(self) -> bool:
        return self.backend is None

    @property
    def connection(self):
        return connections[self.alias]

    def execute(self, sql, params=None):
        with self.connection.cursor() as cursor:
            cursor.execute(sql, params)
            return cursor.rowcount

    def atomic(self):
        return transaction.atomic(using=self.alias)

    def schema_editor(self):
        return self.connection.schema_editor()

    def table_names(self):
        with self.connection.cursor() as cursor:
            return self.connection.introspection.table_names(cursor)

    def column_names(self, table):
        with self.connection.cursor() as cursor:
            description = self.connection.introspection.get_table_description(
                cursor, table
            )
        return [column.name for column in description]

    def manager(self, model):
        """The model's base manager, pinned to this store."""
        return model._base_manager.db_manager(self.alias)

    def is_benign_already_applied_error(self, exc) -> bool:
        return self.vendor.is_benign_already_applied_error(exc)

    def close(self):
        if self.closed:
            return
        self.closed = True

        if self.backend is not None:
            self.backend.unbind()
        elif not self.connection.in_atomic_block:
            self.connection.close()
        logger.debug("Closed %r", self)
