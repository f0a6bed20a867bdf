"""
Base Store Backend Module

This module defines the base class for tenant store backends in django-sitefleet.

Store backends are responsible for:
1. Telling whether a tenant's physical store exists
2. Creating an empty physical store
3. Destroying a physical store (provisioning rollback only)
4. Binding/unbinding the store's connection alias in ``settings.DATABASES``
5. Emitting signals at key lifecycle events

Backend Hierarchy:
    BaseStoreBackend (abstract base)
    └── DatabaseStoreBackend (one database per tenant, vendor specific DDL)

Lifecycle Events:
    - store_created: After the physical store exists
    - store_dropped: After the physical store was destroyed

Usage:
    ```python
    from django_sitefleet.utils import get_store_backend

    backend = get_store_backend("site_shop1")
    if not backend.exists():
        backend.create()

    backend.bind()
    try:
        ...  # use connections[backend.alias]
    finally:
        backend.unbind()
    ```

Related:
    - signals.py: Store lifecycle signals
    - database_backend.py: Database-per-tenant implementation
    - store.py: StoreHandle, which wraps bind()/unbind() around one operation
"""

from django_sitefleet.signals import store_created, store_dropped


class BaseStoreBackend:
    """
    Abstract base class for store backends.

    Lifecycle Methods:
        create() -> store_created signal
        drop() -> unbind() -> store_dropped signal

    Abstract Methods (must be implemented by subclasses):
        - exists(): Whether the physical store is present
        - bind() / unbind(): Attach and detach the store's connection alias

    Attributes:
        store_name (str): Identifier of the physical store this backend manages
        alias (str | None): Connection alias used for the store once bound
    """

    alias = None

    def __init__(self, store_name):
        self.store_name: str = store_name

    def exists(self) -> bool:
        raise NotImplementedError

    def bind(self):
        raise NotImplementedError

    def unbind(self):
        raise NotImplementedError

    def create(self):
        """
        Create the empty physical store and emit ``store_created``.

        Subclasses perform the actual creation and then call ``super().create()``.
        """
        store_created.send(sender=self.__class__, store_name=self.store_name)

    def drop(self):
        """
        Destroy the physical store and emit ``store_dropped``.

        Subclasses perform the actual removal and then call ``super().drop()``.
        Only used to roll back a store created by a failed provisioning run.
        """
        store_dropped.send(sender=self.__class__, store_name=self.store_name)
