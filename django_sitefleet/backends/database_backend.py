import logging

from django.core.exceptions import ImproperlyConfigured
from django.db import connections
from django.db.utils import load_backend
from requests.structures import CaseInsensitiveDict

from django_sitefleet.conf import settings
from django_sitefleet.utils import store_alias_for

from .base import BaseStoreBackend
from .vendors.mysql import MySQLStoreVendor
from .vendors.postgresql import PostgreSQLStoreVendor
from .vendors.sqlite import SQLiteStoreVendor

logger = logging.getLogger(__name__)

STORE_VENDORS = {
    vendor_class.vendor: vendor_class
    for vendor_class in (SQLiteStoreVendor, PostgreSQLStoreVendor, MySQLStoreVendor)
}


def get_store_vendor_class(engine):
    vendor = load_backend(engine).DatabaseWrapper.vendor
    try:
        return STORE_VENDORS[vendor]
    except KeyError:
        raise ImproperlyConfigured(
            f"Database engine '{engine}' ({vendor}) cannot host tenant stores. "
            f"Supported vendors: {', '.join(sorted(STORE_VENDORS))}."
        )


def get_store_vendor(db_config):
    return get_store_vendor_class(db_config["ENGINE"])(db_config)


class DatabaseStoreBackend(BaseStoreBackend):
    def __init__(self, store_name):
        super().__init__(store_name)
        self.alias, self.db_config = self.get_alias_and_config(store_name)
        self.vendor = get_store_vendor(self.db_config)

    @classmethod
    def get_alias_and_config(cls, store_name):
        """
        Returns the connection alias and resolved configuration for the store.

        The control-plane database config is the base; ``SITEFLEET['STORE_DATABASE']``
        overrides any key of it. ``NAME`` is always derived from the store name.
        """
        db_config = CaseInsensitiveDict(settings.STORE_DATABASE)

        db_alias = store_alias_for(store_name)

        base_config: dict = settings.DATABASES.get(
            settings.CONTROL_PLANE_DB_ALIAS, {}
        ).copy()

        engine = db_config.get("ENGINE") or base_config.get("ENGINE")
        vendor_class = get_store_vendor_class(engine)

        resolved_config = {
            "ENGINE": engine,
            "NAME": vendor_class.database_name(store_name),
            "USER": db_config.get("USER") or base_config.get("USER"),
            "PASSWORD": db_config.get("PASSWORD") or base_config.get("PASSWORD"),
            "HOST": db_config.get("HOST") or base_config.get("HOST"),
            "PORT": db_config.get("PORT") or base_config.get("PORT"),
            "OPTIONS": db_config.get("OPTIONS") or base_config.get("OPTIONS", {}),
            "TIME_ZONE": db_config.get("TIME_ZONE")
            or base_config.get("TIME_ZONE", None),
            "ATOMIC_REQUESTS": db_config.get("ATOMIC_REQUESTS")
            if "ATOMIC_REQUESTS" in db_config
            else base_config.get("ATOMIC_REQUESTS", False),
            "AUTOCOMMIT": db_config.get("AUTOCOMMIT")
            if "AUTOCOMMIT" in db_config
            else base_config.get("AUTOCOMMIT", True),
            "CONN_MAX_AGE": db_config.get("CONN_MAX_AGE")
            if "CONN_MAX_AGE" in db_config
            else 0,
            "CONN_HEALTH_CHECKS": db_config.get("CONN_HEALTH_CHECKS")
            if "CONN_HEALTH_CHECKS" in db_config
            else base_config.get("CONN_HEALTH_CHECKS", False),
            "TEST": db_config.get("TEST")
            if "TEST" in db_config
            else {},
        }

        return db_alias, resolved_config

    def exists(self) -> bool:
        return self.vendor.exists(self.store_name)

    def create(self):
        self.vendor.create(self.store_name)
        super().create()

    def drop(self):
        self.unbind()
        self.vendor.drop(self.store_name)
        super().drop()

    def bind(self):
        settings.DATABASES[self.alias] = self.db_config.copy()
        logger.debug("Store %s bound to alias %s", self.store_name, self.alias)

    def unbind(self):
        """Close this thread's connection for the alias and forget the alias."""
        if self.alias not in settings.DATABASES:
            return

        connections[self.alias].close()
        del connections[self.alias]
        settings.DATABASES.pop(self.alias, None)
        logger.debug("Store %s unbound from alias %s", self.store_name, self.alias)
