from .conf import settings

STORE_ALIAS_PREFIX = "sitefleet_store__"


def store_name_for(tenant_name: str) -> str:
    """Physical store identifier for a tenant name, e.g. ``shop-1`` -> ``site_shop_1``."""
    return f"{settings.STORE_PREFIX}{tenant_name.replace('-', '_')}"


def store_alias_for(store_name: str) -> str:
    return f"{STORE_ALIAS_PREFIX}{store_name}"


def is_store_alias(alias: str) -> bool:
    return alias.startswith(STORE_ALIAS_PREFIX)


def get_store_backend(store_name: str):
    from .backends.database_backend import DatabaseStoreBackend

    return DatabaseStoreBackend(store_name)
