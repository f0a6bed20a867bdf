from django.core.cache import caches

from .conf import settings

KEY_PREFIX = "sitefleet"


class TenantTemplateCache:
    """
    Template/theme cache scoped to one tenant store.

    Keys carry the tenant's store name and a generation counter.
    ``invalidate(store_name)`` bumps the counter, which orphans every key of
    that tenant at once without touching other tenants' entries.
    """

    def __init__(self, alias=None, timeout=None):
        self._alias = alias
        self._timeout = timeout

    @property
    def cache(self):
        return caches[self._alias or settings.TEMPLATE_CACHE_ALIAS]

    @property
    def timeout(self):
        return self._timeout if self._timeout is not None else settings.TEMPLATE_CACHE_TIMEOUT

    def _generation_key(self, store_name):
        return f"{KEY_PREFIX}:{store_name}:generation"

    def generation(self, store_name) -> int:
        return self.cache.get(self._generation_key(store_name), 0)

    def make_key(self, store_name, key):
        return f"{KEY_PREFIX}:{store_name}:{self.generation(store_name)}:{key}"

    def get(self, store_name, key, default=None):
        return self.cache.get(self.make_key(store_name, key), default)

    def set(self, store_name, key, value):
        self.cache.set(self.make_key(store_name, key), value, self.timeout)

    def get_or_set(self, store_name, key, default):
        return self.cache.get_or_set(self.make_key(store_name, key), default, self.timeout)

    def invalidate(self, store_name):
        generation_key = self._generation_key(store_name)
        # The counter itself never expires.
        if not self.cache.add(generation_key, 1, None):
            try:
                self.cache.incr(generation_key)
            except ValueError:
                self.cache.set(generation_key, 1, None)


template_cache = TenantTemplateCache()
