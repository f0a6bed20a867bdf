from pathlib import Path

from django.conf import settings as django_settings

from .constants import constants


class _WrappedSettings:
    """Read-through view of ``django.conf.settings`` plus the ``SITEFLEET`` dict.

    Values are looked up on every access so ``override_settings`` in tests
    and runtime changes are picked up.
    """

    def __getattr__(self, item):
        return getattr(django_settings, item)

    def __setattr__(self, key, value):
        if key in self.__dict__:
            raise ValueError("Item assignment is not supported")

        setattr(django_settings, key, value)

    def _option(self, key, default=None):
        return self.SITEFLEET_CONFIG.get(key, default)

    @property
    def SITEFLEET_CONFIG(self) -> dict:
        return getattr(django_settings, constants.SITEFLEET_CONFIG, {})

    @property
    def BASE_PATH(self) -> Path:
        return Path(getattr(django_settings, "BASE_DIR", Path.cwd()))

    @property
    def CONTROL_PLANE_DB_ALIAS(self) -> str:
        return self._option(
            constants.CONTROL_PLANE_DB_ALIAS, constants.DEFAULT_DB_ALIAS
        )

    @property
    def STORE_PREFIX(self) -> str:
        return self._option(constants.STORE_PREFIX, "site_")

    @property
    def STORE_ROOT(self) -> Path:
        return Path(self._option(constants.STORE_ROOT) or self.BASE_PATH / "stores")

    @property
    def STORE_DATABASE(self) -> dict:
        return self._option(constants.STORE_DATABASE, {})

    @property
    def UPLOADS_ROOT(self) -> Path:
        return Path(self._option(constants.UPLOADS_ROOT) or self.BASE_PATH / "uploads")

    @property
    def TEMPLATES_ROOT(self):
        root = self._option(constants.TEMPLATES_ROOT)
        return Path(root) if root else None

    @property
    def RESERVED_TEMPLATE_FOLDERS(self) -> tuple:
        return tuple(
            self._option(constants.RESERVED_TEMPLATE_FOLDERS, ("layouts", "partials"))
        )

    @property
    def IGNORED_TEMPLATE_FOLDERS(self) -> tuple:
        return tuple(
            self._option(
                constants.IGNORED_TEMPLATE_FOLDERS, ("assets", "scaffolds", "css")
            )
        )

    @property
    def TEMPLATE_EXTENSIONS(self) -> tuple:
        return tuple(self._option(constants.TEMPLATE_EXTENSIONS, (".njk", ".html")))

    @property
    def FLEET_SYNC_WORKERS(self) -> int:
        return int(self._option(constants.FLEET_SYNC_WORKERS, 1))

    @property
    def TENANT_SYNC_TIMEOUT(self):
        return self._option(constants.TENANT_SYNC_TIMEOUT, 300)

    @property
    def SYNC_CONTROL_PLANE(self) -> bool:
        return bool(self._option(constants.SYNC_CONTROL_PLANE, True))

    @property
    def DEFAULT_ADMIN_EMAIL(self) -> str:
        return self._option(constants.DEFAULT_ADMIN_EMAIL, "admin@example.com")

    @property
    def DEFAULT_ADMIN_PASSWORD(self) -> str:
        return self._option(constants.DEFAULT_ADMIN_PASSWORD, "admin123")

    @property
    def DEFAULT_THEME(self) -> str:
        return self._option(constants.DEFAULT_THEME, "default")

    @property
    def TEMPLATE_CACHE_ALIAS(self) -> str:
        return self._option(constants.TEMPLATE_CACHE_ALIAS, "default")

    @property
    def TEMPLATE_CACHE_TIMEOUT(self):
        return self._option(constants.TEMPLATE_CACHE_TIMEOUT, 300)


settings = _WrappedSettings()
