from django.utils.functional import cached_property


class _Constants:
    @cached_property
    def SITEFLEET_CONFIG(self) -> str:
        return "SITEFLEET"

    @cached_property
    def DEFAULT_DB_ALIAS(self) -> str:
        return "default"

    @cached_property
    def CONTROL_PLANE_DB_ALIAS(self) -> str:
        return "CONTROL_PLANE_DB_ALIAS"

    @cached_property
    def STORE_PREFIX(self) -> str:
        return "STORE_PREFIX"

    @cached_property
    def STORE_ROOT(self) -> str:
        return "STORE_ROOT"

    @cached_property
    def STORE_DATABASE(self) -> str:
        return "STORE_DATABASE"

    @cached_property
    def UPLOADS_ROOT(self) -> str:
        return "UPLOADS_ROOT"

    @cached_property
    def TEMPLATES_ROOT(self) -> str:
        return "TEMPLATES_ROOT"

    @cached_property
    def RESERVED_TEMPLATE_FOLDERS(self) -> str:
        return "RESERVED_TEMPLATE_FOLDERS"

    @cached_property
    def IGNORED_TEMPLATE_FOLDERS(self) -> str:
        return "IGNORED_TEMPLATE_FOLDERS"

    @cached_property
    def TEMPLATE_EXTENSIONS(self) -> str:
        return "TEMPLATE_EXTENSIONS"

    @cached_property
    def FLEET_SYNC_WORKERS(self) -> str:
        return "FLEET_SYNC_WORKERS"

    @cached_property
    def TENANT_SYNC_TIMEOUT(self) -> str:
        return "TENANT_SYNC_TIMEOUT"

    @cached_property
    def SYNC_CONTROL_PLANE(self) -> str:
        return "SYNC_CONTROL_PLANE"

    @cached_property
    def DEFAULT_ADMIN_EMAIL(self) -> str:
        return "DEFAULT_ADMIN_EMAIL"

    @cached_property
    def DEFAULT_ADMIN_PASSWORD(self) -> str:
        return "DEFAULT_ADMIN_PASSWORD"

    @cached_property
    def DEFAULT_THEME(self) -> str:
        return "DEFAULT_THEME"

    @cached_property
    def TEMPLATE_CACHE_ALIAS(self) -> str:
        return "TEMPLATE_CACHE_ALIAS"

    @cached_property
    def TEMPLATE_CACHE_TIMEOUT(self) -> str:
        return "TEMPLATE_CACHE_TIMEOUT"

    @cached_property
    def STORE_APP_LABEL(self) -> str:
        return "sitefleet_store"

    @cached_property
    def LEDGER_TABLE(self) -> str:
        return "sitefleet_migrations"

    @cached_property
    def RECORD_TABLE_PREFIX(self) -> str:
        return "ct_"

    @cached_property
    def SYSTEM_CONTENT_TYPES(self) -> tuple:
        return ("pages", "blocks")


constants = _Constants()
