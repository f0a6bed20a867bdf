from django.apps import AppConfig
from django.core.exceptions import ImproperlyConfigured

from .conf import settings
from .constants import constants


class DjangoSitefleetConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "django_sitefleet"
    verbose_name = "Site fleet"

    def ready(self):
        control_alias = settings.CONTROL_PLANE_DB_ALIAS
        if control_alias not in settings.DATABASES:
            raise ImproperlyConfigured(
                f"{constants.SITEFLEET_CONFIG}['{constants.CONTROL_PLANE_DB_ALIAS}'] "
                f"points to '{control_alias}', which is not defined in DATABASES."
            )

        workers = settings.FLEET_SYNC_WORKERS
        if workers < 1:
            raise ImproperlyConfigured(
                f"{constants.SITEFLEET_CONFIG}['{constants.FLEET_SYNC_WORKERS}'] "
                f"must be at least 1, got {workers}."
            )
