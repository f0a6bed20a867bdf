from .conf import settings
from .utils import is_store_alias


class ControlPlaneRouter:
    """Keeps the registry models on the control-plane database.

    Tenant stores are built by the schema synchronizer, never by
    ``manage.py migrate``, so migrations are refused on store aliases.
    """

    app_label = "django_sitefleet"

    def _is_control_plane_model(self, model):
        return model._meta.app_label == self.app_label

    def db_for_read(self, model, **hints):
        if self._is_control_plane_model(model):
            return settings.CONTROL_PLANE_DB_ALIAS
        return None

    def db_for_write(self, model, **hints):
        if self._is_control_plane_model(model):
            return settings.CONTROL_PLANE_DB_ALIAS
        return None

    def allow_relation(self, obj1, obj2, **hints):
        return None

    def allow_migrate(self, db, app_label, model_name=None, **hints):
        if is_store_alias(db):
            return False

        if app_label == self.app_label:
            return db == settings.CONTROL_PLANE_DB_ALIAS
        return None
