from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent

SECRET_KEY = "sitefleet-tests"
DEBUG = False
USE_TZ = True

INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "django.contrib.auth",
    "django_sitefleet",
]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "control_plane.sqlite3",
    }
}

DATABASE_ROUTERS = ["django_sitefleet.routers.ControlPlaneRouter"]

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "sitefleet-tests",
    }
}

PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.PBKDF2PasswordHasher",
]

SITEFLEET = {
    "SYNC_CONTROL_PLANE": False,
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"
