import logging
from pathlib import Path

from django_sitefleet.conf import settings

from .base import StoreVendor

logger = logging.getLogger(__name__)

BENIGN_MESSAGES = (
    "already exists",
    "duplicate column name",
    "unique constraint failed",
)

SIDECAR_SUFFIXES = ("-wal", "-shm", "-journal")


class SQLiteStoreVendor(StoreVendor):
    """One SQLite file per store, kept under ``SITEFLEET['STORE_ROOT']``."""

    vendor = "sqlite"

    @classmethod
    def database_name(cls, store_name) -> str:
        return str(Path(settings.STORE_ROOT) / f"{store_name}.sqlite3")

    def exists(self, store_name) -> bool:
        return Path(self.database_name(store_name)).exists()

    def create(self, store_name):
        path = Path(self.database_name(store_name))
        path.parent.mkdir(parents=True, exist_ok=True)
        path.touch(exist_ok=False)
        logger.info("Created SQLite store %s at %s", store_name, path)

    def drop(self, store_name):
        path = Path(self.database_name(store_name))
        path.unlink(missing_ok=True)
        for suffix in SIDECAR_SUFFIXES:
            Path(f"{path}{suffix}").unlink(missing_ok=True)
        logger.info("Removed SQLite store %s", store_name)

    def is_benign_already_applied_error(self, exc) -> bool:
        message = str(self.driver_error(exc)).lower()
        return any(fragment in message for fragment in BENIGN_MESSAGES)
