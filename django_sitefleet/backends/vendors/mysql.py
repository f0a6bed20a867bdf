import logging

from .base import StoreVendor

logger = logging.getLogger(__name__)

BENIGN_ERROR_CODES = frozenset(
    {
        1050,  # ER_TABLE_EXISTS_ERROR
        1060,  # ER_DUP_FIELDNAME
        1061,  # ER_DUP_KEYNAME
        1062,  # ER_DUP_ENTRY
        1091,  # ER_CANT_DROP_FIELD_OR_KEY
        1826,  # ER_FK_DUP_NAME
    }
)


def _quote(name):
    return "`%s`" % name.replace("`", "``")


class MySQLStoreVendor(StoreVendor):
    """One MySQL/MariaDB database per store, created as utf8mb4."""

    vendor = "mysql"

    def _connect(self):
        import MySQLdb

        kwargs = {
            "user": self.db_config.get("USER") or "",
            "passwd": self.db_config.get("PASSWORD") or "",
            "host": self.db_config.get("HOST") or "localhost",
        }
        if self.db_config.get("PORT"):
            kwargs["port"] = int(self.db_config["PORT"])
        conn = MySQLdb.connect(**kwargs)
        conn.autocommit(True)
        return conn

    def exists(self, store_name) -> bool:
        conn = self._connect()
        cur = conn.cursor()
        try:
            cur.execute(
                "SELECT SCHEMA_NAME FROM INFORMATION_SCHEMA.SCHEMATA WHERE SCHEMA_NAME = %s",
                [self.database_name(store_name)],
            )
            return cur.fetchone() is not None
        finally:
            cur.close()
            conn.close()

    def create(self, store_name):
        conn = self._connect()
        cur = conn.cursor()
        try:
            cur.execute(
                "CREATE DATABASE %s CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
                % _quote(self.database_name(store_name))
            )
            logger.info("Created MySQL store %s", store_name)
        finally:
            cur.close()
            conn.close()

    def drop(self, store_name):
        conn = self._connect()
        cur = conn.cursor()
        try:
            cur.execute(
                "DROP DATABASE IF EXISTS %s" % _quote(self.database_name(store_name))
            )
            logger.info("Dropped MySQL store %s", store_name)
        finally:
            cur.close()
            conn.close()

    def is_benign_already_applied_error(self, exc) -> bool:
        error = self.driver_error(exc)
        args = getattr(error, "args", ())
        return bool(args) and args[0] in BENIGN_ERROR_CODES
