import logging

from .base import StoreVendor

logger = logging.getLogger(__name__)

# SQLSTATE codes raised when a change is already in place.
BENIGN_SQLSTATES = frozenset(
    {
        "42P07",  # duplicate_table (also duplicate index names)
        "42701",  # duplicate_column
        "42P06",  # duplicate_schema
        "42710",  # duplicate_object
        "23505",  # unique_violation
    }
)

MAINTENANCE_DATABASE = "postgres"


def _driver():
    from django.db.backends.postgresql.psycopg_any import is_psycopg3

    if is_psycopg3:
        import psycopg as psycopg_driver
        from psycopg import sql
    else:
        import psycopg2 as psycopg_driver
        from psycopg2 import sql
    return psycopg_driver, sql


class PostgreSQLStoreVendor(StoreVendor):
    """One PostgreSQL database per store on the control plane's server."""

    vendor = "postgresql"

    def _connect(self):
        psycopg_driver, _ = _driver()
        conn = psycopg_driver.connect(
            dbname=MAINTENANCE_DATABASE,
            user=self.db_config.get("USER"),
            password=self.db_config.get("PASSWORD"),
            host=self.db_config.get("HOST") or None,
            port=self.db_config.get("PORT") or None,
        )
        conn.autocommit = True
        return conn

    def exists(self, store_name) -> bool:
        conn = self._connect()
        cur = conn.cursor()
        try:
            cur.execute(
                "SELECT 1 FROM pg_database WHERE datname = %s",
                [self.database_name(store_name)],
            )
            return cur.fetchone() is not None
        finally:
            cur.close()
            conn.close()

    def create(self, store_name):
        _, sql = _driver()
        conn = self._connect()
        cur = conn.cursor()
        try:
            cur.execute(
                sql.SQL("CREATE DATABASE {}").format(
                    sql.Identifier(self.database_name(store_name))
                )
            )
            logger.info("Created PostgreSQL store %s", store_name)
        finally:
            cur.close()
            conn.close()

    def drop(self, store_name):
        _, sql = _driver()
        conn = self._connect()
        cur = conn.cursor()
        try:
            cur.execute(
                sql.SQL("DROP DATABASE IF EXISTS {}").format(
                    sql.Identifier(self.database_name(store_name))
                )
            )
            logger.info("Dropped PostgreSQL store %s", store_name)
        finally:
            cur.close()
            conn.close()

    def is_benign_already_applied_error(self, exc) -> bool:
        error = self.driver_error(exc)
        # psycopg exposes ``sqlstate``, psycopg2 ``pgcode``.
        code = getattr(error, "sqlstate", None) or getattr(error, "pgcode", None)
        return code in BENIGN_SQLSTATES
