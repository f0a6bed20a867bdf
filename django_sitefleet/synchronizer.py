"""
SchemaSynchronizer: applies the migration catalog to one tenant store.

Order of a full ``sync``:
    1. canonical units
    2. auxiliary units (import bookkeeping tables), unless excluded
    3. the optional ``discover(store)`` hook; its rows are committed before
       the next pass reads them
    4. one unit group per non-system content type registered in the store
    5. the alter ledger

A unit whose database error the store's vendor classifies as "already
applied" is recorded as skipped. Any other database error stops the run for
this store with ``MigrationError``, carrying the outcomes collected so far.
"""

import logging
from dataclasses import dataclass, field

from django.db import DatabaseError

from .content_types import content_type_units
from .exceptions import MigrationError
from .schema.catalog import APPLIED, FAILED, SKIPPED, MigrationCatalog
from .signals import tenant_synced

logger = logging.getLogger(__name__)


@dataclass
class UnitOutcome:
    name: str
    status: str
    error: str = ""


@dataclass
class SyncReport:
    store_name: str
    outcomes: list = field(default_factory=list)
    discovery: object = None

    def record(self, name, status, error=None):
        self.outcomes.append(UnitOutcome(name, status, str(error) if error else ""))

    def names(self, status):
        return [outcome.name for outcome in self.outcomes if outcome.status == status]

    @property
    def applied_count(self) -> int:
        return len(self.names(APPLIED))

    @property
    def skipped_count(self) -> int:
        return len(self.names(SKIPPED))

    @property
    def failed(self):
        return [outcome for outcome in self.outcomes if outcome.status == FAILED]


class SchemaSynchronizer:
    def sync(self, store, catalog=None, discover=None, include_auxiliary=True):
        catalog = catalog or MigrationCatalog.default()
        report = SyncReport(store.store_name)

        self._run(store, catalog.canonical, report)
        if include_auxiliary:
            self._run(store, catalog.auxiliary, report)
        if discover is not None:
            report.discovery = discover(store)
        self._run(store, content_type_units(store), report)
        self._run(store, catalog.alter_ledger, report)

        logger.info(
            "Synchronized %s: %d applied, %d skipped",
            store.store_name,
            report.applied_count,
            report.skipped_count,
        )
        tenant_synced.send(
            sender=self.__class__, store_name=store.store_name, report=report
        )
        return report

    def apply(self, store, units, report=None):
        """Apply an arbitrary list of units with the same skip/fail rule."""
        report = report or SyncReport(store.store_name)
        self._run(store, units, report)
        return report

    def _run(self, store, units, report):
        for unit in units:
            try:
                status = unit.apply(store)
            except DatabaseError as exc:
                if store.is_benign_already_applied_error(exc):
                    logger.debug("%s: %s already applied (%s)", store.store_name, unit.name, exc)
                    report.record(unit.name, SKIPPED)
                    continue

                logger.error("%s: %s failed: %s", store.store_name, unit.name, exc)
                report.record(unit.name, FAILED, exc)
                raise MigrationError(unit.name, store.store_name, exc, report=report) from exc

            report.record(unit.name, status)
