"""
FleetSyncDriver: brings every active tenant store up to the current catalog.

Targets are read from the registry once. Each target is synchronized in
isolation on a bounded thread pool with its own ``StoreHandle``; one tenant
failing (or timing out) is recorded and never stops the others. A fleet run
is never rolled back as a whole.

Only ``active`` tenants are targets. Pending tenants are still being
provisioned and failed tenants have no usable store, so both are skipped.

A tenant times out when its own sync overruns ``TENANT_SYNC_TIMEOUT``,
counted from the moment a worker starts on it. The overrunning worker cannot
be interrupted; the run returns once it has finished, with that tenant
reported as failed.
"""

import logging
import threading
import time
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait
from dataclasses import dataclass, field

from .cache import template_cache
from .conf import settings
from .discovery.engine import ContentTypeDiscoveryEngine
from .exceptions import TenantSyncTimeout
from .registry import TenantRegistry
from .store import CONTROL_PLANE_STORE_NAME, StoreHandle
from .synchronizer import SchemaSynchronizer

logger = logging.getLogger(__name__)

POLL_INTERVAL = 0.05


@dataclass
class FleetSyncResult:
    succeeded: list = field(default_factory=list)
    failed: list = field(default_factory=list)
    cancelled: list = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


class _Cancelled(Exception):
    pass


class FleetSyncDriver:
    def __init__(
        self,
        workers=None,
        timeout=None,
        include_control_plane=None,
        synchronizer=None,
        registry=None,
    ):
        self.workers = workers or settings.FLEET_SYNC_WORKERS
        self.timeout = timeout if timeout is not None else settings.TENANT_SYNC_TIMEOUT
        self.include_control_plane = (
            include_control_plane
            if include_control_plane is not None
            else settings.SYNC_CONTROL_PLANE
        )
        self.synchronizer = synchronizer or SchemaSynchronizer()
        self.registry = registry or TenantRegistry()
        self._cancelled = threading.Event()

    def cancel(self):
        """Stop handing out targets. Stores already syncing run to completion."""
        self._cancelled.set()

    def targets(self):
        """Store names to synchronize, read from the registry once."""
        targets = [tenant.store_name for tenant in self.registry.active_tenants()]
        if self.include_control_plane:
            targets.insert(0, CONTROL_PLANE_STORE_NAME)
        return targets

    def sync_all(self) -> FleetSyncResult:
        targets = self.targets()
        logger.info(
            "Synchronizing %d store(s) with %d worker(s)", len(targets), self.workers
        )

        started = {}
        outcomes = {}

        def run(store_name):
            started[store_name] = time.monotonic()
            return self.sync_store(store_name)

        with ThreadPoolExecutor(
            max_workers=self.workers, thread_name_prefix="sitefleet-sync"
        ) as executor:
            pending = {executor.submit(run, name): name for name in targets}
            while pending:
                done, _ = wait(
                    pending, timeout=POLL_INTERVAL, return_when=FIRST_COMPLETED
                )
                for future in done:
                    outcomes[pending.pop(future)] = future.exception()
                self._expire_overrunning(pending, started, outcomes)

        result = FleetSyncResult()
        for store_name in targets:
            error = outcomes[store_name]
            if error is None:
                result.succeeded.append(store_name)
            elif isinstance(error, _Cancelled):
                result.cancelled.append(store_name)
            else:
                logger.error("Sync of %s failed: %s", store_name, error)
                result.failed.append((store_name, error))

        logger.info(
            "Fleet sync finished: %d succeeded, %d failed, %d cancelled",
            len(result.succeeded),
            len(result.failed),
            len(result.cancelled),
        )
        return result

    def _expire_overrunning(self, pending, started, outcomes):
        if self.timeout is None:
            return
        now = time.monotonic()
        for future, store_name in list(pending.items()):
            start = started.get(store_name)
            if future.done() or start is None or now - start < self.timeout:
                continue
            del pending[future]
            outcomes[store_name] = TenantSyncTimeout(
                f"Store '{store_name}' did not finish syncing within "
                f"{self.timeout} seconds."
            )

    def sync_store(self, store_name):
        """Synchronize one store on the calling thread."""
        if self._cancelled.is_set():
            raise _Cancelled(store_name)

        if store_name == CONTROL_PLANE_STORE_NAME:
            store = StoreHandle.for_control_plane()
        else:
            store = StoreHandle.open(store_name)

        with store:
            report = self.synchronizer.sync(store, discover=self._discover_hook())
        template_cache.invalidate(store_name)
        return report

    def _discover_hook(self):
        root = settings.TEMPLATES_ROOT
        if root is None:
            return None

        def discover(store):
            return ContentTypeDiscoveryEngine(store).discover_from_root(root)

        return discover
