"""Application-owned wiring of the offline sync subsystem.

Startup builds exactly one of each component and hands them to whoever needs
them; nothing here is a module-level singleton, so tests can build as many
isolated runtimes as they like.
"""

import logging
from dataclasses import dataclass

from gms.config import Settings
from gms.services.connectivity import ConnectivityMonitor
from gms.services.offline_actions import OfflineActionService
from gms.services.queue_store import (
    FileStorage,
    KeyValueStorage,
    MemoryStorage,
    PersistentQueueStore,
    RedisStorage,
)
from gms.services.remote_store import HttpRemoteStore, RemoteStore
from gms.services.sync_coordinator import SyncCoordinator
from gms.services.sync_queue import SyncQueue

logger = logging.getLogger(__name__)


@dataclass
class SyncRuntime:
    queue: SyncQueue
    monitor: ConnectivityMonitor
    remote: RemoteStore
    coordinator: SyncCoordinator
    actions: OfflineActionService

    async def start(self) -> None:
        self.coordinator.on_refresh(self._refresh_projection)
        await self.coordinator.start()
        self.monitor.start()

    async def stop(self) -> None:
        self.coordinator.stop()
        await self.monitor.stop()

    async def _refresh_projection(self, report) -> None:
        await self.actions.refresh()


def build_storage(settings: Settings) -> KeyValueStorage:
    backend = settings.QUEUE_STORAGE_BACKEND.lower()
    if backend == "file":
        return FileStorage(settings.QUEUE_STORAGE_DIR)
    if backend == "redis":
        return RedisStorage.from_url(settings.REDIS_URL)
    if backend == "memory":
        logger.warning("Using in-memory queue storage; pending actions will not survive restart")
        return MemoryStorage()
    raise ValueError(f"Unknown QUEUE_STORAGE_BACKEND: {settings.QUEUE_STORAGE_BACKEND}")


def build_remote(settings: Settings) -> RemoteStore:
    backend = settings.REMOTE_BACKEND.lower()
    if backend == "http":
        if not settings.REMOTE_BASE_URL:
            raise ValueError("REMOTE_BASE_URL is required when REMOTE_BACKEND=http")
        return HttpRemoteStore(
            settings.REMOTE_BASE_URL,
            token=settings.REMOTE_API_TOKEN,
            timeout=settings.REMOTE_TIMEOUT_SECONDS,
        )
    if backend == "database":
        from gms.database import async_session_factory
        from gms.services.remote_database import DatabaseRemoteStore

        return DatabaseRemoteStore(async_session_factory)
    if backend == "mock":
        from gms.services.mock_backend import MockRemoteStore

        return MockRemoteStore(latency_ms=settings.MOCK_LATENCY_MS)
    raise ValueError(f"Unknown REMOTE_BACKEND: {settings.REMOTE_BACKEND}")


def build_runtime(
    settings: Settings,
    storage: KeyValueStorage | None = None,
    remote: RemoteStore | None = None,
) -> SyncRuntime:
    store = PersistentQueueStore(
        storage if storage is not None else build_storage(settings),
        key=settings.QUEUE_STORAGE_KEY,
    )
    queue = SyncQueue(store)
    monitor = ConnectivityMonitor(
        online=settings.START_ONLINE,
        probe_url=settings.CONNECTIVITY_PROBE_URL,
        probe_interval=settings.CONNECTIVITY_PROBE_INTERVAL_SECONDS,
        probe_timeout=settings.CONNECTIVITY_PROBE_TIMEOUT_SECONDS,
    )
    remote = remote if remote is not None else build_remote(settings)
    return SyncRuntime(
        queue=queue,
        monitor=monitor,
        remote=remote,
        coordinator=SyncCoordinator(queue, remote, monitor),
        actions=OfflineActionService(queue, monitor, remote),
    )
