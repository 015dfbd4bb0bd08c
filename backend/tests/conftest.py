import pytest

from gms.services.connectivity import ConnectivityMonitor
from gms.services.queue_store import MemoryStorage, PersistentQueueStore
from gms.services.sync_coordinator import SyncCoordinator
from gms.services.sync_queue import SyncQueue
from tests.helpers import FakeRemoteStore


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def store(storage):
    return PersistentQueueStore(storage, key="test_sync_queue")


@pytest.fixture
def queue(store):
    return SyncQueue(store)


@pytest.fixture
def monitor():
    return ConnectivityMonitor(online=True)


@pytest.fixture
def remote():
    return FakeRemoteStore()


@pytest.fixture
def coordinator(queue, remote, monitor):
    return SyncCoordinator(queue, remote, monitor)
