import asyncio

import httpx

from gms.services.connectivity import ConnectivityMonitor


def test_set_online_fires_once_per_edge():
    monitor = ConnectivityMonitor(online=True)
    events = []
    monitor.subscribe(events.append)

    assert monitor.set_online(True) is False
    assert monitor.set_online(False) is True
    assert monitor.set_online(False) is False
    assert monitor.set_online(True) is True
    assert monitor.set_online(True) is False

    assert events == [False, True]
    assert monitor.is_online is True


def test_unsubscribe_stops_events():
    monitor = ConnectivityMonitor(online=False)
    events = []
    monitor.subscribe(events.append)
    monitor.unsubscribe(events.append)

    monitor.set_online(True)

    assert events == []


def test_listener_error_does_not_block_other_listeners():
    monitor = ConnectivityMonitor(online=False)
    events = []

    def broken(online):
        raise RuntimeError("listener bug")

    monitor.subscribe(broken)
    monitor.subscribe(events.append)

    assert monitor.set_online(True) is True
    assert events == [True]


async def test_async_listener_is_scheduled_and_awaitable():
    monitor = ConnectivityMonitor(online=False)
    events = []

    async def listener(online):
        await asyncio.sleep(0)
        events.append(online)

    monitor.subscribe(listener)
    monitor.set_online(True)
    assert events == []

    await monitor.wait_for_listeners()

    assert events == [True]


def test_async_listener_without_loop_is_not_run():
    monitor = ConnectivityMonitor(online=False)
    events = []

    async def listener(online):
        events.append(online)

    monitor.subscribe(listener)

    assert monitor.set_online(True) is True
    assert events == []


async def test_probe_any_response_means_online():
    transport = httpx.MockTransport(lambda request: httpx.Response(503))
    monitor = ConnectivityMonitor(
        online=False, probe_url="http://backend.local/health", transport=transport
    )

    assert await monitor.probe() is True
    assert monitor.is_online is True


async def test_probe_transport_error_means_offline():
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    monitor = ConnectivityMonitor(
        online=True, probe_url="http://backend.local/health", transport=httpx.MockTransport(handler)
    )
    events = []
    monitor.subscribe(events.append)

    assert await monitor.probe() is False
    assert events == [False]


async def test_probe_without_url_keeps_state():
    monitor = ConnectivityMonitor(online=False)
    assert await monitor.probe() is False
    monitor.start()
    assert monitor._probe_task is None


async def test_probe_loop_start_and_stop():
    hits = []

    def handler(request):
        hits.append(request.url.path)
        return httpx.Response(200)

    monitor = ConnectivityMonitor(
        online=False,
        probe_url="http://backend.local/health",
        probe_interval=0.01,
        transport=httpx.MockTransport(handler),
    )
    monitor.start()
    for _ in range(50):
        if monitor.is_online:
            break
        await asyncio.sleep(0.01)
    await monitor.stop()

    assert monitor.is_online is True
    assert hits
    assert monitor._probe_task is None
