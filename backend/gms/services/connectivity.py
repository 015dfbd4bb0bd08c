"""Online/offline tracking with edge-triggered transition events."""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable

import httpx

logger = logging.getLogger(__name__)

TransitionListener = Callable[[bool], None] | Callable[[bool], Awaitable[None]]


class ConnectivityMonitor:
    """Holds the current connectivity state and fires once per edge.

    State is reported either by the UI (the browser's online/offline events
    relayed through the local API) or by the optional HTTP probe loop.
    """

    def __init__(
        self,
        online: bool = True,
        probe_url: str = "",
        probe_interval: float = 30.0,
        probe_timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._online = online
        self._listeners: list[TransitionListener] = []
        self._tasks: set[asyncio.Task] = set()
        self.probe_url = probe_url
        self.probe_interval = probe_interval
        self.probe_timeout = probe_timeout
        self._transport = transport
        self._probe_task: asyncio.Task | None = None

    @property
    def is_online(self) -> bool:
        return self._online

    def subscribe(self, listener: TransitionListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: TransitionListener) -> None:
        self._listeners = [l for l in self._listeners if l != listener]

    def set_online(self, online: bool) -> bool:
        """Record a status report. Returns True if this was a transition."""
        if online == self._online:
            return False
        self._online = online
        logger.info("Connectivity changed: %s", "online" if online else "offline")
        for listener in list(self._listeners):
            self._dispatch(listener, online)
        return True

    def _dispatch(self, listener: TransitionListener, online: bool) -> None:
        try:
            result = listener(online)
        except Exception:
            logger.exception("Connectivity listener %r failed", listener)
            return
        if inspect.isawaitable(result):
            try:
                asyncio.get_running_loop()
            except RuntimeError:
                logger.error("No running event loop; async listener %r not run", listener)
                if inspect.iscoroutine(result):
                    result.close()
                return
            task = asyncio.ensure_future(result)
            self._tasks.add(task)
            task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Connectivity listener task failed", exc_info=task.exception())

    async def wait_for_listeners(self) -> None:
        """Wait until every scheduled async listener has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # --- Active probing ---

    async def probe(self) -> bool:
        """Check the probe URL once and record the result.

        Any HTTP response means the network path works; only transport errors
        and timeouts count as offline.
        """
        if not self.probe_url:
            return self._online
        try:
            async with httpx.AsyncClient(
                timeout=self.probe_timeout, transport=self._transport
            ) as client:
                await client.get(self.probe_url)
            reachable = True
        except httpx.HTTPError as exc:
            logger.debug("Connectivity probe to %s failed: %s", self.probe_url, exc)
            reachable = False
        self.set_online(reachable)
        return reachable

    async def _probe_loop(self) -> None:
        while True:
            await self.probe()
            await asyncio.sleep(self.probe_interval)

    def start(self) -> None:
        """Start periodic probing if a probe URL is configured."""
        if not self.probe_url or self._probe_task is not None:
            return
        self._probe_task = asyncio.create_task(self._probe_loop())
        logger.info(
            "Connectivity probe started: %s every %.0fs", self.probe_url, self.probe_interval
        )

    async def stop(self) -> None:
        if self._probe_task is not None:
            self._probe_task.cancel()
            try:
                await self._probe_task
            except asyncio.CancelledError:
                pass
            self._probe_task = None
        for task in list(self._tasks):
            task.cancel()
        await asyncio.gather(*list(self._tasks), return_exceptions=True)
        self._tasks.clear()
