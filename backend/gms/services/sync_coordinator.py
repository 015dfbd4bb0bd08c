"""Drains the offline action queue against the remote store.

One drain cycle:

1. Do nothing while offline.
2. Snapshot the queue. Actions queued during the cycle wait for the next
   trigger, which bounds how long a cycle can run.
3. Apply each action in FIFO order, one remote call at a time. Success removes
   the action; "not yet resolvable" and hard failures leave it queued and the
   cycle moves on. One failing action never blocks the rest.

There is no retry scheduling here. The next online transition, a manual
"sync now", or the next startup re-attempts whatever is still queued. A
permanently invalid action (e.g. one pointing at a deleted work order) is
retried on every trigger until someone discards it from the queue screen.
"""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import assert_never

from gms.models.enums import LineItemType, SyncOutcome
from gms.schemas.sync import (
    ActionResult,
    DrainReport,
    OfflineScanAction,
    QueuedAction,
    UpdateInventoryAction,
)
from gms.schemas.work_order import LineItemCreate
from gms.services.connectivity import ConnectivityMonitor
from gms.services.remote_store import RemoteStore
from gms.services.sync_queue import SyncQueue

logger = logging.getLogger(__name__)

RefreshCallback = Callable[[DrainReport], None] | Callable[[DrainReport], Awaitable[None]]


class ActionNotResolvable(Exception):
    """The action cannot be applied yet but may succeed on a later cycle."""


class SyncCoordinator:
    def __init__(
        self,
        queue: SyncQueue,
        remote: RemoteStore,
        monitor: ConnectivityMonitor,
    ):
        self.queue = queue
        self.remote = remote
        self.monitor = monitor
        self.last_report: DrainReport | None = None
        self._lock = asyncio.Lock()
        self._refresh_callbacks: list[RefreshCallback] = []

    @property
    def is_draining(self) -> bool:
        return self._lock.locked()

    def on_refresh(self, callback: RefreshCallback) -> None:
        """Register a callback run after a cycle that applied something."""
        self._refresh_callbacks.append(callback)

    # --- Triggers ---

    async def start(self) -> DrainReport:
        """Listen for connectivity changes and run the startup drain."""
        self.monitor.subscribe(self.on_connectivity_change)
        return await self.drain()

    def stop(self) -> None:
        self.monitor.unsubscribe(self.on_connectivity_change)

    async def on_connectivity_change(self, online: bool) -> None:
        if online:
            await self.drain()

    async def sync_now(self) -> DrainReport:
        return await self.drain()

    # --- Drain cycle ---

    async def drain(self) -> DrainReport:
        now = datetime.now(timezone.utc)
        if self._lock.locked():
            logger.info("Sync already in progress; ignoring trigger")
            return DrainReport(
                started_at=now, finished_at=now, skipped=True, remaining=len(self.queue)
            )
        if not self.monitor.is_online:
            logger.debug("Offline; skipping sync of %d actions", len(self.queue))
            return DrainReport(
                started_at=now, finished_at=now, offline=True, remaining=len(self.queue)
            )

        async with self._lock:
            report = DrainReport(started_at=now)
            snapshot = self.queue.list()
            if snapshot:
                logger.info("Online, processing sync queue (%d actions)", len(snapshot))

            for action in snapshot:
                if self.queue.get(action.id) is None:
                    # Discarded while an earlier action was in flight.
                    continue
                result = await self._process(action)
                report.results.append(result)
                report.attempted += 1
                if result.outcome == SyncOutcome.APPLIED:
                    report.applied += 1
                elif result.outcome == SyncOutcome.DEFERRED:
                    report.deferred += 1
                else:
                    report.failed += 1

            report.remaining = len(self.queue)
            report.finished_at = datetime.now(timezone.utc)
            self.last_report = report

        if snapshot:
            logger.info(
                "Sync finished: applied=%d deferred=%d failed=%d remaining=%d",
                report.applied,
                report.deferred,
                report.failed,
                report.remaining,
            )
        if report.applied:
            await self._run_refresh_callbacks(report)
        return report

    async def _process(self, action: QueuedAction) -> ActionResult:
        try:
            await self._apply(action)
        except ActionNotResolvable as exc:
            logger.warning(
                "Sync action %s (%s) not resolvable yet: %s", action.id, action.type, exc
            )
            return ActionResult(
                action_id=action.id,
                type=action.type,
                outcome=SyncOutcome.DEFERRED,
                detail=str(exc),
            )
        except Exception as exc:
            logger.error(
                "Failed to sync action %s (%s): %s",
                action.id,
                action.type,
                exc,
                exc_info=True,
            )
            return ActionResult(
                action_id=action.id,
                type=action.type,
                outcome=SyncOutcome.FAILED,
                detail=str(exc) or type(exc).__name__,
            )

        self.queue.remove(action.id)
        return ActionResult(action_id=action.id, type=action.type, outcome=SyncOutcome.APPLIED)

    async def _apply(self, action: QueuedAction) -> None:
        match action:
            case UpdateInventoryAction():
                await self._apply_inventory_update(action)
            case OfflineScanAction():
                await self._apply_offline_scan(action)
            case _:
                assert_never(action)

    async def _apply_inventory_update(self, action: UpdateInventoryAction) -> None:
        # A field-level patch is idempotent; replaying it is harmless.
        await self.remote.update_inventory_item(action.payload.item_id, action.payload.updates)

    async def _apply_offline_scan(self, action: OfflineScanAction) -> None:
        payload = action.payload
        matches = await self.remote.find_inventory_items_by_sku(payload.sku)
        if not matches:
            raise ActionNotResolvable(f"no inventory item matches SKU {payload.sku}")
        if len(matches) > 1:
            # No one is around to disambiguate during unattended sync.
            logger.info(
                "SKU %s matched %d items; using %s", payload.sku, len(matches), matches[0].id
            )
        item = matches[0]
        line_item = LineItemCreate(
            description=f"{item.name} ({item.brand})",
            quantity=payload.quantity,
            unit_price=item.price,
            is_vatable=True,
            type=LineItemType.PART,
        )
        await self.remote.append_line_item_to_work_order(payload.work_order_id, line_item)

    # --- Explicit discard ---

    def discard(self, action_id: str, reason: str) -> bool:
        """Drop an action without applying it. Always logged."""
        action = self.queue.get(action_id)
        if action is None:
            return False
        logger.warning(
            "Discarding sync action %s (%s): %s. Lost intent: %s",
            action.id,
            action.type,
            reason,
            action.describe(),
        )
        return self.queue.remove(action_id)

    async def _run_refresh_callbacks(self, report: DrainReport) -> None:
        for callback in list(self._refresh_callbacks):
            try:
                result = callback(report)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Post-sync refresh callback %r failed", callback)
