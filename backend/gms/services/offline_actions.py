"""Offline-aware user actions with an optimistic local projection.

Each action first updates the local projection so the screen responds
immediately, then either calls the remote store or queues the intent.

Actions with offline support (stock updates, scanning a part onto a work
order) never revert the projection on remote failure: the queue guarantees the
change is eventually applied. Actions without offline support (adding an
arbitrary line item) revert the projection, refetch the entity and re-raise.

The projection is never persisted. After a restart only the queue says what
is still unsynced.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from gms.models.enums import ActionDisposition, LineItemType
from gms.schemas.inventory import InventoryItemRead, InventoryItemUpdate
from gms.schemas.sync import (
    OfflineScanIntent,
    OfflineScanPayload,
    QueuedAction,
    UpdateInventoryIntent,
    UpdateInventoryPayload,
)
from gms.schemas.work_order import LineItemCreate, LineItemRead, WorkOrderRead
from gms.services.connectivity import ConnectivityMonitor
from gms.services.remote_store import (
    NotFoundError,
    RemoteStore,
    RemoteStoreError,
    ValidationRejected,
)
from gms.services.sync_queue import SyncQueue

logger = logging.getLogger(__name__)


class OfflineUnavailable(Exception):
    """The action needs the remote store and the device is offline."""


@dataclass
class ActionOutcome:
    disposition: ActionDisposition
    queued_action: QueuedAction | None = None
    item: InventoryItemRead | None = None
    work_order: WorkOrderRead | None = None
    candidates: list[InventoryItemRead] = field(default_factory=list)

    def to_wire(self) -> dict:
        return {
            "disposition": self.disposition.value,
            "queuedAction": (
                self.queued_action.model_dump(mode="json", by_alias=True)
                if self.queued_action else None
            ),
            "item": self.item.to_wire() if self.item else None,
            "workOrder": self.work_order.to_wire() if self.work_order else None,
            "candidates": [c.to_wire() for c in self.candidates],
        }


class InventoryProjection:
    """Local view of inventory items and work orders shown by the UI."""

    def __init__(self) -> None:
        self.items: dict[str, InventoryItemRead] = {}
        self.work_orders: dict[str, WorkOrderRead] = {}

    def apply_item_patch(
        self, item_id: str, updates: dict[str, Any]
    ) -> InventoryItemRead | None:
        """Apply a patch locally; returns the previous value for revert."""
        previous = self.items.get(item_id)
        if previous is None:
            return None
        patch = InventoryItemUpdate.model_validate(updates).model_dump(
            exclude_unset=True, exclude_none=True
        )
        self.items[item_id] = previous.model_copy(update=patch)
        return previous

    def revert_item(self, item_id: str, previous: InventoryItemRead | None) -> None:
        if previous is None:
            self.items.pop(item_id, None)
        else:
            self.items[item_id] = previous

    def put_item(self, item: InventoryItemRead) -> None:
        self.items[item.id] = item

    def append_line_item(
        self, work_order_id: str, line_item: LineItemCreate
    ) -> WorkOrderRead | None:
        """Append a provisional line item; returns the previous work order."""
        previous = self.work_orders.get(work_order_id)
        if previous is None:
            return None
        updated = previous.model_copy(deep=True)
        updated.line_items.append(
            LineItemRead(
                id=f"pending_{work_order_id}_{len(updated.line_items)}",
                **line_item.model_dump(),
            )
        )
        updated.last_updated_at = datetime.now(timezone.utc)
        self.work_orders[work_order_id] = updated
        return previous

    def revert_work_order(self, work_order_id: str, previous: WorkOrderRead | None) -> None:
        if previous is None:
            self.work_orders.pop(work_order_id, None)
        else:
            self.work_orders[work_order_id] = previous

    def put_work_order(self, work_order: WorkOrderRead) -> None:
        self.work_orders[work_order.id] = work_order


class OfflineActionService:
    def __init__(
        self,
        queue: SyncQueue,
        monitor: ConnectivityMonitor,
        remote: RemoteStore,
        projection: InventoryProjection | None = None,
    ):
        self.queue = queue
        self.monitor = monitor
        self.remote = remote
        self.projection = projection or InventoryProjection()

    async def update_inventory_item(
        self, item_id: str, updates: dict[str, Any]
    ) -> ActionOutcome:
        intent = UpdateInventoryIntent(
            payload=UpdateInventoryPayload(item_id=item_id, updates=updates)
        )
        patch = intent.payload.updates
        previous = self.projection.apply_item_patch(item_id, patch)

        if not self.monitor.is_online:
            action = self.queue.enqueue(intent)
            return ActionOutcome(ActionDisposition.QUEUED, queued_action=action)

        try:
            item = await self.remote.update_inventory_item(item_id, patch)
        except (NotFoundError, ValidationRejected):
            # Retrying would not help; undo the optimistic change.
            self.projection.revert_item(item_id, previous)
            raise
        except RemoteStoreError as exc:
            logger.warning(
                "Remote update of item %s failed (%s); queuing for later sync", item_id, exc
            )
            action = self.queue.enqueue(intent)
            return ActionOutcome(ActionDisposition.QUEUED, queued_action=action)

        self.projection.put_item(item)
        return ActionOutcome(ActionDisposition.APPLIED, item=item)

    async def scan_to_work_order(
        self, sku: str, quantity: int, work_order_id: str
    ) -> ActionOutcome:
        """Resolve a scanned SKU and add it to a work order.

        Online, several matches are handed back for the user to pick from.
        Offline, the scan is queued and resolved at sync time.
        """
        intent = OfflineScanIntent(
            payload=OfflineScanPayload(sku=sku, quantity=quantity, work_order_id=work_order_id)
        )
        if not self.monitor.is_online:
            action = self.queue.enqueue(intent)
            return ActionOutcome(ActionDisposition.QUEUED, queued_action=action)

        try:
            matches = await self.remote.find_inventory_items_by_sku(sku)
        except RemoteStoreError as exc:
            logger.warning("SKU lookup for %s failed (%s); queuing scan", sku, exc)
            action = self.queue.enqueue(intent)
            return ActionOutcome(ActionDisposition.QUEUED, queued_action=action)

        if not matches:
            raise NotFoundError(f'Part with SKU "{sku}" not found in inventory.')
        if len(matches) > 1:
            return ActionOutcome(ActionDisposition.NEEDS_SELECTION, candidates=matches)

        work_order = await self.add_part_to_work_order(matches[0], quantity, work_order_id)
        return ActionOutcome(ActionDisposition.APPLIED, item=matches[0], work_order=work_order)

    async def add_part_to_work_order(
        self, item: InventoryItemRead, quantity: int, work_order_id: str
    ) -> WorkOrderRead:
        line_item = LineItemCreate(
            description=f"{item.name} ({item.brand})",
            quantity=quantity,
            unit_price=item.price,
            is_vatable=True,
            type=LineItemType.PART,
        )
        return await self.add_line_item(work_order_id, line_item)

    async def add_line_item(self, work_order_id: str, line_item: LineItemCreate) -> WorkOrderRead:
        """Online-only: optimistic append, revert and refetch on failure."""
        if not self.monitor.is_online:
            raise OfflineUnavailable("Adding line items requires a connection.")

        previous = self.projection.append_line_item(work_order_id, line_item)
        try:
            work_order = await self.remote.append_line_item_to_work_order(work_order_id, line_item)
        except RemoteStoreError:
            self.projection.revert_work_order(work_order_id, previous)
            await self._refetch_work_order(work_order_id)
            raise
        self.projection.put_work_order(work_order)
        return work_order

    async def _refetch_work_order(self, work_order_id: str) -> None:
        try:
            self.projection.put_work_order(await self.remote.get_work_order(work_order_id))
        except NotFoundError:
            self.projection.revert_work_order(work_order_id, None)
        except RemoteStoreError as exc:
            logger.warning("Could not refetch work order %s: %s", work_order_id, exc)

    async def refresh(self) -> None:
        """Reload every projected entity from the remote store."""
        for item_id in list(self.projection.items):
            try:
                self.projection.put_item(await self.remote.get_inventory_item(item_id))
            except NotFoundError:
                self.projection.revert_item(item_id, None)
            except RemoteStoreError as exc:
                logger.warning("Could not refresh item %s: %s", item_id, exc)
        for work_order_id in list(self.projection.work_orders):
            await self._refetch_work_order(work_order_id)

    async def get_inventory_item(self, item_id: str) -> InventoryItemRead:
        """Fetch an item, falling back to the projection while offline."""
        if not self.monitor.is_online:
            cached = self.projection.items.get(item_id)
            if cached is None:
                raise OfflineUnavailable("Item is not available offline.")
            return cached
        item = await self.remote.get_inventory_item(item_id)
        self.projection.put_item(item)
        return item

    async def lookup_sku(self, sku: str) -> list[InventoryItemRead]:
        if not self.monitor.is_online:
            raise OfflineUnavailable("SKU lookup requires a connection.")
        items = await self.remote.find_inventory_items_by_sku(sku)
        for item in items:
            self.projection.put_item(item)
        return items

    async def get_work_order(self, work_order_id: str) -> WorkOrderRead:
        if not self.monitor.is_online:
            cached = self.projection.work_orders.get(work_order_id)
            if cached is None:
                raise OfflineUnavailable("Work order is not available offline.")
            return cached
        work_order = await self.remote.get_work_order(work_order_id)
        self.projection.put_work_order(work_order)
        return work_order
