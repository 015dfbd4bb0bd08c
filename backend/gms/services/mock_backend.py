"""In-memory RemoteStore seeded with demo data.

Stands in for the central backend during development and demos. Mirrors the
central API's rules: negative stock is rejected, unknown ids raise
``NotFoundError``, line item ids are ``li_{workOrderId}_{n}``.
"""

import asyncio
import copy
import logging
from datetime import datetime, timezone
from typing import Any

from gms.schemas.inventory import InventoryItemRead, InventoryItemUpdate
from gms.schemas.work_order import LineItemCreate, LineItemRead, WorkOrderRead
from gms.seed import SEED, generate_demo_data
from gms.services.remote_store import NotFoundError, ValidationRejected

logger = logging.getLogger(__name__)


class MockRemoteStore:
    def __init__(self, seed: int | None = SEED, latency_ms: int = 0):
        self.latency_ms = latency_ms
        self.inventory: dict[str, InventoryItemRead] = {}
        self.work_orders: dict[str, WorkOrderRead] = {}
        if seed is not None:
            self._load_seed(seed)

    def _load_seed(self, seed: int) -> None:
        data = generate_demo_data(seed)
        for row in data["inventory"]:
            self.inventory[row["id"]] = InventoryItemRead.model_validate(row)
        for row in data["work_orders"]:
            row = copy.deepcopy(row)
            row["line_items"] = [
                {**li, "type": li.pop("item_type")} for li in row["line_items"]
            ]
            self.work_orders[row["id"]] = WorkOrderRead.model_validate(row)
        logger.debug(
            "Mock backend seeded with %d items and %d work orders",
            len(self.inventory),
            len(self.work_orders),
        )

    async def _delay(self) -> None:
        if self.latency_ms:
            await asyncio.sleep(self.latency_ms / 1000)

    def add_inventory_item(self, item: InventoryItemRead) -> None:
        self.inventory[item.id] = item.model_copy(deep=True)

    def add_work_order(self, work_order: WorkOrderRead) -> None:
        self.work_orders[work_order.id] = work_order.model_copy(deep=True)

    # --- RemoteStore ---

    async def update_inventory_item(
        self, item_id: str, updates: dict[str, Any]
    ) -> InventoryItemRead:
        await self._delay()
        item = self.inventory.get(item_id)
        if item is None:
            raise NotFoundError("Inventory item not found")
        stock_qty = updates.get("stockQty", updates.get("stock_qty"))
        if stock_qty is not None and stock_qty < 0:
            raise ValidationRejected("Stock quantity cannot be negative.")
        try:
            patch = InventoryItemUpdate.model_validate(updates).model_dump(
                exclude_unset=True, exclude_none=True
            )
        except ValueError as exc:
            raise ValidationRejected(str(exc)) from exc
        updated = item.model_copy(update=patch)
        self.inventory[item_id] = updated
        return updated.model_copy()

    async def find_inventory_items_by_sku(self, sku: str) -> list[InventoryItemRead]:
        await self._delay()
        wanted = sku.strip().upper()
        return [
            item.model_copy()
            for item in self.inventory.values()
            if item.sku.upper() == wanted
        ]

    async def append_line_item_to_work_order(
        self, work_order_id: str, line_item: LineItemCreate
    ) -> WorkOrderRead:
        await self._delay()
        wo = self.work_orders.get(work_order_id)
        if wo is None:
            raise NotFoundError("Work order not found")
        new_item = LineItemRead(
            id=f"li_{work_order_id}_{len(wo.line_items)}",
            **line_item.model_dump(),
        )
        wo.line_items.append(new_item)
        wo.last_updated_at = datetime.now(timezone.utc)
        return wo.model_copy(deep=True)

    async def get_inventory_item(self, item_id: str) -> InventoryItemRead:
        await self._delay()
        item = self.inventory.get(item_id)
        if item is None:
            raise NotFoundError("Inventory item not found")
        return item.model_copy()

    async def get_work_order(self, work_order_id: str) -> WorkOrderRead:
        await self._delay()
        wo = self.work_orders.get(work_order_id)
        if wo is None:
            raise NotFoundError("Work order not found")
        return wo.model_copy(deep=True)
