"""Factories and a scriptable RemoteStore double shared by the tests."""

from datetime import datetime, timezone
from typing import Any

from gms.models.enums import WorkOrderStatus
from gms.schemas.inventory import InventoryItemRead, InventoryItemUpdate
from gms.schemas.sync import (
    OfflineScanIntent,
    OfflineScanPayload,
    UpdateInventoryIntent,
    UpdateInventoryPayload,
)
from gms.schemas.work_order import LineItemCreate, LineItemRead, WorkOrderRead
from gms.services.remote_store import NotFoundError


def make_item(
    item_id: str = "inv_1",
    sku: str = "BOS-BR-0001",
    name: str = "Brake Pads Pro",
    brand: str = "Bosch",
    price: int = 4599,
    stock_qty: int = 10,
) -> InventoryItemRead:
    return InventoryItemRead(
        id=item_id,
        sku=sku,
        name=name,
        brand=brand,
        stock_qty=stock_qty,
        low_stock_threshold=5,
        price=price,
    )


def make_work_order(work_order_id: str = "WO-1") -> WorkOrderRead:
    now = datetime(2026, 10, 1, 9, 0, tzinfo=timezone.utc)
    return WorkOrderRead(
        id=work_order_id,
        status=WorkOrderStatus.IN_PROGRESS,
        customer_name="Jane Doe",
        vehicle="Ford Focus",
        vrm="AB12 CDE",
        issue="Grinding noise when braking.",
        created_at=now,
        last_updated_at=now,
    )


def stock_intent(item_id: str = "inv_1", qty: int = 5) -> UpdateInventoryIntent:
    return UpdateInventoryIntent(
        payload=UpdateInventoryPayload(item_id=item_id, updates={"stockQty": qty})
    )


def scan_intent(
    sku: str = "BOS-BR-0001", work_order_id: str = "WO-1", quantity: int = 1
) -> OfflineScanIntent:
    return OfflineScanIntent(
        payload=OfflineScanPayload(sku=sku, quantity=quantity, work_order_id=work_order_id)
    )


class FakeRemoteStore:
    """Scriptable RemoteStore that records every call in order.

    ``fail(key, exc, ...)`` queues exceptions raised by the next calls that
    touch ``key`` (an item id, a SKU or a work order id).
    """

    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.items: dict[str, InventoryItemRead] = {}
        self.work_orders: dict[str, WorkOrderRead] = {}
        self.errors: dict[str, list[Exception]] = {}

    def add_item(self, item: InventoryItemRead) -> InventoryItemRead:
        self.items[item.id] = item
        return item

    def add_work_order(self, work_order: WorkOrderRead) -> WorkOrderRead:
        self.work_orders[work_order.id] = work_order
        return work_order

    def fail(self, key: str, *excs: Exception) -> None:
        self.errors.setdefault(key, []).extend(excs)

    def _maybe_fail(self, key: str) -> None:
        pending = self.errors.get(key)
        if pending:
            raise pending.pop(0)

    async def update_inventory_item(self, item_id: str, updates: dict[str, Any]):
        self.calls.append(("update_inventory_item", item_id, dict(updates)))
        self._maybe_fail(item_id)
        if item_id not in self.items:
            raise NotFoundError("Inventory item not found")
        patch = InventoryItemUpdate.model_validate(updates).model_dump(exclude_unset=True)
        self.items[item_id] = self.items[item_id].model_copy(update=patch)
        return self.items[item_id]

    async def find_inventory_items_by_sku(self, sku: str):
        self.calls.append(("find_inventory_items_by_sku", sku))
        self._maybe_fail(sku)
        return [i for i in self.items.values() if i.sku.upper() == sku.upper()]

    async def append_line_item_to_work_order(self, work_order_id: str, line_item: LineItemCreate):
        self.calls.append(("append_line_item_to_work_order", work_order_id, line_item))
        self._maybe_fail(work_order_id)
        wo = self.work_orders.get(work_order_id)
        if wo is None:
            raise NotFoundError("Work order not found")
        wo.line_items.append(
            LineItemRead(id=f"li_{work_order_id}_{len(wo.line_items)}", **line_item.model_dump())
        )
        return wo.model_copy(deep=True)

    async def get_inventory_item(self, item_id: str):
        self.calls.append(("get_inventory_item", item_id))
        if item_id not in self.items:
            raise NotFoundError("Inventory item not found")
        return self.items[item_id]

    async def get_work_order(self, work_order_id: str):
        self.calls.append(("get_work_order", work_order_id))
        if work_order_id not in self.work_orders:
            raise NotFoundError("Work order not found")
        return self.work_orders[work_order_id].model_copy(deep=True)

