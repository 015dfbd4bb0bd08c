"""Inventory and work order services backed by the workshop database."""

import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from gms.models.inventory import InventoryItem
from gms.models.work_order import WorkOrder, WorkOrderLineItem
from gms.schemas.inventory import InventoryItemUpdate
from gms.schemas.work_order import LineItemCreate

logger = logging.getLogger(__name__)


class InventoryService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_item(self, item_id: str) -> InventoryItem | None:
        return await self.db.get(InventoryItem, item_id)

    async def find_by_sku(self, sku: str) -> list[InventoryItem]:
        """Exact, case-insensitive SKU match in stable id order."""
        result = await self.db.execute(
            select(InventoryItem)
            .where(func.upper(InventoryItem.sku) == sku.strip().upper())
            .order_by(InventoryItem.id)
        )
        return list(result.scalars().all())

    async def update_item(self, item_id: str, updates: dict[str, Any]) -> InventoryItem:
        """Apply a field-level merge patch.

        Raises LookupError if the item does not exist and ValueError if the
        patch is invalid (unknown field, negative stock).
        """
        item = await self.get_item(item_id)
        if item is None:
            raise LookupError("Inventory item not found.")

        stock_qty = updates.get("stockQty", updates.get("stock_qty"))
        if stock_qty is not None and stock_qty < 0:
            raise ValueError("Stock quantity cannot be negative.")
        patch = InventoryItemUpdate.model_validate(updates).model_dump(
            exclude_unset=True, exclude_none=True
        )
        for field, value in patch.items():
            setattr(item, field, value)
        await self.db.flush()
        return item


class WorkOrderService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_work_order(self, work_order_id: str) -> WorkOrder | None:
        return await self.db.get(WorkOrder, work_order_id)

    async def add_line_item(self, work_order_id: str, data: LineItemCreate) -> WorkOrder:
        """Append a line item at the end of the work order.

        Raises LookupError if the work order does not exist.
        """
        wo = await self.get_work_order(work_order_id)
        if wo is None:
            raise LookupError("Work order not found.")

        position = len(wo.line_items)
        wo.line_items.append(WorkOrderLineItem(
            id=f"li_{work_order_id}_{position}",
            position=position,
            description=data.description,
            quantity=data.quantity,
            unit_price=data.unit_price,
            is_vatable=data.is_vatable,
            item_type=data.type,
        ))
        wo.last_updated_at = datetime.now(timezone.utc)
        await self.db.flush()
        await self.db.refresh(wo)
        return wo
