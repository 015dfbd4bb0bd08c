"""RemoteStore backed directly by the workshop database.

Used when the shop-floor service runs next to the central database. Each call
opens its own session and commits before returning, so a successful return
means the change is durable.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gms.models.work_order import WorkOrder
from gms.schemas.inventory import InventoryItemRead
from gms.schemas.work_order import LineItemCreate, LineItemRead, WorkOrderRead
from gms.services.remote_store import NotFoundError, RemoteStoreError, ValidationRejected
from gms.services.workshop import InventoryService, WorkOrderService

logger = logging.getLogger(__name__)


def work_order_to_read(wo: WorkOrder) -> WorkOrderRead:
    return WorkOrderRead(
        id=wo.id,
        status=wo.status,
        customer_name=wo.customer_name,
        vehicle=wo.vehicle,
        vrm=wo.vrm,
        issue=wo.issue,
        is_urgent=wo.is_urgent,
        created_at=wo.created_at,
        last_updated_at=wo.last_updated_at,
        line_items=[
            LineItemRead(
                id=li.id,
                description=li.description,
                quantity=li.quantity,
                unit_price=li.unit_price,
                is_vatable=li.is_vatable,
                type=li.item_type,
            )
            for li in wo.line_items
        ],
    )


class DatabaseRemoteStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        try:
            async with self.session_factory() as session:
                yield session
        except SQLAlchemyError as exc:
            logger.error("Database error in remote store: %s", exc)
            raise RemoteStoreError(f"Database error: {exc}") from exc

    async def update_inventory_item(
        self, item_id: str, updates: dict[str, Any]
    ) -> InventoryItemRead:
        async with self._session() as session:
            try:
                item = await InventoryService(session).update_item(item_id, updates)
            except LookupError as exc:
                raise NotFoundError(str(exc)) from exc
            except ValueError as exc:
                raise ValidationRejected(str(exc)) from exc
            result = InventoryItemRead.model_validate(item)
            await session.commit()
        return result

    async def find_inventory_items_by_sku(self, sku: str) -> list[InventoryItemRead]:
        async with self._session() as session:
            items = await InventoryService(session).find_by_sku(sku)
            return [InventoryItemRead.model_validate(item) for item in items]

    async def append_line_item_to_work_order(
        self, work_order_id: str, line_item: LineItemCreate
    ) -> WorkOrderRead:
        async with self._session() as session:
            try:
                wo = await WorkOrderService(session).add_line_item(work_order_id, line_item)
            except LookupError as exc:
                raise NotFoundError(str(exc)) from exc
            result = work_order_to_read(wo)
            await session.commit()
        return result

    async def get_inventory_item(self, item_id: str) -> InventoryItemRead:
        async with self._session() as session:
            item = await InventoryService(session).get_item(item_id)
            if item is None:
                raise NotFoundError("Inventory item not found.")
            return InventoryItemRead.model_validate(item)

    async def get_work_order(self, work_order_id: str) -> WorkOrderRead:
        async with self._session() as session:
            wo = await WorkOrderService(session).get_work_order(work_order_id)
            if wo is None:
                raise NotFoundError("Work order not found.")
            return work_order_to_read(wo)
