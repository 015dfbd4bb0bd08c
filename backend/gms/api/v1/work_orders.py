"""Work order endpoints: part scanning (offline-capable) and line items (online only)."""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import Field

from gms.core.deps import get_actions
from gms.schemas import CamelModel
from gms.schemas.work_order import LineItemCreate
from gms.services.offline_actions import OfflineActionService

router = APIRouter(prefix="/work-orders", tags=["work-orders"])


class ScanRequest(CamelModel):
    sku: str = Field(min_length=1, max_length=64)
    quantity: int = Field(default=1, ge=1)


class SelectPartRequest(CamelModel):
    item_id: str = Field(min_length=1)
    quantity: int = Field(default=1, ge=1)


@router.get("/{work_order_id}", response_model=dict)
async def get_work_order(
    work_order_id: str,
    actions: Annotated[OfflineActionService, Depends(get_actions)],
):
    work_order = await actions.get_work_order(work_order_id)
    return {"success": True, "data": work_order.to_wire()}


@router.post("/{work_order_id}/scan", response_model=dict)
async def scan_part(
    work_order_id: str,
    data: ScanRequest,
    actions: Annotated[OfflineActionService, Depends(get_actions)],
):
    """Add a scanned part.

    Disposition is ``applied``, ``queued`` (offline, resolved at sync time) or
    ``needs_selection`` (several parts share the SKU; see ``candidates``).
    """
    outcome = await actions.scan_to_work_order(data.sku, data.quantity, work_order_id)
    return {"success": True, "data": outcome.to_wire()}


@router.post("/{work_order_id}/parts", response_model=dict)
async def add_selected_part(
    work_order_id: str,
    data: SelectPartRequest,
    actions: Annotated[OfflineActionService, Depends(get_actions)],
):
    """Add the part the user picked after a multi-match scan."""
    item = await actions.get_inventory_item(data.item_id)
    work_order = await actions.add_part_to_work_order(item, data.quantity, work_order_id)
    return {"success": True, "data": work_order.to_wire()}


@router.post("/{work_order_id}/line-items", response_model=dict)
async def add_line_item(
    work_order_id: str,
    data: LineItemCreate,
    actions: Annotated[OfflineActionService, Depends(get_actions)],
):
    work_order = await actions.add_line_item(work_order_id, data)
    return {"success": True, "data": work_order.to_wire()}
