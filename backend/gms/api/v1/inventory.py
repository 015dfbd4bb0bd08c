"""Inventory endpoints. Stock updates keep working while offline."""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query

from gms.core.deps import get_actions
from gms.services.offline_actions import OfflineActionService

router = APIRouter(prefix="/inventory", tags=["inventory"])


@router.get("", response_model=dict)
async def lookup_by_sku(
    actions: Annotated[OfflineActionService, Depends(get_actions)],
    sku: str = Query(min_length=1, max_length=64),
):
    """Resolve a SKU. May return several items; the UI disambiguates."""
    items = await actions.lookup_sku(sku)
    return {"success": True, "data": [item.to_wire() for item in items]}


@router.get("/{item_id}", response_model=dict)
async def get_item(
    item_id: str,
    actions: Annotated[OfflineActionService, Depends(get_actions)],
):
    item = await actions.get_inventory_item(item_id)
    return {"success": True, "data": item.to_wire()}


@router.patch("/{item_id}", response_model=dict)
async def update_item(
    item_id: str,
    updates: Annotated[dict[str, Any], Body()],
    actions: Annotated[OfflineActionService, Depends(get_actions)],
):
    """Apply a field-level patch now, or queue it if the backend is unreachable."""
    outcome = await actions.update_inventory_item(item_id, updates)
    return {"success": True, "data": outcome.to_wire()}
