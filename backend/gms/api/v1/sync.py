"""Offline queue endpoints backing the pending badge and the queue review screen."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from gms.core.deps import get_coordinator, get_monitor, get_sync_queue
from gms.schemas.sync import (
    ConnectivityReport,
    DiscardRequest,
    QueuedActionRead,
    SyncStatusRead,
)
from gms.services.connectivity import ConnectivityMonitor
from gms.services.sync_coordinator import SyncCoordinator
from gms.services.sync_queue import SyncQueue

router = APIRouter(prefix="/sync", tags=["sync"])


@router.get("/status", response_model=dict)
async def sync_status(
    queue: Annotated[SyncQueue, Depends(get_sync_queue)],
    monitor: Annotated[ConnectivityMonitor, Depends(get_monitor)],
    coordinator: Annotated[SyncCoordinator, Depends(get_coordinator)],
):
    """Connectivity, pending action count and the most recent drain report."""
    data = SyncStatusRead(
        online=monitor.is_online,
        pending_count=queue.pending_count,
        draining=coordinator.is_draining,
        last_report=coordinator.last_report,
    )
    return {"success": True, "data": data.to_wire()}


@router.get("/queue", response_model=dict)
async def list_queue(queue: Annotated[SyncQueue, Depends(get_sync_queue)]):
    """Pending actions in replay order, each with a plain-language description."""
    items = [
        QueuedActionRead(
            id=action.id,
            type=action.type,
            timestamp=action.timestamp,
            payload=action.payload.model_dump(mode="json", by_alias=True),
            description=action.describe(),
        ).to_wire()
        for action in queue.list()
    ]
    return {"success": True, "data": items, "meta": {"total": len(items)}}


@router.post("/run", response_model=dict)
async def sync_now(coordinator: Annotated[SyncCoordinator, Depends(get_coordinator)]):
    """Manual "Sync Now". Offline or already-running syncs are reported, not errors."""
    report = await coordinator.sync_now()
    return {"success": True, "data": report.to_wire()}


@router.post("/connectivity", response_model=dict)
async def report_connectivity(
    data: ConnectivityReport,
    monitor: Annotated[ConnectivityMonitor, Depends(get_monitor)],
):
    """The UI relays the browser's online/offline events here."""
    changed = monitor.set_online(data.online)
    return {"success": True, "data": {"online": monitor.is_online, "changed": changed}}


@router.delete("/queue", response_model=dict)
async def clear_queue(queue: Annotated[SyncQueue, Depends(get_sync_queue)]):
    """Hard reset, used on logout."""
    cleared = queue.pending_count
    queue.clear()
    return {"success": True, "data": {"cleared": cleared}}


@router.delete("/queue/{action_id}", response_model=dict)
async def discard_action(
    action_id: str,
    data: DiscardRequest,
    coordinator: Annotated[SyncCoordinator, Depends(get_coordinator)],
):
    """Explicitly give up on one stuck action."""
    if not coordinator.discard(action_id, data.reason):
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Queued action not found.")
    return {"success": True, "data": {"discarded": action_id}}
