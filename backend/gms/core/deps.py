"""FastAPI dependencies exposing the sync runtime built at startup."""

from typing import Annotated

from fastapi import Depends, Request

from gms.services.connectivity import ConnectivityMonitor
from gms.services.offline_actions import OfflineActionService
from gms.services.runtime import SyncRuntime
from gms.services.sync_coordinator import SyncCoordinator
from gms.services.sync_queue import SyncQueue


def get_runtime(request: Request) -> SyncRuntime:
    return request.app.state.sync_runtime


def get_sync_queue(runtime: Annotated[SyncRuntime, Depends(get_runtime)]) -> SyncQueue:
    return runtime.queue


def get_monitor(runtime: Annotated[SyncRuntime, Depends(get_runtime)]) -> ConnectivityMonitor:
    return runtime.monitor


def get_coordinator(runtime: Annotated[SyncRuntime, Depends(get_runtime)]) -> SyncCoordinator:
    return runtime.coordinator


def get_actions(runtime: Annotated[SyncRuntime, Depends(get_runtime)]) -> OfflineActionService:
    return runtime.actions
