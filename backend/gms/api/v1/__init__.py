"""API v1 router that aggregates all sub-routers."""

from fastapi import APIRouter

from gms.api.v1.inventory import router as inventory_router
from gms.api.v1.sync import router as sync_router
from gms.api.v1.work_orders import router as work_orders_router

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(sync_router)
api_router.include_router(inventory_router)
api_router.include_router(work_orders_router)
