"""SQLAlchemy models. Importing this package registers every table on Base."""

from gms.models.inventory import InventoryItem
from gms.models.work_order import WorkOrder, WorkOrderLineItem

__all__ = ["InventoryItem", "WorkOrder", "WorkOrderLineItem"]
