"""All enum types for the GMS data model."""

import enum


# --- Offline Sync Enums ---

class SyncActionType(str, enum.Enum):
    UPDATE_INVENTORY_ITEM = "UPDATE_INVENTORY_ITEM"
    OFFLINE_SCAN_ADD_TO_WO = "OFFLINE_SCAN_ADD_TO_WO"


class SyncOutcome(str, enum.Enum):
    APPLIED = "applied"
    DEFERRED = "deferred"
    FAILED = "failed"


class ActionDisposition(str, enum.Enum):
    """What happened to a user action routed through the offline-aware layer."""

    APPLIED = "applied"
    QUEUED = "queued"
    NEEDS_SELECTION = "needs_selection"


# --- Work Order Enums ---

class WorkOrderStatus(str, enum.Enum):
    NEW = "New"
    IN_PROGRESS = "In Progress"
    AWAITING_PARTS = "Awaiting Parts"
    AWAITING_CUSTOMER = "Awaiting Customer"
    READY = "Ready for Collection"
    COMPLETED = "Completed"
    INVOICED = "Invoiced"


class LineItemType(str, enum.Enum):
    PART = "part"
    LABOUR = "labour"
    FEE = "fee"
