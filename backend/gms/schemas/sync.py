"""Pydantic schemas for offline sync actions and drain reports.

A sync action is an intent to mutate remote state that could not be performed
immediately. Actions are a tagged union on ``type``; each variant carries its
own payload model. The persisted JSON layout is::

    [{"id": "...", "type": "UPDATE_INVENTORY_ITEM",
      "payload": {"itemId": "inv_1", "updates": {"stockQty": 5}},
      "timestamp": "2026-10-18T09:30:00Z"}, ...]
"""

from datetime import datetime
from typing import Annotated, Any, Literal, Union

from pydantic import Field, TypeAdapter, field_validator

from gms.models.enums import SyncActionType, SyncOutcome
from gms.schemas import CamelModel
from gms.schemas.inventory import InventoryItemUpdate


# --- Payloads ---

class UpdateInventoryPayload(CamelModel):
    item_id: str = Field(min_length=1)
    updates: dict[str, Any] = Field(min_length=1)

    @field_validator("updates")
    @classmethod
    def _validate_updates(cls, value: dict[str, Any]) -> dict[str, Any]:
        patch = InventoryItemUpdate.model_validate(value).as_patch()
        if not patch:
            raise ValueError("updates must change at least one field")
        return patch


class OfflineScanPayload(CamelModel):
    sku: str = Field(min_length=1, max_length=64)
    quantity: int = Field(default=1, ge=1)
    work_order_id: str = Field(min_length=1)


# --- Intents (what callers enqueue) ---

class UpdateInventoryIntent(CamelModel):
    type: Literal["UPDATE_INVENTORY_ITEM"] = SyncActionType.UPDATE_INVENTORY_ITEM.value
    payload: UpdateInventoryPayload

    def describe(self) -> str:
        p = self.payload
        if "stockQty" in p.updates:
            text = f"Update stock for item {p.item_id} to {p.updates['stockQty']}"
            others = [k for k in p.updates if k != "stockQty"]
            if others:
                text += f" (also: {', '.join(others)})"
            return text
        return f"Update item {p.item_id}: {', '.join(p.updates)}"


class OfflineScanIntent(CamelModel):
    type: Literal["OFFLINE_SCAN_ADD_TO_WO"] = SyncActionType.OFFLINE_SCAN_ADD_TO_WO.value
    payload: OfflineScanPayload

    def describe(self) -> str:
        p = self.payload
        return f"Add part SKU {p.sku} (Qty: {p.quantity}) to WO#{p.work_order_id}"


SyncActionIntent = Annotated[
    Union[UpdateInventoryIntent, OfflineScanIntent],
    Field(discriminator="type"),
]


# --- Actions (what the queue holds) ---

class UpdateInventoryAction(UpdateInventoryIntent):
    id: str
    timestamp: datetime


class OfflineScanAction(OfflineScanIntent):
    id: str
    timestamp: datetime


SyncAction = Annotated[
    Union[UpdateInventoryAction, OfflineScanAction],
    Field(discriminator="type"),
]

QueuedAction = UpdateInventoryAction | OfflineScanAction
ActionIntent = UpdateInventoryIntent | OfflineScanIntent

ACTION_CLASSES: dict[str, type[QueuedAction]] = {
    SyncActionType.UPDATE_INVENTORY_ITEM.value: UpdateInventoryAction,
    SyncActionType.OFFLINE_SCAN_ADD_TO_WO.value: OfflineScanAction,
}

intent_adapter: TypeAdapter[ActionIntent] = TypeAdapter(SyncActionIntent)
action_list_adapter: TypeAdapter[list[QueuedAction]] = TypeAdapter(
    list[SyncAction]
)


def build_action(
    intent: ActionIntent,
    action_id: str,
    timestamp: datetime,
) -> QueuedAction:
    """Stamp an intent with its queue identity."""
    cls = ACTION_CLASSES[intent.type]
    return cls(
        id=action_id,
        timestamp=timestamp,
        type=intent.type,
        payload=intent.payload.model_copy(deep=True),
    )


# --- API shapes ---

class QueuedActionRead(CamelModel):
    id: str
    type: SyncActionType
    timestamp: datetime
    payload: dict[str, Any]
    description: str


class ActionResult(CamelModel):
    action_id: str
    type: SyncActionType
    outcome: SyncOutcome
    detail: str | None = None


class DrainReport(CamelModel):
    started_at: datetime
    finished_at: datetime | None = None
    attempted: int = 0
    applied: int = 0
    deferred: int = 0
    failed: int = 0
    remaining: int = 0
    skipped: bool = False
    offline: bool = False
    results: list[ActionResult] = Field(default_factory=list)


class SyncStatusRead(CamelModel):
    online: bool
    pending_count: int
    draining: bool
    last_report: DrainReport | None = None


class ConnectivityReport(CamelModel):
    online: bool


class DiscardRequest(CamelModel):
    reason: str = Field(min_length=1, max_length=500)
