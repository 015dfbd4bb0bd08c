"""Work order schemas."""

from datetime import datetime

from pydantic import ConfigDict, Field

from gms.models.enums import LineItemType, WorkOrderStatus
from gms.schemas import CamelModel


class LineItemCreate(CamelModel):
    description: str = Field(min_length=1, max_length=300)
    quantity: int = Field(ge=1)
    # Pence
    unit_price: int = Field(ge=0)
    is_vatable: bool = True
    type: LineItemType = LineItemType.PART


class LineItemRead(LineItemCreate):
    id: str

    model_config = ConfigDict(from_attributes=True)


class WorkOrderRead(CamelModel):
    id: str
    status: WorkOrderStatus
    customer_name: str
    vehicle: str
    vrm: str
    issue: str = ""
    is_urgent: bool = False
    created_at: datetime
    last_updated_at: datetime
    line_items: list[LineItemRead] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)
