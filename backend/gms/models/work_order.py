"""Work order and line item models."""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gms.database import Base
from gms.models.base import BaseModel, StringPrimaryKeyMixin
from gms.models.enums import LineItemType, WorkOrderStatus


class WorkOrder(BaseModel):
    __tablename__ = "work_order"

    status: Mapped[WorkOrderStatus] = mapped_column(default=WorkOrderStatus.NEW, nullable=False)
    customer_name: Mapped[str] = mapped_column(String(200), nullable=False)
    customer_email: Mapped[str | None] = mapped_column(String(200), nullable=True)
    customer_phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    vehicle: Mapped[str] = mapped_column(String(200), nullable=False)
    vrm: Mapped[str] = mapped_column(String(20), nullable=False)
    issue: Mapped[str] = mapped_column(Text, nullable=False, default="")
    is_urgent: Mapped[bool] = mapped_column(Boolean, default=False, server_default="false")
    last_updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    # Relationships
    line_items: Mapped[list["WorkOrderLineItem"]] = relationship(
        back_populates="work_order",
        order_by="WorkOrderLineItem.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        Index("ix_work_order_status", "status"),
        Index("ix_work_order_vrm", "vrm"),
    )


class WorkOrderLineItem(StringPrimaryKeyMixin, Base):
    __tablename__ = "work_order_line_item"

    work_order_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("work_order.id", ondelete="CASCADE"), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str] = mapped_column(String(300), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    # Pence
    unit_price: Mapped[int] = mapped_column(Integer, nullable=False)
    is_vatable: Mapped[bool] = mapped_column(Boolean, default=True, server_default="true")
    item_type: Mapped[LineItemType] = mapped_column(nullable=False)

    # Relationships
    work_order: Mapped["WorkOrder"] = relationship(back_populates="line_items")

    __table_args__ = (
        Index("ix_wo_line_item_work_order", "work_order_id"),
    )
