"""Inventory item model."""

from sqlalchemy import Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from gms.models.base import BaseModel


class InventoryItem(BaseModel):
    __tablename__ = "inventory_item"

    sku: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    brand: Mapped[str] = mapped_column(String(100), nullable=False)
    stock_qty: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)
    low_stock_threshold: Mapped[int] = mapped_column(
        Integer, default=5, server_default="5", nullable=False
    )
    # Pence
    price: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        Index("ix_inventory_item_sku", "sku"),
    )
