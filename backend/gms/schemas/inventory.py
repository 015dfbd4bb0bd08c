"""Inventory schemas."""

from pydantic import ConfigDict, Field

from gms.schemas import CamelModel


class InventoryItemRead(CamelModel):
    id: str
    sku: str
    name: str
    brand: str
    stock_qty: int
    low_stock_threshold: int
    # Pence
    price: int

    model_config = ConfigDict(from_attributes=True)

    @property
    def is_low_stock(self) -> bool:
        return self.stock_qty <= self.low_stock_threshold


class InventoryItemUpdate(CamelModel):
    """Field-level merge patch. Only the fields present are applied."""

    sku: str | None = Field(default=None, min_length=1, max_length=64)
    name: str | None = Field(default=None, min_length=1, max_length=200)
    brand: str | None = Field(default=None, min_length=1, max_length=100)
    stock_qty: int | None = Field(default=None, ge=0)
    low_stock_threshold: int | None = Field(default=None, ge=0)
    price: int | None = Field(default=None, ge=0)

    model_config = ConfigDict(extra="forbid")

    def as_patch(self) -> dict:
        """Return only the fields that were set, keyed by wire name."""
        return self.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)
