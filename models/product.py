"""
Product data models.

``Product`` is the catalog shape handed to dashboards (numeric session-local
identity, single display image, stock descriptor string). ``StoredProduct`` is
the row shape kept in the remote ``products`` table.
"""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from utils.stock import OUT_OF_STOCK, stock_quantity_or_none

from .enums import ProductStatus


class ProductDraft(BaseModel):
    """A product as entered by a seller, before it has an identity."""

    name: str = Field(min_length=1)
    price: float = Field(ge=0)
    unit: str = "kg"
    image: str = ""
    seller: str = "Current Seller"
    stock: str = "In Stock"


class Product(ProductDraft):
    """Catalog product with a stable session-local numeric identity."""

    id: int

    @property
    def quantity(self) -> int | None:
        """Quantity embedded in the stock descriptor, if any."""
        return stock_quantity_or_none(self.stock)

    @property
    def is_purchasable(self) -> bool:
        if self.stock.strip().lower() == OUT_OF_STOCK.lower():
            return False
        quantity = self.quantity
        return quantity is None or quantity > 0


class StoredProduct(BaseModel):
    """Row of the remote ``products`` table."""

    id: str
    name: str = Field(min_length=1)
    description: str | None = ""
    price: float = Field(ge=0)
    unit: str = "kg"
    stock_quantity: int = Field(default=0, ge=0)
    min_order_quantity: int = 1
    status: ProductStatus = ProductStatus.ACTIVE
    category: str | None = ""
    images: list[str] | None = Field(default_factory=list)
    seller_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("stock_quantity", mode="before")
    @classmethod
    def _missing_quantity_is_zero(cls, value):
        return 0 if value is None else value

    @field_validator("unit", mode="before")
    @classmethod
    def _missing_unit_is_kg(cls, value):
        return "kg" if value is None else value

    @property
    def display_image(self) -> str | None:
        """First listed image, if the row has any."""
        return self.images[0] if self.images else None
