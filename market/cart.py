"""
Session-scoped buyer cart.

The cart lives only as long as the dashboard that holds it and is never
persisted. Quantities are positive integers; checkout requires delivery
details and empties the cart.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime

from pydantic import BaseModel, Field

from models.product import Product

from .exceptions import CartError, CheckoutError

logger = logging.getLogger(__name__)


class CartItem(BaseModel):
    product: Product
    quantity: int = Field(ge=1)

    @property
    def line_total(self) -> float:
        return self.product.price * self.quantity


class BuyerDetails(BaseModel):
    name: str = ""
    phone: str = ""
    address: str = ""
    pincode: str = ""

    def is_complete(self) -> bool:
        return all(value.strip() for value in (self.name, self.phone, self.address, self.pincode))


class CheckoutReceipt(BaseModel):
    items: list[CartItem]
    total: float
    buyer: BuyerDetails
    placed_at: datetime = Field(default_factory=datetime.now)


@dataclass
class Cart:
    items: list[CartItem] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.items)

    def _find(self, product_id: int) -> CartItem | None:
        return next((item for item in self.items if item.product.id == product_id), None)

    def add(self, product: Product) -> CartItem:
        """Add one unit of ``product``, or one more if it is already in the cart."""
        if not product.is_purchasable:
            raise CartError(f"{product.name} is out of stock")
        item = self._find(product.id)
        if item is None:
            item = CartItem(product=product, quantity=1)
            self.items.append(item)
        else:
            item.quantity += 1
        logger.debug(f"{product.name} added to cart (quantity {item.quantity})")
        return item

    def update_quantity(self, product_id: int, delta: int) -> CartItem | None:
        """
        Change the quantity of a line by ``delta``.

        A change that would leave the line at zero or below is ignored; lines
        are only dropped through ``remove``.
        """
        item = self._find(product_id)
        if item is None:
            return None
        new_quantity = item.quantity + delta
        if new_quantity > 0:
            item.quantity = new_quantity
        return item

    def remove(self, product_id: int) -> bool:
        before = len(self.items)
        self.items = [item for item in self.items if item.product.id != product_id]
        return len(self.items) < before

    def total(self) -> float:
        return sum(item.line_total for item in self.items)

    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def clear(self) -> None:
        self.items = []

    def checkout(self, details: BuyerDetails) -> CheckoutReceipt:
        if not self.items:
            raise CheckoutError("Your cart is empty")
        if not details.is_complete():
            raise CheckoutError("Please fill in all details")
        receipt = CheckoutReceipt(items=[item.model_copy() for item in self.items], total=self.total(), buyer=details)
        logger.info(f"Order placed: {self.item_count()} items, total {receipt.total:.2f}")
        self.clear()
        return receipt
