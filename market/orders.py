"""
Seller order handling.

Orders are placed from a cart checkout (one order per cart line) and start
out pending. A seller resolves each pending order exactly once: approve it,
cancel it, or mark it out of stock.
"""

import logging
from dataclasses import dataclass, field
from datetime import date

from pydantic import BaseModel, Field

from models.enums import OrderStatus

from .cart import CheckoutReceipt
from .exceptions import OrderError

logger = logging.getLogger(__name__)

FIRST_ORDER_ID = 101

# Seller decisions and the advisory shown for each
DECISION_MESSAGES = {
    OrderStatus.APPROVED: "Order approved successfully!",
    OrderStatus.CANCELLED: "Order cancelled",
    OrderStatus.OUT_OF_STOCK: "Order marked as out of stock",
}


class Order(BaseModel):
    id: int
    product_name: str
    buyer: str
    seller: str | None = None
    quantity: int = Field(ge=1)
    total: float = Field(ge=0)
    status: OrderStatus = OrderStatus.PENDING
    placed_on: date = Field(default_factory=date.today)


@dataclass
class OrderBook:
    orders: list[Order] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.orders)

    def get(self, order_id: int) -> Order | None:
        return next((o for o in self.orders if o.id == order_id), None)

    def place(self, receipt: CheckoutReceipt) -> list[Order]:
        """Turn a checkout receipt into pending orders, one per cart line."""
        placed = []
        for item in receipt.items:
            order = Order(
                id=self._next_id(),
                product_name=item.product.name,
                buyer=receipt.buyer.name,
                seller=item.product.seller,
                quantity=item.quantity,
                total=item.line_total,
                placed_on=receipt.placed_at.date(),
            )
            self.orders.append(order)
            placed.append(order)
        logger.info(f"Placed {len(placed)} order(s) for {receipt.buyer.name}")
        return placed

    def update_status(self, order_id: int, status: OrderStatus) -> str:
        """Record the seller's decision on a pending order and return its advisory."""
        if status not in DECISION_MESSAGES:
            raise OrderError(f"Orders cannot be moved to {status.value}")
        order = self.get(order_id)
        if order is None:
            raise OrderError(f"Order {order_id} not found")
        if order.status is not OrderStatus.PENDING:
            raise OrderError(f"Order {order_id} is already {order.status.value}")
        order.status = status
        logger.info(f"Order {order_id} -> {status.value}")
        return DECISION_MESSAGES[status]

    def pending(self) -> list[Order]:
        return [o for o in self.orders if o.status is OrderStatus.PENDING]

    def completed(self) -> list[Order]:
        return [o for o in self.orders if o.status is not OrderStatus.PENDING]

    def total_revenue(self) -> float:
        return sum(o.total for o in self.orders)

    def _next_id(self) -> int:
        return max((o.id for o in self.orders), default=FIRST_ORDER_ID - 1) + 1


def demo_orders() -> OrderBook:
    """Orders shown on the seller dashboard before any checkout happens."""
    return OrderBook(
        [
            Order(id=101, product_name="Tomatoes", buyer="John Doe", quantity=2, total=80,
                  placed_on=date(2025, 12, 29)),
            Order(id=102, product_name="Potatoes", buyer="Jane Smith", quantity=5, total=150,
                  placed_on=date(2025, 12, 29)),
            Order(id=103, product_name="Onions", buyer="Mike Johnson", quantity=3, total=90,
                  status=OrderStatus.APPROVED, placed_on=date(2025, 12, 28)),
        ]
    )
