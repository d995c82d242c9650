"""
Read-only catalog entities: notifications, reviews and seller statistics.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from .enums import NotificationType


class Notification(BaseModel):
    """Notification addressed to a single user."""

    id: str
    user_id: str
    title: str
    message: str
    type: NotificationType
    is_read: bool = False
    metadata: dict[str, Any] | None = None
    created_at: datetime = Field(default_factory=datetime.now)

    def mark_read(self) -> None:
        # One-way transition; there is no way back to unread.
        self.is_read = True


class Review(BaseModel):
    """Buyer review of a product."""

    id: str
    product_id: str
    buyer_id: str
    rating: int = Field(ge=1, le=5)
    comment: str | None = None
    created_at: datetime = Field(default_factory=datetime.now)


class SellerStats(BaseModel):
    """Aggregated seller statistics, computed by the store and fetched read-only."""

    id: str
    seller_id: str
    total_orders: int = Field(default=0, ge=0)
    total_revenue: float = Field(default=0.0, ge=0)
    total_products: int = Field(default=0, ge=0)
    average_rating: float = Field(default=0.0, ge=0, le=5)
    last_updated: datetime = Field(default_factory=datetime.now)
