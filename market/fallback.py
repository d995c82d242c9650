"""
Local demonstration dataset used when the remote store is unreachable.
"""

from dataclasses import dataclass
from datetime import datetime

from models.catalog import Notification, Review, SellerStats
from models.enums import NotificationType
from models.product import Product

FALLBACK_USER_ID = "demo"


@dataclass(frozen=True)
class FallbackDataset:
    products: tuple[Product, ...]
    notifications: tuple[Notification, ...]
    reviews: tuple[Review, ...]
    seller_stats: SellerStats


def load_fallback(now: datetime | None = None) -> FallbackDataset:
    """Return fresh copies of the fallback collections."""
    now = now or datetime.now()
    products = (
        Product(
            id=1,
            name="Fresh Tomatoes",
            price=40,
            unit="kg",
            image=(
                "https://images.unsplash.com/photo-1607305387299-a3d9611cd469"
                "?crop=entropy&cs=tinysrgb&fit=max&fm=jpg&q=80&w=1080"
            ),
            seller="Local Farm",
            stock="In Stock (50 kg)",
        ),
    )
    notifications = (
        Notification(
            id="1",
            user_id=FALLBACK_USER_ID,
            title="Welcome to VeggieMarket",
            message="Your local store is ready to use",
            type=NotificationType.SYSTEM,
            is_read=False,
            metadata=None,
            created_at=now,
        ),
    )
    reviews = (
        Review(
            id="1",
            product_id="10000000-0000-0000-0000-000000000001",
            buyer_id=FALLBACK_USER_ID,
            rating=5,
            comment="Great quality vegetables!",
            created_at=now,
        ),
    )
    seller_stats = SellerStats(
        id="1",
        seller_id=FALLBACK_USER_ID,
        total_orders=0,
        total_revenue=0,
        total_products=len(products),
        average_rating=0,
        last_updated=now,
    )
    return FallbackDataset(products, notifications, reviews, seller_stats)
