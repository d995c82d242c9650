"""
Marketplace overview figures for the admin dashboard.
"""

from pydantic import BaseModel

from models.enums import Role

from .accounts import AccountRegistry
from .catalog_sync import CatalogSnapshot
from .orders import OrderBook


class MarketplaceOverview(BaseModel):
    total_products: int
    purchasable_products: int
    total_buyers: int
    total_sellers: int
    active_users: int
    average_rating: float
    unread_notifications: int
    total_orders: int = 0
    total_revenue: float = 0.0


def marketplace_overview(
    snapshot: CatalogSnapshot,
    accounts: AccountRegistry | None = None,
    orders: OrderBook | None = None,
) -> MarketplaceOverview:
    users = accounts.users if accounts is not None else []
    ratings = [review.rating for review in snapshot.reviews]
    return MarketplaceOverview(
        total_products=len(snapshot.products),
        purchasable_products=sum(1 for p in snapshot.products if p.is_purchasable),
        total_buyers=sum(1 for u in users if u.role is Role.BUYER),
        total_sellers=sum(1 for u in users if u.role is Role.SELLER),
        active_users=sum(1 for u in users if u.is_active),
        average_rating=round(sum(ratings) / len(ratings), 2) if ratings else 0.0,
        unread_notifications=snapshot.unread_notifications,
        total_orders=len(orders) if orders is not None else 0,
        total_revenue=orders.total_revenue() if orders is not None else 0.0,
    )
