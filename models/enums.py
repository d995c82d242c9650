"""
Centralized Enum definitions for the project.
"""

from enum import Enum


class Role(str, Enum):
    """Marketplace roles derived from an account's email address"""

    BUYER = "buyer"
    SELLER = "seller"
    ADMIN = "admin"
    INVALID = "invalid"


class ProductStatus(str, Enum):
    """Listing status of a product row in the remote store"""

    ACTIVE = "active"
    INACTIVE = "inactive"
    OUT_OF_STOCK = "out_of_stock"


class NotificationType(str, Enum):
    """Closed set of notification categories"""

    ORDER = "order"
    PRODUCT = "product"
    SYSTEM = "system"
    PROMOTION = "promotion"


class SyncMode(str, Enum):
    """Operating modes of the catalog sync controller"""

    UNINITIALIZED = "uninitialized"
    LIVE = "live"  # Collections sourced from the remote store
    FALLBACK = "fallback"  # Local demonstration data only


class AdvisoryLevel(str, Enum):
    """Severity of a user-visible advisory"""

    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


class MarketComponent(str, Enum):
    """Components that publish events on the market event bus"""

    CATALOG_SYNC = "catalog_sync"
    MUTATION_GATEWAY = "mutation_gateway"
    ACCOUNTS = "accounts"
    SYSTEM = "system"


class OrderStatus(str, Enum):
    """Lifecycle of a buyer order as handled by the seller"""

    PENDING = "pending"
    APPROVED = "approved"
    CANCELLED = "cancelled"
    OUT_OF_STOCK = "outofstock"
