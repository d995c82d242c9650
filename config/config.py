"""
Configuration classes for the VeggieMarket catalog core.
Defines store connection settings and marketplace defaults in a type-safe, extensible way.
"""

import os
from dataclasses import dataclass, field

from models.session import SessionContext
from utils.env import load_project_dotenv
from utils.stock import DEFAULT_STOCK_QUANTITY

DEMO_BUYER_ID = "00000000-0000-0000-0000-000000000002"
DEMO_SELLER_ID = "00000000-0000-0000-0000-000000000004"
PLACEHOLDER_IMAGE = (
    "https://images.unsplash.com/photo-1607305387299-a3d9611cd469"
    "?crop=entropy&cs=tinysrgb&fit=max&fm=jpg&q=80&w=1080"
)


@dataclass
class StoreConfig:
    url: str = ""
    anon_key: str = ""
    timeout_seconds: float | None = 10.0  # None keeps the client default

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.anon_key)


@dataclass
class MarketConfig:
    store: StoreConfig = field(default_factory=StoreConfig)
    demo_buyer_id: str = DEMO_BUYER_ID
    demo_seller_id: str = DEMO_SELLER_ID
    placeholder_image: str = PLACEHOLDER_IMAGE
    default_stock_quantity: int = DEFAULT_STOCK_QUANTITY
    unknown_seller_label: str = "Unknown Seller"

    def default_session(self) -> SessionContext:
        """Session scoped to the configured demo buyer and seller."""
        return SessionContext(buyer_id=self.demo_buyer_id, seller_id=self.demo_seller_id)

    @classmethod
    def from_env(cls) -> "MarketConfig":
        """Build a config from environment variables (and the project `.env`)."""
        load_project_dotenv()
        timeout_raw = os.getenv("VEGGIEMARKET_TIMEOUT")
        timeout = float(timeout_raw) if timeout_raw else StoreConfig.timeout_seconds
        store = StoreConfig(
            url=os.getenv("SUPABASE_URL", ""),
            anon_key=os.getenv("SUPABASE_ANON_KEY", ""),
            timeout_seconds=timeout,
        )
        return cls(
            store=store,
            demo_buyer_id=os.getenv("VEGGIEMARKET_BUYER_ID", DEMO_BUYER_ID),
            demo_seller_id=os.getenv("VEGGIEMARKET_SELLER_ID", DEMO_SELLER_ID),
        )


# Example usage:
# config = MarketConfig.from_env()
# session = config.default_session()
