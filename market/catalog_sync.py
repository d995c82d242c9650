"""
Catalog synchronization with the remote store.

``CatalogSyncController.initialize`` checks the store connection once. If that fails
the controller switches to fallback mode and serves the local demonstration
dataset; otherwise it loads products, notifications, reviews and seller
statistics concurrently, each load isolated from the others. The controller
owns the collections in its ``CatalogState``; dashboards read immutable
snapshots and change products only through ``ProductMutationGateway``.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ValidationError

from config.config import MarketConfig
from connectors.remote_store import RemoteStore
from models.catalog import Notification, Review, SellerStats
from models.enums import AdvisoryLevel, MarketComponent, ProductStatus, SyncMode
from models.events import Advisory, MarketEvent
from models.product import Product, ProductDraft, StoredProduct
from models.session import SessionContext
from utils.event_bus import EventBus
from utils.stock import format_stock

from .exceptions import CatalogSyncError
from .fallback import load_fallback
from .identity import IdentityMap

logger = logging.getLogger(__name__)

PRODUCTS_TABLE = "products"
NOTIFICATIONS_TABLE = "notifications"
REVIEWS_TABLE = "reviews"
SELLER_STATS_TABLE = "seller_stats"


@dataclass
class CatalogState:
    """Mutable catalog collections for one session."""

    products: list[Product] = field(default_factory=list)
    notifications: list[Notification] = field(default_factory=list)
    reviews: list[Review] = field(default_factory=list)
    seller_stats: SellerStats | None = None
    mode: SyncMode = SyncMode.UNINITIALIZED
    advisories: list[Advisory] = field(default_factory=list)
    identities: IdentityMap = field(default_factory=IdentityMap)
    # Aliases of products held only in memory after a failed remote insert
    local_products: set[int] = field(default_factory=set)

    def product(self, product_id: int) -> Product | None:
        return next((p for p in self.products if p.id == product_id), None)


@dataclass(frozen=True)
class CatalogSnapshot:
    """Read-only view of the catalog handed to dashboards."""

    mode: SyncMode
    products: tuple[Product, ...]
    notifications: tuple[Notification, ...]
    reviews: tuple[Review, ...]
    seller_stats: SellerStats | None
    advisories: tuple[Advisory, ...]

    @property
    def unread_notifications(self) -> int:
        return sum(1 for n in self.notifications if not n.is_read)


class CatalogSyncController:
    def __init__(
        self,
        store: RemoteStore,
        session: SessionContext | None = None,
        config: MarketConfig | None = None,
        event_bus: EventBus | None = None,
    ):
        self.store = store
        self.config = config or MarketConfig()
        self.session = session or self.config.default_session()
        self.event_bus = event_bus
        self.state = CatalogState()

    @property
    def mode(self) -> SyncMode:
        return self.state.mode

    # --- Initialization --- #

    async def initialize(self) -> SyncMode:
        """Probe the store and load the catalog in live or fallback mode."""
        if self.state.mode is not SyncMode.UNINITIALIZED:
            raise CatalogSyncError(f"Catalog already initialized ({self.state.mode.value} mode)")

        if await self._check_connection():
            logger.info("Remote store reachable, loading catalog")
            await self._load_live()
            self.state.mode = SyncMode.LIVE
        else:
            await self._activate_fallback()

        await self.publish(
            "catalog.initialized",
            {
                "mode": self.state.mode.value,
                "products": len(self.state.products),
                "notifications": len(self.state.notifications),
                "reviews": len(self.state.reviews),
            },
        )
        return self.state.mode

    async def _check_connection(self) -> bool:
        try:
            response = await self.store.table(PRODUCTS_TABLE).select("id").limit(1).execute()
        except Exception as e:
            logger.error(f"Store connection test failed: {e}")
            return False
        if response.error is not None:
            logger.error(f"Store connection failed: {response.error}")
            return False
        return True

    async def _activate_fallback(self) -> None:
        logger.warning("Using fallback data")
        dataset = load_fallback()
        self.state.products = list(dataset.products)
        for product in self.state.products:
            self.state.identities.reserve(product.id)
        self.state.notifications = list(dataset.notifications)
        self.state.reviews = list(dataset.reviews)
        self.state.seller_stats = dataset.seller_stats
        self.state.mode = SyncMode.FALLBACK
        await self.advise(AdvisoryLevel.ERROR, "Database connection failed - using local data")
        await self.advise(AdvisoryLevel.SUCCESS, "Using local data - full features available")

    async def _load_live(self) -> None:
        loaders = {
            PRODUCTS_TABLE: self._fetch_products,
            NOTIFICATIONS_TABLE: self._fetch_notifications,
            REVIEWS_TABLE: self._fetch_reviews,
            SELLER_STATS_TABLE: self._fetch_seller_stats,
        }
        results = await asyncio.gather(*(load() for load in loaders.values()), return_exceptions=True)
        for collection, result in zip(loaders, results):
            if isinstance(result, Exception):
                await self._report_load_failure(collection, result)
                continue
            self._apply(collection, result)

    def _apply(self, collection: str, result: Any) -> None:
        if collection == PRODUCTS_TABLE:
            self._apply_products(result)
        elif collection == NOTIFICATIONS_TABLE:
            self.state.notifications = result
        elif collection == REVIEWS_TABLE:
            self.state.reviews = result
        elif collection == SELLER_STATS_TABLE:
            self.state.seller_stats = result
        logger.info(f"Loaded {collection}")

    async def _report_load_failure(self, collection: str, error: Exception) -> None:
        logger.error(f"Error fetching {collection}: {error}")
        await self.advise(
            AdvisoryLevel.ERROR,
            f"Failed to load {collection.replace('_', ' ')}: {error}",
            collection=collection,
        )

    # --- Fetches --- #

    async def _fetch_products(self) -> list[Product]:
        response = await (
            self.store.table(PRODUCTS_TABLE)
            .select("*")
            .eq("status", ProductStatus.ACTIVE.value)
            .order("created_at", desc=True)
            .execute()
        )
        stored = await self._validate_rows(PRODUCTS_TABLE, StoredProduct, response.raise_for_error())
        return [self._to_product(row) for row in stored]

    async def _fetch_notifications(self) -> list[Notification]:
        response = await (
            self.store.table(NOTIFICATIONS_TABLE)
            .select("*")
            .eq("user_id", self.session.buyer_id)
            .order("created_at", desc=True)
            .execute()
        )
        return await self._validate_rows(NOTIFICATIONS_TABLE, Notification, response.raise_for_error())

    async def _fetch_reviews(self) -> list[Review]:
        response = await self.store.table(REVIEWS_TABLE).select("*").order("created_at", desc=True).execute()
        return await self._validate_rows(REVIEWS_TABLE, Review, response.raise_for_error())

    async def _fetch_seller_stats(self) -> SellerStats | None:
        response = await (
            self.store.table(SELLER_STATS_TABLE)
            .select("*")
            .eq("seller_id", self.session.seller_id)
            .maybe_single()
            .execute()
        )
        row = response.raise_for_error()
        return SellerStats.model_validate(row) if row else None

    async def refresh_products(self) -> bool:
        """Refetch the product collection; the current one is kept on failure."""
        try:
            products = await self._fetch_products()
            self._apply_products(products)
        except Exception as e:
            await self._report_load_failure(PRODUCTS_TABLE, e)
            return False
        return True

    async def _validate_rows(self, collection: str, model: type[BaseModel], rows: Any) -> list[Any]:
        """Validate rows one at a time; invalid rows are skipped and reported."""
        valid = []
        skipped = 0
        for row in rows or []:
            try:
                valid.append(model.model_validate(row))
            except ValidationError as e:
                skipped += 1
                row_id = row.get("id") if isinstance(row, dict) else None
                logger.warning(f"Skipping invalid {collection} row {row_id}: {e.error_count()} validation error(s)")
        if skipped:
            await self.advise(
                AdvisoryLevel.INFO,
                f"Skipped {skipped} invalid {collection.replace('_', ' ')} record(s)",
                collection=collection,
            )
        return valid

    def _apply_products(self, fetched: list[Product]) -> None:
        # Locally held products stay visible until the session ends
        local = [p for p in self.state.products if p.id in self.state.local_products]
        self.state.products = [*fetched, *local]

    def _to_product(self, row: StoredProduct) -> Product:
        return Product(
            id=self.state.identities.alias_for(row.id),
            name=row.name,
            price=row.price,
            unit=row.unit,
            image=row.display_image or self.config.placeholder_image,
            seller=row.seller_id or self.config.unknown_seller_label,
            stock=format_stock(row.stock_quantity, row.unit),
        )

    def product_from_row(self, row: dict[str, Any]) -> Product | None:
        """Display product for a single stored row, or None if the row is invalid."""
        try:
            return self._to_product(StoredProduct.model_validate(row))
        except ValidationError as e:
            logger.warning(f"Invalid product row {row.get('id')}: {e.error_count()} validation error(s)")
            return None

    # --- Local collection changes (used by the mutation gateway) --- #

    def add_local_product(self, draft: ProductDraft) -> Product:
        alias = self.state.identities.next_local_alias(p.id for p in self.state.products)
        product = Product(id=alias, **draft.model_dump())
        self.state.products.append(product)
        self.state.local_products.add(alias)
        return product

    def replace_local_product(self, product: Product) -> None:
        self.state.products = [product if p.id == product.id else p for p in self.state.products]

    def remove_local_product(self, product_id: int) -> None:
        self.state.products = [p for p in self.state.products if p.id != product_id]
        self.state.local_products.discard(product_id)

    # --- Views --- #

    def snapshot(self) -> CatalogSnapshot:
        state = self.state
        return CatalogSnapshot(
            mode=state.mode,
            products=tuple(p.model_copy() for p in state.products),
            notifications=tuple(n.model_copy() for n in state.notifications),
            reviews=tuple(r.model_copy() for r in state.reviews),
            seller_stats=state.seller_stats.model_copy() if state.seller_stats else None,
            advisories=tuple(state.advisories),
        )

    def search_products(self, query: str) -> list[Product]:
        """Products whose name contains ``query``, ignoring case."""
        needle = query.strip().lower()
        return [p.model_copy() for p in self.state.products if needle in p.name.lower()]

    # --- Advisories and events --- #

    async def advise(
        self,
        level: AdvisoryLevel,
        message: str,
        source: MarketComponent = MarketComponent.CATALOG_SYNC,
        collection: str | None = None,
    ) -> Advisory:
        advisory = Advisory(level=level, message=message, source=source, collection=collection)
        self.state.advisories.append(advisory)
        await self.publish("catalog.advisory", advisory.model_dump(mode="json"), source=source)
        return advisory

    async def publish(
        self,
        event_type: str,
        payload: dict[str, Any],
        source: MarketComponent = MarketComponent.CATALOG_SYNC,
    ) -> None:
        if self.event_bus is None:
            return
        await self.event_bus.publish(MarketEvent(event_type=event_type, payload=payload, source=source))
