"""
Create, update and delete single products.

Every operation tries the remote store first and refetches the product
collection after a successful write. Only creation degrades gracefully: when
the insert fails the product is kept in memory instead. Updates and deletes of
store-backed products report the failure and change nothing locally.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from connectors.remote_store import RemoteStore
from models.enums import AdvisoryLevel, MarketComponent
from models.product import Product, ProductDraft
from utils.stock import parse_stock_quantity

from .catalog_sync import PRODUCTS_TABLE, CatalogSyncController
from .exceptions import MarketError, MutationInProgressError, UnknownProductError
from .identity import IdentityMap

logger = logging.getLogger(__name__)

DEFAULT_PRODUCT_STATUS = "active"


@dataclass(frozen=True)
class MutationResult:
    success: bool
    advisory: str | None = None
    persisted_remotely: bool = False
    product: Product | None = None


class ProductMutationGateway:
    def __init__(self, controller: CatalogSyncController):
        self.controller = controller
        self._in_flight: set[int] = set()

    @property
    def _store(self) -> RemoteStore:
        return self.controller.store

    @property
    def _identities(self) -> IdentityMap:
        return self.controller.state.identities

    def _stock_quantity(self, stock: str) -> int:
        return parse_stock_quantity(stock, default=self.controller.config.default_stock_quantity)

    # --- Create --- #

    async def create(self, draft: ProductDraft) -> MutationResult:
        """Insert a product; keep it locally if the store rejects or cannot be reached."""
        record = {
            "name": draft.name,
            "price": draft.price,
            "unit": draft.unit,
            "images": [draft.image],
            "stock_quantity": self._stock_quantity(draft.stock),
            "status": DEFAULT_PRODUCT_STATUS,
            "seller_id": self.controller.session.seller_id,
        }
        logger.info(f"Adding product '{draft.name}'")
        try:
            response = await self._store.table(PRODUCTS_TABLE).insert(record).select().single().execute()
            row = response.raise_for_error()
        except Exception as e:
            logger.warning(f"Database add failed, keeping '{draft.name}' locally: {e}")
            product = self.controller.add_local_product(draft)
            return await self._succeeded("product.created", "Product added locally!", product, remote=False)

        await self.controller.refresh_products()
        product = None
        if isinstance(row, dict) and row.get("id"):
            # The refetch may have failed; fall back to the inserted row itself
            product = self.controller.state.product(self._identities.alias_for(row["id"]))
            if product is None:
                product = self.controller.product_from_row(row)
        return await self._succeeded("product.created", "Product added successfully!", product, remote=True)

    # --- Update --- #

    async def update(self, product: Product) -> MutationResult:
        """Write name, price, unit, image and stock of ``product`` back to the store."""
        try:
            self._begin(product.id)
        except MarketError as e:
            return await self._failed(str(e))
        try:
            return await self._update(product)
        finally:
            self._in_flight.discard(product.id)

    async def _update(self, product: Product) -> MutationResult:
        try:
            remote_id = self._resolve(product.id)
        except UnknownProductError as e:
            logger.error(f"Error updating product: {e}")
            return await self._failed(str(e))

        if remote_id is None:
            self.controller.replace_local_product(product)
            return await self._succeeded("product.updated", "Product updated locally!", product, remote=False)

        changes = {
            "name": product.name,
            "price": product.price,
            "unit": product.unit,
            "images": [product.image],
            "stock_quantity": self._stock_quantity(product.stock),
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }
        try:
            response = await self._store.table(PRODUCTS_TABLE).update(changes).eq("id", remote_id).select().execute()
            rows = response.raise_for_error()
        except Exception as e:
            logger.error(f"Error updating product {product.id}: {e}")
            return await self._failed("Failed to update product")
        if not rows:
            logger.error(f"Error updating product {product.id}: no row with id {remote_id}")
            return await self._failed("Failed to update product")

        await self.controller.refresh_products()
        return await self._succeeded(
            "product.updated", "Product updated successfully!", self.controller.state.product(product.id), remote=True
        )

    # --- Delete --- #

    async def delete(self, product_id: int) -> MutationResult:
        try:
            self._begin(product_id)
        except MarketError as e:
            return await self._failed(str(e))
        try:
            return await self._delete(product_id)
        finally:
            self._in_flight.discard(product_id)

    async def _delete(self, product_id: int) -> MutationResult:
        try:
            remote_id = self._resolve(product_id)
        except UnknownProductError as e:
            logger.error(f"Error deleting product: {e}")
            return await self._failed(str(e))

        removed = self.controller.state.product(product_id)
        if remote_id is None:
            self.controller.remove_local_product(product_id)
            return await self._succeeded("product.deleted", "Product deleted locally!", removed, remote=False)

        try:
            response = await self._store.table(PRODUCTS_TABLE).delete().eq("id", remote_id).select().execute()
            rows = response.raise_for_error()
        except Exception as e:
            logger.error(f"Error deleting product {product_id}: {e}")
            return await self._failed("Failed to delete product")
        if not rows:
            logger.error(f"Error deleting product {product_id}: no row with id {remote_id}")
            return await self._failed("Failed to delete product")

        self._identities.forget(product_id)
        await self.controller.refresh_products()
        return await self._succeeded("product.deleted", "Product deleted successfully!", removed, remote=True)

    # --- Helpers --- #

    def _begin(self, product_id: int) -> None:
        if product_id in self._in_flight:
            raise MutationInProgressError(product_id)
        self._in_flight.add(product_id)

    def _resolve(self, product_id: int) -> str | None:
        """Remote id of a catalog product; None for products held only in memory."""
        if self.controller.state.product(product_id) is None:
            raise UnknownProductError(product_id)
        return self._identities.remote_id_for(product_id)

    async def _succeeded(
        self, event_type: str, message: str, product: Product | None, remote: bool
    ) -> MutationResult:
        await self.controller.advise(AdvisoryLevel.SUCCESS, message, source=MarketComponent.MUTATION_GATEWAY)
        payload: dict[str, Any] = {"persisted_remotely": remote}
        if product is not None:
            payload["product"] = product.model_dump(mode="json")
        await self.controller.publish(event_type, payload, source=MarketComponent.MUTATION_GATEWAY)
        return MutationResult(success=True, advisory=message, persisted_remotely=remote, product=product)

    async def _failed(self, message: str) -> MutationResult:
        await self.controller.advise(AdvisoryLevel.ERROR, message, source=MarketComponent.MUTATION_GATEWAY)
        return MutationResult(success=False, advisory=message)
