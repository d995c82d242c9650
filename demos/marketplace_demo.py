"""
Demonstrates the VeggieMarket catalog core end to end.

Runs one session in live mode (against the hosted store when SUPABASE_URL and
SUPABASE_ANON_KEY are set, otherwise against the in-memory demo store) and one
in fallback mode against an unreachable store.

Run with: python -m demos.marketplace_demo
"""

import asyncio

from config.config import MarketConfig
from connectors.in_memory_store import InMemoryStore
from connectors.supabase_store import SupabaseStore
from connectors.remote_store import RemoteStore
from market.accounts import AccountRegistry, SignupRequest, authenticate
from market.admin import marketplace_overview
from market.cart import BuyerDetails, Cart
from market.catalog_sync import CatalogSnapshot, CatalogSyncController
from market.mutations import ProductMutationGateway
from market.orders import OrderBook
from models.enums import OrderStatus, Role
from models.events import MarketEvent
from models.product import ProductDraft
from utils.event_bus import EventBus
from utils.logger import get_logger

logger = get_logger("marketplace-demo")


def print_snapshot(title: str, snapshot: CatalogSnapshot) -> None:
    print(f"\n--- {title} ({snapshot.mode.value} mode) ---")
    for product in snapshot.products:
        print(f"  #{product.id:<3} {product.name:<18} {product.price:>7.2f}/{product.unit:<4} {product.stock}")
    print(f"  notifications: {len(snapshot.notifications)} ({snapshot.unread_notifications} unread)")
    print(f"  reviews: {len(snapshot.reviews)}")
    if snapshot.seller_stats is not None:
        stats = snapshot.seller_stats
        print(f"  seller stats: {stats.total_orders} orders, revenue {stats.total_revenue:.2f}")
    for advisory in snapshot.advisories:
        print(f"  [{advisory.level.value}] {advisory.message}")


async def run_session(store: RemoteStore, config: MarketConfig, title: str) -> None:
    bus = EventBus()

    async def log_event(event: MarketEvent) -> None:
        logger.info(f"event {event.event_type}: {event.payload.get('product', {}).get('name', '')}")

    for event_type in ("product.created", "product.updated", "product.deleted"):
        bus.subscribe(event_type, log_event)

    controller = CatalogSyncController(store, config=config, event_bus=bus)
    gateway = ProductMutationGateway(controller)
    await controller.initialize()
    print_snapshot(f"{title}: after initialize", controller.snapshot())

    created = await gateway.create(
        ProductDraft(name="Fresh Peas", price=20, unit="kg", image="", stock="In Stock (10 kg)")
    )
    if created.product is not None:
        await gateway.update(created.product.model_copy(update={"price": 22.5}))
    first = controller.state.products[0]
    await gateway.delete(first.id)
    print_snapshot(f"{title}: after mutations", controller.snapshot())

    accounts = AccountRegistry()
    accounts.register(
        SignupRequest(
            account_type=Role.BUYER,
            name="Asha",
            email="asha@gmail.com",
            password="tomato123",
            confirm_password="tomato123",
            phone="98765 43210",
            address="12 Market Road",
        )
    )
    role = authenticate("asha@gmail.com", "tomato123", accounts)
    logger.info(f"asha@gmail.com logged in as {role.value}")

    cart = Cart()
    orders = OrderBook()
    for product in controller.search_products("fresh"):
        if product.is_purchasable:
            cart.add(product)
    if len(cart):
        receipt = cart.checkout(
            BuyerDetails(name="Asha", phone="9876543210", address="12 Market Road", pincode="560001")
        )
        logger.info(f"Checkout total: {receipt.total:.2f}")
        for order in orders.place(receipt):
            logger.info(orders.update_status(order.id, OrderStatus.APPROVED))

    overview = marketplace_overview(controller.snapshot(), accounts, orders)
    print(f"  overview: {overview.model_dump()}")


async def demo_marketplace() -> None:
    config = MarketConfig.from_env()

    if config.store.is_configured:
        store = await SupabaseStore.connect(config.store)
        await run_session(store, config, "Hosted store")
    else:
        await run_session(InMemoryStore.with_demo_data(latency=0.01), config, "Demo store")

    offline = InMemoryStore()
    offline.disconnect()
    await run_session(offline, config, "Offline")


if __name__ == "__main__":
    asyncio.run(demo_marketplace())
