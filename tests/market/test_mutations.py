import asyncio

import pytest
import pytest_asyncio

from connectors.in_memory_store import InMemoryStore
from connectors.remote_store import QueryOperation
from market.catalog_sync import CatalogSyncController
from market.mutations import ProductMutationGateway
from models.enums import AdvisoryLevel, MarketComponent, SyncMode
from models.events import MarketEvent
from models.product import Product, ProductDraft
from utils.event_bus import EventBus


def okra() -> ProductDraft:
    return ProductDraft(name="Okra", price=60, unit="kg", image="https://example.com/okra.jpg", stock="In Stock (12 kg)")


@pytest.fixture
def store():
    return InMemoryStore.with_demo_data()


@pytest_asyncio.fixture
async def controller(store):
    controller = CatalogSyncController(store)
    await controller.initialize()
    return controller


@pytest.fixture
def gateway(controller):
    return ProductMutationGateway(controller)


def stored_row(store: InMemoryStore, name: str) -> dict:
    return next(row for row in store.tables["products"] if row["name"] == name)


# --- Create --- #


@pytest.mark.asyncio
async def test_create_persists_and_refreshes(store, controller, gateway):
    result = await gateway.create(okra())

    assert result.success
    assert result.persisted_remotely
    assert result.advisory == "Product added successfully!"
    assert result.product.id == 4
    row = stored_row(store, "Okra")
    assert row["stock_quantity"] == 12
    assert row["images"] == ["https://example.com/okra.jpg"]
    assert row["status"] == "active"
    assert row["seller_id"] == controller.session.seller_id
    assert controller.state.product(4).name == "Okra"
    assert controller.state.advisories[-1].source is MarketComponent.MUTATION_GATEWAY


@pytest.mark.asyncio
async def test_create_without_quantity_uses_default_stock(store, gateway):
    await gateway.create(ProductDraft(name="Beans", price=50, stock="In Stock"))
    assert stored_row(store, "Beans")["stock_quantity"] == 10


@pytest.mark.asyncio
async def test_rejected_insert_keeps_product_locally(store, controller, gateway):
    store.fail_table("products", message="permission denied", code="42501", operation=QueryOperation.INSERT)

    result = await gateway.create(okra())

    assert result.success
    assert not result.persisted_remotely
    assert result.advisory == "Product added locally!"
    assert result.product.id == max(p.id for p in controller.state.products if p.name != "Okra") + 1
    assert result.product.id not in controller.state.identities
    assert all(row["name"] != "Okra" for row in store.tables["products"])


@pytest.mark.asyncio
async def test_local_products_survive_refresh(store, controller, gateway):
    store.fail_table("products", operation=QueryOperation.INSERT)
    local = (await gateway.create(okra())).product
    store.restore_table("products")

    await gateway.create(ProductDraft(name="Beans", price=50))

    names = [p.name for p in controller.state.products]
    assert "Okra" in names and "Beans" in names
    ids = [p.id for p in controller.state.products]
    assert len(ids) == len(set(ids))
    assert controller.state.product(local.id).name == "Okra"


@pytest.mark.asyncio
async def test_fallback_create_gets_next_alias():
    store = InMemoryStore()
    store.disconnect()
    controller = CatalogSyncController(store)
    await controller.initialize()
    assert controller.mode is SyncMode.FALLBACK

    result = await ProductMutationGateway(controller).create(ProductDraft(name="Fresh Peas", price=20))

    assert result.product.id == 2
    assert [p.id for p in controller.state.products] == [1, 2]


# --- Update --- #


@pytest.mark.asyncio
async def test_update_writes_back_to_store(store, controller, gateway):
    potatoes = controller.state.product(2)

    result = await gateway.update(potatoes.model_copy(update={"price": 33.5, "stock": "In Stock (80 kg)"}))

    assert result.success
    assert result.advisory == "Product updated successfully!"
    row = stored_row(store, "Fresh Potatoes")
    assert row["price"] == 33.5
    assert row["stock_quantity"] == 80
    assert "updated_at" in row
    assert controller.state.product(2).price == 33.5
    assert controller.state.product(2).stock == "In Stock (80 kg)"


@pytest.mark.asyncio
async def test_repeated_update_is_idempotent(controller, gateway):
    change = controller.state.product(1).model_copy(update={"price": 45})

    await gateway.update(change)
    after_first = [p.model_dump() for p in controller.state.products]
    await gateway.update(change)

    assert [p.model_dump() for p in controller.state.products] == after_first


@pytest.mark.asyncio
async def test_update_unknown_product_fails(store, gateway):
    result = await gateway.update(Product(id=99, name="Ghost", price=1))

    assert not result.success
    assert result.advisory == "Product 99 not found"
    assert store.calls_to("products", QueryOperation.UPDATE) == []


@pytest.mark.asyncio
async def test_failed_update_changes_nothing_locally(store, controller, gateway):
    before = [p.model_dump() for p in controller.state.products]
    store.fail_table("products", operation=QueryOperation.UPDATE)

    result = await gateway.update(controller.state.product(1).model_copy(update={"price": 99}))

    assert not result.success
    assert result.advisory == "Failed to update product"
    assert controller.state.advisories[-1].level is AdvisoryLevel.ERROR
    assert [p.model_dump() for p in controller.state.products] == before


@pytest.mark.asyncio
async def test_update_of_vanished_row_fails(store, controller, gateway):
    store.tables["products"] = [r for r in store.tables["products"] if r["name"] != "Fresh Tomatoes"]

    result = await gateway.update(controller.state.product(1).model_copy(update={"price": 41}))

    assert not result.success
    assert result.advisory == "Failed to update product"


@pytest.mark.asyncio
async def test_local_only_product_is_updated_in_memory(store, controller, gateway):
    store.fail_table("products", operation=QueryOperation.INSERT)
    local = (await gateway.create(okra())).product

    result = await gateway.update(local.model_copy(update={"price": 65}))

    assert result.success
    assert not result.persisted_remotely
    assert result.advisory == "Product updated locally!"
    assert controller.state.product(local.id).price == 65
    assert store.calls_to("products", QueryOperation.UPDATE) == []


@pytest.mark.asyncio
async def test_concurrent_changes_to_one_product_are_rejected():
    store = InMemoryStore.with_demo_data(latency=0.01)
    controller = CatalogSyncController(store)
    await controller.initialize()
    gateway = ProductMutationGateway(controller)
    tomatoes = controller.state.product(1)

    first, second = await asyncio.gather(
        gateway.update(tomatoes.model_copy(update={"price": 42})),
        gateway.delete(tomatoes.id),
    )

    assert first.success
    assert not second.success
    assert second.advisory == "Another change to product 1 is still in progress"
    assert controller.state.product(1).price == 42

    # The guard is released once the first change settles
    assert (await gateway.delete(tomatoes.id)).success


# --- Delete --- #


@pytest.mark.asyncio
async def test_delete_removes_row_and_identity(store, controller, gateway):
    result = await gateway.delete(2)

    assert result.success
    assert result.advisory == "Product deleted successfully!"
    assert result.product.name == "Fresh Potatoes"
    assert all(row["name"] != "Fresh Potatoes" for row in store.tables["products"])
    assert controller.state.product(2) is None
    assert 2 not in controller.state.identities
    assert [p.id for p in controller.state.products] == [1, 3]


@pytest.mark.asyncio
async def test_delete_unknown_product_fails(gateway):
    result = await gateway.delete(42)
    assert not result.success
    assert result.advisory == "Product 42 not found"


@pytest.mark.asyncio
async def test_failed_delete_keeps_product(store, controller, gateway):
    store.disconnect()

    result = await gateway.delete(1)

    assert not result.success
    assert result.advisory == "Failed to delete product"
    assert controller.state.product(1) is not None


@pytest.mark.asyncio
async def test_fallback_product_is_deleted_locally():
    store = InMemoryStore()
    store.disconnect()
    controller = CatalogSyncController(store)
    await controller.initialize()

    result = await ProductMutationGateway(controller).delete(1)

    assert result.success
    assert result.advisory == "Product deleted locally!"
    assert controller.state.products == []


# --- Events --- #


@pytest.mark.asyncio
async def test_mutations_publish_product_events(store):
    bus = EventBus()
    received: list[MarketEvent] = []

    async def collect(event: MarketEvent) -> None:
        received.append(event)

    for event_type in ("product.created", "product.updated", "product.deleted"):
        bus.subscribe(event_type, collect)
    controller = CatalogSyncController(store, event_bus=bus)
    await controller.initialize()
    gateway = ProductMutationGateway(controller)

    created = await gateway.create(okra())
    await gateway.update(created.product.model_copy(update={"price": 61}))
    await gateway.delete(created.product.id)

    assert [e.event_type for e in received] == ["product.created", "product.updated", "product.deleted"]
    assert all(e.source is MarketComponent.MUTATION_GATEWAY for e in received)
    assert received[0].payload["persisted_remotely"] is True
    assert received[1].payload["product"]["price"] == 61


@pytest.mark.asyncio
async def test_create_with_invalid_stored_row_does_not_raise(store, controller, gateway):
    store.tables["products"][0]["name"] = ""

    result = await gateway.create(ProductDraft(name="Peas", price=20))

    assert result.success
    assert result.persisted_remotely
    assert result.product.name == "Peas"
    assert "Fresh Tomatoes" not in [p.name for p in controller.state.products]


@pytest.mark.asyncio
async def test_create_reports_inserted_product_when_refetch_fails(store, controller, gateway):
    store.fail_table("products", operation=QueryOperation.SELECT)

    result = await gateway.create(okra())

    assert result.success
    assert result.advisory == "Product added successfully!"
    assert result.product.name == "Okra"
    assert result.product.id == 4
    assert controller.state.advisories[-2].collection == "products"
