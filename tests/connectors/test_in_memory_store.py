import pytest

from config.config import DEMO_SELLER_ID
from connectors.in_memory_store import InMemoryStore
from connectors.remote_store import QueryOperation


@pytest.fixture
def store() -> InMemoryStore:
    """Provides an InMemoryStore seeded with the demo catalog."""
    return InMemoryStore.with_demo_data()


@pytest.mark.asyncio
async def test_select_filters_and_orders(store):
    response = await store.table("products").select("*").eq("status", "active").order("created_at", desc=True).execute()
    assert response.ok
    names = [row["name"] for row in response.data]
    assert names == ["Fresh Tomatoes", "Fresh Potatoes", "Red Onions"]


@pytest.mark.asyncio
async def test_select_projection_and_limit(store):
    response = await store.table("products").select("id, name").order("price").limit(2).execute()
    assert response.data == [
        {"id": "10000000-0000-0000-0000-000000000004", "name": "Winter Carrots"},
        {"id": "10000000-0000-0000-0000-000000000002", "name": "Fresh Potatoes"},
    ]


@pytest.mark.asyncio
async def test_select_unknown_column_is_store_error(store):
    response = await store.table("products").select("count").limit(1).execute()
    assert response.error is not None
    assert response.error.code == "42703"


@pytest.mark.asyncio
async def test_single_requires_exactly_one_row(store):
    response = await store.table("products").select("*").eq("seller_id", DEMO_SELLER_ID).single().execute()
    assert response.error is not None
    assert response.error.code == "PGRST116"


@pytest.mark.asyncio
async def test_maybe_single_allows_no_rows(store):
    response = await store.table("seller_stats").select("*").eq("seller_id", "nobody").maybe_single().execute()
    assert response.ok
    assert response.data is None


@pytest.mark.asyncio
async def test_insert_assigns_id_and_returns_row(store):
    response = await store.table("products").insert({"name": "Okra", "price": 60}).select().single().execute()
    assert response.ok
    assert response.data["name"] == "Okra"
    assert response.data["id"]
    assert len(store.tables["products"]) == 5


@pytest.mark.asyncio
async def test_insert_without_select_returns_no_data(store):
    response = await store.table("reviews").insert({"product_id": "p", "buyer_id": "b", "rating": 3}).execute()
    assert response.ok
    assert response.data is None


@pytest.mark.asyncio
async def test_insert_duplicate_id_is_store_error(store):
    response = await store.table("products").insert({"id": "10000000-0000-0000-0000-000000000001"}).execute()
    assert response.error.code == "23505"


@pytest.mark.asyncio
async def test_update_and_delete_match_filters(store):
    pid = "10000000-0000-0000-0000-000000000002"
    updated = await store.table("products").update({"price": 33}).eq("id", pid).select().execute()
    assert [row["price"] for row in updated.data] == [33]

    deleted = await store.table("products").delete().eq("id", pid).select().execute()
    assert len(deleted.data) == 1
    assert all(row["id"] != pid for row in store.tables["products"])

    missing = await store.table("products").delete().eq("id", pid).select().execute()
    assert missing.data == []


@pytest.mark.asyncio
async def test_upsert_updates_or_inserts(store):
    await store.table("seller_stats").upsert(
        {"id": "40000000-0000-0000-0000-000000000001", "total_orders": 4}
    ).execute()
    await store.table("seller_stats").upsert({"id": "new-stats", "seller_id": "s2"}).execute()

    rows = {row["id"]: row for row in store.tables["seller_stats"]}
    assert rows["40000000-0000-0000-0000-000000000001"]["total_orders"] == 4
    assert rows["40000000-0000-0000-0000-000000000001"]["seller_id"] == DEMO_SELLER_ID
    assert "new-stats" in rows


@pytest.mark.asyncio
async def test_injected_table_failure(store):
    store.fail_table("notifications", message="permission denied", code="42501")
    response = await store.table("notifications").select("*").execute()
    assert response.error.message == "permission denied"

    store.restore_table("notifications")
    assert (await store.table("notifications").select("*").execute()).ok


@pytest.mark.asyncio
async def test_injected_operation_failure_only_affects_that_operation(store):
    store.fail_table("products", operation=QueryOperation.INSERT)
    assert (await store.table("products").select("id").execute()).ok
    assert not (await store.table("products").insert({"name": "Okra"}).execute()).ok


@pytest.mark.asyncio
async def test_disconnected_store_raises(store):
    store.disconnect()
    with pytest.raises(ConnectionError):
        await store.table("products").select("id").execute()
    assert len(store.calls_to("products")) == 1
