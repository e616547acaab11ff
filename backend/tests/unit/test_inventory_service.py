# backend/tests/unit/test_inventory_service.py
import asyncio
import httpx
import pytest
from unittest.mock import AsyncMock

from shopstream.models.domain import Product
from shopstream.services.catalog_service import CatalogService
from shopstream.services.inventory_service import SEARCH_LIMIT, InventoryStore
from shopstream.services.shopify_service import ShopifyService

SHOP = "test-shop.myshopify.com"
TOKEN = "storefront-test-token"


def _catalog():
    return [
        Product(id="p1", title="Cozy Hoodie", price=45, tags=["hoodie", "winter"], product_type="Tops"),
        Product(id="p2", title="Linen Shirt", price=30, tags=["summer"], product_type="Tops", vendor="Coastline"),
        Product(id="p3", title="Trail Boot", price=120, tags=["winter", "outdoor"], description="Waterproof leather"),
    ]


# --- Index Building ---

def test_rebuild_indexes_categories_and_tags():
    store = InventoryStore()
    store.rebuild(_catalog())

    stats = store.stats()
    assert stats["total_products"] == 3
    assert stats["cache_size"] == 3
    assert stats["total_categories"] == 2  # "Tops" and "winter" (first tag of p3)
    assert stats["total_tags"] == 4
    assert stats["last_updated"] is not None
    assert stats["is_loading"] is False


def test_every_indexed_id_resolves_to_a_product():
    store = InventoryStore()
    store.rebuild(_catalog())

    assert [p.id for p in store.by_category("Tops")] == ["p1", "p2"]
    assert [p.id for p in store.by_tag("winter")] == ["p1", "p3"]
    for product in store.all_products():
        assert product in store.by_category(product.category)
        for tag in product.tags:
            assert product in store.by_tag(tag)


def test_unknown_labels_return_empty_lists():
    store = InventoryStore()
    store.rebuild(_catalog())

    assert store.by_category("Shoes") == []
    assert store.by_tag("nonexistent") == []


def test_duplicate_ids_keep_the_first_product():
    store = InventoryStore()
    store.rebuild([Product(id="p1", title="First"), Product(id="p1", title="Second")])

    assert store.stats()["cache_size"] == 1
    assert store.get("p1").title == "First"


def test_rebuild_replaces_the_previous_index():
    store = InventoryStore()
    store.rebuild(_catalog())
    store.rebuild([Product(id="n1", title="New Arrival", tags=["new"])])

    assert store.get("p1") is None
    assert store.by_tag("winter") == []
    assert store.stats()["total_products"] == 1


def test_rebuild_with_empty_list_empties_the_index():
    store = InventoryStore()
    store.rebuild(_catalog())
    store.rebuild([])

    assert not store.is_populated
    assert store.stats()["cache_size"] == 0


# --- Text Search ---

def test_search_by_text_covers_title_tags_description_and_vendor():
    store = InventoryStore()
    store.rebuild(_catalog())

    assert [p.id for p in store.search_by_text("HOODIE")] == ["p1"]
    assert [p.id for p in store.search_by_text("coastline")] == ["p2"]
    assert [p.id for p in store.search_by_text("waterproof")] == ["p3"]
    assert [p.id for p in store.search_by_text("winter")] == ["p1", "p3"]
    assert store.search_by_text("sandal") == []


def test_search_by_text_is_capped():
    store = InventoryStore()
    store.rebuild([Product(id=f"p{i}", title=f"Basic Tee {i}") for i in range(30)])

    assert len(store.search_by_text("tee")) == SEARCH_LIMIT
    assert len(store.search_by_text("")) == SEARCH_LIMIT


# --- Refresh ---

@pytest.mark.asyncio
async def test_refresh_sets_loading_flag_while_the_loader_runs():
    store = InventoryStore()
    store.rebuild(_catalog())
    seen = {}

    async def loader():
        seen["is_loading"] = store.stats()["is_loading"]
        seen["old_size"] = store.stats()["cache_size"]
        return [Product(id="n1", title="New Arrival")]

    size = await store.refresh(loader)

    assert seen == {"is_loading": True, "old_size": 3}
    assert size == 1
    assert store.is_loading is False


@pytest.mark.asyncio
async def test_failed_refresh_keeps_previous_index_and_clears_flag():
    store = InventoryStore()
    store.rebuild(_catalog())

    async def loader():
        raise RuntimeError("storefront unreachable")

    with pytest.raises(RuntimeError):
        await store.refresh(loader)

    assert store.is_loading is False
    assert store.stats()["cache_size"] == 3


@pytest.mark.asyncio
async def test_refreshes_are_serialized():
    store = InventoryStore()
    events = []

    def make_loader(tag, products):
        async def loader():
            events.append(f"start-{tag}")
            await asyncio.sleep(0.01)
            events.append(f"end-{tag}")
            return products
        return loader

    await asyncio.gather(
        store.refresh(make_loader("a", _catalog())),
        store.refresh(make_loader("b", [Product(id="n1", title="New Arrival")])),
    )

    assert events == ["start-a", "end-a", "start-b", "end-b"]
    assert store.stats()["cache_size"] == 1


# --- Bulk Loading ---

@pytest.mark.asyncio
async def test_get_all_products_follows_cursors(mocker, shopify_service, make_bulk_page, make_response):
    mock_call = mocker.patch.object(ShopifyService, "resilient_api_call", new_callable=AsyncMock, side_effect=[
        make_response(make_bulk_page(0, 50, True, "c1")),
        make_response(make_bulk_page(50, 50, True, "c2")),
        make_response(make_bulk_page(100, 7, False, None)),
    ])

    products = await shopify_service.get_all_products(SHOP, TOKEN)

    assert len(products) == 107
    assert mock_call.await_count == 3
    cursors = [c.kwargs["json"]["variables"]["cursor"] for c in mock_call.call_args_list]
    assert cursors == [None, "c1", "c2"]


@pytest.mark.asyncio
async def test_bulk_refresh_populates_the_index(mocker, shopify_service, make_bulk_page, make_response):
    mocker.patch.object(ShopifyService, "resilient_api_call", new_callable=AsyncMock, side_effect=[
        make_response(make_bulk_page(0, 50, True, "c1")),
        make_response(make_bulk_page(50, 50, True, "c2")),
        make_response(make_bulk_page(100, 7, False, None)),
    ])
    store = InventoryStore()
    service = CatalogService(shopify_service, store)

    size = await service.refresh_inventory(SHOP, TOKEN)

    assert size == 107
    assert store.stats()["cache_size"] == 107
    assert len(store.by_tag("tee")) == 107


@pytest.mark.asyncio
async def test_get_all_products_stops_at_page_limit(mocker, shopify_service, make_bulk_page, make_response):
    mock_call = mocker.patch.object(ShopifyService, "resilient_api_call", new_callable=AsyncMock, side_effect=[
        make_response(make_bulk_page(0, 2, True, "c1")),
        make_response(make_bulk_page(2, 2, True, "c2")),
        make_response(make_bulk_page(4, 2, True, "c3")),
    ])

    products = await shopify_service.get_all_products(SHOP, TOKEN, max_pages=2)

    assert len(products) == 4
    assert mock_call.await_count == 2


@pytest.mark.asyncio
async def test_get_all_products_keeps_pages_loaded_before_a_failure(mocker, shopify_service, make_bulk_page, make_response):
    mocker.patch.object(ShopifyService, "resilient_api_call", new_callable=AsyncMock, side_effect=[
        make_response(make_bulk_page(0, 50, True, "c1")),
        httpx.ConnectError("connection reset"),
    ])

    products = await shopify_service.get_all_products(SHOP, TOKEN)

    assert len(products) == 50


@pytest.mark.asyncio
async def test_get_all_products_stops_when_cursor_is_missing(mocker, shopify_service, make_bulk_page, make_response):
    mock_call = mocker.patch.object(ShopifyService, "resilient_api_call", new_callable=AsyncMock, side_effect=[
        make_response(make_bulk_page(0, 3, True, None)),
    ])

    products = await shopify_service.get_all_products(SHOP, TOKEN)

    assert len(products) == 3
    assert mock_call.await_count == 1


@pytest.mark.asyncio
async def test_get_all_products_without_credentials_makes_no_requests(mocker, shopify_service):
    mock_call = mocker.patch.object(ShopifyService, "resilient_api_call", new_callable=AsyncMock)

    assert await shopify_service.get_all_products(None, TOKEN) == []
    assert await shopify_service.get_all_products(SHOP, "") == []
    mock_call.assert_not_awaited()


@pytest.mark.asyncio
async def test_get_all_products_raises_when_the_first_page_fails(mocker, shopify_service, make_response):
    mocker.patch.object(ShopifyService, "resilient_api_call", new_callable=AsyncMock, side_effect=[
        make_response({"errors": "Unauthorized"}, status_code=401),
    ])

    with pytest.raises(httpx.HTTPStatusError):
        await shopify_service.get_all_products(SHOP, TOKEN)


@pytest.mark.asyncio
async def test_outage_on_first_page_keeps_the_current_index(mocker, shopify_service):
    mocker.patch.object(
        ShopifyService, "resilient_api_call", new_callable=AsyncMock,
        side_effect=httpx.ConnectError("storefront down"),
    )
    store = InventoryStore()
    store.rebuild(_catalog())
    service = CatalogService(shopify_service, store)

    with pytest.raises(httpx.ConnectError):
        await service.refresh_inventory(SHOP, TOKEN)

    assert store.stats()["cache_size"] == 3
    assert store.is_loading is False
