import pytest
import httpx
from pathlib import Path
from fastapi.testclient import TestClient
from dotenv import load_dotenv
from unittest.mock import MagicMock

# Load the test environment FIRST, before any shopstream imports, so that the
# settings object is built from .env.test.
load_dotenv(dotenv_path=Path(__file__).resolve().parents[1] / ".env.test")

from shopstream.main import app  # noqa: E402
from shopstream.services.shopify_service import ShopifyService  # noqa: E402

SHOP_DOMAIN = "test-shop.myshopify.com"
STOREFRONT_TOKEN = "storefront-test-token"
GRAPHQL_URL = f"https://{SHOP_DOMAIN}/api/2024-10/graphql.json"


@pytest.fixture
def make_node():
    """Factory for Storefront product nodes shaped like the search/bulk queries return."""
    def _make(index: int, price: str | None = "10.00", tags=None, inventory=5, image=True, metafields=None):
        node = {
            "id": f"gid://shopify/Product/{index}",
            "title": f"Product {index}",
            "tags": tags if tags is not None else ["tee"],
            "totalInventory": inventory,
            "images": {"edges": [{"node": {"url": f"https://cdn.example.com/{index}.jpg"}}]} if image else {"edges": []},
            "variants": {"edges": [{"node": {
                "id": f"gid://shopify/ProductVariant/{index}",
                "price": {"amount": price, "currencyCode": "USD"} if price is not None else None,
            }}]},
        }
        if metafields is not None:
            node["metafields"] = {"edges": [{"node": {"key": k, "value": v}} for k, v in metafields]}
        return node
    return _make


@pytest.fixture
def make_response():
    """Factory for real httpx responses so raise_for_status/json behave as in production."""
    def _make(payload=None, status_code: int = 200, text: str | None = None):
        request = httpx.Request("POST", GRAPHQL_URL)
        if text is not None:
            return httpx.Response(status_code, text=text, request=request)
        return httpx.Response(status_code, json=payload, request=request)
    return _make


@pytest.fixture
def make_bulk_page(make_node):
    def _make(start: int, count: int, has_next_page: bool, end_cursor: str | None):
        return {"data": {"products": {
            "pageInfo": {"hasNextPage": has_next_page, "endCursor": end_cursor},
            "edges": [{"node": make_node(start + i)} for i in range(count)],
        }}}
    return _make


@pytest.fixture
def shopify_service():
    """ShopifyService whose HTTP client is never reached; tests patch resilient_api_call."""
    return ShopifyService(http_client=MagicMock())


@pytest.fixture(scope="function")
def test_client():
    """TestClient that runs the app lifespan, so app.state holds fresh services per test."""
    with TestClient(app) as client:
        yield client
