# /shopstream/services/shopify_service.py

import time
import httpx
import asyncio
import logging
import tenacity
from typing import Any, Dict, List, Optional, Tuple

from shopstream.config.settings import settings
from shopstream.models.domain import Product
from shopstream.services.product_query_adapter import (
    build_bulk_variables,
    build_search_expression,
    build_search_variables,
)
from shopstream.utils.circuit_breaker import CircuitBreaker
from shopstream.utils.metrics import bulk_pages_counter

logger = logging.getLogger(__name__)

STOREFRONT_SEARCH_QUERY = """
query ShopstreamProducts($q: String!, $first: Int!) {
  products(first: $first, query: $q) {
    edges { node {
      id title tags totalInventory
      images(first: 1) { edges { node { url } } }
      variants(first: 1) { edges { node { id price { amount currencyCode } } } }
      metafields(first: 10, namespace: "custom") { edges { node { key value } } }
    }}
  }
}"""

# Description, vendor, type and metafields are left out to keep pages small.
BULK_PRODUCTS_QUERY = """
query BulkProducts($cursor: String, $first: Int!) {
  products(first: $first, after: $cursor) {
    pageInfo { hasNextPage endCursor }
    edges { node {
      id title tags totalInventory
      images(first: 1) { edges { node { url } } }
      variants(first: 1) { edges { node { id price { amount currencyCode } } } }
    }}
  }
}"""

PRODUCT_DETAIL_QUERY = """
query ProductDetail($id: ID!) {
  product(id: $id) {
    id title description vendor productType tags totalInventory createdAt updatedAt
    images(first: 10) { edges { node { url altText } } }
    variants(first: 10) { edges { node { id title availableForSale price { amount currencyCode } } } }
    metafields(first: 10, namespace: "custom") { edges { node { key value } } }
  }
}"""


class CredentialsMissingError(Exception):
    """Raised when a Storefront call is attempted without a shop domain or token."""


class ShopifyService:
    def __init__(self, api_version: str = settings.shopify_api_version, http_client: Optional[httpx.AsyncClient] = None):
        self.api_version = api_version
        self.circuit_breaker = CircuitBreaker("shopify")
        self.http_client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(
                settings.http_timeout,
                read=settings.http_read_timeout,
                connect=settings.http_connect_timeout,
            )
        )

    @tenacity.retry(
        retry=tenacity.retry_if_exception_type((httpx.RequestError, httpx.TimeoutException)),
        stop=tenacity.stop_after_attempt(3),
        wait=tenacity.wait_exponential(multiplier=2, min=1, max=10),
        before_sleep=tenacity.before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def resilient_api_call(self, func, *args, **kwargs):
        return await func(*args, **kwargs)

    async def aclose(self):
        await self.http_client.aclose()

    # --- Catalog Reads ---

    async def fetch_product_page(self, query: str, shop_domain: str, storefront_token: str) -> List[Product]:
        """
        Fetches one page of search results. Raises on transport errors,
        non-success statuses and unparseable bodies so that callers can fall
        back to another source.
        """
        variables = build_search_variables(query, settings.catalog_page_size)
        data = await self._execute_storefront_query(shop_domain, storefront_token, STOREFRONT_SEARCH_QUERY, variables)
        edges = (data.get("products") or {}).get("edges", [])
        return self._parse_products(edges)

    async def fetch_bulk_page(
        self, shop_domain: str, storefront_token: str, cursor: Optional[str] = None
    ) -> Tuple[List[Product], bool, Optional[str]]:
        """Fetches one listing page and returns (products, has_next_page, end_cursor)."""
        variables = build_bulk_variables(cursor, settings.bulk_page_size)
        data = await self._execute_storefront_query(shop_domain, storefront_token, BULK_PRODUCTS_QUERY, variables)
        connection = data.get("products") or {}
        page_info = connection.get("pageInfo") or {}
        products = self._parse_products(connection.get("edges", []))
        return products, bool(page_info.get("hasNextPage")), page_info.get("endCursor")

    async def get_all_products(
        self,
        shop_domain: Optional[str],
        storefront_token: Optional[str],
        max_pages: Optional[int] = None,
        max_seconds: Optional[float] = None,
    ) -> List[Product]:
        """
        Drains the storefront listing page by page, following ``endCursor``
        while ``hasNextPage`` is set.

        Loading is best effort: a failing page, the page limit or the time
        limit stops the loop and whatever was accumulated so far is returned.
        A failure on the very first page is raised instead, since an empty
        result would otherwise wipe a good index.
        """
        if not shop_domain or not storefront_token:
            logger.warning("Bulk catalog load skipped: missing shop domain or storefront token.")
            return []

        max_pages = max_pages or settings.bulk_max_pages
        max_seconds = max_seconds or settings.bulk_max_seconds

        products: List[Product] = []
        cursor: Optional[str] = None
        pages = 0
        started = time.monotonic()

        logger.info(f"Starting bulk catalog load from {shop_domain}...")

        while True:
            if pages >= max_pages:
                logger.warning(f"Bulk catalog load hit the page limit ({max_pages}); returning {len(products)} products.")
                break
            if time.monotonic() - started > max_seconds:
                logger.warning(f"Bulk catalog load exceeded {max_seconds}s; returning {len(products)} products.")
                break

            try:
                page, has_next_page, cursor = await self.fetch_bulk_page(shop_domain, storefront_token, cursor)
            except Exception as e:
                bulk_pages_counter.labels(status="error").inc()
                if pages == 0:
                    # Nothing was loaded; let the caller keep its current index.
                    logger.error(f"Bulk catalog load failed on the first page: {e}")
                    raise
                logger.error(f"Bulk catalog load stopped after {pages} pages: {e}", exc_info=True)
                break

            pages += 1
            bulk_pages_counter.labels(status="success").inc()
            products.extend(page)

            if not has_next_page:
                break
            if not cursor:
                logger.warning("Storefront reported another page without an end cursor; stopping.")
                break

        logger.info(f"Bulk catalog load fetched {len(products)} products in {pages} pages.")
        return products

    async def get_product_details(self, product_id: str, shop_domain: str, storefront_token: str) -> Optional[Product]:
        """Gets a single product with its extended fields by GraphQL GID."""
        try:
            data = await self._execute_storefront_query(shop_domain, storefront_token, PRODUCT_DETAIL_QUERY, {"id": product_id})
            node = data.get("product")
            if not node:
                return None
            return Product.from_storefront_node(node)
        except Exception as e:
            logger.error(f"get_product_details error for {product_id}: {e}")
            return None

    # --- Raw Proxies ---

    async def proxy_search(self, query: Optional[str], shop_domain: str, storefront_token: str) -> Tuple[int, Dict[str, Any]]:
        """Passes a single-page search through and returns (status, body) untouched on success."""
        variables = {"q": build_search_expression(query), "first": settings.catalog_page_size}
        resp = await self._post(shop_domain, storefront_token, STOREFRONT_SEARCH_QUERY, variables)
        return self._proxy_result(resp)

    async def proxy_bulk_page(self, cursor: Optional[str], shop_domain: str, storefront_token: str) -> Tuple[int, Dict[str, Any]]:
        resp = await self._post(shop_domain, storefront_token, BULK_PRODUCTS_QUERY, build_bulk_variables(cursor, settings.bulk_page_size))
        return self._proxy_result(resp)

    # --- Private Helper Methods ---

    def _endpoint(self, shop_domain: str) -> str:
        domain = shop_domain.replace("https://", "").replace("http://", "").strip("/")
        return f"https://{domain}/api/{self.api_version}/graphql.json"

    async def _post(self, shop_domain: str, storefront_token: str, query: str, variables: Dict) -> httpx.Response:
        if not shop_domain or not storefront_token:
            raise CredentialsMissingError("Missing shopDomain or storefrontToken")
        headers = {"Content-Type": "application/json", "X-Shopify-Storefront-Access-Token": storefront_token}
        return await self.circuit_breaker.call(
            self._call_within_deadline,
            self.http_client.post,
            self._endpoint(shop_domain),
            json={"query": query, "variables": variables},
            headers=headers,
        )

    async def _call_within_deadline(self, func, *args, **kwargs):
        """Bounds one upstream call, retries included, by upstream_deadline_seconds."""
        return await asyncio.wait_for(
            self.resilient_api_call(func, *args, **kwargs),
            timeout=settings.upstream_deadline_seconds,
        )

    async def _execute_storefront_query(self, shop_domain: str, storefront_token: str, query: str, variables: Dict) -> Dict:
        """Executes a Storefront GraphQL query and returns its ``data`` object."""
        resp = await self._post(shop_domain, storefront_token, query, variables)
        resp.raise_for_status()
        body = resp.json()
        if not isinstance(body, dict):
            raise ValueError("Storefront response is not a JSON object")
        if body.get("errors") and not body.get("data"):
            raise ValueError(f"Storefront GraphQL errors: {body['errors']}")
        return body.get("data") or {}

    def _proxy_result(self, resp: httpx.Response) -> Tuple[int, Dict[str, Any]]:
        if not resp.is_success:
            logger.error(f"Shopify API Error: {resp.status_code} {resp.text}")
            return resp.status_code, {"error": f"Shopify API error: {resp.status_code}"}
        return resp.status_code, resp.json()

    def _parse_products(self, edges: List[Dict]) -> List[Product]:
        """Normalizes product edges; malformed nodes are logged and skipped."""
        products = []
        for edge in edges:
            node = (edge or {}).get("node")
            if not node:
                continue
            try:
                products.append(Product.from_storefront_node(node))
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                logger.error(f"Could not parse storefront product {node.get('id')}: {e}")
        return products
