# /shopstream/services/catalog_service.py

import logging
from typing import List, Optional, Tuple

from shopstream.config.settings import settings
from shopstream.models.domain import Product
from shopstream.services.inventory_service import InventoryStore
from shopstream.services.mock_catalog import MOCK_PRODUCTS, filter_mock_catalog, find_mock_product
from shopstream.services.shopify_service import CredentialsMissingError, ShopifyService
from shopstream.utils.fallback import first_non_empty

# Decides where product results come from. Live searches cascade from the
# storefront to the mock catalog; inventory searches read the bulk-loaded
# index once it has been populated.

logger = logging.getLogger(__name__)


class CatalogService:
    def __init__(self, shopify_service: ShopifyService, inventory_store: InventoryStore, search_source: str = settings.product_search_source):
        self.shopify_service = shopify_service
        self.inventory_store = inventory_store
        self.search_source = search_source

    def _credentials(self, shop_domain: Optional[str], storefront_token: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
        return (
            shop_domain or settings.shopify_store_domain,
            storefront_token or settings.shopify_storefront_access_token,
        )

    async def search_live(self, query: str, shop_domain: Optional[str], storefront_token: Optional[str]) -> Tuple[str, List[Product]]:
        """
        One storefront page for ``query``, falling back to the mock catalog on
        any failure or an empty page. Never raises.
        """
        async def mock_provider() -> List[Product]:
            return filter_mock_catalog(query)

        if not shop_domain or not storefront_token:
            return "mock", filter_mock_catalog(query)

        async def storefront_provider() -> List[Product]:
            return await self.shopify_service.fetch_product_page(query, shop_domain, storefront_token)

        return await first_non_empty([
            ("storefront", storefront_provider),
            ("mock", mock_provider),
        ])

    async def search(
        self,
        query: str,
        shop_domain: Optional[str] = None,
        storefront_token: Optional[str] = None,
        source: Optional[str] = None,
    ) -> Tuple[str, List[Product]]:
        source = source or self.search_source
        if source == "inventory":
            if self.inventory_store.is_populated:
                return "inventory", self.inventory_store.search_by_text(query)
            logger.info("Inventory index is empty; searching the live storefront instead.")

        domain, token = self._credentials(shop_domain, storefront_token)
        return await self.search_live(query, domain, token)

    async def product_feed(self, query: str, shop_domain: Optional[str] = None, storefront_token: Optional[str] = None, source: Optional[str] = None) -> Tuple[str, List[Product]]:
        """Search results for the product grid; an empty result shows the whole mock catalog."""
        found_in, products = await self.search(query, shop_domain, storefront_token, source)
        if products:
            return found_in, products
        return "mock", list(MOCK_PRODUCTS)

    async def product_detail(self, product_id: str, shop_domain: Optional[str] = None, storefront_token: Optional[str] = None) -> Optional[Product]:
        """Full record for one product: storefront detail query, then the index, then the mock catalog."""
        domain, token = self._credentials(shop_domain, storefront_token)
        if domain and token:
            product = await self.shopify_service.get_product_details(product_id, domain, token)
            if product:
                return product
        return self.inventory_store.get(product_id) or find_mock_product(product_id)

    async def refresh_inventory(self, shop_domain: Optional[str] = None, storefront_token: Optional[str] = None) -> int:
        """
        Bulk loads the storefront and rebuilds the inventory index. Returns the
        new size.

        Raises:
            CredentialsMissingError: no shop domain or storefront token is known.
        """
        domain, token = self._credentials(shop_domain, storefront_token)
        if not domain or not token:
            raise CredentialsMissingError("Missing shopDomain or storefrontToken")

        async def loader() -> List[Product]:
            return await self.shopify_service.get_all_products(domain, token)

        return await self.inventory_store.refresh(loader)
