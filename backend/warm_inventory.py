import argparse
import asyncio
import json
import logging

# Loads .env.local for local script execution before settings are imported.
from dotenv import load_dotenv
load_dotenv(dotenv_path='backend/.env.local')

from shopstream.services.catalog_service import CatalogService  # noqa: E402
from shopstream.services.inventory_service import InventoryStore  # noqa: E402
from shopstream.services.shopify_service import ShopifyService  # noqa: E402

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


async def main(shop_domain: str | None, storefront_token: str | None) -> int:
    """Drains the storefront once, builds the inventory index and prints its stats."""
    shopify_service = ShopifyService()
    store = InventoryStore()
    catalog_service = CatalogService(shopify_service, store)

    try:
        logger.info("--- Loading the storefront catalog into the inventory index ---")
        size = await catalog_service.refresh_inventory(shop_domain, storefront_token)
        logger.info(f"--- Loaded {size} products ---")
        print(json.dumps(store.stats(), default=str, indent=2))
        return 0
    except Exception as e:
        logger.error(f"Inventory warm-up failed: {e}", exc_info=True)
        return 1
    finally:
        await shopify_service.aclose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Bulk load a Shopify storefront and report inventory stats.")
    parser.add_argument("--shop-domain", help="e.g. mystore.myshopify.com (defaults to SHOPIFY_STORE_DOMAIN)")
    parser.add_argument("--token", help="Storefront access token (defaults to SHOPIFY_STOREFRONT_ACCESS_TOKEN)")
    args = parser.parse_args()
    raise SystemExit(asyncio.run(main(args.shop_domain, args.token)))
