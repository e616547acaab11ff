# /shopstream/utils/lifecycle.py

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI

from shopstream.config.settings import settings
from shopstream.services.ai_service import AIService
from shopstream.services.answer_service import AnswerService
from shopstream.services.cart_service import CartStore
from shopstream.services.catalog_service import CatalogService
from shopstream.services.inventory_service import InventoryStore
from shopstream.services.shopify_service import ShopifyService
from shopstream.utils.logging import setup_logging

# Application lifespan: builds the service instances the routes depend on and
# closes their HTTP clients on shutdown.

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""
    setup_logging()

    logger.info("Application starting up...")
    logger.info(f"Product search source: {settings.product_search_source}")

    app.state.shopify_service = ShopifyService()
    app.state.inventory_store = InventoryStore()
    app.state.ai_service = AIService(api_key=settings.openai_api_key)
    app.state.answer_service = AnswerService(settings.answer_service_url)
    app.state.cart_store = CartStore()

    if settings.warm_inventory_on_startup and settings.has_shopify_credentials:
        catalog_service = CatalogService(app.state.shopify_service, app.state.inventory_store)
        try:
            size = await catalog_service.refresh_inventory()
            logger.info(f"Inventory warmed with {size} products.")
        except Exception as e:
            logger.error(f"Inventory warm-up failed: {e}", exc_info=True)

    logger.info("Application startup complete. Ready to accept requests.")

    yield

    logger.info("Application shutting down...")

    await app.state.shopify_service.aclose()
    await app.state.answer_service.aclose()
    await app.state.ai_service.aclose()
