# /shopstream/utils/dependencies.py

import secrets
import structlog
from fastapi import Depends, HTTPException, Request

from shopstream.config.settings import settings
from shopstream.services.ai_service import AIService
from shopstream.services.answer_service import AnswerService
from shopstream.services.cart_service import CartStore
from shopstream.services.catalog_service import CatalogService
from shopstream.services.inventory_service import InventoryStore
from shopstream.services.shopify_service import ShopifyService

# FastAPI dependency providers. Service instances are created once in the
# lifespan and kept on app.state; routes receive them through these functions
# so tests can swap them with app.dependency_overrides.

log = structlog.get_logger(__name__)


def get_shopify_service(request: Request) -> ShopifyService:
    return request.app.state.shopify_service


def get_inventory_store(request: Request) -> InventoryStore:
    return request.app.state.inventory_store


def get_catalog_service(
    shopify_service: ShopifyService = Depends(get_shopify_service),
    inventory_store: InventoryStore = Depends(get_inventory_store),
) -> CatalogService:
    return CatalogService(shopify_service, inventory_store)


def get_ai_service(request: Request) -> AIService:
    return request.app.state.ai_service


def get_answer_service(request: Request) -> AnswerService:
    return request.app.state.answer_service


def get_cart_store(request: Request) -> CartStore:
    return request.app.state.cart_store


async def verify_metrics_access(request: Request):
    if settings.api_key:
        provided_key = request.headers.get("X-API-KEY")
        if not (provided_key and secrets.compare_digest(provided_key, settings.api_key)):
            log.warning("Rejected metrics request.", path=request.url.path)
            raise HTTPException(status_code=403, detail="Invalid or missing API key")
