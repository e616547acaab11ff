# /shopstream/routes/catalog.py

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from shopstream.config.settings import settings
from shopstream.models.api import (
    APIResponse,
    InventoryStatsResponse,
    ProductListResponse,
    ProductSearchRequest,
    StorefrontCredentials,
)
from shopstream.models.domain import Product
from shopstream.services.catalog_service import CatalogService
from shopstream.services.inventory_service import InventoryStore
from shopstream.services.shopify_service import CredentialsMissingError
from shopstream.utils.dependencies import get_catalog_service, get_inventory_store

# Product search, product detail and the inventory index endpoints.

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Catalog"])


@router.post("/products/search", response_model=ProductListResponse)
async def search_products(body: ProductSearchRequest, catalog_service: CatalogService = Depends(get_catalog_service)):
    source, products = await catalog_service.search(body.query, body.shop_domain, body.storefront_token, body.source)
    return ProductListResponse(source=source, count=len(products), products=products)


@router.post("/products/feed", response_model=ProductListResponse)
async def product_feed(body: ProductSearchRequest, catalog_service: CatalogService = Depends(get_catalog_service)):
    """Products for the grid; never empty."""
    source, products = await catalog_service.product_feed(body.query, body.shop_domain, body.storefront_token, body.source)
    return ProductListResponse(source=source, count=len(products), products=products)


@router.get("/products/detail", response_model=Product)
async def product_detail(
    id: str = Query(..., min_length=1),
    shop_domain: Optional[str] = Query(default=None, alias="shopDomain"),
    storefront_token: Optional[str] = Query(default=None, alias="storefrontToken"),
    catalog_service: CatalogService = Depends(get_catalog_service),
):
    product = await catalog_service.product_detail(id, shop_domain, storefront_token)
    if product is None:
        raise HTTPException(status_code=404, detail=f"Product {id} not found")
    return product


# --- Inventory Index ---

@router.post("/inventory/refresh", response_model=APIResponse)
async def refresh_inventory(
    body: Optional[StorefrontCredentials] = None,
    catalog_service: CatalogService = Depends(get_catalog_service),
    inventory_store: InventoryStore = Depends(get_inventory_store),
):
    body = body or StorefrontCredentials()
    try:
        size = await catalog_service.refresh_inventory(body.shop_domain, body.storefront_token)
    except CredentialsMissingError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Inventory refresh failed: {e}", exc_info=True)
        raise HTTPException(status_code=502, detail="Inventory refresh failed")

    stats = InventoryStatsResponse(**inventory_store.stats())
    return APIResponse(
        success=True,
        message=f"Inventory loaded with {size} products.",
        data=stats.model_dump(mode="json", by_alias=True),
        version=settings.api_version
    )


@router.get("/inventory/stats", response_model=InventoryStatsResponse)
async def inventory_stats(inventory_store: InventoryStore = Depends(get_inventory_store)):
    return InventoryStatsResponse(**inventory_store.stats())


@router.get("/inventory/search", response_model=List[Product])
async def inventory_search(q: str = "", inventory_store: InventoryStore = Depends(get_inventory_store)):
    return inventory_store.search_by_text(q)


@router.get("/inventory/category/{label:path}", response_model=List[Product])
async def inventory_by_category(label: str, inventory_store: InventoryStore = Depends(get_inventory_store)):
    return inventory_store.by_category(label)


@router.get("/inventory/tag/{label:path}", response_model=List[Product])
async def inventory_by_tag(label: str, inventory_store: InventoryStore = Depends(get_inventory_store)):
    return inventory_store.by_tag(label)
