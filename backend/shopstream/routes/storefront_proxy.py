# /shopstream/routes/storefront_proxy.py

import logging
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from shopstream.config.settings import settings
from shopstream.models.api import BulkProxyRequest, StorefrontProxyRequest
from shopstream.services.shopify_service import ShopifyService
from shopstream.utils.dependencies import get_shopify_service

# Thin pass-through routes to the Storefront GraphQL API. The browser shell
# calls these instead of Shopify directly; bodies come back untouched.

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Storefront Proxy"])

MISSING_CREDENTIALS = {"error": "Missing shopDomain or storefrontToken"}


@router.post("/shopify")
async def proxy_storefront_search(
    body: StorefrontProxyRequest,
    shopify_service: ShopifyService = Depends(get_shopify_service),
):
    shop_domain = body.shop_domain or settings.shopify_store_domain
    token = body.storefront_token or settings.shopify_storefront_access_token
    if not shop_domain or not token:
        return JSONResponse(MISSING_CREDENTIALS, status_code=400)

    try:
        status_code, data = await shopify_service.proxy_search(body.query, shop_domain, token)
    except Exception as e:
        logger.error(f"Storefront proxy route error: {e}", exc_info=True)
        return JSONResponse({"error": "Internal server error"}, status_code=500)
    return JSONResponse(data, status_code=status_code)


@router.post("/shopify-bulk")
async def proxy_storefront_bulk_page(
    body: BulkProxyRequest,
    shopify_service: ShopifyService = Depends(get_shopify_service),
):
    shop_domain = body.shop_domain or settings.shopify_store_domain
    token = body.storefront_token or settings.shopify_storefront_access_token
    if not shop_domain or not token:
        return JSONResponse(MISSING_CREDENTIALS, status_code=400)

    try:
        status_code, data = await shopify_service.proxy_bulk_page(body.cursor, shop_domain, token)
    except Exception as e:
        logger.error(f"Bulk proxy route error: {e}", exc_info=True)
        return JSONResponse({"error": "Internal server error"}, status_code=500)
    return JSONResponse(data, status_code=status_code)
