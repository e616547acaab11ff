# /shopstream/routes/public.py

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse
from prometheus_client import generate_latest

from shopstream.config.settings import settings
from shopstream.models.api import APIResponse
from shopstream.services.ai_service import AIService
from shopstream.services.inventory_service import InventoryStore
from shopstream.utils.dependencies import get_ai_service, get_inventory_store, verify_metrics_access

# Public endpoints without authentication: service info, health checks and
# the Prometheus scrape endpoint (gated by an API key when one is configured).

router = APIRouter()


@router.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": "Shopstream Storefront API",
        "version": "1.0.0",
        "status": "operational",
        "environment": settings.environment
    }


@router.get("/health", summary="Basic Health Check")
async def health_check():
    """Basic health check for load balancers."""
    return {"status": "healthy", "timestamp": datetime.utcnow()}


@router.get("/health/ready", summary="Readiness Probe")
async def readiness_check(inventory_store: InventoryStore = Depends(get_inventory_store)):
    """Ready once the configured search source can serve results."""
    if settings.product_search_source == "inventory" and not inventory_store.is_populated:
        raise HTTPException(status_code=503, detail="Service not ready: inventory index is empty")
    return {"status": "ready"}


@router.get("/health/live", summary="Liveness Probe")
async def liveness_check():
    return {"status": "alive"}


@router.get("/health/detailed", response_model=APIResponse, tags=["Admin"])
async def comprehensive_health_check(
    inventory_store: InventoryStore = Depends(get_inventory_store),
    ai_service: AIService = Depends(get_ai_service),
):
    """Detailed status of the upstreams and the inventory index."""
    stats = inventory_store.stats()
    health_status = {
        "status": "healthy",
        "services": {
            "shopify": "configured" if settings.has_shopify_credentials else "mock_catalog",
            "openai": "configured" if ai_service.is_configured else "not_configured",
            "answer_service": "configured" if settings.answer_service_url else "heuristic",
        },
        "inventory": {
            "products": stats["total_products"],
            "is_loading": stats["is_loading"],
            "last_updated": stats["last_updated"].isoformat() if stats["last_updated"] else None,
        },
    }
    if settings.product_search_source == "inventory" and not stats["total_products"]:
        health_status["status"] = "degraded"

    return APIResponse(
        success=True,
        message="Comprehensive health status retrieved.",
        data=health_status,
        version=settings.api_version
    )


@router.get("/metrics", tags=["Monitoring"])
async def metrics(_: bool = Depends(verify_metrics_access)):
    """Secured Prometheus metrics endpoint."""
    return PlainTextResponse(generate_latest(), media_type="text/plain")
