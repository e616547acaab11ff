# /shopstream/main.py

import os
import time
import uvicorn
import asyncio
import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from shopstream.config.settings import settings
from shopstream.utils.lifecycle import lifespan
from shopstream.utils.metrics import response_time_histogram
from shopstream.utils.rate_limiter import limiter
from shopstream.routes import assistant, cart, catalog, diagnostics, public, storefront_proxy

API_PREFIX = f"/api/{settings.api_version}"

app = FastAPI(
    title="Shopstream Storefront API",
    version="1.0.0",
    description="Catalog, inventory, cart and AI host endpoints for the Shopstream live-shopping demo",
    lifespan=lifespan,
    openapi_url=f"{API_PREFIX}/openapi.json" if settings.environment != "production" else None,
    docs_url=f"{API_PREFIX}/docs" if settings.environment != "production" else None,
    redoc_url=f"{API_PREFIX}/redoc" if settings.environment != "production" else None,
)

# --- Rate Limiting ---
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# --- Middleware ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_credentials="*" not in settings.cors_allowed_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(SlowAPIMiddleware)


def endpoint_label(request: Request) -> str:
    """Route template such as ``/api/v1/cart/{session_id}``; unmatched paths share one label."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


@app.middleware("http")
async def performance_middleware(request: Request, call_next):
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(method=request.method, path=request.url.path)
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response_time_histogram.labels(endpoint=endpoint_label(request)).observe(process_time)
    response.headers["X-Process-Time"] = str(process_time)
    return response


@app.middleware("http")
async def timeout_middleware(request: Request, call_next):
    # Bulk inventory loads have their own time bound; each page is further
    # bounded by upstream_deadline_seconds.
    if request.url.path.endswith("/inventory/refresh"):
        timeout = settings.bulk_max_seconds + settings.request_timeout_seconds
    else:
        timeout = settings.request_timeout_seconds
    try:
        return await asyncio.wait_for(call_next(request), timeout=timeout)
    except asyncio.TimeoutError:
        return JSONResponse({"detail": "Request timed out"}, status_code=504)


# --- API Routers ---
app.include_router(public.router)
app.include_router(storefront_proxy.router, prefix="/api")
app.include_router(catalog.router, prefix=API_PREFIX)
app.include_router(assistant.router, prefix=API_PREFIX)
app.include_router(cart.router, prefix=API_PREFIX)
app.include_router(diagnostics.router, prefix=API_PREFIX)

# --- Main Entry Point for Uvicorn (for local development) ---
if __name__ == "__main__":
    port = int(os.getenv("PORT", "8000"))
    host = os.getenv("HOST", "127.0.0.1")

    uvicorn.run(
        "shopstream.main:app",
        host=host,
        port=port,
        reload=True if settings.environment == "development" else False,
        workers=settings.workers if settings.environment == "production" else 1
    )
