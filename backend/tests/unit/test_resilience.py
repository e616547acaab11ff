# backend/tests/unit/test_resilience.py
import logging
import pytest
import structlog
from unittest.mock import AsyncMock, MagicMock

from shopstream.config.settings import Settings, settings
from shopstream.utils.logging import renderer_for, setup_logging
from shopstream.utils.circuit_breaker import CircuitBreaker, CircuitOpenError, CircuitState
from shopstream.utils.request_utils import get_remote_address


# --- Circuit Breaker ---

@pytest.mark.asyncio
async def test_circuit_opens_after_threshold_and_blocks_calls():
    breaker = CircuitBreaker("storefront-test", failure_threshold=2, timeout=60)
    failing = AsyncMock(side_effect=RuntimeError("upstream down"))

    for _ in range(2):
        with pytest.raises(RuntimeError):
            await breaker.call(failing)

    assert breaker.state == CircuitState.OPEN
    with pytest.raises(CircuitOpenError):
        await breaker.call(failing)
    assert failing.await_count == 2


@pytest.mark.asyncio
async def test_circuit_half_open_recovers_after_successes():
    breaker = CircuitBreaker("storefront-test", failure_threshold=1, timeout=0, success_threshold=2)
    with pytest.raises(RuntimeError):
        await breaker.call(AsyncMock(side_effect=RuntimeError("blip")))
    breaker.last_failure_time -= 1

    ok = AsyncMock(return_value="ok")
    assert await breaker.call(ok) == "ok"
    assert breaker.state == CircuitState.HALF_OPEN
    assert await breaker.call(ok) == "ok"
    assert breaker.state == CircuitState.CLOSED


@pytest.mark.asyncio
async def test_success_resets_failure_count():
    breaker = CircuitBreaker("storefront-test", failure_threshold=2)
    with pytest.raises(RuntimeError):
        await breaker.call(AsyncMock(side_effect=RuntimeError("blip")))
    await breaker.call(AsyncMock(return_value=None))

    assert breaker.failure_count == 0
    assert breaker.state == CircuitState.CLOSED


# --- Rate Limit Key ---

def _request(headers=None, host="10.0.0.5"):
    request = MagicMock()
    request.headers = headers or {}
    request.client = MagicMock(host=host) if host else None
    return request


def test_remote_address_prefers_first_forwarded_hop():
    assert get_remote_address(_request({"x-forwarded-for": "203.0.113.7, 10.0.0.1"})) == "203.0.113.7"


def test_remote_address_falls_back_to_client_then_localhost():
    assert get_remote_address(_request()) == "10.0.0.5"
    assert get_remote_address(_request(host=None)) == "127.0.0.1"


# --- Settings ---

def test_settings_normalize_domain_and_origins():
    configured = Settings(
        shopify_store_domain="https://demo-shop.myshopify.com/",
        shopify_storefront_access_token="token",
        cors_allowed_origins="https://a.example.com, https://b.example.com",
    )

    assert configured.shopify_store_domain == "demo-shop.myshopify.com"
    assert configured.cors_allowed_origins == ["https://a.example.com", "https://b.example.com"]
    assert configured.has_shopify_credentials


def test_settings_reject_non_positive_page_size():
    with pytest.raises(ValueError):
        Settings(bulk_page_size=0)


# --- Metrics Access ---

def test_metrics_require_api_key_when_configured(test_client, mocker):
    mocker.patch.object(settings, "api_key", "metrics-secret")

    assert test_client.get("/metrics").status_code == 403
    assert test_client.get("/metrics", headers={"X-API-KEY": "wrong"}).status_code == 403
    assert test_client.get("/metrics", headers={"X-API-KEY": "metrics-secret"}).status_code == 200


def test_settings_require_upstream_deadline_inside_request_timeout():
    with pytest.raises(ValueError):
        Settings(upstream_deadline_seconds=30, request_timeout_seconds=30)
    assert Settings(upstream_deadline_seconds=5, request_timeout_seconds=10).upstream_deadline_seconds == 5


# --- Logging ---

def test_renderer_depends_on_environment():
    assert isinstance(renderer_for("development"), structlog.dev.ConsoleRenderer)
    assert isinstance(renderer_for("production"), structlog.processors.JSONRenderer)


def test_setup_logging_replaces_its_own_handler():
    root_logger = logging.getLogger()
    original_level = root_logger.level

    first = setup_logging("production", "warning")
    second = setup_logging("production", "info")
    try:
        structlog_handlers = [
            h for h in root_logger.handlers
            if isinstance(h.formatter, structlog.stdlib.ProcessorFormatter)
        ]
        assert structlog_handlers == [second]
        assert first not in root_logger.handlers
        assert root_logger.level == logging.INFO
        assert logging.getLogger("httpx").level == logging.WARNING
    finally:
        root_logger.removeHandler(second)
        root_logger.setLevel(original_level)
