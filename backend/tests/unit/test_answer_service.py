# backend/tests/unit/test_answer_service.py
import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock

from shopstream.config import strings
from shopstream.models.domain import Product
from shopstream.services.answer_service import (
    AnswerService,
    best_under_budget,
    describe_pick,
    format_price,
    pick_best_under_budget,
    translate,
)
from shopstream.services.mock_catalog import MOCK_PRODUCTS

ANSWER_URL = "https://answers.example.com/answer"
EXPECTED_MOCK_ANSWER = "Best under budget: StrideRunner Sneaker ($89.99). Features: Mesh upper, Cushion midsole."


@pytest.mark.parametrize("lang,expected", [
    ("fr", "FR: Bonjour"),
    ("es", "ES: Bonjour"),
    ("hi", "HI: Bonjour"),
    ("en", "Bonjour"),
    ("de", "Bonjour"),
    (None, "Bonjour"),
])
def test_translate_prefixes_known_languages(lang, expected):
    assert translate("Bonjour", lang) == expected


def test_format_price_drops_trailing_zeros():
    assert format_price(99.0) == "99"
    assert format_price(79.5) == "79.5"
    assert format_price(89.99) == "89.99"


def test_best_under_budget_picks_highest_rated_mock_product():
    assert best_under_budget("what's best under 100?", MOCK_PRODUCTS, "en") == EXPECTED_MOCK_ANSWER


def test_best_under_budget_translates():
    assert best_under_budget("", MOCK_PRODUCTS, "fr") == "FR: " + EXPECTED_MOCK_ANSWER


def test_nothing_under_budget():
    pricey = [Product(id="x", title="Designer Coat", price=450, rating=5)]
    assert best_under_budget("cheap", pricey) == strings.NOTHING_UNDER_BUDGET
    assert best_under_budget("cheap", []) == strings.NOTHING_UNDER_BUDGET


def test_ceiling_is_inclusive_and_ties_keep_first():
    products = [
        Product(id="a", title="Exactly Hundred", price=100, rating=4.0),
        Product(id="b", title="Same Rating", price=20, rating=4.0),
        Product(id="c", title="Over", price=100.01, rating=5.0),
    ]
    assert pick_best_under_budget(products).id == "a"


def test_describe_pick_mentions_rating_colors_and_stock():
    answer = describe_pick("running shoes", MOCK_PRODUCTS)

    assert "StrideRunner Sneaker" in answer
    assert "4.6 star rating" in answer
    assert "Black, White, Volt" in answer
    assert "27 units" in answer


# --- Ask Host ---

def _answer_client(**post_kwargs):
    client = MagicMock()
    client.post = AsyncMock(**post_kwargs)
    return client


def _response(payload, status_code=200):
    return httpx.Response(status_code, json=payload, request=httpx.Request("POST", ANSWER_URL))


@pytest.mark.asyncio
async def test_ask_host_without_service_uses_heuristic():
    client = _answer_client()
    service = AnswerService(None, http_client=client)

    assert await service.ask_host("best?", MOCK_PRODUCTS) == EXPECTED_MOCK_ANSWER
    client.post.assert_not_awaited()


@pytest.mark.asyncio
async def test_ask_host_returns_service_answer():
    client = _answer_client(return_value=_response({"answer": "Go with the CloudLite."}))
    service = AnswerService(ANSWER_URL, http_client=client)

    assert await service.ask_host("best?", MOCK_PRODUCTS, "es") == "Go with the CloudLite."
    payload = client.post.call_args.kwargs["json"]
    assert payload["prompt"] == "best?"
    assert payload["lang"] == "es"
    assert len(payload["products"]) == 3


@pytest.mark.asyncio
async def test_ask_host_missing_answer_field():
    service = AnswerService(ANSWER_URL, http_client=_answer_client(return_value=_response({})))

    assert await service.ask_host("best?", MOCK_PRODUCTS) == strings.NO_ANSWER_RETURNED


@pytest.mark.asyncio
async def test_ask_host_failure_degrades_with_prefix():
    client = _answer_client(side_effect=httpx.ConnectError("unreachable"))
    service = AnswerService(ANSWER_URL, http_client=client)

    answer = await service.ask_host("best?", MOCK_PRODUCTS)

    assert answer == "AI Host error (fallback): " + EXPECTED_MOCK_ANSWER


@pytest.mark.asyncio
async def test_ask_host_error_status_degrades_with_prefix():
    service = AnswerService(ANSWER_URL, http_client=_answer_client(return_value=_response({"error": "down"}, 503)))

    answer = await service.ask_host("best?", MOCK_PRODUCTS, "hi")

    assert answer == "AI Host error (fallback): HI: " + EXPECTED_MOCK_ANSWER
