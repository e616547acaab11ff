# /shopstream/services/ai_service.py

import json
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from openai import AsyncOpenAI
from pydantic import ValidationError

from shopstream.config import strings
from shopstream.config.persona import OUTFIT_PROMPT_TEMPLATE, STYLIST_SYSTEM_PROMPT
from shopstream.config.settings import settings
from shopstream.models.domain import Outfit, OutfitRecommendations, Product
from shopstream.services.answer_service import format_price
from shopstream.utils.circuit_breaker import CircuitBreaker
from shopstream.utils.metrics import ai_requests_counter

# This service forwards the indexed catalog and a style request to OpenAI and
# turns the completion into outfit recommendations. A completion that is not
# valid recommendation JSON is reported as malformed rather than raised; only
# transport and configuration problems are errors for the caller.

logger = logging.getLogger(__name__)


class OutfitRecommendationError(Exception):
    """The completion service could not be reached or returned nothing."""


@dataclass(frozen=True)
class ParsedRecommendation:
    recommendations: OutfitRecommendations


@dataclass(frozen=True)
class MalformedRecommendation:
    raw: str
    reason: str


RecommendationResult = Union[ParsedRecommendation, MalformedRecommendation]


def degraded_recommendations() -> OutfitRecommendations:
    return OutfitRecommendations(
        primary_outfit=Outfit(
            items=[],
            total_cost=0,
            style_description=strings.OUTFIT_PARSE_FAILURE,
            occasion=strings.OUTFIT_DEFAULT_OCCASION,
        ),
        alternative_outfits=[],
        styling_tips=[strings.OUTFIT_RETRY_TIP],
    )


def recommendations_or_default(result: RecommendationResult) -> OutfitRecommendations:
    if isinstance(result, ParsedRecommendation):
        return result.recommendations
    return degraded_recommendations()


def _strip_code_fence(text: str) -> str:
    text = text.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        if text.rstrip().endswith("```"):
            text = text.rstrip()[:-3]
    return text.strip()


def parse_recommendation(raw: str) -> RecommendationResult:
    """Parses completion text into recommendations, or marks it malformed."""
    try:
        data = json.loads(_strip_code_fence(raw))
    except json.JSONDecodeError as e:
        return MalformedRecommendation(raw=raw, reason=f"invalid JSON: {e}")

    if not isinstance(data, dict):
        return MalformedRecommendation(raw=raw, reason="top-level JSON value is not an object")

    try:
        return ParsedRecommendation(OutfitRecommendations.model_validate(data))
    except ValidationError as e:
        return MalformedRecommendation(raw=raw, reason=f"unexpected shape: {e.error_count()} errors")


def build_product_summary(products: List[Product]) -> List[Dict[str, Any]]:
    """Condensed catalog for the prompt. Every item is offered as in stock."""
    return [
        {
            "id": p.id,
            "title": p.title,
            "price": p.price,
            "tags": p.tags,
            "inventory": p.inventory or 1,
            "image": p.image,
            "inStock": True,
        }
        for p in products
    ]


def build_outfit_prompt(query: str, products: List[Product], budget: Optional[float] = None) -> str:
    budget_line = f"Budget: ${format_price(budget)}" if budget else "No budget specified"
    return OUTFIT_PROMPT_TEMPLATE.format(
        query=query,
        budget_line=budget_line,
        products_json=json.dumps(build_product_summary(products), indent=2),
    )


class AIService:
    def __init__(self, api_key: Optional[str] = None, client: Optional[AsyncOpenAI] = None, model: str = settings.openai_model):
        if client is not None:
            self.openai_client = client
        elif api_key:
            self.openai_client = AsyncOpenAI(api_key=api_key, timeout=settings.openai_timeout)
        else:
            self.openai_client = None
        self.model = model
        self.openai_breaker = CircuitBreaker("openai")

    @property
    def is_configured(self) -> bool:
        return self.openai_client is not None

    async def aclose(self):
        if self.openai_client is not None:
            await self.openai_client.close()

    async def recommend_outfits(self, query: str, products: List[Product], budget: Optional[float] = None) -> RecommendationResult:
        """
        Asks the completion service for a primary outfit, alternatives and
        styling tips built from ``products``.

        The caller is responsible for passing a fully loaded catalog; there is no
        fallback to mock data here.

        Raises:
            OutfitRecommendationError: no API key, transport or status error, or
                an empty completion.
        """
        if not self.openai_client:
            raise OutfitRecommendationError("OpenAI API key not configured")

        prompt = build_outfit_prompt(query, products, budget)
        try:
            content = await self.openai_breaker.call(self._complete, prompt)
        except asyncio.TimeoutError as e:
            ai_requests_counter.labels(model=self.model, status="timeout").inc()
            logger.error(f"Outfit recommendation request exceeded {settings.upstream_deadline_seconds}s")
            raise OutfitRecommendationError(
                f"OpenAI request timed out after {settings.upstream_deadline_seconds}s"
            ) from e
        except Exception as e:
            ai_requests_counter.labels(model=self.model, status="error").inc()
            logger.error(f"Outfit recommendation request failed: {e}")
            raise OutfitRecommendationError(str(e)) from e

        if not content:
            ai_requests_counter.labels(model=self.model, status="empty").inc()
            raise OutfitRecommendationError("No response from OpenAI")

        ai_requests_counter.labels(model=self.model, status="success").inc()
        result = parse_recommendation(content)
        if isinstance(result, MalformedRecommendation):
            logger.warning(f"Outfit recommendation could not be parsed ({result.reason}).")
        return result

    async def _complete(self, prompt: str) -> Optional[str]:
        response = await asyncio.wait_for(
            self.openai_client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": STYLIST_SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=settings.openai_temperature,
                max_tokens=settings.openai_max_tokens,
            ),
            timeout=settings.upstream_deadline_seconds,
        )
        if not response.choices:
            return None
        return response.choices[0].message.content
