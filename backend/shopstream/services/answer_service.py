# /shopstream/services/answer_service.py

import asyncio
import logging
from typing import List, Optional

import httpx

from shopstream.config import strings
from shopstream.config.settings import settings
from shopstream.models.domain import Product

# The storefront's "AI host". Without an external answer service it answers
# with a fixed heuristic: the highest-rated product at or under the price
# ceiling. Translation is a placeholder that only prefixes a language tag;
# it does not localize anything.

logger = logging.getLogger(__name__)

PRICE_CEILING = 100
TRANSLATION_PREFIXES = {"fr": "FR", "es": "ES", "hi": "HI"}


def translate(text: str, lang: Optional[str]) -> str:
    """Prefixes ``text`` with ``FR: ``/``ES: ``/``HI: ``; English and unknown tags pass through."""
    prefix = TRANSLATION_PREFIXES.get(lang or "")
    return f"{prefix}: {text}" if prefix else text


def format_price(price: float) -> str:
    """Renders 99.0 as "99" and 79.5 as "79.5", like the storefront shows prices in answers."""
    if float(price).is_integer():
        return str(int(price))
    return f"{price:.2f}".rstrip("0").rstrip(".")


def pick_best_under_budget(products: List[Product], ceiling: float = PRICE_CEILING) -> Optional[Product]:
    """Highest-rated product priced at or under ``ceiling``; ties keep the earlier product."""
    best = None
    for product in products:
        if product.price > ceiling:
            continue
        if best is None or (product.rating or 0) > (best.rating or 0):
            best = product
    return best


def best_under_budget(prompt: str, products: List[Product], lang: str = "en") -> str:
    """The canned host answer. ``prompt`` is not parsed."""
    best = pick_best_under_budget(products)
    if best is None:
        sentence = strings.NOTHING_UNDER_BUDGET
    else:
        sentence = strings.BEST_UNDER_BUDGET.format(
            title=best.title,
            price=format_price(best.price),
            features=", ".join(best.features[:2]),
        )
    return translate(sentence, lang)


def describe_pick(prompt: str, products: List[Product], lang: str = "en") -> str:
    """Longer server-side answer that also mentions rating, colors and stock."""
    best = pick_best_under_budget(products)
    if best is None:
        sentence = strings.HOST_NO_PICK.format(prompt=prompt)
    else:
        sentence = strings.HOST_PICK.format(
            prompt=prompt,
            title=best.title,
            price=format_price(best.price),
            rating=best.rating,
            features=", ".join(best.features[:2]) or strings.DEFAULT_FEATURES,
            colors=", ".join(best.colors) or strings.DEFAULT_COLORS,
            inventory=best.inventory,
        )
    return translate(sentence, lang)


class AnswerService:
    def __init__(self, answer_service_url: Optional[str] = None, http_client: Optional[httpx.AsyncClient] = None):
        self.answer_service_url = answer_service_url
        self.http_client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(settings.http_timeout, read=settings.http_read_timeout)
        )

    async def aclose(self):
        await self.http_client.aclose()

    async def ask_host(self, prompt: str, products: List[Product], lang: str = "en") -> str:
        """
        Answers the "Ask Host" button. Uses the external answer service when one
        is configured; any failure there degrades to the heuristic answer with an
        error prefix.
        """
        if not self.answer_service_url:
            return best_under_budget(prompt, products, lang)

        try:
            payload = {
                "prompt": prompt,
                "products": [p.model_dump(mode="json") for p in products],
                "lang": lang,
            }
            resp = await asyncio.wait_for(
                self.http_client.post(self.answer_service_url, json=payload),
                timeout=settings.upstream_deadline_seconds,
            )
            resp.raise_for_status()
            data = resp.json()
            answer = data.get("answer") if isinstance(data, dict) else None
            return answer or strings.NO_ANSWER_RETURNED
        except Exception as e:
            logger.error(f"Answer service call failed, using heuristic answer: {e}")
            return strings.HOST_ERROR_PREFIX + best_under_budget(prompt, products, lang)
