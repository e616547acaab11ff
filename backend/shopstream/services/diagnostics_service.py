# /shopstream/services/diagnostics_service.py

import logging
from decimal import Decimal
from typing import Dict, List

from shopstream.services.answer_service import best_under_budget
from shopstream.services.cart_service import compute_subtotal
from shopstream.services.catalog_service import CatalogService
from shopstream.services.mock_catalog import MOCK_PRODUCTS

# Self-checks the settings panel runs on demand: the mock fallback, the
# heuristic host answer and cart math, each reported as pass/fail with detail.

logger = logging.getLogger(__name__)


def _result(name: str, passed: bool, detail: str) -> Dict:
    return {"name": name, "passed": passed, "detail": detail}


async def run_diagnostics(catalog_service: CatalogService) -> List[Dict]:
    results = []

    try:
        _, products = await catalog_service.search_live("sneaker", None, None)
        results.append(_result("Mock products fallback", len(products) > 0, f"{len(products)} items"))
    except Exception as e:
        results.append(_result("Mock products fallback", False, str(e)))

    try:
        answer = best_under_budget("under 100", MOCK_PRODUCTS, "en")
        detail = answer[:80] + ("…" if len(answer) > 80 else "")
        results.append(_result("LLM fallback answer", bool(answer), detail))
    except Exception as e:
        results.append(_result("LLM fallback answer", False, str(e)))

    try:
        first, second = MOCK_PRODUCTS[0], MOCK_PRODUCTS[1]
        subtotal = compute_subtotal(MOCK_PRODUCTS, {first.id: 2, second.id: 1})
        expected = Decimal(str(first.price)) * 2 + Decimal(str(second.price))
        results.append(_result(
            "Cart subtotal math",
            subtotal == expected,
            f"computed={subtotal:.2f} expected={expected:.2f}",
        ))
    except Exception as e:
        results.append(_result("Cart subtotal math", False, str(e)))

    failed = [r["name"] for r in results if not r["passed"]]
    if failed:
        logger.warning(f"Diagnostics failed: {failed}")
    return results
