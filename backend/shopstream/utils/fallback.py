# /shopstream/utils/fallback.py

import logging
from typing import Awaitable, Callable, List, Sequence, Tuple, TypeVar

from shopstream.utils.metrics import catalog_requests_counter

# Ordered provider cascade: each provider is tried in turn and the first one
# that returns a non-empty result wins. A provider that raises is logged and
# treated the same as one that returned nothing.

logger = logging.getLogger(__name__)

T = TypeVar("T")
Provider = Callable[[], Awaitable[List[T]]]


async def first_non_empty(providers: Sequence[Tuple[str, Provider]]) -> Tuple[str, List[T]]:
    """
    Runs providers in order and returns ``(name, result)`` for the first
    non-empty result. When every provider comes back empty the last provider's
    name is returned with an empty list.
    """
    if not providers:
        raise ValueError("first_non_empty needs at least one provider")

    for name, provider in providers:
        try:
            result = await provider()
        except Exception as e:
            catalog_requests_counter.labels(source=name, status="error").inc()
            logger.error(f"Provider '{name}' failed, trying next: {e}")
            continue

        if result:
            catalog_requests_counter.labels(source=name, status="success").inc()
            return name, result

        catalog_requests_counter.labels(source=name, status="empty").inc()
        logger.info(f"Provider '{name}' returned no results, trying next.")

    return providers[-1][0], []
