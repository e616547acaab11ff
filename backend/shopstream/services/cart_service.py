# /shopstream/services/cart_service.py

import time
import logging
from collections import OrderedDict
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Optional

from shopstream.config.settings import settings
from shopstream.models.domain import Cart, Product
from shopstream.services.mock_catalog import find_mock_product

# Cart math and per-session carts. Prices are summed as Decimal so that
# subtotals like 2 x 89.99 + 99.00 come out exact.

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def resolve_product(product_id: str, products: Iterable[Product]) -> Optional[Product]:
    """Looks the id up in ``products`` first, then in the bundled mock catalog."""
    found = next((p for p in products if p.id == product_id), None)
    return found or find_mock_product(product_id)


def compute_subtotal(products: List[Product], cart: Cart) -> Decimal:
    """Sum of price x quantity over the resolvable cart entries; unknown ids add nothing."""
    subtotal = Decimal("0")
    for product_id, quantity in cart.items():
        product = resolve_product(product_id, products)
        if product is None:
            continue
        subtotal += Decimal(str(product.price)) * quantity
    return subtotal


def cart_lines(products: List[Product], cart: Cart) -> List[Dict]:
    lines = []
    for product_id, quantity in cart.items():
        product = resolve_product(product_id, products)
        if product is None:
            continue
        lines.append({
            "product_id": product_id,
            "title": product.title,
            "quantity": quantity,
            "line_total": Decimal(str(product.price)) * quantity,
        })
    return lines


def format_money(amount: Decimal) -> str:
    return f"${amount.quantize(CENTS)}"


class CartStore:
    """
    In-memory carts keyed by session id. Nothing survives a restart.

    Carts untouched for ``idle_seconds`` are dropped, and once more than
    ``max_sessions`` carts exist the least recently used one is dropped.
    """

    def __init__(
        self,
        idle_seconds: float = settings.cart_idle_seconds,
        max_sessions: int = settings.cart_max_sessions,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.idle_seconds = idle_seconds
        self.max_sessions = max_sessions
        self._clock = clock
        # session id -> (last touched, cart), least recently used first
        self._carts: "OrderedDict[str, tuple[float, Cart]]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._carts)

    def get(self, session_id: str) -> Cart:
        cart = self._touch(session_id)
        return dict(cart) if cart is not None else {}

    def add(self, session_id: str, product_id: str, quantity: int = 1) -> Cart:
        if quantity < 1:
            raise ValueError("quantity to add must be at least 1")
        cart = self._touch(session_id, create=True)
        cart[product_id] = cart.get(product_id, 0) + quantity
        return dict(cart)

    def set_quantity(self, session_id: str, product_id: str, quantity: int) -> Cart:
        """Sets an exact quantity; 0 removes the line."""
        if quantity < 0:
            raise ValueError("quantity cannot be negative")
        if quantity == 0:
            return self.remove(session_id, product_id)
        cart = self._touch(session_id, create=True)
        cart[product_id] = quantity
        return dict(cart)

    def remove(self, session_id: str, product_id: str) -> Cart:
        cart = self._touch(session_id)
        if cart is None:
            return {}
        cart.pop(product_id, None)
        if not cart:
            self._carts.pop(session_id, None)
        return dict(cart)

    def clear(self, session_id: str) -> None:
        self._carts.pop(session_id, None)
        logger.info(f"Cart cleared for session {session_id}")

    def _touch(self, session_id: str, create: bool = False) -> Optional[Cart]:
        now = self._clock()
        self._evict_idle(now)
        entry = self._carts.pop(session_id, None)
        if entry is None and not create:
            return None
        cart = entry[1] if entry is not None else {}
        self._carts[session_id] = (now, cart)
        while len(self._carts) > self.max_sessions:
            evicted, _ = self._carts.popitem(last=False)
            logger.info(f"Cart for session {evicted} evicted (session limit {self.max_sessions})")
        return cart

    def _evict_idle(self, now: float) -> None:
        while self._carts:
            session_id, (touched, _) = next(iter(self._carts.items()))
            if now - touched <= self.idle_seconds:
                break
            del self._carts[session_id]
            logger.info(f"Cart for session {session_id} expired after {self.idle_seconds}s idle")
