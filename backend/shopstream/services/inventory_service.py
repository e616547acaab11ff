# /shopstream/services/inventory_service.py

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Awaitable, Callable, Dict, List, Optional

from shopstream.models.domain import Product
from shopstream.utils.metrics import inventory_rebuilds_counter, inventory_size_gauge

# In-memory inventory index built from a bulk catalog load. The three
# structures are always built together into a snapshot and swapped in with a
# single assignment, so readers never see a half-built index.

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 12

CatalogLoader = Callable[[], Awaitable[List[Product]]]


@dataclass(frozen=True)
class InventorySnapshot:
    products: Dict[str, Product] = field(default_factory=dict)
    categories: Dict[str, List[str]] = field(default_factory=dict)
    tags: Dict[str, List[str]] = field(default_factory=dict)
    last_updated: Optional[datetime] = None

    @classmethod
    def build(cls, products: List[Product]) -> "InventorySnapshot":
        by_id: Dict[str, Product] = {}
        categories: Dict[str, List[str]] = {}
        tags: Dict[str, List[str]] = {}

        for product in products:
            if product.id in by_id:
                logger.warning(f"Duplicate product id {product.id} in catalog load; keeping the first one.")
                continue
            by_id[product.id] = product
            categories.setdefault(product.category, []).append(product.id)
            for tag in dict.fromkeys(product.tags):
                tags.setdefault(tag, []).append(product.id)

        return cls(products=by_id, categories=categories, tags=tags, last_updated=datetime.utcnow())


class InventoryStore:
    def __init__(self):
        self._snapshot = InventorySnapshot()
        self._rebuild_lock = asyncio.Lock()
        self.is_loading = False

    @property
    def is_populated(self) -> bool:
        return bool(self._snapshot.products)

    def rebuild(self, products: List[Product]) -> None:
        """Replaces the whole index with one built from ``products``."""
        snapshot = InventorySnapshot.build(products)
        if not snapshot.products and self.is_populated:
            logger.warning(f"Inventory index emptied; {len(self._snapshot.products)} products dropped.")
        self._snapshot = snapshot
        inventory_rebuilds_counter.labels(status="success").inc()
        inventory_size_gauge.set(len(snapshot.products))
        logger.info(
            f"Inventory index rebuilt: {len(snapshot.products)} products, "
            f"{len(snapshot.categories)} categories, {len(snapshot.tags)} tags."
        )

    async def refresh(self, loader: CatalogLoader) -> int:
        """
        Loads a fresh catalog with ``loader`` and rebuilds the index from it.

        Refreshes are serialized: a second caller waits for the in-flight one to
        finish before starting its own. If the loader raises or is cancelled the
        previous index stays in place.
        """
        async with self._rebuild_lock:
            self.is_loading = True
            try:
                products = await loader()
            except Exception:
                inventory_rebuilds_counter.labels(status="error").inc()
                logger.error("Inventory refresh failed; keeping the previous index.", exc_info=True)
                raise
            finally:
                self.is_loading = False
            self.rebuild(products)
            return len(self._snapshot.products)

    # --- Reads ---

    def get(self, product_id: str) -> Optional[Product]:
        return self._snapshot.products.get(product_id)

    def all_products(self) -> List[Product]:
        return list(self._snapshot.products.values())

    def search_by_text(self, query: Optional[str]) -> List[Product]:
        """
        Case-insensitive substring search over title, tags, description, vendor
        and product type. Unranked; the first 12 matches in store order win.
        """
        snapshot = self._snapshot
        q = (query or "").strip().lower()
        if not q:
            return list(snapshot.products.values())[:SEARCH_LIMIT]

        results = []
        for product in snapshot.products.values():
            fields = [product.title, product.description, product.vendor, product.product_type, *product.tags]
            if any(q in value.lower() for value in fields if value):
                results.append(product)
                if len(results) >= SEARCH_LIMIT:
                    break
        return results

    def by_category(self, label: str) -> List[Product]:
        snapshot = self._snapshot
        return [snapshot.products[pid] for pid in snapshot.categories.get(label, [])]

    def by_tag(self, label: str) -> List[Product]:
        snapshot = self._snapshot
        return [snapshot.products[pid] for pid in snapshot.tags.get(label, [])]

    def stats(self) -> Dict:
        snapshot = self._snapshot
        return {
            "total_products": len(snapshot.products),
            "total_categories": len(snapshot.categories),
            "total_tags": len(snapshot.tags),
            "last_updated": snapshot.last_updated,
            "is_loading": self.is_loading,
            "cache_size": len(snapshot.products),
        }
