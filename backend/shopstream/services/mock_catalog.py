# /shopstream/services/mock_catalog.py

from typing import List, Optional

from shopstream.models.domain import Product

# Bundled catalog used whenever no storefront is configured or the live
# storefront cannot produce results. Order is significant: filtering keeps it.

MOCK_PRODUCTS: List[Product] = [
    Product(
        id="gid://shopify/Product/1",
        title="StrideRunner Sneaker",
        price=89.99,
        image="https://placehold.co/480x600?text=StrideRunner",
        tags=["sneakers", "running", "breathable"],
        rating=4.6,
        features=["Mesh upper", "Cushion midsole", "Rubber outsole"],
        colors=["Black", "White", "Volt"],
        inventory=27,
    ),
    Product(
        id="gid://shopify/Product/2",
        title="CloudLite Trainer",
        price=99.0,
        image="https://placehold.co/480x600?text=CloudLite",
        tags=["sneakers", "training", "lightweight"],
        rating=4.4,
        features=["Knit upper", "Responsive foam", "Heel loop"],
        colors=["Blue", "Grey"],
        inventory=11,
    ),
    Product(
        id="gid://shopify/Product/3",
        title="UrbanFlex High-Top",
        price=79.5,
        image="https://placehold.co/480x600?text=UrbanFlex",
        tags=["sneakers", "streetwear"],
        rating=4.1,
        features=["Canvas", "Padded collar", "Grippy sole"],
        colors=["Black", "Red"],
        inventory=42,
    ),
]


def filter_mock_catalog(query: Optional[str]) -> List[Product]:
    """Case-insensitive substring match on title or any tag; empty query returns everything."""
    q = (query or "").lower()
    if not q:
        return list(MOCK_PRODUCTS)
    return [
        p for p in MOCK_PRODUCTS
        if q in p.title.lower() or any(q in tag.lower() for tag in p.tags)
    ]


def find_mock_product(product_id: str) -> Optional[Product]:
    return next((p for p in MOCK_PRODUCTS if p.id == product_id), None)
