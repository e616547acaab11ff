# /shopstream/models/domain.py

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from shopstream.config.strings import OUTFIT_DEFAULT_OCCASION, PLACEHOLDER_IMAGE_URL

# This file defines the core Pydantic models used throughout the application's
# business logic: catalog products and outfit recommendations.

logger = logging.getLogger(__name__)

# The Storefront API exposes no rating, so every live product gets the same one.
DEFAULT_REMOTE_RATING = 4.5
UNCATEGORIZED = "Uncategorized"

Cart = Dict[str, int]


def _edges(node: Dict[str, Any], connection: str) -> List[Dict[str, Any]]:
    """Non-null edges of a GraphQL connection field."""
    return [e for e in (node.get(connection) or {}).get("edges") or [] if e]


class ProductVariant(BaseModel):
    id: str
    title: Optional[str] = None
    price: float = 0.0
    currency: Optional[str] = None
    available: Optional[bool] = None

    class Config:
        frozen = True


class ProductImage(BaseModel):
    url: str
    alt_text: Optional[str] = None

    class Config:
        frozen = True


class Metafield(BaseModel):
    key: str
    value: Optional[str] = None

    class Config:
        frozen = True


class Product(BaseModel):
    id: str
    title: str
    price: float = Field(default=0.0, ge=0)
    image: str = PLACEHOLDER_IMAGE_URL
    tags: List[str] = []
    rating: Optional[float] = Field(default=None, ge=0, le=5)
    features: List[str] = []
    colors: List[str] = []
    inventory: Optional[int] = None
    variant_id: Optional[str] = None

    # Extended fields, only filled by the detail query
    description: Optional[str] = None
    vendor: Optional[str] = None
    product_type: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    variants: List[ProductVariant] = []
    images: List[ProductImage] = []
    metafields: List[Metafield] = []

    class Config:
        frozen = True

    @property
    def category(self) -> str:
        if self.product_type:
            return self.product_type
        if self.tags:
            return self.tags[0]
        return UNCATEGORIZED

    @classmethod
    def from_storefront_node(cls, node: Dict[str, Any]) -> "Product":
        """
        Builds a Product from a Storefront GraphQL product node.

        Missing price, image, tags and inventory fall back to 0, the placeholder
        image, no tags and 0; null edges are ignored. Raises on nodes that cannot
        be normalized (no id, non-numeric price); the Storefront client skips
        such nodes and keeps the rest of the page.
        """
        variant_nodes = [e["node"] for e in _edges(node, "variants") if e.get("node")]
        image_nodes = [e["node"] for e in _edges(node, "images") if e.get("node")]
        metafield_nodes = [e["node"] for e in _edges(node, "metafields") if e.get("node")]

        first_variant = variant_nodes[0] if variant_nodes else {}
        first_price = (first_variant.get("price") or {}).get("amount")
        first_image = image_nodes[0].get("url") if image_nodes else None

        variants = [
            ProductVariant(
                id=v["id"],
                title=v.get("title"),
                price=float((v.get("price") or {}).get("amount") or 0),
                currency=(v.get("price") or {}).get("currencyCode"),
                available=v.get("availableForSale"),
            )
            for v in variant_nodes if v.get("id")
        ]
        metafields = [Metafield(key=m["key"], value=m.get("value")) for m in metafield_nodes if m.get("key")]

        return cls(
            id=node["id"],
            title=node.get("title") or "",
            price=float(first_price or 0),
            image=first_image or PLACEHOLDER_IMAGE_URL,
            tags=node.get("tags") or [],
            rating=DEFAULT_REMOTE_RATING,
            features=[f"{m.key}: {m.value}" for m in metafields[:3]],
            colors=["Default"],
            inventory=node.get("totalInventory") or 0,
            variant_id=first_variant.get("id"),
            description=node.get("description"),
            vendor=node.get("vendor"),
            product_type=node.get("productType") or None,
            created_at=node.get("createdAt"),
            updated_at=node.get("updatedAt"),
            variants=variants,
            images=[ProductImage(url=i["url"], alt_text=i.get("altText")) for i in image_nodes if i.get("url")],
            metafields=metafields,
        )


class OutfitItem(BaseModel):
    id: str
    title: str = ""
    price: float = 0.0
    reason: str = ""


class Outfit(BaseModel):
    items: List[OutfitItem] = []
    total_cost: float = Field(default=0.0, alias="totalCost")
    style_description: str = Field(default="", alias="styleDescription")
    occasion: str = OUTFIT_DEFAULT_OCCASION

    class Config:
        populate_by_name = True


class OutfitRecommendations(BaseModel):
    primary_outfit: Outfit = Field(alias="primaryOutfit")
    alternative_outfits: List[Outfit] = Field(default=[], alias="alternativeOutfits")
    styling_tips: List[str] = Field(default=[], alias="stylingTips")

    class Config:
        populate_by_name = True
