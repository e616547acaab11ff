# /shopstream/models/api.py

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from shopstream.models.domain import OutfitRecommendations, Product

# This file contains Pydantic models that define the structure of data for
# API requests and responses. Field aliases keep the camelCase wire names the
# browser shell already sends.


class StorefrontCredentials(BaseModel):
    shop_domain: Optional[str] = Field(default=None, alias="shopDomain")
    storefront_token: Optional[str] = Field(default=None, alias="storefrontToken")

    class Config:
        populate_by_name = True


class StorefrontProxyRequest(StorefrontCredentials):
    query: Optional[str] = ""


class BulkProxyRequest(StorefrontCredentials):
    cursor: Optional[str] = None


class ProductSearchRequest(StorefrontCredentials):
    query: str = ""
    source: Optional[str] = Field(default=None, pattern="^(storefront|inventory)$")


class ProductListResponse(BaseModel):
    source: str
    count: int
    products: List[Product]


class InventoryStatsResponse(BaseModel):
    total_products: int = Field(alias="totalProducts")
    total_categories: int = Field(alias="totalCategories")
    total_tags: int = Field(alias="totalTags")
    last_updated: Optional[datetime] = Field(default=None, alias="lastUpdated")
    is_loading: bool = Field(alias="isLoading")
    cache_size: int = Field(alias="cacheSize")

    class Config:
        populate_by_name = True


class AnswerRequest(BaseModel):
    prompt: str = ""
    products: List[Product] = []
    lang: str = "en"


class AnswerResponse(BaseModel):
    answer: str


class OutfitRecommendationRequest(BaseModel):
    query: str
    budget: Optional[float] = Field(default=None, gt=0)
    products: Optional[List[Product]] = None


class OutfitRecommendationResponse(BaseModel):
    success: bool = True
    query: str
    recommendations: OutfitRecommendations
    total_products: int = Field(alias="totalProducts")

    class Config:
        populate_by_name = True


class CartSubtotalRequest(BaseModel):
    cart: Dict[str, int]
    products: Optional[List[Product]] = None

    @field_validator("cart")
    @classmethod
    def quantities_must_be_positive(cls, v):
        if any(qty < 1 for qty in v.values()):
            raise ValueError("cart quantities must be positive; remove the item instead of sending 0")
        return v


class CartItemRequest(BaseModel):
    product_id: str = Field(alias="productId")
    quantity: int = Field(default=1, ge=0)

    class Config:
        populate_by_name = True


class CartLine(BaseModel):
    product_id: str = Field(alias="productId")
    title: str
    quantity: int
    line_total: float = Field(alias="lineTotal")

    class Config:
        populate_by_name = True


class CartResponse(BaseModel):
    session_id: Optional[str] = Field(default=None, alias="sessionId")
    items: Dict[str, int]
    lines: List[CartLine]
    subtotal: float
    subtotal_display: str = Field(alias="subtotalDisplay")

    class Config:
        populate_by_name = True


class DiagnosticResult(BaseModel):
    name: str
    passed: bool = Field(alias="pass")
    detail: Optional[str] = None

    class Config:
        populate_by_name = True


class APIResponse(BaseModel):
    success: bool
    message: str
    data: Optional[Dict] = None
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    version: str
