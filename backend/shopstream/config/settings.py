# /shopstream/config/settings.py

import sys
from typing import List, Optional
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings

SEARCH_SOURCES = ("storefront", "inventory")


class Settings(BaseSettings):
    # Shopify Storefront
    shopify_store_domain: Optional[str] = None
    shopify_storefront_access_token: Optional[str] = None
    shopify_api_version: str = "2024-10"
    product_search_source: str = "storefront"

    # Catalog paging
    catalog_page_size: int = 12
    bulk_page_size: int = 50
    bulk_max_pages: int = 200
    bulk_max_seconds: float = 120.0
    warm_inventory_on_startup: bool = False

    # Upstream HTTP. Every upstream call is cut off after upstream_deadline_seconds
    # so that fallbacks and error bodies are produced inside request_timeout_seconds.
    http_timeout: float = 10.0
    http_connect_timeout: float = 5.0
    http_read_timeout: float = 30.0
    upstream_deadline_seconds: float = 20.0
    request_timeout_seconds: float = 30.0

    # AI APIs
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4"
    openai_temperature: float = 0.7
    openai_max_tokens: int = 1500
    openai_timeout: float = 60.0
    answer_service_url: Optional[str] = None

    # Session carts
    cart_idle_seconds: float = 3600.0
    cart_max_sessions: int = 10000

    # Deployment
    log_level: str = "INFO"
    environment: str = Field(default="production")
    workers: int = 2
    cors_allowed_origins: List[str] = Field(default=["*"])

    # Security / Limits
    api_key: Optional[str] = None
    api_version: str = "v1"
    rate_limit_per_minute: int = 100

    # ---------------- Validators ---------------- #

    @field_validator("cors_allowed_origins", mode="before")
    @classmethod
    def parse_cors_allowed_origins(cls, v):
        """Accept a comma-separated string as well as a list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("shopify_store_domain")
    @classmethod
    def strip_scheme(cls, v):
        if v:
            return v.replace("https://", "").replace("http://", "").strip("/")
        return v

    @field_validator("catalog_page_size", "bulk_page_size", "bulk_max_pages")
    @classmethod
    def must_be_positive(cls, v):
        if v < 1:
            raise ValueError("page sizes and page limits must be at least 1")
        return v

    @model_validator(mode="after")
    def upstream_deadline_fits_request_timeout(self):
        if self.upstream_deadline_seconds >= self.request_timeout_seconds:
            raise ValueError("UPSTREAM_DEADLINE_SECONDS must be shorter than REQUEST_TIMEOUT_SECONDS")
        if self.cart_max_sessions < 1:
            raise ValueError("CART_MAX_SESSIONS must be at least 1")
        return self

    @property
    def has_shopify_credentials(self) -> bool:
        return bool(self.shopify_store_domain and self.shopify_storefront_access_token)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


def validate_environment(settings_obj: Settings):
    try:
        if settings_obj.product_search_source not in SEARCH_SOURCES:
            raise ValueError(
                f"PRODUCT_SEARCH_SOURCE must be one of {SEARCH_SOURCES}, "
                f"got '{settings_obj.product_search_source}'"
            )

        if settings_obj.product_search_source == "inventory" and not settings_obj.has_shopify_credentials:
            raise ValueError(
                "SHOPIFY_STORE_DOMAIN and SHOPIFY_STOREFRONT_ACCESS_TOKEN are required for the inventory search source"
            )

        return settings_obj

    except Exception as e:
        print(f"--- [ERROR] Environment validation failed: {e}")
        sys.exit(1)


settings = Settings()
validate_environment(settings)
