"""Storefront Service Configuration"""

from typing import Optional
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment"""

    # Application
    app_name: str = "Storefront"
    debug: bool = True
    host: str = "0.0.0.0"
    port: int = 8000
    environment: str = "development"

    # Commerce platform (storefront API)
    platform_base_url: str = "http://localhost:8001"
    storefront_api_version: str = "2026-01"
    storefront_public_access_token: Optional[str] = None
    storefront_private_access_token: Optional[str] = None

    # Commerce platform (admin API): customer tags and cart metafield
    admin_access_token: Optional[str] = None
    admin_api_version: str = "2025-04"

    # Outbound HTTP
    request_timeout: float = 30.0

    # Cookies
    customer_token_cookie: str = "customer_token"
    customer_origin_cookie: str = "customer_origin"
    cart_cookie: str = "cart_id"
    cart_cookie_max_age: int = 60 * 60 * 24 * 30

    class Config:
        env_file = "config/.env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"

    @property
    def storefront_endpoint(self) -> str:
        return f"{self.platform_base_url.rstrip('/')}/api/{self.storefront_api_version}/graphql.json"

    @property
    def admin_endpoint(self) -> str:
        return f"{self.platform_base_url.rstrip('/')}/admin/api/{self.admin_api_version}/graphql.json"

    @property
    def admin_configured(self) -> bool:
        """Check if admin API credentials are configured"""
        return bool(self.platform_base_url and self.admin_access_token)

    @property
    def secure_cookies(self) -> bool:
        return self.environment == "production"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
