# storefront/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - SUPABASE_URL
      - SUPABASE_KEY (anon key)

    Optional:
      - DATABASE_URL (defaults to a local SQLite file for client state)
    """

    PROJECT_NAME: str = "SDMS Storefront"
    API_V1_STR: str = "/api/v1"

    # Supabase (backend-as-a-service)
    SUPABASE_URL: str
    SUPABASE_KEY: str

    # Client-state database (local storage namespaces)
    DATABASE_URL: str = "sqlite:///./storefront.db"
    LOCAL_STORAGE_QUOTA_BYTES: int = 5 * 1024 * 1024

    # Cart / recent products
    RECENT_PRODUCTS_LIMIT: int = 10

    # Catalog caches (categories, promo banners)
    CATALOG_CACHE_TTL_SECONDS: float = 5 * 60
    FEATURED_PAGE_SIZE: int = 6

    # Admin session stored per client
    ADMIN_SESSION_TTL_HOURS: int = 24

    # Checkout
    WHATSAPP_NUMBER: str = "256701234567"
    CURRENCY: str = "UGX"

    # Offline cache worker
    CACHE_PREFIX: str = "sdms"
    CACHE_VERSION: str = "v1"
    APP_ORIGIN: str = "http://localhost:8080"
    BACKEND_HOST: str = "supabase.co"

    CORS_ORIGINS: list[str] = [
        "http://localhost:8080",
        "http://127.0.0.1:8080",
        "http://localhost:5173",
    ]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
