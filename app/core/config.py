# app/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized storefront settings loaded from environment.

    Required env vars (.env):
      - SUPABASE_URL
      - SUPABASE_KEY (anon key, the storefront acts as the customer's client)

    Optional:
      - SITE_URL (public origin used to build checkout redirect URLs)
      - LOCAL_STORAGE_URL (SQLite file holding the device storage)
      - LOCAL_STORAGE_QUOTA_BYTES (hard ceiling, mirrors a browser quota)
    """

    PROJECT_NAME: str = "StarterPrint3D Storefront"
    API_V1_STR: str = "/api/v1"

    # Supabase
    SUPABASE_URL: str
    SUPABASE_KEY: str
    STORAGE_BUCKET: str = "starter-pack-files"
    CHECKOUT_FUNCTION: str = "stripe-checkout"

    # Checkout
    SITE_URL: str = "http://localhost:5173"
    ALLOWED_COUNTRIES: list[str] = ["FR"]
    HTTP_TIMEOUT_SECONDS: float = 30.0

    # Local device storage
    LOCAL_STORAGE_URL: str = "sqlite:///storefront.db"
    LOCAL_STORAGE_QUOTA_BYTES: int = 5 * 1024 * 1024

    # Customization upload
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024

    # Success page polling
    ORDER_POLL_RETRIES: int = 3
    ORDER_POLL_DELAY_SECONDS: float = 2.0

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
