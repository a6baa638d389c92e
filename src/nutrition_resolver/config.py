"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

USDA_DEMO_KEY = "DEMO_KEY"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str | None = None
    supabase_service_key: str | None = None
    fdc_api_key: str = USDA_DEMO_KEY
    fdc_base_url: str = "https://api.nal.usda.gov/fdc/v1"
    calorieninjas_api_key: str | None = None
    calorieninjas_base_url: str = "https://api.calorieninjas.com/v1"
    off_base_url: str = "https://world.openfoodfacts.org"
    cnf_base_url: str = "https://food-nutrition.canada.ca/api/canadian-nutrient-file"
    http_timeout_seconds: float = 10.0
    cache_ttl_days: int = 7
    max_concurrent_lookups: int = 5
    reference_index_retry_seconds: float = 300.0
    batch_max_queries: int = 50
    debug: bool = False
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def uses_supabase_cache(self) -> bool:
        return bool(self.supabase_url and self.supabase_service_key)
