"""Configuration management using Pydantic Settings"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Generative AI (Gemini)
    gemini_api_key: Optional[str] = None
    gemini_api_base: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_model: str = "gemini-2.0-flash"

    # Geocoding
    geocoder_base_url: str = "https://nominatim.openstreetmap.org"
    geocoder_user_agent: str = "tfs-gateway/0.1"

    # Service
    service_name: str = "tfs-gateway"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 30.0
    location_timeout_seconds: float = 10.0

    # Vehicle ranking
    ranking_max_retries: int = 3
    ranking_retry_delay_seconds: float = 1.0  # Fixed delay, no backoff

    # Catalog / defaults
    vehicle_catalog_path: Optional[str] = None  # Bundled catalog when unset
    default_tax_rate: float = 8.25


settings = Settings()
