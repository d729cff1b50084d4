"""Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API
    api_version: str = "0.1.0"
    debug: bool = False

    # Catalog
    default_language: str = "en"
    seed_sample_catalog: bool = True
    initial_visible_count: int = 10
    reveal_step: int = 10

    # Hosted backend (remote catalog source)
    backend_url: str | None = None
    backend_api_key: str = "dev-anon-key-change-in-production"
    backend_timeout: float = 10.0

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="STOREFRONT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
