"""Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API
    api_version: str = "0.1.0"
    debug: bool = False

    # Database
    database_url: str = "postgresql+asyncpg://stockroom:stockroom_dev_password@db:5432/stockroom"

    # Authentication
    stockroom_api_key: str = "dev-api-key-change-in-production"

    # Taxonomy bootstrap
    bootstrap_on_startup: bool = True

    # SKU generation
    sku_code_prefix: str = "SKU"
    max_batch_combinations: int = 500

    # Logging
    log_level: str = "INFO"

    class Config:
        """Pydantic configuration."""

        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
