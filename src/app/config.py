"""Configuration management using Pydantic settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables (MYPLACES_*)."""

    model_config = SettingsConfigDict(
        env_prefix="MYPLACES_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "MyPlaces"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Places
    nearby_limit: int = Field(default=10, ge=1)          # Rows in the Nearby list
    max_document_bytes: int = Field(default=20_000_000, ge=1)  # Upload cap for /import


settings = Settings()
