"""
Application configuration using Pydantic Settings.
Values are read once at startup from environment variables (or .env).
Missing Sanity credentials fail fast with a ValidationError.
"""
from functools import lru_cache
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Sanity content store (required)
    sanity_project_id: str = Field(..., min_length=1)
    sanity_dataset: str = Field(..., min_length=1)
    sanity_api_token: str = Field(..., min_length=1)
    sanity_api_version: str = "2023-08-03"
    sanity_use_cdn: bool = False
    sanity_timeout_seconds: float = Field(30.0, gt=0)  # Applies to every store call

    # Cross-origin policy. ["*"] allows every origin. The default only suits
    # local development; deployments list their front-end origins in
    # CORS_ALLOWED_ORIGINS, e.g. '["https://photos.example.com"]'.
    cors_allowed_origins: List[str] = ["http://localhost:3000"]

    # "reference": resolve eventSlug to an event document and store a reference.
    # "slug": store the raw eventSlug string, no lookup ("unknown" when absent).
    event_association: Literal["reference", "slug"] = "reference"

    # Delete the uploaded asset when the photo document cannot be created
    cleanup_orphaned_assets: bool = False

    # Service
    environment: str = "dev"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3000

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True
    )

    @property
    def allow_all_origins(self) -> bool:
        return "*" in self.cors_allowed_origins

    @property
    def requires_event_reference(self) -> bool:
        return self.event_association == "reference"


@lru_cache
def get_settings() -> Settings:
    """Build the process settings once."""
    return Settings()
