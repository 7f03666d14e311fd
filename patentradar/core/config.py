"""Application configuration via environment variables."""

from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings loaded from environment variables."""

    app_name: str = Field("PatentRadar", description="Human-readable service name.")
    environment: str = Field("dev", description="Deployment environment tag.")
    debug: bool = Field(False, description="Enable FastAPI debug mode.")

    api_v1_prefix: str = Field("/api", description="Root prefix for versioned API routes.")
    allowed_hosts: List[str] = Field(
        default_factory=lambda: ["*"], description="Origins allowed to access the service."
    )

    portal_base_url: str = Field(
        "https://technology.nasa.gov",
        description="Origin of the NASA Technology Transfer portal.",
    )
    request_timeout: float = Field(30.0, description="Per-request timeout in seconds.")
    user_agent: str = Field(
        "PatentRadar/0.1 (+https://technology.nasa.gov)",
        description="User-Agent header sent to the portal.",
    )

    category_ttl_seconds: float = Field(300.0, description="Freshness window for category listings.")
    search_ttl_seconds: float = Field(180.0, description="Freshness window for search result pages.")
    detail_ttl_seconds: float = Field(600.0, description="Freshness window for scraped detail pages.")

    category_batch_size: int = Field(
        3, ge=1, description="Concurrent category requests issued per fan-out wave."
    )
    detail_window_chars: int = Field(
        4000,
        description="Characters scanned after a section heading when no list block matches.",
    )
    include_direct_video_files: bool = Field(
        False,
        description="Also collect direct .mp4/.mov/.webm links from detail pages.",
    )

    model_config = SettingsConfigDict(
        env_prefix="PATENTRADAR_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


@lru_cache()
def get_settings() -> Settings:
    """Provide a cached Settings instance."""

    return Settings()
