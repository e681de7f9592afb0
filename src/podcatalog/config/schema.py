"""Configuration schema models using Pydantic."""

from typing import Literal

from pydantic import BaseModel, Field, HttpUrl, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]

# Largest page the upstream episodes endpoint will return
MAX_UPSTREAM_PAGE_SIZE = 50


class SpotifyConfig(BaseModel):
    """Upstream API credentials and endpoints."""

    client_id: str | None = None  # If None, will use environment variable
    client_secret: str | None = None  # Encrypted when stored
    api_base_url: HttpUrl = HttpUrl("https://api.spotify.com/v1")
    token_url: HttpUrl = HttpUrl("https://accounts.spotify.com/api/token")
    market: str = "US"
    timeout_seconds: float = Field(default=30.0, gt=0)


class FetchConfig(BaseModel):
    """Bulk catalog fetch tuning."""

    page_size: int = Field(default=MAX_UPSTREAM_PAGE_SIZE, ge=1, le=MAX_UPSTREAM_PAGE_SIZE)
    batch_size: int = Field(default=5, ge=1)  # Concurrent page requests per batch
    batch_delay_ms: int = Field(default=100, ge=0)
    max_attempts: int = Field(default=3, ge=1)  # Per page, including the first try


class BrowseConfig(BaseModel):
    """Browsing defaults for the CLI."""

    default_page_size: int | Literal["unlimited"] = 10
    description_max_length: int = Field(default=300, ge=4)
    api_search: bool = False  # Try upstream search before the episode mapping

    @field_validator("default_page_size")
    @classmethod
    def _positive_page_size(cls, value: int | str) -> int | str:
        if isinstance(value, int) and value < 1:
            raise ValueError("default_page_size must be a positive integer or 'unlimited'")
        return value


class GlobalConfig(BaseModel):
    """Global podcatalog configuration."""

    version: str = "1"
    log_level: LogLevel = "WARNING"
    default_show_id: str | None = None

    spotify: SpotifyConfig = Field(default_factory=SpotifyConfig)
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    browse: BrowseConfig = Field(default_factory=BrowseConfig)
