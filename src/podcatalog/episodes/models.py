"""Data models for episodes, catalogs and paginated views."""

from datetime import date
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from podcatalog.utils.datetime import parse_release_date
from podcatalog.utils.display import format_duration, truncate_text

UNLIMITED = "unlimited"
PageSize = int | Literal["unlimited"]

SearchMethod = Literal["api", "mapping", "local"]
DateFilterKind = Literal["30days", "90days", "1year", "custom"]

DEFAULT_DESCRIPTION_LENGTH = 300


class Episode(BaseModel):
    """A single podcast episode, numbered within its show's catalog."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str = ""
    release_date: date | None = None
    release_date_raw: str | None = None  # As sent upstream, e.g. "2023-04"
    duration_ms: int | None = Field(default=None, ge=0)
    explicit: bool = False
    external_url: str | None = None
    language: str | None = None
    thumbnail_url: str | None = None
    episode_number: int | None = None
    is_highlighted: bool = False

    @property
    def duration(self) -> str:
        """Duration as M:SS, or "Unknown"."""
        return format_duration(self.duration_ms)

    @classmethod
    def from_raw(
        cls,
        raw: dict[str, Any],
        episode_number: int | None = None,
        description_max_length: int = DEFAULT_DESCRIPTION_LENGTH,
    ) -> "Episode":
        """Build an episode from an upstream episode object.

        Args:
            raw: Episode object as returned by the episodes endpoint
            episode_number: Number to assign (newest episode is 1)
            description_max_length: Display truncation for the description

        Returns:
            Episode instance
        """
        release_raw = raw.get("release_date")
        duration_ms = raw.get("duration_ms")
        if not isinstance(duration_ms, int) or duration_ms < 0:
            duration_ms = None
        images = raw.get("images") or []
        external_urls = raw.get("external_urls") or {}

        return cls(
            id=str(raw.get("id") or ""),
            title=raw.get("name") or "",
            description=truncate_text(raw.get("description"), description_max_length),
            release_date=parse_release_date(release_raw),
            release_date_raw=release_raw if isinstance(release_raw, str) else None,
            duration_ms=duration_ms,
            explicit=bool(raw.get("explicit", False)),
            external_url=external_urls.get("spotify"),
            language=raw.get("language"),
            thumbnail_url=images[0].get("url") if images else None,
            episode_number=episode_number,
        )


class PartialFetchWarning(BaseModel):
    """Record of a non-first page that could not be fetched."""

    page_index: int  # 0-based; page 0 is never partial
    offset: int
    error: str


class EpisodeCatalog(BaseModel):
    """All episodes of a show, newest first, with completeness info."""

    episodes: list[Episode] = Field(default_factory=list)
    total_items: int = 0
    fetched_items: int = 0
    pages_requested: int = 0
    warnings: list[PartialFetchWarning] = Field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return self.fetched_items == self.total_items


class PaginationWindow(BaseModel):
    """Pagination metadata for one screen of episodes."""

    current_page: int
    page_size: PageSize
    total_items: int
    total_pages: int
    has_next: bool
    has_previous: bool
    start_index: int  # 1-based, inclusive; 0 when the window is empty
    end_index: int
    searched_episode_number: int | None = None


class EpisodeWindow(BaseModel):
    """A slice of episodes plus its pagination metadata."""

    episodes: list[Episode]
    pagination: PaginationWindow


class PerformanceStats(BaseModel):
    """Counters for episode mapping cache usage."""

    total_requests: int = 0
    cache_hits: int = 0
    cache_misses: int = 0
    total_api_calls: int = 0
    cumulative_fetch_time_ms: float = 0.0

    @property
    def average_fetch_time_ms(self) -> float:
        if self.cache_misses == 0:
            return 0.0
        return self.cumulative_fetch_time_ms / self.cache_misses

    @property
    def cache_hit_rate(self) -> float:
        """Hit rate in percent."""
        if self.total_requests == 0:
            return 0.0
        return self.cache_hits / self.total_requests * 100


# Results handed to the presentation layer


class OperationFailure(BaseModel):
    """Structured failure so the CLI can print a message without a traceback."""

    success: Literal[False] = False
    error: str
    suggestion: str | None = None


class EpisodesResult(BaseModel):
    success: Literal[True] = True
    episodes: list[Episode]
    pagination: PaginationWindow


class SearchResult(EpisodesResult):
    searched_episode_number: int
    search_method: SearchMethod


class DateFilterResult(EpisodesResult):
    date_filter: DateFilterKind
    filter_start_date: str
    filter_end_date: str
    total_matches: int


class TextSearchResult(EpisodesResult):
    search_query: str
    total_matches: int
