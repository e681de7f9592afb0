"""Episode-number search, keyword search and date-range filtering.

Number search tries an ordered list of strategies that share one signature.
The first strategy to return a result wins and is recorded as the
``search_method``:

- ``api``: upstream search by the number in the episode title, when the
  source supports it and it is enabled
- ``mapping``: the cached episode-number mapping (the default path)
- ``local``: a fresh full catalog fetch, scanned for the number
"""

import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from datetime import date, timedelta

from podcatalog.episodes.cache import EpisodeMappingCache
from podcatalog.episodes.fetcher import BulkFetchOrchestrator
from podcatalog.episodes.models import (
    UNLIMITED,
    Episode,
    PageSize,
    PaginationWindow,
    SearchMethod,
    SearchResult,
)
from podcatalog.episodes.pagination import page_containing, window
from podcatalog.episodes.source import EpisodeSource, supports_marker_search
from podcatalog.utils.datetime import today_utc
from podcatalog.utils.errors import (
    InvalidFilterError,
    OutOfRangeError,
    PodcatalogError,
    ValidationError,
)

logger = logging.getLogger(__name__)

NAMED_RANGES: dict[str, int] = {
    "30days": 30,
    "90days": 90,
    "1year": 365,
}
SUPPORTED_FILTERS: tuple[str, ...] = (*NAMED_RANGES, "custom")


@dataclass
class SearchContext:
    """Everything a search strategy may need."""

    show_id: str
    episode_number: int
    page_size: PageSize
    cache: EpisodeMappingCache
    orchestrator: BulkFetchOrchestrator
    source: EpisodeSource
    api_search: bool = False


Strategy = Callable[[SearchContext], Awaitable[SearchResult | None]]


class SearchFailedError(PodcatalogError):
    """No strategy produced a result."""

    pass


def _highlight(episode: Episode) -> Episode:
    return episode.model_copy(update={"is_highlighted": True})


def single_episode_result(
    episode: Episode, ctx: SearchContext, method: SearchMethod
) -> SearchResult:
    """Wrap one found episode in a one-item window."""
    return SearchResult(
        episodes=[_highlight(episode)],
        pagination=PaginationWindow(
            current_page=1,
            page_size=UNLIMITED if ctx.page_size == UNLIMITED else 1,
            total_items=1,
            total_pages=1,
            has_next=False,
            has_previous=False,
            start_index=1,
            end_index=1,
            searched_episode_number=ctx.episode_number,
        ),
        searched_episode_number=ctx.episode_number,
        search_method=method,
    )


async def _known_total(ctx: SearchContext) -> int:
    """Episode count of the show, from the cache or a one-item page request."""
    catalog = ctx.cache.peek(ctx.show_id)
    if catalog is not None:
        return len(catalog.episodes) if catalog.is_complete else catalog.total_items
    page = await ctx.source.get_page(ctx.show_id, 0, 1)
    return page.total


async def search_via_api(ctx: SearchContext) -> SearchResult | None:
    if not ctx.api_search or not supports_marker_search(ctx.source):
        return None

    # Upstream search is free text and may match other shows' numbering
    total = await _known_total(ctx)
    if ctx.episode_number < 1 or ctx.episode_number > total:
        raise OutOfRangeError(ctx.episode_number, total)

    raw = await ctx.source.search_by_episode_marker(ctx.show_id, ctx.episode_number)
    if raw is None:
        logger.debug(f"Upstream search found no episode marked #{ctx.episode_number}")
        return None

    episode = Episode.from_raw(
        raw,
        episode_number=ctx.episode_number,
        description_max_length=ctx.orchestrator.description_max_length,
    )
    return single_episode_result(episode, ctx, "api")


async def search_via_mapping(ctx: SearchContext) -> SearchResult | None:
    mapping = await ctx.cache.get_mapping(ctx.show_id)
    episode = mapping.get(ctx.episode_number)
    if episode is not None:
        return single_episode_result(episode, ctx, "mapping")

    catalog = await ctx.cache.get_catalog(ctx.show_id)
    if catalog.is_complete:
        # A fresh fetch would return the same catalog
        raise OutOfRangeError(ctx.episode_number, len(mapping))
    return None


async def search_via_local(ctx: SearchContext) -> SearchResult | None:
    catalog = await ctx.orchestrator.fetch_all_episodes(ctx.show_id)
    total = len(catalog.episodes)
    n = ctx.episode_number
    if n < 1 or n > total:
        raise OutOfRangeError(n, total)

    page = page_containing(n, ctx.page_size)
    result = window(catalog.episodes, page, ctx.page_size)
    episodes = [_highlight(e) if e.episode_number == n else e for e in result.episodes]
    pagination = result.pagination.model_copy(update={"searched_episode_number": n})

    return SearchResult(
        episodes=episodes,
        pagination=pagination,
        searched_episode_number=n,
        search_method="local",
    )


DEFAULT_STRATEGIES: tuple[tuple[SearchMethod, Strategy], ...] = (
    ("api", search_via_api),
    ("mapping", search_via_mapping),
    ("local", search_via_local),
)


async def run_search(
    ctx: SearchContext,
    strategies: Sequence[tuple[SearchMethod, Strategy]] = DEFAULT_STRATEGIES,
) -> SearchResult:
    """Try strategies in order; the first non-None result wins.

    A strategy that raises is logged and skipped, except OutOfRangeError,
    which ends the search.

    Raises:
        OutOfRangeError: The number is outside the show's catalog
        SearchFailedError: Every strategy failed or found nothing
    """
    errors: list[str] = []

    for name, strategy in strategies:
        try:
            result = await strategy(ctx)
        except OutOfRangeError:
            raise
        except Exception as e:
            logger.warning(f"Episode search via {name} failed: {e}")
            errors.append(f"{name}: {e}")
            continue

        if result is not None:
            logger.info(f"Found episode #{ctx.episode_number} of show {ctx.show_id} via {name}")
            return result

    detail = "; ".join(errors) if errors else "no strategy returned a result"
    raise SearchFailedError(f"Search for episode #{ctx.episode_number} failed ({detail})")


def _coerce_date(value: date | str | None, label: str) -> date | None:
    if value is None or isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        raise InvalidFilterError(
            f"Invalid {label} date: {value!r}", suggestion="Use the YYYY-MM-DD format"
        ) from None


def resolve_date_range(
    kind: str,
    start: date | str | None = None,
    end: date | str | None = None,
    today: date | None = None,
) -> tuple[date, date]:
    """Turn a filter kind into an inclusive (start, end) date range.

    Args:
        kind: One of "30days", "90days", "1year" or "custom"
        start: Start date for "custom"
        end: End date for "custom"
        today: Reference date for named ranges (default: today, UTC)

    Raises:
        InvalidFilterError: Unknown kind, missing or malformed custom dates,
            or a start date after the end date
    """
    if kind in NAMED_RANGES:
        today = today or today_utc()
        return today - timedelta(days=NAMED_RANGES[kind]), today

    if kind != "custom":
        raise InvalidFilterError(
            f"Invalid date filter: {kind!r}. Supported filters: {', '.join(SUPPORTED_FILTERS)}"
        )

    start_date = _coerce_date(start, "start")
    end_date = _coerce_date(end, "end")
    if start_date is None or end_date is None:
        raise InvalidFilterError("Start date and end date are required for custom date filter")
    if start_date > end_date:
        raise InvalidFilterError(
            f"Start date {start_date.isoformat()} is after end date {end_date.isoformat()}"
        )
    return start_date, end_date


def filter_by_date(episodes: Sequence[Episode], start: date, end: date) -> list[Episode]:
    """Episodes released within [start, end], in their existing order.

    Episodes without a release date never match.
    """
    return [
        episode
        for episode in episodes
        if episode.release_date is not None and start <= episode.release_date <= end
    ]


def _release_text(episode: Episode) -> str:
    if episode.release_date_raw:
        return episode.release_date_raw
    return episode.release_date.isoformat() if episode.release_date else ""


def search_episodes_by_text(episodes: Sequence[Episode], query: str) -> list[Episode]:
    """Episodes whose title, description or release date contain ``query``.

    Matching is a case-insensitive substring test. Matches keep their
    existing order and catalog numbers.

    Raises:
        ValidationError: The query is empty
    """
    term = query.strip().casefold()
    if not term:
        raise ValidationError("Search query must not be empty", suggestion="Enter a search term")

    return [
        episode
        for episode in episodes
        if term in episode.title.casefold()
        or term in episode.description.casefold()
        or term in _release_text(episode).casefold()
    ]
