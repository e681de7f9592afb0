"""Episode browsing API used by the CLI layer."""

import logging
from datetime import date

from podcatalog.config.schema import BrowseConfig, FetchConfig, MAX_UPSTREAM_PAGE_SIZE
from podcatalog.episodes.cache import EpisodeMapping, EpisodeMappingCache
from podcatalog.episodes.fetcher import BulkFetchOrchestrator
from podcatalog.episodes.models import (
    UNLIMITED,
    DateFilterResult,
    EpisodeCatalog,
    EpisodesResult,
    EpisodeWindow,
    OperationFailure,
    PageSize,
    PaginationWindow,
    PerformanceStats,
    SearchResult,
    TextSearchResult,
)
from podcatalog.episodes.pagination import (
    clamp_page,
    parse_page_size,
    reposition_on_resize,
    total_pages_for,
    window,
)
from podcatalog.episodes.search import (
    SearchContext,
    filter_by_date,
    resolve_date_range,
    run_search,
    search_episodes_by_text,
)
from podcatalog.episodes.source import EpisodeSource
from podcatalog.utils.errors import PodcatalogError, ValidationError
from podcatalog.utils.retry import RetryConfig

logger = logging.getLogger(__name__)


def _failure(error: Exception) -> OperationFailure:
    suggestion = error.suggestion if isinstance(error, ValidationError) else None
    return OperationFailure(error=str(error), suggestion=suggestion)


class EpisodeService:
    """Fetches, caches, windows and searches a show's episodes.

    The mapping cache is injected so callers (and tests) control its
    lifetime; by default each service gets its own.

    Example:
        >>> service = EpisodeService(source)
        >>> result = await service.search_episode_by_number("show-id", 42)
        >>> result.search_method
        'mapping'
    """

    def __init__(
        self,
        source: EpisodeSource,
        fetch_config: FetchConfig | None = None,
        browse_config: BrowseConfig | None = None,
        cache: EpisodeMappingCache | None = None,
        retry_config: RetryConfig | None = None,
    ) -> None:
        self.source = source
        self.browse_config = browse_config or BrowseConfig()
        self.orchestrator = BulkFetchOrchestrator(
            source,
            config=fetch_config,
            retry_config=retry_config,
            description_max_length=self.browse_config.description_max_length,
        )
        self.cache = cache or EpisodeMappingCache(self.orchestrator.fetch_all_episodes)

    async def get_all_episodes(self, show_id: str) -> EpisodeCatalog:
        """Fetch the full ordered catalog of a show.

        Raises:
            FatalFetchError: If the first page cannot be fetched
        """
        return await self.orchestrator.fetch_all_episodes(show_id)

    async def get_episode_mapping(self, show_id: str) -> EpisodeMapping:
        return await self.cache.get_mapping(show_id)

    async def _legacy_page(self, show_id: str, page: int, page_size: int) -> EpisodeWindow:
        """Window served by a single upstream page request."""
        page = max(page, 1)
        episodes, total = await self.orchestrator.fetch_page(show_id, page, page_size)

        total_pages = total_pages_for(total, page_size)
        clamped = clamp_page(page, total_pages)
        if clamped != page:
            logger.debug(f"Page {page} out of range for show {show_id}, showing page {clamped}")
            page = clamped
            episodes, total = await self.orchestrator.fetch_page(show_id, page, page_size)

        start = (page - 1) * page_size
        return EpisodeWindow(
            episodes=episodes,
            pagination=PaginationWindow(
                current_page=page,
                page_size=page_size,
                total_items=total,
                total_pages=total_pages,
                has_next=page < total_pages,
                has_previous=page > 1,
                start_index=start + 1 if episodes else 0,
                end_index=start + len(episodes),
            ),
        )

    async def get_episodes_window(
        self, show_id: str, page: int = 1, page_size: PageSize | str = 10
    ) -> EpisodesResult | OperationFailure:
        """One page of a show's episodes, newest first.

        A cached catalog is windowed in memory. Without one, sizes the
        upstream can serve in one request use a single page request; larger
        sizes and "unlimited" build (and cache) the full catalog.
        """
        try:
            size = parse_page_size(page_size)
            logger.info(f"Fetching episodes for show {show_id}, page {page}, page size {size}")

            catalog = self.cache.peek(show_id)
            if catalog is not None:
                result = window(catalog.episodes, page, size)
            elif size == UNLIMITED or size > MAX_UPSTREAM_PAGE_SIZE:
                catalog = await self.cache.get_catalog(show_id)
                result = window(catalog.episodes, page, size)
            else:
                result = await self._legacy_page(show_id, page, size)

            return EpisodesResult(episodes=result.episodes, pagination=result.pagination)
        except PodcatalogError as e:
            logger.error(f"Failed to get episodes for show {show_id}: {e}")
            return _failure(e)

    async def search_episode_by_number(
        self, show_id: str, episode_number: int, page_size: PageSize | str = 10
    ) -> SearchResult | OperationFailure:
        """Find an episode by its number (1 = newest).

        Returns:
            SearchResult with the episode highlighted, or OperationFailure
            naming the valid range when the number does not exist
        """
        try:
            size = parse_page_size(page_size)
            logger.info(f"Searching for episode {episode_number} in show {show_id}")
            ctx = SearchContext(
                show_id=show_id,
                episode_number=episode_number,
                page_size=size,
                cache=self.cache,
                orchestrator=self.orchestrator,
                source=self.source,
                api_search=self.browse_config.api_search,
            )
            return await run_search(ctx)
        except PodcatalogError as e:
            logger.error(f"Failed to search episode by number: {e}")
            return _failure(e)

    async def filter_episodes_by_date(
        self,
        show_id: str,
        date_filter: str,
        start_date: date | str | None = None,
        end_date: date | str | None = None,
        page: int = 1,
        page_size: PageSize | str = 10,
    ) -> DateFilterResult | OperationFailure:
        """Episodes released in a date range, newest first.

        Episodes keep their catalog numbers, so #1 is always the show's
        newest episode even when it is filtered out.
        """
        try:
            size = parse_page_size(page_size)
            start, end = resolve_date_range(date_filter, start_date, end_date)
            logger.info(
                f"Filtering episodes for show {show_id} by date: {date_filter} "
                f"({start.isoformat()} to {end.isoformat()})"
            )

            catalog = await self.cache.get_catalog(show_id)
            matches = filter_by_date(catalog.episodes, start, end)
            result = window(matches, page, size)

            return DateFilterResult(
                episodes=result.episodes,
                pagination=result.pagination,
                date_filter=date_filter,
                filter_start_date=start.isoformat(),
                filter_end_date=end.isoformat(),
                total_matches=len(matches),
            )
        except PodcatalogError as e:
            logger.error(f"Failed to filter episodes by date: {e}")
            return _failure(e)

    async def search_episodes(
        self,
        show_id: str,
        query: str,
        page: int = 1,
        page_size: PageSize | str = 10,
    ) -> TextSearchResult | OperationFailure:
        """Episodes whose title, description or release date contain a keyword."""
        try:
            size = parse_page_size(page_size)
            logger.info(f"Searching episodes for show {show_id} with query: {query!r}")

            catalog = await self.cache.get_catalog(show_id)
            matches = search_episodes_by_text(catalog.episodes, query)
            result = window(matches, page, size)

            return TextSearchResult(
                episodes=result.episodes,
                pagination=result.pagination,
                search_query=query,
                total_matches=len(matches),
            )
        except PodcatalogError as e:
            logger.error(f"Failed to search episodes: {e}")
            return _failure(e)

    def reposition_on_resize(
        self, current_page: int, old_page_size: PageSize, new_page_size: PageSize
    ) -> int:
        """Page to show after switching page size, keeping the first visible episode."""
        if old_page_size == UNLIMITED:
            return 1
        return reposition_on_resize((current_page - 1) * old_page_size, new_page_size)

    def get_performance_stats(self) -> PerformanceStats:
        return self.cache.stats()

    def log_performance_summary(self) -> None:
        stats = self.cache.stats()
        logger.debug(
            f"Performance summary - cache hit rate: {stats.cache_hit_rate:.1f}%, "
            f"avg fetch time: {stats.average_fetch_time_ms:.0f}ms, "
            f"total API calls: {stats.total_api_calls}"
        )

    def clear_episode_mapping(self, show_id: str | None = None) -> None:
        self.cache.clear(show_id)
