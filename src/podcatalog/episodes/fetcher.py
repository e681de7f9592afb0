"""Bulk retrieval of a show's full episode list.

The first page is fetched alone to learn the total; the remaining pages are
requested in bounded concurrent batches with a short pause between batches
to stay under upstream rate limits. A failed page (after retries) costs only
its own episodes; a failed first page aborts the fetch.
"""

import asyncio
import logging
import math
import time
from dataclasses import dataclass, field

from podcatalog.config.schema import FetchConfig
from podcatalog.episodes.models import DEFAULT_DESCRIPTION_LENGTH, Episode, EpisodeCatalog, PartialFetchWarning
from podcatalog.episodes.ordering import number_page, order_and_number
from podcatalog.episodes.source import EpisodePage, EpisodeSource, RawEpisode
from podcatalog.utils.errors import FatalFetchError
from podcatalog.utils.retry import DEFAULT_RETRY_CONFIG, RetryConfig, with_retry

logger = logging.getLogger(__name__)


@dataclass
class PageSuccess:
    """A page that was fetched."""

    index: int
    offset: int
    items: list[RawEpisode | None]


@dataclass
class PageFailure:
    """A page that could not be fetched after retries."""

    index: int
    offset: int
    error: Exception


PageResult = PageSuccess | PageFailure


@dataclass
class MergedPages:
    """Outcome of the additional-page batches, in page order."""

    items: list[RawEpisode | None] = field(default_factory=list)
    failures: list[PageFailure] = field(default_factory=list)
    requests: int = 0


def merge_page_results(results: list[PageResult]) -> MergedPages:
    """Merge page outcomes by page index, ignoring completion order.

    Failures contribute no items and are collected separately.
    """
    merged = MergedPages(requests=len(results))
    for result in sorted(results, key=lambda r: r.index):
        if isinstance(result, PageSuccess):
            merged.items.extend(result.items)
        else:
            merged.failures.append(result)
    return merged


class BulkFetchOrchestrator:
    """Assembles complete episode catalogs from a paginated source.

    Example:
        >>> orchestrator = BulkFetchOrchestrator(source)
        >>> catalog = await orchestrator.fetch_all_episodes("show-id")
        >>> catalog.is_complete
        True
    """

    def __init__(
        self,
        source: EpisodeSource,
        config: FetchConfig | None = None,
        retry_config: RetryConfig | None = None,
        description_max_length: int = DEFAULT_DESCRIPTION_LENGTH,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            source: Upstream episode source
            config: Page size, batch size and inter-batch delay
            retry_config: Per-page retry policy (default: built from config.max_attempts)
            description_max_length: Display truncation applied to episodes
        """
        self.source = source
        self.config = config or FetchConfig()
        self.retry_config = retry_config or RetryConfig(
            max_attempts=self.config.max_attempts,
            max_wait_seconds=DEFAULT_RETRY_CONFIG.max_wait_seconds,
            min_wait_seconds=DEFAULT_RETRY_CONFIG.min_wait_seconds,
            jitter=DEFAULT_RETRY_CONFIG.jitter,
        )
        self.description_max_length = description_max_length

    async def _get_page(self, show_id: str, offset: int, limit: int) -> EpisodePage:
        fetch = with_retry(config=self.retry_config)(self.source.get_page)
        return await fetch(show_id, offset, limit)

    async def _fetch_page_result(self, show_id: str, index: int) -> PageResult:
        """Fetch one additional page, turning errors into a PageFailure."""
        page_size = self.config.page_size
        offset = index * page_size
        try:
            page = await self._get_page(show_id, offset, page_size)
        except Exception as e:
            return PageFailure(index=index, offset=offset, error=e)
        return PageSuccess(index=index, offset=offset, items=list(page.items))

    async def _fetch_additional_pages(self, show_id: str, additional_pages: int) -> MergedPages:
        batch_size = self.config.batch_size
        delay_seconds = self.config.batch_delay_ms / 1000
        results: list[PageResult] = []

        # Page indices 1..additional_pages; index 0 is the first page
        for batch_start in range(1, additional_pages + 1, batch_size):
            batch_end = min(batch_start + batch_size, additional_pages + 1)
            batch = await asyncio.gather(
                *(self._fetch_page_result(show_id, index) for index in range(batch_start, batch_end))
            )
            results.extend(batch)

            if batch_end <= additional_pages and delay_seconds > 0:
                await asyncio.sleep(delay_seconds)

        return merge_page_results(results)

    async def fetch_all_episodes(self, show_id: str) -> EpisodeCatalog:
        """Fetch, order and number every episode of a show.

        Args:
            show_id: Upstream show identifier

        Returns:
            Catalog with episodes newest first; ``is_complete`` is False when
            any page after the first failed

        Raises:
            FatalFetchError: If the first page cannot be fetched
        """
        start = time.perf_counter()
        page_size = self.config.page_size
        logger.info(f"Fetching all episodes for show {show_id}")

        try:
            first_page = await self._get_page(show_id, 0, page_size)
        except Exception as e:
            logger.error(f"First page failed for show {show_id}: {e}")
            raise FatalFetchError(show_id, str(e)) from e

        total = first_page.total
        raw_items: list[RawEpisode | None] = list(first_page.items)
        requests = 1
        warnings: list[PartialFetchWarning] = []

        if total > page_size:
            remaining = total - page_size
            additional_pages = math.ceil(remaining / page_size)
            logger.info(
                f"Fetching {additional_pages} additional pages for {remaining} remaining episodes"
            )

            merged = await self._fetch_additional_pages(show_id, additional_pages)
            raw_items.extend(merged.items)
            requests += merged.requests

            for failure in merged.failures:
                logger.warning(
                    f"Failed to fetch page at offset {failure.offset} for show {show_id}: "
                    f"{type(failure.error).__name__}: {failure.error}"
                )
                warnings.append(
                    PartialFetchWarning(
                        page_index=failure.index,
                        offset=failure.offset,
                        error=str(failure.error),
                    )
                )

        # A misbehaving source could return more than it reported
        fetched = min(len(raw_items), total) if total else len(raw_items)
        if total == 0 and raw_items:
            total = len(raw_items)

        episodes = order_and_number(raw_items, description_max_length=self.description_max_length)
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"Fetched {fetched}/{total} episodes for show {show_id} "
            f"in {elapsed_ms:.0f}ms ({requests} requests)"
        )

        return EpisodeCatalog(
            episodes=episodes,
            total_items=total,
            fetched_items=fetched,
            pages_requested=requests,
            warnings=warnings,
        )

    async def fetch_page(self, show_id: str, page: int, page_size: int) -> tuple[list[Episode], int]:
        """Fetch a single page of episodes (no full catalog build).

        Args:
            show_id: Upstream show identifier
            page: 1-based page number
            page_size: Episodes per page (at most the upstream limit)

        Returns:
            Tuple of (numbered episodes on the page, total reported upstream)

        Raises:
            FatalFetchError: If the page cannot be fetched
        """
        offset = (page - 1) * page_size
        try:
            result = await self._get_page(show_id, offset, page_size)
        except Exception as e:
            raise FatalFetchError(show_id, str(e)) from e

        episodes = number_page(
            result.items, page, page_size, description_max_length=self.description_max_length
        )
        return episodes, result.total
