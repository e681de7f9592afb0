"""Per-show episode-number lookup tables.

Building a mapping means fetching a show's whole catalog, so mappings are
kept for the lifetime of the cache object and only dropped on request.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from podcatalog.episodes.models import Episode, EpisodeCatalog, PerformanceStats

logger = logging.getLogger(__name__)

EpisodeMapping = dict[int, Episode]
CatalogLoader = Callable[[str], Awaitable[EpisodeCatalog]]


@dataclass(frozen=True)
class CachedShow:
    catalog: EpisodeCatalog
    mapping: EpisodeMapping


def build_mapping(catalog: EpisodeCatalog) -> EpisodeMapping:
    """Index an ordered catalog by episode number."""
    return {episode.episode_number: episode for episode in catalog.episodes}


class EpisodeMappingCache:
    """In-memory cache of episode mappings keyed by show id.

    Concurrent first requests for the same show wait on a per-show lock, so
    a catalog is built at most once.

    Example:
        >>> cache = EpisodeMappingCache(orchestrator.fetch_all_episodes)
        >>> mapping = await cache.get_mapping("show-id")
        >>> mapping[1].title  # newest episode
    """

    def __init__(self, loader: CatalogLoader) -> None:
        """Initialize cache.

        Args:
            loader: Coroutine function returning the ordered catalog of a show
        """
        self._loader = loader
        self._entries: dict[str, CachedShow] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        # Bumped by clear() so builds started before it do not store their result
        self._generations: dict[str, int] = {}
        self._epoch = 0
        self._stats = PerformanceStats()

    def _generation(self, show_id: str) -> tuple[int, int]:
        return self._epoch, self._generations.get(show_id, 0)

    async def _get_entry(self, show_id: str) -> CachedShow:
        self._stats.total_requests += 1

        entry = self._entries.get(show_id)
        if entry is not None:
            self._stats.cache_hits += 1
            logger.debug(f"Using cached episode mapping for show {show_id}")
            return entry

        lock = self._locks.setdefault(show_id, asyncio.Lock())
        async with lock:
            # Another request may have built it while we waited
            entry = self._entries.get(show_id)
            if entry is not None:
                self._stats.cache_hits += 1
                return entry

            self._stats.cache_misses += 1
            generation = self._generation(show_id)
            start = time.perf_counter()
            catalog = await self._loader(show_id)
            elapsed_ms = (time.perf_counter() - start) * 1000

            entry = CachedShow(catalog=catalog, mapping=build_mapping(catalog))
            if self._generation(show_id) == generation:
                self._entries[show_id] = entry
            else:
                logger.debug(f"Mapping for show {show_id} cleared during its build, not cached")
            self._stats.total_api_calls += catalog.pages_requested
            self._stats.cumulative_fetch_time_ms += elapsed_ms

            logger.info(
                f"Episode mapping created in {elapsed_ms:.0f}ms "
                f"for {len(entry.mapping)} episodes of show {show_id}"
            )
            return entry

    async def get_mapping(self, show_id: str) -> EpisodeMapping:
        """Return the episode-number mapping for a show, building it on first use.

        Raises:
            FatalFetchError: If the catalog cannot be built (nothing is cached)
        """
        entry = await self._get_entry(show_id)
        return entry.mapping

    async def get_catalog(self, show_id: str) -> EpisodeCatalog:
        """Return the cached ordered catalog behind a show's mapping."""
        entry = await self._get_entry(show_id)
        return entry.catalog

    def peek(self, show_id: str) -> EpisodeCatalog | None:
        """Return a cached catalog without fetching or touching the stats."""
        entry = self._entries.get(show_id)
        return entry.catalog if entry else None

    def clear(self, show_id: str | None = None) -> None:
        """Drop one show's mapping, or every mapping when show_id is None."""
        if show_id is not None:
            self._entries.pop(show_id, None)
            self._generations[show_id] = self._generations.get(show_id, 0) + 1
            logger.info(f"Cleared episode mapping cache for show {show_id}")
        else:
            self._entries.clear()
            self._epoch += 1
            logger.info("Cleared all episode mapping caches")

    def __contains__(self, show_id: str) -> bool:
        return show_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def stats(self) -> PerformanceStats:
        """Snapshot of the cache counters."""
        return self._stats.model_copy()
