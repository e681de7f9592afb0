"""Episode catalog acquisition, ordering, caching and windowing."""

from podcatalog.episodes.cache import EpisodeMappingCache
from podcatalog.episodes.fetcher import BulkFetchOrchestrator
from podcatalog.episodes.models import (
    UNLIMITED,
    Episode,
    EpisodeCatalog,
    EpisodeWindow,
    OperationFailure,
    PaginationWindow,
    PerformanceStats,
)
from podcatalog.episodes.ordering import number_page, order_and_number
from podcatalog.episodes.pagination import parse_page_size, reposition_on_resize, window
from podcatalog.episodes.service import EpisodeService
from podcatalog.episodes.source import EpisodePage, EpisodeSource
from podcatalog.episodes.spotify import SpotifyEpisodeSource

__all__ = [
    "UNLIMITED",
    "BulkFetchOrchestrator",
    "Episode",
    "EpisodeCatalog",
    "EpisodeMappingCache",
    "EpisodePage",
    "EpisodeService",
    "EpisodeSource",
    "EpisodeWindow",
    "OperationFailure",
    "PaginationWindow",
    "PerformanceStats",
    "SpotifyEpisodeSource",
    "number_page",
    "order_and_number",
    "parse_page_size",
    "reposition_on_resize",
    "window",
]
