"""In-memory fakes and builders for episode source tests."""

import asyncio
from collections.abc import Callable
from datetime import date, timedelta
from typing import Any

from podcatalog.episodes.source import EpisodePage

# Captured before any test patches asyncio.sleep
_yield_to_loop = asyncio.sleep


def make_raw_episode(
    episode_id: str,
    release_date: str | None,
    name: str | None = None,
    duration_ms: int | None = 1_800_000,
    **extra: Any,
) -> dict[str, Any]:
    """Build an upstream episode object."""
    raw: dict[str, Any] = {
        "id": episode_id,
        "name": name or f"Episode {episode_id}",
        "description": f"Description of {episode_id}",
        "release_date": release_date,
        "release_date_precision": "day",
        "duration_ms": duration_ms,
        "explicit": False,
        "language": "en",
        "external_urls": {"spotify": f"https://open.spotify.com/episode/{episode_id}"},
        "images": [{"url": f"https://i.scdn.co/image/{episode_id}", "width": 640, "height": 640}],
    }
    raw.update(extra)
    return raw


def make_raw_episodes(count: int, newest: date = date(2024, 6, 30)) -> list[dict[str, Any]]:
    """Build ``count`` episodes, newest first, one per day.

    ids run from ``ep{count}`` (newest) down to ``ep1`` (oldest).
    """
    return [
        make_raw_episode(f"ep{count - i}", (newest - timedelta(days=i)).isoformat())
        for i in range(count)
    ]


class FakeEpisodeSource:
    """In-memory episode source with failure injection and call tracking."""

    def __init__(
        self,
        episodes: list[dict[str, Any] | None],
        fail_offsets: dict[int, Exception] | None = None,
        flaky_offsets: dict[int, list[Exception]] | None = None,
        total: int | None = None,
        yields_for_offset: Callable[[int], int] | None = None,
    ) -> None:
        """Initialize the fake.

        Args:
            episodes: Items served by offset, in source order
            fail_offsets: Offsets that always raise the given error
            flaky_offsets: Offsets that raise each listed error once, then succeed
            total: Reported total (default: len(episodes))
            yields_for_offset: Event loop yields before answering, to reorder completions
        """
        self.episodes = episodes
        self.total = len(episodes) if total is None else total
        self.fail_offsets = fail_offsets or {}
        self.flaky_offsets = {k: list(v) for k, v in (flaky_offsets or {}).items()}
        self.yields_for_offset = yields_for_offset
        self.calls: list[tuple[str, int, int]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def get_page(self, show_id: str, offset: int, limit: int) -> EpisodePage:
        self.calls.append((show_id, offset, limit))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            for _ in range(self.yields_for_offset(offset) if self.yields_for_offset else 1):
                await _yield_to_loop(0)

            if offset in self.fail_offsets:
                raise self.fail_offsets[offset]
            pending = self.flaky_offsets.get(offset)
            if pending:
                raise pending.pop(0)

            return EpisodePage(items=self.episodes[offset:offset + limit], total=self.total)
        finally:
            self.in_flight -= 1

    def offsets_called(self) -> list[int]:
        return [offset for _, offset, _ in self.calls]


class SearchableEpisodeSource(FakeEpisodeSource):
    """Fake source that also supports upstream episode-marker search."""

    def __init__(self, episodes, marker_results=None, marker_error=None, **kwargs) -> None:
        super().__init__(episodes, **kwargs)
        self.marker_results: dict[int, dict[str, Any]] = marker_results or {}
        self.marker_error = marker_error
        self.marker_calls: list[tuple[str, int]] = []

    async def search_by_episode_marker(self, show_id: str, episode_number: int):
        self.marker_calls.append((show_id, episode_number))
        if self.marker_error is not None:
            raise self.marker_error
        return self.marker_results.get(episode_number)

