"""Contract for upstream episode sources."""

from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, Field

RawEpisode = dict[str, Any]


class EpisodePage(BaseModel):
    """One page of raw episodes from the upstream API.

    Items may contain None: the upstream API returns null for episodes that
    are unavailable in the requested market.
    """

    items: list[RawEpisode | None] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)


@runtime_checkable
class EpisodeSource(Protocol):
    """Paginated access to a show's episodes.

    ``total`` must stay the same for a given show during one catalog fetch.
    """

    async def get_page(self, show_id: str, offset: int, limit: int) -> EpisodePage: ...


@runtime_checkable
class EpisodeMarkerSearch(Protocol):
    """Optional capability: find an episode by the number in its title."""

    async def search_by_episode_marker(
        self, show_id: str, episode_number: int
    ) -> RawEpisode | None: ...


def supports_marker_search(source: object) -> bool:
    """Check whether a source implements the optional search capability."""
    return isinstance(source, EpisodeMarkerSearch)
