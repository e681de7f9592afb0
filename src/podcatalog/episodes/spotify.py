"""Spotify Web API implementation of the episode source contract."""

import logging
import re
import time
from typing import Any

import httpx

from podcatalog.config.schema import MAX_UPSTREAM_PAGE_SIZE, SpotifyConfig
from podcatalog.episodes.source import EpisodePage, RawEpisode
from podcatalog.utils.errors import SourceError
from podcatalog.utils.retry import classify_http_error, classify_transport_error

logger = logging.getLogger(__name__)

# Refresh the token a little before upstream says it expires
TOKEN_EXPIRY_MARGIN_SECONDS = 60


def episode_marker_pattern(episode_number: int) -> re.Pattern[str]:
    """Pattern matching "episode 12", "Ep #12" or "#12" as a whole word."""
    return re.compile(
        rf"(?<!\w)(?:episode\s*#?{episode_number}|ep\.?\s*#?{episode_number}|#{episode_number})(?!\d)",
        re.IGNORECASE,
    )


class SpotifyEpisodeSource:
    """Reads show episodes from the Spotify Web API.

    Uses the client credentials flow; the token is requested on first use
    and reused until shortly before it expires.

    Example:
        >>> async with SpotifyEpisodeSource(client_id, client_secret) as source:
        ...     page = await source.get_page("show-id", offset=0, limit=50)
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        config: SpotifyConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the source.

        Args:
            client_id: API client id
            client_secret: API client secret
            config: Endpoints, market and timeout
            http_client: Client to use (default: a new one owned by this source)
        """
        self.config = config or SpotifyConfig()
        self.client_id = client_id
        self.client_secret = client_secret
        self.base_url = str(self.config.api_base_url).rstrip("/")
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=self.config.timeout_seconds)
        self._access_token: str | None = None
        self._token_expires_at = 0.0

    async def __aenter__(self) -> "SpotifyEpisodeSource":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _get_access_token(self) -> str:
        if self._access_token and time.monotonic() < self._token_expires_at:
            return self._access_token

        logger.debug("Requesting API access token")
        try:
            response = await self._client.post(
                str(self.config.token_url),
                data={"grant_type": "client_credentials"},
                auth=(self.client_id, self.client_secret),
            )
        except httpx.RequestError as e:
            raise classify_transport_error(e) from e

        if response.is_error:
            raise classify_http_error(response.status_code, response.text)

        payload = response.json()
        self._access_token = payload["access_token"]
        expires_in = int(payload.get("expires_in", 3600))
        self._token_expires_at = time.monotonic() + max(expires_in - TOKEN_EXPIRY_MARGIN_SECONDS, 0)
        return self._access_token

    async def _get(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        token = await self._get_access_token()
        try:
            response = await self._client.get(
                f"{self.base_url}{path}",
                params=params,
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.RequestError as e:
            raise classify_transport_error(e) from e

        if response.status_code == 401:
            # Token revoked or expired early; the next call fetches a new one
            self._access_token = None

        if response.is_error:
            retry_after = response.headers.get("Retry-After")
            raise classify_http_error(
                response.status_code,
                response.text,
                retry_after=float(retry_after) if retry_after and retry_after.isdigit() else None,
            )

        return response.json()

    async def get_page(self, show_id: str, offset: int, limit: int) -> EpisodePage:
        """Fetch one page of a show's episodes.

        ``limit`` is clamped to 1-50 and ``offset`` to >= 0, the bounds the
        API accepts.

        Raises:
            SourceError: If the response does not look like an episodes page
        """
        params = {
            "offset": max(0, offset),
            "limit": min(max(1, limit), MAX_UPSTREAM_PAGE_SIZE),
            "market": self.config.market,
        }
        data = await self._get(f"/shows/{show_id}/episodes", params)

        if not isinstance(data.get("items"), list):
            raise SourceError(f"Unexpected episodes response for show {show_id}")
        return EpisodePage(items=data["items"], total=data.get("total") or 0)

    async def search_by_episode_marker(
        self, show_id: str, episode_number: int
    ) -> RawEpisode | None:
        """Search upstream for an episode whose text carries the number.

        Returns:
            First raw episode whose title or description matches, or None
        """
        params = {
            "q": f"show:{show_id} episode:{episode_number}",
            "type": "episode",
            "market": self.config.market,
            "limit": MAX_UPSTREAM_PAGE_SIZE,
            "offset": 0,
        }
        data = await self._get("/search", params)
        items = (data.get("episodes") or {}).get("items") or []

        pattern = episode_marker_pattern(episode_number)
        for item in items:
            if item is None:
                continue
            text = f"{item.get('name') or ''} {item.get('description') or ''}"
            if pattern.search(text):
                return item
        return None
