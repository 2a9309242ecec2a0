"""Trakt API client."""

from __future__ import annotations

from typing import Any, Literal

from debridarr.clients.base import BaseApiClient
from debridarr.interfaces import WatchlistEntry
from debridarr.models.common import ContentType
from debridarr.models.trakt import SearchHit, WatchlistItem

TRAKT_URL = "https://api.trakt.tv"

WatchlistKind = Literal["movies", "shows"]

_WATCHLIST_KINDS: dict[ContentType, WatchlistKind] = {
    ContentType.MOVIE: "movies",
    ContentType.TV: "shows",
}


class TraktClient(BaseApiClient):
    """Client for interacting with the Trakt API.

    Also serves as the watch-list source of the sync.

    Example:
        async with TraktClient("client-id", "access-token") as client:
            movies = await client.get_watchlist("movies")
    """

    def __init__(
        self,
        client_id: str,
        access_token: str | None = None,
        *,
        base_url: str = TRAKT_URL,
        **kwargs: Any,
    ) -> None:
        """Initialize the client.

        Args:
            client_id: Trakt API application client ID
            access_token: OAuth access token, needed for watch-list calls
            base_url: API base URL (default: public Trakt API)
            **kwargs: Passed to BaseApiClient (timeout, proxy_rotation, ...)
        """
        super().__init__(base_url, **kwargs)
        self.client_id = client_id
        self.access_token = access_token

    def _default_headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "trakt-api-version": "2",
            "trakt-api-key": self.client_id,
        }
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        return headers

    async def get_watchlist(self, kind: WatchlistKind = "movies") -> list[WatchlistItem]:
        """Fetch the user's watch-list.

        Args:
            kind: "movies" or "shows"

        Returns:
            List of watch-list items
        """
        data = await self._get_uncached(f"/sync/watchlist/{kind}")
        return [WatchlistItem.model_validate(item) for item in data or []]

    async def add_to_watchlist(
        self, item: dict[str, Any], kind: WatchlistKind = "movies"
    ) -> dict[str, Any]:
        """Add a movie or show to the watch-list.

        Args:
            item: Trakt item payload, e.g. {"ids": {"imdb": "tt0133093"}}
            kind: "movies" or "shows"

        Returns:
            Trakt's summary of added/existing/not-found items
        """
        result = await self._post("/sync/watchlist", json={kind: [item]})
        return result or {}

    async def search(self, query: str, kind: Literal["movie", "show"] = "movie") -> list[SearchHit]:
        """Search Trakt for movies or shows by text."""
        data = await self._get(f"/search/{kind}", params={"query": query})
        return [SearchHit.model_validate(item) for item in data or []]

    async def get_watchlist_entries(self, content_type: ContentType) -> list[WatchlistEntry]:
        """Watch-list source entry point."""
        items = await self.get_watchlist(_WATCHLIST_KINDS[content_type])
        return [
            WatchlistEntry(title=item.media.title, year=item.media.year)
            for item in items
            if item.media is not None
        ]
