"""Real-Debrid API client."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from debridarr.clients.base import BaseApiClient
from debridarr.models.common import HeldItem, SubmissionResult
from debridarr.models.realdebrid import (
    AddMagnetResponse,
    Download,
    Torrent,
    TorrentInfo,
    User,
)

if TYPE_CHECKING:
    from debridarr.models.common import Candidate

logger = logging.getLogger(__name__)

REAL_DEBRID_URL = "https://api.real-debrid.com/rest/1.0"


class RealDebridClient(BaseApiClient):
    """Client for interacting with the Real-Debrid API.

    Also serves as the held-content source and the submission sink of the
    matching engine.

    Example:
        async with RealDebridClient("api-key") as client:
            torrents = await client.get_torrents()
            result = await client.add_magnet("magnet:?xt=urn:btih:...")
    """

    def __init__(self, api_key: str, *, base_url: str = REAL_DEBRID_URL, **kwargs: Any) -> None:
        """Initialize the client.

        Args:
            api_key: Real-Debrid API token
            base_url: API base URL (default: public Real-Debrid API)
            **kwargs: Passed to BaseApiClient (timeout, proxy_rotation, ...)
        """
        super().__init__(base_url, **kwargs)
        self.api_key = api_key

    def _default_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}

    async def get_user(self) -> User:
        """Fetch the authenticated user; also serves as a connection test."""
        data = await self._get("/user")
        return User.model_validate(data)

    async def test_connection(self) -> bool:
        """Check that the API key is accepted.

        Returns:
            True if the user endpoint answered, False on any HTTP error
        """
        try:
            await self.get_user()
        except httpx.HTTPError as e:
            logger.warning("Real-Debrid connection test failed: %s", e)
            return False
        return True

    async def get_torrents(self) -> list[Torrent]:
        """Fetch the user's torrents. Not cached, the list changes often."""
        data = await self._get_uncached("/torrents")
        return [Torrent.model_validate(item) for item in data or []]

    async def get_torrent_info(self, torrent_id: str) -> TorrentInfo:
        """Fetch details and file list of a torrent."""
        data = await self._get_uncached(f"/torrents/info/{torrent_id}")
        return TorrentInfo.model_validate(data)

    async def get_downloads(self, limit: int = 50) -> list[Download]:
        """Fetch the user's download links."""
        data = await self._get_uncached("/downloads", params={"limit": limit})
        return [Download.model_validate(item) for item in data or []]

    async def add_magnet(self, magnet: str) -> AddMagnetResponse:
        """Add a magnet link and select all of its files.

        Args:
            magnet: The magnet link

        Returns:
            AddMagnetResponse with the new torrent ID
        """
        data = await self._post("/torrents/addMagnet", data={"magnet": magnet})
        added = AddMagnetResponse.model_validate(data)
        await self.select_all_files(added.id)
        return added

    async def select_all_files(self, torrent_id: str) -> None:
        """Select every file of a torrent for download.

        Failures are logged and otherwise ignored; the torrent stays added.
        """
        try:
            info = await self.get_torrent_info(torrent_id)
            file_ids = ",".join(str(f.id) for f in info.files) or "all"
            await self._post(f"/torrents/selectFiles/{torrent_id}", data={"files": file_ids})
        except httpx.HTTPError as e:
            logger.warning("Failed to select files for torrent %s: %s", torrent_id, e)

    async def delete_torrent(self, torrent_id: str) -> None:
        """Delete a torrent from the user's list."""
        await self._delete(f"/torrents/delete/{torrent_id}")

    async def list_held_items(self) -> list[HeldItem]:
        """Held-content source entry point."""
        torrents = await self.get_torrents()
        return [HeldItem(id=t.id, filename=t.filename, status=t.status) for t in torrents]

    async def submit(self, candidate: Candidate) -> SubmissionResult:
        """Submission sink entry point: add the candidate's magnet."""
        try:
            added = await self.add_magnet(candidate.source_id)
        except httpx.HTTPError as e:
            return SubmissionResult(success=False, error=str(e) or type(e).__name__)
        return SubmissionResult(success=True, torrent_id=added.id)

    async def remove(self, item_id: str) -> bool:
        """Submission sink entry point: delete a held torrent."""
        try:
            await self.delete_torrent(item_id)
        except httpx.HTTPError as e:
            logger.warning("Failed to delete torrent %s: %s", item_id, e)
            return False
        return True
