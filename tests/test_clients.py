"""Tests for the Real-Debrid and Trakt clients."""

import json

import pytest
import respx
from httpx import Response

from debridarr.clients.realdebrid import RealDebridClient
from debridarr.clients.trakt import TraktClient
from debridarr.interfaces import HeldContentSource, SubmissionSink, WatchlistSource
from debridarr.metadata import extract_from_magnet
from debridarr.models.common import Candidate, ContentType, TorrentStatus

RD = "https://api.real-debrid.com/rest/1.0"
TRAKT = "https://api.trakt.tv"

MAGNET = "magnet:?xt=urn:btih:ABCDEF&dn=Movie.2020.1080p.BluRay.x264-GRP"

TORRENTS = [
    {
        "id": "T1",
        "filename": "Movie.2020.720p.WEB-DL",
        "hash": "abc",
        "bytes": 1000,
        "status": "downloaded",
        "progress": 100,
        "added": "2024-05-01T10:00:00.000Z",
        "links": ["https://real-debrid.com/d/X"],
    },
    {"id": "T2", "filename": "Other.1080p", "status": "magnet_conversion"},
    {"id": "T3", "filename": "Weird.1080p", "status": "something_new"},
]


class TestRealDebridClient:
    """Tests for RealDebridClient endpoints."""

    @respx.mock
    @pytest.mark.asyncio
    async def test_get_torrents(self) -> None:
        """Should parse torrents and map unknown statuses to UNKNOWN."""
        route = respx.get(f"{RD}/torrents").mock(return_value=Response(200, json=TORRENTS))

        async with RealDebridClient("key") as client:
            torrents = await client.get_torrents()

        assert [t.status for t in torrents] == [
            TorrentStatus.DOWNLOADED,
            TorrentStatus.MAGNET_CONVERSION,
            TorrentStatus.UNKNOWN,
        ]
        assert torrents[0].links == ["https://real-debrid.com/d/X"]
        assert route.calls.last.request.headers["Authorization"] == "Bearer key"

    @respx.mock
    @pytest.mark.asyncio
    async def test_list_held_items(self) -> None:
        """Should expose torrents as held items."""
        respx.get(f"{RD}/torrents").mock(return_value=Response(200, json=TORRENTS))

        async with RealDebridClient("key") as client:
            items = await client.list_held_items()

        assert [(i.id, i.filename) for i in items][0] == ("T1", "Movie.2020.720p.WEB-DL")
        assert items[0].status is TorrentStatus.DOWNLOADED

    @respx.mock
    @pytest.mark.asyncio
    async def test_add_magnet_selects_all_files(self) -> None:
        """Should add the magnet and select every file."""
        add = respx.post(f"{RD}/torrents/addMagnet").mock(
            return_value=Response(201, json={"id": "NEW", "uri": f"{RD}/torrents/info/NEW"})
        )
        respx.get(f"{RD}/torrents/info/NEW").mock(
            return_value=Response(
                200,
                json={
                    "id": "NEW",
                    "filename": "Movie.2020.1080p",
                    "status": "waiting_files_selection",
                    "files": [{"id": 1, "path": "/a.mkv"}, {"id": 2, "path": "/b.nfo"}],
                },
            )
        )
        select = respx.post(f"{RD}/torrents/selectFiles/NEW").mock(return_value=Response(204))

        async with RealDebridClient("key") as client:
            added = await client.add_magnet(MAGNET)

        assert added.id == "NEW"
        assert b"magnet=magnet" in add.calls.last.request.content
        assert select.calls.last.request.content == b"files=1%2C2"

    @respx.mock
    @pytest.mark.asyncio
    async def test_select_failure_keeps_torrent(self) -> None:
        """Should not fail the add when file selection fails."""
        respx.post(f"{RD}/torrents/addMagnet").mock(
            return_value=Response(201, json={"id": "NEW"})
        )
        respx.get(f"{RD}/torrents/info/NEW").mock(return_value=Response(404))

        async with RealDebridClient("key") as client:
            added = await client.add_magnet(MAGNET)

        assert added.id == "NEW"

    @respx.mock
    @pytest.mark.asyncio
    async def test_submit_success(self) -> None:
        """Should report the new torrent ID."""
        respx.post(f"{RD}/torrents/addMagnet").mock(
            return_value=Response(201, json={"id": "NEW"})
        )
        respx.get(f"{RD}/torrents/info/NEW").mock(
            return_value=Response(200, json={"id": "NEW", "filename": "x", "files": []})
        )
        select = respx.post(f"{RD}/torrents/selectFiles/NEW").mock(return_value=Response(204))
        candidate = Candidate(source_id=MAGNET, metadata=extract_from_magnet(MAGNET))

        async with RealDebridClient("key") as client:
            result = await client.submit(candidate)

        assert result.success is True
        assert result.torrent_id == "NEW"
        assert select.calls.last.request.content == b"files=all"

    @respx.mock
    @pytest.mark.asyncio
    async def test_submit_failure(self) -> None:
        """Should turn HTTP errors into a failed result."""
        respx.post(f"{RD}/torrents/addMagnet").mock(return_value=Response(403))
        candidate = Candidate(source_id=MAGNET, metadata=extract_from_magnet(MAGNET))

        async with RealDebridClient("key") as client:
            result = await client.submit(candidate)

        assert result.success is False
        assert result.torrent_id is None
        assert "403" in (result.error or "")

    @respx.mock
    @pytest.mark.asyncio
    async def test_remove(self) -> None:
        """Should delete the torrent and report failures as False."""
        respx.delete(f"{RD}/torrents/delete/T1").mock(return_value=Response(204))
        respx.delete(f"{RD}/torrents/delete/T2").mock(return_value=Response(404))

        async with RealDebridClient("key") as client:
            assert await client.remove("T1") is True
            assert await client.remove("T2") is False

    @respx.mock
    @pytest.mark.asyncio
    async def test_connection(self) -> None:
        """Should report whether the API key works."""
        respx.get(f"{RD}/user").mock(return_value=Response(401))

        async with RealDebridClient("bad") as client:
            assert await client.test_connection() is False

    def test_satisfies_protocols(self) -> None:
        """Should act as held-content source and submission sink."""
        client = RealDebridClient("key")
        assert isinstance(client, HeldContentSource)
        assert isinstance(client, SubmissionSink)


class TestTraktClient:
    """Tests for TraktClient endpoints."""

    @respx.mock
    @pytest.mark.asyncio
    async def test_get_watchlist(self) -> None:
        """Should send Trakt headers and parse watch-list items."""
        route = respx.get(f"{TRAKT}/sync/watchlist/movies").mock(
            return_value=Response(
                200,
                json=[
                    {
                        "rank": 1,
                        "listed_at": "2024-01-01T00:00:00.000Z",
                        "type": "movie",
                        "movie": {"title": "The Matrix", "year": 1999, "ids": {"trakt": 481}},
                    }
                ],
            )
        )

        async with TraktClient("cid", "token") as client:
            items = await client.get_watchlist("movies")

        assert items[0].media is not None
        assert items[0].media.title == "The Matrix"
        headers = route.calls.last.request.headers
        assert headers["trakt-api-key"] == "cid"
        assert headers["trakt-api-version"] == "2"
        assert headers["Authorization"] == "Bearer token"

    @respx.mock
    @pytest.mark.asyncio
    async def test_get_watchlist_entries(self) -> None:
        """Should map shows to watch-list entries."""
        respx.get(f"{TRAKT}/sync/watchlist/shows").mock(
            return_value=Response(
                200,
                json=[
                    {"type": "show", "show": {"title": "Show Name", "year": 2010}},
                    {"type": "season"},
                ],
            )
        )

        async with TraktClient("cid", "token") as client:
            entries = await client.get_watchlist_entries(ContentType.TV)

        assert [(e.title, e.year) for e in entries] == [("Show Name", 2010)]

    @respx.mock
    @pytest.mark.asyncio
    async def test_add_to_watchlist(self) -> None:
        """Should post the item under its kind."""
        route = respx.post(f"{TRAKT}/sync/watchlist").mock(
            return_value=Response(201, json={"added": {"movies": 1}})
        )

        async with TraktClient("cid", "token") as client:
            result = await client.add_to_watchlist({"ids": {"imdb": "tt0133093"}})

        assert result == {"added": {"movies": 1}}
        assert json.loads(route.calls.last.request.content) == {
            "movies": [{"ids": {"imdb": "tt0133093"}}]
        }

    @respx.mock
    @pytest.mark.asyncio
    async def test_search(self) -> None:
        """Should search by text and omit auth without a token."""
        route = respx.get(f"{TRAKT}/search/movie", params={"query": "matrix"}).mock(
            return_value=Response(
                200,
                json=[{"type": "movie", "score": 10.5, "movie": {"title": "The Matrix"}}],
            )
        )

        async with TraktClient("cid") as client:
            hits = await client.search("matrix")

        assert hits[0].media is not None
        assert hits[0].media.title == "The Matrix"
        assert "Authorization" not in route.calls.last.request.headers

    def test_satisfies_protocol(self) -> None:
        """Should act as a watch-list source."""
        assert isinstance(TraktClient("cid"), WatchlistSource)
