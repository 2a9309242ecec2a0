"""Protocols for the collaborators the matching engine talks to."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from debridarr.models.common import (
        Candidate,
        ContentType,
        HeldItem,
        SubmissionResult,
    )


@dataclass(frozen=True)
class WatchlistEntry:
    """A title on the user's watch-list."""

    title: str
    year: int | None = None


@runtime_checkable
class CandidateSource(Protocol):
    """Search capability returning candidate releases for a title.

    Results are unordered and may contain near-duplicates.
    """

    async def find_all_matching_content(
        self, title: str, content_type: ContentType, year: int | None = None
    ) -> list[Candidate]: ...


@runtime_checkable
class HeldContentSource(Protocol):
    """Snapshot of items currently held by the debrid service."""

    async def list_held_items(self) -> list[HeldItem]: ...


@runtime_checkable
class SubmissionSink(Protocol):
    """Accepts candidates for download and removes superseded items."""

    async def submit(self, candidate: Candidate) -> SubmissionResult: ...

    async def remove(self, item_id: str) -> bool: ...


@runtime_checkable
class WatchlistSource(Protocol):
    """The user's watch-list, per content type."""

    async def get_watchlist_entries(self, content_type: ContentType) -> list[WatchlistEntry]: ...
