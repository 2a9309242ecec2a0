"""Magnet hash lists: parsing, preference filtering and in-memory search."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Self

from debridarr.criteria import matches_preferences
from debridarr.metadata import extract_from_magnet, is_magnet_link
from debridarr.models.common import Candidate, ContentType

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from debridarr.preferences import Preferences

logger = logging.getLogger(__name__)

_NON_ALNUM_PATTERN = re.compile(r"[^0-9a-z]+")


def normalize_for_search(title: str) -> str:
    """Lowercase a title and reduce it to space-separated alphanumeric words."""
    return _NON_ALNUM_PATTERN.sub(" ", title.lower()).strip()


def parse_hash_list(content: str) -> list[Candidate]:
    """Parse a hash list with one magnet link per line.

    Blank lines and lines that are not magnet links are skipped.

    Args:
        content: Text content of the hash list

    Returns:
        One Candidate per magnet link, in file order
    """
    candidates: list[Candidate] = []
    for line in content.splitlines():
        magnet = line.strip()
        if not magnet or not is_magnet_link(magnet):
            continue
        candidates.append(Candidate(source_id=magnet, metadata=extract_from_magnet(magnet)))
    return candidates


def process_hash_list(content: str, preferences: Preferences) -> list[Candidate]:
    """Parse a hash list and keep the entries that match the preferences."""
    return [c for c in parse_hash_list(content) if matches_preferences(c.metadata, preferences)]


class HashListIndex:
    """In-memory candidate source backed by a parsed hash list.

    Example:
        index = HashListIndex.from_file(Path("hashes.txt"))
        matches = await index.find_all_matching_content("The Matrix", ContentType.MOVIE)
    """

    def __init__(self, candidates: Iterable[Candidate]) -> None:
        self._entries = [(normalize_for_search(c.title), c) for c in candidates]

    @classmethod
    def from_text(cls, content: str) -> Self:
        """Build an index from hash list text."""
        return cls(parse_hash_list(content))

    @classmethod
    def from_file(cls, path: Path) -> Self:
        """Build an index from a hash list file."""
        index = cls.from_text(path.read_text(encoding="utf-8"))
        logger.info("Loaded %d magnet links from %s", len(index), path)
        return index

    def __len__(self) -> int:
        return len(self._entries)

    def search(
        self, title: str, content_type: ContentType, year: int | None = None
    ) -> list[Candidate]:
        """Find candidates for a title.

        Movie titles must match exactly, optionally followed by a release
        year, so "The Matrix" finds "The Matrix 1999" but not "The Matrix
        Reloaded 2003". When ``year`` is given only that year is accepted.
        Show titles match when they equal or start with the query words,
        since season and episode markers follow the name.

        Args:
            title: Title to look for, matched on whole words
            content_type: Only candidates of this type are returned
            year: Release year of the movie, if known

        Returns:
            Matching candidates in hash list order
        """
        query = normalize_for_search(title)
        if not query:
            return []
        entries = [
            (normalized, candidate)
            for normalized, candidate in self._entries
            if candidate.metadata.content_type is content_type
        ]
        if content_type is ContentType.MOVIE:
            suffix = str(year) if year is not None else r"(?:19|20)\d{2}"
            pattern = re.compile(rf"{re.escape(query)}(?: {suffix})?")
            return [candidate for normalized, candidate in entries if pattern.fullmatch(normalized)]
        prefix = f"{query} "
        return [
            candidate
            for normalized, candidate in entries
            if normalized == query or normalized.startswith(prefix)
        ]

    async def find_all_matching_content(
        self, title: str, content_type: ContentType, year: int | None = None
    ) -> list[Candidate]:
        """Candidate source entry point; see ``search``."""
        return self.search(title, content_type, year)
