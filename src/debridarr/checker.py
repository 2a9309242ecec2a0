"""Watch-list sync: submit best matches for watch-listed titles and run upgrades."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from debridarr.models.common import ContentType
from debridarr.selector import find_best_matches, find_best_show_matches
from debridarr.upgrades import UpgradeScanner

if TYPE_CHECKING:
    from debridarr.interfaces import (
        CandidateSource,
        HeldContentSource,
        SubmissionSink,
        WatchlistSource,
    )
    from debridarr.models.common import Candidate
    from debridarr.preferences import Preferences

logger = logging.getLogger(__name__)


@dataclass
class SyncSettings:
    """Switches for a sync run.

    Attributes:
        check_for_upgrades: Run upgrade scans before adding new content
        auto_add_movies: Process the movie watch-list
        auto_add_shows: Process the show watch-list
    """

    check_for_upgrades: bool = False
    auto_add_movies: bool = True
    auto_add_shows: bool = True


@dataclass
class SyncReport:
    """Result of a sync run."""

    movies_processed: int = 0
    shows_processed: int = 0
    movies_added: int = 0
    shows_added: int = 0
    movie_upgrades_found: int = 0
    show_upgrades_found: int = 0
    upgrades_added: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def total_added(self) -> int:
        """Movies, shows and upgrades added in this run."""
        return self.movies_added + self.shows_added + self.upgrades_added


class WatchlistSync:
    """Reconcile a watch-list against a candidate source and submit matches."""

    def __init__(
        self,
        watchlist: WatchlistSource,
        source: CandidateSource,
        held: HeldContentSource,
        sink: SubmissionSink,
    ) -> None:
        """Initialize the sync.

        Args:
            watchlist: The user's watch-list
            source: Where candidates are searched
            held: Snapshot of items already held, used by upgrade scans
            sink: Where selected candidates are submitted
        """
        self._watchlist = watchlist
        self._source = source
        self._sink = sink
        self._scanner = UpgradeScanner(source, held, sink)

    async def find_best_quality_match(
        self,
        title: str,
        content_type: ContentType,
        preferences: Preferences,
        year: int | None = None,
    ) -> list[Candidate]:
        """Find the best candidate per title group for a title.

        Args:
            title: Title to search for
            content_type: Movie or TV
            preferences: Active preferences
            year: Release year, narrows movie searches when known

        Returns:
            Selected candidates, possibly empty
        """
        found = await self._source.find_all_matching_content(title, content_type, year)
        if not found:
            return []
        return find_best_matches(found, preferences)

    async def find_best_quality_match_for_show(
        self, title: str, preferences: Preferences
    ) -> list[Candidate]:
        """Find the best candidate per season/episode group of a show."""
        found = await self._source.find_all_matching_content(title, ContentType.TV)
        if not found:
            return []
        return find_best_show_matches(found, preferences)

    async def run(
        self,
        movie_preferences: Preferences,
        show_preferences: Preferences,
        settings: SyncSettings,
    ) -> SyncReport:
        """Run upgrade scans and watch-list processing.

        Entries are processed one at a time in watch-list order. Failures
        are recorded in the report and never stop the run.

        Args:
            movie_preferences: Preferences for movies
            show_preferences: Preferences for shows
            settings: Which parts of the run are enabled

        Returns:
            SyncReport with counts and error strings
        """
        report = SyncReport()

        if settings.check_for_upgrades:
            if movie_preferences.auto_upgrade:
                movie_scan = await self._scanner.scan(movie_preferences, ContentType.MOVIE)
                report.movie_upgrades_found = movie_scan.upgrades_found
                report.upgrades_added += movie_scan.upgrades_added
                report.errors.extend(movie_scan.errors)
            if show_preferences.auto_upgrade:
                show_scan = await self._scanner.scan(show_preferences, ContentType.TV)
                report.show_upgrades_found = show_scan.upgrades_found
                report.upgrades_added += show_scan.upgrades_added
                report.errors.extend(show_scan.errors)

        if settings.auto_add_movies:
            report.movies_processed, report.movies_added = await self._process_watchlist(
                ContentType.MOVIE, movie_preferences, report.errors
            )

        if settings.auto_add_shows:
            report.shows_processed, report.shows_added = await self._process_watchlist(
                ContentType.TV, show_preferences, report.errors
            )

        logger.info(
            "Sync complete: %d movies added, %d shows added, %d upgrades added, %d errors",
            report.movies_added,
            report.shows_added,
            report.upgrades_added,
            len(report.errors),
        )
        return report

    async def _process_watchlist(
        self,
        content_type: ContentType,
        preferences: Preferences,
        errors: list[str],
    ) -> tuple[int, int]:
        """Submit best matches for every entry of one watch-list.

        Returns:
            Tuple of (entries processed, candidates added)
        """
        try:
            entries = await self._watchlist.get_watchlist_entries(content_type)
        except Exception as e:
            logger.warning("Failed to get %s watch-list: %s", content_type.value, e)
            errors.append(f"Failed to get {content_type.value} watchlist: {e}")
            return 0, 0

        added = 0
        for entry in entries:
            try:
                if content_type is ContentType.TV:
                    matches = await self.find_best_quality_match_for_show(entry.title, preferences)
                else:
                    matches = await self.find_best_quality_match(
                        entry.title, content_type, preferences, entry.year
                    )
                for match in matches:
                    result = await self._sink.submit(match)
                    if result.success:
                        added += 1
                        logger.info("Added %s", match.label or match.title)
                    else:
                        logger.warning("Failed to add %s: %s", entry.title, result.error)
                        errors.append(f"Failed to add {entry.title}: {result.error}")
            except Exception as e:
                logger.warning("Failed to process %s: %s", entry.title, e)
                errors.append(f"Failed to process {entry.title}: {e}")

        return len(entries), added
