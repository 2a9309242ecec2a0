"""Scanning held content for higher-quality replacements."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from debridarr.criteria import matches_preferences
from debridarr.metadata import extract
from debridarr.models.common import TorrentStatus
from debridarr.ranking import is_upgrade, sort_best_first

if TYPE_CHECKING:
    from collections.abc import Iterable

    from debridarr.interfaces import CandidateSource, HeldContentSource, SubmissionSink
    from debridarr.models.common import (
        Candidate,
        ContentType,
        HeldItem,
        QualityTier,
        ReleaseMetadata,
    )
    from debridarr.preferences import Preferences

logger = logging.getLogger(__name__)


@dataclass
class UpgradeMatch:
    """Upgrade candidates found for one held item."""

    held: HeldItem
    current: ReleaseMetadata
    candidates: list[Candidate] = field(default_factory=list)


@dataclass
class UpgradeReport:
    """Result of an upgrade scan."""

    checked_torrents: int = 0
    upgrades_found: int = 0
    upgrades_added: int = 0
    errors: list[str] = field(default_factory=list)
    matches: list[UpgradeMatch] = field(default_factory=list)

    def merge(self, other: UpgradeReport) -> None:
        """Fold the counts, errors and matches of another scan into this one."""
        self.checked_torrents += other.checked_torrents
        self.upgrades_found += other.upgrades_found
        self.upgrades_added += other.upgrades_added
        self.errors.extend(other.errors)
        self.matches.extend(other.matches)


def find_better_quality_matches(
    candidates: Iterable[Candidate],
    current_quality: QualityTier,
    preferences: Preferences,
) -> list[Candidate]:
    """Filter candidates down to eligible upgrades of a held release.

    Args:
        candidates: Candidates for the held release's title
        current_quality: Quality of the held release
        preferences: Active preferences

    Returns:
        Eligible upgrades, best first, at most ``max_upgrade_matches``
    """
    better = [
        c
        for c in candidates
        if is_upgrade(c.quality, current_quality, preferences.quality)
        and matches_preferences(c.metadata, preferences)
    ]
    return sort_best_first(better)[: preferences.max_upgrade_matches]


class UpgradeScanner:
    """Find and optionally submit quality upgrades for held content.

    Example:
        scanner = UpgradeScanner(index, rd_client, rd_client)
        report = await scanner.scan(preferences)
        print(report.upgrades_found)
    """

    def __init__(
        self,
        source: CandidateSource,
        held: HeldContentSource,
        sink: SubmissionSink,
    ) -> None:
        """Initialize the scanner.

        Args:
            source: Where upgrade candidates are searched
            held: Snapshot of currently held items
            sink: Where upgrades are submitted and old items removed
        """
        self._source = source
        self._held = held
        self._sink = sink

    async def scan(
        self,
        preferences: Preferences,
        content_type: ContentType | None = None,
    ) -> UpgradeReport:
        """Scan held items for upgrades.

        Only items with status ``downloaded`` are examined. Failures on one
        item are recorded in the report and the scan moves on.

        Args:
            preferences: Active preferences
            content_type: Only consider held items of this type (optional)

        Returns:
            UpgradeReport with counts, matches and error strings
        """
        report = UpgradeReport()

        try:
            items = await self._held.list_held_items()
        except Exception as e:
            logger.warning("Failed to list held items: %s", e)
            report.errors.append(f"Failed to get current torrents: {e}")
            return report

        if content_type is not None:
            items = [i for i in items if extract(i.filename).content_type is content_type]
        report.checked_torrents = len(items)

        for item in items:
            if item.status is not TorrentStatus.DOWNLOADED:
                continue
            try:
                await self._scan_item(item, preferences, report)
            except Exception as e:
                logger.warning("Upgrade check failed for %s: %s", item.filename, e)
                report.errors.append(f"Quality upgrade check error for {item.filename}: {e}")

        logger.info(
            "Upgrade scan: %d checked, %d found, %d added",
            report.checked_torrents,
            report.upgrades_found,
            report.upgrades_added,
        )
        return report

    async def _scan_item(
        self, item: HeldItem, preferences: Preferences, report: UpgradeReport
    ) -> None:
        current = extract(item.filename)
        found = await self._source.find_all_matching_content(current.title, current.content_type)
        better = find_better_quality_matches(found, current.quality, preferences)
        if not better:
            return

        logger.debug("Found %d upgrades for %s", len(better), item.filename)
        report.upgrades_found += len(better)
        report.matches.append(UpgradeMatch(held=item, current=current, candidates=better))

        if not preferences.auto_upgrade:
            return

        removed = False
        for candidate in better:
            result = await self._sink.submit(candidate)
            if not result.success:
                logger.warning("Failed to upgrade %s: %s", current.title, result.error)
                report.errors.append(f"Failed to upgrade {current.title}: {result.error}")
                continue
            report.upgrades_added += 1
            if preferences.delete_old_after_upgrade and not removed:
                removed = True
                await self._remove_quietly(item)

    async def _remove_quietly(self, item: HeldItem) -> None:
        """Remove a superseded item; failures are logged, not reported."""
        try:
            await self._sink.remove(item.id)
        except Exception as e:
            logger.debug("Failed to remove superseded item %s: %s", item.id, e)
