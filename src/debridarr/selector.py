"""Grouping of candidate releases and best-match selection per group."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from debridarr.criteria import matches_preferences
from debridarr.metadata import clean_title
from debridarr.preferences import HdrPreference

if TYPE_CHECKING:
    from collections.abc import Iterable

    from debridarr.models.common import Candidate
    from debridarr.preferences import Preferences

logger = logging.getLogger(__name__)

PACK_SUFFIX = "_Pack"
INDIVIDUAL_SUFFIX = "_Individual"
COMPLETE_SUFFIX = "_Complete"

_SEASON_PATTERN = re.compile(r"\bS(\d{2})", re.IGNORECASE)
_EPISODE_PATTERN = re.compile(r"\bS\d{2}E(\d{2})", re.IGNORECASE)
_INDIVIDUAL_EPISODE_PATTERN = re.compile(r"\bS\d{2}E\d{2}|\bEpisode\W*\d+", re.IGNORECASE)
_SEASON_PACK_PATTERN = re.compile(r"\bcomplete\b|\bseason\b|\bS\d{2}\b", re.IGNORECASE)


def show_group_key(label: str) -> str:
    """Build the show-aware group key for an uncleaned label.

    Args:
        label: Release name, e.g. "Show.Name.S02.Complete.2160p"

    Returns:
        Cleaned title suffixed with ``_S<NN>_Individual`` for single
        episodes, ``_S<NN>_Pack`` for season packs, or ``_Complete`` when
        no season marker is present
    """
    base = clean_title(label)
    season = _SEASON_PATTERN.search(label)
    if season is None:
        return f"{base}{COMPLETE_SUFFIX}"
    if _EPISODE_PATTERN.search(label):
        return f"{base}_S{season.group(1)}{INDIVIDUAL_SUFFIX}"
    return f"{base}_S{season.group(1)}{PACK_SUFFIX}"


def is_individual_episode(label: str) -> bool:
    """Check if a label names a single episode."""
    return _INDIVIDUAL_EPISODE_PATTERN.search(label) is not None


def is_season_pack(label: str) -> bool:
    """Check if a label indicates a complete season or pack."""
    return _SEASON_PACK_PATTERN.search(label) is not None


def group_by_title(candidates: Iterable[Candidate]) -> dict[str, list[Candidate]]:
    """Group candidates by cleaned title, keeping first-seen order."""
    groups: dict[str, list[Candidate]] = {}
    for candidate in candidates:
        groups.setdefault(clean_title(candidate.title), []).append(candidate)
    return groups


def group_by_season_structure(candidates: Iterable[Candidate]) -> dict[str, list[Candidate]]:
    """Group candidates by cleaned title and season/episode structure."""
    groups: dict[str, list[Candidate]] = {}
    for candidate in candidates:
        label = candidate.label or candidate.title
        groups.setdefault(show_group_key(label), []).append(candidate)
    return groups


def _order_for_selection(members: list[Candidate], preferences: Preferences) -> list[Candidate]:
    """Sort best first; under hdr-preferred, HDR wins ties within a rank."""
    if preferences.hdr_preference is HdrPreference.HDR_PREFERRED:
        return sorted(
            members,
            key=lambda c: (c.rank, c.metadata.hdr.is_hdr),
            reverse=True,
        )
    return sorted(members, key=lambda c: c.rank, reverse=True)


def select_best(members: list[Candidate], preferences: Preferences) -> Candidate | None:
    """Pick the single best candidate of a group.

    Prefers an exact match of the preferred quality, then the closest
    quality below it. When every member is above the preferred quality, the
    highest one is taken only if ``allow_higher_quality`` is set. The pick
    must also pass the preference check; otherwise the group yields nothing.

    Args:
        members: Candidates of one group
        preferences: Active preferences

    Returns:
        The selected candidate, or None
    """
    if not members:
        return None

    ordered = _order_for_selection(members, preferences)
    preferred_rank = preferences.quality.rank

    chosen = next((c for c in ordered if c.rank == preferred_rank), None)
    if chosen is None:
        chosen = next((c for c in ordered if c.rank <= preferred_rank), None)
    if chosen is None and preferences.allow_higher_quality:
        chosen = ordered[0]

    if chosen is None:
        return None
    if not matches_preferences(chosen.metadata, preferences):
        logger.debug("Discarding %s: does not match preferences", chosen.label or chosen.title)
        return None
    return chosen


def find_best_matches(
    candidates: Iterable[Candidate], preferences: Preferences
) -> list[Candidate]:
    """Select the best candidate per title group.

    Args:
        candidates: Candidates in any order, possibly with duplicates
        preferences: Active preferences

    Returns:
        One candidate per group that produced a selection, in group order
    """
    best: list[Candidate] = []
    for key, members in group_by_title(candidates).items():
        chosen = select_best(members, preferences)
        if chosen is not None:
            logger.debug("Selected %s for group %r", chosen.label or chosen.title, key)
            best.append(chosen)
    return best


def _filter_complete_seasons(key: str, members: list[Candidate]) -> list[Candidate]:
    """Drop single episodes from non-episode groups and prefer season packs."""
    if key.endswith(INDIVIDUAL_SUFFIX):
        return members
    remaining = [m for m in members if not is_individual_episode(m.label or m.title)]
    packs = [m for m in remaining if is_season_pack(m.label or m.title)]
    return packs or remaining


def find_best_show_matches(
    candidates: Iterable[Candidate], preferences: Preferences
) -> list[Candidate]:
    """Select the best candidate per season/episode group of a show.

    Args:
        candidates: Candidates in any order, possibly with duplicates
        preferences: Active preferences; ``complete_seasons`` enables the
            season-pack filtering

    Returns:
        One candidate per group that produced a selection, in group order
    """
    best: list[Candidate] = []
    for key, members in group_by_season_structure(candidates).items():
        if preferences.complete_seasons:
            members = _filter_complete_seasons(key, members)
        chosen = select_best(members, preferences)
        if chosen is not None:
            logger.debug("Selected %s for group %r", chosen.label or chosen.title, key)
            best.append(chosen)
    return best
