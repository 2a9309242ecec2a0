"""Preference matching for release metadata."""

from __future__ import annotations

import re
from enum import Enum
from typing import TYPE_CHECKING, Protocol

from debridarr.models.common import QualityTier
from debridarr.preferences import FileType, HdrPreference

if TYPE_CHECKING:
    from debridarr.models.common import ReleaseMetadata
    from debridarr.preferences import Preferences


class RejectionReason(Enum):
    """Why a release failed the preference check.

    Attributes:
        HDR_POLICY: HDR content under sdr-only, or SDR content under hdr-only
        QUALITY_TOO_HIGH: Above the preferred quality without allow_higher_quality
        QUALITY_TOO_LOW: Below the preferred quality without allow_lower_quality
        RELEASE_TYPE: None of the requested release types matched
        SIZE_CAP: Larger than max_size
    """

    HDR_POLICY = "hdr_policy"
    QUALITY_TOO_HIGH = "quality_too_high"
    QUALITY_TOO_LOW = "quality_too_low"
    RELEASE_TYPE = "release_type"
    SIZE_CAP = "size_cap"


FILE_TYPE_PATTERNS: dict[str, re.Pattern[str]] = {
    FileType.REMUX.value: re.compile(r"remux", re.IGNORECASE),
    FileType.BLURAY.value: re.compile(r"bluray|bdrip", re.IGNORECASE),
    FileType.WEB.value: re.compile(r"web-dl|webrip", re.IGNORECASE),
}


class MatchClause(Protocol):
    """Protocol for a single preference clause."""

    def __call__(
        self, metadata: ReleaseMetadata, preferences: Preferences
    ) -> RejectionReason | None:
        """Return the rejection reason, or None if the clause passes."""
        ...


def check_hdr_policy(
    metadata: ReleaseMetadata, preferences: Preferences
) -> RejectionReason | None:
    """Reject by HDR policy; hdr-preferred and any never reject here."""
    is_hdr = metadata.hdr.is_hdr
    if preferences.hdr_preference is HdrPreference.SDR_ONLY and is_hdr:
        return RejectionReason.HDR_POLICY
    if preferences.hdr_preference is HdrPreference.HDR_ONLY and not is_hdr:
        return RejectionReason.HDR_POLICY
    return None


def check_quality_bounds(
    metadata: ReleaseMetadata, preferences: Preferences
) -> RejectionReason | None:
    """Reject qualities outside the preferred tier unless explicitly allowed.

    Unknown release quality, or an unset preferred quality, disables the
    clause.
    """
    if metadata.quality is QualityTier.UNKNOWN or preferences.quality is QualityTier.UNKNOWN:
        return None

    release_rank = metadata.quality.rank
    preferred_rank = preferences.quality.rank
    if release_rank == preferred_rank:
        return None
    if release_rank > preferred_rank and not preferences.allow_higher_quality:
        return RejectionReason.QUALITY_TOO_HIGH
    if release_rank < preferred_rank and not preferences.allow_lower_quality:
        return RejectionReason.QUALITY_TOO_LOW
    return None


def check_release_type(
    metadata: ReleaseMetadata, preferences: Preferences
) -> RejectionReason | None:
    """Require at least one requested release type to appear in the label."""
    if not preferences.file_types:
        return None

    text = metadata.label or metadata.title
    for file_type in preferences.file_types:
        pattern = FILE_TYPE_PATTERNS.get(file_type)
        if pattern is not None and pattern.search(text):
            return None
    return RejectionReason.RELEASE_TYPE


def check_size_cap(
    metadata: ReleaseMetadata, preferences: Preferences
) -> RejectionReason | None:
    """Reject releases larger than max_size; unknown sizes always pass."""
    if preferences.max_size is None or metadata.size is None:
        return None
    if metadata.size.gigabytes > preferences.max_size.gigabytes:
        return RejectionReason.SIZE_CAP
    return None


# Evaluation order is part of the contract: the first failing clause is reported.
MATCH_CLAUSES: tuple[MatchClause, ...] = (
    check_hdr_policy,
    check_quality_bounds,
    check_release_type,
    check_size_cap,
)


def rejection_reason(
    metadata: ReleaseMetadata, preferences: Preferences
) -> RejectionReason | None:
    """Get the first clause that rejects a release.

    Args:
        metadata: Metadata of the release to check
        preferences: Active preferences

    Returns:
        The reason of the first failing clause, or None if all pass
    """
    for clause in MATCH_CLAUSES:
        reason = clause(metadata, preferences)
        if reason is not None:
            return reason
    return None


def matches_preferences(metadata: ReleaseMetadata, preferences: Preferences) -> bool:
    """Check if a release satisfies every preference clause."""
    return rejection_reason(metadata, preferences) is None
