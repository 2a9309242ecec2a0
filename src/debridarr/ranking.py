"""Quality ranking and upgrade eligibility."""

from __future__ import annotations

from typing import TYPE_CHECKING

from debridarr.models.common import QualityTier

if TYPE_CHECKING:
    from collections.abc import Iterable

    from debridarr.models.common import Candidate


def rank(tier: QualityTier | str | None) -> int:
    """Get the integer rank of a quality tier.

    Args:
        tier: A QualityTier, or free text such as "1080p" or "4K"

    Returns:
        Rank from -1 (Unknown) to 5 (4K/UHD)
    """
    if not isinstance(tier, QualityTier):
        tier = QualityTier.from_label(tier)
    return tier.rank


def compare(a: QualityTier | str | None, b: QualityTier | str | None) -> int:
    """Compare two tiers: negative if a < b, zero if equal, positive if a > b."""
    return rank(a) - rank(b)


def is_upgrade(
    new: QualityTier | str | None,
    current: QualityTier | str | None,
    preferred: QualityTier | str | None,
) -> bool:
    """Check if moving from ``current`` to ``new`` is an upgrade.

    The new tier has to be strictly better than the current one. It may
    overshoot the preferred tier only while the current tier is still below
    the preferred one.

    Args:
        new: Tier of the candidate release
        current: Tier of the held release
        preferred: Tier the user prefers

    Returns:
        True if the candidate is an eligible upgrade
    """
    new_rank = rank(new)
    current_rank = rank(current)
    preferred_rank = rank(preferred)

    if new_rank <= current_rank:
        return False
    return current_rank < preferred_rank or new_rank <= preferred_rank


def sort_best_first(candidates: Iterable[Candidate]) -> list[Candidate]:
    """Sort candidates by quality rank, best first; ties keep input order."""
    return sorted(candidates, key=lambda c: c.rank, reverse=True)
