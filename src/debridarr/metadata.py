"""Metadata extraction from free-text release names.

Every field has its own small matcher built from an ordered pattern table.
The matchers are total: text that carries no recognisable information maps
to the field's default (Unknown, SDR, Movie, None) instead of raising.

Example::

    >>> meta = extract("Movie.Title.2023.1080p.BluRay.x264-GROUP")
    >>> meta.title, meta.quality.value, meta.codec.value
    ('Movie Title 2023', '1080p', 'H.264')
"""

from __future__ import annotations

import re
from urllib.parse import parse_qs, urlsplit

from debridarr.models.common import (
    CodecKind,
    ContentType,
    HDRTier,
    QualityTier,
    ReleaseMetadata,
    ReleaseSize,
)

MAGNET_PREFIX = "magnet:?xt=urn:btih:"

# Applied in order; each match is replaced with a space so neighbours stay apart.
# Sizes are stripped on both sides of separator removal ("4.7GB" and "4_7GB").
_SIZE_TOKEN_PATTERN = re.compile(r"\b\d+(?:\.\d+)?\s*(?:GB|MB)\b", re.IGNORECASE)
_BRACKET_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\[.*?\]"),
    re.compile(r"\(.*?\)"),
    _SIZE_TOKEN_PATTERN,
)
_SEPARATOR_PATTERN = re.compile(r"[._]+")
_TAG_PATTERNS: tuple[re.Pattern[str], ...] = (
    _SIZE_TOKEN_PATTERN,
    re.compile(r"\b(?:\d{3,4}p|4K|UHD)\b", re.IGNORECASE),
    re.compile(r"\b(?:BluRay|WEB-DL|WEBRip|HDRip|BRRip)\b", re.IGNORECASE),
    re.compile(r"\b(?:x264|x265|HEVC)\b", re.IGNORECASE),
)
_WHITESPACE_PATTERN = re.compile(r"\s+")
_RELEASE_GROUP_PATTERN = re.compile(r"(?:\s+-\S*)+$")

_QUALITY_PATTERN = re.compile(r"\d{3,4}p|4K|UHD", re.IGNORECASE)
_SIZE_PATTERN = re.compile(r"(\d+(?:\.\d+)?)\s*(GB|MB)", re.IGNORECASE)
_TV_PATTERN = re.compile(r"S\d{2}E\d{2}|\bS\d{2}\b|Season|Episode", re.IGNORECASE)

HDR_PATTERNS: tuple[tuple[HDRTier, re.Pattern[str]], ...] = (
    (HDRTier.DOLBY_VISION, re.compile(r"dolby.?vision|\bdovi\b|\bdv\b", re.IGNORECASE)),
    (HDRTier.HDR10_PLUS, re.compile(r"hdr10(?:\+|plus)", re.IGNORECASE)),
    (HDRTier.HDR10, re.compile(r"hdr10", re.IGNORECASE)),
    (HDRTier.HDR, re.compile(r"\bhdr\b", re.IGNORECASE)),
)

CODEC_PATTERNS: tuple[tuple[CodecKind, re.Pattern[str]], ...] = (
    (CodecKind.HEVC, re.compile(r"x265|hevc|h\.?265", re.IGNORECASE)),
    (CodecKind.H264, re.compile(r"x264|h\.?264", re.IGNORECASE)),
    (CodecKind.AV1, re.compile(r"av1", re.IGNORECASE)),
)


def clean_title(label: str) -> str:
    """Reduce a release label to an approximate title.

    Strips bracketed groups, sizes, resolution, source and codec tags and a
    trailing release group, and turns dot/underscore separators into spaces.
    Applying it twice gives the same result as applying it once.

    Args:
        label: Release name or filename

    Returns:
        The cleaned title (may be empty)
    """
    text = label
    for pattern in _BRACKET_PATTERNS:
        text = pattern.sub(" ", text)
    text = _SEPARATOR_PATTERN.sub(" ", text)
    for pattern in _TAG_PATTERNS:
        text = pattern.sub(" ", text)
    text = _WHITESPACE_PATTERN.sub(" ", text).strip()
    return _RELEASE_GROUP_PATTERN.sub("", text).strip()


def extract_quality(label: str) -> QualityTier:
    """Get the quality tier from the first resolution token in the label."""
    match = _QUALITY_PATTERN.search(label)
    if match is None:
        return QualityTier.UNKNOWN
    return QualityTier.from_label(match.group(0))


def extract_size(label: str) -> ReleaseSize | None:
    """Get the first ``<number> GB|MB`` size in the label, if any."""
    match = _SIZE_PATTERN.search(label)
    if match is None:
        return None
    return ReleaseSize(value=float(match.group(1)), unit=match.group(2).upper())


def detect_content_type(label: str) -> ContentType:
    """Classify a label as TV when it carries season or episode markers."""
    if _TV_PATTERN.search(label):
        return ContentType.TV
    return ContentType.MOVIE


def extract_hdr(label: str) -> HDRTier:
    """Get the HDR tier; the first matching entry of HDR_PATTERNS wins."""
    for tier, pattern in HDR_PATTERNS:
        if pattern.search(label):
            return tier
    return HDRTier.SDR


def extract_codec(label: str) -> CodecKind:
    """Get the codec; the first matching entry of CODEC_PATTERNS wins."""
    for codec, pattern in CODEC_PATTERNS:
        if pattern.search(label):
            return codec
    return CodecKind.UNKNOWN


def extract(label: str) -> ReleaseMetadata:
    """Extract structured metadata from a release name or filename.

    Args:
        label: Free-text release label

    Returns:
        ReleaseMetadata for the label; never raises
    """
    return ReleaseMetadata(
        title=clean_title(label),
        quality=extract_quality(label),
        size=extract_size(label),
        content_type=detect_content_type(label),
        hdr=extract_hdr(label),
        codec=extract_codec(label),
        label=label,
    )


def is_magnet_link(text: str) -> bool:
    """Check if text is a BitTorrent v1 magnet link."""
    return text.startswith(MAGNET_PREFIX)


def magnet_display_name(magnet: str) -> str:
    """Get the ``dn`` display name of a magnet link, or an empty string."""
    query = urlsplit(magnet).query
    names = parse_qs(query).get("dn")
    return names[0] if names else ""


def extract_info_hash(magnet: str) -> str | None:
    """Get the lowercased BitTorrent info hash of a magnet link.

    Returns None when the link has no ``urn:btih:`` exact topic.
    """
    for topic in parse_qs(urlsplit(magnet).query).get("xt", []):
        if topic.lower().startswith("urn:btih:"):
            return topic[len("urn:btih:") :].lower() or None
    return None


def extract_from_magnet(magnet: str) -> ReleaseMetadata:
    """Extract metadata from the display name of a magnet link."""
    return extract(magnet_display_name(magnet))
