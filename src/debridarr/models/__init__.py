"""Pydantic models for release metadata and API responses."""

from debridarr.models.common import (
    Candidate,
    CodecKind,
    ContentType,
    HDRTier,
    HeldItem,
    QualityTier,
    ReleaseMetadata,
    ReleaseSize,
    SubmissionResult,
    TorrentStatus,
)
from debridarr.models.realdebrid import (
    AddMagnetResponse,
    Download,
    Torrent,
    TorrentFile,
    TorrentInfo,
    User,
)
from debridarr.models.trakt import SearchHit, TraktIds, TraktMedia, WatchlistItem

__all__ = [
    "AddMagnetResponse",
    "Candidate",
    "CodecKind",
    "ContentType",
    "Download",
    "HDRTier",
    "HeldItem",
    "QualityTier",
    "ReleaseMetadata",
    "ReleaseSize",
    "SearchHit",
    "SubmissionResult",
    "Torrent",
    "TorrentFile",
    "TorrentInfo",
    "TorrentStatus",
    "TraktIds",
    "TraktMedia",
    "User",
    "WatchlistItem",
]
