"""Common models shared by the matching engine and the service clients."""

from __future__ import annotations

import re
from enum import Enum

from pydantic import BaseModel, ConfigDict

_BTIH_PATTERN = re.compile(r"xt=urn:btih:([a-zA-Z0-9]+)")


class QualityTier(Enum):
    """Resolution class of a release, ordered by ``rank``."""

    UNKNOWN = "Unknown"
    OTHER = "Other"
    SD_480P = "480p"
    HD_720P = "720p"
    FHD_1080P = "1080p"
    UHD_2160P = "2160p"
    UHD_4K = "4K"

    @property
    def rank(self) -> int:
        """Integer rank of this tier; Unknown sorts below everything."""
        return _QUALITY_RANKS[self]

    @classmethod
    def from_label(cls, label: str | None) -> QualityTier:
        """Normalize a free-text quality label to a tier.

        Args:
            label: Text such as "1080p", "2160P", "4k" or "UHD"

        Returns:
            The matching tier, UNKNOWN for empty/"unknown" input and OTHER
            for anything else that is not recognised
        """
        if not label or label.strip().lower() == "unknown":
            return cls.UNKNOWN

        normalized = label.lower()
        if "4k" in normalized or "uhd" in normalized:
            return cls.UHD_4K
        if "2160p" in normalized:
            return cls.UHD_2160P
        if "1080p" in normalized:
            return cls.FHD_1080P
        if "720p" in normalized:
            return cls.HD_720P
        if "480p" in normalized:
            return cls.SD_480P
        return cls.OTHER


_QUALITY_RANKS: dict[QualityTier, int] = {
    QualityTier.UNKNOWN: -1,
    QualityTier.OTHER: 0,
    QualityTier.SD_480P: 1,
    QualityTier.HD_720P: 2,
    QualityTier.FHD_1080P: 3,
    QualityTier.UHD_2160P: 4,
    QualityTier.UHD_4K: 5,
}


class HDRTier(Enum):
    """Dynamic-range classification of a release."""

    SDR = "SDR"
    HDR = "HDR"
    HDR10 = "HDR10"
    HDR10_PLUS = "HDR10+"
    DOLBY_VISION = "Dolby Vision"

    @property
    def is_hdr(self) -> bool:
        """Check if this tier is any kind of HDR."""
        return self is not HDRTier.SDR


class CodecKind(Enum):
    """Video codec family of a release."""

    HEVC = "HEVC"
    H264 = "H.264"
    AV1 = "AV1"
    UNKNOWN = "Unknown"


class ContentType(Enum):
    """Whether a release is a movie or TV content."""

    MOVIE = "movie"
    TV = "tv"


class ReleaseSize(BaseModel):
    """A size parsed from a release label, e.g. ``4.7 GB``."""

    model_config = ConfigDict(frozen=True)

    value: float
    unit: str = "GB"

    @property
    def gigabytes(self) -> float:
        """Size in GB, with 1 GB = 1024 MB."""
        if self.unit.upper() == "MB":
            return self.value / 1024
        return self.value

    @property
    def bytes(self) -> int:
        """Size in bytes."""
        return int(self.gigabytes * 1024**3)

    def __str__(self) -> str:
        return f"{self.value:g} {self.unit.upper()}"


class ReleaseMetadata(BaseModel):
    """Structured metadata derived from a release label."""

    model_config = ConfigDict(frozen=True)

    title: str
    quality: QualityTier = QualityTier.UNKNOWN
    size: ReleaseSize | None = None
    content_type: ContentType = ContentType.MOVIE
    hdr: HDRTier = HDRTier.SDR
    codec: CodecKind = CodecKind.UNKNOWN
    label: str = ""


class Candidate(BaseModel):
    """A discovered release competing for selection within a group."""

    model_config = ConfigDict(frozen=True)

    source_id: str
    metadata: ReleaseMetadata

    @property
    def title(self) -> str:
        """Cleaned title of the release."""
        return self.metadata.title

    @property
    def label(self) -> str:
        """Uncleaned label the metadata was extracted from."""
        return self.metadata.label

    @property
    def quality(self) -> QualityTier:
        """Quality tier of the release."""
        return self.metadata.quality

    @property
    def rank(self) -> int:
        """Quality rank of the release."""
        return self.metadata.quality.rank

    @property
    def info_hash(self) -> str | None:
        """BitTorrent info hash when the source is a magnet link."""
        match = _BTIH_PATTERN.search(self.source_id)
        return match.group(1).lower() if match else None


class TorrentStatus(Enum):
    """Status of an item held by the debrid service."""

    MAGNET_ERROR = "magnet_error"
    MAGNET_CONVERSION = "magnet_conversion"
    WAITING_FILES_SELECTION = "waiting_files_selection"
    QUEUED = "queued"
    DOWNLOADING = "downloading"
    DOWNLOADED = "downloaded"
    ERROR = "error"
    VIRUS = "virus"
    COMPRESSING = "compressing"
    UPLOADING = "uploading"
    DEAD = "dead"
    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value: object) -> TorrentStatus:
        return cls.UNKNOWN


class HeldItem(BaseModel):
    """An item currently held by the debrid service."""

    id: str
    filename: str
    status: TorrentStatus = TorrentStatus.UNKNOWN


class SubmissionResult(BaseModel):
    """Outcome of submitting a candidate to the debrid service."""

    success: bool
    torrent_id: str | None = None
    error: str | None = None
