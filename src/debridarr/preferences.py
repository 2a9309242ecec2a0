"""User preferences for release selection and upgrades."""

from __future__ import annotations

import re
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from debridarr.models.common import QualityTier, ReleaseSize

_MAX_SIZE_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(GB|MB)?\s*$", re.IGNORECASE)


class HdrPreference(Enum):
    """How HDR releases are treated.

    Attributes:
        ANY: No HDR filtering
        SDR_ONLY: Reject HDR releases
        HDR_ONLY: Reject SDR releases
        HDR_PREFERRED: Accept both, rank HDR ahead of SDR
    """

    ANY = "any"
    SDR_ONLY = "sdr-only"
    HDR_ONLY = "hdr-only"
    HDR_PREFERRED = "hdr-preferred"


class FileType(Enum):
    """Release types understood by the release-type whitelist."""

    REMUX = "remux"
    BLURAY = "bluray"
    WEB = "web"


class Preferences(BaseModel):
    """Preference set for one content kind (movies or shows).

    Accepts snake_case field names or their camelCase aliases, so both
    ``allow_higher_quality`` and ``allowHigherQuality`` work.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    quality: QualityTier = QualityTier.UNKNOWN
    allow_higher_quality: bool = False
    allow_lower_quality: bool = False
    hdr_preference: HdrPreference = HdrPreference.ANY
    file_types: frozenset[str] = frozenset()
    max_size: ReleaseSize | None = None
    auto_upgrade: bool = False
    delete_old_after_upgrade: bool = False
    max_upgrade_matches: int = Field(default=3, ge=1)
    complete_seasons: bool = False

    @field_validator("quality", mode="before")
    @classmethod
    def _parse_quality(cls, value: Any) -> Any:
        if value is None:
            return QualityTier.UNKNOWN
        if isinstance(value, str):
            return QualityTier.from_label(value)
        return value

    @field_validator("file_types", mode="before")
    @classmethod
    def _normalize_file_types(cls, value: Any) -> Any:
        if value is None:
            return frozenset()
        if isinstance(value, str):
            value = [value]
        return frozenset(str(item).strip().lower() for item in value)

    @field_validator("max_size", mode="before")
    @classmethod
    def _parse_max_size(cls, value: Any) -> Any:
        if value is None or value == "":
            return None
        if isinstance(value, int | float):
            return ReleaseSize(value=float(value), unit="GB")
        if isinstance(value, str):
            match = _MAX_SIZE_PATTERN.match(value)
            if match is None:
                raise ValueError(f"invalid size: {value!r}")
            return ReleaseSize(value=float(match.group(1)), unit=(match.group(2) or "GB").upper())
        return value
