"""Tests for the Preferences model."""

import pytest
from pydantic import ValidationError

from debridarr.models.common import QualityTier, ReleaseSize
from debridarr.preferences import HdrPreference, Preferences


class TestPreferences:
    """Tests for preference validation."""

    def test_defaults(self) -> None:
        """Should use the documented defaults."""
        prefs = Preferences()

        assert prefs.quality is QualityTier.UNKNOWN
        assert prefs.allow_higher_quality is False
        assert prefs.allow_lower_quality is False
        assert prefs.hdr_preference is HdrPreference.ANY
        assert prefs.file_types == frozenset()
        assert prefs.max_size is None
        assert prefs.auto_upgrade is False
        assert prefs.delete_old_after_upgrade is False
        assert prefs.max_upgrade_matches == 3
        assert prefs.complete_seasons is False

    def test_camel_case_aliases(self) -> None:
        """Should accept camelCase keys."""
        prefs = Preferences.model_validate(
            {
                "quality": "2160p",
                "allowHigherQuality": True,
                "hdrPreference": "hdr-preferred",
                "maxUpgradeMatches": 5,
            }
        )

        assert prefs.quality is QualityTier.UHD_2160P
        assert prefs.allow_higher_quality is True
        assert prefs.hdr_preference is HdrPreference.HDR_PREFERRED
        assert prefs.max_upgrade_matches == 5

    def test_snake_case_names(self) -> None:
        """Should accept snake_case keys."""
        prefs = Preferences.model_validate({"allow_lower_quality": True, "auto_upgrade": True})

        assert prefs.allow_lower_quality is True
        assert prefs.auto_upgrade is True

    def test_file_types_normalized(self) -> None:
        """Should lowercase release types into a set."""
        prefs = Preferences(file_types=["Remux", "WEB"])
        assert prefs.file_types == frozenset({"remux", "web"})

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (50, ReleaseSize(value=50, unit="GB")),
            ("50 GB", ReleaseSize(value=50, unit="GB")),
            ("700mb", ReleaseSize(value=700, unit="MB")),
            ("12.5", ReleaseSize(value=12.5, unit="GB")),
        ],
    )
    def test_max_size_parsing(self, value: object, expected: ReleaseSize) -> None:
        """Should accept numbers in GB and sizes with units."""
        assert Preferences(max_size=value).max_size == expected

    def test_invalid_max_size(self) -> None:
        """Should reject unparseable sizes."""
        with pytest.raises(ValidationError):
            Preferences(max_size="huge")

    def test_invalid_hdr_preference(self) -> None:
        """Should reject unknown HDR policies."""
        with pytest.raises(ValidationError):
            Preferences.model_validate({"hdrPreference": "sometimes"})

    def test_max_upgrade_matches_positive(self) -> None:
        """Should reject a zero match limit."""
        with pytest.raises(ValidationError):
            Preferences(max_upgrade_matches=0)

    def test_null_quality_means_unset(self) -> None:
        """Should treat an explicit null quality as unset."""
        prefs = Preferences.model_validate({"quality": None})

        assert prefs.quality is QualityTier.UNKNOWN

    def test_frozen(self) -> None:
        """Should be immutable."""
        prefs = Preferences()
        with pytest.raises(ValidationError):
            prefs.auto_upgrade = True  # type: ignore[misc]
