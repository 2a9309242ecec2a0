"""Tests for release metadata extraction."""

import pytest

from debridarr.metadata import (
    clean_title,
    detect_content_type,
    extract,
    extract_codec,
    extract_from_magnet,
    extract_hdr,
    extract_info_hash,
    extract_quality,
    extract_size,
    is_magnet_link,
    magnet_display_name,
)
from debridarr.models.common import (
    Candidate,
    CodecKind,
    ContentType,
    HDRTier,
    QualityTier,
    ReleaseSize,
)


class TestExtract:
    """End-to-end extraction from release names."""

    def test_movie_release(self) -> None:
        """Should extract every field of a typical movie release."""
        meta = extract("Movie.Title.2023.1080p.BluRay.x264-GROUP")

        assert meta.title == "Movie Title 2023"
        assert meta.quality is QualityTier.FHD_1080P
        assert meta.content_type is ContentType.MOVIE
        assert meta.hdr is HDRTier.SDR
        assert meta.codec is CodecKind.H264
        assert meta.size is None
        assert meta.label == "Movie.Title.2023.1080p.BluRay.x264-GROUP"

    def test_season_pack_release(self) -> None:
        """Should classify a complete season as TV with HDR10 and HEVC."""
        meta = extract("Show.Name.S02.Complete.2160p.HDR10.HEVC")

        assert meta.content_type is ContentType.TV
        assert meta.quality is QualityTier.UHD_2160P
        assert meta.hdr is HDRTier.HDR10
        assert meta.codec is CodecKind.HEVC

    def test_empty_label_gives_defaults(self) -> None:
        """Should never raise and fall back to defaults for empty input."""
        meta = extract("")

        assert meta.title == ""
        assert meta.quality is QualityTier.UNKNOWN
        assert meta.content_type is ContentType.MOVIE
        assert meta.hdr is HDRTier.SDR
        assert meta.codec is CodecKind.UNKNOWN


class TestCleanTitle:
    """Tests for title cleaning."""

    @pytest.mark.parametrize(
        ("label", "expected"),
        [
            ("Movie.Title.2023.1080p.BluRay.x264-GROUP", "Movie Title 2023"),
            ("Another_Movie_2019_720p_WEB-DL", "Another Movie 2019"),
            ("[Group] Some Movie (2020) 2160p", "Some Movie"),
            ("Big.Film.4K.UHD.x265", "Big Film"),
            ("Film.Name.2021.1080p.4.7GB", "Film Name 2021"),
        ],
    )
    def test_strips_tags(self, label: str, expected: str) -> None:
        """Should remove brackets, sizes, resolution, source and codec tags."""
        assert clean_title(label) == expected

    @pytest.mark.parametrize(
        "label",
        [
            "Movie.Title.2023.1080p.BluRay.x264-GROUP",
            "Show.Name.S02.Complete.2160p.HDR10.HEVC",
            "Film_2_5GB_720p",
            "[Group] Some Movie (2020) 2160p -A -B",
            "",
        ],
    )
    def test_idempotent(self, label: str) -> None:
        """Cleaning a cleaned title should change nothing."""
        once = clean_title(label)
        assert clean_title(once) == once


class TestFieldExtractors:
    """Tests for the individual field matchers."""

    def test_no_resolution_token_is_unknown(self) -> None:
        """Should return Unknown when the label has no resolution token."""
        assert extract_quality("Some.Movie.BluRay.x264") is QualityTier.UNKNOWN

    @pytest.mark.parametrize(
        ("label", "expected"),
        [
            ("Movie.480p", QualityTier.SD_480P),
            ("Movie.720p", QualityTier.HD_720P),
            ("Movie.1080P", QualityTier.FHD_1080P),
            ("Movie.2160p", QualityTier.UHD_2160P),
            ("Movie.4K", QualityTier.UHD_4K),
            ("Movie.UHD", QualityTier.UHD_4K),
            ("Movie.576p", QualityTier.OTHER),
        ],
    )
    def test_quality(self, label: str, expected: QualityTier) -> None:
        """Should map resolution tokens to tiers."""
        assert extract_quality(label) is expected

    def test_size_in_gb(self) -> None:
        """Should parse a GB size."""
        assert extract_size("Movie 4.7 GB") == ReleaseSize(value=4.7, unit="GB")

    def test_size_in_mb(self) -> None:
        """Should parse an MB size and normalize the unit."""
        size = extract_size("Movie.700mb")
        assert size == ReleaseSize(value=700, unit="MB")
        assert size is not None
        assert size.gigabytes == pytest.approx(700 / 1024)

    def test_size_in_bytes(self) -> None:
        """Should convert sizes to bytes with binary units."""
        assert ReleaseSize(value=1, unit="GB").bytes == 1024**3
        assert ReleaseSize(value=512, unit="MB").bytes == 512 * 1024**2
        assert ReleaseSize(value=1.5, unit="GB").bytes == 1536 * 1024**2

    def test_no_size(self) -> None:
        """Should return None without a size token."""
        assert extract_size("Movie.1080p") is None

    @pytest.mark.parametrize(
        ("label", "expected"),
        [
            ("Show.S01E05.720p", ContentType.TV),
            ("Show.S03.1080p", ContentType.TV),
            ("Show Season 2", ContentType.TV),
            ("Show Episode 4", ContentType.TV),
            ("Movie.2023.1080p", ContentType.MOVIE),
        ],
    )
    def test_content_type(self, label: str, expected: ContentType) -> None:
        """Should detect TV from season and episode markers."""
        assert detect_content_type(label) is expected


class TestHdrExtraction:
    """Tests for HDR tier precedence."""

    def test_dolby_vision_beats_hdr10(self) -> None:
        """Should resolve labels carrying both tags to Dolby Vision."""
        assert extract_hdr("Movie.2160p.HDR10.Dolby.Vision") is HDRTier.DOLBY_VISION
        assert extract_hdr("Movie.2160p.DV.HDR10.HEVC") is HDRTier.DOLBY_VISION

    def test_hdr10_plus_beats_hdr10(self) -> None:
        """Should prefer HDR10+ over HDR10."""
        assert extract_hdr("Movie.2160p.HDR10+.HEVC") is HDRTier.HDR10_PLUS
        assert extract_hdr("Movie.2160p.HDR10Plus") is HDRTier.HDR10_PLUS

    def test_plain_hdr(self) -> None:
        """Should detect a bare HDR tag."""
        assert extract_hdr("Movie.2160p.HDR.x265") is HDRTier.HDR

    def test_dv_inside_word_is_sdr(self) -> None:
        """Should not treat 'dv' inside a word as Dolby Vision."""
        assert extract_hdr("The.Adventure.1080p") is HDRTier.SDR


class TestCodecExtraction:
    """Tests for codec precedence."""

    @pytest.mark.parametrize(
        ("label", "expected"),
        [
            ("Movie.x265", CodecKind.HEVC),
            ("Movie.H.265", CodecKind.HEVC),
            ("Movie.x264", CodecKind.H264),
            ("Movie.H264", CodecKind.H264),
            ("Movie.AV1", CodecKind.AV1),
            ("Movie.XviD", CodecKind.UNKNOWN),
        ],
    )
    def test_codec(self, label: str, expected: CodecKind) -> None:
        """Should map codec tags to codec kinds."""
        assert extract_codec(label) is expected


class TestMagnetLinks:
    """Tests for magnet link handling."""

    MAGNET = (
        "magnet:?xt=urn:btih:ABCDEF0123456789ABCDEF0123456789ABCDEF01"
        "&dn=Movie.Title.2023.1080p.BluRay.x264-GROUP&tr=udp%3A%2F%2Ftracker"
    )

    def test_is_magnet_link(self) -> None:
        """Should recognise BitTorrent v1 magnet links only."""
        assert is_magnet_link(self.MAGNET)
        assert not is_magnet_link("https://example.com/file.torrent")

    def test_display_name(self) -> None:
        """Should decode the dn parameter."""
        assert magnet_display_name(self.MAGNET) == "Movie.Title.2023.1080p.BluRay.x264-GROUP"

    def test_display_name_missing(self) -> None:
        """Should return an empty string without a dn parameter."""
        assert magnet_display_name("magnet:?xt=urn:btih:ABC") == ""

    def test_info_hash(self) -> None:
        """Should return the lowercased btih hash."""
        assert extract_info_hash(self.MAGNET) == "abcdef0123456789abcdef0123456789abcdef01"

    def test_info_hash_missing(self) -> None:
        """Should return None without a btih exact topic."""
        assert extract_info_hash("magnet:?dn=Movie.1080p") is None
        assert extract_info_hash("https://example.com/file.torrent") is None

    def test_info_hash_matches_candidate(self) -> None:
        """Should agree with the candidate's info hash."""
        candidate = Candidate(source_id=self.MAGNET, metadata=extract_from_magnet(self.MAGNET))
        assert candidate.info_hash == extract_info_hash(self.MAGNET)

    def test_extract_from_magnet(self) -> None:
        """Should extract metadata from the display name."""
        meta = extract_from_magnet(self.MAGNET)

        assert meta.title == "Movie Title 2023"
        assert meta.quality is QualityTier.FHD_1080P
