"""debridarr - Match watch-lists against magnet hash lists for Real-Debrid.

A Python library and CLI that reads release names from a magnet hash list,
picks the best release per title under your quality preferences, submits it
to Real-Debrid, and finds higher-quality replacements for content you
already have.

Quick Start
-----------
Extract metadata from a release name::

    from debridarr import extract

    meta = extract("Movie.Title.2023.1080p.BluRay.x264-GROUP")
    print(meta.title, meta.quality.value)  # Movie Title 2023 1080p

Pick the best release per title::

    from debridarr import HashListIndex, Preferences, find_best_matches

    index = HashListIndex.from_file(Path("hashes.txt"))
    prefs = Preferences(quality="1080p", hdr_preference="hdr-preferred")
    best = find_best_matches(index.search("Movie Title", ContentType.MOVIE), prefs)

Scan Real-Debrid for upgrades::

    from debridarr import RealDebridClient, UpgradeScanner

    async with RealDebridClient("api-key") as client:
        report = await UpgradeScanner(index, client, client).scan(prefs)
    print(f"{report.upgrades_found} upgrades found")

CLI Usage
---------
::

    debridarr parse "Show.Name.S02.Complete.2160p.HDR10.HEVC"
    debridarr match hashes.txt --title "The Matrix"
    debridarr upgrades --dry-run
    debridarr sync

Classes
-------
Preferences
    Quality, HDR, release-type and size preferences.
HashListIndex
    In-memory candidate source built from a magnet hash list.
UpgradeScanner
    Finds higher-quality replacements for held content.
WatchlistSync
    Submits best matches for watch-listed titles.
RealDebridClient
    Low-level async client for the Real-Debrid API.
TraktClient
    Low-level async client for the Trakt API.
"""

from debridarr.checker import SyncReport, SyncSettings, WatchlistSync
from debridarr.clients.realdebrid import RealDebridClient
from debridarr.clients.trakt import TraktClient
from debridarr.criteria import RejectionReason, matches_preferences, rejection_reason
from debridarr.hashlist import HashListIndex, parse_hash_list, process_hash_list
from debridarr.metadata import clean_title, extract, extract_from_magnet
from debridarr.models.common import (
    Candidate,
    CodecKind,
    ContentType,
    HDRTier,
    QualityTier,
    ReleaseMetadata,
)
from debridarr.preferences import HdrPreference, Preferences
from debridarr.ranking import is_upgrade, rank
from debridarr.selector import find_best_matches, find_best_show_matches
from debridarr.upgrades import UpgradeReport, UpgradeScanner

__version__ = "0.1.0"

__all__ = [
    "Candidate",
    "CodecKind",
    "ContentType",
    "HDRTier",
    "HashListIndex",
    "HdrPreference",
    "Preferences",
    "QualityTier",
    "RealDebridClient",
    "RejectionReason",
    "ReleaseMetadata",
    "SyncReport",
    "SyncSettings",
    "TraktClient",
    "UpgradeReport",
    "UpgradeScanner",
    "WatchlistSync",
    "__version__",
    "clean_title",
    "extract",
    "extract_from_magnet",
    "find_best_matches",
    "find_best_show_matches",
    "is_upgrade",
    "matches_preferences",
    "parse_hash_list",
    "process_hash_list",
    "rank",
    "rejection_reason",
]
