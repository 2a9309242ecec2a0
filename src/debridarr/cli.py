"""Command-line interface for debridarr."""

from __future__ import annotations

import asyncio
import json
import os
from enum import Enum
from pathlib import Path  # noqa: TC003 - needed at runtime for typer
from typing import TYPE_CHECKING, Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from debridarr.checker import SyncReport, WatchlistSync
from debridarr.clients.realdebrid import RealDebridClient
from debridarr.clients.trakt import TraktClient
from debridarr.config import Config, ConfigurationError
from debridarr.hashlist import HashListIndex, process_hash_list
from debridarr.logging_config import configure_logging, parse_log_level
from debridarr.metadata import extract, extract_from_magnet, is_magnet_link
from debridarr.models.common import ContentType
from debridarr.selector import find_best_matches, find_best_show_matches, show_group_key
from debridarr.upgrades import UpgradeReport, UpgradeScanner

if TYPE_CHECKING:
    from debridarr.models.common import Candidate, ReleaseMetadata
    from debridarr.preferences import Preferences

app = typer.Typer(
    name="debridarr",
    help="Match watch-lists against magnet hash lists and keep Real-Debrid content upgraded.",
    no_args_is_help=True,
)

console = Console()
error_console = Console(stderr=True)


class OutputFormat(str, Enum):
    """Output format options."""

    JSON = "json"
    TABLE = "table"
    SIMPLE = "simple"


class ContentKind(str, Enum):
    """Content type options."""

    MOVIE = "movie"
    TV = "tv"

    def to_content_type(self) -> ContentType:
        """Convert to the engine's content type."""
        return ContentType(self.value)


def _resolve_log_level(cli_level: str | None) -> str:
    """Pick the log level: CLI flag, then env var, then config file, then info."""
    if cli_level:
        return cli_level
    env_level = os.environ.get("DEBRIDARR_LOG_LEVEL")
    if env_level:
        return env_level
    try:
        return Config.load().logging.level
    except ConfigurationError:
        return "info"


@app.callback()
def main(
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            "-l",
            help="Logging level (debug, info, warning, error).",
        ),
    ] = None,
) -> None:
    """Match watch-lists against magnet hash lists and keep Real-Debrid content upgraded."""
    level = _resolve_log_level(log_level)
    try:
        parse_log_level(level)
    except ValueError as e:
        error_console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1) from e
    configure_logging(level)


# --- Formatting ---


def metadata_to_dict(metadata: ReleaseMetadata) -> dict[str, object]:
    """Convert metadata to a JSON-friendly dict."""
    return {
        "title": metadata.title,
        "quality": metadata.quality.value,
        "size": str(metadata.size) if metadata.size else None,
        "content_type": metadata.content_type.value,
        "hdr": metadata.hdr.value,
        "codec": metadata.codec.value,
    }


def format_metadata_table(metadata: ReleaseMetadata) -> Table:
    """Format extracted metadata as a rich table."""
    table = Table(title=f"Release: {escape(metadata.label)}")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    for name, value in metadata_to_dict(metadata).items():
        table.add_row(name.replace("_", " ").title(), str(value) if value is not None else "Unknown")
    if metadata.content_type is ContentType.TV:
        table.add_row("Group Key", show_group_key(metadata.label))
    return table


def format_candidates_table(candidates: list[Candidate], title: str) -> Table:
    """Format candidates as a rich table."""
    table = Table(title=title)
    table.add_column("Release", style="cyan")
    table.add_column("Quality", style="green")
    table.add_column("HDR")
    table.add_column("Codec")
    table.add_column("Size")
    for candidate in candidates:
        meta = candidate.metadata
        table.add_row(
            escape(meta.label or meta.title),
            meta.quality.value,
            meta.hdr.value,
            meta.codec.value,
            str(meta.size) if meta.size else "Unknown",
        )
    return table


def print_candidates(candidates: list[Candidate], output_format: OutputFormat, title: str) -> None:
    """Print candidates in the specified format."""
    if output_format == OutputFormat.JSON:
        data = [
            {"source_id": c.source_id, "label": c.label, **metadata_to_dict(c.metadata)}
            for c in candidates
        ]
        console.print_json(json.dumps(data))
    elif output_format == OutputFormat.TABLE:
        console.print(format_candidates_table(candidates, title))
    else:
        for candidate in candidates:
            console.print(
                f"{candidate.quality.value}\t{candidate.label or candidate.title}",
                markup=False,
            )


def format_upgrade_report_json(report: UpgradeReport) -> str:
    """Format an upgrade report as JSON."""
    data: dict[str, object] = {
        "checked_torrents": report.checked_torrents,
        "upgrades_found": report.upgrades_found,
        "upgrades_added": report.upgrades_added,
        "errors": report.errors,
        "matches": [
            {
                "held": match.held.filename,
                "current_quality": match.current.quality.value,
                "upgrades": [c.label or c.title for c in match.candidates],
            }
            for match in report.matches
        ],
    }
    return json.dumps(data, indent=2)


def format_upgrade_report_table(report: UpgradeReport) -> Table:
    """Format an upgrade report as a rich table."""
    table = Table(title="Upgrade Scan")
    table.add_column("Held Release", style="cyan")
    table.add_column("Current", style="yellow")
    table.add_column("Upgrades", style="green")
    for match in report.matches:
        table.add_row(
            escape(match.held.filename),
            match.current.quality.value,
            "\n".join(f"{c.quality.value}  {escape(c.label or c.title)}" for c in match.candidates),
        )
    table.caption = (
        f"{report.checked_torrents} checked, {report.upgrades_found} found, "
        f"{report.upgrades_added} added"
    )
    return table


def format_upgrade_report_simple(report: UpgradeReport) -> str:
    """Format an upgrade report as one line of text."""
    return (
        f"Checked {report.checked_torrents} torrents: {report.upgrades_found} upgrades found, "
        f"{report.upgrades_added} added, {len(report.errors)} errors"
    )


def format_sync_report_json(report: SyncReport) -> str:
    """Format a sync report as JSON."""
    data = {
        "movies_processed": report.movies_processed,
        "shows_processed": report.shows_processed,
        "movies_added": report.movies_added,
        "shows_added": report.shows_added,
        "movie_upgrades_found": report.movie_upgrades_found,
        "show_upgrades_found": report.show_upgrades_found,
        "upgrades_added": report.upgrades_added,
        "errors": report.errors,
    }
    return json.dumps(data, indent=2)


def format_sync_report_table(report: SyncReport) -> Table:
    """Format a sync report as a rich table."""
    table = Table(title="Watch-list Sync")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green" if not report.errors else "yellow")
    table.add_row("Movies Processed", str(report.movies_processed))
    table.add_row("Movies Added", str(report.movies_added))
    table.add_row("Shows Processed", str(report.shows_processed))
    table.add_row("Shows Added", str(report.shows_added))
    table.add_row("Movie Upgrades Found", str(report.movie_upgrades_found))
    table.add_row("Show Upgrades Found", str(report.show_upgrades_found))
    table.add_row("Upgrades Added", str(report.upgrades_added))
    table.add_row("Errors", str(len(report.errors)))
    return table


def format_sync_report_simple(report: SyncReport) -> str:
    """Format a sync report as one line of text."""
    return (
        f"Added {report.movies_added} movies and {report.shows_added} shows, "
        f"{report.upgrades_added} upgrades, {len(report.errors)} errors"
    )


def print_errors(errors: list[str]) -> None:
    """Print recorded run errors to stderr."""
    for error in errors:
        error_console.print(f"[yellow]-[/yellow] {escape(error)}")


def _preferences_for(config: Config, content_type: ContentType) -> Preferences:
    return config.shows if content_type is ContentType.TV else config.movies


def _make_realdebrid_client(config: Config) -> RealDebridClient:
    rd = config.require_realdebrid()
    return RealDebridClient(
        rd.api_key,
        timeout=config.timeout,
        max_attempts=config.proxy.max_attempts,
        proxy_rotation=config.proxy.rotation(),
    )


def _make_trakt_client(config: Config) -> TraktClient:
    trakt = config.require_trakt()
    return TraktClient(
        trakt.client_id,
        trakt.access_token,
        timeout=config.timeout,
        max_attempts=config.proxy.max_attempts,
        proxy_rotation=config.proxy.rotation(),
    )


# --- Commands ---


@app.command("parse")
def parse_cmd(
    label: Annotated[str, typer.Argument(help="Release name, filename or magnet link")],
    output_format: Annotated[
        OutputFormat, typer.Option("--format", "-f", help="Output format")
    ] = OutputFormat.TABLE,
) -> None:
    """Show the metadata extracted from a release name.

    Examples:
        debridarr parse "Movie.Title.2023.1080p.BluRay.x264-GROUP"
        debridarr parse "Show.Name.S02.Complete.2160p.HDR10.HEVC" -f json
    """
    metadata = extract_from_magnet(label) if is_magnet_link(label) else extract(label)

    if output_format == OutputFormat.JSON:
        data = metadata_to_dict(metadata)
        if metadata.content_type is ContentType.TV:
            data["group_key"] = show_group_key(metadata.label)
        console.print_json(json.dumps(data))
    elif output_format == OutputFormat.TABLE:
        console.print(format_metadata_table(metadata))
    else:
        console.print(
            f"{metadata.title} | {metadata.quality.value} | {metadata.content_type.value} | "
            f"{metadata.hdr.value} | {metadata.codec.value}",
            markup=False,
        )


@app.command("match")
def match_cmd(
    hash_list: Annotated[Path, typer.Argument(help="Hash list file, one magnet link per line")],
    title: Annotated[
        str | None, typer.Option("--title", "-t", help="Select best matches for this title")
    ] = None,
    year: Annotated[
        int | None, typer.Option("--year", "-y", help="Release year of the movie")
    ] = None,
    kind: Annotated[ContentKind, typer.Option("--type", help="Content type")] = ContentKind.MOVIE,
    output_format: Annotated[
        OutputFormat, typer.Option("--format", "-f", help="Output format")
    ] = OutputFormat.TABLE,
) -> None:
    """List hash list entries that match your preferences.

    Without --title, every entry passing the configured preferences for the
    content type is listed. With --title, the best release per group is
    selected for that title.

    Examples:
        debridarr match hashes.txt
        debridarr match hashes.txt --title "The Matrix"
        debridarr match hashes.txt --title "The Matrix" --year 1999
        debridarr match hashes.txt --title "Show Name" --type tv
    """
    try:
        config = Config.load()
        content_type = kind.to_content_type()
        preferences = _preferences_for(config, content_type)
        content = hash_list.read_text(encoding="utf-8")

        if title is None:
            candidates = [
                c
                for c in process_hash_list(content, preferences)
                if c.metadata.content_type is content_type
            ]
            heading = f"Matching {content_type.value} releases"
        else:
            found = HashListIndex.from_text(content).search(title, content_type, year)
            if content_type is ContentType.TV:
                candidates = find_best_show_matches(found, preferences)
            else:
                candidates = find_best_matches(found, preferences)
            heading = f"Best matches for {escape(title)}"

        print_candidates(candidates, output_format, heading)
        raise typer.Exit(0 if candidates else 1)
    except typer.Exit:
        raise
    except ConfigurationError as e:
        error_console.print(f"[red]Configuration error:[/red] {escape(str(e))}")
        raise typer.Exit(2) from e
    except OSError as e:
        error_console.print(f"[red]Cannot read hash list:[/red] {escape(str(e))}")
        raise typer.Exit(2) from e


@app.command("upgrades")
def upgrades_cmd(
    hash_list: Annotated[
        Path | None, typer.Option("--hash-list", help="Hash list file (default: from config)")
    ] = None,
    kind: Annotated[
        ContentKind | None, typer.Option("--type", help="Only check this content type")
    ] = None,
    dry_run: Annotated[
        bool, typer.Option("--dry-run", help="Report upgrades without submitting them")
    ] = False,
    output_format: Annotated[
        OutputFormat, typer.Option("--format", "-f", help="Output format")
    ] = OutputFormat.TABLE,
) -> None:
    """Scan downloaded Real-Debrid torrents for higher-quality releases.

    Movies and shows are scanned separately, each with its own
    preferences. Upgrades are submitted when auto_upgrade is enabled in the
    preferences for the content type, unless --dry-run is given.

    Examples:
        debridarr upgrades --type movie
        debridarr upgrades --hash-list hashes.txt --dry-run
    """
    try:
        config = Config.load()
        index = HashListIndex.from_file(config.require_hash_list(hash_list))
        content_types = (
            [kind.to_content_type()] if kind else [ContentType.MOVIE, ContentType.TV]
        )

        async def run() -> UpgradeReport:
            report = UpgradeReport()
            async with _make_realdebrid_client(config) as client:
                scanner = UpgradeScanner(index, client, client)
                for content_type in content_types:
                    preferences = _preferences_for(config, content_type)
                    if dry_run:
                        preferences = preferences.model_copy(update={"auto_upgrade": False})
                    report.merge(await scanner.scan(preferences, content_type))
            return report

        report = asyncio.run(run())

        if output_format == OutputFormat.JSON:
            console.print_json(format_upgrade_report_json(report))
        elif output_format == OutputFormat.TABLE:
            console.print(format_upgrade_report_table(report))
        else:
            console.print(format_upgrade_report_simple(report))
        print_errors(report.errors)
        raise typer.Exit(1 if report.errors else 0)
    except typer.Exit:
        raise
    except ConfigurationError as e:
        error_console.print(f"[red]Configuration error:[/red] {escape(str(e))}")
        raise typer.Exit(2) from e
    except Exception as e:
        error_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(2) from e


@app.command("sync")
def sync_cmd(
    hash_list: Annotated[
        Path | None, typer.Option("--hash-list", help="Hash list file (default: from config)")
    ] = None,
    output_format: Annotated[
        OutputFormat, typer.Option("--format", "-f", help="Output format")
    ] = OutputFormat.TABLE,
) -> None:
    """Add best matches for your Trakt watch-list to Real-Debrid.

    Runs the upgrade scan first when [sync] check_for_upgrades is enabled.

    Examples:
        debridarr sync
        debridarr sync --hash-list hashes.txt -f json
    """
    try:
        config = Config.load()
        index = HashListIndex.from_file(config.require_hash_list(hash_list))

        async def run() -> SyncReport:
            async with (
                _make_trakt_client(config) as trakt,
                _make_realdebrid_client(config) as rd,
            ):
                sync = WatchlistSync(trakt, index, rd, rd)
                return await sync.run(config.movies, config.shows, config.sync.settings())

        report = asyncio.run(run())

        if output_format == OutputFormat.JSON:
            console.print_json(format_sync_report_json(report))
        elif output_format == OutputFormat.TABLE:
            console.print(format_sync_report_table(report))
        else:
            console.print(format_sync_report_simple(report))
        print_errors(report.errors)
        raise typer.Exit(1 if report.errors else 0)
    except typer.Exit:
        raise
    except ConfigurationError as e:
        error_console.print(f"[red]Configuration error:[/red] {escape(str(e))}")
        raise typer.Exit(2) from e
    except Exception as e:
        error_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(2) from e


@app.command()
def version() -> None:
    """Show version information."""
    from debridarr import __version__

    console.print(f"debridarr version {__version__}")


if __name__ == "__main__":
    app()
