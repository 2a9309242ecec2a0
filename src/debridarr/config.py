"""Configuration loading for debridarr."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Self

from pydantic import ValidationError

from debridarr.checker import SyncSettings
from debridarr.clients.base import ProxyRotation
from debridarr.preferences import Preferences


class ConfigurationError(Exception):
    """Raised when configuration is invalid or missing."""


@dataclass
class RealDebridConfig:
    """Real-Debrid connection configuration."""

    api_key: str


@dataclass
class TraktConfig:
    """Trakt connection configuration."""

    client_id: str
    access_token: str | None = None


@dataclass
class ProxyConfig:
    """URL-prefix proxies tried in turn when a request fails."""

    urls: list[str] = field(default_factory=list)
    max_attempts: int = 3

    def rotation(self) -> ProxyRotation:
        """Build a fresh rotation starting at the first proxy."""
        return ProxyRotation(tuple(self.urls))


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "info"


@dataclass
class SyncConfig:
    """Configuration for watch-list sync runs."""

    check_for_upgrades: bool = False
    auto_add_movies: bool = True
    auto_add_shows: bool = True
    hash_list: Path | None = None

    def settings(self) -> SyncSettings:
        """Get the run switches for WatchlistSync."""
        return SyncSettings(
            check_for_upgrades=self.check_for_upgrades,
            auto_add_movies=self.auto_add_movies,
            auto_add_shows=self.auto_add_shows,
        )


DEFAULT_TIMEOUT = 120.0


def default_config_path() -> Path:
    """Get the default config file path."""
    return Path.home() / ".config" / "debridarr" / "config.toml"


# --- Helper functions for parsing config sections ---


def _parse_preferences(data: dict[str, Any], section: str) -> Preferences:
    """Parse a preferences table.

    Args:
        data: The full config dictionary
        section: The section name ("movies" or "shows")

    Returns:
        Preferences instance (defaults when the section is missing)

    Raises:
        ConfigurationError: If the section fails validation
    """
    try:
        return Preferences.model_validate(data.get(section, {}))
    except ValidationError as e:
        raise ConfigurationError(f"Invalid [{section}] preferences: {e}") from e


def _parse_realdebrid_from_dict(data: dict[str, Any]) -> RealDebridConfig | None:
    api_key = data.get("realdebrid", {}).get("api_key")
    return RealDebridConfig(api_key=api_key) if api_key else None


def _parse_trakt_from_dict(data: dict[str, Any]) -> TraktConfig | None:
    section = data.get("trakt", {})
    client_id = section.get("client_id")
    if not client_id:
        return None
    return TraktConfig(client_id=client_id, access_token=section.get("access_token"))


def _parse_proxy_from_dict(data: dict[str, Any]) -> ProxyConfig:
    if "proxy" not in data:
        return ProxyConfig()
    proxy_data = data["proxy"]
    defaults = ProxyConfig()
    return ProxyConfig(
        urls=list(proxy_data.get("urls", defaults.urls)),
        max_attempts=int(proxy_data.get("max_attempts", defaults.max_attempts)),
    )


def _parse_sync_from_dict(data: dict[str, Any]) -> SyncConfig:
    if "sync" not in data:
        return SyncConfig()
    sync_data = data["sync"]
    defaults = SyncConfig()
    hash_list = sync_data.get("hash_list")
    return SyncConfig(
        check_for_upgrades=sync_data.get("check_for_upgrades", defaults.check_for_upgrades),
        auto_add_movies=sync_data.get("auto_add_movies", defaults.auto_add_movies),
        auto_add_shows=sync_data.get("auto_add_shows", defaults.auto_add_shows),
        hash_list=Path(hash_list).expanduser() if hash_list else None,
    )


def _parse_logging_from_dict(data: dict[str, Any]) -> LoggingConfig:
    if "logging" not in data:
        return LoggingConfig()
    return LoggingConfig(level=str(data["logging"].get("level", LoggingConfig().level)))


@dataclass
class Config:
    """Application configuration."""

    realdebrid: RealDebridConfig | None = None
    trakt: TraktConfig | None = None
    timeout: float = DEFAULT_TIMEOUT
    proxy: ProxyConfig = field(default_factory=ProxyConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    sync: SyncConfig = field(default_factory=SyncConfig)
    movies: Preferences = field(default_factory=Preferences)
    shows: Preferences = field(default_factory=Preferences)

    @classmethod
    def load(cls, path: Path | None = None) -> Self:
        """Load configuration from environment and config file.

        Configuration precedence (highest to lowest):
        1. Environment variables
        2. Config file (~/.config/debridarr/config.toml)

        Environment variables:
        - DEBRIDARR_RD_API_KEY
        - DEBRIDARR_TRAKT_CLIENT_ID
        - DEBRIDARR_TRAKT_ACCESS_TOKEN
        - DEBRIDARR_TIMEOUT (request timeout in seconds)
        - DEBRIDARR_PROXIES (comma-separated proxy prefixes)
        - DEBRIDARR_HASH_LIST (path to the magnet hash list)
        - DEBRIDARR_LOG_LEVEL

        Args:
            path: Config file to read instead of the default location

        Returns:
            Config instance with loaded values

        Raises:
            ConfigurationError: If config file exists but is invalid
        """
        config = cls()

        config_file = path or default_config_path()
        if config_file.exists():
            config = cls._load_from_file(config_file)

        return cls._load_from_env(config)

    @classmethod
    def _load_from_file(cls, path: Path) -> Self:
        """Load configuration from TOML file.

        Raises:
            ConfigurationError: If file cannot be parsed or validated
        """
        data = _load_toml_file(path)

        try:
            timeout = float(data.get("timeout", DEFAULT_TIMEOUT))
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid timeout: {data.get('timeout')!r}") from e

        return cls(
            realdebrid=_parse_realdebrid_from_dict(data),
            trakt=_parse_trakt_from_dict(data),
            timeout=timeout,
            proxy=_parse_proxy_from_dict(data),
            logging=_parse_logging_from_dict(data),
            sync=_parse_sync_from_dict(data),
            movies=_parse_preferences(data, "movies"),
            shows=_parse_preferences(data, "shows"),
        )

    @classmethod
    def _load_from_env(cls, base: Self) -> Self:
        """Override configuration with environment variables."""
        rd_key = os.environ.get("DEBRIDARR_RD_API_KEY")
        realdebrid = RealDebridConfig(api_key=rd_key) if rd_key else base.realdebrid

        trakt = base.trakt
        client_id = os.environ.get("DEBRIDARR_TRAKT_CLIENT_ID")
        access_token = os.environ.get("DEBRIDARR_TRAKT_ACCESS_TOKEN")
        if client_id:
            trakt = TraktConfig(
                client_id=client_id,
                access_token=access_token or (base.trakt.access_token if base.trakt else None),
            )
        elif access_token and trakt is not None:
            trakt = TraktConfig(client_id=trakt.client_id, access_token=access_token)

        timeout_str = os.environ.get("DEBRIDARR_TIMEOUT")
        try:
            timeout = float(timeout_str) if timeout_str else base.timeout
        except ValueError as e:
            raise ConfigurationError(f"Invalid DEBRIDARR_TIMEOUT: {timeout_str!r}") from e

        proxy = base.proxy
        proxies_str = os.environ.get("DEBRIDARR_PROXIES")
        if proxies_str:
            urls = [u.strip() for u in proxies_str.split(",") if u.strip()]
            proxy = ProxyConfig(urls=urls, max_attempts=base.proxy.max_attempts)

        sync = base.sync
        hash_list = os.environ.get("DEBRIDARR_HASH_LIST")
        if hash_list:
            sync = SyncConfig(
                check_for_upgrades=base.sync.check_for_upgrades,
                auto_add_movies=base.sync.auto_add_movies,
                auto_add_shows=base.sync.auto_add_shows,
                hash_list=Path(hash_list).expanduser(),
            )

        log_level = os.environ.get("DEBRIDARR_LOG_LEVEL")
        logging_config = LoggingConfig(level=log_level) if log_level else base.logging

        return cls(
            realdebrid=realdebrid,
            trakt=trakt,
            timeout=timeout,
            proxy=proxy,
            logging=logging_config,
            sync=sync,
            movies=base.movies,
            shows=base.shows,
        )

    def require_realdebrid(self) -> RealDebridConfig:
        """Get Real-Debrid config, raising if not configured.

        Raises:
            ConfigurationError: If Real-Debrid is not configured
        """
        if self.realdebrid is None:
            raise ConfigurationError(
                "Real-Debrid is not configured. Set the DEBRIDARR_RD_API_KEY "
                "environment variable, or create ~/.config/debridarr/config.toml"
            )
        return self.realdebrid

    def require_trakt(self) -> TraktConfig:
        """Get Trakt config, raising if not configured.

        Raises:
            ConfigurationError: If Trakt is not configured
        """
        if self.trakt is None or not self.trakt.access_token:
            raise ConfigurationError(
                "Trakt is not configured. Set DEBRIDARR_TRAKT_CLIENT_ID and "
                "DEBRIDARR_TRAKT_ACCESS_TOKEN environment variables, or create "
                "~/.config/debridarr/config.toml"
            )
        return self.trakt

    def require_hash_list(self, override: Path | None = None) -> Path:
        """Get the hash list path, raising if none is configured.

        Args:
            override: Path given on the command line, takes precedence

        Raises:
            ConfigurationError: If no hash list is configured
        """
        path = override or self.sync.hash_list
        if path is None:
            raise ConfigurationError(
                "No hash list configured. Pass --hash-list, set DEBRIDARR_HASH_LIST, "
                "or set [sync] hash_list in ~/.config/debridarr/config.toml"
            )
        return path


def _load_toml_file(path: Path) -> dict[str, Any]:
    """Load and parse a TOML file.

    Raises:
        ConfigurationError: If file cannot be parsed
    """
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid config file: {e}") from e
