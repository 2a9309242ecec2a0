"""Logging setup for the debridarr CLI."""

from __future__ import annotations

import logging

LOG_LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# Chatty third-party loggers kept quiet unless debugging.
_NOISY_LOGGERS = ("httpx", "httpcore")


def parse_log_level(value: str) -> int:
    """Convert a level name to a logging level.

    Args:
        value: Level name, case-insensitive (debug, info, warning, error, critical)

    Returns:
        The numeric logging level

    Raises:
        ValueError: If the name is not a known level
    """
    try:
        return LOG_LEVELS[value.strip().lower()]
    except KeyError:
        valid = ", ".join(LOG_LEVELS)
        raise ValueError(f"Invalid log level {value!r}. Use one of: {valid}") from None


def configure_logging(level: str = "info") -> None:
    """Configure root logging for the CLI.

    Args:
        level: Level name, case-insensitive

    Raises:
        ValueError: If the level name is invalid
    """
    numeric = parse_log_level(level)
    logging.basicConfig(level=numeric, format=LOG_FORMAT, force=True)

    third_party_level = logging.DEBUG if numeric <= logging.DEBUG else logging.WARNING
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(third_party_level)
