"""Logging setup for scripts and services that drive replication."""

from __future__ import annotations

import logging
import os

from .errors import ConfigurationError

LOG_LEVEL_VAR = "REPLICATA_LOG_LEVEL"


def _level_from_env(default: int) -> int:
    raw = os.getenv(LOG_LEVEL_VAR)
    if raw is None or not raw.strip():
        return default
    name = raw.strip().upper()
    level = logging.getLevelNamesMapping().get(name)
    if level is None:
        raise ConfigurationError(f"Invalid log level for {LOG_LEVEL_VAR}: {raw!r}")
    return level


def configure_logging(*, level: int | None = None, force: bool = False) -> None:
    """Initialise the root logger with a terse format.

    ``level`` wins over ``REPLICATA_LOG_LEVEL``; with neither, INFO is used.
    Set it to DEBUG to see every relation the engine copies or skips.
    """

    logging.basicConfig(
        level=level if level is not None else _level_from_env(logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
