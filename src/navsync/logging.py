"""Logging setup for the navsync command line.

navsync modules only ever call ``logging.getLogger(__name__)``; handlers are
installed here, once, by the CLI. The effective level is the first of:

    1. an explicit ``level`` argument
    2. NAVSYNC_LOG_LEVEL (a level name or number)
    3. NAVSYNC_DEBUG set to true/1/yes
    4. ``debug=True`` (``--debug`` or ``debug: true`` in navsync.yaml)
    5. WARNING
"""

import logging
import os
import sys
from typing import TextIO

_VERBOSE_FORMAT = "%(asctime)s %(name)s [%(levelname)s] %(message)s"
_PLAIN_FORMAT = "%(name)s: %(message)s"

# Kept at WARNING whatever navsync's own level is
_QUIET_LOGGERS = ("asyncio",)

_TRUTHY = frozenset({"true", "1", "yes"})


def resolve_level(*, debug: bool = False, level: int | str | None = None) -> int:
    """Effective level for the given flag, override and environment."""
    if level is not None:
        return _parse_level(level)
    if env_level := os.environ.get("NAVSYNC_LOG_LEVEL"):
        return _parse_level(env_level)
    if debug or os.environ.get("NAVSYNC_DEBUG", "").lower() in _TRUTHY:
        return logging.DEBUG
    return logging.WARNING


def configure_logging(
    *,
    debug: bool = False,
    level: int | str | None = None,
    stream: TextIO | None = None,
) -> int:
    """Install a single stderr handler on the root logger.

    Calling it again replaces the previous handler, so the CLI can raise the
    level once settings are loaded.

    Returns:
        The level that was applied.
    """
    resolved = resolve_level(debug=debug, level=level)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(
        logging.Formatter(_VERBOSE_FORMAT if resolved <= logging.DEBUG else _PLAIN_FORMAT)
    )
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(resolved)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug("Log level %s", logging.getLevelName(resolved))
    return resolved


def _parse_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    named = logging.getLevelNamesMapping().get(level.strip().upper())
    if named is not None:
        return named
    try:
        return int(level)
    except ValueError:
        return logging.WARNING
