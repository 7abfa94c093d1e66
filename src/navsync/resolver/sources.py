"""Partial config sources and the defaults that complete them.

A directory's effective configuration is built from an explicit ordered list
of partial sources. ``merge_sources`` applies them left to right and the
last source to set a key wins; keys are replaced whole, never merged
recursively. ``build_effective_config`` then fills in every unset field.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from navsync.types import EffectiveDirectoryConfig, ExternalLinkConfig, GroupConfig

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 3

# Keys a directory may only set for itself; its label falls back to its name
NON_INHERITED_KEYS = frozenset({"root", "title"})


@dataclass(frozen=True, slots=True)
class ConfigSource:
    """One partial configuration layer."""

    name: str
    """Where the layer came from, e.g. ``global:defaults`` or ``ancestor:guide``."""
    data: dict[str, Any] = field(default_factory=dict)

    def without(self, keys: frozenset[str]) -> "ConfigSource":
        return ConfigSource(self.name, {k: v for k, v in self.data.items() if k not in keys})


def merge_sources(sources: list[ConfigSource]) -> dict[str, Any]:
    """Merge partial sources with last-write-wins semantics.

    Example:
        >>> merge_sources([
        ...     ConfigSource("global", {"maxDepth": 2, "collapsed": True}),
        ...     ConfigSource("target", {"maxDepth": 4}),
        ... ])
        {'maxDepth': 4, 'collapsed': True}
    """
    merged: dict[str, Any] = {}
    for source in sources:
        merged.update(source.data)
    return merged


def _as_int(value: Any, default: int | None, *, key: str, where: str) -> int | None:
    if value is None:
        return default
    if isinstance(value, bool):
        logger.warning("Ignoring boolean %s=%r in %s", key, value, where)
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring non-numeric %s=%r in %s", key, value, where)
        return default


def _as_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1", "on")
    return bool(value)


def normalize_item_order(raw: Any, *, where: str = "") -> dict[str, int]:
    """Normalize ``itemOrder`` from a list or a mapping into ``{name: position}``.

    Example:
        >>> normalize_item_order(["intro", "setup"])
        {'intro': 0, 'setup': 1}
        >>> normalize_item_order({"setup": "2", "bad": "x"})
        {'setup': 2}
    """
    if raw is None:
        return {}
    if isinstance(raw, list):
        return {str(name): index for index, name in enumerate(raw)}
    if isinstance(raw, dict):
        order: dict[str, int] = {}
        for name, position in raw.items():
            value = _as_int(position, None, key=f"itemOrder.{name}", where=where)
            if value is not None:
                order[str(name)] = value
        return order
    logger.warning("Ignoring itemOrder of type %s in %s", type(raw).__name__, where)
    return {}


def parse_groups(raw: Any, *, where: str = "") -> tuple[GroupConfig, ...]:
    if not raw:
        return ()
    if not isinstance(raw, list):
        logger.warning("Ignoring groups of type %s in %s", type(raw).__name__, where)
        return ()

    groups = []
    for entry in raw:
        if not isinstance(entry, dict) or not entry.get("title") or not entry.get("path"):
            logger.warning("Ignoring group without title/path in %s: %r", where, entry)
            continue
        groups.append(
            GroupConfig(
                title=str(entry["title"]),
                path=str(entry["path"]),
                priority=_as_int(entry.get("priority"), None, key="priority", where=where),
                max_depth=_as_int(entry.get("maxDepth"), None, key="maxDepth", where=where),
                collapsed=None if entry.get("collapsed") is None else _as_bool(entry["collapsed"], True),
            )
        )
    return tuple(groups)


def parse_external_links(raw: Any, *, where: str = "") -> tuple[ExternalLinkConfig, ...]:
    """Parse ``externalLinks`` entries; shape validation happens at injection time."""
    if not raw:
        return ()
    if not isinstance(raw, list):
        logger.warning("Ignoring externalLinks of type %s in %s", type(raw).__name__, where)
        return ()

    links = []
    for entry in raw:
        if not isinstance(entry, dict):
            logger.warning("Ignoring malformed external link in %s: %r", where, entry)
            continue
        links.append(
            ExternalLinkConfig(
                text=str(entry.get("text") or ""),
                link=str(entry.get("link") or ""),
                priority=_as_int(entry.get("priority"), 0, key="priority", where=where) or 0,
                hidden=_as_bool(entry.get("hidden"), False),
            )
        )
    return tuple(links)


def build_effective_config(
    merged: dict[str, Any],
    *,
    directory: Path,
    lang: str,
    dev_mode: bool,
) -> EffectiveDirectoryConfig:
    """Complete a merged partial config with built-in defaults."""
    where = str(directory)
    title = merged.get("title")
    max_depth = _as_int(merged.get("maxDepth"), DEFAULT_MAX_DEPTH, key="maxDepth", where=where)

    return EffectiveDirectoryConfig(
        path=directory,
        lang=lang,
        title=str(title) if title not in (None, "") else directory.name,
        root=_as_bool(merged.get("root"), False),
        hidden=_as_bool(merged.get("hidden"), False),
        priority=_as_int(merged.get("priority"), 0, key="priority", where=where) or 0,
        max_depth=max_depth if max_depth is not None else DEFAULT_MAX_DEPTH,
        collapsed=_as_bool(merged.get("collapsed"), False),
        item_order=normalize_item_order(merged.get("itemOrder"), where=where),
        groups=parse_groups(merged.get("groups"), where=where),
        external_links=parse_external_links(merged.get("externalLinks"), where=where),
        dev_mode=dev_mode,
    )
