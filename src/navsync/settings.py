"""navsync configuration management.

Loads settings from navsync.yaml with sensible defaults.
All settings can be overridden via environment variables (NAVSYNC_*).

Config locations (in priority order):
1. Explicit path passed to load_settings()
2. navsync.yaml (project root)
3. .navsync/config.yaml (project-local)
4. Built-in defaults

Example navsync.yaml:
    docs_dir: docs
    languages: [en, zh]
    cache_ttl: 300
    external_roots:
      - en/imported-handbook
"""

import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import yaml

from navsync.errors import ErrorCode, config_error

logger = logging.getLogger(__name__)

CONFIG_FILENAMES = ("navsync.yaml", ".navsync/config.yaml")

_ENV_PREFIX = "NAVSYNC_"

_PATH_FIELDS = ("docs_dir", "sidebar_dir", "cache_dir")


@dataclass(slots=True)
class NavSettings:
    """Settings for one documentation project."""

    docs_dir: Path = field(default_factory=lambda: Path("docs"))
    """Content root holding one directory per language."""

    sidebar_dir: Path = field(default_factory=lambda: Path(".navsync/sidebar"))
    """Root of the override sidecars (metadata and archive live beneath it)."""

    cache_dir: Path = field(default_factory=lambda: Path(".navsync/cache"))
    """Where file-tier navigation snapshots are written."""

    languages: tuple[str, ...] = ("en",)
    """Configured language directories under docs_dir."""

    global_config_name: str = ".sidebarrc.yml"
    """Global defaults file at the content root."""

    external_roots: tuple[str, ...] = ()
    """Externally imported doc roots, relative to docs_dir, skipped everywhere."""

    detect_gitbook: bool = True
    """Treat every directory containing SUMMARY.md as an external root."""

    cache_ttl: float = 300.0
    """Seconds a memory-tier or file-tier snapshot stays fresh."""

    dev_mode: bool = False
    """Include draft documents."""

    debug: bool = False
    """Log at DEBUG level, as if --debug were given."""


def _deep_update(base: dict, updates: dict) -> dict:
    """Recursively update a dict with another dict."""
    for key, value in updates.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_update(base[key], value)
        else:
            base[key] = value
    return base


def _coerce_env_value(value: str) -> Any:
    if value.lower() in ("true", "false"):
        return value.lower() == "true"
    if value.isdigit() or (value.startswith("-") and value[1:].isdigit()):
        return int(value)
    try:
        return float(value)
    except ValueError:
        return value


def _apply_env_overrides(config_dict: dict) -> dict:
    """Apply environment variable overrides.

    Environment variables follow the pattern NAVSYNC_<FIELD>; list fields
    take comma-separated values.

    Examples:
        NAVSYNC_DOCS_DIR=site/docs
        NAVSYNC_LANGUAGES=en,zh
        NAVSYNC_CACHE_TTL=60
    """
    known = set(NavSettings.__dataclass_fields__)
    for key, value in os.environ.items():
        if not key.startswith(_ENV_PREFIX):
            continue
        name = key[len(_ENV_PREFIX):].lower()
        if name not in known:
            continue
        if name in ("languages", "external_roots"):
            config_dict[name] = [part.strip() for part in value.split(",") if part.strip()]
        elif name in _PATH_FIELDS or name == "global_config_name":
            config_dict[name] = value
        else:
            config_dict[name] = _coerce_env_value(value)
    return config_dict


def _dict_to_settings(data: dict, base_dir: Path) -> NavSettings:
    """Convert a merged dict to NavSettings, resolving relative paths."""
    unknown = set(data) - set(NavSettings.__dataclass_fields__)
    if unknown:
        logger.warning("Ignoring unknown settings: %s", ", ".join(sorted(unknown)))

    kwargs: dict[str, Any] = {}
    for name in NavSettings.__dataclass_fields__:
        if name not in data or data[name] is None:
            continue
        value = data[name]
        if name in _PATH_FIELDS:
            path = Path(str(value)).expanduser()
            kwargs[name] = path if path.is_absolute() else (base_dir / path)
        elif name in ("languages", "external_roots"):
            if isinstance(value, str):
                value = [value]
            if not isinstance(value, (list, tuple)):
                raise config_error(
                    ErrorCode.CONFIG_INVALID,
                    detail=f"'{name}' must be a list, got {type(value).__name__}",
                )
            kwargs[name] = tuple(str(v) for v in value)
        elif name == "cache_ttl":
            try:
                kwargs[name] = float(value)
            except (TypeError, ValueError) as e:
                raise config_error(
                    ErrorCode.CONFIG_INVALID,
                    detail=f"'cache_ttl' must be a number, got {value!r}",
                    cause=e,
                ) from e
        elif name in ("dev_mode", "debug", "detect_gitbook"):
            kwargs[name] = bool(value)
        else:
            kwargs[name] = str(value)
    return NavSettings(**kwargs)


def _default_dict() -> dict[str, Any]:
    data = asdict(NavSettings())
    for name in _PATH_FIELDS:
        data[name] = str(data[name])
    data["languages"] = list(data["languages"])
    data["external_roots"] = list(data["external_roots"])
    return data


def load_settings(path: str | Path | None = None, *, cwd: Path | None = None) -> NavSettings:
    """Load settings from file with defaults and env overrides.

    Priority (highest to lowest):
    1. Environment variables (NAVSYNC_*)
    2. Explicit path if provided
    3. navsync.yaml, then .navsync/config.yaml under ``cwd``
    4. Built-in defaults

    Args:
        path: Optional explicit config file path.
        cwd: Project directory to search (default: current directory).

    Returns:
        NavSettings with every path made absolute.

    Raises:
        NavsyncError: CONFIG_MISSING for an explicit path that does not exist,
            CONFIG_INVALID for unparseable YAML or badly typed values.
    """
    base_dir = (cwd or Path.cwd()).resolve()
    config_dict = _default_dict()

    candidates: list[Path] = []
    if path is not None:
        explicit = Path(path)
        if not explicit.exists():
            raise config_error(ErrorCode.CONFIG_MISSING, path=str(explicit))
        candidates.append(explicit)
    else:
        candidates.extend(base_dir / name for name in CONFIG_FILENAMES)

    for config_path in candidates:
        if not config_path.exists():
            continue
        try:
            with open(config_path, encoding="utf-8") as f:
                file_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise config_error(
                ErrorCode.CONFIG_INVALID, detail=str(e), path=str(config_path), cause=e
            ) from e
        if not isinstance(file_config, dict):
            raise config_error(
                ErrorCode.CONFIG_INVALID,
                detail="top level must be a mapping",
                path=str(config_path),
            )
        _deep_update(config_dict, file_config)
        # Relative paths in a config file are relative to that file
        base_dir = config_path.resolve().parent
        if config_path.parent.name == ".navsync":
            base_dir = base_dir.parent
        logger.debug("Loaded settings from %s", config_path)
        break

    config_dict = _apply_env_overrides(config_dict)
    return _dict_to_settings(config_dict, base_dir)
