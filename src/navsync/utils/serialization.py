"""Crash-tolerant JSON file I/O for sidecar and cache files.

Reads never raise: missing or corrupted files log a warning and yield the
caller's default. Writes go through a temp file and ``os.replace`` so a crash
never leaves a half-written sidecar behind.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def dump_json_text(obj: Any, *, indent: int = 2) -> str:
    """Render JSON exactly as it is written to disk.

    Output is deterministic for equal input so repeated writes of an
    unchanged object are byte-identical.
    """
    return json.dumps(obj, indent=indent, ensure_ascii=False) + "\n"


def safe_json_load(path: Path, default: T) -> Any | T:
    """Load JSON file with graceful error handling.

    Args:
        path: Path to JSON file
        default: Value to return if missing, unreadable or corrupted

    Returns:
        Parsed JSON data, or default on any error

    Example:
        >>> data = safe_json_load(Path("order.json"), default={})
    """
    if not path.exists():
        return default

    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        logger.warning("Corrupted JSON in %s: %s (using default)", path, e)
        return default
    except OSError as e:
        logger.warning("Failed to read %s: %s (using default)", path, e)
        return default


def safe_json_dump(
    obj: Any,
    path: Path,
    *,
    indent: int = 2,
    atomic: bool = True,
) -> bool:
    """Write JSON file with crash tolerance.

    Uses atomic write (temp file + rename) and creates parent directories.

    Args:
        obj: Object to serialize
        path: Destination path
        indent: JSON indentation (default: 2)
        atomic: Use atomic write via temp file (default: True)

    Returns:
        True if successful, False on error
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        content = dump_json_text(obj, indent=indent)

        if atomic:
            fd, tmp_path = tempfile.mkstemp(
                suffix=".tmp",
                prefix=path.stem + "_",
                dir=path.parent,
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(content)
                os.replace(tmp_path, path)
            except Exception:
                try:
                    os.unlink(tmp_path)
                except OSError:
                    pass
                raise
        else:
            with open(path, "w", encoding="utf-8") as f:
                f.write(content)

        return True
    except OSError as e:
        logger.error("Failed to write %s: %s", path, e)
        return False
    except (TypeError, ValueError) as e:
        logger.error("Failed to serialize JSON for %s: %s", path, e)
        return False
