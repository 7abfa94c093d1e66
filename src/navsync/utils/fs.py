"""Async filesystem access for the content walk.

Blocking calls run in worker threads via ``asyncio.to_thread`` so sibling
directories can be scanned concurrently on one event loop. Every helper
treats "not found" and other OS errors as empty results.
"""

import asyncio
import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIX = ".md"
INDEX_FILE = "index.md"


@dataclass(frozen=True, slots=True)
class DirEntry:
    """One entry of a directory listing."""

    name: str
    path: Path
    is_dir: bool


def is_markdown(name: str) -> bool:
    return name.lower().endswith(MARKDOWN_SUFFIX)


def _list_entries_sync(directory: Path) -> list[DirEntry]:
    try:
        with os.scandir(directory) as it:
            entries = [
                DirEntry(name=e.name, path=Path(e.path), is_dir=e.is_dir())
                for e in it
            ]
    except FileNotFoundError:
        return []
    except OSError as e:
        logger.warning("Cannot list %s: %s", directory, e)
        return []
    return sorted(entries, key=lambda e: e.name)


async def list_entries(directory: Path) -> list[DirEntry]:
    """List a directory sorted by name; missing or unreadable yields []."""
    return await asyncio.to_thread(_list_entries_sync, directory)


def _read_text_sync(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Cannot read %s: %s", path, e)
        return None


async def read_text(path: Path) -> str | None:
    """Read a UTF-8 file; None when missing or unreadable."""
    return await asyncio.to_thread(_read_text_sync, path)


async def is_file(path: Path) -> bool:
    return await asyncio.to_thread(path.is_file)


async def is_dir(path: Path) -> bool:
    return await asyncio.to_thread(path.is_dir)
