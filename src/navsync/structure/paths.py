"""Link construction and path exclusion for the content walk."""

import asyncio
import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

# Directories never walked, besides any dot-directory
SKIP_DIRS = frozenset({"node_modules", "__pycache__"})

# Marker file of a GitBook-imported documentation root
GITBOOK_MARKER = "SUMMARY.md"


def should_skip_dir(name: str) -> bool:
    return name.startswith(".") or name in SKIP_DIRS


def _route_prefix(lang: str) -> str:
    return f"/{lang}/" if lang else "/"


def file_link(lang: str, lang_root: Path, file_path: Path) -> str:
    """Site route of a markdown document.

    Example:
        >>> file_link("en", Path("/d/en"), Path("/d/en/guide/setup.md"))
        '/en/guide/setup.html'
    """
    rel = file_path.relative_to(lang_root).with_suffix("").as_posix()
    return f"{_route_prefix(lang)}{rel}.html"


def directory_link(lang: str, lang_root: Path, directory: Path) -> str:
    """Site route of a directory's index document.

    Example:
        >>> directory_link("en", Path("/d/en"), Path("/d/en/guide"))
        '/en/guide/'
    """
    rel = directory.relative_to(lang_root).as_posix()
    if rel == ".":
        return _route_prefix(lang)
    return f"{_route_prefix(lang)}{rel}/"


def view_route(lang: str, lang_root: Path, view_path: Path) -> str:
    """Route-map key of a navigation view rooted at ``view_path``."""
    return directory_link(lang, lang_root, view_path)


@dataclass(frozen=True, slots=True)
class ExclusionList:
    """Externally imported documentation roots skipped at every depth."""

    roots: tuple[Path, ...] = ()

    def is_excluded(self, path: Path) -> bool:
        """True when ``path`` equals a root or lies beneath one."""
        return any(path == root or path.is_relative_to(root) for root in self.roots)

    def extend(self, roots: Iterable[Path]) -> "ExclusionList":
        merged = dict.fromkeys(self.roots)
        merged.update(dict.fromkeys(Path(r).resolve() for r in roots))
        return ExclusionList(tuple(merged))


def _find_gitbook_roots_sync(base: Path) -> list[Path]:
    found: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(base):
        if GITBOOK_MARKER in filenames:
            found.append(Path(dirpath).resolve())
            # Everything below an imported root is excluded anyway
            dirnames.clear()
            continue
        dirnames[:] = [d for d in dirnames if not should_skip_dir(d)]
    return found


async def find_gitbook_roots(base: Path) -> list[Path]:
    """Directories under ``base`` that carry a GitBook SUMMARY.md."""
    roots = await asyncio.to_thread(_find_gitbook_roots_sync, base)
    if roots:
        logger.debug("Detected GitBook roots under %s: %s", base, roots)
    return roots
