"""Configuration Resolver.

Computes the EffectiveDirectoryConfig for a directory from, in increasing
precedence:

1. the ``defaults`` mapping of the global config file at the content root
2. each ancestor's ``index.md`` front matter, from the language root down,
   without the ancestor's ``root`` flag and ``title``
3. the target directory's own ``index.md`` front matter, unmodified

Resolution never raises. Missing or unreadable files contribute an empty
partial config and are logged.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any

import yaml

from navsync.resolver.frontmatter import parse_frontmatter
from navsync.resolver.sources import (
    NON_INHERITED_KEYS,
    ConfigSource,
    build_effective_config,
    merge_sources,
)
from navsync.types import EffectiveDirectoryConfig
from navsync.utils.fs import INDEX_FILE, read_text

logger = logging.getLogger(__name__)


def _load_global_config_sync(path: Path) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.debug("No global config at %s", path)
        return {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Failed to load global config %s: %s", path, e)
        return {}

    if not isinstance(data, dict):
        logger.warning("Global config %s is not a mapping, ignoring", path)
        return {}
    return data


class ConfigResolver:
    """Resolves effective directory configuration with per-path caching.

    Example:
        >>> resolver = ConfigResolver(Path("docs"))
        >>> config = await resolver.get_effective_config(
        ...     Path("docs/en/guide/index.md"), "en", dev_mode=False
        ... )
        >>> config.max_depth
        3
    """

    def __init__(self, docs_path: Path, *, global_config_name: str = ".sidebarrc.yml") -> None:
        self.docs_path = docs_path.resolve()
        self.global_config_path = self.docs_path / global_config_name
        self._frontmatter_cache: dict[Path, dict[str, Any]] = {}
        self._global_cache: dict[Path, dict[str, Any]] = {}

    def clear_cache(self) -> None:
        """Forget cached front matter and global config."""
        self._frontmatter_cache.clear()
        self._global_cache.clear()

    async def get_global_config(self) -> dict[str, Any]:
        path = self.global_config_path
        if path not in self._global_cache:
            self._global_cache[path] = await asyncio.to_thread(_load_global_config_sync, path)
        return self._global_cache[path]

    async def get_global_defaults(self) -> dict[str, Any]:
        defaults = (await self.get_global_config()).get("defaults")
        if defaults is None:
            return {}
        if not isinstance(defaults, dict):
            logger.warning("'defaults' in %s is not a mapping, ignoring", self.global_config_path)
            return {}
        return defaults

    async def get_local_metadata(self, path: Path) -> dict[str, Any]:
        """Front matter of one markdown file, cached by absolute path."""
        path = path.resolve()
        cached = self._frontmatter_cache.get(path)
        if cached is not None:
            return cached

        content = await read_text(path)
        data = parse_frontmatter(content, source=str(path)) if content else {}
        self._frontmatter_cache[path] = data
        return data

    def language_root(self, lang: str) -> Path:
        return self.docs_path / lang if lang else self.docs_path

    def ancestor_chain(self, directory: Path, lang: str) -> list[Path]:
        """Directories from the language root down to ``directory`` (inclusive).

        A directory outside the language root yields just itself.
        """
        lang_root = self.language_root(lang)
        directory = directory.resolve()
        try:
            relative = directory.relative_to(lang_root)
        except ValueError:
            return [directory]

        chain = [lang_root]
        current = lang_root
        for part in relative.parts:
            current = current / part
            chain.append(current)
        return chain

    async def collect_sources(self, directory: Path, lang: str) -> list[ConfigSource]:
        """Ordered partial sources for ``directory``, lowest precedence first."""
        chain = self.ancestor_chain(directory, lang)
        global_defaults = ConfigSource("global:defaults", dict(await self.get_global_defaults()))
        sources = [global_defaults.without(NON_INHERITED_KEYS)]

        metadata = await asyncio.gather(
            *(self.get_local_metadata(d / INDEX_FILE) for d in chain)
        )
        lang_root = self.language_root(lang)
        for ancestor, data in zip(chain[:-1], metadata[:-1], strict=True):
            name = f"ancestor:{_relative_name(ancestor, lang_root)}"
            sources.append(ConfigSource(name, dict(data)).without(NON_INHERITED_KEYS))

        sources.append(ConfigSource(f"target:{_relative_name(chain[-1], lang_root)}", dict(metadata[-1])))
        return sources

    async def get_effective_config(
        self,
        target_index_path: Path,
        lang: str,
        dev_mode: bool = False,
    ) -> EffectiveDirectoryConfig:
        """Resolve the effective configuration of a directory.

        Args:
            target_index_path: The directory's ``index.md`` (or the directory itself)
            lang: Language code, "" for a single-language corpus
            dev_mode: Whether drafts are visible

        Returns:
            Fully populated EffectiveDirectoryConfig
        """
        target = target_index_path.resolve()
        directory = target.parent if target.name == INDEX_FILE else target

        sources = await self.collect_sources(directory, lang)
        merged = merge_sources(sources)
        logger.debug(
            "Resolved %s from %s", directory, ", ".join(s.name for s in sources if s.data)
        )
        return build_effective_config(merged, directory=directory, lang=lang, dev_mode=dev_mode)


def _relative_name(path: Path, base: Path) -> str:
    try:
        rel = path.relative_to(base).as_posix()
    except ValueError:
        return path.as_posix()
    return rel if rel != "." else "."
