"""Cache Layer: two-tier navigation cache per language.

- Memory tier: the last generated RouteMap with its timestamp, fresh for
  ``cache_ttl`` seconds.
- File tier: ``<cache_dir>/sidebar_<lang>.json`` snapshots, fresh while
  younger than ``cache_ttl`` and newer than every content and sidecar file.

Usage is two-phase. ``prebuild()`` must be awaited once, for example at
startup; afterwards ``get_sync()`` only reads what is cached and schedules a
background regeneration when the data is stale. A regeneration requested
while one is already running for the same language is dropped.
"""

import asyncio
import logging
import os
import time
from collections.abc import Coroutine
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from navsync.context import NavContext
from navsync.errors import ErrorCode, NavsyncError
from navsync.pipeline import generate, route_map_from_dict, route_map_to_dict
from navsync.structure.paths import should_skip_dir
from navsync.types import RouteMap
from navsync.utils.serialization import safe_json_dump, safe_json_load

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CacheEntry:
    route_map: RouteMap
    created_at: float


def _newest_mtime_sync(roots: list[Path], suffixes: tuple[str, ...]) -> float:
    newest = 0.0
    for root in roots:
        if not root.exists():
            continue
        try:
            newest = max(newest, root.stat().st_mtime)
        except OSError:
            continue
        if root.is_file():
            continue
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = [d for d in dirnames if not should_skip_dir(d)]
            try:
                newest = max(newest, os.stat(dirpath).st_mtime)
            except OSError:
                pass
            for name in filenames:
                if not name.endswith(suffixes):
                    continue
                try:
                    newest = max(newest, os.stat(os.path.join(dirpath, name)).st_mtime)
                except OSError:
                    pass
    return newest


class NavigationCache:
    """Memory and file cache in front of ``generate()``.

    Example:
        >>> cache = NavigationCache(NavContext.initialize(load_settings()))
        >>> await cache.prebuild()
        >>> cache.get_sync("en")["/en/"]
    """

    def __init__(self, context: NavContext) -> None:
        self.context = context
        self.ttl = context.settings.cache_ttl
        self.cache_dir = Path(context.settings.cache_dir).resolve()
        self._memory: dict[str, CacheEntry] = {}
        self._in_flight: dict[str, asyncio.Task[RouteMap]] = {}
        self._prebuilt: set[str] = set()

    # =========================================================================
    # Accessors
    # =========================================================================

    def configured_languages(self) -> list[str]:
        return self.context.languages

    def cache_key(self, lang: str) -> str:
        return f"sidebar_{lang or 'root'}"

    def snapshot_path(self, lang: str) -> Path:
        return self.cache_dir / f"{self.cache_key(lang)}.json"

    def is_generating(self, lang: str) -> bool:
        task = self._in_flight.get(lang)
        return task is not None and not task.done()

    async def prebuild(self, languages: list[str] | None = None) -> dict[str, RouteMap]:
        """Generate and cache every requested language; required before get_sync()."""
        langs = languages if languages is not None else self.configured_languages()
        for lang in langs:
            self.context.require_language(lang)
        results = await asyncio.gather(*(self.refresh(lang) for lang in langs))
        self._prebuilt.update(langs)
        return dict(zip(langs, results, strict=True))

    def get_sync(self, lang: str) -> RouteMap:
        """Best-effort synchronous read of cached navigation.

        Returns fresh memory data, else a fresh file snapshot, else stale
        data, else an empty map. Stale reads schedule a background
        regeneration when an event loop is running.

        Raises:
            NavsyncError: LANGUAGE_NOT_CONFIGURED, or NOT_PREBUILT when
                prebuild() never ran for ``lang``
        """
        self.context.require_language(lang)
        if lang not in self._prebuilt:
            raise NavsyncError(ErrorCode.NOT_PREBUILT, context={"lang": lang})

        entry = self._memory.get(lang)
        if entry is not None and self._is_fresh(entry):
            return entry.route_map

        snapshot = self._load_snapshot(lang)
        if snapshot is not None and self._snapshot_is_fresh(lang):
            self._memory[lang] = CacheEntry(snapshot, time.time())
            return snapshot

        self.trigger_regeneration(lang)
        if entry is not None:
            return entry.route_map
        return snapshot or {}

    def get(self, lang: str) -> Coroutine[Any, Any, RouteMap]:
        """Read-through access; raises synchronously for an unknown language."""
        self.context.require_language(lang)
        return self._get(lang)

    async def _get(self, lang: str) -> RouteMap:
        entry = self._memory.get(lang)
        if entry is not None and self._is_fresh(entry):
            return entry.route_map
        if self._snapshot_is_fresh(lang):
            snapshot = self._load_snapshot(lang)
            if snapshot is not None:
                self._memory[lang] = CacheEntry(snapshot, time.time())
                return snapshot
        return await self.refresh(lang)

    # =========================================================================
    # Regeneration
    # =========================================================================

    async def refresh(self, lang: str) -> RouteMap:
        """Regenerate now, joining a pass already in flight for ``lang``."""
        task = self._in_flight.get(lang)
        if task is None or task.done():
            task = asyncio.create_task(self._regenerate(lang))
            self._in_flight[lang] = task
        return await asyncio.shield(task)

    def trigger_regeneration(self, lang: str) -> asyncio.Task[RouteMap] | None:
        """Start a background pass unless one is running or no loop is available."""
        if self.is_generating(lang):
            logger.debug("Regeneration for %r already in flight, dropping trigger", lang)
            return None
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop, serving stale navigation for %r", lang)
            return None
        task = loop.create_task(self._regenerate(lang))
        task.add_done_callback(self._log_background_failure)
        self._in_flight[lang] = task
        return task

    @staticmethod
    def _log_background_failure(task: asyncio.Task[RouteMap]) -> None:
        # Nobody may await a triggered task, so its error is retrieved here
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("Background regeneration failed, serving stale navigation: %s", error)

    async def _regenerate(self, lang: str) -> RouteMap:
        try:
            route_map = await generate(self.context, lang)
            self._memory[lang] = CacheEntry(route_map, time.time())
            await asyncio.to_thread(self._write_snapshot, lang, route_map)
            return route_map
        except NavsyncError:
            raise
        except Exception as e:
            logger.exception("Navigation generation failed for %r", lang)
            raise NavsyncError(
                ErrorCode.GENERATION_FAILED, context={"lang": lang, "detail": str(e)}, cause=e
            ) from e
        finally:
            self._in_flight.pop(lang, None)

    def invalidate(self, lang: str | None = None) -> None:
        """Drop memory and file caches for one language, or all of them."""
        langs = [lang] if lang is not None else self.configured_languages()
        for name in langs:
            self._memory.pop(name, None)
            try:
                self.snapshot_path(name).unlink()
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.warning("Could not remove cache snapshot for %r: %s", name, e)
        logger.debug("Invalidated navigation cache for %s", ", ".join(langs))

    # =========================================================================
    # Freshness
    # =========================================================================

    def _is_fresh(self, entry: CacheEntry) -> bool:
        return time.time() - entry.created_at < self.ttl

    def _watched_roots(self, lang: str) -> list[Path]:
        return [
            self.context.language_root(lang),
            self.context.resolver.global_config_path,
            self.context.overrides.language_dir(lang),
            self.context.metadata.language_dir(lang),
        ]

    def newest_source_mtime(self, lang: str) -> float:
        return _newest_mtime_sync(self._watched_roots(lang), (".md", ".json", ".yml", ".yaml"))

    def needs_regeneration(self, lang: str) -> bool:
        """Whether content, global config or sidecars changed since the snapshot."""
        path = self.snapshot_path(lang)
        try:
            snapshot_mtime = path.stat().st_mtime
        except OSError:
            return True
        return self.newest_source_mtime(lang) > snapshot_mtime

    def _snapshot_is_fresh(self, lang: str) -> bool:
        path = self.snapshot_path(lang)
        try:
            snapshot_mtime = path.stat().st_mtime
        except OSError:
            return False
        if time.time() - snapshot_mtime >= self.ttl:
            return False
        return not self.needs_regeneration(lang)

    def _load_snapshot(self, lang: str) -> RouteMap | None:
        data = safe_json_load(self.snapshot_path(lang), default=None)
        if not isinstance(data, dict):
            return None
        return route_map_from_dict(data)

    def _write_snapshot(self, lang: str, route_map: RouteMap) -> None:
        safe_json_dump(route_map_to_dict(route_map), self.snapshot_path(lang))
