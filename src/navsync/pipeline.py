"""Per-language generation pipeline.

Stages run strictly in sequence for one language, because each stage
rewrites sidecar files the next one reads:

1. Structural generation of every view
2. Synchronization of overrides, then reapplying them onto the views
3. Cleanup of sidecars for deleted directories, then the orphan archive pass
4. Sorting by the synchronized order maps

Views are the language root (route ``/<lang>/``) and every directory whose
own ``index.md`` declares ``root: true`` (route ``/<lang>/<path>/``).
"""

import asyncio
import logging
import os
from collections.abc import Awaitable
from dataclasses import dataclass
from pathlib import Path

from navsync.context import NavContext
from navsync.errors import ErrorCode, NavsyncError
from navsync.overrides import PathKeyProcessor
from navsync.overrides.synchronizer import split_container
from navsync.sorter import sort_items
from navsync.structure import ExclusionList, StructuralGenerator, view_route
from navsync.structure.paths import should_skip_dir
from navsync.types import ROOT_SIGNATURE, NavigationItem, OverrideKind, RouteMap
from navsync.utils.fs import INDEX_FILE

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ViewSpec:
    """One independent navigation view."""

    route: str
    path: Path
    signature: str


def _index_directories_sync(lang_root: Path) -> list[Path]:
    found = []
    for dirpath, dirnames, filenames in os.walk(lang_root):
        dirnames[:] = sorted(d for d in dirnames if not should_skip_dir(d))
        if INDEX_FILE in filenames and Path(dirpath) != lang_root:
            found.append(Path(dirpath).resolve())
    return found


async def discover_views(
    context: NavContext,
    lang: str,
    exclusions: ExclusionList,
) -> list[ViewSpec]:
    """The language root plus every root-flagged, visible directory."""
    lang_root = context.language_root(lang)
    keys = PathKeyProcessor(lang_root)
    views = [ViewSpec(view_route(lang, lang_root, lang_root), lang_root, ROOT_SIGNATURE)]

    for directory in await asyncio.to_thread(_index_directories_sync, lang_root):
        if exclusions.is_excluded(directory):
            continue
        metadata = await context.resolver.get_local_metadata(directory / INDEX_FILE)
        if metadata.get("root") is not True:
            continue
        config = await context.resolver.get_effective_config(
            directory / INDEX_FILE, lang, context.settings.dev_mode
        )
        if config.hidden:
            continue
        views.append(
            ViewSpec(view_route(lang, lang_root, directory), directory, keys.signature_for(directory))
        )
    return views


def filter_hidden(items: list[NavigationItem]) -> list[NavigationItem]:
    """Drop hidden items at every depth."""
    visible = []
    for item in items:
        if item.hidden:
            continue
        if item.items:
            item.items = filter_hidden(item.items)
        visible.append(item)
    return visible


def sort_view(
    context: NavContext,
    items: list[NavigationItem],
    lang: str,
    signature: str,
) -> list[NavigationItem]:
    """Order every scope of a view by its synchronized order map."""
    keys = PathKeyProcessor(context.language_root(lang))

    def order_for(item: NavigationItem) -> dict:
        return context.overrides.read(OverrideKind.ORDER, lang, keys.child_signature(item, signature))

    container, content = split_container(items)
    ordered = sort_items(content, context.overrides.read(OverrideKind.ORDER, lang, signature), order_for=order_for)
    if container is not None:
        container.items = ordered
        return [container]
    return ordered


async def _generate(context: NavContext, lang: str) -> RouteMap:
    settings = context.settings
    lang_root = context.language_root(lang)
    if not lang_root.is_dir():
        logger.warning("Language directory %s does not exist", lang_root)
        return {}

    context.resolver.clear_cache()
    exclusions = await context.exclusions_for(lang)
    generator = StructuralGenerator(context.resolver, exclusions=exclusions)
    views = await discover_views(context, lang, exclusions)

    async def build(view: ViewSpec) -> list[NavigationItem]:
        config = await context.resolver.get_effective_config(
            view.path / INDEX_FILE, lang, settings.dev_mode
        )
        return await generator.generate_view(view.path, config, lang, dev_mode=settings.dev_mode)

    generated = await asyncio.gather(*(build(view) for view in views))

    active: set[str] = set()
    for view, items in zip(views, generated, strict=True):
        report = await asyncio.to_thread(
            context.synchronizer.synchronize, items, lang, view.signature, lang_root=lang_root
        )
        active.update(report.signatures)
        await asyncio.to_thread(
            context.synchronizer.reapply, items, lang, view.signature, lang_root=lang_root
        )

    outdated = await asyncio.to_thread(context.signatures.identify_outdated, lang)
    if outdated:
        await asyncio.to_thread(context.cleanup.cleanup, lang, outdated)
    for signature in sorted(active):
        await asyncio.to_thread(context.archive.archive_orphans, lang, signature)

    route_map: RouteMap = {}
    for view, items in zip(views, generated, strict=True):
        ordered = sort_view(context, items, lang, view.signature)
        route_map[view.route] = filter_hidden(ordered)

    logger.info("Generated %d navigation view(s) for %r", len(route_map), lang)
    return route_map


def generate(context: NavContext | None, language: str) -> Awaitable[RouteMap]:
    """Generate the navigation route map for one language.

    Caller misuse raises immediately, before anything is awaited.

    Args:
        context: Initialized NavContext
        language: A configured language code

    Returns:
        Awaitable resolving to route path -> ordered navigation items

    Raises:
        NavsyncError: NOT_INITIALIZED without a context,
            LANGUAGE_NOT_CONFIGURED for an unknown language

    Example:
        >>> context = NavContext.initialize(load_settings())
        >>> route_map = await generate(context, "en")
        >>> [item.text for item in route_map["/en/"]]
        ['Guide', 'Reference']
    """
    if context is None:
        raise NavsyncError(
            ErrorCode.NOT_INITIALIZED,
            context={"detail": "generate() needs a NavContext"},
        )
    context.require_language(language)
    return _generate(context, language)


def route_map_to_dict(route_map: RouteMap) -> dict[str, list[dict]]:
    return {route: [item.to_dict() for item in items] for route, items in route_map.items()}


def route_map_from_dict(data: dict) -> RouteMap:
    return {
        str(route): [NavigationItem.from_dict(i) for i in items if isinstance(i, dict)]
        for route, items in data.items()
        if isinstance(items, list)
    }
