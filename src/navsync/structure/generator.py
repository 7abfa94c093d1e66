"""Structural Generator: content directories to navigation items.

Walks one navigation view at a time. A view is either the language root or a
directory whose own ``index.md`` declares ``root: true``.

- A root view produces a single flattened container item holding all of its
  nested content.
- Any other root-flagged directory met inside a view becomes a link-only
  stub; it gets its own view instead of being expanded twice.
- The view's direct children are at depth 0. A directory at a depth below
  its ``maxDepth`` is expanded; at or beyond it, the directory becomes a
  link to its index document, or is omitted when it has none.
- Directories without items and without an index document are pruned.
"""

import asyncio
import logging
from pathlib import Path

from navsync.resolver import ConfigResolver
from navsync.sorter import sort_items
from navsync.structure.groups import GroupExtractor
from navsync.structure.items import build_file_item
from navsync.structure.links import build_external_items
from navsync.structure.paths import ExclusionList, directory_link, should_skip_dir
from navsync.types import EffectiveDirectoryConfig, NavigationItem
from navsync.utils.fs import INDEX_FILE, DirEntry, is_file, is_markdown, list_entries

logger = logging.getLogger(__name__)


class StructuralGenerator:
    """Builds the ordered navigation-item tree of a view.

    Example:
        >>> resolver = ConfigResolver(Path("docs"))
        >>> generator = StructuralGenerator(resolver)
        >>> view = Path("docs/en/guide")
        >>> config = await resolver.get_effective_config(view / "index.md", "en")
        >>> items = await generator.generate_view(view, config, "en")
    """

    def __init__(
        self,
        resolver: ConfigResolver,
        *,
        exclusions: ExclusionList | None = None,
    ) -> None:
        self.resolver = resolver
        self.exclusions = exclusions or ExclusionList()
        self.groups = GroupExtractor(self)

    async def generate_view(
        self,
        view_path: Path,
        config: EffectiveDirectoryConfig,
        lang: str,
        *,
        dev_mode: bool = False,
    ) -> list[NavigationItem]:
        """Generate the items of the view rooted at ``view_path``.

        Args:
            view_path: Directory the view starts from
            config: The directory's effective config
            lang: Language code
            dev_mode: Include drafts

        Returns:
            One flattened container item for a root view, otherwise the
            view's top-level items; sorted by generated priority
        """
        view_path = view_path.resolve()
        children = await self._scan(view_path, config, lang, depth=0, dev_mode=dev_mode)
        children.extend(build_external_items(config.external_links, where=str(view_path)))
        children = await self.groups.apply(children, config, view_path, lang, dev_mode)

        if not config.root:
            return sort_items(children)

        link = None
        if await is_file(view_path / INDEX_FILE):
            link = directory_link(lang, self.resolver.language_root(lang), view_path)
        container = NavigationItem(
            text=config.title,
            link=link,
            items=sort_items(children),
            collapsed=config.collapsed,
            priority=config.priority,
            is_directory=True,
            is_root=True,
            path_key="",
            source_path=view_path,
        )
        return [container]

    async def _scan(
        self,
        directory: Path,
        config: EffectiveDirectoryConfig,
        lang: str,
        *,
        depth: int,
        dev_mode: bool,
    ) -> list[NavigationItem]:
        entries = await list_entries(directory)
        results = await asyncio.gather(
            *(self._process_entry(entry, config, lang, depth=depth, dev_mode=dev_mode)
              for entry in entries)
        )
        return [item for item in results if item is not None]

    async def _process_entry(
        self,
        entry: DirEntry,
        parent_config: EffectiveDirectoryConfig,
        lang: str,
        *,
        depth: int,
        dev_mode: bool,
    ) -> NavigationItem | None:
        path = entry.path.resolve()
        if self.exclusions.is_excluded(path):
            logger.debug("Skipping excluded path %s", path)
            return None

        if entry.is_dir:
            if should_skip_dir(entry.name):
                return None
            return await self._process_directory(
                path, parent_config, lang, depth=depth, dev_mode=dev_mode
            )

        if not is_markdown(entry.name) or entry.name.lower() == INDEX_FILE:
            return None
        return await build_file_item(
            path,
            parent_config,
            resolver=self.resolver,
            lang_root=self.resolver.language_root(lang),
        )

    async def _process_directory(
        self,
        directory: Path,
        parent_config: EffectiveDirectoryConfig,
        lang: str,
        *,
        depth: int,
        dev_mode: bool,
    ) -> NavigationItem | None:
        index = directory / INDEX_FILE
        has_index = await is_file(index)
        config = await self.resolver.get_effective_config(index, lang, dev_mode)
        if config.hidden:
            return None

        link = None
        if has_index:
            link = directory_link(lang, self.resolver.language_root(lang), directory)

        # Inherited priorities are not the directory's own choice
        local = await self.resolver.get_local_metadata(index) if has_index else {}
        if "priority" in local:
            priority = config.priority
        else:
            priority = parent_config.item_order.get(directory.name, config.priority)

        def make(items: list[NavigationItem] | None, *, is_root: bool = False) -> NavigationItem:
            return NavigationItem(
                text=config.title,
                link=link,
                items=items,
                collapsed=config.collapsed if items is not None else None,
                priority=priority,
                is_directory=True,
                is_root=is_root,
                path_key=directory.name,
                source_path=directory,
            )

        if config.root:
            # Expanded by its own view
            return make([], is_root=True) if link else None

        if depth >= config.max_depth:
            return make(None) if link else None

        children = await self._scan(directory, config, lang, depth=depth + 1, dev_mode=dev_mode)
        if not children and link is None:
            logger.debug("Pruning empty directory %s", directory)
            return None
        return make(sort_items(children))
