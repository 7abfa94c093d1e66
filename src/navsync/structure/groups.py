"""Group extraction.

A view's config may declare groups, each naming a sub-path relative to the
view directory. Each group is generated on its own, exposed as a top-level
item under the group's title, and removed from wherever it would otherwise
appear nested so it shows up exactly once.
"""

import dataclasses
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from navsync.structure.paths import directory_link
from navsync.types import EffectiveDirectoryConfig, GroupConfig, NavigationItem
from navsync.utils.fs import INDEX_FILE, is_dir, is_file

if TYPE_CHECKING:
    from navsync.structure.generator import StructuralGenerator

logger = logging.getLogger(__name__)


def remove_by_source(items: list[NavigationItem], source: Path) -> list[NavigationItem]:
    """Drop every item backed by ``source``, at any depth.

    Example:
        >>> a = NavigationItem(text="a", source_path=Path("/d/a"))
        >>> b = NavigationItem(text="b", items=[a], is_directory=True)
        >>> remove_by_source([b], Path("/d/a"))[0].items
        []
    """
    kept = []
    for item in items:
        if item.source_path == source:
            continue
        if item.items:
            item.items = remove_by_source(item.items, source)
        kept.append(item)
    return kept


class GroupExtractor:
    """Lifts configured groups out of a generated view."""

    def __init__(self, generator: "StructuralGenerator") -> None:
        self._generator = generator

    async def group_config(
        self,
        group: GroupConfig,
        group_dir: Path,
        lang: str,
        dev_mode: bool,
    ) -> EffectiveDirectoryConfig:
        """Config for a group: its directory's own config with the group's settings on top."""
        base = await self._generator.resolver.get_effective_config(
            group_dir / INDEX_FILE, lang, dev_mode
        )
        return dataclasses.replace(
            base,
            title=group.title,
            root=False,
            priority=group.priority if group.priority is not None else base.priority,
            max_depth=group.max_depth if group.max_depth is not None else base.max_depth,
            groups=(),
            external_links=(),
        )

    async def build_group(
        self,
        group: GroupConfig,
        view_path: Path,
        lang: str,
        dev_mode: bool,
    ) -> NavigationItem | None:
        group_dir = (view_path / group.path).resolve()
        if self._generator.exclusions.is_excluded(group_dir):
            logger.debug("Group %r points into an external root, skipping", group.title)
            return None
        if not await is_dir(group_dir):
            logger.warning(
                "Group %r path %r is not a directory under %s", group.title, group.path, view_path
            )
            return None

        config = await self.group_config(group, group_dir, lang, dev_mode)
        children = await self._generator.generate_view(group_dir, config, lang, dev_mode=dev_mode)

        lang_root = self._generator.resolver.language_root(lang)
        link = None
        if await is_file(group_dir / INDEX_FILE):
            link = directory_link(lang, lang_root, group_dir)

        return NavigationItem(
            text=group.title,
            link=link,
            items=children,
            collapsed=group.collapsed if group.collapsed is not None else True,
            priority=group.priority,
            is_directory=True,
            path_key=group.path.strip("/").removeprefix("./"),
            source_path=group_dir,
        )

    async def apply(
        self,
        items: list[NavigationItem],
        view_config: EffectiveDirectoryConfig,
        view_path: Path,
        lang: str,
        dev_mode: bool,
    ) -> list[NavigationItem]:
        """Return ``items`` with every group removed from its nested position
        and appended as a top-level item."""
        if not view_config.groups:
            return items

        extracted = []
        for group in view_config.groups:
            item = await self.build_group(group, view_path, lang, dev_mode)
            if item is None:
                continue
            if item.source_path is not None:
                items = remove_by_source(items, item.source_path)
            extracted.append(item)
        return items + extracted
