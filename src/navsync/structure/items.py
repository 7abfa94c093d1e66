"""Per-file navigation items."""

import logging
from pathlib import Path
from typing import Any

from navsync.resolver import ConfigResolver
from navsync.sorter import parse_order_value
from navsync.structure.paths import file_link
from navsync.types import EffectiveDirectoryConfig, NavigationItem

logger = logging.getLogger(__name__)


def _flag(metadata: dict[str, Any], key: str) -> bool:
    value = metadata.get(key)
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1")
    return bool(value)


async def build_file_item(
    path: Path,
    parent_config: EffectiveDirectoryConfig,
    *,
    resolver: ConfigResolver,
    lang_root: Path,
) -> NavigationItem | None:
    """Build the item for one markdown document.

    The document's front matter may set ``title``, ``hidden`` and
    ``priority``. Without a priority the parent's ``itemOrder`` entry for
    the file (by stem or full name) is used. Drafts only appear in dev mode.

    Returns:
        The item, or None when the document is hidden or a draft
    """
    metadata = await resolver.get_local_metadata(path)
    if _flag(metadata, "hidden"):
        return None
    if _flag(metadata, "draft") and not parent_config.dev_mode:
        logger.debug("Skipping draft %s", path)
        return None

    priority = parse_order_value(metadata.get("priority"))
    if priority is None:
        order = parent_config.item_order
        priority = order.get(path.stem, order.get(path.name))

    title = metadata.get("title")
    return NavigationItem(
        text=str(title) if title not in (None, "") else path.stem,
        link=file_link(parent_config.lang, lang_root, path),
        priority=priority,
        path_key=path.name,
        source_path=path,
    )
