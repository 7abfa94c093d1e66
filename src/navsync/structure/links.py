"""External link injection."""

import logging
from collections.abc import Iterable

from navsync.types import EXTERNAL_KEY_PREFIX, ExternalLinkConfig, NavigationItem

logger = logging.getLogger(__name__)


def is_valid_external_link(link: ExternalLinkConfig) -> bool:
    return bool(link.text.strip()) and link.link.startswith(("http://", "https://"))


def build_external_items(
    links: Iterable[ExternalLinkConfig],
    *,
    where: str = "",
) -> list[NavigationItem]:
    """Turn configured external links into navigation items.

    Hidden links are dropped silently. Links without text or without an
    http(s) URL are dropped with a warning.
    """
    items = []
    for link in links:
        if link.hidden:
            continue
        if not is_valid_external_link(link):
            logger.warning("Skipping invalid external link in %s: %r", where, link)
            continue
        items.append(
            NavigationItem(
                text=link.text,
                link=link.link,
                priority=link.priority,
                path_key=f"{EXTERNAL_KEY_PREFIX}{link.text}",
            )
        )
    return items
