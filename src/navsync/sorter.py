"""Deterministic ordering of navigation items.

Each item's sort priority is, in order of precedence:

1. an explicit value from the scope's order map (an int or a numeric string),
   looked up by scope key, path key, file stem, then display text
2. the priority the generator assigned
3. for a directory, the smallest priority among its children
4. MAX_ORDER

Items sort ascending with a case-insensitive tie-break on path key, then
text. Sorting is stable, recursive and idempotent.
"""

from collections.abc import Callable, Mapping
from pathlib import PurePosixPath
from typing import Any, TypeAlias

from navsync.types import MAX_ORDER, NavigationItem

OrderMap: TypeAlias = Mapping[str, Any]


def parse_order_value(value: Any) -> int | None:
    """Accept ints and numeric strings; everything else is "no order".

    Example:
        >>> parse_order_value("3"), parse_order_value(2.0), parse_order_value(True)
        (3, 2, None)
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        stripped = value.strip()
        if stripped.lstrip("-").isdigit():
            return int(stripped)
    return None


def order_lookup_keys(item: NavigationItem) -> list[str]:
    keys: list[str] = []
    if item.path_key:
        if item.is_directory and not item.is_external:
            path = item.path_key.strip("/")
            keys.extend([f"{path}/", path])
        else:
            name = item.path_key if item.is_external else PurePosixPath(item.path_key).name
            keys.extend([item.path_key, name, PurePosixPath(name).stem])
    keys.append(item.text)
    return list(dict.fromkeys(k for k in keys if k))


def explicit_order(item: NavigationItem, order_map: OrderMap | None) -> int | None:
    if not order_map:
        return None
    for key in order_lookup_keys(item):
        if key in order_map:
            value = parse_order_value(order_map[key])
            if value is not None:
                return value
    return None


def effective_priority(item: NavigationItem, order_map: OrderMap | None = None) -> int:
    """Priority used to position ``item`` within its scope."""
    explicit = explicit_order(item, order_map)
    if explicit is not None:
        return explicit
    if item.priority is not None:
        return item.priority
    if item.is_directory and item.items:
        return min(effective_priority(child) for child in item.items)
    return MAX_ORDER


def _sort_key(item: NavigationItem, order_map: OrderMap | None) -> tuple[int, str, str]:
    return (
        effective_priority(item, order_map),
        (item.path_key or item.text).casefold(),
        item.text.casefold(),
    )


def sort_items(
    items: list[NavigationItem],
    order_map: OrderMap | None = None,
    *,
    order_for: Callable[[NavigationItem], OrderMap | None] | None = None,
) -> list[NavigationItem]:
    """Sort a scope and, recursively, every child scope.

    Args:
        items: Items of one scope
        order_map: Explicit order values for this scope
        order_for: Returns the order map for an item's child scope; without
            it children are ordered by generated priority alone

    Returns:
        A new sorted list; child lists are replaced in place

    Example:
        >>> items = [NavigationItem(text=t, path_key=t) for t in "CADB"]
        >>> [i.text for i in sort_items(items, {"A": 2, "B": 1})]
        ['B', 'A', 'C', 'D']
    """
    for item in items:
        if item.items:
            child_order = order_for(item) if order_for is not None else None
            item.items = sort_items(item.items, child_order, order_for=order_for)
    return sorted(items, key=lambda item: _sort_key(item, order_map))
