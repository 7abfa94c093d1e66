"""Structural Generator: content tree to navigation items."""

from navsync.structure.generator import StructuralGenerator
from navsync.structure.groups import GroupExtractor, remove_by_source
from navsync.structure.links import build_external_items, is_valid_external_link
from navsync.structure.paths import (
    ExclusionList,
    directory_link,
    file_link,
    find_gitbook_roots,
    view_route,
)

__all__ = [
    "ExclusionList",
    "GroupExtractor",
    "StructuralGenerator",
    "build_external_items",
    "directory_link",
    "file_link",
    "find_gitbook_roots",
    "is_valid_external_link",
    "remove_by_source",
    "view_route",
]
