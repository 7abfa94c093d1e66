"""Core data types for navigation generation and override tracking.

NavigationItem is the mutable working node the pipeline stages pass along.
EffectiveDirectoryConfig is recomputed on every pass and never persisted.
OverrideKind and MetadataEntry describe the sidecar files on disk.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Any, TypeAlias

# Reserved override key for a directory's own value
SELF_KEY = "_self_"

# Signature of a language root directory
ROOT_SIGNATURE = "_root"

EXTERNAL_KEY_PREFIX = "external:"

# Sort position of items without any priority (largest JSON-safe integer)
MAX_ORDER = 2**53 - 1


@dataclass(slots=True)
class NavigationItem:
    """One entry in the generated navigation tree.

    Directories always carry an ``items`` list (possibly empty) unless they
    are link-only leaves, which carry ``None`` like files do.
    """

    text: str
    link: str | None = None
    items: list["NavigationItem"] | None = None
    collapsed: bool | None = None
    hidden: bool = False
    priority: int | None = None
    is_directory: bool = False
    is_root: bool = False
    path_key: str = ""
    """Key of this item relative to its parent's override scope."""
    source_path: Path | None = None
    """Absolute path of the backing file or directory, if any."""

    @property
    def is_external(self) -> bool:
        return self.path_key.startswith(EXTERNAL_KEY_PREFIX)

    def to_dict(self) -> dict[str, Any]:
        """Public shape consumed by the site theme."""
        data: dict[str, Any] = {"text": self.text}
        if self.link is not None:
            data["link"] = self.link
        if self.items is not None:
            data["items"] = [child.to_dict() for child in self.items]
        if self.collapsed is not None:
            data["collapsed"] = self.collapsed
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NavigationItem":
        """Rebuild an item from its public shape (cache snapshots)."""
        children = data.get("items")
        return cls(
            text=str(data.get("text", "")),
            link=data.get("link"),
            items=[cls.from_dict(c) for c in children] if isinstance(children, list) else None,
            collapsed=data.get("collapsed"),
            is_directory=isinstance(children, list),
        )


RouteMap: TypeAlias = dict[str, list[NavigationItem]]


@dataclass(frozen=True, slots=True)
class GroupConfig:
    """A named group lifting a sub-path to the top level of a view."""

    title: str
    path: str
    priority: int | None = None
    max_depth: int | None = None
    collapsed: bool | None = None


@dataclass(frozen=True, slots=True)
class ExternalLinkConfig:
    """A static link to an external site injected at a view's top level."""

    text: str
    link: str
    priority: int = 0
    hidden: bool = False


@dataclass(frozen=True, slots=True)
class EffectiveDirectoryConfig:
    """Resolved per-directory settings after merging every config source."""

    path: Path
    """Absolute path of the directory."""
    lang: str
    title: str
    root: bool = False
    hidden: bool = False
    priority: int = 0
    max_depth: int = 3
    collapsed: bool = False
    item_order: dict[str, int] = field(default_factory=dict)
    groups: tuple[GroupConfig, ...] = ()
    external_links: tuple[ExternalLinkConfig, ...] = ()
    dev_mode: bool = False


class OverrideKind(StrEnum):
    """Override kinds; the value is the sidecar file stem."""

    LABEL = "locales"
    ORDER = "order"
    COLLAPSE = "collapsed"
    VISIBILITY = "hidden"

    @property
    def filename(self) -> str:
        return f"{self.value}.json"

    @property
    def directories_only(self) -> bool:
        """Collapse state only makes sense for items with children."""
        return self is OverrideKind.COLLAPSE

    def default_for(self, item: NavigationItem) -> Any:
        """System default for this kind, derived from the generated item."""
        match self:
            case OverrideKind.LABEL:
                return item.text
            case OverrideKind.ORDER:
                return item.priority if item.priority is not None else MAX_ORDER
            case OverrideKind.COLLAPSE:
                return item.collapsed if item.collapsed is not None else True
            case OverrideKind.VISIBILITY:
                return False


@dataclass(slots=True)
class MetadataEntry:
    """Provenance of one override value."""

    value_hash: str
    is_user_set: bool = False
    is_active_in_structure: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "valueHash": self.value_hash,
            "isUserSet": self.is_user_set,
            "isActiveInStructure": self.is_active_in_structure,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MetadataEntry":
        return cls(
            value_hash=str(data.get("valueHash", "")),
            is_user_set=bool(data.get("isUserSet", False)),
            is_active_in_structure=bool(data.get("isActiveInStructure", True)),
        )
