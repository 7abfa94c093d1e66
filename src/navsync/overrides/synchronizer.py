"""Recursive synchronization over a generated view.

``synchronize`` walks the view top-down, reconciling all four override
kinds scope by scope and creating each directory's ``_self_`` entries on
first visit. ``reapply`` then reads the maps back and writes the resolved
label, collapse, visibility and order values onto the in-memory items.

Root stubs (root-flagged directories shown as links inside another view) are
reconciled as entries of their parent scope only; their own scope belongs to
their own view.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from navsync.overrides.keys import PathKeyProcessor
from navsync.overrides.store import MetadataStore, OverrideStore
from navsync.overrides.sync import SyncEngine
from navsync.sorter import parse_order_value
from navsync.types import SELF_KEY, MetadataEntry, NavigationItem, OverrideKind

logger = logging.getLogger(__name__)


def split_container(items: list[NavigationItem]) -> tuple[NavigationItem | None, list[NavigationItem]]:
    """Separate a flattened root view's container from its content."""
    if len(items) == 1 and items[0].is_root and items[0].path_key == "":
        container = items[0]
        return container, container.items or []
    return None, items


def owns_scope(item: NavigationItem) -> bool:
    """Whether synchronization descends into ``item``'s own scope."""
    return (
        item.is_directory
        and not item.is_external
        and not item.is_root
        and item.items is not None
    )


@dataclass(slots=True)
class SyncReport:
    """What one synchronization walk touched."""

    signatures: list[str] = field(default_factory=list)
    changed_scopes: int = 0


@dataclass(slots=True)
class _ScopeMaps:
    data: dict[OverrideKind, dict[str, Any]]
    metadata: dict[OverrideKind, dict[str, MetadataEntry]]

    def lookup(self, kind: OverrideKind, key: str) -> tuple[bool, Any, MetadataEntry | None]:
        data = self.data[kind]
        return key in data, data.get(key), self.metadata[kind].get(key)


class RecursiveSynchronizer:
    """Synchronizes and reapplies overrides for a whole view."""

    def __init__(self, overrides: OverrideStore, metadata: MetadataStore) -> None:
        self.engine = SyncEngine(overrides, metadata)
        self.overrides = overrides
        self.metadata = metadata

    # =========================================================================
    # Synchronization
    # =========================================================================

    def synchronize(
        self,
        items: list[NavigationItem],
        lang: str,
        signature: str,
        *,
        lang_root: Path,
    ) -> SyncReport:
        """Reconcile every scope of a view, top-down.

        Args:
            items: The generated view
            lang: Language code
            signature: Signature of the view's directory
            lang_root: Language root, for deriving child signatures

        Returns:
            SyncReport listing every scope visited
        """
        keys = PathKeyProcessor(lang_root)
        report = SyncReport()
        container, content = split_container(items)
        if container is not None:
            self.engine.sync_self(container, lang, signature)
        self._sync_scope(content, lang, signature, keys, report)
        logger.debug(
            "Synchronized %d scope(s) of %s/%s, %d changed",
            len(report.signatures), lang, signature, report.changed_scopes,
        )
        return report

    def _sync_scope(
        self,
        items: list[NavigationItem],
        lang: str,
        signature: str,
        keys: PathKeyProcessor,
        report: SyncReport,
    ) -> None:
        report.signatures.append(signature)
        changed = False
        for kind in OverrideKind:
            changed |= self.engine.sync_kind(items, kind, lang, signature)
        if changed:
            report.changed_scopes += 1

        for item in items:
            if not owns_scope(item):
                continue
            child_signature = keys.child_signature(item, signature)
            self.engine.sync_self(item, lang, child_signature)
            self._sync_scope(item.items or [], lang, child_signature, keys, report)

    # =========================================================================
    # Reapply
    # =========================================================================

    def _load_maps(self, lang: str, signature: str) -> _ScopeMaps:
        return _ScopeMaps(
            data={kind: self.overrides.read(kind, lang, signature) for kind in OverrideKind},
            metadata={kind: self.metadata.read(kind, lang, signature) for kind in OverrideKind},
        )

    def _resolve(
        self,
        kind: OverrideKind,
        key: str,
        parent: _ScopeMaps,
        own: _ScopeMaps | None,
    ) -> tuple[bool, Any]:
        """Pick between the parent's entry for a child and the child's ``_self_``.

        The parent's entry wins unless it is missing, or the ``_self_`` entry
        was edited by a human and the parent's entry was not.
        """
        has_parent, parent_value, parent_entry = parent.lookup(kind, key)
        if own is None:
            return has_parent, parent_value

        has_self, self_value, self_entry = own.lookup(kind, SELF_KEY)
        if not has_self:
            return has_parent, parent_value
        if not has_parent:
            return True, self_value

        self_edited = MetadataStore.is_user_modified(self_value, self_entry)
        parent_edited = MetadataStore.is_user_modified(parent_value, parent_entry)
        if self_edited and not parent_edited:
            return True, self_value
        return True, parent_value

    def reapply(
        self,
        items: list[NavigationItem],
        lang: str,
        signature: str,
        *,
        lang_root: Path,
    ) -> None:
        """Write resolved override values onto the in-memory view."""
        keys = PathKeyProcessor(lang_root)
        container, content = split_container(items)
        if container is not None:
            own = self._load_maps(lang, signature)
            _apply_label(container, *own.lookup(OverrideKind.LABEL, SELF_KEY)[:2])
            _apply_collapse(container, *own.lookup(OverrideKind.COLLAPSE, SELF_KEY)[:2])
        self._reapply_scope(content, lang, signature, keys)

    def _reapply_scope(
        self,
        items: list[NavigationItem],
        lang: str,
        signature: str,
        keys: PathKeyProcessor,
    ) -> None:
        maps = self._load_maps(lang, signature)
        for item in items:
            key = PathKeyProcessor.scope_key(item)
            own = None
            child_signature = None
            if owns_scope(item):
                child_signature = keys.child_signature(item, signature)
                own = self._load_maps(lang, child_signature)

            _apply_label(item, *self._resolve(OverrideKind.LABEL, key, maps, own))
            if item.is_directory:
                _apply_collapse(item, *self._resolve(OverrideKind.COLLAPSE, key, maps, own))
            if maps.data[OverrideKind.VISIBILITY].get(key) is True:
                item.hidden = True
            order = parse_order_value(maps.data[OverrideKind.ORDER].get(key))
            if order is not None:
                item.priority = order

            if child_signature is not None:
                self._reapply_scope(item.items or [], lang, child_signature, keys)


def _apply_label(item: NavigationItem, present: bool, value: Any) -> None:
    if not present:
        return
    if isinstance(value, str) and value.strip():
        item.text = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        item.text = str(value)
    else:
        logger.debug("Ignoring unusable label %r for %s", value, item.path_key or item.text)


def _apply_collapse(item: NavigationItem, present: bool, value: Any) -> None:
    if present and isinstance(value, bool) and item.items is not None:
        item.collapsed = value
