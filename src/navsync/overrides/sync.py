"""Synchronization Engine: one override kind in one scope.

For every item in the scope:

- a stored value is kept and marked active; order values also seed the
  item's working priority
- a missing value is synthesized from the generated item and recorded with
  ``isUserSet=false``

For every stored key whose item is gone, the metadata is marked inactive.
System values are then deleted; human values stay in place so they come back
verbatim if the item reappears.

Files are only rewritten when their content changes, so re-running over an
unchanged tree leaves every sidecar byte-identical.
"""

import copy
import logging
from dataclasses import dataclass, field
from typing import Any

from navsync.overrides.keys import PathKeyProcessor
from navsync.overrides.store import MetadataStore, OverrideStore
from navsync.sorter import parse_order_value
from navsync.types import SELF_KEY, MetadataEntry, NavigationItem, OverrideKind

logger = logging.getLogger(__name__)

# Kinds a directory stores for itself under the _self_ key
SELF_KINDS = (OverrideKind.LABEL, OverrideKind.COLLAPSE, OverrideKind.VISIBILITY)


@dataclass(slots=True)
class ScopeState:
    """In-memory copy of one kind's override and metadata maps."""

    data: dict[str, Any]
    metadata: dict[str, MetadataEntry]
    _data_snapshot: dict[str, Any] = field(init=False, repr=False)
    _metadata_snapshot: dict[str, dict[str, Any]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._data_snapshot = copy.deepcopy(self.data)
        self._metadata_snapshot = _dump_metadata(self.metadata)

    @property
    def data_changed(self) -> bool:
        return self.data != self._data_snapshot

    @property
    def metadata_changed(self) -> bool:
        return _dump_metadata(self.metadata) != self._metadata_snapshot


def _dump_metadata(entries: dict[str, MetadataEntry]) -> dict[str, dict[str, Any]]:
    return {key: entry.to_dict() for key, entry in entries.items()}


def _same_value(a: Any, b: Any) -> bool:
    # JSON equality: True must not equal 1
    return type(a) is type(b) and a == b


class SyncEngine:
    """Reconciles generated items against stored overrides, kind by kind."""

    def __init__(self, overrides: OverrideStore, metadata: MetadataStore) -> None:
        self.overrides = overrides
        self.metadata = metadata

    def load(self, kind: OverrideKind, lang: str, signature: str) -> ScopeState:
        return ScopeState(
            data=self.overrides.read(kind, lang, signature),
            metadata=self.metadata.read(kind, lang, signature),
        )

    def save(self, state: ScopeState, kind: OverrideKind, lang: str, signature: str) -> bool:
        """Write back whichever maps changed; returns True if anything was written."""
        written = False
        if state.data_changed:
            written |= self.overrides.write(kind, lang, signature, state.data)
        if state.metadata_changed:
            written |= self.metadata.write(kind, lang, signature, state.metadata)
        return written

    def sync_kind(
        self,
        items: list[NavigationItem],
        kind: OverrideKind,
        lang: str,
        signature: str,
    ) -> bool:
        """Reconcile one kind for the direct children of a scope.

        Args:
            items: Items currently present in the scope
            kind: Override kind to reconcile
            lang: Language code
            signature: Scope signature

        Returns:
            True when a sidecar file was rewritten
        """
        state = self.load(kind, lang, signature)
        present: set[str] = set()

        for item in items:
            if kind.directories_only and not item.is_directory:
                continue
            key = PathKeyProcessor.scope_key(item)
            present.add(key)
            self._reconcile(state, key, kind.default_for(item), kind=kind, where=signature)
            if kind is OverrideKind.ORDER:
                stored = parse_order_value(state.data.get(key))
                if stored is not None:
                    item.priority = stored

        for key in list(state.metadata):
            if key == SELF_KEY or key in present:
                continue
            self._retire(state, key, kind=kind, where=signature)

        changed = self.save(state, kind, lang, signature)
        if changed:
            logger.debug("Synchronized %s for %s/%s", kind.value, lang, signature)
        return changed

    def sync_self(self, item: NavigationItem, lang: str, signature: str) -> bool:
        """Create a directory's ``_self_`` entries on first visit only."""
        changed = False
        for kind in SELF_KINDS:
            state = self.load(kind, lang, signature)
            if SELF_KEY not in state.data:
                default = kind.default_for(item)
                state.data[SELF_KEY] = default
                state.metadata[SELF_KEY] = self.metadata.new_entry(default)
            else:
                entry = state.metadata.get(SELF_KEY)
                value = state.data[SELF_KEY]
                if entry is None:
                    state.metadata[SELF_KEY] = self.metadata.new_entry(
                        value, is_user_set=not _same_value(value, kind.default_for(item))
                    )
                else:
                    entry.is_active_in_structure = True
            changed |= self.save(state, kind, lang, signature)
        return changed

    def _reconcile(
        self,
        state: ScopeState,
        key: str,
        default: Any,
        *,
        kind: OverrideKind,
        where: str,
    ) -> None:
        entry = state.metadata.get(key)

        if key not in state.data:
            # First sight, or the stored value was removed: synthesize
            state.data[key] = default
            state.metadata[key] = self.metadata.new_entry(default)
            return

        value = state.data[key]
        if entry is None:
            # Written by hand before the system ever tracked it
            state.metadata[key] = MetadataEntry(
                value_hash=self.metadata.value_hash(default),
                is_user_set=not _same_value(value, default),
            )
            return

        entry.is_active_in_structure = True
        if entry.is_user_set:
            return
        if self.metadata.is_user_modified(value, entry):
            logger.info("Detected hand edit of %s[%r] in %s, keeping it", kind.value, key, where)
            entry.is_user_set = True
            return
        if not _same_value(value, default):
            # System value whose source changed, e.g. a new front matter title
            state.data[key] = default
            entry.value_hash = self.metadata.value_hash(default)

    def _retire(self, state: ScopeState, key: str, *, kind: OverrideKind, where: str) -> None:
        entry = state.metadata[key]
        entry.is_active_in_structure = False
        if key not in state.data:
            return
        if self.metadata.is_user_modified(state.data[key], entry):
            entry.is_user_set = True
            logger.debug("Keeping inactive user %s[%r] in %s", kind.value, key, where)
            return
        del state.data[key]
