"""Override Store and Metadata Store.

Sidecar layout under ``sidebar_dir``::

    <lang>/<signature>/<kind>.json             override values
    .metadata/<lang>/<signature>/<kind>.json   provenance of each value

The ``_root`` signature maps to the language directory itself. Reads never
raise and yield ``{}`` for missing or malformed files. Writes are atomic,
pretty-printed, and skipped when the file already holds the same content.
"""

import logging
import shutil
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from navsync.overrides.keys import join_signature
from navsync.types import ROOT_SIGNATURE, MetadataEntry, OverrideKind
from navsync.utils.hashing import compute_value_hash
from navsync.utils.serialization import dump_json_text, safe_json_dump, safe_json_load

logger = logging.getLogger(__name__)

METADATA_DIRNAME = ".metadata"
KIND_FILENAMES = frozenset(kind.filename for kind in OverrideKind)


class SidecarStore:
    """One tree of per-scope JSON files, one file per override kind."""

    def __init__(self, base_dir: Path) -> None:
        self.base_dir = base_dir

    def language_dir(self, lang: str) -> Path:
        return self.base_dir / lang if lang else self.base_dir

    def scope_dir(self, lang: str, signature: str) -> Path:
        base = self.language_dir(lang)
        if signature in (ROOT_SIGNATURE, ""):
            return base
        return base / signature

    def path_for(self, kind: OverrideKind, lang: str, signature: str) -> Path:
        return self.scope_dir(lang, signature) / kind.filename

    def read_raw(self, kind: OverrideKind, lang: str, signature: str) -> dict[str, Any]:
        path = self.path_for(kind, lang, signature)
        data = safe_json_load(path, default={})
        if not isinstance(data, dict):
            logger.warning("Expected a JSON object in %s, got %s", path, type(data).__name__)
            return {}
        return data

    def write_raw(
        self, kind: OverrideKind, lang: str, signature: str, data: dict[str, Any]
    ) -> bool:
        """Persist ``data``; returns True when the file changed."""
        path = self.path_for(kind, lang, signature)
        try:
            if path.read_text(encoding="utf-8") == dump_json_text(data):
                return False
        except (FileNotFoundError, UnicodeDecodeError):
            pass
        except OSError as e:
            logger.debug("Cannot compare %s before writing: %s", path, e)
        return safe_json_dump(data, path)

    def iter_scopes(self, lang: str, signature: str) -> Iterator[tuple[OverrideKind, str]]:
        """(kind, signature) of every kind file at or below a scope."""
        directory = self.scope_dir(lang, signature)
        if not directory.is_dir():
            return
        by_name = {kind.filename: kind for kind in OverrideKind}
        for path in sorted(directory.rglob("*.json")):
            kind = by_name.get(path.name)
            if kind is None:
                continue
            rel = path.parent.relative_to(directory).as_posix()
            yield kind, signature if rel == "." else join_signature(signature, rel)

    def remove_scope(self, lang: str, signature: str) -> bool:
        """Delete a scope folder with everything beneath it."""
        directory = self.scope_dir(lang, signature)
        if not directory.exists():
            return False
        shutil.rmtree(directory)
        return True


class OverrideStore(SidecarStore):
    """Label, order, collapse and visibility overrides."""

    def read(self, kind: OverrideKind, lang: str, signature: str) -> dict[str, Any]:
        return self.read_raw(kind, lang, signature)

    def write(self, kind: OverrideKind, lang: str, signature: str, data: dict[str, Any]) -> bool:
        return self.write_raw(kind, lang, signature, data)


class MetadataStore(SidecarStore):
    """Provenance entries mirroring the override tree."""

    @classmethod
    def beside(cls, overrides: OverrideStore) -> "MetadataStore":
        return cls(overrides.base_dir / METADATA_DIRNAME)

    def read(self, kind: OverrideKind, lang: str, signature: str) -> dict[str, MetadataEntry]:
        raw = self.read_raw(kind, lang, signature)
        return self.parse(raw, where=str(self.path_for(kind, lang, signature)))

    @staticmethod
    def parse(raw: dict[str, Any], *, where: str = "") -> dict[str, MetadataEntry]:
        entries = {}
        for key, value in raw.items():
            if isinstance(value, dict):
                entries[key] = MetadataEntry.from_dict(value)
            else:
                logger.warning("Ignoring malformed metadata entry %r in %s", key, where)
        return entries

    def write(
        self,
        kind: OverrideKind,
        lang: str,
        signature: str,
        entries: dict[str, MetadataEntry],
    ) -> bool:
        return self.write_raw(
            kind, lang, signature, {key: entry.to_dict() for key, entry in entries.items()}
        )

    @staticmethod
    def value_hash(value: Any) -> str:
        return compute_value_hash(value)

    @classmethod
    def new_entry(cls, value: Any, *, is_user_set: bool = False, active: bool = True) -> MetadataEntry:
        return MetadataEntry(
            value_hash=cls.value_hash(value),
            is_user_set=is_user_set,
            is_active_in_structure=active,
        )

    @classmethod
    def is_user_modified(cls, value: Any, entry: MetadataEntry | None) -> bool:
        """Whether a stored override value came from a human.

        No metadata means the value is the system's. An explicit flag always
        wins. Otherwise a value whose hash differs from the one recorded when
        the system wrote it was edited by hand.
        """
        if entry is None:
            return False
        if entry.is_user_set:
            return True
        return cls.value_hash(value) != entry.value_hash
