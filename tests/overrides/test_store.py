"""Tests for the Override Store and Metadata Store."""

import json
from pathlib import Path

from navsync.overrides import MetadataStore, OverrideStore
from navsync.types import MetadataEntry, OverrideKind


class TestOverrideStore:
    """Tests for OverrideStore."""

    def test_read_missing_returns_empty(self, tmp_path: Path) -> None:
        """Test reading a file that does not exist."""
        store = OverrideStore(tmp_path)

        assert store.read(OverrideKind.LABEL, "en", "guide") == {}

    def test_root_signature_maps_to_language_dir(self, tmp_path: Path) -> None:
        """Test _root files live directly in the language folder."""
        store = OverrideStore(tmp_path)

        assert store.path_for(OverrideKind.ORDER, "en", "_root") == tmp_path / "en" / "order.json"
        assert store.path_for(OverrideKind.LABEL, "en", "a/b") == tmp_path / "en" / "a" / "b" / "locales.json"

    def test_write_creates_parents_pretty_printed(self, tmp_path: Path) -> None:
        """Test writes create folders and indent JSON."""
        store = OverrideStore(tmp_path)

        assert store.write(OverrideKind.LABEL, "en", "guide/deep", {"a.md": "Ä"}) is True

        path = tmp_path / "en" / "guide" / "deep" / "locales.json"
        assert path.read_text(encoding="utf-8") == '{\n  "a.md": "Ä"\n}\n'

    def test_unchanged_write_skipped(self, tmp_path: Path) -> None:
        """Test writing identical content leaves the file alone."""
        store = OverrideStore(tmp_path)
        store.write(OverrideKind.ORDER, "en", "_root", {"a.md": 1})

        assert store.write(OverrideKind.ORDER, "en", "_root", {"a.md": 1}) is False

    def test_malformed_json_reads_empty(self, tmp_path: Path) -> None:
        """Test corrupted files never raise."""
        path = tmp_path / "en" / "hidden.json"
        path.parent.mkdir(parents=True)
        path.write_text("{not json", encoding="utf-8")

        assert OverrideStore(tmp_path).read(OverrideKind.VISIBILITY, "en", "_root") == {}

    def test_non_object_reads_empty(self, tmp_path: Path) -> None:
        """Test a JSON list is not accepted as an override map."""
        path = tmp_path / "en" / "order.json"
        path.parent.mkdir(parents=True)
        path.write_text("[1, 2]", encoding="utf-8")

        assert OverrideStore(tmp_path).read(OverrideKind.ORDER, "en", "_root") == {}


class TestMetadataStore:
    """Tests for MetadataStore."""

    def test_beside_uses_metadata_folder(self, tmp_path: Path) -> None:
        """Test the metadata tree sits under .metadata."""
        metadata = MetadataStore.beside(OverrideStore(tmp_path))

        assert metadata.path_for(OverrideKind.LABEL, "en", "guide") == (
            tmp_path / ".metadata" / "en" / "guide" / "locales.json"
        )

    def test_round_trip_camel_case(self, tmp_path: Path) -> None:
        """Test entries are stored with camelCase keys."""
        metadata = MetadataStore(tmp_path)
        entry = MetadataStore.new_entry("Guide")

        metadata.write(OverrideKind.LABEL, "en", "_root", {"guide/": entry})

        raw = json.loads((tmp_path / "en" / "locales.json").read_text(encoding="utf-8"))
        assert raw["guide/"] == {
            "valueHash": entry.value_hash,
            "isUserSet": False,
            "isActiveInStructure": True,
        }
        assert metadata.read(OverrideKind.LABEL, "en", "_root") == {"guide/": entry}

    def test_user_modification_detection(self) -> None:
        """Test no metadata, flag and hash mismatch rules."""
        entry = MetadataStore.new_entry("Guide")
        flagged = MetadataEntry(value_hash=entry.value_hash, is_user_set=True)

        assert MetadataStore.is_user_modified("Anything", None) is False
        assert MetadataStore.is_user_modified("Guide", flagged) is True
        assert MetadataStore.is_user_modified("Guide", entry) is False
        assert MetadataStore.is_user_modified("My Guide", entry) is True

    def test_value_hash_distinguishes_types(self) -> None:
        """Test 1 and "1" hash differently; None has a fixed marker."""
        assert MetadataStore.value_hash(1) != MetadataStore.value_hash("1")
        assert MetadataStore.value_hash(None) == "null_or_undefined_hash"
