"""Shared helpers: crash-tolerant JSON, value hashing, async filesystem access."""

from navsync.utils.fs import is_markdown, list_entries, read_text
from navsync.utils.hashing import NULL_VALUE_HASH, compute_string_hash, compute_value_hash
from navsync.utils.serialization import dump_json_text, safe_json_dump, safe_json_load

__all__ = [
    "NULL_VALUE_HASH",
    "compute_string_hash",
    "compute_value_hash",
    "dump_json_text",
    "is_markdown",
    "list_entries",
    "read_text",
    "safe_json_dump",
    "safe_json_load",
]
