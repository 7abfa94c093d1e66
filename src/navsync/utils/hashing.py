"""Content hashing for override provenance tracking."""

import hashlib
import json
from typing import Any

# Stored in place of a digest when the tracked value is None
NULL_VALUE_HASH = "null_or_undefined_hash"


def compute_string_hash(text: str) -> str:
    """Compute SHA-256 hash of string (UTF-8 encoded).

    Example:
        >>> compute_string_hash("hello")
        '2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824'
    """
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def compute_value_hash(value: Any) -> str:
    """Hash an override value the way it is recorded in metadata sidecars.

    Strings are hashed as-is; every other JSON value is hashed through its
    compact, key-sorted JSON encoding so ``1`` and ``"1"`` never collide.

    Args:
        value: Any JSON-serializable override value

    Returns:
        Hex digest, or NULL_VALUE_HASH for None

    Example:
        >>> compute_value_hash(None)
        'null_or_undefined_hash'
        >>> compute_value_hash("Guide") == compute_string_hash("Guide")
        True
    """
    if value is None:
        return NULL_VALUE_HASH
    if isinstance(value, str):
        return compute_string_hash(value)
    return compute_string_hash(
        json.dumps(value, separators=(",", ":"), sort_keys=True, ensure_ascii=False)
    )
