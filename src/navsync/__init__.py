"""navsync: documentation navigation with durable sidebar overrides.

Derives a navigation tree per language from the content directory structure
and layered front matter configuration, and keeps label, order, collapse and
visibility overrides in sidecar JSON files that survive regeneration.

Example:
    >>> from navsync import NavContext, NavigationCache, load_settings
    >>> cache = NavigationCache(NavContext.initialize(load_settings()))
    >>> await cache.prebuild()
    >>> cache.get_sync("en")
"""

from navsync.cache import NavigationCache
from navsync.context import NavContext
from navsync.errors import ErrorCode, NavsyncError
from navsync.pipeline import generate
from navsync.settings import NavSettings, load_settings
from navsync.types import (
    EffectiveDirectoryConfig,
    ExternalLinkConfig,
    GroupConfig,
    MetadataEntry,
    NavigationItem,
    OverrideKind,
    RouteMap,
)

__version__ = "0.1.0"

__all__ = [
    "EffectiveDirectoryConfig",
    "ErrorCode",
    "ExternalLinkConfig",
    "GroupConfig",
    "MetadataEntry",
    "NavContext",
    "NavSettings",
    "NavigationCache",
    "NavigationItem",
    "NavsyncError",
    "OverrideKind",
    "RouteMap",
    "generate",
    "load_settings",
]
