"""Configuration Resolver: layered directory configuration."""

from navsync.resolver.frontmatter import parse_frontmatter
from navsync.resolver.resolver import ConfigResolver
from navsync.resolver.sources import ConfigSource, build_effective_config, merge_sources

__all__ = [
    "ConfigResolver",
    "ConfigSource",
    "build_effective_config",
    "merge_sources",
    "parse_frontmatter",
]
