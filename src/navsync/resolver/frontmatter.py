"""YAML front matter extraction for markdown documents."""

import logging
import re
from typing import Any

import yaml

logger = logging.getLogger(__name__)

FRONTMATTER_PATTERN = re.compile(
    r"\A\ufeff?---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)",
    re.DOTALL,
)


def parse_frontmatter(content: str, *, source: str = "<string>") -> dict[str, Any]:
    """Parse the leading ``---`` YAML block of a markdown document.

    Args:
        content: Full document text
        source: Label used in log messages

    Returns:
        The front matter mapping, or {} when absent, invalid or not a mapping

    Example:
        >>> parse_frontmatter("---\\ntitle: Guide\\nroot: true\\n---\\n# Body")
        {'title': 'Guide', 'root': True}
    """
    match = FRONTMATTER_PATTERN.match(content)
    if not match:
        return {}

    try:
        data = yaml.safe_load(match.group(1))
    except yaml.YAMLError as e:
        logger.warning("Invalid front matter in %s: %s", source, e)
        return {}

    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning(
            "Front matter in %s is a %s, expected a mapping", source, type(data).__name__
        )
        return {}
    return data
