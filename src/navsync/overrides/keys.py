"""Scope keys and directory signatures.

Every override scope is a content directory, identified by its signature:
its path relative to the language root, or ``_root`` for the language root
itself. Inside a scope, files are keyed by name and directories by their path
relative to the scope with a trailing slash (``setup.md``, ``concepts/``,
``external:GitHub``). A group lifted from ``basics/advanced`` keeps that
whole path, so it never shares a key with a sibling directory ``advanced``.
"""

from pathlib import Path, PurePosixPath

from navsync.types import ROOT_SIGNATURE, NavigationItem


class PathKeyProcessor:
    """Maps navigation items onto override keys and scope signatures."""

    def __init__(self, lang_root: Path) -> None:
        self.lang_root = lang_root

    @staticmethod
    def scope_key(item: NavigationItem) -> str:
        """Key of ``item`` within its parent's override scope.

        Example:
            >>> PathKeyProcessor.scope_key(
            ...     NavigationItem(text="Concepts", path_key="concepts", is_directory=True)
            ... )
            'concepts/'
        """
        if item.is_external:
            return item.path_key
        if item.is_directory:
            return f"{item.path_key.strip('/') or item.text}/"
        return PurePosixPath(item.path_key).name or item.text

    def signature_for(self, directory: Path) -> str:
        try:
            rel = directory.relative_to(self.lang_root).as_posix()
        except ValueError:
            return directory.name
        return ROOT_SIGNATURE if rel == "." else rel

    def child_signature(self, item: NavigationItem, parent_signature: str) -> str:
        """Signature of a directory item's own scope."""
        if item.source_path is not None:
            return self.signature_for(item.source_path)
        name = self.scope_key(item).rstrip("/")
        return join_signature(parent_signature, name)


def join_signature(parent: str, name: str) -> str:
    if parent in (ROOT_SIGNATURE, ""):
        return name
    return f"{parent}/{name}"
