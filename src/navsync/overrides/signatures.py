"""Directory signatures: which sidecar folders still have content behind them."""

import logging
import os
from pathlib import Path

from navsync.overrides.store import KIND_FILENAMES, OverrideStore
from navsync.types import ROOT_SIGNATURE

logger = logging.getLogger(__name__)


class DirectorySignatureManager:
    """Compares on-disk sidecar folders against the physical content tree.

    A sidecar folder is outdated only when its content directory no longer
    exists on disk. Being absent from one pass's generated tree is not
    enough: hidden, depth-limited or excluded directories still exist.
    """

    def __init__(self, overrides: OverrideStore, docs_path: Path) -> None:
        self.overrides = overrides
        self.docs_path = docs_path

    def language_root(self, lang: str) -> Path:
        return self.docs_path / lang if lang else self.docs_path

    def physical_dir(self, lang: str, signature: str) -> Path:
        root = self.language_root(lang)
        return root if signature in (ROOT_SIGNATURE, "") else root / signature

    def find_config_directories(self, lang: str) -> list[str]:
        """Signatures of every sidecar folder holding at least one kind file."""
        base = self.overrides.language_dir(lang)
        if not base.is_dir():
            return []

        found: list[str] = []
        for dirpath, dirnames, filenames in os.walk(base):
            dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
            if not KIND_FILENAMES.intersection(filenames):
                continue
            rel = Path(dirpath).relative_to(base).as_posix()
            found.append(ROOT_SIGNATURE if rel == "." else rel)
        return found

    def identify_outdated(self, lang: str) -> list[str]:
        """Top-most sidecar folders whose content directory is gone.

        Nested outdated folders are covered by their outdated ancestor and
        are not listed separately.
        """
        outdated: list[str] = []
        for signature in self.find_config_directories(lang):
            if signature == ROOT_SIGNATURE:
                continue
            if self.physical_dir(lang, signature).is_dir():
                continue
            if any(signature.startswith(f"{parent}/") for parent in outdated):
                continue
            outdated.append(signature)

        if outdated:
            logger.info("Outdated sidecar folders for %r: %s", lang, ", ".join(outdated))
        return outdated
