"""Archival of sidecar folders orphaned by name.

Within each synchronized scope, a sidecar subfolder (override or metadata
tree) whose name matches no physical subdirectory exactly is moved into::

    <sidebar_dir>/.archive/removed_directories/<name>_removed_<YYYY-MM-DD>/
        config/<name>/...      override files
        metadata/<name>/...    metadata files
        README.md              restoration steps
        archive_info.json      manifest

Run it after the cleanup service: by then system-only folders of deleted
directories are gone, and what remains are soft-archived folders holding
user entries, metadata-only leftovers and folders of renamed directories.
"""

import logging
import os
import shutil
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

from navsync.errors import ErrorCode, NavsyncError
from navsync.overrides.keys import join_signature
from navsync.overrides.store import MetadataStore, OverrideStore
from navsync.types import ROOT_SIGNATURE
from navsync.utils.serialization import safe_json_dump

logger = logging.getLogger(__name__)

ARCHIVE_DIRNAME = ".archive"
REMOVED_DIRNAME = "removed_directories"

_README_TEMPLATE = """# Archived navigation overrides: {name}

The content directory `{physical}` no longer matches the sidecar folder
`{signature}` (language `{lang}`), so its overrides were moved here on
{archived_at}.

Reason: {reason}

## Restoring

1. Recreate or rename the content directory so it is named exactly `{name}`.
2. Copy `config/{name}/` back to `{config_target}`.
3. Copy `metadata/{name}/` back to `{metadata_target}`.
4. Regenerate navigation. Restored entries become active again, and
   hand-edited values are applied verbatim.
"""


@dataclass(slots=True)
class ArchivePackage:
    """One archived sidecar folder."""

    path: Path
    lang: str
    signature: str
    reason: str
    archived_at: str
    files: list[str] = field(default_factory=list)

    def manifest(self) -> dict:
        return {
            "lang": self.lang,
            "signature": self.signature,
            "reason": self.reason,
            "archived_at": self.archived_at,
            "files": self.files,
        }


class ArchiveService:
    """Moves name-orphaned sidecar folders into a timestamped archive."""

    def __init__(
        self,
        overrides: OverrideStore,
        metadata: MetadataStore,
        docs_path: Path,
        *,
        archive_dir: Path | None = None,
    ) -> None:
        self.overrides = overrides
        self.metadata = metadata
        self.docs_path = docs_path
        self.archive_dir = archive_dir or overrides.base_dir / ARCHIVE_DIRNAME

    def _physical_dir(self, lang: str, signature: str) -> Path:
        root = self.docs_path / lang if lang else self.docs_path
        return root if signature in (ROOT_SIGNATURE, "") else root / signature

    @staticmethod
    def _subdirectory_names(directory: Path) -> set[str]:
        try:
            with os.scandir(directory) as it:
                return {e.name for e in it if e.is_dir() and not e.name.startswith(".")}
        except FileNotFoundError:
            return set()

    def find_orphans(self, lang: str, signature: str) -> list[str]:
        """Names of sidecar subfolders of a scope that no content directory matches."""
        physical = self._physical_dir(lang, signature)
        present = self._subdirectory_names(physical)
        sidecar_names = self._subdirectory_names(self.overrides.scope_dir(lang, signature))
        sidecar_names |= self._subdirectory_names(self.metadata.scope_dir(lang, signature))
        return sorted(sidecar_names - present)

    def _package_dir(self, name: str, day: str) -> Path:
        base = self.archive_dir / REMOVED_DIRNAME
        candidate = base / f"{name}_removed_{day}"
        counter = 1
        while candidate.exists():
            counter += 1
            candidate = base / f"{name}_removed_{day}_{counter}"
        return candidate

    def archive(self, lang: str, signature: str, *, reason: str) -> ArchivePackage:
        """Move one sidecar folder (and its metadata twin) into the archive.

        Raises:
            NavsyncError: ARCHIVE_FAILED when the folder cannot be moved
        """
        try:
            return self._archive(lang, signature, reason)
        except OSError as e:
            raise NavsyncError(
                ErrorCode.ARCHIVE_FAILED,
                context={"signature": signature, "detail": str(e)},
                cause=e,
            ) from e

    def _archive(self, lang: str, signature: str, reason: str) -> ArchivePackage:
        now = datetime.now(UTC)
        name = signature.rsplit("/", 1)[-1]
        package = ArchivePackage(
            path=self._package_dir(name, now.strftime("%Y-%m-%d")),
            lang=lang,
            signature=signature,
            reason=reason,
            archived_at=now.isoformat(timespec="seconds"),
        )
        package.path.mkdir(parents=True)

        for label, store in (("config", self.overrides), ("metadata", self.metadata)):
            source = store.scope_dir(lang, signature)
            if not source.exists():
                continue
            target = package.path / label / name
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.move(str(source), str(target))
            package.files.extend(
                p.relative_to(package.path).as_posix() for p in sorted(target.rglob("*")) if p.is_file()
            )

        readme = _README_TEMPLATE.format(
            name=name,
            physical=self._physical_dir(lang, signature),
            signature=signature,
            lang=lang or "(default)",
            archived_at=package.archived_at,
            reason=reason,
            config_target=self.overrides.scope_dir(lang, signature),
            metadata_target=self.metadata.scope_dir(lang, signature),
        )
        (package.path / "README.md").write_text(readme, encoding="utf-8")
        safe_json_dump(package.manifest(), package.path / "archive_info.json")
        logger.info("Archived sidecars of %s/%s to %s", lang, signature, package.path)
        return package

    def archive_orphans(self, lang: str, signature: str) -> list[ArchivePackage]:
        """Archive every name-orphaned sidecar subfolder of one scope."""
        packages = []
        for name in self.find_orphans(lang, signature):
            child = join_signature(signature, name)
            try:
                packages.append(
                    self.archive(lang, child, reason="no content directory matches this name")
                )
            except NavsyncError as e:
                logger.error("%s", e)
        return packages
