"""Disposition of sidecar folders whose content directory was deleted.

A folder with any human-set entry anywhere beneath it is soft-archived: its
metadata is marked inactive in place, and the archive pass that follows
moves the folder into a restorable package.
Anything else is deleted together with its metadata twin. Failures are
contained per folder so one bad entry never blocks the rest.
"""

import logging
from dataclasses import dataclass, field

from navsync.overrides.store import MetadataStore, OverrideStore

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CleanupReport:
    deleted: list[str] = field(default_factory=list)
    soft_archived: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


class CleanupService:
    """Deletes or soft-archives outdated sidecar folders."""

    def __init__(self, overrides: OverrideStore, metadata: MetadataStore) -> None:
        self.overrides = overrides
        self.metadata = metadata

    def has_user_entries(self, lang: str, signature: str) -> bool:
        """Whether any value at or below the folder came from a human."""
        for kind, scope in self.metadata.iter_scopes(lang, signature):
            values = self.overrides.read(kind, lang, scope)
            for key, entry in self.metadata.read(kind, lang, scope).items():
                if entry.is_user_set:
                    return True
                if key in values and MetadataStore.is_user_modified(values[key], entry):
                    return True

        # Values the system never tracked were written by hand
        for kind, scope in self.overrides.iter_scopes(lang, signature):
            tracked = self.metadata.read(kind, lang, scope)
            if any(key not in tracked for key in self.overrides.read(kind, lang, scope)):
                return True
        return False

    def soft_archive(self, lang: str, signature: str) -> None:
        for kind, scope in self.metadata.iter_scopes(lang, signature):
            entries = self.metadata.read(kind, lang, scope)
            for entry in entries.values():
                entry.is_active_in_structure = False
            self.metadata.write(kind, lang, scope, entries)

    def delete(self, lang: str, signature: str) -> None:
        self.overrides.remove_scope(lang, signature)
        self.metadata.remove_scope(lang, signature)

    def cleanup(self, lang: str, signatures: list[str]) -> CleanupReport:
        """Handle each outdated folder independently."""
        report = CleanupReport()
        for signature in signatures:
            try:
                if self.has_user_entries(lang, signature):
                    self.soft_archive(lang, signature)
                    report.soft_archived.append(signature)
                    logger.info("Soft-archived sidecars of removed directory %s/%s", lang, signature)
                else:
                    self.delete(lang, signature)
                    report.deleted.append(signature)
                    logger.info("Deleted sidecars of removed directory %s/%s", lang, signature)
            except OSError as e:
                logger.error("Cleanup of %s/%s failed: %s", lang, signature, e)
                report.failed.append(signature)
        return report
