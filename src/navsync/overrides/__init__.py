"""Override sidecars: storage, synchronization, cleanup and archival."""

from navsync.overrides.archive import ArchivePackage, ArchiveService
from navsync.overrides.cleanup import CleanupReport, CleanupService
from navsync.overrides.keys import PathKeyProcessor, join_signature
from navsync.overrides.signatures import DirectorySignatureManager
from navsync.overrides.store import MetadataStore, OverrideStore
from navsync.overrides.sync import SyncEngine
from navsync.overrides.synchronizer import RecursiveSynchronizer, SyncReport

__all__ = [
    "ArchivePackage",
    "ArchiveService",
    "CleanupReport",
    "CleanupService",
    "DirectorySignatureManager",
    "MetadataStore",
    "OverrideStore",
    "PathKeyProcessor",
    "RecursiveSynchronizer",
    "SyncEngine",
    "SyncReport",
    "join_signature",
]
