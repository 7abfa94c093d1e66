"""Explicit navigation context.

Everything one generation pass needs, built once from NavSettings. Passing
the context to ``generate()`` replaces any process-wide configuration state.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from navsync.errors import ErrorCode, NavsyncError, config_error, language_not_configured
from navsync.overrides import (
    ArchiveService,
    CleanupService,
    DirectorySignatureManager,
    MetadataStore,
    OverrideStore,
    RecursiveSynchronizer,
)
from navsync.resolver import ConfigResolver
from navsync.settings import NavSettings
from navsync.structure import ExclusionList, find_gitbook_roots

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class NavContext:
    """Services bound to one documentation project."""

    settings: NavSettings
    resolver: ConfigResolver
    overrides: OverrideStore
    metadata: MetadataStore
    synchronizer: RecursiveSynchronizer
    signatures: DirectorySignatureManager
    cleanup: CleanupService
    archive: ArchiveService

    @classmethod
    def initialize(cls, settings: NavSettings) -> "NavContext":
        """Validate settings and wire up the services.

        Raises:
            NavsyncError: DOCS_DIR_MISSING when the content root does not
                exist, CONFIG_INVALID when no language is configured.
        """
        docs_path = Path(settings.docs_dir).resolve()
        if not docs_path.is_dir():
            raise NavsyncError(ErrorCode.DOCS_DIR_MISSING, context={"path": str(docs_path)})
        if not settings.languages:
            raise config_error(ErrorCode.CONFIG_INVALID, detail="no languages configured")

        overrides = OverrideStore(Path(settings.sidebar_dir).resolve())
        metadata = MetadataStore.beside(overrides)
        context = cls(
            settings=settings,
            resolver=ConfigResolver(docs_path, global_config_name=settings.global_config_name),
            overrides=overrides,
            metadata=metadata,
            synchronizer=RecursiveSynchronizer(overrides, metadata),
            signatures=DirectorySignatureManager(overrides, docs_path),
            cleanup=CleanupService(overrides, metadata),
            archive=ArchiveService(overrides, metadata, docs_path),
        )
        logger.debug(
            "Initialized navigation context: docs=%s sidecars=%s languages=%s",
            docs_path, overrides.base_dir, ", ".join(settings.languages),
        )
        return context

    @property
    def docs_path(self) -> Path:
        return self.resolver.docs_path

    @property
    def languages(self) -> list[str]:
        return list(self.settings.languages)

    def require_language(self, lang: str) -> None:
        """Raise for a language that is not configured."""
        if lang not in self.settings.languages:
            raise language_not_configured(lang, self.languages)

    def language_root(self, lang: str) -> Path:
        return self.resolver.language_root(lang)

    async def exclusions_for(self, lang: str) -> ExclusionList:
        """Declared external roots plus detected GitBook imports."""
        exclusions = ExclusionList().extend(self.docs_path / r for r in self.settings.external_roots)
        if self.settings.detect_gitbook:
            exclusions = exclusions.extend(await find_gitbook_roots(self.language_root(lang)))
        return exclusions
