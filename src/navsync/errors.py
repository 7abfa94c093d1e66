"""navsync Error System.

Provides structured error handling with:
- Numeric error codes for programmatic handling
- User-friendly messages
- Recovery hints
- Context for debugging

Only caller misuse raises. Problems with the shape of the content tree or
the sidecar files are logged and degrade to empty results instead.
"""

from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Numeric error codes organized by category.

    Format: XYYY where X = category, YYY = specific error

    Categories:
        5xxx - Configuration errors
        6xxx - Runtime errors
        7xxx - IO errors
    """

    # 5xxx - Configuration Errors
    CONFIG_MISSING = 5001
    CONFIG_INVALID = 5002
    LANGUAGE_NOT_CONFIGURED = 5003
    DOCS_DIR_MISSING = 5004

    # 6xxx - Runtime Errors
    NOT_INITIALIZED = 6001
    NOT_PREBUILT = 6002
    GENERATION_FAILED = 6003

    # 7xxx - IO Errors
    ARCHIVE_FAILED = 7001

    @property
    def category(self) -> str:
        """Get the error category name."""
        prefix = self.value // 1000
        return {
            5: "config",
            6: "runtime",
            7: "io",
        }.get(prefix, "unknown")

    @property
    def is_recoverable(self) -> bool:
        """Whether this error type is typically recoverable."""
        non_recoverable = {
            ErrorCode.CONFIG_MISSING,
            ErrorCode.CONFIG_INVALID,
            ErrorCode.DOCS_DIR_MISSING,
        }
        return self not in non_recoverable


ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.CONFIG_MISSING: "Configuration file not found: {path}",
    ErrorCode.CONFIG_INVALID: "Invalid configuration: {detail}",
    ErrorCode.LANGUAGE_NOT_CONFIGURED: (
        "Language '{lang}' is not configured. Available: {available}"
    ),
    ErrorCode.DOCS_DIR_MISSING: "Docs directory does not exist: {path}",
    ErrorCode.NOT_INITIALIZED: "Navigation context is not initialized: {detail}",
    ErrorCode.NOT_PREBUILT: "Navigation cache was read before prebuild() ran for '{lang}'.",
    ErrorCode.GENERATION_FAILED: "Navigation generation failed for '{lang}': {detail}",
    ErrorCode.ARCHIVE_FAILED: "Failed to archive sidecars for '{signature}': {detail}",
}


RECOVERY_HINTS: dict[ErrorCode, list[str]] = {
    ErrorCode.LANGUAGE_NOT_CONFIGURED: [
        "Add '{lang}' to the languages list in navsync.yaml",
        "Run 'navsync languages' to see the configured languages",
    ],
    ErrorCode.DOCS_DIR_MISSING: [
        "Check docs_dir in navsync.yaml",
        "Set NAVSYNC_DOCS_DIR to the content root",
    ],
    ErrorCode.NOT_INITIALIZED: [
        "Create a context with NavContext.initialize(settings) before calling generate()",
    ],
    ErrorCode.NOT_PREBUILT: [
        "Await NavigationCache.prebuild() during startup",
    ],
    ErrorCode.ARCHIVE_FAILED: [
        "Check permissions on the sidebar directory",
        "Move the folder into .archive/removed_directories by hand",
    ],
}


class NavsyncError(Exception):
    """Base error type for all navsync errors.

    Example:
        >>> err = NavsyncError(
        ...     code=ErrorCode.LANGUAGE_NOT_CONFIGURED,
        ...     context={"lang": "fr", "available": "en, zh"},
        ... )
        >>> print(err)
        [NS-5003] Language 'fr' is not configured. Available: en, zh
    """

    def __init__(
        self,
        code: ErrorCode,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        self.code = code
        self.context = context or {}
        self.cause = cause
        super().__init__(str(self))

    @property
    def message(self) -> str:
        """Get the formatted user-friendly message."""
        template = ERROR_MESSAGES.get(self.code, "An error occurred: {detail}")
        try:
            return template.format(**self.context)
        except KeyError:
            return template

    @property
    def recovery_hints(self) -> list[str]:
        """Get recovery suggestions for this error."""
        formatted = []
        for hint in RECOVERY_HINTS.get(self.code, []):
            try:
                formatted.append(hint.format(**self.context))
            except KeyError:
                formatted.append(hint)
        return formatted

    @property
    def is_recoverable(self) -> bool:
        return self.code.is_recoverable

    @property
    def category(self) -> str:
        return self.code.category

    @property
    def error_id(self) -> str:
        """Get the error ID string (e.g., 'NS-5003')."""
        return f"NS-{self.code.value}"

    def __str__(self) -> str:
        return f"[{self.error_id}] {self.message}"

    def __repr__(self) -> str:
        return f"NavsyncError(code={self.code!r}, context={self.context!r})"

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dict for logging and JSON output."""
        return {
            "error_id": self.error_id,
            "code": self.code.value,
            "category": self.category,
            "message": self.message,
            "recoverable": self.is_recoverable,
            "recovery_hints": self.recovery_hints,
            "context": self.context,
        }


# Convenience factory functions

def language_not_configured(lang: str, available: list[str]) -> NavsyncError:
    """Create a LANGUAGE_NOT_CONFIGURED error."""
    return NavsyncError(
        code=ErrorCode.LANGUAGE_NOT_CONFIGURED,
        context={"lang": lang, "available": ", ".join(available) or "(none)"},
    )


def config_error(
    code: ErrorCode,
    detail: str = "",
    path: str = "",
    cause: Exception | None = None,
) -> NavsyncError:
    """Create a configuration error."""
    return NavsyncError(
        code=code,
        context={"detail": detail, "path": path},
        cause=cause,
    )
