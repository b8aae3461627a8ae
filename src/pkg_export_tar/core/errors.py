"""
Structured error types for the tarball exporter.

Every failure an export can hit is one of a small, closed set of typed
errors. Each carries a category for routing (CLI exit codes, log fields),
an :class:`ErrorContext` naming the offending token / identifier / path,
and the chained underlying exception.

Architecture:
    ::

        ┌───────────────────────────────────────────────────────────────┐
        │                         ExportError                            │
        │            (category, context, cause, to_dict())               │
        ├───────────────────────────────────────────────────────────────┤
        │  ConfigurationError        ResolutionError      InstallError   │
        │  (CONFIG)                  (RESOLUTION)         (INSTALL)      │
        │       │                        │                               │
        │  PrimaryServicePackage-    IdentParseError                     │
        │  NotFound                  ArchiveReadError                    │
        │                                                                │
        │  MetadataError             ArchiveError         FilesystemError│
        │  (METADATA)                (ARCHIVE)            (FILESYSTEM)   │
        └───────────────────────────────────────────────────────────────┘

None of these are retried automatically. A caller may retry the whole
export; nothing below the CLI swallows them.

Examples:
    >>> err = InstallError("install failed").with_context(token="core/redis")
    >>> err.context.token
    'core/redis'
    >>> err.to_dict()["category"]
    'INSTALL'

Tags:
    error-handling, exception-hierarchy, error-context, exporter
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Error categories used for exit codes and log routing."""

    CONFIG = "CONFIG"
    RESOLUTION = "RESOLUTION"
    INSTALL = "INSTALL"
    METADATA = "METADATA"
    ARCHIVE = "ARCHIVE"
    FILESYSTEM = "FILESYSTEM"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """Structured context attached to an :class:`ExportError`.

    Attributes:
        token: User-supplied package identifier or artifact path
        ident: Package identifier (string form) involved in the failure
        path: Filesystem path involved in the failure
        metadata: Additional key-value pairs
    """

    token: str | None = None
    ident: str | None = None
    path: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result: dict[str, Any] = {}
        for key in ("token", "ident", "path"):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class ExportError(Exception):
    """Base exception for all exporter errors.

    Subclasses set ``default_category``; callers may still pass an explicit
    ``category``. When ``cause`` is given it is chained as ``__cause__`` so
    tracebacks keep the root failure.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> ExportError:
        """Add context to this error (fluent API).

        Usage:
            raise InstallError("failed").with_context(token="core/redis")
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigurationError(ExportError):
    """The requested packages cannot form a valid build root."""

    default_category = ErrorCategory.CONFIG


class PrimaryServicePackageNotFound(ConfigurationError):
    """None of the requested packages contains a runnable service."""

    def __init__(self, idents: list[str]):
        self.idents = list(idents)
        joined = ", ".join(self.idents) if self.idents else "<none>"
        super().__init__(
            "A primary service package could not be determined from: "
            f"[{joined}]. At least one package with a run hook must be provided."
        )


# =============================================================================
# RESOLUTION ERRORS
# =============================================================================


class ResolutionError(ExportError):
    """A token is neither a readable artifact file nor a valid identifier."""

    default_category = ErrorCategory.RESOLUTION


class IdentParseError(ResolutionError):
    """A string does not match ``origin/name[/version[/release]]``."""

    def __init__(self, value: str, reason: str | None = None):
        self.value = value
        detail = f": {reason}" if reason else ""
        super().__init__(
            f"Invalid package identifier {value!r}{detail}",
            context=ErrorContext(token=value),
        )


class ArchiveReadError(ResolutionError):
    """A package artifact file could not be read."""


# =============================================================================
# INSTALL / METADATA ERRORS
# =============================================================================


class InstallError(ExportError):
    """The install collaborator failed for a token."""

    default_category = ErrorCategory.INSTALL


class MetadataError(ExportError):
    """Installed package metadata could not be read."""

    default_category = ErrorCategory.METADATA


# =============================================================================
# ARCHIVE / FILESYSTEM ERRORS
# =============================================================================


class ArchiveError(ExportError):
    """The output tarball could not be named or written."""

    default_category = ErrorCategory.ARCHIVE


class FilesystemError(ExportError):
    """Workdir, skeleton, or symlink management failed."""

    default_category = ErrorCategory.FILESYSTEM


__all__ = [
    "ArchiveError",
    "ArchiveReadError",
    "ConfigurationError",
    "ErrorCategory",
    "ErrorContext",
    "ExportError",
    "FilesystemError",
    "IdentParseError",
    "InstallError",
    "MetadataError",
    "PrimaryServicePackageNotFound",
    "ResolutionError",
]
