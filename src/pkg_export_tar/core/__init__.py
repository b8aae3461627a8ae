"""
Core primitives shared by every part of the exporter.

- :mod:`pkg_export_tar.core.errors`: typed error hierarchy
- :mod:`pkg_export_tar.core.logging`: structlog configuration
- :mod:`pkg_export_tar.core.ui`: status line output
- :mod:`pkg_export_tar.core.config`: settings
"""

from pkg_export_tar.core.errors import (
    ArchiveError,
    ArchiveReadError,
    ConfigurationError,
    ErrorCategory,
    ErrorContext,
    ExportError,
    FilesystemError,
    IdentParseError,
    InstallError,
    MetadataError,
    PrimaryServicePackageNotFound,
    ResolutionError,
)
from pkg_export_tar.core.ui import UI, Status

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
    "Status",
    "UI",
]
