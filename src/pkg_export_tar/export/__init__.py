"""Archiving a build root and the top-level export workflow."""

from pkg_export_tar.export.results import ExportResult, ExportStatus, PackageSummary
from pkg_export_tar.export.tarball import (
    ARCHIVE_MEMBERS,
    TarballBuilder,
    resolve_tarball_ident,
    tarball_name,
)
from pkg_export_tar.export.workflow import export, summarize

__all__ = [
    "ARCHIVE_MEMBERS",
    "ExportResult",
    "ExportStatus",
    "PackageSummary",
    "TarballBuilder",
    "export",
    "resolve_tarball_ident",
    "summarize",
    "tarball_name",
]
