"""Package identifiers, artifacts, and installed package metadata."""

from pkg_export_tar.package.archive import HART_FORMAT_VERSION, PackageArchive
from pkg_export_tar.package.ident import PackageIdent, release_key, version_key
from pkg_export_tar.package.install import PKG_PATH, PackageInstall, pkg_root_path
from pkg_export_tar.package.resolver import is_artifact, resolve_ident

__all__ = [
    "HART_FORMAT_VERSION",
    "PKG_PATH",
    "PackageArchive",
    "PackageIdent",
    "PackageInstall",
    "is_artifact",
    "pkg_root_path",
    "release_key",
    "resolve_ident",
    "version_key",
]
