"""Write a finished build root to a gzip-compressed tarball.

Only the package namespace is archived: ``hab/pkgs`` and, when present,
``hab/bin``. Members keep their ``hab/`` prefix so extracting the archive
at ``/`` reproduces the install layout.

The archive is written to a temporary file in the destination directory
and renamed into place once complete, so the target path never holds a
partial archive.
"""

from __future__ import annotations

import os
import tarfile
import tempfile
from pathlib import Path

from pkg_export_tar.buildroot.root import BuildRoot
from pkg_export_tar.core.errors import ArchiveError, ErrorContext, ExportError
from pkg_export_tar.core.logging import get_logger
from pkg_export_tar.core.ui import UI, Status
from pkg_export_tar.package.archive import PackageArchive
from pkg_export_tar.package.ident import PackageIdent
from pkg_export_tar.package.install import PackageInstall
from pkg_export_tar.package.resolver import is_artifact

logger = get_logger(__name__)

ARCHIVE_MEMBERS = ("hab/pkgs", "hab/bin")
ARCHIVE_MODE = 0o644


def tarball_name(ident: PackageIdent) -> str:
    """``origin-name-version-release.tar.gz``; raises ArchiveError unless fully qualified."""
    return ident.archive_name("tar.gz")


def resolve_tarball_ident(token: str, rootfs: Path) -> PackageIdent:
    """Concrete identifier used to name the archive.

    An artifact names the archive with its own embedded identifier. Any
    other token is looked up among the packages installed in ``rootfs``
    (newest version, then newest release, when several match).
    """
    try:
        if is_artifact(token):
            return PackageArchive(token).ident()
        return PackageInstall.load(PackageIdent.from_str(token), rootfs).ident
    except ArchiveError:
        raise
    except ExportError as exc:
        raise ArchiveError(
            f"Unable to determine the archive identifier for {token}: {exc.message}",
            context=ErrorContext(token=token, path=str(rootfs)),
            cause=exc,
        ) from exc


class TarballBuilder:
    """Archives a build root into ``dest_dir``.

    Example::

        path = TarballBuilder(Path.cwd()).build(build_root, ui)
    """

    def __init__(self, dest_dir: str | Path | None = None) -> None:
        self.dest_dir = Path(dest_dir) if dest_dir is not None else Path.cwd()
        self.last_ident: PackageIdent | None = None

    def build(self, build_root: BuildRoot, ui: UI) -> Path:
        context = build_root.context
        token = context.primary_token

        ui.status(Status.DETERMINING, f"archive name from {token}")
        ident = resolve_tarball_ident(token, context.rootfs)
        target = self.dest_dir / tarball_name(ident)
        self.last_ident = ident

        ui.status(Status.ARCHIVING, f"{context.rootfs} into {target.name}")
        self._write(context.rootfs, target)
        ui.status(Status.CREATED, str(target))
        logger.info("tarball.written", path=str(target), ident=str(ident))
        return target

    def _write(self, rootfs: Path, target: Path) -> None:
        try:
            self.dest_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{target.name}.", suffix=".partial", dir=self.dest_dir
            )
        except OSError as exc:
            raise ArchiveError(
                f"Unable to create {target}: {exc}",
                context=ErrorContext(path=str(target)),
                cause=exc,
            ) from exc

        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as handle, tarfile.open(fileobj=handle, mode="w:gz") as tar:
                for member in ARCHIVE_MEMBERS:
                    source = rootfs / member
                    if source.exists():
                        tar.add(str(source), arcname=member)
            tmp_path.chmod(ARCHIVE_MODE)
            os.replace(tmp_path, target)
        except (OSError, tarfile.TarError) as exc:
            tmp_path.unlink(missing_ok=True)
            raise ArchiveError(
                f"Unable to write {target}: {exc}",
                context=ErrorContext(path=str(target)),
                cause=exc,
            ) from exc
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise


__all__ = ["ARCHIVE_MEMBERS", "TarballBuilder", "resolve_tarball_ident", "tarball_name"]
