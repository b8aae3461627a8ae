"""Executable symlinks for an installed package.

Links are written under ``<rootfs>/hab/bin`` and point at absolute paths
*inside* the target root (``/hab/pkgs/...``), so they only resolve once
the archive is extracted at ``/``.
"""

from __future__ import annotations

import os
from pathlib import Path, PurePosixPath

from pkg_export_tar.core.errors import ErrorContext, FilesystemError
from pkg_export_tar.core.logging import get_logger
from pkg_export_tar.package.install import PackageInstall

logger = get_logger(__name__)

BIN_PATH = PurePosixPath("/hab/bin")


def host_path(rootfs: Path, target: PurePosixPath) -> Path:
    """Map an absolute path inside the target root onto the host."""
    return rootfs.joinpath(*target.parts[1:])


def binlink_package(
    install: PackageInstall,
    rootfs: Path,
    dest: PurePosixPath = BIN_PATH,
) -> list[str]:
    """Symlink every executable the package ships into ``dest``.

    Returns the names linked, in sorted order. Existing links with the same
    name are replaced.
    """
    dest_dir = host_path(rootfs, dest)
    linked: list[str] = []

    try:
        dest_dir.mkdir(parents=True, exist_ok=True)
        for bin_dir in install.paths():
            source_dir = host_path(rootfs, bin_dir)
            if not source_dir.is_dir():
                continue
            for entry in sorted(source_dir.iterdir()):
                if not entry.is_file() or not os.access(entry, os.X_OK):
                    continue
                link = dest_dir / entry.name
                if link.is_symlink() or link.exists():
                    link.unlink()
                link.symlink_to(str(bin_dir / entry.name))
                linked.append(entry.name)
    except OSError as exc:
        raise FilesystemError(
            f"Unable to binlink {install.ident} into {dest}: {exc}",
            context=ErrorContext(ident=str(install.ident), path=str(dest_dir)),
            cause=exc,
        ) from exc

    logger.debug("binlink.complete", ident=str(install.ident), count=len(linked))
    return sorted(linked)


__all__ = ["BIN_PATH", "binlink_package", "host_path"]
