"""Minimal operating system skeleton for a root filesystem.

Only Linux has a skeleton. On other platforms the build root holds the
package tree alone.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Protocol, runtime_checkable

from pkg_export_tar.core.errors import ErrorContext, FilesystemError
from pkg_export_tar.core.logging import get_logger

logger = get_logger(__name__)

SKELETON_DIRS = ("bin", "etc", "root", "tmp", "var/tmp", "hab")
STICKY_DIRS = ("tmp", "var/tmp")

ETC_PASSWD = """\
root:x:0:0:root:/root:/bin/sh
hab:x:42:42:root:/tmp:/bin/sh
"""

ETC_GROUP = """\
root:x:0:
hab:x:42:hab
"""

ETC_NSSWITCH = """\
passwd: files
group: files
shadow: files
hosts: files dns
networks: files
"""


@runtime_checkable
class SkeletonBuilder(Protocol):
    """Creates a minimal OS directory skeleton at ``path``."""

    def create(self, path: Path) -> None: ...


class LinuxSkeleton:
    """Directories and user database files a Linux rootfs needs to boot a service."""

    def create(self, path: Path) -> None:
        try:
            for name in SKELETON_DIRS:
                (path / name).mkdir(parents=True, exist_ok=True)
            for name in STICKY_DIRS:
                (path / name).chmod(0o1777)

            etc = path / "etc"
            (etc / "passwd").write_text(ETC_PASSWD, encoding="utf-8")
            (etc / "group").write_text(ETC_GROUP, encoding="utf-8")
            (etc / "nsswitch.conf").write_text(ETC_NSSWITCH, encoding="utf-8")
        except OSError as exc:
            raise FilesystemError(
                f"Unable to create OS skeleton in {path}: {exc}",
                context=ErrorContext(path=str(path)),
                cause=exc,
            ) from exc

        logger.debug("skeleton.created", path=str(path))


def default_skeleton() -> SkeletonBuilder | None:
    """Skeleton builder for the running platform, or ``None`` if it has none."""
    if sys.platform.startswith("linux"):
        return LinuxSkeleton()
    return None


__all__ = ["LinuxSkeleton", "SkeletonBuilder", "default_skeleton"]
