"""Owning handle for a build root's temporary storage."""

from __future__ import annotations

import tempfile
from pathlib import Path
from types import TracebackType

from pkg_export_tar.buildroot.context import BuildRootContext
from pkg_export_tar.core.errors import ErrorContext, FilesystemError
from pkg_export_tar.core.logging import get_logger
from pkg_export_tar.core.ui import UI, Status

logger = get_logger(__name__)

WORKDIR_PREFIX = "pkg-export-tar-"
ROOTFS_DIRNAME = "rootfs"


class Workdir:
    """A uniquely named temporary directory removed by :meth:`cleanup`."""

    def __init__(self, parent: str | Path | None = None) -> None:
        try:
            self._tmp = tempfile.TemporaryDirectory(prefix=WORKDIR_PREFIX, dir=parent)
        except OSError as exc:
            raise FilesystemError(
                f"Unable to create a temporary build directory: {exc}",
                context=ErrorContext(path=str(parent) if parent else None),
                cause=exc,
            ) from exc
        self.path = Path(self._tmp.name)

    @property
    def rootfs(self) -> Path:
        return self.path / ROOTFS_DIRNAME

    def cleanup(self) -> None:
        self._tmp.cleanup()


class BuildRoot:
    """A populated root filesystem and the temporary directory holding it.

    ``destroy()`` removes the backing storage; it is safe to call more than
    once. Using the build root as a context manager destroys it on exit.
    """

    def __init__(self, workdir: Workdir, context: BuildRootContext) -> None:
        self._workdir = workdir
        self.context = context
        self._destroyed = False

    @property
    def workdir(self) -> Path:
        return self._workdir.path

    @property
    def rootfs(self) -> Path:
        return self.context.rootfs

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    def destroy(self, ui: UI | None = None) -> None:
        if self._destroyed:
            return
        if ui is not None:
            ui.status(Status.DELETING, f"temporary files in {self.workdir}")
        self._workdir.cleanup()
        self._destroyed = True
        logger.debug("buildroot.destroyed", workdir=str(self.workdir))

    def __enter__(self) -> BuildRoot:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.destroy()

    def __repr__(self) -> str:
        return f"BuildRoot(workdir={str(self.workdir)!r}, destroyed={self._destroyed})"


__all__ = ["BuildRoot", "Workdir"]
