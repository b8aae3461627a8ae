"""Host cache staging.

Installs run with the rootfs as their filesystem root, so they would
normally read and write ``<rootfs>/hab/cache/...``. Symlinking those
paths at the host caches lets every export share one download cache.
The links hold absolute host paths and must never reach an archive, so
staging is a scope: whatever happens inside, the links and any parent
directories created for them are removed on the way out.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from pkg_export_tar.core.config.settings import CACHE_ARTIFACT_PATH, CACHE_KEY_PATH
from pkg_export_tar.core.errors import ErrorContext, FilesystemError
from pkg_export_tar.core.logging import get_logger
from pkg_export_tar.core.ui import UI, Status

logger = get_logger(__name__)


@contextmanager
def staged_caches(
    rootfs: Path,
    artifact_cache: Path,
    key_cache: Path,
    ui: UI | None = None,
) -> Iterator[None]:
    """Link the host artifact and key caches into ``rootfs`` for the duration of the block."""
    links = (
        ("artifact cache", rootfs / CACHE_ARTIFACT_PATH, artifact_cache),
        ("key cache", rootfs / CACHE_KEY_PATH, key_cache),
    )
    created_dirs: list[Path] = []
    staged: list[tuple[str, Path]] = []

    try:
        for label, link, target in links:
            if ui is not None:
                ui.status(Status.CREATING, f"{label} symlink")
            _mkdirs(target, [])
            _mkdirs(link.parent, created_dirs)
            try:
                link.symlink_to(target, target_is_directory=True)
            except OSError as exc:
                raise FilesystemError(
                    f"Unable to link {link} to {target}: {exc}",
                    context=ErrorContext(path=str(link)),
                    cause=exc,
                ) from exc
            staged.append((label, link))
            logger.debug("cache.staged", link=str(link), target=str(target))
        yield
    finally:
        for label, link in reversed(staged):
            if ui is not None:
                ui.status(Status.DELETING, f"{label} symlink")
            _remove_link(link)
        for directory in reversed(created_dirs):
            _remove_empty_dir(directory)
        logger.debug("cache.unstaged", rootfs=str(rootfs))


def _mkdirs(path: Path, created: list[Path]) -> None:
    """Create ``path`` and missing parents, recording each one created (outermost first)."""
    missing: list[Path] = []
    current = path
    while not current.exists():
        missing.append(current)
        current = current.parent
    try:
        for directory in reversed(missing):
            directory.mkdir()
            created.append(directory)
    except OSError as exc:
        raise FilesystemError(
            f"Unable to create directory {path}: {exc}",
            context=ErrorContext(path=str(path)),
            cause=exc,
        ) from exc


def _remove_link(link: Path) -> None:
    try:
        link.unlink()
    except FileNotFoundError:
        pass
    except OSError as exc:
        raise FilesystemError(
            f"Unable to remove cache symlink {link}: {exc}",
            context=ErrorContext(path=str(link)),
            cause=exc,
        ) from exc


def _remove_empty_dir(directory: Path) -> None:
    try:
        directory.rmdir()
    except FileNotFoundError:
        pass
    except OSError:
        # Left in place when a package wrote into it.
        logger.debug("cache.dir_kept", path=str(directory))


__all__ = ["staged_caches"]
