"""Installed package metadata under a filesystem root.

Installed packages live at ``<fs_root>/hab/pkgs/<origin>/<name>/<version>/<release>``
and describe themselves through plain metadata files:

- ``IDENT``: fully qualified identifier
- ``hooks/run`` or ``run``: present only for runnable (service) packages
- ``EXPOSES``: whitespace-separated ports the service exposes
- ``PATH``: colon-separated executable directories

When more than one installed version satisfies a fuzzy identifier, the
highest version wins, then the highest release.
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath

from pkg_export_tar.core.errors import ErrorContext, IdentParseError, MetadataError
from pkg_export_tar.package.ident import PackageIdent

PKG_PATH = "hab/pkgs"

IDENT_FILE = "IDENT"
EXPOSES_FILE = "EXPOSES"
PATH_FILE = "PATH"
RUN_HOOK_FILES = ("hooks/run", "run")


def pkg_root_path(fs_root: Path) -> Path:
    """Directory holding every installed package under ``fs_root``."""
    return fs_root / PKG_PATH


class PackageInstall:
    """A package installed under a filesystem root."""

    def __init__(self, ident: PackageIdent, fs_root: Path, installed_path: Path) -> None:
        self.ident = ident
        self.fs_root = fs_root
        self.installed_path = installed_path

    @classmethod
    def load(cls, ident: PackageIdent, fs_root: str | Path) -> PackageInstall:
        """Locate the newest installed package satisfying ``ident``.

        Raises:
            MetadataError: If nothing satisfying ``ident`` is installed or its
                ``IDENT`` file cannot be read.
        """
        root = Path(fs_root)
        candidates = sorted(cls.installed(root, ident), key=PackageIdent.sort_key)
        if not candidates:
            raise MetadataError(
                f"Package {ident} is not installed under {root}",
                context=ErrorContext(ident=str(ident), path=str(root)),
            )

        latest = candidates[-1]
        path = pkg_root_path(root).joinpath(
            latest.origin, latest.name, latest.version or "", latest.release or ""
        )
        loaded = cls(latest, root, path)
        loaded._verify_ident_file()
        return loaded

    @staticmethod
    def installed(fs_root: Path, request: PackageIdent) -> list[PackageIdent]:
        """All fully qualified identifiers installed under ``fs_root`` satisfying ``request``."""
        name_dir = pkg_root_path(fs_root) / request.origin / request.name
        if not name_dir.is_dir():
            return []

        found: list[PackageIdent] = []
        for version_dir in name_dir.iterdir():
            if not version_dir.is_dir():
                continue
            for release_dir in version_dir.iterdir():
                if not release_dir.is_dir():
                    continue
                try:
                    ident = PackageIdent.from_str(
                        f"{request.origin}/{request.name}/{version_dir.name}/{release_dir.name}"
                    )
                except IdentParseError:
                    continue
                if ident.satisfies(request):
                    found.append(ident)
        return found

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    def is_runnable(self) -> bool:
        """True if the package ships a run hook."""
        return any((self.installed_path / hook).is_file() for hook in RUN_HOOK_FILES)

    def exposes(self) -> list[str]:
        """Ports declared in ``EXPOSES`` (empty when the file is absent)."""
        content = self._read_optional(EXPOSES_FILE)
        if content is None:
            return []
        return content.split()

    def paths(self) -> list[PurePosixPath]:
        """Executable directories as absolute paths inside the target root."""
        content = self._read_optional(PATH_FILE)
        if content is None:
            return [self.target_path() / "bin"]
        return [PurePosixPath(entry) for entry in content.strip().split(":") if entry]

    def target_path(self) -> PurePosixPath:
        """Install location as seen from inside the target root."""
        return PurePosixPath("/", PKG_PATH, *str(self.ident).split("/"))

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _verify_ident_file(self) -> None:
        content = self._read_optional(IDENT_FILE)
        if content is None:
            raise MetadataError(
                f"Installed package {self.ident} has no {IDENT_FILE} file",
                context=ErrorContext(ident=str(self.ident), path=str(self.installed_path)),
            )
        if content.strip() != str(self.ident):
            raise MetadataError(
                f"Installed package at {self.installed_path} identifies as "
                f"{content.strip()!r}, expected {str(self.ident)!r}",
                context=ErrorContext(ident=str(self.ident), path=str(self.installed_path)),
            )

    def _read_optional(self, name: str) -> str | None:
        path = self.installed_path / name
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise MetadataError(
                f"Unable to read {name} for {self.ident}: {exc}",
                context=ErrorContext(ident=str(self.ident), path=str(path)),
                cause=exc,
            ) from exc

    def __repr__(self) -> str:
        return f"PackageInstall({str(self.ident)!r}, {str(self.installed_path)!r})"


__all__ = [
    "EXPOSES_FILE",
    "IDENT_FILE",
    "PATH_FILE",
    "PKG_PATH",
    "PackageInstall",
    "pkg_root_path",
]
