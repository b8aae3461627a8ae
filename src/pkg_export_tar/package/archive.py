"""Reader for ``.hart`` package artifact files.

A ``.hart`` file is a five-line plain-text header followed by an
xz-compressed tarball of the package's ``hab/pkgs/...`` tree::

    HART-1
    <signing key name>
    <hash type>
    <base64 signature>
    <blank line>
    <xz tarball>

Only the identifier embedded in the package's ``IDENT`` file is needed
here; signature checks belong to the install collaborator.
"""

from __future__ import annotations

import lzma
import tarfile
from pathlib import Path

from pkg_export_tar.core.errors import ArchiveReadError, ErrorContext, IdentParseError
from pkg_export_tar.core.logging import get_logger
from pkg_export_tar.package.ident import PackageIdent

logger = get_logger(__name__)

HART_FORMAT_VERSION = "HART-1"
HEADER_LINES = 5


class PackageArchive:
    """A package artifact file on disk."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._ident: PackageIdent | None = None

    def ident(self) -> PackageIdent:
        """Read the fully qualified identifier from the archive's ``IDENT`` file."""
        if self._ident is not None:
            return self._ident

        with self._open() as handle:
            self._read_header(handle)
            raw = self._read_ident_member(handle)

        try:
            ident = PackageIdent.from_str(raw)
        except IdentParseError as exc:
            raise ArchiveReadError(
                f"Artifact {self.path} contains an invalid IDENT {raw!r}",
                context=ErrorContext(path=str(self.path)),
                cause=exc,
            ) from exc
        if not ident.fully_qualified:
            raise ArchiveReadError(
                f"Artifact {self.path} IDENT {raw!r} is not fully qualified",
                context=ErrorContext(path=str(self.path)),
            )

        logger.debug("archive.ident", path=str(self.path), ident=str(ident))
        self._ident = ident
        return ident

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _open(self):
        try:
            return self.path.open("rb")
        except OSError as exc:
            raise self._read_error(f"Unable to open artifact {self.path}: {exc}", exc) from exc

    def _read_header(self, handle) -> list[str]:
        lines: list[str] = []
        for _ in range(HEADER_LINES):
            raw = handle.readline()
            if not raw.endswith(b"\n"):
                raise self._read_error(f"Artifact {self.path} has a truncated header")
            try:
                lines.append(raw.decode("utf-8").rstrip("\n"))
            except UnicodeDecodeError as exc:
                raise self._read_error(f"Artifact {self.path} header is not UTF-8", exc) from exc

        if lines[0] != HART_FORMAT_VERSION:
            raise self._read_error(
                f"Artifact {self.path} has unsupported format {lines[0]!r}, "
                f"expected {HART_FORMAT_VERSION!r}"
            )
        if lines[-1] != "":
            raise self._read_error(f"Artifact {self.path} header is not blank-line terminated")
        return lines[:-1]

    def _read_ident_member(self, handle) -> str:
        try:
            with tarfile.open(fileobj=handle, mode="r|xz") as tar:
                for member in tar:
                    if member.isfile() and _is_ident_member(member.name):
                        extracted = tar.extractfile(member)
                        if extracted is None:
                            break
                        return extracted.read().decode("utf-8").strip()
        except (tarfile.TarError, lzma.LZMAError, EOFError, UnicodeDecodeError) as exc:
            raise self._read_error(f"Artifact {self.path} payload is unreadable: {exc}", exc) from exc

        raise self._read_error(f"Artifact {self.path} does not contain an IDENT file")

    def _read_error(self, message: str, cause: BaseException | None = None) -> ArchiveReadError:
        return ArchiveReadError(message, context=ErrorContext(path=str(self.path)), cause=cause)


def _is_ident_member(name: str) -> bool:
    parts = [part for part in name.split("/") if part not in ("", ".")]
    # hab/pkgs/<origin>/<name>/<version>/<release>/IDENT
    return len(parts) == 7 and parts[:2] == ["hab", "pkgs"] and parts[-1] == "IDENT"


__all__ = ["HART_FORMAT_VERSION", "PackageArchive"]
