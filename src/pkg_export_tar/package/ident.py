"""Package identifiers: ``origin/name[/version[/release]]``."""

from __future__ import annotations

import re
from dataclasses import dataclass

from pkg_export_tar.core.errors import ArchiveError, ErrorContext, IdentParseError

_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_.-]*$")
_VERSION_PATTERN = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_.+-]*$")
_RELEASE_PATTERN = re.compile(r"^[0-9]+$")
_VERSION_EXTENSION = re.compile(r"[+-]")


@dataclass(frozen=True)
class PackageIdent:
    """Canonical package identifier.

    ``version`` and ``release`` are optional. An identifier with both set
    is *fully qualified*; one without them is *fuzzy* and is satisfied by
    any installed version.
    """

    origin: str
    name: str
    version: str | None = None
    release: str | None = None

    def __post_init__(self) -> None:
        if self.release is not None and self.version is None:
            raise IdentParseError(str(self), "a release requires a version")

    @classmethod
    def from_str(cls, value: str) -> PackageIdent:
        """Parse ``origin/name[/version[/release]]``.

        Raises:
            IdentParseError: If the string does not match the grammar.
        """
        raw = value.strip()
        parts = raw.split("/")
        if len(parts) < 2 or len(parts) > 4:
            raise IdentParseError(value, "expected origin/name[/version[/release]]")

        origin, name = parts[0], parts[1]
        if not _NAME_PATTERN.match(origin):
            raise IdentParseError(value, f"invalid origin {origin!r}")
        if not _NAME_PATTERN.match(name):
            raise IdentParseError(value, f"invalid name {name!r}")

        version = parts[2] if len(parts) > 2 else None
        release = parts[3] if len(parts) > 3 else None
        if version is not None and not _VERSION_PATTERN.match(version):
            raise IdentParseError(value, f"invalid version {version!r}")
        if release is not None and not _RELEASE_PATTERN.match(release):
            raise IdentParseError(value, f"invalid release {release!r}")

        return cls(origin=origin, name=name, version=version, release=release)

    def __str__(self) -> str:
        return "/".join(
            part for part in (self.origin, self.name, self.version, self.release) if part is not None
        )

    @property
    def fully_qualified(self) -> bool:
        return self.version is not None and self.release is not None

    def archive_name(self, extension: str = "tar.gz") -> str:
        """File name for an archive of this package: ``origin-name-version-release.<ext>``.

        Raises:
            ArchiveError: If version or release is missing.
        """
        if not self.fully_qualified:
            raise ArchiveError(
                f"Cannot name an archive for {self}: version and release are required",
                context=ErrorContext(ident=str(self)),
            )
        return f"{self.origin}-{self.name}-{self.version}-{self.release}.{extension}"

    def fuzzy(self) -> PackageIdent:
        """Return the ``origin/name`` form of this identifier."""
        return PackageIdent(origin=self.origin, name=self.name)

    def satisfies(self, request: PackageIdent) -> bool:
        """True if this identifier meets every field ``request`` pins."""
        if (self.origin, self.name) != (request.origin, request.name):
            return False
        if request.version is not None and self.version != request.version:
            return False
        if request.release is not None and self.release != request.release:
            return False
        return True

    def sort_key(self) -> tuple[object, ...]:
        """Ordering key: newest version, then newest release, sorts last."""
        return (
            self.origin,
            self.name,
            version_key(self.version),
            release_key(self.release),
        )


def version_key(version: str | None) -> tuple[tuple[tuple[int, int | str], ...], tuple[int, str]]:
    """Sort key for dotted versions; numeric segments compare numerically.

    A ``-`` or ``+`` extension (``1.2.0-rc1``) is compared only after the
    dotted part and ranks below the same version without one.
    """
    if version is None:
        return (), (0, "")
    base, *extension = _VERSION_EXTENSION.split(version, maxsplit=1)
    key: list[tuple[int, int | str]] = []
    for segment in base.split("."):
        if segment.isdigit():
            key.append((1, int(segment)))
        else:
            key.append((0, segment))
    if extension:
        return tuple(key), (0, extension[0])
    return tuple(key), (1, "")


def release_key(release: str | None) -> int:
    if release is None or not release.isdigit():
        return -1
    return int(release)


__all__ = ["PackageIdent", "release_key", "version_key"]
