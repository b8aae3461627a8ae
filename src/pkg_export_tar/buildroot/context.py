"""The validated model of a finished build root.

Each requested package is classified once, right after it is installed:

- :class:`ServicePackage` has a run hook and carries its exposed ports.
- :class:`LibraryPackage` has no run hook.

``PackageClassification`` is the union of the two, discriminated by
``kind``. Code that needs to tell them apart matches on the variant.

A :class:`BuildRootContext` with no service package is never built;
:meth:`BuildRootContext.from_classifications` raises
:class:`PrimaryServicePackageNotFound` instead.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Literal

from pkg_export_tar.core.errors import ConfigurationError, PrimaryServicePackageNotFound
from pkg_export_tar.core.logging import get_logger
from pkg_export_tar.package.ident import PackageIdent
from pkg_export_tar.package.install import PackageInstall

logger = get_logger(__name__)


@dataclass(frozen=True)
class ServicePackage:
    """A runnable package and the ports it declares."""

    ident: PackageIdent
    exposes: tuple[str, ...] = ()
    kind: Literal["service"] = field(default="service", init=False)


@dataclass(frozen=True)
class LibraryPackage:
    """A package with no run hook."""

    ident: PackageIdent
    kind: Literal["library"] = field(default="library", init=False)


PackageClassification = ServicePackage | LibraryPackage


def classify(ident: PackageIdent, fs_root: Path) -> PackageClassification:
    """Classify an installed package from its on-disk metadata.

    Raises:
        MetadataError: If the package's metadata cannot be read.
    """
    install = PackageInstall.load(ident, fs_root)
    if install.is_runnable():
        return ServicePackage(ident=ident, exposes=tuple(install.exposes()))
    return LibraryPackage(ident=ident)


@dataclass(frozen=True)
class BasePackages:
    """Fully qualified identifiers of the base packages installed in every root."""

    hab: PackageIdent
    sup: PackageIdent
    launcher: PackageIdent
    busybox: PackageIdent | None = None

    def idents(self) -> list[PackageIdent]:
        found = [self.hab, self.sup, self.launcher]
        if self.busybox is not None:
            found.append(self.busybox)
        return found

    def classifications(self) -> list[LibraryPackage]:
        return [LibraryPackage(ident=ident) for ident in self.idents()]


@dataclass(frozen=True)
class BuildRootContext:
    """Classified packages of a build root plus the facts needed to archive it.

    Attributes:
        packages: One classification per requested token, in request order
        tokens: The requested tokens, parallel to ``packages``
        channel: Release channel user packages were installed from
        rootfs: Host path of the root filesystem
        bin_path: Executable symlink directory inside the target root
        env_path: ``PATH`` value for processes inside the target root
        base: Base packages installed alongside, when known
    """

    packages: tuple[PackageClassification, ...]
    tokens: tuple[str, ...]
    channel: str
    rootfs: Path
    bin_path: PurePosixPath
    env_path: str
    base: BasePackages | None = None

    @classmethod
    def from_classifications(
        cls,
        packages: list[PackageClassification],
        tokens: list[str],
        *,
        channel: str,
        rootfs: Path,
        bin_path: PurePosixPath,
        env_path: str,
        base: BasePackages | None = None,
    ) -> BuildRootContext:
        """Build and validate a context.

        Raises:
            ConfigurationError: If ``packages`` and ``tokens`` differ in length.
            PrimaryServicePackageNotFound: If no package is a service.
        """
        if len(packages) != len(tokens):
            raise ConfigurationError(
                f"Got {len(packages)} classifications for {len(tokens)} tokens"
            )
        context = cls(
            packages=tuple(packages),
            tokens=tuple(tokens),
            channel=channel,
            rootfs=rootfs,
            bin_path=bin_path,
            env_path=env_path,
            base=base,
        )
        context.validate()
        logger.debug(
            "context.built",
            services=[str(i) for i in context.svc_idents()],
            libraries=[str(i) for i in context.lib_idents()],
        )
        return context

    def validate(self) -> None:
        if not self.svc_idents():
            raise PrimaryServicePackageNotFound([str(p.ident) for p in self.packages])

    def svc_idents(self) -> list[PackageIdent]:
        return [p.ident for p in self.packages if isinstance(p, ServicePackage)]

    def lib_idents(self) -> list[PackageIdent]:
        return [p.ident for p in self.packages if isinstance(p, LibraryPackage)]

    @property
    def primary_service(self) -> ServicePackage:
        """The first service package in request order."""
        for package in self.packages:
            if isinstance(package, ServicePackage):
                return package
        raise PrimaryServicePackageNotFound([str(p.ident) for p in self.packages])

    @property
    def primary_token(self) -> str:
        """The token the primary service package was requested with."""
        primary = self.primary_service
        for package, token in zip(self.packages, self.tokens):
            if package is primary:
                return token
        raise PrimaryServicePackageNotFound(list(self.tokens))


__all__ = [
    "BasePackages",
    "BuildRootContext",
    "LibraryPackage",
    "PackageClassification",
    "ServicePackage",
    "classify",
]
