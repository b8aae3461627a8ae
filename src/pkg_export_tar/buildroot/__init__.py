"""
Build root construction.

- :class:`BuildSpec`: immutable input, ``create()`` runs the pipeline
- :class:`BuildRoot`: owning handle over the temporary workdir
- :class:`BuildRootContext`: classified packages of a finished root
- :class:`PackageInstaller` / :class:`HabCliInstaller`: install collaborator
- :class:`SkeletonBuilder` / :class:`LinuxSkeleton`: OS skeleton collaborator
"""

from pkg_export_tar.buildroot.binlink import BIN_PATH, binlink_package
from pkg_export_tar.buildroot.context import (
    BasePackages,
    BuildRootContext,
    LibraryPackage,
    PackageClassification,
    ServicePackage,
    classify,
)
from pkg_export_tar.buildroot.installer import HabCliInstaller, PackageInstaller
from pkg_export_tar.buildroot.root import BuildRoot, Workdir
from pkg_export_tar.buildroot.rootfs import LinuxSkeleton, SkeletonBuilder, default_skeleton
from pkg_export_tar.buildroot.spec import BuildSpec
from pkg_export_tar.buildroot.staging import staged_caches

__all__ = [
    "BIN_PATH",
    "BasePackages",
    "BuildRoot",
    "BuildRootContext",
    "BuildSpec",
    "HabCliInstaller",
    "LibraryPackage",
    "LinuxSkeleton",
    "PackageClassification",
    "PackageInstaller",
    "ServicePackage",
    "SkeletonBuilder",
    "Workdir",
    "binlink_package",
    "classify",
    "default_skeleton",
    "staged_caches",
]
