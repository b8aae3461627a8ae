"""Build specification and the build root construction pipeline.

``BuildSpec.create()`` turns a list of tokens into a populated, validated
build root::

    workdir ─► skeleton ─► stage caches ─► base packages ─► user packages
            ─► unstage caches ─► BuildRootContext (≥ 1 service)

Any failure discards the whole workdir. Cache staging is undone on every
exit path, including failed installs.

Example::

    spec = BuildSpec.from_settings(["core/redis"], get_settings())
    with spec.create(UI(), installer=HabCliInstaller()) as build_root:
        print(build_root.context.primary_token)
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pkg_export_tar.buildroot.binlink import BIN_PATH, binlink_package
from pkg_export_tar.buildroot.context import (
    BasePackages,
    BuildRootContext,
    PackageClassification,
    classify,
)
from pkg_export_tar.buildroot.installer import PackageInstaller
from pkg_export_tar.buildroot.root import BuildRoot, Workdir
from pkg_export_tar.buildroot.rootfs import SkeletonBuilder, default_skeleton
from pkg_export_tar.buildroot.staging import staged_caches
from pkg_export_tar.core.config.settings import (
    CACHE_ARTIFACT_PATH,
    CACHE_KEY_PATH,
    DEFAULT_BLDR_URL,
    DEFAULT_BUSYBOX_IDENT,
    DEFAULT_CHANNEL,
    DEFAULT_HAB_IDENT,
    DEFAULT_LAUNCHER_IDENT,
    DEFAULT_SUP_IDENT,
    ExportSettings,
    default_cache_path,
)
from pkg_export_tar.core.errors import ErrorContext, ExportError, FilesystemError
from pkg_export_tar.core.logging import LogContext, get_logger
from pkg_export_tar.core.ui import UI, Status
from pkg_export_tar.package.ident import PackageIdent
from pkg_export_tar.package.install import PackageInstall
from pkg_export_tar.package.resolver import resolve_ident

logger = get_logger(__name__)

POSIX_BIN_PATH = "/bin"

PLATFORM_SKELETON = object()


def _is_linux() -> bool:
    return sys.platform.startswith("linux")


class BuildSpec(BaseModel):
    """Immutable description of one build root.

    Parameters
    ----------
    tokens
        Package identifiers or local artifact paths, in request order.
    url, channel
        Endpoint and release channel for the requested packages.
    base_pkgs_url, base_pkgs_channel
        Endpoint and release channel for the base packages.
    hab, hab_sup, hab_launcher, busybox
        Base package identifiers.
    install_busybox
        Whether the POSIX utility package is installed (Linux by default).
    """

    model_config = ConfigDict(frozen=True)

    tokens: tuple[str, ...] = Field(min_length=1, description="Package tokens to install")

    url: str = Field(default=DEFAULT_BLDR_URL)
    channel: str = Field(default=DEFAULT_CHANNEL)
    base_pkgs_url: str = Field(default=DEFAULT_BLDR_URL)
    base_pkgs_channel: str = Field(default=DEFAULT_CHANNEL)

    hab: str = Field(default=DEFAULT_HAB_IDENT)
    hab_sup: str = Field(default=DEFAULT_SUP_IDENT)
    hab_launcher: str = Field(default=DEFAULT_LAUNCHER_IDENT)
    busybox: str = Field(default=DEFAULT_BUSYBOX_IDENT)
    install_busybox: bool = Field(default_factory=_is_linux)

    artifact_cache_path: Path = Field(default_factory=lambda: default_cache_path(CACHE_ARTIFACT_PATH))
    key_cache_path: Path = Field(default_factory=lambda: default_cache_path(CACHE_KEY_PATH))

    @field_validator("tokens")
    @classmethod
    def _no_blank_tokens(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if any(not token.strip() for token in value):
            raise ValueError("package tokens must not be blank")
        return value

    @classmethod
    def from_settings(
        cls,
        tokens: list[str] | tuple[str, ...],
        settings: ExportSettings,
        **overrides: Any,
    ) -> BuildSpec:
        """Build a spec from settings; non-``None`` overrides win."""
        values: dict[str, Any] = {
            "tokens": tuple(tokens),
            "url": settings.bldr_url,
            "channel": settings.channel,
            "base_pkgs_url": settings.effective_base_pkgs_url,
            "base_pkgs_channel": settings.effective_base_pkgs_channel,
            "hab": settings.hab_pkg,
            "hab_sup": settings.hab_sup_pkg,
            "hab_launcher": settings.hab_launcher_pkg,
            "busybox": settings.busybox_pkg,
            "artifact_cache_path": settings.artifact_cache_path,
            "key_cache_path": settings.key_cache_path,
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def create(
        self,
        ui: UI,
        *,
        installer: PackageInstaller,
        skeleton: SkeletonBuilder | None | object = PLATFORM_SKELETON,
        workdir_parent: str | Path | None = None,
    ) -> BuildRoot:
        """Populate a new build root.

        ``skeleton`` defaults to the running platform's skeleton builder;
        pass ``None`` to skip the skeleton step.

        Raises:
            ResolutionError: A token is neither an artifact nor an identifier.
            InstallError: The installer failed.
            MetadataError: Installed metadata could not be read.
            FilesystemError: Workdir, skeleton, or cache link management failed.
            PrimaryServicePackageNotFound: No requested package is a service.
        """
        if skeleton is PLATFORM_SKELETON:
            skeleton = default_skeleton()

        workdir = Workdir(workdir_parent)
        ui.status(Status.CREATING, f"build root in {workdir.path}")
        try:
            with LogContext(workdir=str(workdir.path)):
                context = self._prepare_rootfs(ui, installer, skeleton, workdir.rootfs)
        except BaseException:
            workdir.cleanup()
            raise

        return BuildRoot(workdir, context)

    def _prepare_rootfs(
        self,
        ui: UI,
        installer: PackageInstaller,
        skeleton: SkeletonBuilder | None,
        rootfs: Path,
    ) -> BuildRootContext:
        ui.status(Status.CREATING, "root filesystem")
        try:
            rootfs.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise FilesystemError(
                f"Unable to create root filesystem {rootfs}: {exc}",
                context=ErrorContext(path=str(rootfs)),
                cause=exc,
            ) from exc
        if skeleton is not None:
            skeleton.create(rootfs)

        with staged_caches(rootfs, self.artifact_cache_path, self.key_cache_path, ui):
            base = self._install_base_pkgs(ui, installer, rootfs)
            packages = self._install_user_pkgs(ui, installer, rootfs)

        env_path = str(BIN_PATH)
        if base.busybox is not None:
            env_path = f"{env_path}:{POSIX_BIN_PATH}"

        return BuildRootContext.from_classifications(
            packages,
            list(self.tokens),
            channel=self.channel,
            rootfs=rootfs,
            bin_path=BIN_PATH,
            env_path=env_path,
            base=base,
        )

    def _install_base_pkgs(self, ui: UI, installer: PackageInstaller, rootfs: Path) -> BasePackages:
        hab = self._install(ui, installer, self.hab, self.base_pkgs_url, self.base_pkgs_channel, rootfs)
        sup = self._install(ui, installer, self.hab_sup, self.base_pkgs_url, self.base_pkgs_channel, rootfs)
        launcher = self._install(
            ui, installer, self.hab_launcher, self.base_pkgs_url, self.base_pkgs_channel, rootfs
        )
        busybox = None
        if self.install_busybox:
            busybox = self._install(
                ui, installer, self.busybox, self.base_pkgs_url, self.base_pkgs_channel, rootfs
            )

        ui.status(Status.LINKING, f"{hab} binaries into {BIN_PATH}")
        binlink_package(PackageInstall.load(hab, rootfs), rootfs)

        return BasePackages(hab=hab, sup=sup, launcher=launcher, busybox=busybox)

    def _install_user_pkgs(
        self, ui: UI, installer: PackageInstaller, rootfs: Path
    ) -> list[PackageClassification]:
        packages: list[PackageClassification] = []
        for token in self.tokens:
            # Resolve before installing so malformed tokens never reach the installer.
            try:
                ident = resolve_ident(token)
            except ExportError as exc:
                exc.with_context(token=token)
                raise
            self._install(ui, installer, token, self.url, self.channel, rootfs)
            try:
                packages.append(classify(ident, rootfs))
            except ExportError as exc:
                exc.with_context(token=token)
                raise
        return packages

    def _install(
        self,
        ui: UI,
        installer: PackageInstaller,
        token: str,
        url: str,
        channel: str,
        rootfs: Path,
    ) -> PackageIdent:
        ui.status(Status.INSTALLING, token)
        ident = installer.install(token, url, channel, rootfs, rootfs / CACHE_ARTIFACT_PATH)
        ui.status(Status.INSTALLED, str(ident))
        logger.debug("pipeline.installed", token=token, ident=str(ident), channel=channel)
        return ident


__all__ = ["PLATFORM_SKELETON", "BuildSpec"]
