"""Install collaborator: put a package into a filesystem root.

The exporter never resolves, downloads, or verifies packages itself.
It hands each token to a :class:`PackageInstaller` and then reads the
installed metadata back from the root.

``HabCliInstaller`` is the default collaborator and drives the ``hab``
CLI via subprocess, pointing it at the build root with ``FS_ROOT``.
"""

from __future__ import annotations

import os
import subprocess
from pathlib import Path
from typing import Protocol, runtime_checkable

from pkg_export_tar.core.errors import ErrorContext, ExportError, InstallError
from pkg_export_tar.core.logging import get_logger
from pkg_export_tar.package.ident import PackageIdent
from pkg_export_tar.package.install import PackageInstall
from pkg_export_tar.package.resolver import resolve_ident

logger = get_logger(__name__)


@runtime_checkable
class PackageInstaller(Protocol):
    """Installs one package token into ``fs_root``."""

    def install(
        self,
        token: str,
        url: str,
        channel: str,
        fs_root: Path,
        artifact_cache_path: Path,
    ) -> PackageIdent:
        """Install ``token`` and return the fully qualified identifier installed."""
        ...


class HabCliInstaller:
    """Installs packages with ``hab pkg install``.

    Parameters
    ----------
    hab_binary
        Executable name or path of the package manager CLI.
    timeout
        Seconds to wait for a single install before giving up.

    Example::

        installer = HabCliInstaller()
        ident = installer.install(
            "core/redis", "https://bldr.habitat.sh", "stable",
            Path("/tmp/x/rootfs"), Path("/hab/cache/artifacts"),
        )
    """

    def __init__(self, hab_binary: str = "hab", timeout: int = 1800) -> None:
        self.hab_binary = hab_binary
        self.timeout = timeout

    def install(
        self,
        token: str,
        url: str,
        channel: str,
        fs_root: Path,
        artifact_cache_path: Path,
    ) -> PackageIdent:
        # Parse first so a malformed token never reaches the subprocess.
        request = resolve_ident(token)

        cmd = [self.hab_binary, "pkg", "install", "--url", url, "--channel", channel, token]
        env = {
            **os.environ,
            "FS_ROOT": str(fs_root),
            "HAB_CACHE_ARTIFACT_PATH": str(artifact_cache_path),
        }
        context = ErrorContext(token=token, path=str(fs_root))
        logger.debug("install.exec", cmd=" ".join(cmd), fs_root=str(fs_root))

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                env=env,
                timeout=self.timeout,
            )
        except FileNotFoundError as exc:
            raise InstallError(
                f"Package manager {self.hab_binary!r} not found on PATH",
                context=context,
                cause=exc,
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise InstallError(
                f"Install of {token} timed out after {self.timeout}s",
                context=context,
                cause=exc,
            ) from exc
        except OSError as exc:
            raise InstallError(f"Unable to run {self.hab_binary!r}: {exc}", context=context, cause=exc) from exc

        if result.returncode != 0:
            raise InstallError(
                f"Install of {token} failed (exit {result.returncode}): {result.stderr.strip()}",
                context=context,
            )

        try:
            installed = PackageInstall.load(request, fs_root).ident
        except ExportError as exc:
            exc.with_context(token=token)
            raise

        logger.info("install.complete", token=token, ident=str(installed))
        return installed


__all__ = ["HabCliInstaller", "PackageInstaller"]
