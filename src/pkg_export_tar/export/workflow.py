"""Export orchestration: build root → tarball → teardown.

``export()`` is the single entry point the CLI calls. It owns the build
root for its whole lifetime and destroys it in ``finally`` so temporary
storage never outlives the call, whether archiving succeeds or not.
Errors are recorded on the result for logging and then re-raised.
"""

from __future__ import annotations

from pathlib import Path

from pkg_export_tar.buildroot.context import (
    BuildRootContext,
    LibraryPackage,
    PackageClassification,
    ServicePackage,
)
from pkg_export_tar.buildroot.installer import HabCliInstaller, PackageInstaller
from pkg_export_tar.buildroot.root import BuildRoot
from pkg_export_tar.buildroot.rootfs import SkeletonBuilder
from pkg_export_tar.buildroot.spec import PLATFORM_SKELETON, BuildSpec
from pkg_export_tar.core.errors import ExportError
from pkg_export_tar.core.logging import LogContext, get_logger
from pkg_export_tar.core.ui import UI
from pkg_export_tar.export.results import ExportResult, PackageSummary
from pkg_export_tar.export.tarball import TarballBuilder

logger = get_logger(__name__)


def export(
    spec: BuildSpec,
    ui: UI,
    dest_dir: str | Path | None = None,
    *,
    installer: PackageInstaller | None = None,
    skeleton: SkeletonBuilder | None | object = PLATFORM_SKELETON,
    workdir_parent: str | Path | None = None,
) -> ExportResult:
    """Build a root for ``spec`` and archive it into ``dest_dir`` (default: cwd).

    Raises:
        ExportError: Any pipeline or archival failure, after cleanup.
    """
    if installer is None:
        installer = HabCliInstaller()

    result = ExportResult(tokens=list(spec.tokens), channel=spec.channel)
    ui.begin(f"Building a tarball with: {', '.join(spec.tokens)}")

    with LogContext(tokens=list(spec.tokens)):
        build_root: BuildRoot | None = None
        try:
            build_root = spec.create(
                ui, installer=installer, skeleton=skeleton, workdir_parent=workdir_parent
            )
            result.packages = summarize(build_root.context)

            builder = TarballBuilder(dest_dir)
            tarball = builder.build(build_root, ui)
            result.tarball = str(tarball)
            result.primary_ident = str(builder.last_ident)
        except ExportError as exc:
            result.error = exc.to_dict()
            logger.error("export.failed", **result.error)
            raise
        finally:
            if build_root is not None:
                build_root.destroy(ui)
            result.mark_complete()

    ui.end(f"Tarball {result.tarball} created")
    logger.info("export.complete", tarball=result.tarball, duration=result.duration_seconds)
    return result


def summarize(context: BuildRootContext) -> list[PackageSummary]:
    """Base packages followed by the requested packages, as plain summaries."""
    base = context.base.classifications() if context.base is not None else []
    return [_summarize(p, base=True) for p in base] + [_summarize(p) for p in context.packages]


def _summarize(package: PackageClassification, *, base: bool = False) -> PackageSummary:
    match package:
        case ServicePackage(ident=ident, exposes=exposes):
            return PackageSummary(ident=str(ident), kind="service", exposes=list(exposes), base=base)
        case LibraryPackage(ident=ident):
            return PackageSummary(ident=str(ident), kind="library", base=base)


__all__ = ["export", "summarize"]
