"""
Typer application for ``pkg-export-tar``.

Usage::

    pkg-export-tar core/redis
    pkg-export-tar ./results/acme-webapp-1.2.0-20230101000000-x86_64-linux.hart
    pkg-export-tar --channel unstable --output-dir dist acme/webapp
    pkg-export-tar --json acme/webapp

Progress lines and logs go to stderr; stdout carries only the result
(a summary table, or JSON with ``--json``).

Exit codes: 0 on success, 2 when no service package was requested or
the configuration is invalid, 1 on any other failure.
"""

from __future__ import annotations

from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from pkg_export_tar import __version__
from pkg_export_tar.buildroot.installer import HabCliInstaller, PackageInstaller
from pkg_export_tar.buildroot.spec import BuildSpec
from pkg_export_tar.core.config.settings import ExportSettings, get_settings
from pkg_export_tar.core.errors import ConfigurationError, ExportError
from pkg_export_tar.core.logging import configure_logging
from pkg_export_tar.core.ui import UI
from pkg_export_tar.export.results import ExportResult
from pkg_export_tar.export.workflow import export

app = typer.Typer(
    name="pkg-export-tar",
    help="Export Habitat packages to a tarball.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True)

EXIT_FAILURE = 1
EXIT_CONFIG = 2


def build_installer(settings: ExportSettings) -> PackageInstaller:
    """Install collaborator used by the command."""
    return HabCliInstaller(settings.hab_binary, timeout=settings.install_timeout_seconds)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"pkg-export-tar {__version__}")
        raise typer.Exit()


def _fail(message: str, code: int) -> typer.Exit:
    err_console.print(f"[bold red]error:[/] {escape(message)}", soft_wrap=True)
    return typer.Exit(code=code)


@app.command()
def main(
    pkg_ident_or_artifact: list[str] = typer.Argument(
        ...,
        metavar="PKG_IDENT_OR_ARTIFACT...",
        help="Package identifiers (origin/name\\[/version\\[/release]]) or paths to .hart files.",
    ),
    url: str | None = typer.Option(
        None, "--url", "-u", help="Builder URL for the requested packages."
    ),
    channel: str | None = typer.Option(
        None, "--channel", "-c", help="Release channel for the requested packages."
    ),
    base_pkgs_url: str | None = typer.Option(
        None, "--base-pkgs-url", help="Builder URL for the base packages."
    ),
    base_pkgs_channel: str | None = typer.Option(
        None, "--base-pkgs-channel", help="Release channel for the base packages."
    ),
    hab_pkg: str | None = typer.Option(None, "--hab-pkg", help="Habitat CLI package identifier."),
    hab_launcher_pkg: str | None = typer.Option(
        None, "--hab-launcher-pkg", help="Habitat Launcher package identifier."
    ),
    hab_sup_pkg: str | None = typer.Option(
        None, "--hab-sup-pkg", help="Habitat Supervisor package identifier."
    ),
    output_dir: Path | None = typer.Option(
        None, "--output-dir", "-o", help="Directory to write the tarball to (default: current)."
    ),
    json_out: bool = typer.Option(False, "--json", help="Print the export result as JSON."),
    log_level: str | None = typer.Option(None, "--log-level", help="Log level (DEBUG, INFO, ...)."),
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Build a root filesystem from packages and archive it as a tarball."""
    try:
        settings = get_settings()
    except ValidationError as exc:
        raise _fail(f"invalid PKG_EXPORT_* settings: {exc}", EXIT_CONFIG) from exc

    try:
        configure_logging(
            level=log_level or settings.log_level,
            json_format=settings.log_format == "json",
        )
    except ValueError as exc:
        raise _fail(str(exc), EXIT_CONFIG) from exc

    try:
        spec = BuildSpec.from_settings(
            pkg_ident_or_artifact,
            settings,
            url=url.rstrip("/") if url else None,
            channel=channel,
            base_pkgs_url=base_pkgs_url.rstrip("/") if base_pkgs_url else None,
            base_pkgs_channel=base_pkgs_channel,
            hab=hab_pkg,
            hab_sup=hab_sup_pkg,
            hab_launcher=hab_launcher_pkg,
        )
    except ValidationError as exc:
        raise _fail(f"invalid arguments: {exc}", EXIT_CONFIG) from exc

    ui = UI(err_console, quiet=json_out)
    try:
        result = export(spec, ui, output_dir, installer=build_installer(settings))
    except ConfigurationError as exc:
        raise _fail(exc.message, EXIT_CONFIG) from exc
    except ExportError as exc:
        raise _fail(exc.message, EXIT_FAILURE) from exc

    if json_out:
        console.print_json(result.model_dump_json())
    else:
        _print_summary(result)


def _print_summary(result: ExportResult) -> None:
    table = Table(title=f"Tarball: {result.tarball}", show_lines=False)
    table.add_column("Package", style="cyan")
    table.add_column("Kind")
    table.add_column("Exposes")

    for package in result.packages:
        kind = f"{package.kind} (base)" if package.base else package.kind
        table.add_row(package.ident, kind, " ".join(package.exposes) or "-")

    console.print(table)
    console.print(f"[green]✓[/] {escape(result.summary)}", soft_wrap=True)
