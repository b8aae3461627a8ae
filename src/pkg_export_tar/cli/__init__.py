"""
CLI layer for pkg-export-tar.

A single Typer command that turns arguments into a ``BuildSpec`` and
hands it to :func:`pkg_export_tar.export.export`. All export logic lives
in the ``buildroot`` and ``export`` packages; this one handles only
terminal transport.

Entry point::

    pkg-export-tar --help
"""

from pkg_export_tar.cli.app import app

__all__ = ["app"]
