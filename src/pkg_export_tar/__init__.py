"""
pkg-export-tar: export Habitat packages to a plain tarball.

The exporter installs one or more packages into a temporary root
filesystem, checks that at least one of them is a runnable service, and
archives the package tree as ``<origin>-<name>-<version>-<release>.tar.gz``.

Subpackages:
    core       errors, logging, status output, settings
    package    identifiers, .hart artifacts, installed metadata
    buildroot  build spec, construction pipeline, build root context
    export     tarball writer and the export workflow
    cli        ``pkg-export-tar`` command
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pkg-export-tar")
except PackageNotFoundError:
    __version__ = "0.1.0"

__all__ = ["__version__"]
