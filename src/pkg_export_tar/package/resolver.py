"""Turn a user-supplied token into a package identifier.

A token is either a path to a local ``.hart`` artifact or an identifier
string. Artifacts resolve to their *fuzzy* identifier (version and release
cleared) so the installer is free to pick the newest installed match.
"""

from __future__ import annotations

from pathlib import Path

from pkg_export_tar.core.logging import get_logger
from pkg_export_tar.package.archive import PackageArchive
from pkg_export_tar.package.ident import PackageIdent

logger = get_logger(__name__)


def is_artifact(token: str) -> bool:
    """True if ``token`` names an existing file on disk."""
    return Path(token).is_file()


def resolve_ident(token: str) -> PackageIdent:
    """Resolve ``token`` without touching the network.

    Raises:
        ArchiveReadError: If the token is a file that is not a readable artifact.
        IdentParseError: If the token is not a valid identifier string.
    """
    if is_artifact(token):
        ident = PackageArchive(token).ident().fuzzy()
        logger.debug("resolve.artifact", token=token, ident=str(ident))
        return ident

    ident = PackageIdent.from_str(token)
    logger.debug("resolve.ident", token=token, ident=str(ident))
    return ident


__all__ = ["is_artifact", "resolve_ident"]
