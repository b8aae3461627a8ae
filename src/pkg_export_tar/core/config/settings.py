"""
Centralized settings for the tarball exporter.

``ExportSettings`` resolves every knob the exporter has (package-manager
endpoints, channels, base package identifiers, host cache locations,
logging) from ``PKG_EXPORT_*`` environment variables, falling back to
defaults that match a stock Habitat installation.

Precedence: CLI options > ``PKG_EXPORT_*`` env vars > field defaults.
CLI options are applied by :meth:`BuildSpec.from_settings`, not here.

Tags:
    configuration, settings, pydantic, environment
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BLDR_URL = "https://bldr.habitat.sh"
DEFAULT_CHANNEL = "stable"

DEFAULT_HAB_IDENT = "core/hab"
DEFAULT_SUP_IDENT = "core/hab-sup"
DEFAULT_LAUNCHER_IDENT = "core/hab-launcher"
DEFAULT_BUSYBOX_IDENT = "core/busybox-static"

CACHE_ARTIFACT_PATH = "hab/cache/artifacts"
CACHE_KEY_PATH = "hab/cache/keys"


def _is_root() -> bool:
    geteuid = getattr(os, "geteuid", None)
    return geteuid is not None and geteuid() == 0


def default_cache_path(relative: str) -> Path:
    """Host cache location: ``/<relative>`` as root, ``~/.<relative>`` otherwise."""
    if _is_root():
        return Path("/") / relative
    return Path.home() / f".{relative}"


class ExportSettings(BaseSettings):
    """Exporter configuration.

    All fields can be set via ``PKG_EXPORT_*`` environment variables (e.g.
    ``PKG_EXPORT_CHANNEL=unstable``).
    """

    model_config = SettingsConfigDict(
        env_prefix="PKG_EXPORT_",
        extra="ignore",
    )

    # ── Package manager ──────────────────────────────────────────
    bldr_url: str = Field(default=DEFAULT_BLDR_URL, description="Endpoint for user packages")
    channel: str = Field(default=DEFAULT_CHANNEL, description="Release channel for user packages")
    base_pkgs_url: str | None = Field(
        default=None,
        description="Endpoint for base packages (defaults to bldr_url)",
    )
    base_pkgs_channel: str | None = Field(
        default=None,
        description="Release channel for base packages (defaults to channel)",
    )

    # ── Base packages ────────────────────────────────────────────
    hab_pkg: str = Field(default=DEFAULT_HAB_IDENT)
    hab_sup_pkg: str = Field(default=DEFAULT_SUP_IDENT)
    hab_launcher_pkg: str = Field(default=DEFAULT_LAUNCHER_IDENT)
    busybox_pkg: str = Field(default=DEFAULT_BUSYBOX_IDENT)

    # ── Host caches ──────────────────────────────────────────────
    artifact_cache_path: Path = Field(
        default_factory=lambda: default_cache_path(CACHE_ARTIFACT_PATH),
        description="Host artifact cache shared with every export",
    )
    key_cache_path: Path = Field(
        default_factory=lambda: default_cache_path(CACHE_KEY_PATH),
        description="Host public key cache shared with every export",
    )

    # ── Install collaborator ─────────────────────────────────────
    hab_binary: str = Field(default="hab", description="Package manager executable")
    install_timeout_seconds: int = Field(default=1800, gt=0)

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="WARNING")
    log_format: Literal["console", "json"] = Field(default="console")

    @field_validator("bldr_url", "base_pkgs_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()

    @property
    def effective_base_pkgs_url(self) -> str:
        return self.base_pkgs_url or self.bldr_url

    @property
    def effective_base_pkgs_channel(self) -> str:
        return self.base_pkgs_channel or self.channel


_settings_cache: dict[str, ExportSettings] = {}


def get_settings(*, _force_reload: bool = False) -> ExportSettings:
    """Load, validate, and cache an :class:`ExportSettings` instance."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]
    settings = ExportSettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()


__all__ = [
    "CACHE_ARTIFACT_PATH",
    "CACHE_KEY_PATH",
    "DEFAULT_BLDR_URL",
    "DEFAULT_BUSYBOX_IDENT",
    "DEFAULT_CHANNEL",
    "DEFAULT_HAB_IDENT",
    "DEFAULT_LAUNCHER_IDENT",
    "DEFAULT_SUP_IDENT",
    "ExportSettings",
    "clear_settings_cache",
    "default_cache_path",
    "get_settings",
]
