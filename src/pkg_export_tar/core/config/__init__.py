"""Exporter configuration: env-driven settings and shared defaults."""

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
    clear_settings_cache,
    default_cache_path,
    get_settings,
)

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
