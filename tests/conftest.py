"""
Shared pytest fixtures and configuration for pkg-export-tar tests.

This module provides:
- Isolation fixtures (settings cache, structlog config, PKG_EXPORT_* env)
- A fake install collaborator that lays packages out on disk
- Host cache directories and a ``BuildSpec`` factory wired to them

Usage:
    def test_something(fake_installer, make_spec, quiet_ui):
        spec = make_spec(["acme/webapp"])
        build_root = spec.create(quiet_ui, installer=fake_installer, skeleton=None)
"""

import os
import sys
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
import structlog

# Ensure pkg_export_tar and the test helpers are importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent))

from _support.hab import FakeInstaller, default_catalog, write_hart  # noqa: E402

from pkg_export_tar.buildroot.spec import BuildSpec  # noqa: E402
from pkg_export_tar.core.config.settings import clear_settings_cache  # noqa: E402
from pkg_export_tar.core.logging import clear_context  # noqa: E402
from pkg_export_tar.core.ui import UI  # noqa: E402


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark CLI and workflow tests as integration, everything else as unit."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)
        markers = {mark.name for mark in item.iter_markers()}
        if markers.intersection({"unit", "integration"}):
            continue
        if test_path.parts[0] == "cli" or test_path.name == "test_workflow.py":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Drop PKG_EXPORT_* variables and reset cached settings and logging."""
    for key in list(os.environ):
        if key.startswith("PKG_EXPORT_"):
            monkeypatch.delenv(key, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()
    clear_context()
    structlog.reset_defaults()


# =============================================================================
# Package Fixtures
# =============================================================================


@pytest.fixture
def fake_installer() -> FakeInstaller:
    """Installer that knows the base packages plus a few acme packages."""
    return FakeInstaller(catalog=default_catalog())


@pytest.fixture
def hart_file(tmp_path: Path) -> Callable[[str], Path]:
    """Factory writing ``.hart`` files into a scratch directory."""
    artifacts = tmp_path / "artifacts"
    artifacts.mkdir()

    def _write(ident: str) -> Path:
        name = ident.replace("/", "-") + "-x86_64-linux.hart"
        return write_hart(artifacts / name, ident)

    return _write


@pytest.fixture
def host_caches(tmp_path: Path) -> tuple[Path, Path]:
    """Host artifact and key cache directories (not yet created)."""
    root = tmp_path / "host"
    return root / "cache" / "artifacts", root / "cache" / "keys"


@pytest.fixture
def make_spec(host_caches: tuple[Path, Path]) -> Callable[..., BuildSpec]:
    """Factory for a ``BuildSpec`` using the scratch host caches."""
    artifact_cache, key_cache = host_caches

    def _make(tokens: list[str], **overrides) -> BuildSpec:
        values = {
            "tokens": tokens,
            "artifact_cache_path": artifact_cache,
            "key_cache_path": key_cache,
            "install_busybox": True,
        }
        values.update(overrides)
        return BuildSpec(**values)

    return _make


@pytest.fixture
def quiet_ui() -> UI:
    return UI(quiet=True)


@pytest.fixture
def workdir_parent(tmp_path: Path) -> Path:
    """Parent for build root workdirs so tests can check cleanup."""
    parent = tmp_path / "work"
    parent.mkdir()
    return parent
