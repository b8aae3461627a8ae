"""Tests for installed package metadata."""

from pathlib import PurePosixPath

import pytest

from _support.hab import FakePackage, lay_out_package

from pkg_export_tar.core.errors import MetadataError
from pkg_export_tar.package.ident import PackageIdent
from pkg_export_tar.package.install import PackageInstall


@pytest.fixture
def fs_root(tmp_path):
    root = tmp_path / "rootfs"
    root.mkdir()
    return root


class TestLoad:
    def test_fully_qualified(self, fs_root):
        lay_out_package(fs_root, FakePackage("acme/webapp/1.2.0/20230101000000"))
        install = PackageInstall.load(PackageIdent.from_str("acme/webapp/1.2.0/20230101000000"), fs_root)
        assert str(install.ident) == "acme/webapp/1.2.0/20230101000000"
        assert install.installed_path == fs_root / "hab/pkgs/acme/webapp/1.2.0/20230101000000"

    def test_fuzzy_picks_highest_version_then_release(self, fs_root):
        for ident in (
            "acme/webapp/1.2.0/20230101000000",
            "acme/webapp/1.10.0/20220101000000",
            "acme/webapp/1.10.0/20220301000000",
            "acme/webapp/1.9.9/20240101000000",
        ):
            lay_out_package(fs_root, FakePackage(ident))
        install = PackageInstall.load(PackageIdent.from_str("acme/webapp"), fs_root)
        assert str(install.ident) == "acme/webapp/1.10.0/20220301000000"

    def test_final_release_beats_prerelease(self, fs_root):
        for ident in (
            "acme/webapp/1.2.0/20230101000000",
            "acme/webapp/1.2.0-rc1/20230101000000",
        ):
            lay_out_package(fs_root, FakePackage(ident))
        install = PackageInstall.load(PackageIdent.from_str("acme/webapp"), fs_root)
        assert str(install.ident) == "acme/webapp/1.2.0/20230101000000"

    def test_prerelease_of_newer_version_wins(self, fs_root):
        for ident in (
            "acme/webapp/1.2.0/20230101000000",
            "acme/webapp/1.3.0-rc1/20221201000000",
        ):
            lay_out_package(fs_root, FakePackage(ident))
        install = PackageInstall.load(PackageIdent.from_str("acme/webapp"), fs_root)
        assert str(install.ident) == "acme/webapp/1.3.0-rc1/20221201000000"

    def test_version_pinned_picks_highest_release(self, fs_root):
        for ident in (
            "acme/webapp/1.2.0/20230101000000",
            "acme/webapp/1.2.0/20230201000000",
            "acme/webapp/1.3.0/20230301000000",
        ):
            lay_out_package(fs_root, FakePackage(ident))
        install = PackageInstall.load(PackageIdent.from_str("acme/webapp/1.2.0"), fs_root)
        assert str(install.ident) == "acme/webapp/1.2.0/20230201000000"

    def test_not_installed(self, fs_root):
        with pytest.raises(MetadataError) as exc_info:
            PackageInstall.load(PackageIdent.from_str("acme/missing"), fs_root)
        assert exc_info.value.context.ident == "acme/missing"

    def test_missing_ident_file(self, fs_root):
        pkg_dir = lay_out_package(fs_root, FakePackage("acme/webapp/1.2.0/20230101000000"))
        (pkg_dir / "IDENT").unlink()
        with pytest.raises(MetadataError, match="no IDENT file"):
            PackageInstall.load(PackageIdent.from_str("acme/webapp"), fs_root)

    def test_mismatched_ident_file(self, fs_root):
        pkg_dir = lay_out_package(fs_root, FakePackage("acme/webapp/1.2.0/20230101000000"))
        (pkg_dir / "IDENT").write_text("acme/other/1.0.0/20230101000000\n")
        with pytest.raises(MetadataError, match="identifies as"):
            PackageInstall.load(PackageIdent.from_str("acme/webapp"), fs_root)

    def test_stray_entries_ignored(self, fs_root):
        lay_out_package(fs_root, FakePackage("acme/webapp/1.2.0/20230101000000"))
        name_dir = fs_root / "hab/pkgs/acme/webapp"
        (name_dir / "README").write_text("not a version")
        (name_dir / "1.2.0" / "not-a-release").mkdir()
        install = PackageInstall.load(PackageIdent.from_str("acme/webapp"), fs_root)
        assert str(install.ident) == "acme/webapp/1.2.0/20230101000000"


class TestMetadata:
    def test_runnable_with_hooks_run(self, fs_root):
        lay_out_package(fs_root, FakePackage("acme/webapp/1.2.0/20230101000000", runnable=True))
        install = PackageInstall.load(PackageIdent.from_str("acme/webapp"), fs_root)
        assert install.is_runnable()

    def test_runnable_with_top_level_run(self, fs_root):
        pkg_dir = lay_out_package(fs_root, FakePackage("acme/webapp/1.2.0/20230101000000"))
        (pkg_dir / "run").write_text("#!/bin/sh\n")
        install = PackageInstall.load(PackageIdent.from_str("acme/webapp"), fs_root)
        assert install.is_runnable()

    def test_library_not_runnable(self, fs_root):
        lay_out_package(fs_root, FakePackage("acme/libonly/2.0.0/20230102000000"))
        install = PackageInstall.load(PackageIdent.from_str("acme/libonly"), fs_root)
        assert not install.is_runnable()

    def test_exposes(self, fs_root):
        lay_out_package(
            fs_root,
            FakePackage("acme/webapp/1.2.0/20230101000000", runnable=True, exposes=("8080", "8443")),
        )
        install = PackageInstall.load(PackageIdent.from_str("acme/webapp"), fs_root)
        assert install.exposes() == ["8080", "8443"]

    def test_exposes_absent(self, fs_root):
        lay_out_package(fs_root, FakePackage("acme/worker/0.3.0/20230105000000", runnable=True))
        install = PackageInstall.load(PackageIdent.from_str("acme/worker"), fs_root)
        assert install.exposes() == []

    def test_paths_from_path_file(self, fs_root):
        lay_out_package(fs_root, FakePackage("core/hab/1.6.0/20230301000000", bins=("hab",)))
        install = PackageInstall.load(PackageIdent.from_str("core/hab"), fs_root)
        assert install.paths() == [PurePosixPath("/hab/pkgs/core/hab/1.6.0/20230301000000/bin")]

    def test_paths_default_to_bin(self, fs_root):
        lay_out_package(fs_root, FakePackage("acme/libonly/2.0.0/20230102000000"))
        install = PackageInstall.load(PackageIdent.from_str("acme/libonly"), fs_root)
        assert install.paths() == [PurePosixPath("/hab/pkgs/acme/libonly/2.0.0/20230102000000/bin")]

    def test_paths_multiple_entries(self, fs_root):
        pkg_dir = lay_out_package(fs_root, FakePackage("acme/tools/1.0.0/20230101000000"))
        (pkg_dir / "PATH").write_text("/hab/pkgs/acme/tools/1.0.0/20230101000000/bin:/hab/pkgs/acme/tools/1.0.0/20230101000000/sbin\n")
        install = PackageInstall.load(PackageIdent.from_str("acme/tools"), fs_root)
        assert [p.name for p in install.paths()] == ["bin", "sbin"]

    def test_unreadable_metadata(self, fs_root):
        pkg_dir = lay_out_package(fs_root, FakePackage("acme/webapp/1.2.0/20230101000000", runnable=True))
        (pkg_dir / "EXPOSES").write_bytes(b"\xff\xfe\x00bad")
        install = PackageInstall.load(PackageIdent.from_str("acme/webapp"), fs_root)
        with pytest.raises(MetadataError, match="EXPOSES"):
            install.exposes()
