"""Tests for the .hart artifact reader."""

import io
import tarfile

import pytest

from _support.hab import write_hart

from pkg_export_tar.core.errors import ArchiveReadError, ResolutionError
from pkg_export_tar.package.archive import PackageArchive
from pkg_export_tar.package.ident import PackageIdent


class TestPackageArchive:
    def test_ident(self, tmp_path):
        path = write_hart(tmp_path / "a.hart", "acme/webapp/1.2.0/20230101000000")
        ident = PackageArchive(path).ident()
        assert ident == PackageIdent("acme", "webapp", "1.2.0", "20230101000000")

    def test_ident_is_cached(self, tmp_path):
        path = write_hart(tmp_path / "a.hart", "acme/webapp/1.2.0/20230101000000")
        archive = PackageArchive(path)
        first = archive.ident()
        path.unlink()
        assert archive.ident() is first

    def test_missing_file(self, tmp_path):
        with pytest.raises(ArchiveReadError) as exc_info:
            PackageArchive(tmp_path / "missing.hart").ident()
        assert isinstance(exc_info.value, ResolutionError)
        assert exc_info.value.context.path == str(tmp_path / "missing.hart")

    def test_wrong_format_version(self, tmp_path):
        path = tmp_path / "bad.hart"
        path.write_bytes(b"HART-2\nkey\nBLAKE2b\nsig\n\npayload")
        with pytest.raises(ArchiveReadError, match="unsupported format"):
            PackageArchive(path).ident()

    def test_truncated_header(self, tmp_path):
        path = tmp_path / "short.hart"
        path.write_bytes(b"HART-1\nkey\n")
        with pytest.raises(ArchiveReadError, match="truncated"):
            PackageArchive(path).ident()

    def test_header_not_blank_terminated(self, tmp_path):
        path = tmp_path / "noblank.hart"
        path.write_bytes(b"HART-1\nkey\nBLAKE2b\nsig\nmore\n")
        with pytest.raises(ArchiveReadError, match="blank-line"):
            PackageArchive(path).ident()

    def test_unreadable_payload(self, tmp_path):
        path = tmp_path / "garbage.hart"
        path.write_bytes(b"HART-1\nkey\nBLAKE2b\nsig\n\nnot an xz stream")
        with pytest.raises(ArchiveReadError, match="unreadable"):
            PackageArchive(path).ident()

    def test_missing_ident_member(self, tmp_path):
        payload = io.BytesIO()
        with tarfile.open(fileobj=payload, mode="w:xz") as tar:
            data = b"hello"
            info = tarfile.TarInfo("hab/pkgs/acme/webapp/1.2.0/20230101000000/README")
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
        path = tmp_path / "noident.hart"
        path.write_bytes(b"HART-1\nkey\nBLAKE2b\nsig\n\n" + payload.getvalue())
        with pytest.raises(ArchiveReadError, match="does not contain an IDENT"):
            PackageArchive(path).ident()

    def test_ident_must_be_fully_qualified(self, tmp_path):
        path = tmp_path / "fuzzy.hart"
        payload = io.BytesIO()
        with tarfile.open(fileobj=payload, mode="w:xz") as tar:
            data = b"acme/webapp\n"
            info = tarfile.TarInfo("hab/pkgs/acme/webapp/1.2.0/20230101000000/IDENT")
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
        path.write_bytes(b"HART-1\nkey\nBLAKE2b\nsig\n\n" + payload.getvalue())
        with pytest.raises(ArchiveReadError, match="not fully qualified"):
            PackageArchive(path).ident()
