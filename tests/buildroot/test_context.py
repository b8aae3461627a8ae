"""Tests for package classification and BuildRootContext."""

from pathlib import Path, PurePosixPath

import pytest

from _support.hab import FakePackage, lay_out_package

from pkg_export_tar.core.errors import ConfigurationError, MetadataError, PrimaryServicePackageNotFound
from pkg_export_tar.buildroot.context import (
    BasePackages,
    BuildRootContext,
    LibraryPackage,
    ServicePackage,
    classify,
)
from pkg_export_tar.package.ident import PackageIdent


def _ident(value: str) -> PackageIdent:
    return PackageIdent.from_str(value)


def _context(packages, tokens=None, **kwargs) -> BuildRootContext:
    if tokens is None:
        tokens = [str(p.ident) for p in packages]
    return BuildRootContext.from_classifications(
        packages,
        tokens,
        channel=kwargs.pop("channel", "stable"),
        rootfs=kwargs.pop("rootfs", Path("/tmp/rootfs")),
        bin_path=PurePosixPath("/hab/bin"),
        env_path="/hab/bin",
        **kwargs,
    )


class TestClassify:
    def test_service(self, tmp_path):
        lay_out_package(
            tmp_path, FakePackage("acme/webapp/1.2.0/20230101000000", runnable=True, exposes=("8080",))
        )
        result = classify(_ident("acme/webapp"), tmp_path)
        assert result == ServicePackage(ident=_ident("acme/webapp"), exposes=("8080",))
        assert result.kind == "service"

    def test_service_without_ports(self, tmp_path):
        lay_out_package(tmp_path, FakePackage("acme/worker/0.3.0/20230105000000", runnable=True))
        result = classify(_ident("acme/worker"), tmp_path)
        assert isinstance(result, ServicePackage)
        assert result.exposes == ()

    def test_library(self, tmp_path):
        lay_out_package(tmp_path, FakePackage("acme/libonly/2.0.0/20230102000000"))
        result = classify(_ident("acme/libonly"), tmp_path)
        assert result == LibraryPackage(ident=_ident("acme/libonly"))
        assert result.kind == "library"

    def test_missing_metadata(self, tmp_path):
        with pytest.raises(MetadataError):
            classify(_ident("acme/webapp"), tmp_path)


class TestBuildRootContext:
    def test_single_service(self):
        svc = ServicePackage(ident=_ident("acme/webapp"), exposes=("8080",))
        ctx = _context([svc])
        assert ctx.svc_idents() == [_ident("acme/webapp")]
        assert ctx.lib_idents() == []
        assert ctx.primary_service is svc

    def test_mixed_preserves_order(self):
        packages = [
            LibraryPackage(ident=_ident("acme/libonly")),
            ServicePackage(ident=_ident("acme/webapp")),
            ServicePackage(ident=_ident("acme/worker")),
        ]
        ctx = _context(packages)
        assert ctx.packages == tuple(packages)
        assert ctx.svc_idents() == [_ident("acme/webapp"), _ident("acme/worker")]
        assert ctx.lib_idents() == [_ident("acme/libonly")]

    def test_primary_token_is_first_service_token(self):
        packages = [
            LibraryPackage(ident=_ident("acme/libonly")),
            ServicePackage(ident=_ident("acme/webapp")),
        ]
        ctx = _context(packages, tokens=["acme/libonly", "./acme-webapp.hart"])
        assert ctx.primary_token == "./acme-webapp.hart"

    @pytest.mark.parametrize(
        "tokens",
        [["acme/libonly"], ["acme/libonly", "acme/libtwo"]],
    )
    def test_all_libraries_is_configuration_error(self, tokens):
        packages = [LibraryPackage(ident=_ident(t)) for t in tokens]
        with pytest.raises(PrimaryServicePackageNotFound) as exc_info:
            _context(packages)
        assert isinstance(exc_info.value, ConfigurationError)
        assert exc_info.value.idents == tokens

    def test_empty_is_configuration_error(self):
        with pytest.raises(ConfigurationError):
            _context([], tokens=[])

    def test_token_count_must_match(self):
        with pytest.raises(ConfigurationError):
            _context([ServicePackage(ident=_ident("acme/webapp"))], tokens=["a", "b"])

    def test_frozen(self):
        ctx = _context([ServicePackage(ident=_ident("acme/webapp"))])
        with pytest.raises(AttributeError):
            ctx.channel = "unstable"  # type: ignore[misc]

    def test_keeps_channel_and_paths(self):
        ctx = _context([ServicePackage(ident=_ident("acme/webapp"))], channel="unstable")
        assert ctx.channel == "unstable"
        assert ctx.bin_path == PurePosixPath("/hab/bin")
        assert ctx.env_path == "/hab/bin"


class TestBasePackages:
    def test_without_busybox(self):
        base = BasePackages(
            hab=_ident("core/hab/1.6.0/20230301000000"),
            sup=_ident("core/hab-sup/1.6.0/20230301000000"),
            launcher=_ident("core/hab-launcher/15000/20230301000000"),
        )
        assert [str(i) for i in base.idents()] == [
            "core/hab/1.6.0/20230301000000",
            "core/hab-sup/1.6.0/20230301000000",
            "core/hab-launcher/15000/20230301000000",
        ]

    def test_classified_as_libraries(self):
        base = BasePackages(
            hab=_ident("core/hab/1.6.0/20230301000000"),
            sup=_ident("core/hab-sup/1.6.0/20230301000000"),
            launcher=_ident("core/hab-launcher/15000/20230301000000"),
            busybox=_ident("core/busybox-static/1.34.1/20230301000000"),
        )
        classifications = base.classifications()
        assert len(classifications) == 4
        assert all(isinstance(c, LibraryPackage) for c in classifications)
