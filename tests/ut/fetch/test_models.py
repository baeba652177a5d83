"""包标识与位置模型测试"""

from __future__ import annotations

from pathlib import Path

import pytest

from depfetch.core.exceptions import ValidationError
from depfetch.core.fetch.models import (
    LocalMirror,
    PackageId,
    RepoTarball,
    SecureMirror,
    Version,
)


class TestVersion:
    def test_parse_and_render(self) -> None:
        assert str(Version.parse("1.2.3")) == "1.2.3"
        assert Version.parse("0").parts == (0,)

    def test_numeric_ordering(self) -> None:
        assert Version.parse("1.10") > Version.parse("1.9")
        assert Version.parse("1.0") < Version.parse("1.0.1")

    @pytest.mark.parametrize("text", ["", "1.", ".1", "1.a", "v1.0", "1..2", "1.0\n"])
    def test_invalid_rejected(self, text: str) -> None:
        with pytest.raises(ValidationError, match="无效的版本号"):
            Version.parse(text)

    @pytest.mark.parametrize("text", ["1.01", "01", "1.0.00"])
    def test_leading_zeros_rejected(self, text: str) -> None:
        with pytest.raises(ValidationError, match="无效的版本号"):
            Version.parse(text)

    def test_zero_components_allowed(self) -> None:
        assert str(Version.parse("0.10.0")) == "0.10.0"


class TestPackageId:
    def test_leading_zero_version_not_rewritten(self) -> None:
        with pytest.raises(ValidationError):
            PackageId.parse("foo-1.01")

    def test_parse_splits_at_last_dash(self) -> None:
        pkgid = PackageId.parse("http-client-0.7.1")
        assert pkgid.name == "http-client"
        assert str(pkgid.version) == "0.7.1"
        assert str(pkgid) == "http-client-0.7.1"

    def test_hashable_and_equal(self) -> None:
        assert PackageId.of("foo", "1.0") == PackageId.parse("foo-1.0")
        assert len({PackageId.of("foo", "1.0"), PackageId.parse("foo-1.0")}) == 1

    @pytest.mark.parametrize("text", ["foo", "-1.0", "foo-", "foo-bar"])
    def test_parse_invalid(self, text: str) -> None:
        with pytest.raises(ValidationError):
            PackageId.parse(text)

    @pytest.mark.parametrize("name", ["123", "foo--bar", "foo_bar", "foo-1"])
    def test_invalid_names(self, name: str) -> None:
        with pytest.raises(ValidationError, match="无效的包名"):
            PackageId.of(name, "1.0")


class TestLocations:
    def test_secure_client_not_part_of_equality(self, tmp_path: Path) -> None:
        a = SecureMirror("s", tmp_path, client=object())
        b = SecureMirror("s", tmp_path, client=object())
        assert a == b
        assert "client=" not in repr(a)

    def test_locations_are_immutable(self, tmp_path: Path) -> None:
        loc = RepoTarball(LocalMirror("m", tmp_path), PackageId.of("foo", "1.0"))
        with pytest.raises(AttributeError):
            loc.cached_path = tmp_path / "x"  # type: ignore[misc]
