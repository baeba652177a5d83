"""URL scheme 校验测试"""

import pytest

from depfetch.core.exceptions import ValidationError
from depfetch.utils.net import is_https, validate_url_scheme


class TestValidateUrlScheme:
    def test_http_ok(self) -> None:
        validate_url_scheme("http://hackage.example/packages")

    def test_https_ok(self) -> None:
        validate_url_scheme("https://hackage.example/packages")

    @pytest.mark.parametrize("url", [
        "file:///etc/passwd",
        "ftp://evil.com/payload",
        "/local/path",
    ])
    def test_rejected(self, url: str) -> None:
        with pytest.raises(ValidationError, match="不允许的 URL 协议"):
            validate_url_scheme(url)

    def test_context_in_error(self) -> None:
        with pytest.raises(ValidationError, match="download"):
            validate_url_scheme("file:///x", context="download")


def test_is_https() -> None:
    assert is_https("https://a.example/")
    assert not is_https("http://a.example/")
