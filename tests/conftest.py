"""测试公共夹具 - Transport / SecureRepoClient 替身 + 独立配置"""

from __future__ import annotations

import threading
import time
from pathlib import Path

import pytest

import depfetch.core.config as cfgmod
from depfetch.core.exceptions import InsecureTransportError, TransportError, VerificationError
from depfetch.core.protocols import DownloadResult


class FakeTransport:
    """按 uri 返回预置内容的 Transport 替身

    - fail_midway: 对这些 uri 先写入部分内容再抛 TransportError
    - insecure: 对这些 uri 拒绝建立安全通道
    """

    def __init__(self, contents: dict[str, bytes] | None = None) -> None:
        self.contents = dict(contents or {})
        self.fail_midway: set[str] = set()
        self.insecure: set[str] = set()
        self.not_modified: set[str] = set()
        self.downloads: list[tuple[str, Path]] = []
        self.secure_checks: list[str] = []
        self._lock = threading.Lock()

    def ensure_secure_channel(self, uri: str) -> None:
        with self._lock:
            self.secure_checks.append(uri)
        if uri in self.insecure:
            raise InsecureTransportError(f"insecure: {uri}", uri=uri)

    def download(self, uri: str, dest: Path) -> DownloadResult:
        with self._lock:
            self.downloads.append((uri, dest))
        if uri in self.not_modified:
            return DownloadResult.NOT_MODIFIED
        if uri in self.fail_midway:
            dest.write_bytes(b"partial")
            raise TransportError(f"connection reset: {uri}", uri=uri)
        if uri not in self.contents:
            raise TransportError(f"HTTP 404: {uri}", uri=uri, status=404)
        dest.write_bytes(self.contents[uri])
        return DownloadResult.DOWNLOADED


class FakeSecureClient:
    """SecureRepoClient 替身，reject=True 时模拟签名校验失败"""

    def __init__(self, payload: bytes = b"verified", reject: bool = False) -> None:
        self.payload = payload
        self.reject = reject
        self.calls: list[tuple[str, Path]] = []

    def download_verified(self, package_id, dest: Path) -> None:
        self.calls.append((str(package_id), dest))
        if self.reject:
            dest.write_bytes(b"tampered")
            raise VerificationError(f"signature mismatch: {package_id}", package_id=str(package_id))
        dest.write_bytes(self.payload)


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """每个测试使用独立的配置，缓存与临时目录都落在 tmp_path 下"""
    cfg = cfgmod.Config(
        cache_dir=str(tmp_path / "cache"),
        temp_dir=str(tmp_path / "tmp"),
        repos_file=str(tmp_path / "repos.yml"),
    )
    monkeypatch.setattr(cfgmod, "_current", cfg)
    yield cfg


@pytest.fixture()
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture()
def secure_client() -> FakeSecureClient:
    return FakeSecureClient()


@pytest.fixture()
def rejecting_client() -> FakeSecureClient:
    return FakeSecureClient(reject=True)


@pytest.fixture()
def slow_transport(transport: FakeTransport, monkeypatch: pytest.MonkeyPatch) -> FakeTransport:
    """下载前固定等待，放大并发窗口"""
    original = transport.download

    def _slow(uri: str, dest: Path) -> DownloadResult:
        time.sleep(0.05)
        return original(uri, dest)

    monkeypatch.setattr(transport, "download", _slow)
    return transport
