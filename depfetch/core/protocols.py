"""外部能力协议定义

拉取核心只依赖这里的抽象（Protocol），HTTP 传输与安全仓库客户端由外部实现注入。
使用 typing.Protocol 而非 ABC，使得现有类无需修改继承关系即可满足协议。
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from depfetch.core.fetch.models import PackageId


class DownloadResult(str, Enum):
    """下载结果，由传输层判定（如条件请求 304）"""
    DOWNLOADED = "downloaded"
    NOT_MODIFIED = "not_modified"


# =========================================================================
# 传输协议
# =========================================================================

class Transport(Protocol):
    """HTTP 传输能力

    TLS、代理、重定向、超时均由实现方负责；核心不做重试。
    """

    def ensure_secure_channel(self, uri: str) -> None:
        """确认（或升级到）安全通道，无法满足时抛 InsecureTransportError"""
        ...

    def download(self, uri: str, dest: Path) -> DownloadResult:
        """下载 uri 到 dest，失败抛 TransportError"""
        ...


# =========================================================================
# 安全仓库协议
# =========================================================================

class SecureRepoClient(Protocol):
    """可校验签名的安全仓库客户端

    仅在元数据/签名校验通过后写入 dest，失败抛 VerificationError。
    """

    def download_verified(self, package_id: PackageId, dest: Path) -> None:
        ...
