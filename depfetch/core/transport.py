"""基于 urllib 的 HTTP 传输实现

职责:
- 安全通道检查（协议白名单 + require_https 策略）
- 条件请求: 目标文件与 <dest>.etag 同时存在时带 If-None-Match，304 视为未修改
- 流式写入同目录临时文件，成功后原子替换
- 不做重试，失败统一转为 TransportError
"""

from __future__ import annotations

import http.client
import logging
import shutil
import urllib.error
import urllib.request
from pathlib import Path

from depfetch.core.config import get_config
from depfetch.core.exceptions import InsecureTransportError, TransportError
from depfetch.core.protocols import DownloadResult
from depfetch.utils.atomic import atomic_target
from depfetch.utils.net import is_https, validate_url_scheme

logger = logging.getLogger(__name__)

ETAG_SUFFIX = ".etag"
_CHUNK_SIZE = 1024 * 1024


def _etag_file(dest: Path) -> Path:
    return dest.with_name(dest.name + ETAG_SUFFIX)


class HttpTransport:
    """Transport 协议的 urllib 实现"""

    def __init__(
        self,
        *,
        require_https: bool | None = None,
        timeout: int | None = None,
        user_agent: str = "",
    ) -> None:
        cfg = get_config()
        self.require_https = cfg.require_https if require_https is None else require_https
        self.timeout = timeout or cfg.request_timeout
        if not user_agent:
            from depfetch import __version__
            user_agent = f"depfetch/{__version__}"
        self.user_agent = user_agent

    def ensure_secure_channel(self, uri: str) -> None:
        validate_url_scheme(uri, context="transport")
        if self.require_https and not is_https(uri):
            raise InsecureTransportError(
                f"策略要求 HTTPS，拒绝明文传输: {uri}", uri=uri,
            )

    def download(self, uri: str, dest: Path) -> DownloadResult:
        """下载 uri 到 dest

        只为本传输新建的文件或已有 ETag 记录的文件维护 <dest>.etag，
        调用方预先创建的临时文件不会留下 ETag 残留。
        """
        validate_url_scheme(uri, context="download")
        req = urllib.request.Request(uri, headers={"User-Agent": self.user_agent})
        etag_path = _etag_file(dest)
        tracked = etag_path.exists() or not dest.exists()
        if dest.exists() and etag_path.exists():
            req.add_header("If-None-Match", etag_path.read_text(encoding="utf-8").strip())

        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:  # nosec B310
                with atomic_target(dest) as tmp:
                    with open(tmp, "wb") as f:
                        shutil.copyfileobj(resp, f, _CHUNK_SIZE)
                etag = resp.headers.get("ETag")
        except urllib.error.HTTPError as e:
            if e.code == 304:
                logger.debug("未修改: %s", uri, extra={"uri": uri})
                return DownloadResult.NOT_MODIFIED
            raise TransportError(
                f"下载失败 (HTTP {e.code}): {uri}", uri=uri, status=e.code,
            ) from e
        except (urllib.error.URLError, http.client.HTTPException, TimeoutError, ConnectionError) as e:
            raise TransportError(f"下载失败: {uri} - {e}", uri=uri) from e

        if tracked and etag:
            etag_path.write_text(etag, encoding="utf-8")
        elif tracked:
            etag_path.unlink(missing_ok=True)
        logger.debug("已保存: %s", dest, extra={"uri": uri, "path": dest})
        return DownloadResult.DOWNLOADED
