"""仓库索引拉取

把远程仓库的包索引下载到固定缓存路径 <cache_dir>/00-index.tar.gz。
是否有更新由传输层判定（条件请求），这里不比较索引内容。
"""

from __future__ import annotations

import logging
from pathlib import Path

from depfetch.core.fetch.models import RemoteMirror
from depfetch.core.fetch.paths import index_file, index_uri
from depfetch.core.protocols import DownloadResult, Transport

logger = logging.getLogger(__name__)


def download_index(
    transport: Transport, repo: RemoteMirror, cache_dir: Path,
) -> DownloadResult:
    """下载仓库索引，返回 DOWNLOADED 或 NOT_MODIFIED"""
    transport.ensure_secure_channel(repo.index_uri)
    uri = index_uri(repo)
    path = index_file(cache_dir)
    cache_dir.mkdir(parents=True, exist_ok=True)
    result = transport.download(uri, path)
    logger.info(
        "索引 %s: %s", repo.name, result.value,
        extra={"repo": repo.name, "uri": uri, "path": path},
    )
    return result
