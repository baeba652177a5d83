"""制品定位解析与拉取缓存

- models.py: 包标识、仓库类型、制品位置
- paths.py: 缓存路径与远程 URI 计算
- resolver.py: 本地解析（不下载）
- fetcher.py: 按仓库类型分派拉取
- index.py: 仓库索引拉取
- registry.py: 仓库清单加载
"""

from depfetch.core.fetch.fetcher import fetch_package, fetch_packages, fetch_repo_tarball
from depfetch.core.fetch.index import download_index
from depfetch.core.fetch.models import (
    LocalMirror,
    LocalTarball,
    LocalUnpacked,
    PackageId,
    RemoteMirror,
    RemoteTarball,
    RepoLayout,
    RepoTarball,
    ResolvedRemoteTarball,
    ResolvedRepoTarball,
    SecureMirror,
    Version,
)
from depfetch.core.fetch.registry import RepoRegistry
from depfetch.core.fetch.resolver import check_fetched, check_repo_tarball_fetched, is_fetched

__all__ = [
    "Version",
    "PackageId",
    "RepoLayout",
    "LocalMirror",
    "RemoteMirror",
    "SecureMirror",
    "LocalUnpacked",
    "LocalTarball",
    "RemoteTarball",
    "RepoTarball",
    "ResolvedRemoteTarball",
    "ResolvedRepoTarball",
    "RepoRegistry",
    "is_fetched",
    "check_fetched",
    "check_repo_tarball_fetched",
    "fetch_package",
    "fetch_packages",
    "fetch_repo_tarball",
    "download_index",
]
