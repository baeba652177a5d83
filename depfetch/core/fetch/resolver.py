"""制品本地解析器

职责:
- 判断制品是否已就绪（不触发下载）
- 能直接解析时返回完整的已解析位置，否则返回 None 交由 fetcher 拉取

存在性检查只是尽力而为的快照：检查之后文件仍可能被其他进程创建。
"""

from __future__ import annotations

import logging
from pathlib import Path

from depfetch.core.fetch.models import (
    LocalTarball,
    LocalUnpacked,
    PackageId,
    RemoteTarball,
    RepoTarball,
    Repository,
    ResolvedLocation,
    ResolvedRemoteTarball,
    ResolvedRepoTarball,
    UnresolvedLocation,
)
from depfetch.core.fetch.paths import package_file

logger = logging.getLogger(__name__)


def is_fetched(location: UnresolvedLocation) -> bool:
    """制品已拉取或无需拉取时返回 True"""
    if isinstance(location, (LocalUnpacked, LocalTarball)):
        return True
    if isinstance(location, RemoteTarball):
        return location.cached_path is not None
    if isinstance(location, RepoTarball):
        if location.cached_path is not None:
            return True
        return package_file(location.repository, location.package_id).is_file()
    raise TypeError(f"未知的制品位置类型: {type(location).__name__}")


def check_fetched(location: UnresolvedLocation) -> ResolvedLocation | None:
    """已可解析时返回完整的已解析位置，需要拉取时返回 None

    除一次文件存在性检查外没有任何副作用，也不会返回半解析的结果。
    """
    if isinstance(location, (LocalUnpacked, LocalTarball)):
        return location
    if isinstance(location, RemoteTarball):
        if location.cached_path is None:
            return None
        return ResolvedRemoteTarball(location.uri, location.cached_path)
    if isinstance(location, RepoTarball):
        path = location.cached_path
        if path is None:
            path = check_repo_tarball_fetched(location.repository, location.package_id)
        if path is None:
            return None
        return ResolvedRepoTarball(location.repository, location.package_id, path)
    raise TypeError(f"未知的制品位置类型: {type(location).__name__}")


def check_repo_tarball_fetched(repo: Repository, pkgid: PackageId) -> Path | None:
    """仓库包的缓存文件存在时返回其路径"""
    path = package_file(repo, pkgid)
    if path.is_file():
        logger.debug("本地命中: %s -> %s", pkgid, path)
        return path
    return None
