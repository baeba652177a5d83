"""制品拉取器

职责:
- 按位置类型把未解析位置提升为已解析位置（本地优先，缺失时才拉取）
- 按仓库类型分派: 本地镜像只检查存在性，远程仓库走 Transport，安全仓库走 SecureRepoClient
- 原子落盘: 先写同目录临时文件，成功后再 rename 到缓存路径
- 进程内按缓存文件加锁，同一制品同一时刻只下载一次
- 批量并发拉取

本模块不做重试，也不吞掉任何异常；失败时缓存路径上不会留下文件。
"""

from __future__ import annotations

import contextlib
import logging
import os
import tempfile
import threading
from collections.abc import Iterator, Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from depfetch.core.config import get_config
from depfetch.core.exceptions import MissingArtifactError, TransportError
from depfetch.core.fetch.models import (
    LocalMirror,
    LocalTarball,
    LocalUnpacked,
    PackageId,
    RemoteMirror,
    RemoteTarball,
    RepoTarball,
    Repository,
    ResolvedLocation,
    ResolvedRemoteTarball,
    ResolvedRepoTarball,
    SecureMirror,
    UnresolvedLocation,
)
from depfetch.core.fetch.paths import package_dir, package_file, package_uri
from depfetch.core.protocols import DownloadResult, Transport
from depfetch.utils.atomic import atomic_target

logger = logging.getLogger(__name__)

# ---- 进程内单飞锁：按缓存文件路径，最后一个使用者退出时移除 ----

_locks: dict[Path, tuple[threading.Lock, int]] = {}
_locks_guard = threading.Lock()


@contextlib.contextmanager
def _single_flight(path: Path) -> Iterator[None]:
    with _locks_guard:
        entry = _locks.get(path)
        lock, users = entry if entry else (threading.Lock(), 0)
        _locks[path] = (lock, users + 1)
    try:
        with lock:
            yield
    finally:
        with _locks_guard:
            lock, users = _locks[path]
            if users == 1:
                del _locks[path]
            else:
                _locks[path] = (lock, users - 1)


def fetch_package(
    location: UnresolvedLocation,
    transport: Transport,
    *,
    temp_dir: Path | None = None,
) -> ResolvedLocation:
    """拉取制品（若尚未就绪），返回已解析位置

    temp_dir 仅用于纯 URI 下载，未指定时取配置项 temp_dir，再回退到系统临时目录。
    """
    if isinstance(location, (LocalUnpacked, LocalTarball)):
        return location
    if isinstance(location, RemoteTarball):
        if location.cached_path is not None:
            return ResolvedRemoteTarball(location.uri, location.cached_path)
        path = _download_tarball(location.uri, transport, temp_dir)
        return ResolvedRemoteTarball(location.uri, path)
    if isinstance(location, RepoTarball):
        if location.cached_path is not None:
            return ResolvedRepoTarball(
                location.repository, location.package_id, location.cached_path,
            )
        path = fetch_repo_tarball(location.repository, location.package_id, transport)
        return ResolvedRepoTarball(location.repository, location.package_id, path)
    raise TypeError(f"未知的制品位置类型: {type(location).__name__}")


def fetch_repo_tarball(repo: Repository, pkgid: PackageId, transport: Transport) -> Path:
    """拉取仓库包（若本地缓存中没有），返回缓存文件路径"""
    path = package_file(repo, pkgid)
    if path.is_file():
        logger.info("%s 已下载，直接使用", pkgid, extra={"package": str(pkgid), "path": path})
        return path

    with _single_flight(path):
        # 等锁期间可能已被其他线程下载完成
        if path.is_file():
            logger.info("%s 已下载，直接使用", pkgid, extra={"package": str(pkgid), "path": path})
            return path
        return _download_repo_package(repo, pkgid, transport)


def _download_repo_package(repo: Repository, pkgid: PackageId, transport: Transport) -> Path:
    """按仓库类型分派下载"""
    path = package_file(repo, pkgid)

    if isinstance(repo, LocalMirror):
        # 本地镜像由外部同步步骤放置文件，这里只做存在性检查
        if not path.is_file():
            raise MissingArtifactError(
                f"本地镜像 '{repo.name}' 中缺少 {pkgid}: {path}", path=str(path),
            )
        return path

    if isinstance(repo, RemoteMirror):
        transport.ensure_secure_channel(repo.index_uri)
        uri = package_uri(repo, pkgid)
        logger.info(
            "下载 %s: %s", pkgid, uri,
            extra={"package": str(pkgid), "repo": repo.name, "uri": uri},
        )
        package_dir(repo, pkgid).mkdir(parents=True, exist_ok=True)
        with atomic_target(path) as tmp:
            _download_fresh(transport, uri, tmp)
        return path

    if isinstance(repo, SecureMirror):
        package_dir(repo, pkgid).mkdir(parents=True, exist_ok=True)
        logger.info(
            "写入 %s", path,
            extra={"package": str(pkgid), "repo": repo.name, "path": path},
        )
        # 校验失败的 VerificationError 原样上抛，不回退到未校验下载
        with atomic_target(path) as tmp:
            repo.client.download_verified(pkgid, tmp)
        return path

    raise TypeError(f"未知的仓库类型: {type(repo).__name__}")


def _download_fresh(transport: Transport, uri: str, dest: Path) -> None:
    # 目标是刚创建的空临时文件，"未修改" 意味着没有写入任何内容
    if transport.download(uri, dest) is DownloadResult.NOT_MODIFIED:
        raise TransportError(f"传输层对新建目标返回未修改，未获得内容: {uri}", uri=uri)


def _download_tarball(uri: str, transport: Transport, temp_dir: Path | None) -> Path:
    """下载纯 URI tarball 到私有临时文件"""
    transport.ensure_secure_channel(uri)
    logger.info("下载 %s", uri, extra={"uri": uri})

    if temp_dir is None:
        temp_dir = get_config().resolved_temp_dir()
    if temp_dir is not None:
        temp_dir.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(
        dir=str(temp_dir) if temp_dir else None,
        prefix="depfetch-", suffix=".tar.gz",
    )
    os.close(fd)
    path = Path(tmp)
    try:
        _download_fresh(transport, uri, path)
    except BaseException:
        path.unlink(missing_ok=True)
        raise
    return path


def fetch_packages(
    locations: Sequence[UnresolvedLocation],
    transport: Transport,
    *,
    temp_dir: Path | None = None,
    max_workers: int | None = None,
) -> list[ResolvedLocation]:
    """并发拉取多个制品，结果顺序与输入一致

    所有已提交的任务结束后，若有失败则抛出第一个失败（按输入顺序）。
    """
    workers = max_workers or get_config().max_workers
    if workers == 1 or len(locations) <= 1:
        return [fetch_package(loc, transport, temp_dir=temp_dir) for loc in locations]

    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [
            executor.submit(fetch_package, loc, transport, temp_dir=temp_dir)
            for loc in locations
        ]
    # 退出 with 时所有任务均已结束
    errors = [f.exception() for f in futures]
    failed = [e for e in errors if e is not None]
    if failed:
        logger.warning("批量拉取: %d 成功, %d 失败", len(futures) - len(failed), len(failed))
        raise failed[0]
    return [f.result() for f in futures]
