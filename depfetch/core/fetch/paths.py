"""缓存路径与远程 URI 计算

磁盘布局（需与外部同步工具逐字节一致）:
  <root>/<name>/<version>/<name>-<version>.tar.gz
  <root>/00-index.tar.gz

全部为纯函数：(name, version) 唯一确定一个包，root_dir 在仓库间唯一，
因此缓存路径确定且不冲突。
"""

from __future__ import annotations

import posixpath
from pathlib import Path
from urllib.parse import urlsplit, urlunsplit

from depfetch.core.fetch.models import (
    PackageId,
    RemoteMirror,
    RepoLayout,
    Repository,
)

INDEX_FILENAME = "00-index.tar.gz"
TARBALL_SUFFIX = ".tar.gz"

_LEGACY_HOST = "hackage.haskell.org"
_LEGACY_PATH = "/packages/archive"


def tarball_name(pkgid: PackageId) -> str:
    return f"{pkgid}{TARBALL_SUFFIX}"


def package_dir(repo: Repository, pkgid: PackageId) -> Path:
    """包在本地缓存中的目录: <root>/<name>/<version>"""
    return repo.root_dir / pkgid.name / str(pkgid.version)


def package_file(repo: Repository, pkgid: PackageId) -> Path:
    """包 tarball 在本地缓存中的完整路径"""
    return package_dir(repo, pkgid) / tarball_name(pkgid)


def index_file(cache_dir: Path) -> Path:
    return cache_dir / INDEX_FILENAME


def _join_uri_path(base_uri: str, *segments: str) -> str:
    """在 base_uri 的 path 后追加若干段，保留 scheme/host/query"""
    parts = urlsplit(base_uri)
    base_path = parts.path.rstrip("/") or "/"
    path = posixpath.join(base_path, *segments)
    return urlunsplit((parts.scheme, parts.netloc, path, parts.query, parts.fragment))


def package_uri(repo: RemoteMirror, pkgid: PackageId) -> str:
    """包 tarball 的远程地址

    legacy:  <base>/<name>/<version>/<name>-<version>.tar.gz
    package: <base>/package/<name>-<version>.tar.gz
    """
    if repo.layout is RepoLayout.LEGACY:
        return _join_uri_path(
            repo.index_uri, pkgid.name, str(pkgid.version), tarball_name(pkgid),
        )
    return _join_uri_path(repo.index_uri, "package", tarball_name(pkgid))


def index_uri(repo: RemoteMirror) -> str:
    return _join_uri_path(repo.index_uri, INDEX_FILENAME)


def detect_layout(uri: str) -> RepoLayout:
    """根据仓库地址判定布局，仅在配置仓库时调用一次

    只有旧版 hackage.haskell.org/packages/archive 使用 legacy 布局。
    """
    parts = urlsplit(uri)
    path = parts.path.rstrip("/")
    if parts.hostname == _LEGACY_HOST and path == _LEGACY_PATH:
        return RepoLayout.LEGACY
    return RepoLayout.PACKAGE
