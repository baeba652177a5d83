"""制品定位数据模型

数据类:
- Version / PackageId: 包标识，仅作为键使用，不可变
- LocalMirror / RemoteMirror / SecureMirror: 三种仓库类型
- LocalUnpacked / LocalTarball / RemoteTarball / RepoTarball: 未解析的制品位置
- ResolvedRemoteTarball / ResolvedRepoTarball: 已解析位置（本地路径必定存在）

未解析 -> 已解析是单向提升：位置值从不修改，解析总是返回新值。
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Union

from depfetch.core.exceptions import ValidationError

if TYPE_CHECKING:
    from depfetch.core.protocols import SecureRepoClient

# 版本分量不允许前导零，保证解析后渲染回原文
_VERSION_RE = re.compile(r"^(0|[1-9]\d*)(\.(0|[1-9]\d*))*\Z")
# 包名: 以 '-' 分隔的字母数字段，每段至少含一个字母
_NAME_RE = re.compile(r"^[A-Za-z0-9]*[A-Za-z][A-Za-z0-9]*(-[A-Za-z0-9]*[A-Za-z][A-Za-z0-9]*)*$")


# =========================================================================
# 包标识
# =========================================================================

@dataclass(frozen=True, order=True)
class Version:
    """有序版本号，按分量逐个数值比较（1.10 > 1.9）"""

    parts: tuple[int, ...]

    @classmethod
    def parse(cls, text: str) -> Version:
        if not _VERSION_RE.match(text):
            raise ValidationError(f"无效的版本号: {text!r}")
        return cls(tuple(int(p) for p in text.split(".")))

    def __str__(self) -> str:
        return ".".join(str(p) for p in self.parts)


@dataclass(frozen=True, order=True)
class PackageId:
    """包标识 {name, version}"""

    name: str
    version: Version

    def __post_init__(self) -> None:
        if not _NAME_RE.match(self.name):
            raise ValidationError(f"无效的包名: {self.name!r}")

    @classmethod
    def of(cls, name: str, version: str) -> PackageId:
        return cls(name, Version.parse(version))

    @classmethod
    def parse(cls, text: str) -> PackageId:
        """解析 ``<name>-<version>`` 形式，版本取最后一个 '-' 之后的部分"""
        name, sep, version = text.rpartition("-")
        if not sep or not name:
            raise ValidationError(f"无效的包标识（应为 name-version）: {text!r}")
        return cls.of(name, version)

    def __str__(self) -> str:
        return f"{self.name}-{self.version}"


# =========================================================================
# 仓库类型（封闭集合，新增类型必须同步修改所有分派点）
# =========================================================================

class RepoLayout(str, Enum):
    """远程仓库的地址布局，配置仓库时检测一次"""
    LEGACY = "legacy"     # <base>/<name>/<version>/<name>-<version>.tar.gz
    PACKAGE = "package"   # <base>/package/<name>-<version>.tar.gz


@dataclass(frozen=True)
class LocalMirror:
    """本地目录镜像，制品由外部同步步骤预先放置"""

    name: str
    root_dir: Path


@dataclass(frozen=True)
class RemoteMirror:
    """纯 HTTP(S) 远程仓库 + 本地缓存根目录"""

    name: str
    index_uri: str
    root_dir: Path
    layout: RepoLayout = RepoLayout.PACKAGE


@dataclass(frozen=True)
class SecureMirror:
    """经签名校验的安全仓库，制品只能通过 client 获取"""

    name: str
    root_dir: Path
    client: SecureRepoClient = field(compare=False, repr=False)


Repository = Union[LocalMirror, RemoteMirror, SecureMirror]


# =========================================================================
# 制品位置
# =========================================================================

@dataclass(frozen=True)
class LocalUnpacked:
    """已解包的本地源码目录，始终视为存在"""

    dir: Path

    @property
    def local_path(self) -> Path:
        return self.dir


@dataclass(frozen=True)
class LocalTarball:
    """本地已有的 tarball，始终视为存在"""

    path: Path

    @property
    def local_path(self) -> Path:
        return self.path


@dataclass(frozen=True)
class RemoteTarball:
    """纯 URI 指向的 tarball，可能已知缓存位置"""

    uri: str
    cached_path: Path | None = None


@dataclass(frozen=True)
class RepoTarball:
    """仓库中的包，可能已知缓存位置"""

    repository: Repository
    package_id: PackageId
    cached_path: Path | None = None


@dataclass(frozen=True)
class ResolvedRemoteTarball:
    uri: str
    path: Path

    @property
    def local_path(self) -> Path:
        return self.path


@dataclass(frozen=True)
class ResolvedRepoTarball:
    repository: Repository
    package_id: PackageId
    path: Path

    @property
    def local_path(self) -> Path:
        return self.path


UnresolvedLocation = Union[LocalUnpacked, LocalTarball, RemoteTarball, RepoTarball]
ResolvedLocation = Union[LocalUnpacked, LocalTarball, ResolvedRemoteTarball, ResolvedRepoTarball]
