"""仓库清单管理

职责:
- 从 YAML 清单文件加载仓库定义（local / remote / secure）
- 远程仓库未声明 layout 时在此检测一次
- 保证各仓库的 root_dir 互不相同，避免缓存冲突
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from depfetch.core.exceptions import ConfigError
from depfetch.core.fetch.models import (
    LocalMirror,
    RemoteMirror,
    RepoLayout,
    Repository,
    SecureMirror,
)
from depfetch.core.fetch.paths import detect_layout
from depfetch.core.protocols import SecureRepoClient
from depfetch.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)


class RepoRegistry:
    """仓库注册表 - 从清单文件加载仓库定义"""

    def __init__(
        self,
        registry_path: Path,
        cache_dir: Path,
        secure_clients: Mapping[str, SecureRepoClient] | None = None,
    ) -> None:
        self.registry_path = registry_path
        self.cache_dir = cache_dir
        self.secure_clients = dict(secure_clients or {})
        # 已声明但当前不可用的仓库: 名称 -> 原因
        self.unavailable: dict[str, str] = {}

    def load(self) -> dict[str, Repository]:
        """从清单文件加载所有仓库定义"""
        if not self.registry_path.exists():
            logger.warning("仓库清单不存在: %s", self.registry_path)
            return {}

        data = load_yaml(self.registry_path)
        repos: dict[str, Repository] = {}
        self.unavailable = {}
        for name, info in (data.get("repositories") or {}).items():
            if info is None:
                info = {}
            if not isinstance(info, dict):
                raise ConfigError(f"仓库 '{name}' 的定义必须是字典")
            name = str(name)
            if info.get("kind") == "secure" and name not in self.secure_clients:
                # 缺少客户端只影响该仓库本身，使用时再报错
                reason = f"安全仓库 '{name}' 没有注入 SecureRepoClient"
                logger.warning("%s，已跳过", reason, extra={"repo": name})
                self.unavailable[name] = reason
                continue
            repos[name] = self._build(name, info)

        self._check_unique_roots(repos)
        logger.info("已加载 %d 个仓库", len(repos))
        return repos

    def _build(self, name: str, info: dict[str, Any]) -> Repository:
        kind = info.get("kind", "remote")
        root_dir = Path(info["root_dir"]) if info.get("root_dir") else self.cache_dir / name

        if kind == "local":
            if not info.get("root_dir"):
                raise ConfigError(f"本地镜像 '{name}' 必须指定 root_dir")
            return LocalMirror(name=name, root_dir=root_dir)

        if kind == "remote":
            uri = info.get("uri", "")
            if not uri:
                raise ConfigError(f"远程仓库 '{name}' 未定义 uri")
            return RemoteMirror(
                name=name, index_uri=uri, root_dir=root_dir,
                layout=self._layout(name, uri, info.get("layout")),
            )

        if kind == "secure":
            client = self.secure_clients.get(name)
            if client is None:
                raise ConfigError(f"安全仓库 '{name}' 没有注入 SecureRepoClient")
            return SecureMirror(name=name, root_dir=root_dir, client=client)

        raise ConfigError(f"仓库 '{name}' 的类型不支持: {kind}")

    @staticmethod
    def _layout(name: str, uri: str, raw: object) -> RepoLayout:
        if raw is None:
            return detect_layout(uri)
        try:
            return RepoLayout(raw)
        except ValueError as e:
            raise ConfigError(f"仓库 '{name}' 的 layout 无效: {raw}") from e

    @staticmethod
    def _check_unique_roots(repos: dict[str, Repository]) -> None:
        seen: dict[Path, str] = {}
        for name, repo in repos.items():
            root = repo.root_dir.resolve()
            if root in seen:
                raise ConfigError(
                    f"仓库 '{name}' 与 '{seen[root]}' 共用缓存目录: {repo.root_dir}"
                )
            seen[root] = name

    @staticmethod
    def list_repositories(repos: dict[str, Repository]) -> list[dict[str, str]]:
        """格式化仓库列表用于查询"""
        results = []
        for repo in repos.values():
            info: dict[str, str] = {
                "name": repo.name,
                "kind": _kind_of(repo),
                "root_dir": str(repo.root_dir),
            }
            if isinstance(repo, RemoteMirror):
                info["uri"] = repo.index_uri
                info["layout"] = repo.layout.value
            results.append(info)
        return results


def _kind_of(repo: Repository) -> str:
    if isinstance(repo, LocalMirror):
        return "local"
    if isinstance(repo, RemoteMirror):
        return "remote"
    if isinstance(repo, SecureMirror):
        return "secure"
    raise TypeError(f"未知的仓库类型: {type(repo).__name__}")
