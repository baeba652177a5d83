"""depfetch 命令行接口

CLI 只是库 API 的薄封装，各子模块注册自己的命令到 main group。
"""

from __future__ import annotations

import functools
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

import click

from depfetch import __version__
from depfetch.core.config import DEFAULT_CONFIG_FILE, get_config, init_config
from depfetch.core.exceptions import ConfigError, DepFetchError
from depfetch.core.fetch.models import Repository
from depfetch.core.fetch.registry import RepoRegistry
from depfetch.utils.logger import setup_logging

F = TypeVar("F", bound=Callable[..., Any])


def handle_errors(func: F) -> F:
    """把业务异常转为带错误码的提示并以状态 1 退出"""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except DepFetchError as e:
            click.echo(f"错误 [{e.code}]: {e}", err=True)
            raise click.exceptions.Exit(1) from e

    return wrapper  # type: ignore[return-value]


def _registry() -> RepoRegistry:
    cfg = get_config()
    return RepoRegistry(Path(cfg.repos_file), Path(cfg.cache_dir))


def load_repositories() -> dict[str, Repository]:
    """按当前配置加载仓库清单"""
    return _registry().load()


def get_repository(name: str) -> Repository:
    registry = _registry()
    repos = registry.load()
    repo = repos.get(name)
    if repo is None and name in registry.unavailable:
        raise ConfigError(registry.unavailable[name])
    if repo is None:
        raise ConfigError(f"仓库未配置: {name}。可用: {list(repos)}")
    return repo


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "-c", "config_path", default=DEFAULT_CONFIG_FILE, help="配置文件路径")
def main(config_path: str) -> None:
    """depfetch - 依赖包制品拉取与缓存"""
    setup_logging(
        level=os.getenv("DEPFETCH_LOG_LEVEL", "INFO"),
        json_output=os.getenv("DEPFETCH_LOG_JSON", "") == "1",
    )
    try:
        init_config(config_path)
    except DepFetchError as e:
        click.echo(f"错误 [{e.code}]: {e}", err=True)
        raise click.exceptions.Exit(1) from e


# 注册各领域子命令
from depfetch.cli.cmd_fetch import register as _reg_fetch  # noqa: E402

_reg_fetch(main)
