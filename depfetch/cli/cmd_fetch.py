"""CLI — 制品拉取与仓库命令"""

from __future__ import annotations

import click

from depfetch.cli import get_repository, handle_errors, load_repositories
from depfetch.core.config import get_config
from depfetch.core.exceptions import ConfigError
from depfetch.core.fetch.fetcher import fetch_package, fetch_packages
from depfetch.core.fetch.index import download_index
from depfetch.core.fetch.models import PackageId, RemoteMirror, RemoteTarball, RepoTarball
from depfetch.core.fetch.registry import RepoRegistry
from depfetch.core.fetch.resolver import check_fetched
from depfetch.core.transport import HttpTransport


def register(group: click.Group) -> None:
    group.add_command(list_repos)
    group.add_command(check)
    group.add_command(fetch)
    group.add_command(fetch_url)
    group.add_command(update_index)


@click.command(name="repos")
@handle_errors
def list_repos() -> None:
    """列出所有已配置的仓库"""
    repos = RepoRegistry.list_repositories(load_repositories())
    if not repos:
        click.echo("没有已配置的仓库。")
        return
    for r in repos:
        uri = r.get("uri", "")
        uri_info = f" {uri} ({r['layout']})" if uri else ""
        click.echo(f"  {r['name']:16s} [{r['kind']:6s}] {r['root_dir']}{uri_info}")


@click.command()
@click.argument("package")
@click.option("--repo", required=True, help="仓库名")
@handle_errors
def check(package: str, repo: str) -> None:
    """检查包是否已在本地缓存（不下载）"""
    location = RepoTarball(get_repository(repo), PackageId.parse(package))
    resolved = check_fetched(location)
    if resolved is None:
        click.echo(f"未缓存: {package}")
        raise click.exceptions.Exit(1)
    click.echo(str(resolved.local_path))


@click.command()
@click.argument("packages", nargs=-1, required=True)
@click.option("--repo", required=True, help="仓库名")
@click.option("--parallel", "-p", default=None, type=int, help="并发数（默认取配置 max_workers）")
@handle_errors
def fetch(packages: tuple[str, ...], repo: str, parallel: int | None) -> None:
    """拉取一个或多个包（本地已缓存则直接复用）"""
    repository = get_repository(repo)
    locations = [RepoTarball(repository, PackageId.parse(p)) for p in packages]
    resolved = fetch_packages(locations, HttpTransport(), max_workers=parallel)
    for name, loc in zip(packages, resolved):
        click.echo(f"就绪: {name} -> {loc.local_path}")


@click.command(name="fetch-url")
@click.argument("uri")
@handle_errors
def fetch_url(uri: str) -> None:
    """下载纯 URI 指向的 tarball 到临时目录"""
    resolved = fetch_package(
        RemoteTarball(uri), HttpTransport(),
        temp_dir=get_config().resolved_temp_dir(),
    )
    click.echo(str(resolved.local_path))


@click.command(name="update-index")
@click.option("--repo", required=True, help="仓库名")
@handle_errors
def update_index(repo: str) -> None:
    """刷新远程仓库的包索引"""
    repository = get_repository(repo)
    if not isinstance(repository, RemoteMirror):
        raise ConfigError(f"仓库 '{repo}' 不是远程仓库，无法刷新索引")
    result = download_index(HttpTransport(), repository, repository.root_dir)
    click.echo(f"索引 {repo}: {result.value}")
