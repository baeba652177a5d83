"""CLI 命令测试"""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

import depfetch.cli as climod
from depfetch.cli import cmd_fetch, main

BASE = "https://hackage.example/packages"


@pytest.fixture()
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """写入配置与仓库清单，返回配置文件路径"""
    monkeypatch.setattr(climod, "setup_logging", lambda **kwargs: None)
    mirror = tmp_path / "mirror"
    (tmp_path / "repos.yml").write_text(
        "repositories:\n"
        "  hackage:\n"
        "    kind: remote\n"
        f"    uri: {BASE}\n"
        "  mirror:\n"
        "    kind: local\n"
        f"    root_dir: {mirror}\n"
        "  signed:\n"
        "    kind: secure\n",
        encoding="utf-8",
    )
    cfg = tmp_path / "depfetch.yml"
    cfg.write_text(
        f"cache_dir: {tmp_path / 'cache'}\n"
        f"temp_dir: {tmp_path / 'tmp'}\n"
        f"repos_file: {tmp_path / 'repos.yml'}\n",
        encoding="utf-8",
    )
    return cfg


@pytest.fixture()
def fake_http(transport, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(cmd_fetch, "HttpTransport", lambda: transport)
    return transport


def _run(cfg: Path, *args: str):
    return CliRunner().invoke(main, ["--config", str(cfg), *args])


class TestRepos:
    def test_lists_configured(self, workspace: Path) -> None:
        result = _run(workspace, "repos")
        assert result.exit_code == 0
        assert "hackage" in result.output
        assert BASE in result.output
        assert "[local " in result.output
        assert "signed" not in result.output

    def test_empty(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(climod, "setup_logging", lambda **kwargs: None)
        cfg = tmp_path / "depfetch.yml"
        cfg.write_text(f"repos_file: {tmp_path / 'none.yml'}\n")
        result = _run(cfg, "repos")
        assert result.exit_code == 0
        assert "没有已配置的仓库" in result.output


class TestCheck:
    def test_not_cached(self, workspace: Path) -> None:
        result = _run(workspace, "check", "foo-1.0", "--repo", "hackage")
        assert result.exit_code == 1
        assert "未缓存: foo-1.0" in result.output

    def test_cached(self, workspace: Path, tmp_path: Path) -> None:
        path = tmp_path / "cache" / "hackage" / "foo" / "1.0" / "foo-1.0.tar.gz"
        path.parent.mkdir(parents=True)
        path.touch()
        result = _run(workspace, "check", "foo-1.0", "--repo", "hackage")
        assert result.exit_code == 0
        assert str(path) in result.output

    def test_secure_repo_without_client_does_not_block_others(self, workspace: Path) -> None:
        result = _run(workspace, "check", "foo-1.0", "--repo", "hackage")
        assert result.exit_code == 1
        assert "未缓存: foo-1.0" in result.output
        assert "CONFIG_ERROR" not in result.output

    def test_secure_repo_without_client_reported_on_use(self, workspace: Path) -> None:
        result = _run(workspace, "check", "foo-1.0", "--repo", "signed")
        assert result.exit_code == 1
        assert "错误 [CONFIG_ERROR]" in result.output
        assert "没有注入 SecureRepoClient" in result.output

    def test_unknown_repo(self, workspace: Path) -> None:
        result = _run(workspace, "check", "foo-1.0", "--repo", "nope")
        assert result.exit_code == 1
        assert "错误 [CONFIG_ERROR]" in result.output


class TestFetch:
    def test_fetch_into_cache(self, workspace: Path, tmp_path: Path, fake_http) -> None:
        fake_http.contents[f"{BASE}/package/foo-1.0.tar.gz"] = b"foo"
        result = _run(workspace, "fetch", "foo-1.0", "--repo", "hackage")
        assert result.exit_code == 0, result.output
        path = tmp_path / "cache" / "hackage" / "foo" / "1.0" / "foo-1.0.tar.gz"
        assert f"就绪: foo-1.0 -> {path}" in result.output
        assert path.read_bytes() == b"foo"

    def test_transport_error_code(self, workspace: Path, fake_http) -> None:
        result = _run(workspace, "fetch", "foo-1.0", "--repo", "hackage")
        assert result.exit_code == 1
        assert "错误 [TRANSPORT_ERROR]" in result.output

    def test_missing_in_local_mirror(self, workspace: Path, fake_http) -> None:
        result = _run(workspace, "fetch", "foo-1.0", "--repo", "mirror")
        assert result.exit_code == 1
        assert "错误 [MISSING_ARTIFACT]" in result.output
        assert fake_http.downloads == []

    def test_invalid_package_id(self, workspace: Path, fake_http) -> None:
        result = _run(workspace, "fetch", "foo", "--repo", "hackage")
        assert result.exit_code == 1
        assert "错误 [VALIDATION_ERROR]" in result.output

    def test_fetch_url(self, workspace: Path, tmp_path: Path, fake_http) -> None:
        uri = "https://files.example/foo-1.0.tar.gz"
        fake_http.contents[uri] = b"payload"
        result = _run(workspace, "fetch-url", uri)
        assert result.exit_code == 0, result.output
        path = Path(result.output.strip().splitlines()[-1])
        assert path.parent == tmp_path / "tmp"
        assert path.read_bytes() == b"payload"


class TestUpdateIndex:
    def test_remote(self, workspace: Path, tmp_path: Path, fake_http) -> None:
        fake_http.contents[f"{BASE}/00-index.tar.gz"] = b"index"
        result = _run(workspace, "update-index", "--repo", "hackage")
        assert result.exit_code == 0, result.output
        assert "索引 hackage: downloaded" in result.output
        assert (tmp_path / "cache" / "hackage" / "00-index.tar.gz").read_bytes() == b"index"

    def test_local_repo_rejected(self, workspace: Path, fake_http) -> None:
        result = _run(workspace, "update-index", "--repo", "mirror")
        assert result.exit_code == 1
        assert "错误 [CONFIG_ERROR]" in result.output


class TestBadConfig:
    def test_invalid_config_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(climod, "setup_logging", lambda **kwargs: None)
        cfg = tmp_path / "depfetch.yml"
        cfg.write_text("max_workers: 0\n")
        result = _run(cfg, "repos")
        assert result.exit_code == 1
        assert "错误 [CONFIG_ERROR]" in result.output
