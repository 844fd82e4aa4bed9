"""
Tests for CLI commands: create, info, list, publish, sync and config.
"""

from __future__ import annotations

import json
from pathlib import Path

import yaml
from click.testing import CliRunner

from gitrepo import commit_file, git, init_repo, rev
from gitshort.main import cli


def _invoke(repo: Path, *args: str):
    return CliRunner().invoke(cli, ["--repo", str(repo), *args])


class TestCLIGlobal:
    def test_help(self):
        result = CliRunner().invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "URL shortener" in result.output

    def test_version(self):
        result = CliRunner().invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_not_a_repository(self, tmp_path: Path):
        result = _invoke(tmp_path, "list")
        assert result.exit_code == 1
        assert "Not a git repository" in result.output


# ═══════════════════════════════════════════════════════════════════════
#  Records
# ═══════════════════════════════════════════════════════════════════════


class TestCreateCommand:
    def test_create(self, repo: Path):
        result = _invoke(repo, "create", "https://example.com/a", "An", "example")
        assert result.exit_code == 0
        assert "✅ Created" in result.output
        assert "https://example.com/a" in result.output
        assert "An example" in result.output

    def test_create_json_with_meta(self, repo: Path):
        result = _invoke(repo, "create", "https://example.com/a", "-m", "owner=ops", "--json")
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["url"] == "https://example.com/a"
        assert data["owner"] == "ops"
        assert data["short_id"]

    def test_bad_meta(self, repo: Path):
        result = _invoke(repo, "create", "https://example.com/a", "-m", "novalue")
        assert result.exit_code == 2
        assert "KEY=VALUE" in result.output

    def test_reserved_meta_key(self, repo: Path):
        result = _invoke(repo, "create", "https://example.com/a", "-m", "id=1")
        assert result.exit_code == 1
        assert "❌" in result.output

    def test_invalid_url(self, repo: Path):
        result = _invoke(repo, "create", "not-a-url")
        assert result.exit_code == 1
        assert "valid http, https or ftp URL" in result.output

    def test_staged_changes(self, repo: Path):
        (repo / "README.md").write_text("changed\n")
        git(repo, "add", "README.md")
        result = _invoke(repo, "create", "https://example.com/a")
        assert result.exit_code == 1
        assert "staged" in result.output

    def test_create_and_sync(self, remote_setup):
        result = _invoke(remote_setup["a"], "create", "https://example.com/a", "--sync")
        assert result.exit_code == 0
        assert "synced" in result.output
        assert rev(remote_setup["remote"], "master") == rev(remote_setup["a"], "master")


class TestInfoCommand:
    def _create(self, repo: Path) -> dict:
        result = _invoke(repo, "create", "https://example.com/info", "Info page", "--json")
        return json.loads(result.output)

    def test_info_by_short_id(self, repo: Path):
        created = self._create(repo)
        result = _invoke(repo, "info", created["short_id"])
        assert result.exit_code == 0
        assert "https://example.com/info" in result.output
        assert created["id"] in result.output

    def test_info_json_by_id(self, repo: Path):
        created = self._create(repo)
        result = _invoke(repo, "info", created["id"], "--json")
        assert json.loads(result.output) == created

    def test_info_unknown(self, repo: Path):
        result = _invoke(repo, "info", "zzzzzzzz")
        assert result.exit_code == 1
        assert "❌" in result.output


class TestListCommand:
    def test_empty(self, repo: Path):
        result = _invoke(repo, "list")
        assert result.exit_code == 0
        assert "No records found." in result.output

    def test_json_lines_oldest_first(self, repo: Path):
        _invoke(repo, "create", "https://example.com/1")
        commit_file(repo, "other.txt", "x\n", "not a record")
        _invoke(repo, "create", "https://example.com/2")
        result = _invoke(repo, "list", "--json")
        assert result.exit_code == 0
        urls = [json.loads(line)["url"] for line in result.output.splitlines()]
        assert urls == ["https://example.com/1", "https://example.com/2"]

    def test_bad_revision(self, repo: Path):
        result = _invoke(repo, "list", "--from", "nope")
        assert result.exit_code == 1
        assert "Unknown revision" in result.output


class TestPublishCommand:
    def test_publish(self, repo: Path, tmp_path: Path):
        created = json.loads(
            _invoke(repo, "create", "https://example.com/p", "--json").output
        )
        out = tmp_path / "site"
        result = _invoke(repo, "publish", "-o", str(out))
        assert result.exit_code == 0
        assert "Published 1 page(s)" in result.output
        page = out / created["short_id"] / "index.html"
        assert "https://example.com/p" in page.read_text()


class TestSyncCommand:
    def test_sync(self, remote_setup):
        _invoke(remote_setup["a"], "create", "https://example.com/a")
        result = _invoke(remote_setup["a"], "sync")
        assert result.exit_code == 0
        assert "✅ Synced" in result.output

    def test_sync_merges(self, remote_setup):
        _invoke(remote_setup["a"], "create", "https://example.com/a", "--sync")
        _invoke(remote_setup["b"], "create", "https://example.com/b")
        result = _invoke(remote_setup["b"], "sync")
        assert result.exit_code == 0
        assert "merged remote records" in result.output

    def test_sync_without_remote(self, tmp_path: Path):
        repo = init_repo(tmp_path / "lonely")
        _invoke(repo, "create", "https://example.com/a")
        result = _invoke(repo, "sync")
        assert result.exit_code == 1
        assert "❌" in result.output


# ═══════════════════════════════════════════════════════════════════════
#  Config
# ═══════════════════════════════════════════════════════════════════════


class TestConfigCommand:
    def test_set_and_get(self, isolated_env: Path):
        runner = CliRunner()
        result = runner.invoke(cli, ["config", "branch", "links"])
        assert result.exit_code == 0
        assert "branch=links" in result.output

        result = runner.invoke(cli, ["config", "branch"])
        assert result.output.strip() == "branch=links"
        assert yaml.safe_load((isolated_env / "gitshort.yml").read_text()) == {"branch": "links"}

    def test_all(self):
        result = CliRunner().invoke(cli, ["config", "--all"])
        assert result.exit_code == 0
        assert "remote=origin" in result.output
        assert "branch=master" in result.output

    def test_missing_key(self):
        result = CliRunner().invoke(cli, ["config"])
        assert result.exit_code == 1
        assert "KEY must be given" in result.output

    def test_unknown_key(self):
        result = CliRunner().invoke(cli, ["config", "colour"])
        assert result.exit_code == 1
        assert "Unknown config key" in result.output

    def test_explicit_config_file(self, tmp_path: Path):
        path = tmp_path / "alt.yml"
        result = CliRunner().invoke(cli, ["-c", str(path), "config", "remote", "upstream"])
        assert result.exit_code == 0
        assert yaml.safe_load(path.read_text()) == {"remote": "upstream"}

    def test_config_drives_repository(self, repo: Path):
        runner = CliRunner()
        runner.invoke(cli, ["config", "repository", str(repo)])
        result = runner.invoke(cli, ["create", "https://example.com/from-config"])
        assert result.exit_code == 0
        assert git(repo, "log", "-1", "--format=%B").startswith("---\nurl: https://example.com/from-config")
