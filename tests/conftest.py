"""
Shared test fixtures and configuration.

Every test runs with an isolated HOME and no system git config, so the
developer's own git settings (signing, hooks, default branch) never leak
into the repositories created here.
"""

from pathlib import Path

import pytest

from gitrepo import add_remote, clone_repo, init_bare_repo, init_repo
from gitshort.core.models import StoreConfig
from gitshort.core.services.store import RecordStore


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point HOME, git config and the gitshort config at a temp directory."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GITSHORT_CONFIG", str(home / "gitshort.yml"))
    for var in ("GIT_DIR", "GIT_WORK_TREE", "GIT_INDEX_FILE", "GITSHORT_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    return home


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    """A git repo on ``master`` with one ordinary (non-record) commit."""
    return init_repo(tmp_path / "links")


@pytest.fixture
def store(repo: Path) -> RecordStore:
    return RecordStore(StoreConfig(repository=repo))


@pytest.fixture
def remote_setup(tmp_path: Path) -> dict[str, Path]:
    """A bare remote plus two independent clones that both track it."""
    remote = init_bare_repo(tmp_path / "remote.git")

    first = init_repo(tmp_path / "clone_a")
    add_remote(first, "origin", remote)

    second = clone_repo(remote, tmp_path / "clone_b")
    return {"remote": remote, "a": first, "b": second}
