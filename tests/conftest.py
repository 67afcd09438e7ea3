"""Shared fixtures: every test runs against a throwaway HOME, SSH dir and git config."""

import subprocess
from pathlib import Path

import pytest


def git(cwd: Path, *args: str) -> subprocess.CompletedProcess:
    """Run git in ``cwd`` and fail the test on error."""
    return subprocess.run(["git", *args], cwd=cwd, capture_output=True, text=True, check=True)


def make_commit(repo: Path, filename: str, content: str = None, message: str = None) -> None:
    (repo / filename).write_text(content if content is not None else filename)
    git(repo, "add", filename)
    git(repo, "commit", "-m", message or f"Add {filename}")


def init_repo(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    git(path, "init")
    git(path, "symbolic-ref", "HEAD", "refs/heads/main")
    return path


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep tests away from the real ~/.gitqq-config.json, ~/.ssh and ~/.gitconfig."""
    home = tmp_path / "home"
    home.mkdir()
    ssh_dir = home / ".ssh"
    ssh_dir.mkdir()
    gitconfig = home / ".gitconfig"
    gitconfig.write_text("[user]\n\tname = Test\n\temail = test@test.com\n[init]\n\tdefaultBranch = main\n")

    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GITQQ_CONFIG", str(home / ".gitqq-config.json"))
    monkeypatch.setenv("GITQQ_SSH_DIR", str(ssh_dir))
    monkeypatch.setenv("GITQQ_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(gitconfig))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.delenv("GIT_SSH_COMMAND", raising=False)
    monkeypatch.delenv("GIT_DIR", raising=False)
    monkeypatch.delenv("GIT_WORK_TREE", raising=False)
    return home


@pytest.fixture
def ssh_dir(isolated_env) -> Path:
    return isolated_env / ".ssh"


@pytest.fixture
def repo(tmp_path) -> Path:
    """A repository with one commit on main and no remote."""
    path = init_repo(tmp_path / "work")
    make_commit(path, "README.md", "hello")
    return path


@pytest.fixture
def remote_pair(tmp_path):
    """
    A bare remote plus two clones (``a`` and ``b``) tracking origin/main,
    both at the same initial commit.
    """
    bare = tmp_path / "remote.git"
    bare.mkdir()
    git(bare, "init", "--bare")
    git(bare, "symbolic-ref", "HEAD", "refs/heads/main")

    a = init_repo(tmp_path / "a")
    make_commit(a, "README.md", "hello")
    git(a, "remote", "add", "origin", str(bare))
    git(a, "push", "--set-upstream", "origin", "main")

    b = tmp_path / "b"
    git(tmp_path, "clone", str(bare), str(b))
    return bare, a, b
