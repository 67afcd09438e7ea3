"""Tests for the git command executor."""

import pytest

from gitqq.config import Identity
from gitqq.errors import CommandFailed, GitqqError
from gitqq.executor import (KnownFailure, build_env, classify_failure, run_command, run_git,
                            split_command)


@pytest.mark.parametrize("text, expected", [
    ("fatal: The current branch feature has no upstream branch.\n", KnownFailure.NO_UPSTREAM),
    ("error: remote origin already exists.\n", KnownFailure.ALREADY_EXISTS),
    (" ! [rejected]        main -> main (stale info)\n", KnownFailure.STALE_LEASE),
    (" ! [rejected]        main -> main (non-fast-forward)\n", KnownFailure.REJECTED),
    (" ! [rejected]        main -> main (fetch first)\n", KnownFailure.REJECTED),
    ("fatal: not a git repository (or any of the parent directories): .git\n", None),
    ("", None),
])
def test_classify_failure(text, expected):
    assert classify_failure(text) is expected


def test_classify_failure_is_case_sensitive():
    assert classify_failure("NO UPSTREAM BRANCH") is None


def test_env_pins_identity_key(ssh_dir):
    identity = Identity(name="Alice", email="a@x.io", key_reference="id_alice")
    env = build_env(identity)
    assert str(ssh_dir / "id_alice") in env["GIT_SSH_COMMAND"]
    assert "-o IdentitiesOnly=yes" in env["GIT_SSH_COMMAND"]
    assert env["GIT_SSH_COMMAND"].startswith("ssh -i ")


def test_env_without_identity_leaves_ssh_alone():
    assert "GIT_SSH_COMMAND" not in build_env(None)
    assert "GIT_SSH_COMMAND" not in build_env(Identity(name="N", email="n@x.io"))


def test_run_git_outside_repository(tmp_path):
    result = run_git(["status"], cwd=tmp_path)
    assert not result.ok
    assert result.exit_code != 0
    assert "not a git repository" in result.stderr


def test_run_git_check_raises_with_result(tmp_path):
    with pytest.raises(CommandFailed) as excinfo:
        run_git(["status"], cwd=tmp_path, check=True)
    assert excinfo.value.result.exit_code != 0
    assert "not a git repository" in str(excinfo.value)


def test_already_exists_is_classified(repo):
    run_git(["remote", "add", "origin", "git@github.com:u/r.git"], cwd=repo, check=True)
    result = run_git(["remote", "add", "origin", "git@github.com:u/other.git"], cwd=repo)
    assert result.known_failure is KnownFailure.ALREADY_EXISTS


@pytest.mark.parametrize("command, expected", [
    ("git log --oneline", ["log", "--oneline"]),
    ("log --oneline", ["log", "--oneline"]),
    ('commit -m "two words"', ["commit", "-m", "two words"]),
    (["git", "status"], ["status"]),
])
def test_split_command(command, expected):
    assert split_command(command) == expected


def test_run_command_accepts_leading_git(repo):
    result = run_command("git rev-parse --abbrev-ref HEAD", cwd=repo)
    assert result.ok
    assert result.stdout.strip() == "main"


def test_run_command_rejects_empty():
    with pytest.raises(GitqqError):
        run_command("git")
