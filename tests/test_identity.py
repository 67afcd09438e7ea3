"""Tests for applying an identity to git and ssh config."""

import os
import stat
import subprocess

from gitqq import identity
from gitqq.config import Identity

OTHER_HOSTS = """Host gitlab.com
  HostName gitlab.com
  IdentityFile ~/.ssh/id_gitlab
"""


def test_render_managed_block(ssh_dir):
    block = identity.render_managed_block(ssh_dir / "id_alice")
    assert block.splitlines() == [
        "Host github.com",
        "  HostName github.com",
        "  User git",
        f"  IdentityFile {ssh_dir / 'id_alice'}",
        "  IdentitiesOnly yes",
    ]


def test_strip_managed_block_keeps_other_hosts():
    text = (
        "Host github.com\n  HostName github.com\n  IdentityFile /k/old\n\n"
        + OTHER_HOSTS
        + "\nHost github.com\n  IdentityFile /k/older\n"
    )
    stripped = identity.strip_managed_block(text)
    assert "github.com" not in stripped
    assert stripped.startswith("Host gitlab.com")
    assert "id_gitlab" in stripped


def test_strip_leaves_aliases_alone():
    text = "Host github-work\n  HostName github.com\n  IdentityFile /k/work\n"
    assert identity.strip_managed_block(text) == text


def test_strip_keeps_global_options_before_hosts():
    text = "ServerAliveInterval 60\n\nHost github.com\n  User git\n"
    assert identity.strip_managed_block(text) == "ServerAliveInterval 60\n\n"


def test_write_ssh_config_prepends_single_block(ssh_dir):
    config = ssh_dir / "config"
    config.write_text(OTHER_HOSTS)

    identity.write_ssh_config(ssh_dir / "id_alice")
    identity.write_ssh_config(ssh_dir / "id_bob")

    content = config.read_text()
    assert content.count("Host github.com") == 1
    assert content.startswith("Host github.com\n")
    assert f"IdentityFile {ssh_dir / 'id_bob'}" in content
    assert "id_alice" not in content
    assert "Host gitlab.com" in content
    assert stat.S_IMODE(os.stat(config).st_mode) == 0o600


def test_write_ssh_config_creates_file(ssh_dir):
    identity.write_ssh_config(ssh_dir / "id_alice")
    assert (ssh_dir / "config").read_text() == identity.render_managed_block(ssh_dir / "id_alice")


def test_activate_sets_global_git_user(ssh_dir, monkeypatch):
    agent_calls = []
    monkeypatch.setattr(identity, "add_to_agent", lambda path: agent_calls.append(path) or True)

    identity.activate(Identity(name="Alice Liddell", email="alice@example.com", key_reference="id_alice"))

    name = subprocess.run(["git", "config", "--global", "user.name"], capture_output=True, text=True)
    email = subprocess.run(["git", "config", "--global", "user.email"], capture_output=True, text=True)
    assert name.stdout.strip() == "Alice Liddell"
    assert email.stdout.strip() == "alice@example.com"
    assert identity.get_global_git_user() == {"name": "Alice Liddell", "email": "alice@example.com"}
    assert "id_alice" in (ssh_dir / "config").read_text()
    assert agent_calls == [ssh_dir / "id_alice"]


def test_activate_without_key_leaves_ssh_config(ssh_dir, monkeypatch):
    monkeypatch.setattr(identity, "add_to_agent", lambda path: True)
    identity.activate(Identity(name="Bob", email="bob@example.com"))
    assert not (ssh_dir / "config").exists()
