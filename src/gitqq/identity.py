#!/usr/bin/env python3
"""
identity - Apply an identity to global git config and ~/.ssh/config.

The SSH config gets a managed block:

    Host github.com
      HostName github.com
      User git
      IdentityFile /home/me/.ssh/id_alice
      IdentitiesOnly yes

placed at the top of the file. Any earlier ``Host github.com`` block (from
its Host line up to the next Host/Match line) is removed first, so the file
always holds exactly one. Hand edits inside that block are lost on the next
switch.
"""

import logging
import os
import re
import subprocess
from pathlib import Path
from typing import Optional

from gitqq.config import Identity
from gitqq.executor import run_git
from gitqq.keys import get_ssh_dir, key_path

logger = logging.getLogger(__name__)

MANAGED_HOST = "github.com"

_HOST_LINE = re.compile(r'^\s*(Host|Match)\s+(.*)$', re.IGNORECASE)


def get_ssh_config_path() -> Path:
    return get_ssh_dir() / "config"


def render_managed_block(identity_file: Path) -> str:
    return (
        f"Host {MANAGED_HOST}\n"
        f"  HostName {MANAGED_HOST}\n"
        f"  User git\n"
        f"  IdentityFile {identity_file}\n"
        f"  IdentitiesOnly yes\n"
    )


def strip_managed_block(text: str) -> str:
    """Remove every ``Host github.com`` block from an SSH config text."""
    kept = []
    skipping = False
    for line in text.splitlines(keepends=True):
        match = _HOST_LINE.match(line)
        if match:
            is_managed = (match.group(1).lower() == "host"
                          and match.group(2).split() == [MANAGED_HOST])
            skipping = is_managed
        if not skipping:
            kept.append(line)
    return "".join(kept).lstrip("\n")


def write_ssh_config(identity_file: Path, config_path: Optional[Path] = None) -> Path:
    """Rewrite the SSH config with a fresh managed block for ``identity_file``."""
    config_path = config_path or get_ssh_config_path()
    existing = ""
    if config_path.exists():
        existing = config_path.read_text(encoding='utf-8')

    rest = strip_managed_block(existing)
    content = render_managed_block(identity_file)
    if rest:
        content += "\n" + rest

    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(content, encoding='utf-8')
    os.chmod(config_path, 0o600)
    logger.info("Wrote managed %s block to %s (key %s)", MANAGED_HOST, config_path, identity_file)
    return config_path


def add_to_agent(identity_file: Path) -> bool:
    """ssh-add the key. The agent may not be running; that's not an error."""
    try:
        result = subprocess.run(
            ["ssh-add", str(identity_file)],
            stdin=subprocess.DEVNULL,
            capture_output=True,
            text=True,
            check=False
        )
    except FileNotFoundError:
        logger.info("ssh-add not available, skipping agent")
        return False
    if result.returncode != 0:
        logger.info("ssh-add %s failed: %s", identity_file, result.stderr.strip())
        return False
    return True


def get_global_git_user() -> dict:
    """Current global user.name / user.email (missing keys are omitted)."""
    config = {}
    result = run_git(["config", "--global", "user.name"])
    if result.ok:
        config['name'] = result.stdout.strip()
    result = run_git(["config", "--global", "user.email"])
    if result.ok:
        config['email'] = result.stdout.strip()
    return config


def activate(identity: Identity, ssh_config_path: Optional[Path] = None) -> None:
    """
    Make ``identity`` the one git and ssh use for GitHub.

    Raises:
        CommandFailed: if git config could not be written
    """
    run_git(["config", "--global", "user.name", identity.name], check=True)
    run_git(["config", "--global", "user.email", identity.email], check=True)

    if identity.key_reference:
        identity_file = key_path(identity.key_reference)
        write_ssh_config(identity_file, ssh_config_path)
        add_to_agent(identity_file)

    logger.info("Activated identity %s <%s>", identity.name, identity.email)
