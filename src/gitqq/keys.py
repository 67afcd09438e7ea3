#!/usr/bin/env python3
"""
keys - SSH key files for gitqq identities.

Identities refer to keys by file name inside the SSH directory
(``~/.ssh/id_alice``); the public half lives next to it with a ``.pub``
suffix.
"""

import logging
import os
import subprocess
from pathlib import Path
from typing import List, Optional

import requests

from gitqq.errors import KeyGenerationFailed, KeyMissing

logger = logging.getLogger(__name__)

GITHUB_KEYS_URL = "https://github.com/{username}.keys"
GITHUB_NEW_KEY_URL = "https://github.com/settings/ssh/new"


def get_ssh_dir() -> Path:
    """~/.ssh, or GITQQ_SSH_DIR when set."""
    override = os.environ.get("GITQQ_SSH_DIR")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".ssh"


def key_path(key_name: str) -> Path:
    return get_ssh_dir() / key_name


def default_key_name(handle: str) -> str:
    return f"id_{handle}"


def validate_key(key_name: str) -> bool:
    return key_path(key_name).exists()


def require_key(key_name: str) -> Path:
    """Return the key path, raising KeyMissing if the file is absent."""
    path = key_path(key_name)
    if not path.exists():
        raise KeyMissing(key_name, path)
    return path


def _ensure_ssh_dir() -> Path:
    ssh_dir = get_ssh_dir()
    ssh_dir.mkdir(parents=True, exist_ok=True)
    try:
        os.chmod(ssh_dir, 0o700)
    except OSError:
        pass
    return ssh_dir


def generate_key(handle: str, email: str) -> str:
    """
    Generate an ed25519 key pair ``id_<handle>`` with an empty passphrase.

    Returns:
        The key name to store on the identity.
    """
    key_name = default_key_name(handle)
    path = key_path(key_name)
    if path.exists():
        raise KeyGenerationFailed(f"Key file already exists: {path}")

    _ensure_ssh_dir()
    logger.info("Generating ed25519 key %s", path)
    try:
        result = subprocess.run(
            ["ssh-keygen", "-t", "ed25519", "-f", str(path), "-C", email, "-N", ""],
            capture_output=True,
            text=True,
            check=False
        )
    except FileNotFoundError:
        raise KeyGenerationFailed("ssh-keygen not found - install OpenSSH first")

    if result.returncode != 0:
        logger.error("ssh-keygen failed: %s", result.stderr.strip())
        raise KeyGenerationFailed(f"Failed to generate SSH key: {result.stderr.strip()}")

    os.chmod(path, 0o600)
    return key_name


def save_pasted_key(handle: str, content: str) -> str:
    """Write pasted private key content to ``id_<handle>`` with mode 0600."""
    content = content.strip()
    if not content or "BEGIN" not in content:
        raise KeyGenerationFailed("Please enter valid SSH key content")

    key_name = default_key_name(handle)
    path = key_path(key_name)
    _ensure_ssh_dir()

    # Create with owner-only permissions from the start.
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, 'w') as f:
        f.write(content + "\n")
    os.chmod(path, 0o600)
    logger.info("Saved pasted key to %s", path)
    return key_name


def read_public_key(key_name: str) -> Optional[str]:
    pub = key_path(key_name + ".pub")
    if not pub.exists():
        return None
    return pub.read_text(encoding='utf-8').strip()


def delete_key_files(key_name: str) -> List[Path]:
    """Delete a key pair. Returns the paths that were removed."""
    removed = []
    for path in (key_path(key_name), key_path(key_name + ".pub")):
        if path.exists():
            path.unlink()
            removed.append(path)
    logger.info("Deleted key files: %s", ", ".join(str(p) for p in removed) or "(none)")
    return removed


def fetch_github_keys(username: str, timeout: float = 5) -> Optional[List[str]]:
    """
    Public keys GitHub serves for ``username``.

    Returns None when GitHub can't be reached or the user doesn't exist.
    """
    try:
        response = requests.get(GITHUB_KEYS_URL.format(username=username), timeout=timeout)
    except requests.RequestException as e:
        logger.info("Could not fetch GitHub keys for %s: %s", username, e)
        return None

    if response.status_code != 200:
        return None
    return [line.strip() for line in response.text.splitlines() if line.strip()]


def is_key_registered(username: str, key_name: str) -> str:
    """
    Check whether the public half of ``key_name`` is on ``username``'s GitHub account.

    Returns 'registered', 'missing' or 'unknown'.
    """
    public_key = read_public_key(key_name)
    if not public_key:
        return 'unknown'

    github_keys = fetch_github_keys(username)
    if github_keys is None:
        return 'unknown'

    # GitHub drops the comment field, so compare type + key material only.
    wanted = " ".join(public_key.split()[:2])
    for key in github_keys:
        if " ".join(key.split()[:2]) == wanted:
            return 'registered'
    return 'missing'
