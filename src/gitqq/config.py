#!/usr/bin/env python3
"""
config - Persistent account store for gitqq.

The store is a single JSON document (default ``~/.gitqq-config.json``):

    {
      "accounts": {"alice": {"name": ..., "email": ..., "sshKey": ..., "customKey": ...}},
      "currentAccount": "alice",
      "defaultBranch": "main",
      "repoSettings": {"/abs/path": {"initialized": true, "preferredBranch": "main"}}
    }

A Store value is loaded once and passed explicitly to every operation.
Every mutating helper here saves the store before returning.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any, Optional

from gitqq.errors import IdentityExists, UnknownIdentity

logger = logging.getLogger(__name__)

DEFAULT_BRANCH = "main"


@dataclass
class Identity:
    """Git author info plus the SSH key used for GitHub traffic."""
    name: str
    email: str
    key_reference: Optional[str] = None
    owns_generated_key: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "email": self.email,
            "sshKey": self.key_reference,
            "customKey": self.owns_generated_key,
        }

    @classmethod
    def from_dict(cls, handle: str, data: Dict[str, Any]) -> "Identity":
        return cls(
            name=data.get("name") or handle,
            email=data.get("email") or "",
            key_reference=data.get("sshKey") or None,
            owns_generated_key=bool(data.get("customKey", False)),
        )


@dataclass
class RepoSettings:
    initialized: bool = False
    preferred_branch: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"initialized": self.initialized, "preferredBranch": self.preferred_branch}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RepoSettings":
        return cls(
            initialized=bool(data.get("initialized", False)),
            preferred_branch=data.get("preferredBranch") or None,
        )


@dataclass
class Store:
    identities: Dict[str, Identity] = field(default_factory=dict)
    active_handle: Optional[str] = None
    default_branch: str = DEFAULT_BRANCH
    repo_settings: Dict[str, RepoSettings] = field(default_factory=dict)
    path: Optional[Path] = field(default=None, compare=False, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "accounts": {h: ident.to_dict() for h, ident in self.identities.items()},
            "currentAccount": self.active_handle,
            "defaultBranch": self.default_branch,
            "repoSettings": {p: s.to_dict() for p, s in self.repo_settings.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], path: Optional[Path] = None) -> "Store":
        accounts = data.get("accounts") or {}
        settings = data.get("repoSettings") or {}
        active = data.get("currentAccount")
        if not isinstance(accounts, dict) or not isinstance(settings, dict):
            raise ValueError("accounts and repoSettings must be objects")
        if active is not None and not isinstance(active, str):
            raise ValueError("currentAccount must be a string or null")

        identities = {
            handle: Identity.from_dict(handle, info)
            for handle, info in accounts.items()
            if isinstance(info, dict)
        }
        if active not in identities:
            active = None
        default_branch = data.get("defaultBranch")
        return cls(
            identities=identities,
            active_handle=active,
            default_branch=default_branch if isinstance(default_branch, str) and default_branch else DEFAULT_BRANCH,
            repo_settings={
                p: RepoSettings.from_dict(s) for p, s in settings.items() if isinstance(s, dict)
            },
            path=path,
        )


def get_config_file() -> Path:
    """Get the path to the configuration file."""
    override = os.environ.get("GITQQ_CONFIG")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".gitqq-config.json"


def load_store(config_file: Optional[Path] = None) -> Store:
    """
    Load the store from disk.

    A missing file gives an empty store. A corrupt file is reported and also
    gives an empty store; it is overwritten on the next save.
    """
    config_file = Path(config_file) if config_file else get_config_file()

    if not config_file.exists():
        return Store(path=config_file)

    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError("top-level JSON value is not an object")
        store = Store.from_dict(data, path=config_file)
    except (OSError, ValueError) as e:
        logger.warning("Config file %s is corrupted (%s), starting with an empty store", config_file, e)
        from gitqq.ui import Colors
        print(f"{Colors.YELLOW}⚠ Config file corrupted, creating new one{Colors.RESET}")
        return Store(path=config_file)

    return store


def save_store(store: Store) -> None:
    """Write the whole store back to its file."""
    config_file = store.path or get_config_file()
    store.path = config_file
    config_file.parent.mkdir(parents=True, exist_ok=True)
    with open(config_file, 'w', encoding='utf-8') as f:
        json.dump(store.to_dict(), f, indent=2)
    logger.info("Saved config to %s", config_file)


def add_identity(store: Store, handle: str, identity: Identity) -> None:
    if handle in store.identities:
        raise IdentityExists(f"Account '{handle}' already exists")
    store.identities[handle] = identity
    logger.info("Added account %s <%s>", handle, identity.email)
    save_store(store)


def remove_identity(store: Store, handle: str) -> Identity:
    """Remove an identity; clears the active pointer when it referenced it."""
    if handle not in store.identities:
        raise UnknownIdentity(f"No account named '{handle}'")
    identity = store.identities.pop(handle)
    if store.active_handle == handle:
        store.active_handle = None
    logger.info("Removed account %s", handle)
    save_store(store)
    return identity


def set_active(store: Store, handle: Optional[str]) -> None:
    if handle is not None and handle not in store.identities:
        raise UnknownIdentity(f"No account named '{handle}'")
    store.active_handle = handle
    logger.info("Active account set to %s", handle)
    save_store(store)


def get_active(store: Store) -> Optional[Identity]:
    if store.active_handle is None:
        return None
    return store.identities.get(store.active_handle)


def set_default_branch(store: Store, branch: str) -> None:
    store.default_branch = branch
    save_store(store)


def _repo_key(repo_path: Path) -> str:
    # Keyed by path, so a moved or re-cloned repo starts over.
    return str(Path(repo_path).resolve())


def get_repo_settings(store: Store, repo_path: Path) -> RepoSettings:
    return store.repo_settings.get(_repo_key(repo_path), RepoSettings())


def mark_repo_initialized(store: Store, repo_path: Path, branch: str) -> None:
    """Record the first-run branch choice for this working directory."""
    store.repo_settings[_repo_key(repo_path)] = RepoSettings(initialized=True, preferred_branch=branch)
    logger.info("Recorded branch '%s' for %s", branch, _repo_key(repo_path))
    save_store(store)
