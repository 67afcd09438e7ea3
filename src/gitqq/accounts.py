#!/usr/bin/env python3
"""
accounts - Add, remove and switch GitHub identities.

Handles:
- Key setup: generate a new ed25519 key, paste an existing private key,
  or point at a key file already in ~/.ssh
- Checking the public key is on the GitHub account
- Activation (git author config + SSH routing) on add and on select
"""

import logging
from typing import Optional, Tuple

from gitqq import identity as activator
from gitqq.config import (Identity, Store, add_identity, remove_identity, set_active)
from gitqq.errors import CommandFailed, GitqqError, IdentityExists, KeyMissing
from gitqq.keys import (GITHUB_NEW_KEY_URL, default_key_name, delete_key_files, generate_key,
                        is_key_registered, key_path, read_public_key, require_key, save_pasted_key)
from gitqq.ui import Colors, ask, choose, confirm, fail, header, info, success, warn

logger = logging.getLogger(__name__)

KEY_METHODS = ("generate", "paste", "file")


def _validate_handle(handle: str) -> Optional[str]:
    if not handle.strip():
        return "Username is required"
    if any(c.isspace() or c in "/\\" for c in handle):
        return "Username cannot contain spaces or slashes"
    return None


def _validate_email(email: str) -> Optional[str]:
    return None if "@" in email else "Valid email is required"


def resolve_key(handle: str, email: str, key_method: str, key_name: Optional[str] = None,
                key_content: Optional[str] = None) -> Tuple[str, bool]:
    """
    Produce the key file for a new identity.

    Returns:
        (key_name, owns_generated_key)

    Raises:
        KeyMissing: ``file`` method and the key isn't in the SSH directory
        KeyGenerationFailed: ssh-keygen failed or pasted content was invalid
    """
    if key_method == "generate":
        return generate_key(handle, email), True
    if key_method == "paste":
        return save_pasted_key(handle, key_content or ""), True
    if key_method == "file":
        key_name = key_name or "id_rsa"
        require_key(key_name)
        return key_name, False
    raise ValueError(f"Unknown key method: {key_method}")


def register_account(store: Store, handle: str, new_identity: Identity,
                     activate_identity: bool = True) -> Identity:
    """Store the identity, make it active and apply it."""
    add_identity(store, handle, new_identity)
    set_active(store, handle)
    if activate_identity:
        activator.activate(new_identity)
    return new_identity


def create_account(store: Store, handle: str, email: str, name: Optional[str] = None,
                   key_method: str = "generate", key_name: Optional[str] = None,
                   key_content: Optional[str] = None, activate_identity: bool = True) -> Identity:
    """
    Non-interactive add-account.

    Nothing is written to the store unless the key step succeeds.

    Raises:
        IdentityExists, KeyMissing, KeyGenerationFailed
    """
    if handle in store.identities:
        raise IdentityExists(f"Account '{handle}' already exists")

    resolved_name, owns_key = resolve_key(handle, email, key_method, key_name, key_content)
    new_identity = Identity(
        name=name or handle,
        email=email,
        key_reference=resolved_name,
        owns_generated_key=owns_key,
    )
    return register_account(store, handle, new_identity, activate_identity)


def remove_account(store: Store, handle: str, delete_key: bool = False) -> Identity:
    """Remove ``handle``; optionally delete the key pair gitqq created for it."""
    removed = remove_identity(store, handle)
    if delete_key and removed.owns_generated_key and removed.key_reference:
        delete_key_files(removed.key_reference)
    return removed


def select_account(store: Store, handle: str) -> bool:
    """Make ``handle`` active and apply it. Returns False if activation failed."""
    set_active(store, handle)
    selected = store.identities[handle]
    try:
        activator.activate(selected)
    except CommandFailed as e:
        logger.error("Failed to switch to %s: %s", handle, e)
        fail(f"Failed to switch account: {e.result.output}")
        return False
    success(f"Switched to account: {handle}")
    return True


def show_accounts(store: Store):
    if not store.identities:
        print(f"{Colors.YELLOW}📝 No accounts configured.{Colors.RESET}")
        return
    print(f"\n{Colors.BOLD}Accounts:{Colors.RESET}")
    for handle, ident in store.identities.items():
        marker = f"{Colors.GREEN}✓{Colors.RESET}" if handle == store.active_handle else " "
        key = ident.key_reference or "(no key)"
        print(f"  {marker} {Colors.BRIGHT_CYAN}{handle}{Colors.RESET}  {ident.name} <{ident.email}>  "
              f"{Colors.DIM}key: {key}{Colors.RESET}")


def _show_public_key(handle: str, key_name: str) -> bool:
    """Print the public key, wait for the user to add it to GitHub."""
    public_key = read_public_key(key_name)
    print(f"\n{Colors.YELLOW}🔑 Add this public key to your GitHub account:{Colors.RESET}")
    print(f"{Colors.CYAN}{GITHUB_NEW_KEY_URL}{Colors.RESET}")
    print(public_key or f"(public key not found at {key_path(key_name)}.pub)")

    if not confirm("Have you added the public key to GitHub?", default=False):
        warn("Please add the key to GitHub and try again.")
        return False

    status = is_key_registered(handle, key_name)
    if status == 'registered':
        success(f"Key found on github.com/{handle}")
    elif status == 'missing':
        warn(f"Key not listed on github.com/{handle}.keys yet - pushes may be refused.")
    return True


def add_account_interactive(store: Store) -> Optional[Identity]:
    header("➕ ADD ACCOUNT")

    handle = ask("GitHub username", validate=_validate_handle)
    replace = handle in store.identities
    if replace:
        warn(f"Account '{handle}' already exists.")
        if not confirm("Replace it?", default=False):
            return None

    email = ask("GitHub email", validate=_validate_email)
    name = ask("Full name (optional)", default=handle)

    key_method = choose("How would you like to add SSH key?", [
        ("🆕 Generate new SSH key", "generate"),
        ("📝 Enter SSH key content directly", "paste"),
        ("📁 Use existing SSH key file", "file"),
    ])

    key_name = None
    key_content = None
    reused_owned_key = None
    existing = default_key_name(handle)
    if key_method == "generate" and key_path(existing).exists():
        warn(f"Key file already exists: {key_path(existing)}")
        key_action = choose("What should happen to it?", [
            ("♻️  Reuse the existing key", "reuse"),
            ("🗑️  Delete it and generate a new key", "regenerate"),
            ("❌ Cancel", "cancel"),
        ], default=1)
        if key_action == "cancel":
            return None
        if key_action == "reuse":
            previous = store.identities.get(handle)
            reused_owned_key = bool(previous and previous.owns_generated_key
                                    and previous.key_reference == existing)
            key_method, key_name = "file", existing
        else:
            delete_key_files(existing)

    if key_method == "paste":
        key_content = ask("Paste your SSH private key content",
                          validate=lambda v: None if v.strip() and "BEGIN" in v
                          else "Please enter valid SSH key content")
    elif key_method == "file" and key_name is None:
        key_name = ask("SSH key name (without .pub)", default="id_rsa",
                       validate=lambda v: None if v.strip() else "SSH key name is required")

    try:
        if key_method == "generate":
            info("Generating new SSH key...")
        resolved_name, owns_key = resolve_key(handle, email, key_method, key_name, key_content)
    except KeyMissing as e:
        fail(str(e))
        print(f"{Colors.CYAN}💡 Generate key with: ssh-keygen -t ed25519 -f ~/.ssh/{e.key_name} "
              f"-C \"{email}\"{Colors.RESET}")
        return None
    except GitqqError as e:
        fail(str(e))
        return None

    if key_method == "generate":
        success(f"SSH key generated: {key_path(resolved_name)}")
        if not _show_public_key(handle, resolved_name):
            return None
    elif key_method == "paste":
        success(f"SSH key saved to: {key_path(resolved_name)}")
    if reused_owned_key is not None:
        owns_key = reused_owned_key

    new_identity = Identity(name=name, email=email, key_reference=resolved_name,
                            owns_generated_key=owns_key)
    if replace:
        remove_identity(store, handle)
    try:
        register_account(store, handle, new_identity)
    except CommandFailed as e:
        fail(f"Failed to switch account: {e.result.output}")
        return new_identity

    success(f"Added and activated account: {handle}")
    return new_identity


def remove_account_interactive(store: Store) -> Optional[Identity]:
    if not store.identities:
        print(f"{Colors.YELLOW}📝 No accounts to remove.{Colors.RESET}")
        return None

    handle = choose("Select account to remove:", [(h, h) for h in store.identities])
    if not confirm(f'Are you sure you want to remove account "{handle}"?', default=False):
        return None

    target = store.identities[handle]
    delete_key = False
    if target.owns_generated_key and target.key_reference:
        delete_key = confirm(f"Also delete key files {key_path(target.key_reference)}(.pub)?", default=False)

    removed = remove_account(store, handle, delete_key=delete_key)
    success(f"Removed account: {handle}")
    return removed
