#!/usr/bin/env python3
"""
branch - Switch, create and pick the working branch.
"""

import logging
from pathlib import Path
from typing import Optional

from gitqq.config import Identity, Store, mark_repo_initialized, set_default_branch
from gitqq.errors import CommandFailed
from gitqq.executor import run_git
from gitqq.inspector import get_current_branch, list_branches
from gitqq.ui import ask, choose, fail, info, success, warn

logger = logging.getLogger(__name__)

CREATE_NEW = object()


def _branch_name_required(value: str) -> Optional[str]:
    if not value.strip():
        return "Branch name is required"
    if " " in value.strip():
        return "Branch names cannot contain spaces"
    return None


def checkout_branch(name: str, identity: Optional[Identity], cwd: Path, create: bool = False):
    """
    Raises:
        CommandFailed: if git checkout fails
    """
    args = ["checkout", "-b", name] if create else ["checkout", name]
    return run_git(args, identity, cwd, check=True)


def ensure_branch_exists(name: str, identity: Optional[Identity], cwd: Path) -> bool:
    """Check out ``name``, creating it first if it doesn't exist locally."""
    current = get_current_branch(cwd, identity)
    if current == name:
        return True
    try:
        if name not in list_branches(cwd, identity):
            info(f"Creating branch: {name}")
            checkout_branch(name, identity, cwd, create=True)
        else:
            checkout_branch(name, identity, cwd)
        return True
    except CommandFailed as e:
        logger.error("Could not switch to %s: %s", name, e)
        warn(f"Creating new branch: {name}")
        try:
            checkout_branch(name, identity, cwd, create=True)
            return True
        except CommandFailed as create_error:
            fail(f"Failed to create branch: {create_error.result.output}")
            return False


def pick_branch(identity: Optional[Identity], cwd: Path, message: str = "Select or create branch:") -> Optional[str]:
    """
    Let the user pick an existing branch or name a new one, and check it out.

    Returns the branch now checked out, or None if the checkout failed.
    """
    branches = list_branches(cwd, identity)
    current = get_current_branch(cwd, identity)
    if current and current not in branches:
        # Unborn branch of a repository with no commits yet.
        branches.insert(0, current)

    options = [(f"🌿 {b}" + (" (current)" if b == current else ""), b) for b in branches]
    if options:
        options.append((None, None))
    options.append(("🆕 Create New Branch", CREATE_NEW))

    selected = choose(message, options)

    try:
        if selected is CREATE_NEW:
            name = ask("New branch name", validate=_branch_name_required)
            info(f"Creating and switching to branch: {name}")
            checkout_branch(name, identity, cwd, create=True)
            return name

        if selected != current:
            info(f"Switching to branch: {selected}")
            checkout_branch(selected, identity, cwd)
        return selected
    except CommandFailed as e:
        logger.error("Branch operation failed: %s", e)
        fail(f"Branch operation failed: {e.result.output}")
        return None


def handle_change_branch(store: Store, identity: Optional[Identity], cwd: Path) -> Optional[str]:
    branch = pick_branch(identity, cwd)
    if branch:
        set_default_branch(store, branch)
        mark_repo_initialized(store, cwd, branch)
        success("Branch changed successfully")
    return branch


def select_initial_branch(store: Store, identity: Optional[Identity], cwd: Path) -> Optional[str]:
    """First visit to this working directory: choose the branch once and remember it."""
    print(f"\n🌿 First time using gitqq in {cwd}")
    branch = pick_branch(identity, cwd, message="Which branch do you want to work on?")
    if branch:
        mark_repo_initialized(store, cwd, branch)
        set_default_branch(store, branch)
        success(f"Working on '{branch}' (remembered for this folder)")
    return branch
