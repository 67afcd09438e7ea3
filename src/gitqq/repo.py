#!/usr/bin/env python3
"""
repo - Guided repository setup and the git command menu.

Each pass of the menu loop re-inspects the working directory and lets
gitqq.planner decide what needs sorting out first:
  1. No repository      -> offer git init
  2. No origin          -> ask for an SSH remote URL
  3. https origin       -> offer conversion to SSH
  4. First visit here   -> pick the working branch once
  5. Ready              -> push / commit / change branch / custom command
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

from gitqq.config import (Identity, Store, get_active, get_repo_settings, set_default_branch)
from gitqq.errors import CommandFailed, GitqqError
from gitqq.executor import CommandResult, KnownFailure, run_command, run_git, split_command
from gitqq.inspector import REMOTE, convert_to_ssh_url, get_current_branch, get_remote_url, inspect_repository
from gitqq.planner import PlannerState, plan
from gitqq.ui import Colors, ask, choose, fail, info, success, warn

logger = logging.getLogger(__name__)

SSH_URL_PREFIX = "git@github.com:"


def validate_ssh_url(url: str) -> Optional[str]:
    """Error message for a remote URL gitqq can't route per identity, else None."""
    if not url.strip():
        return "URL is required"
    if not url.startswith(SSH_URL_PREFIX):
        return "Please use SSH format: git@github.com:username/repo.git"
    if not url.endswith(".git"):
        return "URL should end with .git"
    return None


def initialize_repository(store: Store, identity: Optional[Identity], cwd: Path) -> bool:
    info("Initializing git repository...")
    try:
        run_git(["init"], identity, cwd, check=True)
    except CommandFailed as e:
        fail(f"Failed to initialize: {e.result.output}")
        return False
    success("Git repository initialized")

    # Renaming the unborn branch fails on old git; keep whatever init chose then.
    if run_git(["branch", "-M", "main"], identity, cwd).ok:
        set_default_branch(store, "main")
    return True


def add_or_update_remote(url: str, identity: Optional[Identity], cwd: Path, remote: str = REMOTE) -> str:
    """
    ``git remote add``, falling back to ``set-url`` when the remote already exists.

    Returns:
        'added' or 'updated'

    Raises:
        CommandFailed: if neither command succeeds
    """
    result = run_git(["remote", "add", remote, url], identity, cwd)
    if result.ok:
        return 'added'
    if result.known_failure is KnownFailure.ALREADY_EXISTS:
        logger.info("Remote %s already exists, updating URL to %s", remote, url)
        run_git(["remote", "set-url", remote, url], identity, cwd, check=True)
        return 'updated'
    raise CommandFailed(result)


def setup_remote_origin(identity: Optional[Identity], cwd: Path) -> bool:
    print(f"{Colors.BLUE}🔗 Setting up remote origin for multiple account support...{Colors.RESET}")
    print(f"{Colors.CYAN}📋 SSH format: git@github.com:username/repo.git{Colors.RESET}")

    url = ask("Enter SSH URL", validate=validate_ssh_url)
    try:
        info("Adding remote origin...")
        outcome = add_or_update_remote(url, identity, cwd)
    except CommandFailed as e:
        fail(f"Failed to add remote: {e.result.output}")
        return False

    success(f"Remote origin {outcome}: {url}")
    return True


def convert_to_ssh_remote(identity: Optional[Identity], cwd: Path) -> Optional[str]:
    """
    Rewrite an https GitHub origin to its SSH form.

    Returns the new URL, or None when origin isn't a GitHub https URL.
    """
    url = get_remote_url(cwd, identity)
    if not url:
        return None
    ssh_url = convert_to_ssh_url(url)
    if ssh_url is None:
        return None
    info("Converting to SSH remote...")
    run_git(["remote", "set-url", REMOTE, ssh_url], identity, cwd, check=True)
    logger.info("Converted %s -> %s", url, ssh_url)
    return ssh_url


def execute_custom_command(identity: Optional[Identity], cwd: Path,
                           command: Union[str, List[str], None] = None) -> Optional[CommandResult]:
    if command is None:
        command = ask('Enter custom git command (e.g., "status", "log --oneline")',
                      validate=lambda v: None if v.strip() else "Command is required")

    if isinstance(command, str):
        shown = command if command.startswith("git ") else f"git {command}"
    else:
        shown = "git " + " ".join(split_command(command))
    info(f"Running: {shown}")
    try:
        result = run_command(command, identity, cwd)
    except (GitqqError, ValueError) as e:
        fail(f"Command failed: {e}")
        return None

    if result.stdout.strip():
        print(result.stdout.rstrip())
    if result.ok:
        if result.stderr.strip():
            print(f"{Colors.YELLOW}{result.stderr.rstrip()}{Colors.RESET}")
        success("Command completed")
    else:
        fail(f"Command failed: {result.stderr.strip() or f'exit code {result.exit_code}'}")
    return result


def _handle_insecure_remote(identity: Optional[Identity], cwd: Path) -> None:
    warn("HTTPS remote detected. For multiple accounts, SSH is recommended.")
    should_convert = choose("Convert to SSH remote?", [
        ("✅ Yes, convert to SSH", True),
        ("❌ No, keep HTTPS", False),
    ], default=1)
    if not should_convert:
        return
    try:
        ssh_url = convert_to_ssh_remote(identity, cwd)
    except CommandFailed as e:
        fail(f"Failed to convert remote: {e.result.output}")
        return
    if ssh_url:
        success(f"Converted to SSH: {ssh_url}")
    else:
        warn("Origin is not a github.com https URL; leaving it unchanged.")


def main_with_repo(store: Store, cwd: Path) -> None:
    """
    Git command menu for the active identity. Returns to the caller on "Back".
    """
    from gitqq import branch as branch_ops
    from gitqq.commit import handle_commit
    from gitqq.push import handle_push

    insecure_declined = False

    while True:
        identity = get_active(store)
        handle = store.active_handle or "(no account)"

        status = inspect_repository(cwd, identity)
        state = plan(status, get_repo_settings(store, cwd), insecure_declined)
        logger.info("Planner state for %s: %s", cwd, state.value)

        if state is PlannerState.NO_REPO:
            should_init = choose("No git repository found. Initialize git in this folder?", [
                ("✅ Yes, initialize git", True),
                ("❌ No, go back", False),
            ])
            if not should_init:
                return
            if initialize_repository(store, identity, cwd):
                setup_remote_origin(identity, cwd)
            continue

        if state is PlannerState.NO_REMOTE:
            warn("No remote origin found.")
            setup_remote_origin(identity, cwd)
            continue

        if state is PlannerState.INSECURE_REMOTE:
            _handle_insecure_remote(identity, cwd)
            # Asked once per session whatever the answer.
            insecure_declined = True
            continue

        if state is PlannerState.FIRST_RUN:
            branch_ops.select_initial_branch(store, identity, cwd)
            continue

        current = get_current_branch(cwd, identity)
        print(f"{Colors.BLUE}🌿 Current branch: {current or store.default_branch}{Colors.RESET}")

        action = choose(f"Using: {handle} - What would you like to do?", [
            ("🚀 Push", "push"),
            ("📝 Commit", "commit"),
            ("🌿 Change Branch", "change-branch"),
            ("💻 Custom Command", "custom-command"),
            ("🔙 Back to Accounts", "back"),
            ("❌ Exit", "exit"),
        ])

        if action == "exit":
            print(f"{Colors.BLUE}👋 Goodbye!{Colors.RESET}")
            raise SystemExit(0)
        if action == "back":
            return

        if action == "push":
            handle_push(store, identity, cwd)
        elif action == "commit":
            handle_commit(store, identity, cwd)
        elif action == "change-branch":
            branch_ops.handle_change_branch(store, identity, cwd)
        elif action == "custom-command":
            execute_custom_command(identity, cwd)
        print()
