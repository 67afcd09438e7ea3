#!/usr/bin/env python3
"""
commit - Stage and commit under the active identity.
"""

import logging
from pathlib import Path
from typing import List, Optional

from gitqq.config import Identity, Store
from gitqq.errors import CommandFailed
from gitqq.executor import CommandResult, run_git
from gitqq.ui import Colors, ask, choose, fail, info, success

logger = logging.getLogger(__name__)


def _required(value: str) -> Optional[str]:
    return None if value.strip() else "Message is required"


def commit_changes(cwd: Path, identity: Optional[Identity], message: str,
                   add_all: bool = True) -> List[CommandResult]:
    """
    ``git add .`` (optional) then ``git commit -m <message>``.

    Raises:
        CommandFailed: on the first failing step
    """
    results = []
    if add_all:
        results.append(run_git(["add", "."], identity, cwd, check=True))
    results.append(run_git(["commit", "-m", message], identity, cwd, check=True))
    logger.info("Committed in %s: %s", cwd, message.splitlines()[0] if message else "")
    return results


def prompt_and_commit(cwd: Path, identity: Optional[Identity]) -> bool:
    """Ask stage-all / message, commit. Returns True on success."""
    add_all = choose("Stage all modified files?", [
        ("✅ Yes, stage all files", True),
        ("❌ No, only commit staged files", False),
    ], default=1)
    message = ask("Commit message", validate=_required)

    try:
        if add_all:
            info("Staging all files...")
        info("Creating commit...")
        results = commit_changes(cwd, identity, message, add_all)
    except CommandFailed as e:
        logger.error("Commit failed: %s", e)
        fail(f"Commit failed: {e.result.output}")
        return False

    last = results[-1]
    if last.stdout.strip():
        print(last.stdout.rstrip())
    if last.stderr.strip():
        print(f"{Colors.YELLOW}{last.stderr.rstrip()}{Colors.RESET}")
    success("Commit created")
    return True


def handle_commit(store: Store, identity: Optional[Identity], cwd: Path) -> bool:
    """Commit, then offer to push."""
    if not prompt_and_commit(cwd, identity):
        return False

    should_push = choose("Push to remote?", [
        ("✅ Yes, push to remote", True),
        ("❌ No, just commit locally", False),
    ], default=2)
    if should_push:
        from gitqq.push import handle_push
        handle_push(store, identity, cwd)
    return True
