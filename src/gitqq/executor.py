#!/usr/bin/env python3
"""
executor - Run git with an identity-scoped SSH environment.

Every git invocation in gitqq goes through run_git(). When an identity with
a key is given, GIT_SSH_COMMAND pins ssh to that key with IdentitiesOnly so
the agent cannot offer a different account's key to GitHub.

Failures come back as a CommandResult; classify_failure() is the one place
that maps git's error text to the handful of conditions gitqq reacts to.
"""

import logging
import os
import shlex
import subprocess
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Union

from gitqq.config import Identity
from gitqq.errors import CommandFailed, GitqqError
from gitqq.keys import key_path

logger = logging.getLogger(__name__)


class KnownFailure(Enum):
    NO_UPSTREAM = "no_upstream"
    ALREADY_EXISTS = "already_exists"
    STALE_LEASE = "stale_lease"
    REJECTED = "rejected"


# Checked in order; the first substring found wins. Matched byte-for-byte.
KNOWN_FAILURE_PATTERNS = [
    ("no upstream branch", KnownFailure.NO_UPSTREAM),
    ("already exists", KnownFailure.ALREADY_EXISTS),
    ("stale info", KnownFailure.STALE_LEASE),
    ("[rejected]", KnownFailure.REJECTED),
    ("non-fast-forward", KnownFailure.REJECTED),
]


@dataclass
class CommandResult:
    command: str
    exit_code: int
    stdout: str = ""
    stderr: str = ""
    known_failure: Optional[KnownFailure] = None

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    @property
    def output(self) -> str:
        return (self.stdout + self.stderr).strip()


def classify_failure(text: str) -> Optional[KnownFailure]:
    """Map git error output to a KnownFailure, or None if nothing matches."""
    for pattern, failure in KNOWN_FAILURE_PATTERNS:
        if pattern in text:
            return failure
    return None


def ssh_command_for(identity: Optional[Identity]) -> Optional[str]:
    if identity is None or not identity.key_reference:
        return None
    return f'ssh -i {shlex.quote(str(key_path(identity.key_reference)))} -o IdentitiesOnly=yes'


def build_env(identity: Optional[Identity] = None) -> Dict[str, str]:
    """Environment for a git subprocess run on behalf of ``identity``."""
    env = os.environ.copy()
    env["GIT_TERMINAL_PROMPT"] = "0"
    ssh_command = ssh_command_for(identity)
    if ssh_command:
        env["GIT_SSH_COMMAND"] = ssh_command
    return env


def run_git(args: List[str], identity: Optional[Identity] = None, cwd: Optional[Path] = None,
            check: bool = False) -> CommandResult:
    """
    Run ``git <args>`` and wait for it to exit.

    Args:
        args: git arguments, without the leading "git"
        identity: identity whose SSH key git should use (None = user's default ssh)
        cwd: working directory
        check: raise CommandFailed on non-zero exit instead of returning

    Returns:
        CommandResult with captured output and, on failure, the classified
        known failure (if any)
    """
    command = "git " + " ".join(shlex.quote(a) for a in args)
    logger.info("Running: %s (cwd=%s)", command, cwd or os.getcwd())

    try:
        proc = subprocess.run(
            ["git"] + list(args),
            cwd=cwd,
            env=build_env(identity),
            capture_output=True,
            text=True,
            check=False,
            encoding='utf-8',
            errors='replace'
        )
    except OSError as e:
        logger.error("Could not start git: %s", e)
        raise GitqqError(f"Git command failed: {command}\n{e}")

    result = CommandResult(
        command=command,
        exit_code=proc.returncode,
        stdout=proc.stdout or "",
        stderr=proc.stderr or "",
    )
    if not result.ok:
        result.known_failure = classify_failure(result.stdout + result.stderr)
        logger.info("Exit %d from %s (known failure: %s)", result.exit_code, command,
                    result.known_failure.value if result.known_failure else None)
        if check:
            raise CommandFailed(result)

    return result


def split_command(command: Union[str, List[str]]) -> List[str]:
    """Turn 'git log --oneline' / 'log --oneline' / [...] into git args."""
    if isinstance(command, str):
        args = shlex.split(command)
    else:
        args = list(command)
    if args and args[0] == "git":
        args = args[1:]
    return args


def run_command(command: Union[str, List[str]], identity: Optional[Identity] = None,
                cwd: Optional[Path] = None, check: bool = False) -> CommandResult:
    """Run a user-typed git command string (the leading 'git' is optional)."""
    args = split_command(command)
    if not args:
        raise GitqqError("Command is required")
    return run_git(args, identity=identity, cwd=cwd, check=check)
