#!/usr/bin/env python3
"""
inspector - Read repository state from git's textual output.

Nothing here changes the repository except compare_with_upstream(), which
fetches the remote branch when no upstream is configured yet.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from gitqq.config import Identity
from gitqq.executor import run_git

logger = logging.getLogger(__name__)

REMOTE = "origin"

INSECURE_SCHEMES = ("https://", "http://")

_GITHUB_WEB_URL = re.compile(r'^https?://github\.com/([^/]+)/([^/]+?)(?:\.git)?/?$')


@dataclass
class RepoStatus:
    is_repository: bool = False
    has_remote: bool = False
    remote_url: Optional[str] = None
    uses_insecure_transport: bool = False


@dataclass
class BranchComparison:
    ahead_count: int = 0
    behind_count: int = 0
    upstream: Optional[str] = None


def is_insecure_remote(url: Optional[str]) -> bool:
    """Web-transport remotes can't be routed per identity; they need SSH."""
    if not url:
        return False
    return url.strip().lower().startswith(INSECURE_SCHEMES)


def convert_to_ssh_url(url: str) -> Optional[str]:
    """
    https://github.com/owner/repo(.git) -> git@github.com:owner/repo.git

    Returns None for URLs that aren't GitHub web URLs.
    """
    match = _GITHUB_WEB_URL.match(url.strip())
    if not match:
        return None
    owner, repo = match.group(1), match.group(2)
    return f"git@github.com:{owner}/{repo}.git"


def get_remote_url(cwd: Path, identity: Optional[Identity] = None, remote: str = REMOTE) -> Optional[str]:
    result = run_git(["remote", "get-url", remote], identity, cwd)
    if not result.ok:
        return None
    return result.stdout.strip() or None


def inspect_repository(cwd: Path, identity: Optional[Identity] = None) -> RepoStatus:
    """Probe ``cwd``: is it a repository, does it have origin, is origin https?"""
    status = RepoStatus()

    if not run_git(["status"], identity, cwd).ok:
        return status
    status.is_repository = True

    # No origin is a normal state, not an error.
    url = get_remote_url(cwd, identity)
    if url:
        status.has_remote = True
        status.remote_url = url
        status.uses_insecure_transport = is_insecure_remote(url)

    return status


def get_current_branch(cwd: Path, identity: Optional[Identity] = None) -> Optional[str]:
    """Current branch name, or None on detached HEAD / outside a repository."""
    result = run_git(["branch", "--show-current"], identity, cwd)
    if result.ok and result.stdout.strip():
        return result.stdout.strip()

    # Unborn branch in an empty repository.
    result = run_git(["symbolic-ref", "--short", "HEAD"], identity, cwd)
    if result.ok and result.stdout.strip():
        return result.stdout.strip()
    return None


def list_branches(cwd: Path, identity: Optional[Identity] = None) -> List[str]:
    result = run_git(["branch", "--format=%(refname:short)"], identity, cwd)
    if not result.ok:
        return []
    return [line.strip() for line in result.stdout.splitlines() if line.strip()]


def has_uncommitted_changes(cwd: Path, identity: Optional[Identity] = None) -> bool:
    result = run_git(["status", "--porcelain"], identity, cwd)
    return result.ok and bool(result.stdout.strip())


def has_commits(cwd: Path, identity: Optional[Identity] = None) -> bool:
    return run_git(["rev-parse", "--verify", "HEAD"], identity, cwd).ok


def get_upstream(cwd: Path, identity: Optional[Identity] = None, branch: Optional[str] = None) -> Optional[str]:
    """Configured upstream of ``branch`` (e.g. 'origin/main'), or None."""
    ref = f"{branch}@{{upstream}}" if branch else "@{upstream}"
    result = run_git(["rev-parse", "--abbrev-ref", "--symbolic-full-name", ref], identity, cwd)
    if not result.ok:
        return None
    return result.stdout.strip() or None


def remote_branch_exists(cwd: Path, branch: str, identity: Optional[Identity] = None,
                         remote: str = REMOTE) -> bool:
    result = run_git(["ls-remote", "--heads", remote, branch], identity, cwd)
    return result.ok and bool(result.stdout.strip())


def parse_left_right_count(output: str) -> Optional[BranchComparison]:
    """Parse ``rev-list --left-right --count local...upstream`` output ("<ahead>\\t<behind>")."""
    parts = output.split()
    if len(parts) != 2:
        return None
    try:
        return BranchComparison(ahead_count=int(parts[0]), behind_count=int(parts[1]))
    except ValueError:
        return None


def compare_with_upstream(cwd: Path, branch: str, identity: Optional[Identity] = None,
                          remote: str = REMOTE) -> Optional[BranchComparison]:
    """
    Count commits unique to ``branch`` and to its upstream.

    Uses the configured upstream when there is one. Otherwise, if the remote
    has a branch of the same name, fetches it and compares against
    ``<remote>/<branch>``. Returns None when there is nothing to compare
    against (first push of a new branch).
    """
    upstream = get_upstream(cwd, identity, branch)
    if upstream is None:
        if not remote_branch_exists(cwd, branch, identity, remote):
            return None
        fetch = run_git(["fetch", remote, branch], identity, cwd)
        if not fetch.ok:
            logger.info("Fetch of %s/%s failed, comparing against cached ref", remote, branch)
        upstream = f"{remote}/{branch}"

    result = run_git(["rev-list", "--left-right", "--count", f"{branch}...{upstream}"], identity, cwd)
    if not result.ok:
        return None

    comparison = parse_left_right_count(result.stdout)
    if comparison is not None:
        comparison.upstream = upstream
        logger.info("%s vs %s: ahead %d, behind %d", branch, upstream,
                    comparison.ahead_count, comparison.behind_count)
    return comparison
