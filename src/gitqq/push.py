#!/usr/bin/env python3
"""
push - Ahead/behind aware push with explicit strategy selection.

Handles:
- ahead:    normal push (or force variants)
- behind:   pull then push, or force
- diverged: fetch then force-with-lease, or other force variants
- even:     normal push, nothing to send
- no upstream yet: push with --set-upstream without asking
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

from gitqq.config import Identity, Store, set_default_branch
from gitqq.errors import CommandFailed
from gitqq.executor import CommandResult, KnownFailure, run_git
from gitqq.inspector import BranchComparison, REMOTE, compare_with_upstream, get_upstream
from gitqq.ui import Colors, choose, fail, info, safe_input, success, warn

logger = logging.getLogger(__name__)


class Classification(Enum):
    AHEAD = "ahead"
    BEHIND = "behind"
    DIVERGED = "diverged"
    EVEN = "even"


class PushStrategy(Enum):
    NORMAL = "normal"
    FORCE_WITH_LEASE = "force-with-lease"
    FORCE_OVERRIDE = "force-override"
    FETCH_THEN_FORCE = "fetch-then-force"
    PULL_THEN_PUSH = "pull-then-push"
    CANCEL = "cancel"

    @property
    def label(self) -> str:
        return STRATEGY_LABELS[self]


STRATEGY_LABELS = {
    PushStrategy.NORMAL: "🚀 Normal push",
    PushStrategy.FORCE_WITH_LEASE: "🛡️  Force push with lease (aborts if the remote moved)",
    PushStrategy.FORCE_OVERRIDE: "💥 Force push (overwrites remote history)",
    PushStrategy.FETCH_THEN_FORCE: "🔄 Fetch, then force push with lease",
    PushStrategy.PULL_THEN_PUSH: "📥 Pull (merge), then push",
    PushStrategy.CANCEL: "❌ Cancel",
}

_OPTIONS = {
    Classification.AHEAD: [
        PushStrategy.NORMAL,
        PushStrategy.FORCE_WITH_LEASE,
        PushStrategy.FORCE_OVERRIDE,
    ],
    Classification.BEHIND: [
        PushStrategy.PULL_THEN_PUSH,
        PushStrategy.FORCE_WITH_LEASE,
        PushStrategy.FORCE_OVERRIDE,
        PushStrategy.CANCEL,
    ],
    Classification.DIVERGED: [
        PushStrategy.FETCH_THEN_FORCE,
        PushStrategy.FORCE_WITH_LEASE,
        PushStrategy.FORCE_OVERRIDE,
        PushStrategy.NORMAL,
        PushStrategy.CANCEL,
    ],
    Classification.EVEN: [
        PushStrategy.NORMAL,
        PushStrategy.CANCEL,
    ],
}


@dataclass
class PushPlan:
    classification: Classification
    recommended: PushStrategy
    message: str
    options: List[PushStrategy] = field(default_factory=list)


def classify(comparison: BranchComparison) -> Classification:
    ahead, behind = comparison.ahead_count, comparison.behind_count
    if ahead > 0 and behind > 0:
        return Classification.DIVERGED
    if ahead > 0:
        return Classification.AHEAD
    if behind > 0:
        return Classification.BEHIND
    return Classification.EVEN


def plan_push(comparison: BranchComparison, branch: str) -> PushPlan:
    """Recommendation and menu for pushing ``branch``. No side effects."""
    classification = classify(comparison)
    upstream = comparison.upstream or f"{REMOTE}/{branch}"
    ahead, behind = comparison.ahead_count, comparison.behind_count

    if classification is Classification.AHEAD:
        message = (f"'{branch}' is {ahead} commit(s) ahead of {upstream}. "
                   f"Recommended: normal push.")
    elif classification is Classification.BEHIND:
        message = (f"'{branch}' is {behind} commit(s) behind {upstream}. "
                   f"Recommended: pull then push (force only to discard the remote commits).")
    elif classification is Classification.DIVERGED:
        message = (f"'{branch}' has diverged from {upstream}: {ahead} ahead, {behind} behind. "
                   f"Recommended: fetch then force push with lease.")
    else:
        message = f"'{branch}' is up to date with {upstream}. A normal push is safe."

    options = list(_OPTIONS[classification])
    return PushPlan(
        classification=classification,
        recommended=options[0],
        message=message,
        options=options,
    )


def _push(args: List[str], identity: Optional[Identity], cwd: Path) -> CommandResult:
    return run_git(["push"] + args, identity, cwd, check=True)


def push_normal(branch: str, identity: Optional[Identity], cwd: Path,
                set_upstream: bool = False, remote: str = REMOTE) -> CommandResult:
    """
    Plain push of the checked-out ``branch``.

    Without ``set_upstream`` this is a bare ``git push`` to the configured
    upstream; git's "no upstream branch" failure is retried once with
    ``--set-upstream <remote> <branch>``.
    """
    args = ["--set-upstream", remote, branch] if set_upstream else []
    result = run_git(["push"] + args, identity, cwd)
    if result.known_failure is KnownFailure.NO_UPSTREAM and not set_upstream:
        logger.info("No upstream for %s, retrying with --set-upstream", branch)
        warn("Setting upstream branch...")
        result = run_git(["push", "--set-upstream", remote, branch], identity, cwd)
    if not result.ok:
        raise CommandFailed(result)
    return result


def execute_strategy(strategy: PushStrategy, branch: str, identity: Optional[Identity], cwd: Path,
                     set_upstream: bool = False, remote: str = REMOTE) -> List[CommandResult]:
    """
    Run the command sequence for ``strategy``.

    Returns the results of every command run, in order. Stops at the first
    failure by raising CommandFailed; earlier steps (a completed pull, say)
    are not undone.
    """
    logger.info("Executing push strategy %s for %s", strategy.value, branch)
    upstream_flag = ["--set-upstream"] if set_upstream else []
    results: List[CommandResult] = []

    if strategy is PushStrategy.CANCEL:
        return results

    if strategy is PushStrategy.NORMAL:
        results.append(push_normal(branch, identity, cwd, set_upstream, remote))

    elif strategy is PushStrategy.FORCE_WITH_LEASE:
        results.append(_push(["--force-with-lease"] + upstream_flag + [remote, branch], identity, cwd))

    elif strategy is PushStrategy.FORCE_OVERRIDE:
        results.append(_push(["--force"] + upstream_flag + [remote, branch], identity, cwd))

    elif strategy is PushStrategy.FETCH_THEN_FORCE:
        results.append(run_git(["fetch", remote], identity, cwd, check=True))
        results.append(_push(["--force-with-lease"] + upstream_flag + [remote, branch], identity, cwd))

    elif strategy is PushStrategy.PULL_THEN_PUSH:
        results.append(run_git(["pull", "--no-rebase", "--no-edit", remote, branch], identity, cwd, check=True))
        results.append(push_normal(branch, identity, cwd, set_upstream, remote))

    return results


def _print_results(results: List[CommandResult]):
    for result in results:
        if result.stdout.strip():
            print(result.stdout.rstrip())
        if result.stderr.strip():
            print(f"{Colors.YELLOW}{result.stderr.rstrip()}{Colors.RESET}")


def _explain_failure(error: CommandFailed):
    result = error.result
    fail(f"Push failed: {result.output or result.command}")
    if result.known_failure is KnownFailure.STALE_LEASE:
        print(f"💡 The remote moved since it was last fetched. "
              f"Fetch, review, then choose a strategy again.")
    elif result.known_failure is KnownFailure.REJECTED:
        print(f"💡 The remote has commits you don't have. "
              f"Use 'pull then push' or 'fetch then force' instead.")


def handle_push(store: Store, identity: Optional[Identity], cwd: Path,
                strategy: Optional[PushStrategy] = None) -> bool:
    """
    Interactive push of the current branch.

    Offers to commit pending changes first, compares with the upstream,
    shows the recommendation and runs the picked strategy. ``strategy``
    skips the menu. Returns True when something was pushed.
    """
    from gitqq import branch as branch_ops
    from gitqq import commit as commit_ops
    from gitqq.inspector import get_current_branch, has_uncommitted_changes

    if has_uncommitted_changes(cwd, identity):
        warn("You have uncommitted changes.")
        should_commit = choose("Commit changes before pushing?", [
            ("✅ Yes, commit first", True),
            ("❌ No, push without committing", False),
        ], default=1)
        if should_commit and not commit_ops.prompt_and_commit(cwd, identity):
            return False

    current = get_current_branch(cwd, identity) or store.default_branch
    branch_ops.ensure_branch_exists(current, identity, cwd)

    try:
        comparison = compare_with_upstream(cwd, current, identity)
        set_upstream = get_upstream(cwd, identity, current) is None

        if comparison is None:
            # First push of this branch: nothing to compare, nothing to ask.
            if strategy is PushStrategy.CANCEL:
                print("Push cancelled.")
                return False
            if strategy not in (None, PushStrategy.NORMAL):
                logger.info("Strategy %s ignored for first push of %s", strategy.value, current)
                warn(f"'{strategy.value}' does not apply: {REMOTE}/{current} does not exist yet.")
            info(f"No upstream for '{current}' yet, pushing with --set-upstream to {REMOTE}/{current}")
            results = execute_strategy(PushStrategy.NORMAL, current, identity, cwd, set_upstream=True)
        else:
            push_plan = plan_push(comparison, current)
            print(f"\n{Colors.BOLD}📍 {push_plan.message}{Colors.RESET}")

            if strategy is None:
                strategy = choose(f"Push to {REMOTE}/{current}:", [
                    (s.label + (" (recommended)" if s is push_plan.recommended else ""), s)
                    for s in push_plan.options
                ], default=1)

            if strategy is PushStrategy.CANCEL:
                print("Push cancelled.")
                return False

            if strategy is PushStrategy.FORCE_OVERRIDE:
                answer = safe_input(f"\n{Colors.RED}⚠️  This overwrites {REMOTE}/{current}. "
                                    f"Type 'yes' to continue:{Colors.RESET} ").strip().lower()
                if answer != 'yes':
                    print("Push cancelled.")
                    return False

            info(f"Pushing to {REMOTE}/{current} ({strategy.value})")
            results = execute_strategy(strategy, current, identity, cwd, set_upstream=set_upstream)

    except CommandFailed as e:
        logger.error("Push of %s failed: %s", current, e)
        _explain_failure(e)
        return False

    _print_results(results)
    success("Push completed")
    set_default_branch(store, current)
    return True
