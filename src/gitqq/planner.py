#!/usr/bin/env python3
"""
planner - Decide what the git command loop must sort out before it can run.

Checks run in a fixed order because each assumes the previous one passed:
there must be a repository before asking about its remote, and a remote
before asking about its scheme.
"""

from enum import Enum

from gitqq.config import RepoSettings
from gitqq.inspector import RepoStatus


class PlannerState(Enum):
    NO_REPO = "no_repo"
    NO_REMOTE = "no_remote"
    INSECURE_REMOTE = "insecure_remote"
    FIRST_RUN = "first_run"
    READY = "ready"


def plan(status: RepoStatus, settings: RepoSettings, insecure_declined: bool = False) -> PlannerState:
    """
    Next state for one loop iteration.

    ``insecure_declined`` is set once the user has said no to converting an
    https remote, so the loop doesn't ask again in the same session.
    """
    if not status.is_repository:
        return PlannerState.NO_REPO
    if not status.has_remote:
        return PlannerState.NO_REMOTE
    if status.uses_insecure_transport and not insecure_declined:
        return PlannerState.INSECURE_REMOTE
    if not settings.initialized:
        return PlannerState.FIRST_RUN
    return PlannerState.READY
