"""Tests for the branch operation planner."""

import pytest

from gitqq.config import RepoSettings
from gitqq.inspector import RepoStatus
from gitqq.planner import PlannerState, plan

READY_SETTINGS = RepoSettings(initialized=True, preferred_branch="main")
SSH_REMOTE = RepoStatus(is_repository=True, has_remote=True, remote_url="git@github.com:u/r.git")
HTTPS_REMOTE = RepoStatus(is_repository=True, has_remote=True, remote_url="https://github.com/u/r.git",
                          uses_insecure_transport=True)


def test_no_repository_comes_first():
    # Even a nonsensical status with remote flags set is NO_REPO first.
    status = RepoStatus(is_repository=False, has_remote=True, uses_insecure_transport=True)
    assert plan(status, RepoSettings()) is PlannerState.NO_REPO


def test_no_remote_before_scheme_and_first_run():
    status = RepoStatus(is_repository=True)
    assert plan(status, RepoSettings()) is PlannerState.NO_REMOTE
    assert plan(status, READY_SETTINGS) is PlannerState.NO_REMOTE


def test_insecure_remote_before_first_run():
    assert plan(HTTPS_REMOTE, RepoSettings()) is PlannerState.INSECURE_REMOTE
    assert plan(HTTPS_REMOTE, READY_SETTINGS) is PlannerState.INSECURE_REMOTE


def test_declined_conversion_moves_on():
    assert plan(HTTPS_REMOTE, RepoSettings(), insecure_declined=True) is PlannerState.FIRST_RUN
    assert plan(HTTPS_REMOTE, READY_SETTINGS, insecure_declined=True) is PlannerState.READY


@pytest.mark.parametrize("settings, expected", [
    (RepoSettings(), PlannerState.FIRST_RUN),
    (RepoSettings(initialized=False, preferred_branch="main"), PlannerState.FIRST_RUN),
    (READY_SETTINGS, PlannerState.READY),
])
def test_first_run_then_ready(settings, expected):
    assert plan(SSH_REMOTE, settings) is expected
