"""
errors - Exception types raised across gitqq.

Repository conditions (not a repo, no remote, https remote) are planner
states, not exceptions; see gitqq.planner.
"""


class GitqqError(Exception):
    """Base class for gitqq errors."""
    pass


class UserCancelled(GitqqError):
    """Raised on Ctrl+C / EOF at any prompt; gives a clean exit back to the menu."""
    pass


class KeyMissing(GitqqError):
    """The SSH key file referenced by an identity does not exist."""

    def __init__(self, key_name: str, key_path):
        self.key_name = key_name
        self.key_path = key_path
        super().__init__(f"SSH key not found: {key_path}")


class KeyGenerationFailed(GitqqError):
    """ssh-keygen failed, the target file already exists, or pasted content was invalid."""
    pass


class IdentityExists(GitqqError):
    """An identity with this handle is already stored."""
    pass


class UnknownIdentity(GitqqError):
    """No identity is stored under this handle."""
    pass


class CommandFailed(GitqqError):
    """A git command exited non-zero. Carries the full CommandResult."""

    def __init__(self, result):
        self.result = result
        message = (result.stderr or result.stdout or "").strip()
        super().__init__(
            f"Command failed ({result.exit_code}): {result.command}"
            + (f"\n{message}" if message else "")
        )
