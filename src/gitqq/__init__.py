"""
gitqq - Switch between multiple GitHub identities before running git.

Tools included:
- accounts: Add, remove and activate identities (SSH key + author info)
- repo: Guided init / remote setup / commit / branch operations
- push: Ahead/behind aware push with safe strategy selection
- config: Persistent account store
"""

__version__ = "0.2.0"
__author__ = "gitqq contributors"
__all__ = ["accounts", "cli", "config", "executor", "identity", "inspector",
           "keys", "planner", "push", "repo"]
