# ABOUTME: User-facing exception hierarchy for the heroku-apps CLI
# ABOUTME: Every error the CLI boundary renders as a message derives from here

"""
Exception hierarchy.

HerokuAppsError
├── UsageError       missing or invalid arguments, raised before any API call
├── CommandFailed    the command cannot continue (aborted confirmation, etc.)
└── GitError         a git subprocess exited non-zero

API failures are reported by :class:`heroku_apps.utils.client.ApiError`,
which is raised by the HTTP client and handled at the same boundary.
"""

from __future__ import annotations


class HerokuAppsError(Exception):
    """Base class for errors shown to the user without a traceback."""

    exit_code = 1

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint


class UsageError(HerokuAppsError):
    """A required argument is missing or malformed."""

    exit_code = 2


class CommandFailed(HerokuAppsError):
    """The command was refused or aborted."""


class GitError(HerokuAppsError):
    """A git command failed."""

    def __init__(self, args: list[str], returncode: int, stderr: str = "") -> None:
        self.git_args = args
        self.returncode = returncode
        self.stderr = stderr
        message = f"git {' '.join(args)} failed with exit status {returncode}"
        if stderr:
            message += f": {stderr.strip()}"
        super().__init__(message)
