# ABOUTME: Explicit per-invocation context for command handlers
# ABOUTME: Carries the app selection, user identity and collaborators into every handler

"""Command context and app resolution."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import structlog
import typer

from heroku_apps.exceptions import CommandFailed

if TYPE_CHECKING:
    from heroku_apps.config import CliSettings
    from heroku_apps.utils.client import HerokuClient
    from heroku_apps.utils.git import GitRemotes
    from heroku_apps.utils.logging import AuditLogger
    from heroku_apps.utils.output import Output

logger = structlog.get_logger(__name__)


def resolve_app(flag: str | None, settings: CliSettings, git: GitRemotes) -> str:
    """
    Work out which app a command targets.

    Order: --app flag, HEROKU_APP, the only app-mapped git remote, the
    remote named `settings.default_remote`.

    Raises:
        CommandFailed: If nothing resolves.
    """
    if flag:
        return flag
    if settings.app:
        return settings.app

    remotes = git.remotes()
    apps = set(remotes.values())
    if len(apps) == 1:
        return apps.pop()
    if settings.default_remote in remotes:
        return remotes[settings.default_remote]

    logger.debug("App resolution failed", remotes=remotes)
    raise CommandFailed(
        "No app specified.",
        hint="Run this command from an app folder or specify which app to use with --app APP.",
    )


@dataclass
class CommandContext:
    """
    Everything a handler needs, passed explicitly.

    The target app is resolved on first use of :meth:`require_app`, so a
    handler can reject bad arguments before anything touches git or the API.
    """

    settings: CliSettings
    client: HerokuClient
    git: GitRemotes
    output: Output
    audit: AuditLogger
    app_flag: str | None = None
    open_url: Callable[[str], object] = field(default=typer.launch)
    _app: str | None = field(default=None, init=False, repr=False)

    @property
    def user(self) -> str:
        """
        Email of the current user.

        Raises:
            CommandFailed: If no identity is configured.
        """
        if not self.settings.email:
            raise CommandFailed(
                "Unable to determine the current user.",
                hint="Set HEROKU_EMAIL to the email address of your account.",
            )
        return self.settings.email

    def require_app(self) -> str:
        if self._app is None:
            self._app = resolve_app(self.app_flag, self.settings, self.git)
        return self._app
