# ABOUTME: App management command handlers (list, info, create, rename, open, destroy)
# ABOUTME: Each handler validates input, calls the API, formats output and syncs git remotes

"""
App commands.

Every handler takes a :class:`CommandContext` plus its own arguments and
runs straight through: validate, call the API, print, then optionally fix
up local git remotes. API failures are not caught here; they propagate to
the CLI boundary and abort the remaining steps. Nothing is rolled back.
"""

from __future__ import annotations

import json
import time
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import BaseModel, Field, field_validator
from tenacity import (
    Retrying,
    retry_if_result,
    stop_after_attempt,
    stop_after_delay,
    wait_fixed,
)

from heroku_apps.exceptions import CommandFailed, UsageError
from heroku_apps.utils.client import ApiError
from heroku_apps.utils.formatting import dyno_hour_lines, format_bytes, format_date, quantify
from heroku_apps.utils.git import git_url
from heroku_apps.utils.safety import confirm_destructive

if TYPE_CHECKING:
    from collections.abc import Callable

    from heroku_apps.commands.context import CommandContext
    from heroku_apps.utils.client import Addon, App, Collaborator, Domain, HerokuClient

logger = structlog.get_logger(__name__)

DEFAULT_REMOTE = "heroku"
DEFAULT_STACK = "aspen-mri-1.8.6"
DEFAULT_CREATE_TIMEOUT = 30
TIMEOUT_MESSAGE = "Timed Out! Check heroku status for known issues."
NO_REMOTES_MESSAGE = "Don't forget to update your Git remotes on any local checkouts."


# =============================================================================
# apps / list
# =============================================================================


def partition_apps(apps: list[App], user: str) -> tuple[list[App], list[App]]:
    """Split apps into (owned by `user`, everything else), keeping API order."""
    mine = [app for app in apps if app.owner_email == user]
    theirs = [app for app in apps if app.owner_email != user]
    return mine, theirs


def list_apps(ctx: CommandContext) -> None:
    """List owned apps, then apps the user collaborates on."""
    user = ctx.user
    apps = ctx.client.get_apps()
    out = ctx.output

    if not apps:
        out.line("You have no apps.")
        return

    mine, theirs = partition_apps(apps, user)
    if mine:
        out.header("My Apps")
        out.array([app.name for app in mine])
    if theirs:
        out.header("Collaborated Apps")
        out.array([(app.name, app.owner_email or "") for app in theirs])


# =============================================================================
# apps:info / info
# =============================================================================


def _label(key: str) -> str:
    """`owner_email` -> `Owner Email`, `git_url` -> `Git URL`."""
    return " ".join("URL" if word == "url" else word.capitalize() for word in key.split("_"))


def _raw_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, dict):
        return json.dumps(value, sort_keys=True)
    if isinstance(value, (list, tuple)):
        return ",".join(str(item) for item in value)
    return str(value)


def raw_info_lines(
    app: App,
    addons: list[str],
    collaborators: list[str],
    domain_name: str | None,
) -> list[str]:
    """
    `key=value` lines for every key of the app detail, sorted by key.

    The fetched add-on and collaborator lists replace the values of the
    `addons` and `collaborators` keys when the detail carries them.
    """
    data = dict(app.attributes)
    if domain_name:
        data["domain_name"] = domain_name

    lines = []
    for key in sorted(data, key=str):
        if key == "addons":
            value = ",".join(addons)
        elif key == "collaborators":
            value = ",".join(collaborators)
        else:
            value = _raw_value(data[key])
        lines.append(f"{key}={value}")
    return lines


def info_fields(app: App, addons: list[str], collaborators: list[str]) -> dict[str, Any]:
    """
    Curated display table for human-readable `info`.

    Built in order: raw fields, formatted values, display labels, then the
    "Database Size" table-count suffix and the dyno-hour lines, both of
    which are keyed by their display label.
    """
    data: dict[str, Any] = {
        "owner_email": app.owner_email,
        "stack": app.stack,
        "addons": addons,
        "collaborators": collaborators,
    }

    if app.create_status and app.create_status != "complete":
        data["create_status"] = app.create_status

    for key in ("cron_finished_at", "cron_next_run"):
        value = getattr(app, key)
        if value:
            data[key] = format_date(value)

    for key in ("database_size", "repo_size", "slug_size"):
        value = getattr(app, key)
        if value is not None:
            data[key] = format_bytes(value)

    data["git_url"] = app.git_url
    data["web_url"] = app.web_url

    if app.stack != "cedar":
        data["dynos"] = app.dynos
        data["workers"] = app.workers

    labelled = {_label(key): value for key, value in data.items()}

    if app.database_tables is not None and "Database Size" in labelled:
        size = labelled["Database Size"].replace("(empty)", "0K")
        labelled["Database Size"] = f"{size} in {quantify('table', app.database_tables)}"

    if isinstance(app.dyno_hours, dict):
        labelled["Dyno Hours"] = dyno_hour_lines(app.dyno_hours)

    return labelled


def app_info(ctx: CommandContext, raw: bool = False) -> None:
    """Show app detail, add-ons, collaborators and the first domain."""
    name = ctx.require_app()
    client = ctx.client

    app = client.get_app(name)
    addons: list[Addon] = client.get_addons(name)
    collaborators: list[Collaborator] = client.get_collaborators(name)
    domains: list[Domain] = client.get_domains(name)

    addon_names = sorted(addon.description for addon in addons)
    collaborator_emails = sorted(
        c.email for c in collaborators if c.email != app.owner_email
    )
    domain_name = domains[0].domain if domains else None

    if raw:
        for line in raw_info_lines(app, addon_names, collaborator_emails, domain_name):
            ctx.output.line(line)
        return

    ctx.output.header(name)
    ctx.output.hash(info_fields(app, addon_names, collaborator_emails))


# =============================================================================
# apps:create / create
# =============================================================================


class CreateAppParams(BaseModel):
    """Validated options for `apps:create`."""

    name: str | None = Field(default=None, description="App name; the platform picks one when empty")
    remote: str = Field(default=DEFAULT_REMOTE, min_length=1, description="Git remote to create")
    stack: str = Field(default=DEFAULT_STACK, min_length=1, description="Stack to create the app on")
    addons: list[str] = Field(default_factory=list, description="Add-ons to install")
    buildpack: str | None = Field(default=None, description="Buildpack URL")
    timeout: int = Field(default=DEFAULT_CREATE_TIMEOUT, ge=0, description="Seconds to wait for creation")

    @field_validator("addons", mode="before")
    @classmethod
    def split_addons(cls, v: Any) -> list[str]:
        """Accept "a, b,c" as well as a list; blanks are dropped."""
        if v is None:
            return []
        if isinstance(v, str):
            v = v.split(",")
        return [str(item).strip() for item in v if str(item).strip()]


def wait_for_create(
    client: HerokuClient,
    name: str,
    timeout: int,
    on_poll: Callable[[], None],
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """
    Poll the create-status endpoint once a second until it reports done.

    `on_poll` runs after every unfinished poll, before the one-second sleep.
    At most `timeout` polls are made and at most `timeout` seconds spent.

    Returns:
        True once creation completed, False on timeout.
    """
    if timeout <= 0:
        return False

    retrying = Retrying(
        retry=retry_if_result(lambda complete: not complete),
        stop=stop_after_attempt(timeout) | stop_after_delay(timeout),
        wait=wait_fixed(1),
        before_sleep=lambda _state: on_poll(),
        retry_error_callback=lambda _state: False,
        sleep=sleep,
    )
    return bool(retrying(client.create_complete, name))


def create_app(
    ctx: CommandContext,
    params: CreateAppParams,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """
    Create an app, wait for it, install add-ons, set the buildpack, add a remote.

    A creation timeout only prints an advisory; the remaining steps still run.
    A failing add-on or buildpack call aborts the command, leaving earlier
    steps in place.
    """
    client = ctx.client
    out = ctx.output

    app = client.post_app(params.name or None, params.stack)
    ctx.audit.log_success("create_app", app.name, {"stack": params.stack})
    out.write(f"Creating {app.name}...")

    completed = True
    if app.create_status == "creating":
        completed = wait_for_create(
            client, app.name, params.timeout, on_poll=lambda: out.write("."), sleep=sleep
        )

    if completed:
        out.line(f" done, stack is {app.stack or params.stack}")
    else:
        logger.warning("App creation timed out", app=app.name, timeout=params.timeout)
        out.line()
        out.line(TIMEOUT_MESSAGE)

    for addon in params.addons:
        try:
            with out.action(f"Adding {addon} to {app.name}"):
                client.post_addon(app.name, addon)
        except ApiError as e:
            ctx.audit.log_error("add_addon", app.name, f"{addon}: {e}")
            raise
        ctx.audit.log_success("add_addon", app.name, {"addon": addon})

    if params.buildpack:
        client.put_config_vars(app.name, {"BUILDPACK_URL": params.buildpack})
        ctx.audit.log_success("set_buildpack", app.name, {"buildpack": params.buildpack})
        out.line(f"BUILDPACK_URL={params.buildpack}")

    remote_url = app.git_url or git_url(ctx.settings.git_host, app.name)
    out.line(f"{app.web_url} | {remote_url}")

    if ctx.git.create_remote(params.remote, remote_url):
        ctx.audit.log_success("git_remote_add", params.remote, {"url": remote_url})
        out.line(f"Git remote {params.remote} added")


# =============================================================================
# apps:rename / rename
# =============================================================================


def rename_app(ctx: CommandContext, new_name: str | None) -> None:
    """Rename the app and repoint every local remote that tracked it."""
    if not new_name:
        raise UsageError("Usage: heroku-apps apps:rename NEWNAME\nMust specify a new name.")

    old_name = ctx.require_app()
    client = ctx.client
    out = ctx.output

    with out.action(f"Renaming {old_name} to {new_name}"):
        client.put_app(old_name, new_name)
    ctx.audit.log_success("rename_app", old_name, {"new_name": new_name})

    app = client.get_app(new_name)
    remote_url = app.git_url or git_url(ctx.settings.git_host, new_name)
    out.line(f"{app.web_url} | {remote_url}")

    remotes = ctx.git.remotes()
    if not remotes:
        out.line(NO_REMOTES_MESSAGE)
        return

    for remote_name, remote_app in remotes.items():
        if remote_app != old_name:
            continue
        ctx.git.remove(remote_name)
        ctx.git.add(remote_name, remote_url)
        ctx.audit.log_success("git_remote_update", remote_name, {"url": remote_url})
        out.line(f"Git remote {remote_name} updated")


# =============================================================================
# apps:open / open
# =============================================================================


def open_app(ctx: CommandContext) -> None:
    """Open the app's web URL in the default browser."""
    name = ctx.require_app()
    app = ctx.client.get_app(name)
    if not app.web_url:
        raise CommandFailed(f"{name} has no web URL.")
    ctx.output.line(f"Opening {app.web_url}")
    ctx.open_url(app.web_url)


# =============================================================================
# apps:destroy / destroy / apps:delete
# =============================================================================


def destroy_app(
    ctx: CommandContext,
    app_arg: str | None = None,
    app_flag: str | None = None,
    confirm: str | None = None,
) -> None:
    """
    Permanently destroy an app and drop the local remotes pointing at it.

    The app comes from the positional argument, then --app, then --confirm.
    A read call runs first so a missing or inaccessible app fails before the
    user is asked to confirm anything.
    """
    target = app_arg or app_flag or confirm
    if not target:
        raise UsageError("Usage: heroku-apps apps:destroy --app APP\nMust specify APP to destroy.")

    client = ctx.client
    out = ctx.output

    client.get_app(target)

    warning = (
        "WARNING: Potentially Destructive Action\n"
        f"This command will destroy {target} (including all add-ons)."
    )
    try:
        confirm_destructive(target, warning, confirm, out)
    except CommandFailed as e:
        ctx.audit.log_aborted("destroy_app", target, e.message)
        raise

    with out.action(f"Destroying {target} (including all add-ons)"):
        client.delete_app(target)
        ctx.audit.log_success("destroy_app", target)
        for remote_name, remote_app in ctx.git.remotes().items():
            if remote_app != target:
                continue
            ctx.git.remove(remote_name)
            ctx.audit.log_success("git_remote_remove", remote_name)
