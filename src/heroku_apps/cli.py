# ABOUTME: Typer application, static command table and main entry point
# ABOUTME: Builds the per-invocation context and renders every error as a user-facing message

"""heroku-apps command line interface."""

import sys
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated, NoReturn, Optional

import structlog
import typer
from pydantic import ValidationError
from rich.console import Console

from heroku_apps import __version__
from heroku_apps.commands.apps import (
    DEFAULT_CREATE_TIMEOUT,
    DEFAULT_REMOTE,
    DEFAULT_STACK,
    CreateAppParams,
    app_info,
    create_app,
    destroy_app,
    list_apps,
    open_app,
    rename_app,
)
from heroku_apps.commands.context import CommandContext
from heroku_apps.config import load_settings
from heroku_apps.exceptions import HerokuAppsError, UsageError
from heroku_apps.utils.client import ApiError, HerokuClient
from heroku_apps.utils.git import GitRemotes
from heroku_apps.utils.logging import AuditLogger, configure_logging, set_invocation_id
from heroku_apps.utils.output import Output

logger = structlog.get_logger(__name__)

EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130

app = typer.Typer(
    name="heroku-apps",
    help="Manage Heroku apps: list, info, create, rename, open, destroy.",
    add_completion=False,
    no_args_is_help=True,
)


def _fail(message: str, hint: Optional[str] = None, code: int = EXIT_FAILURE) -> NoReturn:
    err = Console(stderr=True, highlight=False, soft_wrap=True)
    for line in message.splitlines() or [""]:
        err.print(f" !    {line}", markup=False, emoji=False)
    if hint:
        err.print(f" !    {hint}", markup=False, emoji=False)
    raise typer.Exit(code)


@contextmanager
def command_session(typer_ctx: typer.Context, app_flag: Optional[str] = None) -> Iterator[CommandContext]:
    """Load settings, configure logging and open the API client for one command."""
    settings = load_settings()
    verbose = bool(typer_ctx.obj and typer_ctx.obj.get("verbose"))
    configure_logging(level="DEBUG" if verbose else settings.log_level, json_output=settings.json_logs)
    set_invocation_id("")
    logger.debug("Running command", command=typer_ctx.info_name, api_url=settings.api_url)

    with HerokuClient(settings) as client:
        yield CommandContext(
            settings=settings,
            client=client,
            git=GitRemotes(Path.cwd(), host=settings.git_host),
            output=Output(),
            audit=AuditLogger(settings.audit_log),
            app_flag=app_flag,
        )


def run_command(
    typer_ctx: typer.Context,
    handler: Callable[[CommandContext], None],
    app_flag: Optional[str] = None,
) -> None:
    """Run `handler` inside a session; this is the error boundary for every command."""
    try:
        with command_session(typer_ctx, app_flag) as session:
            handler(session)
    except HerokuAppsError as e:
        logger.debug("Command failed", error=e.message)
        _fail(e.message, e.hint, e.exit_code)
    except ApiError as e:
        logger.debug("API call failed", code=e.code, error=e.message)
        _fail(str(e))
    except ValidationError as e:
        _fail(f"Invalid configuration: {e.error_count()} error(s)\n{e}")
    except KeyboardInterrupt:
        _fail("Aborted by user.", code=EXIT_INTERRUPTED)


# =============================================================================
# COMMAND WRAPPERS
# =============================================================================

AppOption = Annotated[Optional[str], typer.Option("--app", "-a", help="App to run command against.")]


def cmd_list(ctx: typer.Context) -> None:
    """List your apps."""
    run_command(ctx, list_apps)


def cmd_info(
    ctx: typer.Context,
    app_name: AppOption = None,
    raw: Annotated[bool, typer.Option("--raw", "-r", help="Output info as raw key/value pairs.")] = False,
) -> None:
    """Show detailed app information."""
    run_command(ctx, lambda session: app_info(session, raw=raw), app_flag=app_name)


def cmd_create(
    ctx: typer.Context,
    name: Annotated[Optional[str], typer.Argument(help="App name; a random one is used when omitted.")] = None,
    addons: Annotated[Optional[str], typer.Option("--addons", help="Comma-delimited list of addons to install.")] = None,
    buildpack: Annotated[Optional[str], typer.Option("--buildpack", "-b", help="Buildpack URL to use for this app.")] = None,
    remote: Annotated[str, typer.Option("--remote", "-r", help="The git remote to create.")] = DEFAULT_REMOTE,
    stack: Annotated[str, typer.Option("--stack", "-s", help="The stack on which to create the app.")] = DEFAULT_STACK,
    timeout: Annotated[int, typer.Option("--timeout", help="Seconds to wait for the app to finish creating.")] = DEFAULT_CREATE_TIMEOUT,
) -> None:
    """Create a new app."""
    try:
        params = CreateAppParams(
            name=name,
            addons=addons,
            buildpack=buildpack,
            remote=remote,
            stack=stack,
            timeout=timeout,
        )
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"])
        _fail(f"Invalid --{field}: {first['msg']}", code=UsageError.exit_code)
    run_command(ctx, lambda session: create_app(session, params))


def cmd_rename(
    ctx: typer.Context,
    new_name: Annotated[Optional[str], typer.Argument(metavar="NEWNAME", help="New name for the app.")] = None,
    app_name: AppOption = None,
) -> None:
    """Rename the app."""
    run_command(ctx, lambda session: rename_app(session, new_name), app_flag=app_name)


def cmd_open(ctx: typer.Context, app_name: AppOption = None) -> None:
    """Open the app in a web browser."""
    run_command(ctx, open_app, app_flag=app_name)


def cmd_destroy(
    ctx: typer.Context,
    target: Annotated[Optional[str], typer.Argument(metavar="APP", help="App to destroy.")] = None,
    app_name: AppOption = None,
    confirm: Annotated[Optional[str], typer.Option("--confirm", help="Skip the prompt by naming the app.")] = None,
) -> None:
    """Permanently destroy an app."""
    run_command(
        ctx,
        lambda session: destroy_app(session, app_arg=target, app_flag=app_name, confirm=confirm),
    )


# =============================================================================
# COMMAND TABLE
# =============================================================================

# Every name the CLI answers to, aliases included. Built once at import.
COMMANDS: dict[str, Callable[..., None]] = {
    "apps": cmd_list,
    "list": cmd_list,
    "apps:info": cmd_info,
    "info": cmd_info,
    "apps:create": cmd_create,
    "create": cmd_create,
    "apps:rename": cmd_rename,
    "rename": cmd_rename,
    "apps:open": cmd_open,
    "open": cmd_open,
    "apps:destroy": cmd_destroy,
    "destroy": cmd_destroy,
    "apps:delete": cmd_destroy,
}

# Names shown in --help; the rest are hidden aliases
PRIMARY_COMMANDS = frozenset(
    {"apps", "apps:info", "apps:create", "apps:rename", "apps:open", "apps:destroy"}
)

for _name, _func in COMMANDS.items():
    app.command(_name, hidden=_name not in PRIMARY_COMMANDS)(_func)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"heroku-apps {__version__}")
        raise typer.Exit()


@app.callback()
def root(
    ctx: typer.Context,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log API and git calls to stderr.")] = False,
    version: Annotated[
        Optional[bool],
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show the version and exit."),
    ] = None,
) -> None:
    """Manage Heroku apps."""
    ctx.obj = {"verbose": verbose}


def main() -> None:
    """Console-script entry point."""
    try:
        app(prog_name="heroku-apps")
    except KeyboardInterrupt:
        sys.exit(EXIT_INTERRUPTED)


if __name__ == "__main__":
    main()
