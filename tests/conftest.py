# ABOUTME: Pytest fixtures and configuration for heroku-apps tests
# ABOUTME: Provides settings, a mocked API client, an in-memory git and a captured output

import io
from unittest.mock import MagicMock

import pytest
import structlog
from pydantic import SecretStr
from rich.console import Console

from heroku_apps.commands.context import CommandContext
from heroku_apps.config import CliSettings
from heroku_apps.utils.client import HerokuClient
from heroku_apps.utils.git import git_url
from heroku_apps.utils.logging import AuditLogger
from heroku_apps.utils.output import Output

HEROKU_ENV_VARS = (
    "HEROKU_API_URL",
    "HEROKU_API_KEY",
    "HEROKU_EMAIL",
    "HEROKU_APP",
    "HEROKU_GIT_HOST",
    "HEROKU_APPS_DEFAULT_REMOTE",
    "HEROKU_APPS_REQUEST_TIMEOUT",
    "HEROKU_APPS_LOG_LEVEL",
    "HEROKU_APPS_JSON_LOGS",
    "HEROKU_APPS_AUDIT_LOG",
    "HEROKU_APPS_ENV_FILE",
)


class FakeGit:
    """In-memory stand-in for GitRemotes; records every mutation."""

    def __init__(
        self,
        remotes: dict[str, str] | None = None,
        repository: bool = True,
        host: str = "heroku.com",
    ):
        self.host = host
        self.repository = repository
        # remote name -> url
        self.urls = {name: git_url(host, app) for name, app in (remotes or {}).items()}
        self.calls: list[tuple[str, ...]] = []

    def is_repository(self) -> bool:
        return self.repository

    def names(self) -> list[str]:
        return list(self.urls)

    def remotes(self) -> dict[str, str]:
        prefix, suffix = f"git@{self.host}:", ".git"
        return {
            name: url[len(prefix) : -len(suffix)]
            for name, url in self.urls.items()
            if url.startswith(prefix) and url.endswith(suffix)
        }

    def add(self, name: str, url: str) -> None:
        self.calls.append(("add", name, url))
        self.urls[name] = url

    def remove(self, name: str) -> None:
        self.calls.append(("remove", name))
        del self.urls[name]

    def create_remote(self, name: str, url: str) -> bool:
        if not self.repository or name in self.urls:
            return False
        self.add(name, url)
        return True


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's own HEROKU_* variables out of every test."""
    for name in HEROKU_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo configure_logging() after each test."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def settings() -> CliSettings:
    """Create settings for a logged-in user."""
    return CliSettings(
        api_url="https://api.heroku.com",
        api_key=SecretStr("test-key"),
        email="me@example.com",
    )


@pytest.fixture
def mock_client() -> MagicMock:
    """Create a mock API client; tests set return values per call."""
    return MagicMock(spec=HerokuClient)


@pytest.fixture
def fake_git() -> FakeGit:
    """Git checkout with no remotes."""
    return FakeGit()


@pytest.fixture
def console_buffer() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def answers() -> list[str]:
    """Queue of replies for prompts; tests append before running a command."""
    return []


@pytest.fixture
def output(console_buffer: io.StringIO, answers: list[str]) -> Output:
    """Output writing plain text into console_buffer."""
    console = Console(
        file=console_buffer,
        width=200,
        color_system=None,
        force_terminal=False,
        highlight=False,
        emoji=False,
        soft_wrap=True,
    )
    return Output(console=console, ask=lambda _prompt: answers.pop(0))


@pytest.fixture
def audit(tmp_path) -> AuditLogger:
    return AuditLogger(tmp_path / "audit.jsonl")


@pytest.fixture
def opened_urls() -> list[str]:
    return []


@pytest.fixture
def command_context(
    settings: CliSettings,
    mock_client: MagicMock,
    fake_git: FakeGit,
    output: Output,
    audit: AuditLogger,
    opened_urls: list[str],
) -> CommandContext:
    """Context wired to the mock client, fake git and captured output."""
    return CommandContext(
        settings=settings,
        client=mock_client,
        git=fake_git,
        output=output,
        audit=audit,
        open_url=opened_urls.append,
    )


@pytest.fixture
def make_git() -> type[FakeGit]:
    """Factory for git checkouts with preset remotes, e.g. make_git({"heroku": "myapp"})."""
    return FakeGit
