# ABOUTME: Configuration management for the heroku-apps CLI
# ABOUTME: Handles environment variables, credentials, and logging settings

"""
Configuration management using pydantic-settings.

=============================================================================
WHAT IS THIS FILE?
=============================================================================

This module handles all configuration for the CLI. It:

1. READS environment variables (like HEROKU_API_KEY, HEROKU_APP)
2. VALIDATES them (API URL gets a scheme, log level must be a real level)
3. PROVIDES typed access to settings for every command handler

=============================================================================
ENVIRONMENT VARIABLE MAPPING
=============================================================================

Platform credentials and defaults (shared with other Heroku tooling):
    HEROKU_API_URL      -> API base URL (default https://api.heroku.com)
    HEROKU_API_KEY      -> API token used as the basic-auth password
    HEROKU_EMAIL        -> Current user identity
    HEROKU_APP          -> App used when --app is not given
    HEROKU_GIT_HOST     -> Host part of app git URLs (default heroku.com)

CLI behaviour (HEROKU_APPS_ prefix):
    HEROKU_APPS_DEFAULT_REMOTE   -> Remote consulted when several apps are mapped
    HEROKU_APPS_REQUEST_TIMEOUT  -> HTTP timeout in seconds (default 30)
    HEROKU_APPS_LOG_LEVEL        -> Log level (default WARNING)
    HEROKU_APPS_JSON_LOGS        -> Emit JSON log lines on stderr
    HEROKU_APPS_AUDIT_LOG        -> Append audit entries to this file
    HEROKU_APPS_ENV_FILE         -> Optional dotenv file read by load_settings()
"""

from __future__ import annotations

import os
from pathlib import Path  # noqa: TC003 - Required at runtime for Pydantic
from typing import Annotated

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CliSettings(BaseSettings):
    """
    Top-level CLI configuration.

    The credential fields read the same HEROKU_* variables other Heroku
    tooling understands (via validation_alias); everything specific to this
    CLI lives under the HEROKU_APPS_ prefix.

    USAGE:
    ------
        settings = load_settings()
        settings.api_url          # "https://api.heroku.com"
        settings.api_key          # SecretStr, prints as "**********"
    """

    model_config = SettingsConfigDict(
        env_prefix="HEROKU_APPS_",
        extra="ignore",
        populate_by_name=True,
        # Lets tests build CliSettings(api_key=...) without the alias names
    )

    # -------------------------------------------------------------------------
    # PLATFORM CREDENTIALS
    # -------------------------------------------------------------------------

    api_url: str = Field(
        default="https://api.heroku.com",
        validation_alias="HEROKU_API_URL",
        description="Platform API base URL",
    )

    api_key: SecretStr = Field(
        default=SecretStr(""),
        validation_alias="HEROKU_API_KEY",
        description="Platform API token",
    )
    # Sent as the basic-auth password with an empty user name.
    # SecretStr keeps it out of reprs and log lines.

    email: str = Field(
        default="",
        validation_alias="HEROKU_EMAIL",
        description="Email address of the current user",
    )
    # Used by `apps` to split owned apps from collaborated ones.

    app: str | None = Field(
        default=None,
        validation_alias="HEROKU_APP",
        description="Default app when --app is not given",
    )

    git_host: str = Field(
        default="heroku.com",
        validation_alias="HEROKU_GIT_HOST",
        description="Host of app git URLs, e.g. git@heroku.com:myapp.git",
    )

    # -------------------------------------------------------------------------
    # CLI BEHAVIOUR
    # -------------------------------------------------------------------------

    default_remote: str = Field(
        default="heroku",
        description="Git remote consulted when several remotes point at apps",
    )

    request_timeout: float = Field(
        default=30.0,
        gt=0,
        description="HTTP request timeout in seconds",
    )

    log_level: Annotated[str, Field(pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")] = Field(
        default="WARNING",
        description="Logging level",
    )
    # WARNING by default: a CLI should only talk on stderr when something is off.

    json_logs: bool = Field(
        default=False,
        description="Render log events as JSON lines",
    )

    audit_log: Path | None = Field(
        default=None,
        description="Path to a JSON-lines audit file for mutating commands",
    )

    # -------------------------------------------------------------------------
    # VALIDATORS
    # -------------------------------------------------------------------------

    @field_validator("api_url")
    @classmethod
    def validate_api_url(cls, v: str) -> str:
        """Default to https and drop trailing slashes so paths join cleanly."""
        if not v.startswith(("http://", "https://")):
            v = f"https://{v}"
        return v.rstrip("/")

    @field_validator("log_level", mode="before")
    @classmethod
    def upcase_log_level(cls, v: object) -> object:
        """Accept lower-case level names from the environment."""
        return v.upper() if isinstance(v, str) else v


def load_settings() -> CliSettings:
    """
    Load settings from the environment with validation.

    If HEROKU_APPS_ENV_FILE is set, additional variables are read from that
    dotenv file first.

    Raises:
        pydantic.ValidationError: If configuration is invalid.
    """
    return CliSettings(
        _env_file=os.environ.get("HEROKU_APPS_ENV_FILE"),
    )
