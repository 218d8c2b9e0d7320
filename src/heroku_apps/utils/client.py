# ABOUTME: Heroku platform API client with structured error handling
# ABOUTME: Provides a synchronous interface to the apps API with typed records

"""
Heroku platform API client.

=============================================================================
WHAT IS THIS FILE?
=============================================================================

This module provides the HTTP client for the platform's apps API. It handles:

1. HTTP COMMUNICATION: Making requests to the API endpoints
2. AUTHENTICATION: Basic auth with the API key as the password
3. ERROR HANDLING: Converting HTTP errors into ApiError
4. TYPED RECORDS: Turning JSON bodies into App/Addon/Collaborator/Domain

=============================================================================
API OVERVIEW
=============================================================================

    GET    /apps                         - List apps visible to the user
    GET    /apps/{app}                   - App detail
    POST   /apps?app[name]=&app[stack]=  - Create an app
    PUT    /apps/{app}?app[name]=        - Rename an app
    DELETE /apps/{app}                   - Destroy an app
    PUT    /apps/{app}/status            - 201 once creation has finished
    GET    /apps/{app}/addons            - Installed add-ons
    POST   /apps/{app}/addons/{addon}    - Install an add-on
    GET    /apps/{app}/collaborators     - Collaborators (owner included)
    GET    /apps/{app}/domains           - Custom domains
    PUT    /apps/{app}/config_vars       - Merge config vars (JSON body)

Errors come back as {"error": "message"}; any status >= 400 raises ApiError.

=============================================================================
WHY SYNCHRONOUS?
=============================================================================

Every command issues its calls strictly one after another, so the blocking
httpx.Client is all that is needed. The client is still a context manager
so the connection pool is always closed:

    with HerokuClient(settings) as client:
        app = client.get_app("myapp")

Requests are attempted exactly once; there is no retry layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import httpx
import structlog

if TYPE_CHECKING:
    from heroku_apps.config import CliSettings

logger = structlog.get_logger(__name__)

USER_AGENT = "heroku-apps/0.1.0"


# =============================================================================
# API ERROR CLASS
# =============================================================================


class ApiError(Exception):
    """
    Structured platform API error.

    USAGE:
    ------
    try:
        client.get_app("nonexistent")
    except ApiError as e:
        print(e.code, e.message)  # 404 App not found.

    A transport failure (DNS, refused connection, timeout) is reported with
    code 0 so callers only ever need to catch one exception type.
    """

    def __init__(self, code: int, message: str, details: str | None = None) -> None:
        self.code = code
        self.message = message
        self.details = details
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.code:
            base = f"API error ({self.code}): {self.message}"
        else:
            base = f"API request failed: {self.message}"
        if self.details:
            base += f" - {self.details}"
        return base


# =============================================================================
# RESPONSE RECORDS
# =============================================================================


def _as_list(data: Any) -> list[dict[str, Any]]:
    if not isinstance(data, list):
        return []
    return [item for item in data if isinstance(item, dict)]


@dataclass
class App:
    """
    App representation.

    The curated fields cover everything the commands display. `attributes`
    keeps the complete response mapping because raw output (`info --raw`)
    prints every key the API returned, including ones this class does not
    know about.
    """

    name: str
    owner_email: str | None = None
    stack: str | None = None
    web_url: str | None = None
    git_url: str | None = None
    create_status: str | None = None
    database_size: int | None = None
    repo_size: int | None = None
    slug_size: int | None = None
    database_tables: int | None = None
    dyno_hours: dict[str, float] | None = None
    dynos: int | None = None
    workers: int | None = None
    cron_finished_at: str | None = None
    cron_next_run: str | None = None
    attributes: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> App:
        """
        Create App from an API response body.

        Every field except name is optional; absent keys become None.
        """
        dyno_hours = data.get("dyno_hours")
        return cls(
            name=str(data.get("name") or ""),
            owner_email=data.get("owner_email"),
            stack=data.get("stack"),
            web_url=data.get("web_url"),
            git_url=data.get("git_url"),
            create_status=data.get("create_status"),
            database_size=data.get("database_size"),
            repo_size=data.get("repo_size"),
            slug_size=data.get("slug_size"),
            database_tables=data.get("database_tables"),
            dyno_hours=dyno_hours if isinstance(dyno_hours, dict) else None,
            dynos=data.get("dynos"),
            workers=data.get("workers"),
            cron_finished_at=data.get("cron_finished_at"),
            cron_next_run=data.get("cron_next_run"),
            attributes=dict(data),
        )


@dataclass
class Addon:
    """Installed add-on, identified by its description."""

    description: str

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> Addon:
        return cls(description=str(data.get("description") or data.get("name") or ""))


@dataclass
class Collaborator:
    """App collaborator. The owner is listed by the API as well."""

    email: str

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> Collaborator:
        return cls(email=str(data.get("email") or ""))


@dataclass
class Domain:
    """Custom domain attached to an app."""

    domain: str

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> Domain:
        return cls(domain=str(data.get("domain") or ""))


# =============================================================================
# HEROKU CLIENT
# =============================================================================


class HerokuClient:
    """
    Platform API client.

    LIFECYCLE:
    ----------
    1. Create client: client = HerokuClient(settings)
    2. Enter context: with client: ...
    3. Use client: client.get_apps()
    4. Exit context: HTTP connections closed
    """

    def __init__(self, settings: CliSettings) -> None:
        self._settings = settings
        self._client: httpx.Client | None = None

    def __enter__(self) -> HerokuClient:
        self._client = httpx.Client(
            base_url=self._settings.api_url,
            auth=("", self._settings.api_key.get_secret_value()),
            headers={
                "Accept": "application/json",
                "User-Agent": USER_AGENT,
            },
            timeout=self._settings.request_timeout,
        )
        return self

    def __exit__(self, *args: object) -> None:
        if self._client:
            self._client.close()
            self._client = None

    def _send(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json_data: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """
        Send one request and return the successful response.

        Raises:
            ApiError: On status >= 400 or on a transport failure.
            RuntimeError: If the client is used outside its context manager.
        """
        if not self._client:
            raise RuntimeError("Client not initialized. Use the 'with' context manager.")

        log = logger.bind(method=method, path=path)
        log.debug("API request")

        try:
            response = self._client.request(method, path, params=params, json=json_data)
        except httpx.HTTPError as e:
            log.warning("API transport failure", error=str(e))
            raise ApiError(code=0, message=str(e) or type(e).__name__) from e

        if response.status_code >= 400:
            error_body = response.text
            log.warning("API error", status=response.status_code, body=error_body[:200])

            message = f"HTTP {response.status_code}"
            details = None
            try:
                error_json = response.json()
            except ValueError:
                details = error_body[:200] if error_body else None
            else:
                if isinstance(error_json, dict):
                    message = error_json.get("error") or error_json.get("message") or message
                    details = error_json.get("details")

            raise ApiError(code=response.status_code, message=message, details=details)

        return response

    def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json_data: dict[str, Any] | None = None,
    ) -> Any:
        """Send a request and decode the JSON body (None when empty)."""
        response = self._send(method, path, params=params, json_data=json_data)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            # Some endpoints answer with a bare string such as "ok"
            return response.text

    # =========================================================================
    # APP OPERATIONS
    # =========================================================================

    def get_apps(self) -> list[App]:
        """List every app the current user owns or collaborates on."""
        data = self._request("GET", "/apps")
        return [App.from_api_response(item) for item in _as_list(data)]

    def get_app(self, app: str) -> App:
        """
        Get app detail.

        Raises:
            ApiError: If the app does not exist or is not accessible.
        """
        data = self._request("GET", f"/apps/{app}")
        return App.from_api_response(data if isinstance(data, dict) else {})

    def post_app(self, name: str | None = None, stack: str | None = None) -> App:
        """
        Create an app.

        An empty name lets the platform pick a random one.
        """
        params: dict[str, str] = {}
        if name:
            params["app[name]"] = name
        if stack:
            params["app[stack]"] = stack
        data = self._request("POST", "/apps", params=params or None)
        return App.from_api_response(data if isinstance(data, dict) else {})

    def put_app(self, app: str, name: str) -> App:
        """Rename an app. Returns whatever the API reports back."""
        data = self._request("PUT", f"/apps/{app}", params={"app[name]": name})
        return App.from_api_response(data if isinstance(data, dict) else {"name": name})

    def delete_app(self, app: str) -> None:
        """Destroy an app and all its add-ons. Irreversible."""
        self._request("DELETE", f"/apps/{app}")

    def create_complete(self, app: str) -> bool:
        """Return True once the platform has finished provisioning the app."""
        response = self._send("PUT", f"/apps/{app}/status")
        return response.status_code == 201

    # =========================================================================
    # ADD-ONS, COLLABORATORS, DOMAINS, CONFIG
    # =========================================================================

    def get_addons(self, app: str) -> list[Addon]:
        data = self._request("GET", f"/apps/{app}/addons")
        return [Addon.from_api_response(item) for item in _as_list(data)]

    def post_addon(self, app: str, addon: str) -> dict[str, Any]:
        """Install an add-on such as "heroku-postgresql:dev"."""
        data = self._request("POST", f"/apps/{app}/addons/{addon}")
        return data if isinstance(data, dict) else {}

    def get_collaborators(self, app: str) -> list[Collaborator]:
        data = self._request("GET", f"/apps/{app}/collaborators")
        return [Collaborator.from_api_response(item) for item in _as_list(data)]

    def get_domains(self, app: str) -> list[Domain]:
        data = self._request("GET", f"/apps/{app}/domains")
        return [Domain.from_api_response(item) for item in _as_list(data)]

    def put_config_vars(self, app: str, config_vars: dict[str, str]) -> dict[str, Any]:
        """Merge config vars into the app's environment."""
        data = self._request("PUT", f"/apps/{app}/config_vars", json_data=config_vars)
        return data if isinstance(data, dict) else {}
