# ABOUTME: Structured logging with invocation IDs for the heroku-apps CLI
# ABOUTME: Implements stderr logging configuration and the audit trail for mutating commands

"""
Structured logging and audit trails.

=============================================================================
WHAT IS THIS FILE?
=============================================================================

1. STRUCTURED LOGGING: structlog events with consistent fields, rendered
   either for humans (ConsoleRenderer) or machines (JSONRenderer).

2. INVOCATION IDs: one short identifier per CLI run, attached to every log
   event so the API calls of a single `heroku-apps destroy` can be picked
   out of a shared log file.

3. AUDIT LOGGING: a record of every mutating action (create, rename,
   destroy, add-on install, git remote edits) and how it ended.

Logs always go to STDERR. STDOUT belongs to command output, and scripts
parse `heroku-apps info --raw` from it.
"""

from __future__ import annotations

import json
import logging
import sys
import uuid
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from collections.abc import MutableMapping
    from pathlib import Path


# =============================================================================
# INVOCATION ID MANAGEMENT
# =============================================================================

invocation_id: ContextVar[str] = ContextVar("invocation_id", default="")


def get_invocation_id() -> str:
    """
    Get the current invocation ID, generating one on first use.

    Returns:
        8-character hex string (first 8 characters of a UUID4).
    """
    iid = invocation_id.get()
    if not iid:
        iid = str(uuid.uuid4())[:8]
        invocation_id.set(iid)
    return iid


def set_invocation_id(iid: str) -> None:
    """Set the invocation ID; an empty string makes the next lookup generate one."""
    invocation_id.set(iid)


def add_invocation_id(
    logger: structlog.types.WrappedLogger,  # noqa: ARG001 - Required by structlog Processor API
    method_name: str,  # noqa: ARG001 - Required by structlog Processor API
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Structlog processor adding the invocation ID to every event."""
    event_dict["invocation_id"] = get_invocation_id()
    return event_dict


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================


def configure_logging(
    level: str = "WARNING",
    json_output: bool = False,
) -> None:
    """
    Configure structured logging on stderr.

    PROCESSOR PIPELINE:
    -------------------
    1. merge_contextvars: values bound via structlog.contextvars
    2. add_log_level: "level" field
    3. TimeStamper: ISO 8601 timestamp
    4. add_invocation_id: our invocation ID
    5. Renderer: JSON or colored console text

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL.
        json_output: Render JSON lines instead of console text.
    """
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_invocation_id,
    ]

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper(), logging.WARNING)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        # Not cached: tests reconfigure logging between runs
        cache_logger_on_first_use=False,
    )


# =============================================================================
# AUDIT LOGGER
# =============================================================================


class AuditLogger:
    """
    Audit logger for mutating actions.

    Every entry records:
    - timestamp: UTC ISO 8601
    - invocation_id: which CLI run did it
    - action: "create_app", "rename_app", "destroy_app", "add_addon", ...
    - target: the app (or remote) acted upon
    - result: "success", "aborted" or "error"
    - details: optional extra context

    With a log path, entries are appended to that file as JSON lines.
    Without one they are emitted as structlog INFO events, which the default
    WARNING level hides.
    """

    def __init__(self, log_path: Path | None = None) -> None:
        self._log_path = log_path
        self._logger = structlog.get_logger("audit")

    def log(
        self,
        action: str,
        target: str,
        result: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Record one auditable action."""
        entry: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "invocation_id": get_invocation_id(),
            "action": action,
            "target": target,
            "result": result,
        }
        if details:
            entry["details"] = details

        if self._log_path:
            with self._log_path.open("a") as f:
                f.write(json.dumps(entry) + "\n")
        else:
            self._logger.info(
                "audit",
                action=action,
                target=target,
                result=result,
                details=details,
            )

    def log_success(
        self,
        action: str,
        target: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.log(action, target, "success", details)

    def log_aborted(self, action: str, target: str, reason: str) -> None:
        """Record an action the user declined or a check refused."""
        self.log(action, target, "aborted", {"reason": reason})

    def log_error(self, action: str, target: str, error: str) -> None:
        self.log(action, target, "error", {"error": error})
