# ABOUTME: Safety utilities for the heroku-apps CLI
# ABOUTME: Implements the typed-name confirmation guard for destructive commands

"""Confirmation pattern for irreversible operations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from heroku_apps.exceptions import CommandFailed

if TYPE_CHECKING:
    from heroku_apps.utils.output import Output

logger = structlog.get_logger(__name__)


@dataclass
class ConfirmationRequired:
    """Prompt shown before a destructive operation on `target`."""

    target: str
    warning: str

    def format_message(self) -> str:
        return "\n".join(
            [
                f" !    {line}" for line in self.warning.splitlines()
            ]
            + [
                "",
                f' !    To proceed, type "{self.target}" or re-run this command '
                f"with --confirm {self.target}",
                "",
            ]
        )


def confirm_destructive(
    target: str,
    warning: str,
    confirm: str | None,
    output: Output,
) -> None:
    """
    Require the user to name `target` before continuing.

    A `--confirm` value short-circuits the prompt, but must match exactly.

    Raises:
        CommandFailed: If the confirmation does not match `target`.
    """
    if confirm is not None:
        if confirm != target:
            logger.info("Confirmation mismatch", target=target, confirm=confirm)
            raise CommandFailed(f"Confirmation {confirm} did not match {target}. Aborted.")
        return

    output.line()
    output.line(ConfirmationRequired(target=target, warning=warning).format_message())
    answer = output.ask("> ").strip()
    if answer != target:
        logger.info("Confirmation declined", target=target)
        raise CommandFailed(f"Confirmation did not match {target}. Aborted.")
