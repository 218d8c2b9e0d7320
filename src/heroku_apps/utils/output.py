# ABOUTME: Terminal output helpers for the heroku-apps CLI
# ABOUTME: Styled headers, aligned lists, key/value tables and labelled actions

"""Plain-text rendering on top of a rich Console."""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.prompt import Prompt

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Mapping, Sequence


class _ReplyPrompt(Prompt):
    """Prompt that prints the caller's prompt text as is."""

    prompt_suffix = ""


class Output:
    """
    Command output sink.

    Markup and highlighting are off: app names and URLs are printed exactly
    as the API returned them, and `info --raw` output stays parseable.
    """

    def __init__(
        self,
        console: Console | None = None,
        ask: Callable[[str], str] | None = None,
    ) -> None:
        self.console = console or Console(highlight=False, emoji=False, soft_wrap=True)
        self._ask = ask

    def write(self, text: str = "") -> None:
        """Print without a trailing newline."""
        self.console.print(text, end="", markup=False, highlight=False, emoji=False, soft_wrap=True)

    def line(self, text: str = "") -> None:
        self.console.print(text, markup=False, highlight=False, emoji=False, soft_wrap=True)

    def header(self, title: str) -> None:
        self.line(f"=== {title}")

    def array(self, rows: Sequence[Any]) -> None:
        """
        Print one element per line, in the given order, then a blank line.

        Tuple rows are aligned into columns separated by two spaces.
        """
        if rows and isinstance(rows[0], (tuple, list)):
            widths = [
                max(len(str(row[i])) for row in rows) for i in range(len(rows[0]))
            ]
            for row in rows:
                cells = [str(cell).ljust(width) for cell, width in zip(row, widths)]
                self.line("  ".join(cells).rstrip())
        else:
            for element in rows:
                self.line(str(element))
        self.line()

    def hash(self, data: Mapping[str, Any]) -> None:
        """
        Print a key/value table sorted by key.

        Lists print one element per line with continuation lines indented
        under the first value; empty lists and None values are skipped.
        """
        if not data:
            return
        width = max(len(str(key)) for key in data) + 2
        for key in sorted(data, key=str):
            value = data[key]
            label = f"{key}: ".ljust(width)
            if value is None:
                continue
            if isinstance(value, (list, tuple)):
                if not value:
                    continue
                self.line(f"{label}{value[0]}")
                for element in value[1:]:
                    self.line(f"{' ' * width}{element}")
            else:
                self.line(f"{label}{value}")

    @contextmanager
    def action(self, message: str) -> Iterator[None]:
        """
        Label a step: prints `message... ` then `done`, or `failed` and re-raises.
        """
        self.write(f"{message}... ")
        try:
            yield
        except BaseException:
            self.line("failed")
            raise
        self.line("done")

    def ask(self, prompt: str) -> str:
        """Read one line of input from the user."""
        if self._ask is not None:
            return self._ask(prompt)
        return _ReplyPrompt.ask(prompt, console=self.console, default="", show_default=False)
