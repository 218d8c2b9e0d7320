# ABOUTME: Value formatting helpers for app info output
# ABOUTME: Byte sizes, dates, pluralised counts and dyno-hour lines

"""Human-readable renderings of app detail values."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping

KB = 1024
MB = KB * 1024
GB = MB * 1024

# Formats the API has used for cron timestamps, tried after ISO 8601
_DATE_FORMATS = (
    "%Y/%m/%d %H:%M:%S %z",
    "%Y-%m-%d %H:%M:%S %z",
    "%Y/%m/%d %H:%M:%S",
)


def format_bytes(amount: Any) -> str:
    """
    Render a byte count.

    >>> format_bytes(0)
    '(empty)'
    >>> format_bytes(5_000_000)
    '5M'
    """
    amount = int(amount or 0)
    if amount == 0:
        return "(empty)"
    if amount < KB:
        return str(amount)
    if amount < MB:
        return f"{round(amount / KB)}k"
    if amount < GB:
        return f"{round(amount / MB)}M"
    return f"{round(amount / GB)}G"


def _parse_date(value: str) -> datetime | None:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    return None


def format_date(value: Any) -> str:
    """
    Render a timestamp as `YYYY-MM-DD HH:MM <zone>`.

    Strings that do not parse are returned unchanged.
    """
    if isinstance(value, datetime):
        parsed: datetime | None = value
    else:
        parsed = _parse_date(str(value))
    if parsed is None:
        return str(value)
    return parsed.strftime("%Y-%m-%d %H:%M %Z").rstrip()


def quantify(word: str, count: Any) -> str:
    """`quantify("table", 1)` -> "1 table", anything else gets an "s"."""
    count = int(count)
    return f"{count} {word if count == 1 else word + 's'}"


def dyno_hour_lines(dyno_hours: Mapping[str, Any]) -> list[str]:
    """One `"<Type> - <hours> dyno-hours"` line per dyno type, two decimals."""
    return [
        f"{str(kind).capitalize()} - {float(hours):.2f} dyno-hours"
        for kind, hours in dyno_hours.items()
    ]
