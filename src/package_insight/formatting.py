"""Human-readable formatting for sizes, durations, dates and small series."""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Sequence

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB", "TB", "PB")

_SECONDS_PER_MONTH = 60 * 60 * 24 * 30


def format_bytes(num_bytes: float, decimals: int = 2) -> str:
    """Format a byte count with binary (1024) units.

    Trailing zeros are dropped, so ``1024`` renders as ``"1 KB"`` and
    ``1536`` as ``"1.5 KB"``. Negative values keep their sign.

    >>> format_bytes(0)
    '0 Bytes'
    >>> format_bytes(1048576)
    '1 MB'
    """
    if num_bytes == 0:
        return "0 Bytes"

    sign = "-" if num_bytes < 0 else ""
    value = abs(num_bytes)
    decimals = max(0, decimals)

    exponent = int(math.floor(math.log(value, 1024))) if value >= 1 else 0
    exponent = min(max(exponent, 0), len(_SIZE_UNITS) - 1)

    # math.log can land a hair below an exact power of 1024
    if exponent + 1 < len(_SIZE_UNITS) and value >= 1024 ** (exponent + 1):
        exponent += 1

    text = f"{value / 1024 ** exponent:.{decimals}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return f"{sign}{text} {_SIZE_UNITS[exponent]}"


def format_duration(ms: float) -> str:
    """Format milliseconds as ``500ms``, ``2.50s`` or ``1m 5.0s``."""
    if ms < 1000:
        return f"{int(round(ms))}ms"

    if ms < 60000:
        return f"{ms / 1000:.2f}s"

    minutes = int(ms // 60000)
    remaining = (ms % 60000) / 1000
    return f"{minutes}m {remaining:.1f}s"


def format_signed(value: float, formatter: Callable[[float], str]) -> str:
    """Format a delta with an explicit sign using ``formatter`` for the magnitude."""
    if value > 0:
        return f"+{formatter(value)}"
    if value < 0:
        return f"-{formatter(-value)}"
    return formatter(0)


def format_percent(ratio: float, decimals: int = 1) -> str:
    """Format a ratio (0.25) as a percentage string (25.0%)."""
    return f"{ratio * 100:.{decimals}f}%"


def format_author(author: Any) -> str:
    """Render the ``author`` field of package.json (string or object form)."""
    if not author:
        return "Not specified"

    if isinstance(author, str):
        return author

    if isinstance(author, dict):
        text = str(author.get("name") or "")
        if author.get("email"):
            text += f" <{author['email']}>"
        if author.get("url"):
            text += f" ({author['url']})"
        return text.strip() or "Not specified"

    return "Not specified"


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp into an aware datetime (UTC if naive).

    Accepts the ``Z`` suffix npm uses. Returns None for empty or
    unparseable input.
    """
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def months_between(start: datetime, end: datetime) -> float:
    """Elapsed months (30-day months) from ``start`` to ``end``."""
    return (end - start).total_seconds() / _SECONDS_PER_MONTH


def relative_time(moment: datetime, now: datetime) -> str:
    """Describe ``moment`` relative to ``now`` ("3 months ago")."""
    diff_sec = int((now - moment).total_seconds())
    diff_min = diff_sec // 60
    diff_hour = diff_min // 60
    diff_day = diff_hour // 24
    diff_month = diff_day // 30
    diff_year = diff_month // 12

    for amount, unit in (
        (diff_year, "year"),
        (diff_month, "month"),
        (diff_day, "day"),
        (diff_hour, "hour"),
        (diff_min, "minute"),
    ):
        if amount > 0:
            return f"{amount} {unit}{'s' if amount > 1 else ''} ago"
    return "Just now"


def format_datetime(value: Optional[str]) -> str:
    """Render an ISO timestamp as ``YYYY-MM-DD HH:MM:SS UTC`` (or N/A)."""
    parsed = parse_timestamp(value)
    if parsed is None:
        return value or "N/A"
    return parsed.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")


def sparkline(values: Sequence[float]) -> str:
    """Generate a unicode sparkline from a list of numeric values."""
    if not values:
        return ""
    blocks = " ▁▂▃▄▅▆▇█"
    mn, mx = min(values), max(values)
    if mx == mn:
        return blocks[4] * len(values)
    return "".join(
        blocks[min(8, int((v - mn) / (mx - mn) * 8))] for v in values
    )
