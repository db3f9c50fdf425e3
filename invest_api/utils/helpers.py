"""Shared utility functions — date parsing, rounding, formatting."""

from __future__ import annotations

import math
from datetime import date, datetime, timezone
from typing import Optional, Union

# ── Supported date formats (most specific first) ─────────────────────────
_DATE_FORMATS = [
    "%Y-%m-%d",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
]

DATE_FORMAT = "%Y-%m-%d"


def parse_date(value: Union[str, date]) -> date:
    """Parse an investment start date (``YYYY-MM-DD``, optionally with time).

    Raises ``ValueError`` if the string cannot be parsed.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    value = value.strip()
    # ISO timestamps written by the store may carry fractions and a "Z"
    candidate = value.replace("Z", "").split(".")[0]
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(candidate, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"Invalid date format: '{value}'. Expected YYYY-MM-DD.")


def format_date(d: date) -> str:
    return d.strftime(DATE_FORMAT)


def month_label(d: date) -> str:
    """Short chart label, e.g. ``03/24``."""
    return d.strftime("%m/%y")


def utc_timestamp(now: Optional[datetime] = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a ``Z`` suffix."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc).replace(tzinfo=None)
    return now.isoformat(timespec="milliseconds") + "Z"


# ── Numeric helpers ───────────────────────────────────────────────────────

def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives.

    ``round()`` uses banker's rounding, so 0.5 would become 0.
    """
    return int(math.floor(value + 0.5))


def round_currency(value: float, decimals: int = 2) -> float:
    """Round to *decimals* places with Python's ``round``.

    Exact binary ties go to the even digit: ``round_currency(0.125) == 0.12``.
    Decimal-looking ties such as 2.675 are stored just below the half and
    round down. Amounts only pass through here on output.
    """
    return round(value, decimals)

