"""Helpers for the ``MM-DD`` keys used by fixed and custom holidays."""

import calendar
import re
from datetime import date

_MONTH_DAY_RE = re.compile(r"^(\d{2})-(\d{2})$")

# Leap year, so that 02-29 is accepted as a custom holiday date.
_REFERENCE_YEAR = 2000


def month_day_of(day: date) -> str:
    return f"{day.month:02d}-{day.day:02d}"


def is_valid_month_day(value: str) -> bool:
    """Check that ``value`` is ``MM-DD`` and names a day that exists in some year."""
    match = _MONTH_DAY_RE.match(value)
    if match is None:
        return False
    month, day = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        return False
    return 1 <= day <= calendar.monthrange(_REFERENCE_YEAR, month)[1]
