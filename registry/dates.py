"""Date helpers for expiry sorting, urgency and countdown text."""

import math
from datetime import date, datetime, time
from typing import Any, Optional

from dateutil import parser as date_parser

from .urgency import Urgency

# Missing or unparseable expiry dates sort as this value (lowest urgency).
FAR_FUTURE = datetime(9999, 12, 31)

CRITICAL_DAYS = 7
WARNING_DAYS = 30

SECONDS_PER_DAY = 24 * 60 * 60


def parse_date(value: Any) -> Optional[datetime]:
    """
    Parse a stored date or timestamp leniently.

    Accepts date/datetime objects and ISO strings such as '2025-01-05' or
    '2025-09-20T09:39:10.091Z'. Timezone offsets are dropped so the wall-clock
    reading is kept. Returns None for absent or unparseable values.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime.combine(value, time())
    try:
        return date_parser.isoparse(str(value).strip()).replace(tzinfo=None)
    except (ValueError, OverflowError):
        return None


def effective_expiry(value: Any) -> datetime:
    """Sort key for an expiry value: parsed date or FAR_FUTURE."""
    parsed = parse_date(value)
    return parsed if parsed is not None else FAR_FUTURE


def normalize_date(value: Any) -> Optional[str]:
    """Calendar date as YYYY-MM-DD, ignoring time of day."""
    parsed = parse_date(value)
    if parsed is None:
        return None
    return parsed.date().isoformat()


def days_until(value: Any, today: date) -> Optional[int]:
    """Whole days from today (midnight) until value, rounded up."""
    parsed = parse_date(value)
    if parsed is None:
        return None
    delta = parsed - datetime.combine(today, time())
    return math.ceil(delta.total_seconds() / SECONDS_PER_DAY)


def is_before_today(value: Any, today: date) -> bool:
    """True if value falls before the start of today. Unusable dates are False."""
    parsed = parse_date(value)
    if parsed is None:
        return False
    return parsed < datetime.combine(today, time())


def classify_urgency(days: Optional[int]) -> Urgency:
    """Map a day count to an urgency level."""
    if days is None:
        return Urgency.UNKNOWN
    if days < 0:
        return Urgency.EXPIRED
    if days <= CRITICAL_DAYS:
        return Urgency.CRITICAL
    if days <= WARNING_DAYS:
        return Urgency.WARNING
    return Urgency.NORMAL


def countdown_text(value: Any, today: date) -> str:
    """Human readable countdown, e.g. 'Expires tomorrow' or '12 days left'."""
    if value is None or value == "":
        return "N/A"
    days = days_until(value, today)
    if days is None:
        return "Invalid date"
    if days < 0:
        return f"Expired {abs(days)} days ago"
    if days == 0:
        return "Expires today"
    if days == 1:
        return "Expires tomorrow"
    return f"{days} days left"
