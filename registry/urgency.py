"""Urgency levels and one-shot list filters for registration expiry."""

from enum import Enum


class Urgency(Enum):
    """How soon a registration's validity runs out."""

    EXPIRED = "expired"
    CRITICAL = "critical"  # 0-7 days left
    WARNING = "warning"  # 8-30 days left
    NORMAL = "normal"
    UNKNOWN = "unknown"  # No usable expiry date


class CustomFilter(Enum):
    """Named predicates triggered once from the dashboard."""

    EXPIRING_SOON = "expiring-soon"
    EXPIRED = "expired"
