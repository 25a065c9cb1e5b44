"""Summary statistics for the dashboard page."""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, Iterable, List

from .dates import parse_date
from .record import DEFAULT_STATUS, ExpiryStatus
from .urgency import Urgency

RECENT_LIMIT = 5


@dataclass
class DashboardStats:
    total: int = 0
    pending: int = 0
    this_month: int = 0
    urgency_counts: Dict[Urgency, int] = field(default_factory=dict)
    recent: List[ExpiryStatus] = field(default_factory=list)


def _submitted(row: ExpiryStatus) -> datetime:
    parsed = parse_date(row.registration.submitted_at)
    # Unknown submission times sort as oldest
    return parsed if parsed is not None else datetime.min


def summarize(rows: Iterable[ExpiryStatus], today: date) -> DashboardStats:
    """Count totals, pending and this month's submissions; pick recent activity."""
    rows = list(rows)
    this_month = 0
    for row in rows:
        submitted = parse_date(row.registration.submitted_at)
        if submitted and (submitted.year, submitted.month) == (today.year, today.month):
            this_month += 1

    recent = sorted(rows, key=_submitted, reverse=True)[:RECENT_LIMIT]
    return DashboardStats(
        total=len(rows),
        pending=sum(1 for r in rows if r.registration.status == DEFAULT_STATUS),
        this_month=this_month,
        urgency_counts={u: sum(1 for r in rows if r.urgency == u) for u in Urgency},
        recent=recent,
    )
