"""Filter state and predicate evaluation for the registrations list."""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Mapping, Optional

from .dates import WARNING_DAYS, is_before_today, normalize_date
from .record import ExpiryStatus, Registration
from .urgency import CustomFilter

logger = logging.getLogger(__name__)

# Wire key -> FilterState attribute
FILTER_KEYS = {
    "global": "global_search",
    "ownerName": "owner_name",
    "regNumber": "reg_number",
    "vehicleType": "vehicle_type",
    "status": "status",
    "expiringDate": "expiring_date",
}


@dataclass(frozen=True)
class FilterState:
    """Current values of the named list filters. Empty string = not filtering."""

    global_search: str = ""
    owner_name: str = ""
    reg_number: str = ""
    vehicle_type: str = ""
    status: str = ""
    expiring_date: str = ""

    @classmethod
    def from_mapping(cls, values: Mapping[str, Optional[str]]) -> "FilterState":
        """Build from wire keys (global, ownerName, ...); unknown keys are ignored."""
        kwargs = {}
        for key, attr in FILTER_KEYS.items():
            value = values.get(key)
            kwargs[attr] = (value or "").strip()
        return cls(**kwargs)

    def to_mapping(self) -> dict:
        return {key: getattr(self, attr) for key, attr in FILTER_KEYS.items()}

    def cleared(self) -> "FilterState":
        return FilterState()

    @property
    def is_empty(self) -> bool:
        return not any(self.to_mapping().values())


def searchable_text(registration: Registration) -> str:
    """Lower-cased text the global search runs against. Auth tokens are left out."""
    fields = [
        registration.id,
        registration.owner_name,
        registration.owner_email,
        registration.owner_phone,
        registration.vehicle_type,
        registration.registration_number,
        registration.testing_date,
        registration.expiring_date,
        registration.submitted_at,
    ]
    return " ".join(f or "" for f in fields).lower()


def _contains(haystack: Optional[str], needle: str) -> bool:
    return needle.lower() in (haystack or "").lower()


def _passes_custom(row: ExpiryStatus, custom_filter: CustomFilter, today: date) -> bool:
    if custom_filter is CustomFilter.EXPIRING_SOON:
        days = row.days_until_expiry
        return days is not None and 0 <= days <= WARNING_DAYS
    if custom_filter is CustomFilter.EXPIRED:
        return is_before_today(row.registration.expiring_date, today)
    return True


def matches(
    row: ExpiryStatus,
    filters: FilterState,
    custom_filter: Optional[CustomFilter] = None,
    today: Optional[date] = None,
) -> bool:
    """True if the row passes every active filter."""
    reg = row.registration

    if custom_filter is not None:
        if not _passes_custom(row, custom_filter, today or date.today()):
            return False

    if filters.global_search and filters.global_search.lower() not in searchable_text(reg):
        return False

    if filters.owner_name and not _contains(reg.owner_name, filters.owner_name):
        return False

    if filters.reg_number and not _contains(reg.registration_number, filters.reg_number):
        return False

    if filters.vehicle_type and reg.vehicle_type != filters.vehicle_type:
        return False

    if filters.status and reg.status != filters.status:
        return False

    if filters.expiring_date:
        # Records without a usable expiry never match a date filter
        if normalize_date(reg.expiring_date) != filters.expiring_date:
            return False

    return True


def apply_filters(
    rows: Iterable[ExpiryStatus],
    filters: FilterState,
    custom_filter: Optional[CustomFilter] = None,
    today: Optional[date] = None,
) -> List[ExpiryStatus]:
    """
    Return the rows passing all filters, in their original order.

    The input is not modified. custom_filter applies to this call only.
    """
    rows = list(rows)
    today = today or date.today()
    result = [r for r in rows if matches(r, filters, custom_filter, today)]
    logger.debug(
        "Filter results: %d -> %d (custom=%s)",
        len(rows),
        len(result),
        custom_filter.value if custom_filter else None,
    )
    return result
