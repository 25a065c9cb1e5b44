"""
Vehicle registration tracking.

This package provides the pieces behind the registrations list:
- Registration: Stored record with defaulting rules
- ExpiryStatus: Urgency and countdown derived per load
- FilterState / apply_filters: Named list filters
- RegistrationView: Sorted working set with refresh and filtering
- YamlStore / InMemoryStore: Record stores
- export_csv: CSV export of the filtered view
"""

from .urgency import Urgency, CustomFilter
from .dates import (
    FAR_FUTURE,
    parse_date,
    effective_expiry,
    normalize_date,
    days_until,
    classify_urgency,
    countdown_text,
)
from .errors import (
    RegistryError,
    FetchError,
    PermissionDenied,
    QueryError,
    OrderingUnsupported,
    WriteError,
    ExportError,
    ValidationError,
)
from .record import Registration, ExpiryStatus, VEHICLE_TYPES, DEFAULT_STATUS
from .filters import FilterState, apply_filters
from .store import OrderBy, RegistrationStore, InMemoryStore, YamlStore
from .export import export_csv, export_filename
from .view import RegistrationView, AutoRefresher, sort_by_expiry

__all__ = [
    "Urgency",
    "CustomFilter",
    "FAR_FUTURE",
    "parse_date",
    "effective_expiry",
    "normalize_date",
    "days_until",
    "classify_urgency",
    "countdown_text",
    "RegistryError",
    "FetchError",
    "PermissionDenied",
    "QueryError",
    "OrderingUnsupported",
    "WriteError",
    "ExportError",
    "ValidationError",
    "Registration",
    "ExpiryStatus",
    "VEHICLE_TYPES",
    "DEFAULT_STATUS",
    "FilterState",
    "apply_filters",
    "OrderBy",
    "RegistrationStore",
    "InMemoryStore",
    "YamlStore",
    "export_csv",
    "export_filename",
    "RegistrationView",
    "AutoRefresher",
    "sort_by_expiry",
]
