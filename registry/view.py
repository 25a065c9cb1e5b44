"""RegistrationView - the sorted, annotated working set behind the list page."""

import itertools
import logging
import threading
from datetime import date
from typing import Callable, Iterable, List, Optional, Tuple

from .dates import effective_expiry
from .errors import FetchError, OrderingUnsupported
from .export import export_csv
from .filters import FilterState, apply_filters
from .record import ExpiryStatus, Registration
from .store import ASC, DESC, OrderBy, RegistrationStore
from .urgency import CustomFilter

logger = logging.getLogger(__name__)

DEFAULT_COLLECTION = "vehicleRegistrations"

# Store-side orderings, tried in order before an unordered fetch.
FETCH_ORDERINGS = (
    ("store-expiry", OrderBy("expiringDate", ASC)),
    ("store-submitted", OrderBy("submittedAt", DESC)),
)


def sort_by_expiry(registrations: Iterable[Registration]) -> List[Registration]:
    """Stable sort, soonest expiry first; missing/invalid dates last."""
    return sorted(registrations, key=lambda r: effective_expiry(r.expiring_date))


def annotate(registrations: Iterable[Registration], today: date) -> List[ExpiryStatus]:
    """Attach urgency, day count and countdown text to each registration."""
    return [ExpiryStatus.derive(r, today) for r in registrations]


def fetch_ordered(store: RegistrationStore, collection: str) -> Tuple[List[dict], str]:
    """
    Fetch all records, preferring store-side expiry ordering.

    Falls back to submission order, then to an unordered fetch, when the store
    cannot apply an ordering. Returns (records, method).
    """
    for method, order_by in FETCH_ORDERINGS:
        try:
            records = store.fetch_all(collection, order_by)
        except OrderingUnsupported as e:
            logger.warning("Store ordering %s failed, falling back: %s", method, e)
            continue
        return records, method
    return store.fetch_all(collection), "local"


class RegistrationView:
    """
    In-memory working set of registrations plus the current filter state.

    Each refresh replaces the working set as a whole. Refreshes carry a
    generation number; a refresh that finishes after a newer one has already
    been committed is discarded.
    """

    def __init__(
        self,
        store: RegistrationStore,
        collection: str = DEFAULT_COLLECTION,
        clock: Callable[[], date] = date.today,
    ):
        self.store = store
        self.collection = collection
        self.clock = clock
        self.filters = FilterState()
        self.sort_method: Optional[str] = None
        self.last_error: Optional[FetchError] = None
        self._rows: List[ExpiryStatus] = []
        self._filtered: List[ExpiryStatus] = []
        self._pending_custom: Optional[CustomFilter] = None
        self._loaded = False
        self._lock = threading.Lock()
        self._generations = itertools.count(1)
        self._committed_generation = 0

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def rows(self) -> List[ExpiryStatus]:
        """The full sorted, annotated working set."""
        return list(self._rows)

    @property
    def filtered(self) -> List[ExpiryStatus]:
        """The view produced by the most recent filter application."""
        return list(self._filtered)

    def load(self, records: Iterable[dict], today: Optional[date] = None) -> List[ExpiryStatus]:
        """Replace the working set with already-fetched wire records."""
        generation = self._next_generation()
        today = today or self.clock()
        self._commit(generation, self._build(records, today), "local", today)
        return self.rows

    def refresh(self, today: Optional[date] = None) -> bool:
        """
        Fetch from the store and rebuild the working set.

        Returns False (keeping the previous working set) if the fetch fails.
        """
        generation = self._next_generation()
        try:
            records, method = fetch_ordered(self.store, self.collection)
        except FetchError as e:
            logger.error("Refresh of %s failed: %s", self.collection, e)
            with self._lock:
                # A newer refresh already committed fresh data
                if generation > self._committed_generation:
                    self.last_error = e
            return False

        today = today or self.clock()
        return self._commit(generation, self._build(records, today), method, today)

    def _next_generation(self) -> int:
        with self._lock:
            return next(self._generations)

    def _build(self, records: Iterable[dict], today: date) -> List[ExpiryStatus]:
        registrations = [Registration.from_dict(r) for r in records]
        return annotate(sort_by_expiry(registrations), today)

    def _commit(
        self, generation: int, rows: List[ExpiryStatus], method: str, today: date
    ) -> bool:
        with self._lock:
            if generation <= self._committed_generation:
                logger.info("Discarding stale refresh (generation %d)", generation)
                return False
            self._committed_generation = generation
            self._rows = rows
            self._loaded = True
            self.sort_method = method
            self.last_error = None
            self._filtered = apply_filters(rows, self.filters, today=today)
        logger.info(
            "Loaded %d registrations from %s (sort: %s)", len(rows), self.collection, method
        )
        return True

    # ------------------------------------------------------------------
    # Filtering
    # ------------------------------------------------------------------

    def set_custom_filter(self, custom_filter: Optional[CustomFilter]) -> None:
        """Arm a one-shot custom filter for the next apply_filters() call."""
        self._pending_custom = custom_filter

    def apply_filters(
        self,
        filters: Optional[FilterState] = None,
        custom_filter: Optional[CustomFilter] = None,
        today: Optional[date] = None,
    ) -> List[ExpiryStatus]:
        """
        Filter the working set and return the resulting view.

        filters replaces the stored filter state when given. The custom filter
        (passed here or armed with set_custom_filter) applies to this call only.
        """
        if filters is not None:
            self.filters = filters
        custom = custom_filter or self._pending_custom
        self._pending_custom = None
        self._filtered = apply_filters(self._rows, self.filters, custom, today or self.clock())
        return self.filtered

    def clear_filters(self) -> List[ExpiryStatus]:
        """Reset every filter to empty and re-apply."""
        return self.apply_filters(self.filters.cleared())

    # ------------------------------------------------------------------
    # Summaries and export
    # ------------------------------------------------------------------

    def export_csv(self) -> str:
        """CSV for the current filtered view. Raises ExportError if it is empty."""
        return export_csv(self._filtered)


class AutoRefresher:
    """Refresh a view every `interval` seconds on a daemon timer thread."""

    def __init__(self, view: RegistrationView, interval: float):
        self.view = view
        self.interval = interval
        self._timer: Optional[threading.Timer] = None
        self._stopped = threading.Event()
        self._lock = threading.Lock()

    def start(self) -> None:
        self._stopped.clear()
        self._schedule()

    def stop(self) -> None:
        with self._lock:
            self._stopped.set()
            if self._timer is not None:
                self._timer.cancel()

    def _schedule(self) -> None:
        with self._lock:
            if self._stopped.is_set():
                return
            self._timer = threading.Timer(self.interval, self._run)
            self._timer.daemon = True
            self._timer.start()

    def _run(self) -> None:
        if self.view.refresh():
            logger.info("Registrations refreshed automatically")
        else:
            logger.warning("Automatic refresh failed: %s", self.view.last_error)
        self._schedule()
