#!/usr/bin/env python3
"""Tests for dashboard statistics."""
from datetime import date

from registry import ExpiryStatus, Registration, Urgency
from registry.dashboard import RECENT_LIMIT, summarize

TODAY = date(2025, 1, 15)


def make_rows(*records):
    return [ExpiryStatus.derive(Registration.from_dict(r), TODAY) for r in records]


class TestSummarize:
    """Tests for summarize."""

    def test_counts(self):
        rows = make_rows(
            {"id": "1", "submittedAt": "2025-01-02T10:00:00Z", "expiringDate": "2025-01-10"},
            {"id": "2", "submittedAt": "2024-12-30T10:00:00Z", "status": "approved"},
            {"id": "3", "createdAt": "2025-01-14T08:00:00Z", "expiringDate": "2026-01-01"},
            {"id": "4"},
        )
        stats = summarize(rows, TODAY)
        assert stats.total == 4
        assert stats.pending == 3
        assert stats.this_month == 2
        assert stats.urgency_counts[Urgency.EXPIRED] == 1
        assert stats.urgency_counts[Urgency.NORMAL] == 1
        assert stats.urgency_counts[Urgency.UNKNOWN] == 2

    def test_recent_most_recent_first(self):
        rows = make_rows(
            {"id": "none"},
            {"id": "old", "submittedAt": "2024-06-01T00:00:00Z"},
            {"id": "new", "submittedAt": "2025-01-14T00:00:00Z"},
            {"id": "mid", "submittedAt": "2024-12-01T00:00:00Z"},
        )
        stats = summarize(rows, TODAY)
        assert [r.registration.id for r in stats.recent] == ["new", "mid", "old", "none"]

    def test_recent_limited(self):
        rows = make_rows(*[{"id": str(i), "submittedAt": f"2025-01-0{i + 1}"} for i in range(8)])
        stats = summarize(rows, TODAY)
        assert len(stats.recent) == RECENT_LIMIT
        assert stats.recent[0].registration.id == "7"

    def test_empty(self):
        stats = summarize([], TODAY)
        assert stats.total == 0
        assert stats.recent == []
