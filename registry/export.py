"""CSV export of the filtered registrations view."""

import csv
import io
from datetime import date
from typing import Iterable, List

from .errors import ExportError
from .record import ExpiryStatus

EXPORT_HEADERS = [
    "ID",
    "Owner",
    "Vehicle Type",
    "Reg Number",
    "Testing Date",
    "Expiry Date",
    "Submitted",
]

CSV_MIMETYPE = "text/csv"


def export_row(row: ExpiryStatus) -> List[str]:
    reg = row.registration
    return [
        reg.id or "",
        reg.owner_name or "",
        reg.vehicle_type or "",
        reg.registration_number or "",
        reg.testing_date or "",
        reg.expiring_date or "",
        reg.submitted_at or "",
    ]


def export_csv(rows: Iterable[ExpiryStatus]) -> str:
    """
    Render rows as CSV text: a plain header line, then fully quoted rows.

    Raises ExportError when there are no rows, so no empty file is produced.
    """
    rows = list(rows)
    if not rows:
        raise ExportError("No data to export")

    buf = io.StringIO()
    buf.write(",".join(EXPORT_HEADERS) + "\n")
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for row in rows:
        writer.writerow(export_row(row))
    return buf.getvalue().rstrip("\n")


def export_filename(today: date) -> str:
    return f"vehicle-registrations-{today.isoformat()}.csv"
