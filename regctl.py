#!/usr/bin/env python3
"""
Command line tool for vehicle registrations.

Commands:
  list      - Show registrations, soonest expiry first, with filters
  export    - Write the filtered registrations to a CSV file
  register  - Validate and add a new registration
  stats     - Dashboard counts and recent activity
"""

import argparse
import sys
from datetime import date
from pathlib import Path
from typing import List, Optional

from tabulate import tabulate

from registry import (
    CustomFilter,
    ExpiryStatus,
    ExportError,
    FetchError,
    FilterState,
    RegistrationView,
    VEHICLE_TYPES,
    WriteError,
    YamlStore,
    export_filename,
    parse_date,
)
from registry.config import configure_logging, load_settings
from registry.dashboard import summarize
from registry.validation import build_registration, validate_registration

# =============================================================================
# Formatting helpers
# =============================================================================


def format_value(value: Optional[str]) -> str:
    """Format an optional field for display."""
    return value if value else "-"


def format_date(value: Optional[str]) -> str:
    """Format a stored date as DD/MM/YYYY (falls back to the raw value)."""
    if not value:
        return "-"
    parsed = parse_date(value)
    if parsed is None:
        return value
    return parsed.strftime("%d/%m/%Y")


def make_list_table(rows: List[ExpiryStatus]) -> List[List[str]]:
    """Convert registrations to table rows."""
    table = []
    for row in rows:
        reg = row.registration
        table.append(
            [
                reg.short_id,
                format_value(reg.owner_name),
                reg.vehicle_type_label,
                format_value(reg.registration_number),
                format_date(reg.testing_date),
                format_date(reg.expiring_date),
                row.countdown,
                reg.status.upper(),
            ]
        )
    return table


# =============================================================================
# Shared setup
# =============================================================================


def build_view(args) -> RegistrationView:
    return RegistrationView(YamlStore(args.data_dir), args.collection)


def filters_from_args(args) -> FilterState:
    return FilterState.from_mapping(
        {
            "global": args.search,
            "ownerName": args.owner,
            "regNumber": args.reg_number,
            "vehicleType": args.vehicle_type,
            "status": args.status,
            "expiringDate": args.expiring_on,
        }
    )


def custom_from_args(args) -> Optional[CustomFilter]:
    if args.expiring_soon:
        return CustomFilter.EXPIRING_SOON
    if args.expired:
        return CustomFilter.EXPIRED
    return None


def load_filtered(args) -> Optional[List[ExpiryStatus]]:
    """Load and filter; prints the error and returns None if loading fails."""
    view = build_view(args)
    if not view.refresh():
        print(f"Error: {view.last_error}")
        return None
    return view.apply_filters(filters_from_args(args), custom_from_args(args))


# =============================================================================
# List command
# =============================================================================


def cmd_list(args):
    """Show registrations, soonest expiry first."""
    rows = load_filtered(args)
    if rows is None:
        return 1

    print(f"Collection: {args.collection}")
    print(f"Showing: {len(rows)}")
    print()

    if not rows:
        print("No matches found.")
        return 0

    headers = ["ID", "Owner", "Type", "Reg Number", "Tested", "Expires", "Countdown", "Status"]
    print(tabulate(make_list_table(rows), headers=headers, tablefmt="simple"))
    return 0


# =============================================================================
# Export command
# =============================================================================


def cmd_export(args):
    """Write the filtered registrations to CSV."""
    view = build_view(args)
    if not view.refresh():
        print(f"Error: {view.last_error}")
        return 1
    view.apply_filters(filters_from_args(args), custom_from_args(args))

    try:
        csv_text = view.export_csv()
    except ExportError as e:
        print(f"Warning: {e}")
        return 0

    output = args.output or Path(export_filename(date.today()))
    output.write_text(csv_text + "\n", encoding="utf-8")
    print(f"Exported {len(view.filtered)} records to {output}")
    return 0


# =============================================================================
# Register command
# =============================================================================


def cmd_register(args):
    """Validate and add a new registration."""
    form = {
        "ownerName": args.owner,
        "ownerEmail": args.email,
        "ownerPhone": args.phone,
        "vehicleType": args.vehicle_type,
        "registrationNumber": args.reg_number,
        "testingDate": args.testing_date,
        "expiringDate": args.expiring_date,
    }
    errors = validate_registration(form, date.today())
    if errors:
        print("Error: registration is not valid")
        for field, message in errors.items():
            print(f"  {field}: {message}")
        return 1

    record = build_registration(form)
    print(f"Adding registration to {args.collection}:")
    print(f"  Owner:   {record['ownerName']}")
    print(f"  Vehicle: {record['registrationNumber']} ({record['vehicleType']})")
    print(f"  Valid:   {record['testingDate']} to {record['expiringDate']}")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    try:
        record_id = YamlStore(args.data_dir).insert(args.collection, record)
    except WriteError as e:
        print(f"Error: {e}")
        return 1
    print(f"Registration saved with ID: {record_id}")
    return 0


# =============================================================================
# Stats command
# =============================================================================


def cmd_stats(args):
    """Dashboard counts and recent activity."""
    view = build_view(args)
    if not view.refresh():
        print(f"Error: {view.last_error}")
        return 1

    stats = summarize(view.rows, date.today())
    print(f"Total registrations: {stats.total}")
    print(f"Pending: {stats.pending}")
    print(f"Submitted this month: {stats.this_month}")
    print()

    urgency_rows = [[u.value, n] for u, n in stats.urgency_counts.items()]
    print(tabulate(urgency_rows, headers=["Urgency", "Count"], tablefmt="simple"))
    print()

    if stats.recent:
        print("Recent activity:")
        for row in stats.recent:
            reg = row.registration
            print(f"  {format_value(reg.submitted_at)}  {format_value(reg.owner_name)}"
                  f"  {format_value(reg.registration_number)}")
    return 0


# =============================================================================
# Main
# =============================================================================


def add_filter_arguments(parser):
    parser.add_argument("--search", type=str, help="Search text across all fields")
    parser.add_argument("--owner", type=str, help="Owner name contains text")
    parser.add_argument("--reg-number", type=str, help="Registration number contains text")
    parser.add_argument("--vehicle-type", choices=sorted(VEHICLE_TYPES), help="Vehicle type")
    parser.add_argument("--status", type=str, help="Exact status (default records are 'pending')")
    parser.add_argument(
        "--expiring-on", type=str, help="Expiry date equals YYYY-MM-DD"
    )
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "--expiring-soon",
        action="store_true",
        help="Only registrations expiring within 30 days",
    )
    group.add_argument("--expired", action="store_true", help="Only expired registrations")


def build_parser() -> argparse.ArgumentParser:
    settings = load_settings()
    parser = argparse.ArgumentParser(
        description="Vehicle registration tracker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s list
  %(prog)s list --search mh12 --vehicle-type 4-wheeler
  %(prog)s list --expiring-soon
  %(prog)s export --expired -o expired.csv
  %(prog)s register --owner "Asha Rao" --email asha@example.com \\
      --phone 9876543210 --vehicle-type 4-wheeler --reg-number MH12AB1234 \\
      --testing-date 2025-01-10 --expiring-date 2026-01-10
  %(prog)s stats
""",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=settings.data_dir,
        help="Directory holding collection YAML files (default: $REGISTRY_DATA_DIR or ./data)",
    )
    parser.add_argument(
        "--collection",
        default=settings.collection,
        help="Collection name (default: vehicleRegistrations)",
    )
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level")

    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="Show registrations, soonest expiry first")
    add_filter_arguments(list_parser)

    export_parser = subparsers.add_parser("export", help="Export filtered registrations to CSV")
    add_filter_arguments(export_parser)
    export_parser.add_argument(
        "-o", "--output", type=Path, help="Output file (default: vehicle-registrations-<date>.csv)"
    )

    register_parser = subparsers.add_parser("register", help="Add a new registration")
    register_parser.add_argument("--owner", required=True, help="Owner name")
    register_parser.add_argument("--email", required=True, help="Owner email")
    register_parser.add_argument("--phone", required=True, help="Owner phone number")
    register_parser.add_argument(
        "--vehicle-type", required=True, choices=sorted(VEHICLE_TYPES), help="Vehicle type"
    )
    register_parser.add_argument("--reg-number", required=True, help="Registration number")
    register_parser.add_argument("--testing-date", required=True, help="YYYY-MM-DD")
    register_parser.add_argument("--expiring-date", required=True, help="YYYY-MM-DD")
    register_parser.add_argument(
        "--dry-run", action="store_true", help="Show what would be added without saving"
    )

    subparsers.add_parser("stats", help="Dashboard counts and recent activity")
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    # Dispatch to command handler
    try:
        if args.command == "list":
            return cmd_list(args)
        elif args.command == "export":
            return cmd_export(args)
        elif args.command == "register":
            return cmd_register(args)
        elif args.command == "stats":
            return cmd_stats(args)
    except FetchError as e:
        print(f"Error: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main() or 0)
