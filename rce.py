#!/usr/bin/env python3
"""
Operator CLI for mileage-based maintenance outreach.

Commands:
  register - Register a vehicle (or update owner details)
  visit    - Record an odometer reading taken at a visit
  service  - Record a completed maintenance item
  status   - Show estimated mileage and per-item due status
  history  - View a vehicle's service history
  due      - List vehicles currently due for a reminder
  logs     - Show recent outreach attempts
  run      - Run an outreach campaign now
  send     - Send a single ad-hoc message
  catalog  - List maintenance items and intervals
"""

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from tabulate import tabulate
from typing import List, Optional

from config import Settings
from models import (
    MaintenanceStatus,
    OutreachLogEntry,
    RceError,
    Status,
    TIER_LABELS,
    UNKNOWN_DAYS,
)
from outreach import DueVehicle, OutreachService, VehicleNotFound

# =============================================================================
# Formatting helpers
# =============================================================================


def format_km(km: Optional[float]) -> str:
    """Format a distance for display."""
    return f"{km:,.0f}" if km is not None else "-"


def format_days(days: Optional[int]) -> str:
    """Format remaining days (e.g., '3mo 15d'); '?' when the pace is unknown."""
    if days is None:
        return "-"
    if days >= UNKNOWN_DAYS:
        return "?"
    months = days // 30
    remaining_days = days % 30
    if months > 0:
        return f"{months}mo {remaining_days}d"
    return f"{days}d"


def truncate(text: Optional[str], max_len: int = 30) -> str:
    """Truncate text with ellipsis if too long."""
    if text is None:
        return "-"
    text = text.replace("\n", " ")
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


# =============================================================================
# Table builders
# =============================================================================


def make_status_table(statuses: List[MaintenanceStatus]) -> List[List[str]]:
    """Convert maintenance status list to table rows."""
    rows = []
    for s in statuses:
        rows.append(
            [
                s.item.display_name,
                format_km(s.last_done_km) if s.last_done_km else "-",
                format_km(s.next_due_km),
                format_km(s.km_remaining),
                format_days(s.days_remaining),
                s.due_date or "-",
            ]
        )
    return rows


def make_due_table(targets: List[DueVehicle]) -> List[List[str]]:
    """Convert due targets to table rows."""
    rows = []
    for t in targets:
        urgent = sum(1 for s in t.due_items if s.urgent)
        rows.append(
            [
                t.vehicle.owner_name,
                t.vehicle.owner_phone,
                t.vehicle.vehicle_model,
                format_km(t.estimated_km),
                ", ".join(t.item_keys),
                str(urgent),
            ]
        )
    return rows


def make_log_table(entries: List[OutreachLogEntry]) -> List[List[str]]:
    """Convert outreach entries to table rows."""
    return [
        [
            e.sent_at,
            e.phone,
            e.status.value,
            ", ".join(e.items_alerted),
            e.external_id or "-",
            truncate(e.message),
        ]
        for e in entries
    ]


# =============================================================================
# Commands
# =============================================================================


def cmd_register(service: OutreachService, args):
    """Register a vehicle or update its owner details."""
    print(f"Registering {args.model} for {args.name} ({args.phone})")
    if args.odometer is not None:
        print(f"  Odometer: {args.odometer:,.0f} km")
    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    vehicle = service.register_vehicle(
        owner_name=args.name,
        owner_phone=args.phone,
        vehicle_model=args.model,
        vehicle_type=args.type,
        registration_year=args.reg_year,
        registration_odometer=args.reg_km,
        current_odometer=args.odometer,
    )
    print(f"Vehicle saved (id {vehicle.vehicle_id}, visits: {vehicle.visit_count}).")
    return 0


def cmd_visit(service: OutreachService, args):
    """Record an odometer reading taken at a visit."""
    vehicle = service.get_vehicle(args.phone)
    services = [s.strip() for s in args.services.split(",")] if args.services else []

    print(f"Vehicle: {vehicle.vehicle_model} ({vehicle.owner_name})")
    print(f"Last reading: {format_km(vehicle.last_visit_odometer)}")
    print(f"New reading:  {args.odometer:,.0f}")
    if services:
        print(f"Services:     {', '.join(services)}")
    print()

    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    vehicle = service.record_visit(args.phone, args.odometer, services)
    estimate = service.estimate(vehicle)
    print(f"Visit recorded. Estimated mileage: {estimate.km:,} km (tier {estimate.tier})")
    return 0


def cmd_service(service: OutreachService, args):
    """Record a completed maintenance item."""
    item = service.catalog.require(args.item_key)
    print(f"Adding service: {item.display_name} at {args.odometer:,.0f} km")
    if args.dry_run:
        print("(dry run - no changes made)")
        return 0

    entry = service.record_service(args.phone, item.key, args.odometer, args.notes)
    print(f"Entry saved. Next due at {entry.next_due_odometer:,.0f} km.")
    return 0


def cmd_status(service: OutreachService, args):
    """Show estimated mileage and maintenance status."""
    vehicle = service.get_vehicle(args.phone)
    estimate = service.estimate(vehicle)
    statuses = service.maintenance_status(vehicle)

    print(f"Vehicle: {vehicle.vehicle_model} ({vehicle.owner_name}, {vehicle.owner_phone})")
    print(
        f"Estimated mileage: {estimate.km:,} km "
        f"(tier {estimate.tier}: {TIER_LABELS[estimate.tier]})"
    )
    print(f"Pace: {vehicle.average_km_per_month:,.0f} km/month")
    print(f"Visits: {vehicle.visit_count}")
    print()

    headers = ["Item", "Last Done", "Due (km)", "Remaining (km)", "Remaining (time)", "Due (date)"]
    for status, title in (
        (Status.URGENT, "URGENT:"),
        (Status.UPCOMING, "UPCOMING:"),
        (Status.OK, "OK:"),
    ):
        group = sorted(
            [s for s in statuses if s.status == status], key=lambda s: s.km_remaining
        )
        if group:
            print(title)
            print(tabulate(make_status_table(group), headers=headers, tablefmt="simple"))
            print()
    return 0


def cmd_history(service: OutreachService, args):
    """View a vehicle's service history."""
    vehicle = service.get_vehicle(args.phone)
    entries = vehicle.get_history_sorted(reverse=not args.asc)

    print(f"Vehicle: {vehicle.vehicle_model} ({vehicle.owner_name})")
    print(f"Total services: {len(entries)}")
    print()

    if not entries:
        print("No history entries found.")
        return 0

    rows = []
    for e in entries:
        item = service.catalog.get(e.item_key)
        rows.append(
            [
                e.date,
                format_km(e.odometer_at_service),
                item.display_name if item else e.item_key,
                format_km(e.next_due_odometer),
                truncate(e.notes),
            ]
        )
    headers = ["Date", "Odometer", "Item", "Next Due", "Notes"]
    print(tabulate(rows, headers=headers, tablefmt="simple"))
    return 0


def cmd_due(service: OutreachService, args):
    """List vehicles due for a reminder."""
    threshold = args.threshold if args.threshold is not None else service.settings.threshold_km
    targets = service.due_targets(threshold)
    print(f"Threshold: {threshold:,.0f} km")
    print(f"Vehicles due: {len(targets)}")
    print()
    if targets:
        headers = ["Owner", "Phone", "Model", "Est. km", "Items", "Urgent"]
        print(tabulate(make_due_table(targets), headers=headers, tablefmt="simple"))
    return 0


def cmd_logs(service: OutreachService, args):
    """Show recent outreach attempts."""
    entries = service.recent_logs(args.limit)
    if not entries:
        print("No outreach sent yet.")
        return 0
    headers = ["Sent At", "Phone", "Status", "Items", "Message ID", "Message"]
    print(tabulate(make_log_table(entries), headers=headers, tablefmt="simple"))
    return 0


def cmd_run(service: OutreachService, args):
    """Run an outreach campaign now."""
    result = service.run_campaign()
    print(f"Campaign complete: {result.sent}/{result.total} sent")
    return 0


def cmd_send(service: OutreachService, args):
    """Send a single ad-hoc message."""
    result = service.send_message(args.phone, args.message)
    if not result.success:
        print(f"Error: send failed ({result.error or 'unknown error'})")
        return 1
    print(f"Sent to {args.phone}" + (f" (id {result.external_id})" if result.external_id else ""))
    return 0


def cmd_catalog(service: OutreachService, args):
    """List maintenance items and intervals."""
    rows = [[i.key, i.display_name, f"{i.interval_km:,.0f} km"] for i in service.catalog]
    print(tabulate(rows, headers=["Key", "Item", "Interval"], tablefmt="simple"))
    return 0


COMMANDS = {
    "register": cmd_register,
    "visit": cmd_visit,
    "service": cmd_service,
    "status": cmd_status,
    "history": cmd_history,
    "due": cmd_due,
    "logs": cmd_logs,
    "run": cmd_run,
    "send": cmd_send,
    "catalog": cmd_catalog,
}


# =============================================================================
# Main
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Mileage-based maintenance outreach",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s data register "Jane Doe" +15550100 "Civic" --type sedan --odometer 38000
  %(prog)s data visit +15550100 45000 --services engine_oil,tire_rotation
  %(prog)s data service +15550100 air_filter 45000
  %(prog)s data status +15550100
  %(prog)s data due --threshold 2000
  %(prog)s data run --dry-run
""",
    )
    parser.add_argument("data_dir", type=Path, help="Path to the data directory")
    parser.add_argument("--config", type=Path, help="YAML settings file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    register_parser = subparsers.add_parser("register", help="Register a vehicle")
    register_parser.add_argument("name", help="Owner name")
    register_parser.add_argument("phone", help="Owner phone number")
    register_parser.add_argument("model", help="Vehicle model")
    register_parser.add_argument(
        "--type", help="Vehicle type (compact, sedan, suv, truck, van)"
    )
    register_parser.add_argument("--reg-year", type=int, help="Registration year")
    register_parser.add_argument(
        "--reg-km", type=float, help="Odometer at registration (default 0)"
    )
    register_parser.add_argument(
        "--odometer", type=float, help="Odometer reading today (records a visit)"
    )
    register_parser.add_argument("--dry-run", action="store_true")

    visit_parser = subparsers.add_parser("visit", help="Record a visit odometer reading")
    visit_parser.add_argument("phone", help="Owner phone number")
    visit_parser.add_argument("odometer", type=float, help="Odometer reading")
    visit_parser.add_argument(
        "--services", help="Comma-separated item keys serviced at this visit"
    )
    visit_parser.add_argument("--dry-run", action="store_true")

    service_parser = subparsers.add_parser("service", help="Record a completed item")
    service_parser.add_argument("phone", help="Owner phone number")
    service_parser.add_argument("item_key", help="Catalog item key (e.g., engine_oil)")
    service_parser.add_argument("odometer", type=float, help="Odometer at service")
    service_parser.add_argument("--notes", help="Notes about the service")
    service_parser.add_argument("--dry-run", action="store_true")

    status_parser = subparsers.add_parser("status", help="Show maintenance status")
    status_parser.add_argument("phone", help="Owner phone number")

    history_parser = subparsers.add_parser("history", help="View service history")
    history_parser.add_argument("phone", help="Owner phone number")
    history_parser.add_argument(
        "--asc", action="store_true", help="Sort ascending instead of descending"
    )

    due_parser = subparsers.add_parser("due", help="List vehicles due for a reminder")
    due_parser.add_argument("--threshold", type=float, help="Alert threshold in km")

    logs_parser = subparsers.add_parser("logs", help="Show recent outreach")
    logs_parser.add_argument("--limit", type=int, default=50)

    run_parser = subparsers.add_parser("run", help="Run a campaign now")
    run_parser.add_argument(
        "--dry-run", action="store_true", help="Log messages instead of sending"
    )

    send_parser = subparsers.add_parser("send", help="Send a single message")
    send_parser.add_argument("phone", help="Recipient phone number")
    send_parser.add_argument("message", help="Message body")
    send_parser.add_argument(
        "--dry-run", action="store_true", help="Log the message instead of sending"
    )

    subparsers.add_parser("catalog", help="List maintenance items")
    return parser


def load_settings(args) -> Settings:
    settings = Settings.from_env()
    if args.config:
        settings = Settings.from_yaml(args.config, base=settings)
    overrides = {"data_dir": str(args.data_dir)}
    if args.command in ("run", "send") and args.dry_run:
        overrides["dry_run"] = True
    return replace(settings, **overrides)


def main(argv: Optional[List[str]] = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        service = OutreachService(load_settings(args))
        return COMMANDS[args.command](service, args)
    except VehicleNotFound as e:
        print(f"Error: {e}")
        return 1
    except (RceError, ValueError) as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main() or 0)
