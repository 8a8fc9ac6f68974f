"""
Ethiopian Calendar Attendance Tracker

Console front end over the attendance record store: create sessions on
Ethiopian dates, record attendance and print department reports.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

# Add src directory to path for imports
sys.path.insert(0, str(Path(__file__).parent / "src"))

from application.attendance_store import AttendanceStore
from application.report_service import AttendanceReportService
from config.config_manager import ConfigManager
from domain.ethiopian_calendar import (
    ETHIOPIAN_MONTHS,
    ethiopian_to_gregorian,
    format_ethiopian_date,
    get_current_ethiopian_date,
    get_days_in_ethiopian_month,
    get_ethiopian_years,
    gregorian_to_ethiopian,
)
from domain.validators import (
    EntryValidationError,
    validate_employee_id,
    validate_forgot_id_details,
)
from infrastructure.key_value_storage import JsonFileStorage
from infrastructure.logger import configure_log_file


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Ethiopian calendar attendance tracker")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.json")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("today", help="Show today's Ethiopian date")
    sub.add_parser("years", help="List selectable Ethiopian years")

    days = sub.add_parser("days", help="List the days of an Ethiopian month")
    days.add_argument("--year", type=int, default=None)
    days.add_argument("--month", type=int, required=True, choices=range(13))

    new_session = sub.add_parser("new-session", help="Create and activate a session")
    new_session.add_argument("--year", type=int, required=True)
    new_session.add_argument("--month", type=int, required=True, choices=range(13))
    new_session.add_argument("--day", type=int, required=True)

    sessions = sub.add_parser("sessions", help="List sessions of an Ethiopian month")
    sessions.add_argument("--year", type=int, default=None)
    sessions.add_argument("--month", type=int, default=None, choices=range(13))
    sessions.add_argument("--day", type=int, default=None)

    add_id = sub.add_parser("add-id", help="Record attendance by employee ID")
    add_id.add_argument("employee_id")

    add_guest = sub.add_parser("add-guest", help="Record attendance without an ID card")
    add_guest.add_argument("--name", default="")
    add_guest.add_argument("--department", default="")
    add_guest.add_argument("--phone", default="")

    sub.add_parser("complete", help="Complete the active session")

    report = sub.add_parser("report", help="Department report for an Ethiopian month")
    report.add_argument("--year", type=int, required=True)
    report.add_argument("--month", type=int, required=True, choices=range(13))

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Application entry point."""
    args = build_parser().parse_args(argv)

    manager = ConfigManager(args.config)
    config = manager.load()
    configure_log_file(config.logging.log_file)

    store = AttendanceStore(JsonFileStorage(manager.resolve_data_file()))
    reports = AttendanceReportService(config.report.unknown_department)

    if args.command == "today":
        print(format_ethiopian_date(get_current_ethiopian_date()))

    elif args.command == "years":
        print(" ".join(str(y) for y in get_ethiopian_years(config.calendar.year_picker_count)))

    elif args.command == "days":
        year = None
        if config.calendar.pagumen_rule == "by_year":
            year = args.year if args.year is not None else get_current_ethiopian_date().year
        days = get_days_in_ethiopian_month(args.month, year)
        print(f"{ETHIOPIAN_MONTHS[args.month]}: {days[0]}-{days[-1]}")

    elif args.command == "new-session":
        # Checked against the year itself so the session lands on the picked day
        if args.day not in get_days_in_ethiopian_month(args.month, args.year):
            print(f"Invalid day {args.day} for {ETHIOPIAN_MONTHS[args.month]} {args.year}",
                  file=sys.stderr)
            return 2
        date_value = ethiopian_to_gregorian(args.year, args.month, args.day)
        session = store.create_session(date_value)
        if session is None or not store.set_active_session(session):
            print("Failed to create session", file=sys.stderr)
            return 1
        print(f"Session {session.id}: {format_ethiopian_date(gregorian_to_ethiopian(session.date))}")

    elif args.command == "sessions":
        all_sessions = store.get_all_sessions()
        default = reports.most_recent_ethiopian_date(all_sessions)
        year = args.year if args.year is not None else (default.year if default else None)
        month = args.month if args.month is not None else (default.month if default else None)
        if year is None or month is None:
            print("No sessions")
            return 0
        for session in reports.filter_sessions(all_sessions, year, month, args.day):
            status = "completed" if session.completed else "in progress"
            label = format_ethiopian_date(gregorian_to_ethiopian(session.date))
            print(f"{session.id}  {label}  {session.total_count:>4}  {status}")

    elif args.command == "add-id":
        try:
            employee_id = validate_employee_id(args.employee_id)
        except EntryValidationError as e:
            print(e, file=sys.stderr)
            return 2
        if not store.add_id_attendance(employee_id):
            print("Failed to add attendance", file=sys.stderr)
            return 1

    elif args.command == "add-guest":
        try:
            name, department, phone = validate_forgot_id_details(
                args.name, args.department, args.phone
            )
        except EntryValidationError as e:
            print(e, file=sys.stderr)
            return 2
        if not store.add_forgot_id_attendance(name, department, phone):
            print("Failed to add attendance", file=sys.stderr)
            return 1

    elif args.command == "complete":
        if not store.complete_session():
            print("Failed to complete session", file=sys.stderr)
            return 1

    elif args.command == "report":
        report = reports.monthly_department_report(
            store.get_all_sessions(), store.get_all_employees(), args.year, args.month
        )
        print(f"{ETHIOPIAN_MONTHS[args.month]} {args.year}: {report.total} entries")
        for row in report.rows:
            print(f"  {row.department:<30} {row.count:>5} {row.percentage:>6.1f}%")

    return 0


if __name__ == "__main__":
    sys.exit(main())
