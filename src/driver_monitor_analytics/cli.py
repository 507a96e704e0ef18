"""
CLI entry point for Driver Monitor Analytics.

PURPOSE: Command-line access to the dashboard server and text views.
AI CONTEXT: Main entry points for package execution.

USAGE:
    python -m driver_monitor_analytics report

    # Or via CLI command (after install)
    driver-monitor dashboard --port 8080        # Launch web dashboard
    driver-monitor report --start 2026-03-01    # Print text report
    driver-monitor drivers --search ana         # List drivers
    driver-monitor recent --page 2              # Page through recent fatigue events

EXIT CODES:
    0  success
    1  a required query failed, or no command given
    2  invalid argument (bad date, end before start, bad page size)
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from functools import lru_cache
from typing import TYPE_CHECKING

from .errors import InvalidArgument, QueryFailure
from .filters import FilterState
from .presenters import DashboardPresenter

if TYPE_CHECKING:
    from .dashboard_service import DashboardService

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_INVALID = 2


@lru_cache(maxsize=1)
def _get_logger() -> logging.Logger:
    """Get module logger (cached for thread safety)."""
    logging.basicConfig(level=logging.INFO)
    return logging.getLogger(__name__)


def _default_service() -> DashboardService:
    from .dashboard_service import DashboardService
    from .store import JsonEventStore

    return DashboardService(JsonEventStore())


def run_dashboard(host: str = DEFAULT_HOST, port: int = DEFAULT_PORT) -> None:
    """
    Launch the web dashboard.

    Args:
        host: Network interface to bind to. Default '127.0.0.1'.
        port: TCP port for the HTTP server. Default 8000.

    Returns:
        None. Blocks until server shutdown (Ctrl+C).

    Raises:
        OSError: If port is already in use.
    """
    from .web import run_dashboard as start_web

    _get_logger().info("Starting dashboard at http://%s:%s", host, port)
    _get_logger().info("Press Ctrl+C to stop")
    start_web(host=host, port=port)


def run_report(
    start_date: str | None = None,
    end_date: str | None = None,
    service: DashboardService | None = None,
) -> int:
    """
    Print the text analytics report to stdout.

    Business context: Supervisors without dashboard access pipe this into
    email or chat; the numbers match the dashboard for the same window.

    Args:
        start_date: 'YYYY-MM-DD' start of the window (optional).
        end_date: 'YYYY-MM-DD' end of the window (optional).
        service: Optional DashboardService for testability.

    Returns:
        Exit code: 0 on success, 1 if a table could not be read.

    Raises:
        InvalidArgument: If a date is malformed or end precedes start.

    Example:
        >>> # driver-monitor report --start 2026-03-01 --end 2026-03-07 > week.txt
        >>> run_report('2026-03-01', '2026-03-07')
        ==================================================
        DRIVER MONITOR - ANALYTICS REPORT
        ...
    """
    service = service or _default_service()
    try:
        report = asyncio.run(service.build_report(start_date, end_date))
    except QueryFailure as e:
        _get_logger().error("Report unavailable: %s", e)
        return EXIT_FAILED
    # Note: Using print() intentionally for stdout piping support
    print(report)
    return EXIT_OK


def run_drivers(search: str = "", service: DashboardService | None = None) -> int:
    """
    Print drivers matching a name/email search, one per line.

    Returns:
        Exit code: 0 on success, 1 if drivers could not be read.
    """
    service = service or _default_service()
    section = asyncio.run(service.list_drivers(search)).sections["drivers"]
    if section.failed:
        _get_logger().error("Drivers unavailable: %s", section.error)
        return EXIT_FAILED
    drivers = section.data["drivers"]
    for driver in drivers:
        print(f"{driver['driver_id']!s:>5}  {driver['driver_name']:<30} {driver['driver_email']}")
    print(f"{len(drivers)} of {section.data['total']} drivers")
    return EXIT_OK


def run_recent(
    page: int = 1,
    start_date: str | None = None,
    end_date: str | None = None,
    service: DashboardService | None = None,
) -> int:
    """
    Print one page of recent fatigue events.

    Out-of-range pages are clamped, so `--page 999` shows the last page.

    Returns:
        Exit code: 0 on success, 1 if fatigue events could not be read.

    Raises:
        InvalidArgument: If a date is malformed.
    """
    service = service or _default_service()
    filter_state = FilterState(start_date, end_date, page=page)
    view = asyncio.run(service.apply_filter("recent", filter_state))
    section = view.sections["events"]
    if section.failed:
        _get_logger().error("Fatigue events unavailable: %s", section.error)
        return EXIT_FAILED
    for row in DashboardPresenter.event_rows(section.data["items"]):
        print(
            f"{row.time_display:<16} {row.driver_display:<24} {row.alert_type:<16} "
            f"{row.eye_closed_display:>8}  alarm: {row.alarm_display}"
        )
    print(DashboardPresenter.page_nav(section.data).label)
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """
    Main CLI entry point for Driver Monitor Analytics.

    Parses command-line arguments and dispatches to the subcommand handler.

    Subcommands:
    - dashboard [--host HOST] [--port PORT]: Launch web dashboard
    - report [--start DATE] [--end DATE]: Print text analytics report
    - drivers [--search TEXT]: List drivers
    - recent [--page N] [--start DATE] [--end DATE]: Recent fatigue events

    Args:
        argv: Argument list; defaults to sys.argv[1:].

    Returns:
        Exit code (see module docstring).

    Raises:
        SystemExit: On --help or argument parsing errors.
    """
    from .__version__ import __version__

    parser = argparse.ArgumentParser(
        prog="driver-monitor",
        description="Driver Monitor Analytics - fatigue and emotion dashboards for fleets",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    dashboard_parser = subparsers.add_parser("dashboard", help="Launch web dashboard")
    dashboard_parser.add_argument(
        "--host",
        default=DEFAULT_HOST,
        help=f"Bind address (default: {DEFAULT_HOST})",
    )
    dashboard_parser.add_argument(
        "--port",
        type=int,
        default=DEFAULT_PORT,
        help=f"Port number (default: {DEFAULT_PORT})",
    )

    report_parser = subparsers.add_parser("report", help="Print analytics report to stdout")
    report_parser.add_argument("--start", default=None, help="Start date YYYY-MM-DD")
    report_parser.add_argument("--end", default=None, help="End date YYYY-MM-DD")

    drivers_parser = subparsers.add_parser("drivers", help="List drivers")
    drivers_parser.add_argument("--search", default="", help="Filter by name or email")

    recent_parser = subparsers.add_parser("recent", help="Show recent fatigue events")
    recent_parser.add_argument("--page", type=int, default=1, help="Page number (default: 1)")
    recent_parser.add_argument("--start", default=None, help="Start date YYYY-MM-DD")
    recent_parser.add_argument("--end", default=None, help="End date YYYY-MM-DD")

    args = parser.parse_args(argv)

    try:
        if args.command == "dashboard":
            run_dashboard(host=args.host, port=args.port)
            return EXIT_OK
        if args.command == "report":
            return run_report(args.start, args.end)
        if args.command == "drivers":
            return run_drivers(args.search)
        if args.command == "recent":
            return run_recent(args.page, args.start, args.end)
    except InvalidArgument as e:
        _get_logger().error("Invalid argument: %s", e)
        return EXIT_INVALID

    parser.print_help()
    return EXIT_FAILED


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
