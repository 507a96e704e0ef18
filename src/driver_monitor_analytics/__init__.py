"""
Driver Monitor Analytics.

PURPOSE: Turn raw driver-monitoring records into dashboard analytics.
AI CONTEXT: Drivers own sessions; sessions own fatigue and emotion events.
This package reads those records through an event store adapter and derives
day series, emotion distributions, summary statistics and pages of events.

PACKAGE STRUCTURE:
- store.py: Event store adapter protocol and JSON reference implementation
- sessions.py: Driver -> session resolution
- buckets.py: Day windows and per-day event counts
- categories.py: Emotion distributions, top-K and positive share
- statistics.py: Scalar summaries and the text report
- pagination.py: Page slicing with clamped navigation
- filters.py: Filter state and last-filter-wins request tracking
- dashboard_service.py: View pipelines combining all of the above
- presenters.py: View models and matplotlib charts
- web/: FastAPI dashboard and JSON API
- cli.py: Command-line entry points

QUICK START:
    # Launch dashboard
    python -m driver_monitor_analytics dashboard

    # Print report for a date range
    python -m driver_monitor_analytics report --start 2026-03-01 --end 2026-03-07
"""

from driver_monitor_analytics.__version__ import (
    __author__,
    __copyright__,
    __description__,
    __license__,
    __title__,
    __url__,
    __version__,
    __version_date__,
)

__all__ = [
    "__version__",
    "__version_date__",
    "__title__",
    "__description__",
    "__url__",
    "__author__",
    "__license__",
    "__copyright__",
]
