"""
Error taxonomy for Driver Monitor Analytics.

PURPOSE: Distinguish failed reads from empty reads and from caller mistakes.
AI CONTEXT: Aggregations never raise for data-shape issues; only these do.

TAXONOMY:
- QueryFailure: The event store returned an error for a table read.
  Views catch it and show a loading-failed state for that section.
- InvalidArgument: A caller passed a malformed window size, page size or
  date range. Fatal to that call; validate at the boundary.
- Empty results are NOT errors: zero rows produce a fully formed, empty
  aggregation.
"""

from __future__ import annotations

__all__ = ["DashboardError", "QueryFailure", "InvalidArgument"]


class DashboardError(Exception):
    """Base class for all errors raised by this package."""


class QueryFailure(DashboardError):
    """
    A read against the event store failed.

    Attributes:
        table: Logical table that was being read.
        message: Error text reported by the adapter.
    """

    def __init__(self, table: str, message: str) -> None:
        self.table = table
        self.message = message
        super().__init__(f"Query on '{table}' failed: {message}")


class InvalidArgument(DashboardError, ValueError):
    """A caller supplied an argument outside the operation's contract."""
