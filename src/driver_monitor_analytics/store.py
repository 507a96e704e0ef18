"""
Event store adapter for Driver Monitor Analytics.

PURPOSE: Filtered reads (and the few writes) against the monitoring tables.
AI CONTEXT: Everything above this module sees rows as plain dicts and errors
as QueryResult.error - never as exceptions.

TABLES:
- drivers            {driver_id, driver_name, driver_email, created_at}
- driver_sessions    {session_id, driver_id}
- fatigue_events     {event_id, session_id, event_time, alert_type,
                      eye_closed_seconds, alarm_triggered}
- emotions           {emotion_id, session_id, event_time, emotion}
- incident_reports   {report_id, incident_date, incident_time, location,
                      description, driver_state, driver_id, created_at}

FILTERS (QueryFilter):
- eq:  column == value
- in_: column in [values]
- gte / lte: column >= / <= bound; ISO timestamps compare as instants
- order + descending: stable sort; rows missing the column sort last
- select: keep only the listed columns
- limit: keep the first N rows after ordering

ERROR HANDLING STRATEGY (JsonEventStore):
- Missing table file: empty table
- JSON corruption or OS error: log error, return QueryResult(error=...)
- Write failure: log error, return QueryResult(error=...)

USAGE:
    store = JsonEventStore()
    result = await store.query("fatigue_events", QueryFilter(in_={"session_id": [1, 2]}))
    if result.ok:
        rows = result.data
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

from .config import Config
from .filesystem import RealFileSystem
from .models import parse_timestamp

if TYPE_CHECKING:
    from .filesystem import FileSystem

__all__ = ["QueryFilter", "QueryResult", "EventStore", "JsonEventStore"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueryFilter:
    """
    Declarative filter for one table read.

    Mirrors the hosted query builder used by the dashboard:
    select / eq / in / gte / lte / order.
    """

    select: tuple[str, ...] | None = None
    eq: dict[str, Any] = field(default_factory=dict)
    in_: dict[str, list[Any]] = field(default_factory=dict)
    gte: dict[str, Any] = field(default_factory=dict)
    lte: dict[str, Any] = field(default_factory=dict)
    order: str | None = None
    descending: bool = False
    limit: int | None = None


@dataclass
class QueryResult:
    """
    Outcome of one adapter call.

    An empty data list with no error is a valid, successful empty read.
    """

    data: list[dict[str, Any]] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        """True when the adapter reported no error."""
        return self.error is None


class EventStore(Protocol):
    """
    Read interface over the driver, session and event tables.

    Implementations may talk to a hosted database or to local files; the
    aggregation layer only depends on this protocol.
    """

    async def query(self, table: str, flt: QueryFilter | None = None) -> QueryResult:
        """
        Run a filtered read.

        Args:
            table: Logical table name.
            flt: Filter to apply. None reads every row.

        Returns:
            QueryResult with rows, or with error set on failure.
        """
        ...

    async def insert(self, table: str, row: dict[str, Any]) -> QueryResult:
        """Insert a row; data holds the stored row (with its new key)."""
        ...

    async def update(self, table: str, key: Any, changes: dict[str, Any]) -> QueryResult:
        """Update the row whose key column equals key; data holds the updated row."""
        ...

    async def delete(self, table: str, key: Any) -> QueryResult:
        """Delete the row whose key column equals key; data holds the removed row."""
        ...


def _compare_value(value: Any) -> Any:
    """Normalize a cell for range comparison: timestamps become datetimes."""
    if isinstance(value, str):
        parsed = parse_timestamp(value)
        if parsed is not None:
            return parsed
    return value


def _in_range(cell: Any, bound: Any, *, lower: bool) -> bool:
    """Check cell >= bound (lower) or cell <= bound (upper); None never matches."""
    if cell is None:
        return False
    left = _compare_value(cell)
    right = _compare_value(bound)
    try:
        return left >= right if lower else left <= right
    except TypeError:
        return False


def apply_filter(rows: list[dict[str, Any]], flt: QueryFilter) -> list[dict[str, Any]]:
    """
    Apply a QueryFilter to in-memory rows.

    Business context: The JSON store and the test doubles both need the
    exact filter semantics of the hosted backend, so the logic lives in
    one function instead of in every adapter.

    Args:
        rows: Table rows in storage order.
        flt: Filter to apply.

    Returns:
        New list of (possibly projected) rows. Input rows are not mutated.

    Example:
        >>> rows = [{'id': 1, 't': '2026-01-02T00:00:00Z'}, {'id': 2, 't': '2026-01-05T00:00:00Z'}]
        >>> [r['id'] for r in apply_filter(rows, QueryFilter(gte={'t': '2026-01-03T00:00:00Z'}))]
        [2]
    """
    selected = []
    for row in rows:
        if any(row.get(col) != val for col, val in flt.eq.items()):
            continue
        if any(row.get(col) not in vals for col, vals in flt.in_.items()):
            continue
        if not all(_in_range(row.get(col), b, lower=True) for col, b in flt.gte.items()):
            continue
        if not all(_in_range(row.get(col), b, lower=False) for col, b in flt.lte.items()):
            continue
        selected.append(row)

    if flt.order:
        present = [r for r in selected if r.get(flt.order) is not None]
        missing = [r for r in selected if r.get(flt.order) is None]
        try:
            present.sort(key=lambda r: _compare_value(r[flt.order]), reverse=flt.descending)
        except TypeError:
            present.sort(key=lambda r: str(r[flt.order]), reverse=flt.descending)
        selected = present + missing

    if flt.limit is not None:
        selected = selected[: max(0, flt.limit)]

    if flt.select:
        return [{col: row.get(col) for col in flt.select} for row in selected]
    return [dict(row) for row in selected]


class JsonEventStore:
    """
    Event store backed by one JSON file per table.

    DESIGN PRINCIPLES:
    1. Fail-safe: I/O problems become QueryResult errors, never exceptions
    2. Predictable: Missing files read as empty tables
    3. Atomic writes: A table file is written to a temp path then renamed
    4. Testable: FileSystem can be injected for mocking

    THREAD SAFETY:
    Not thread-safe. Single writer assumed (one dashboard process).
    """

    TABLES: tuple[str, ...] = (
        Config.TABLE_DRIVERS,
        Config.TABLE_SESSIONS,
        Config.TABLE_FATIGUE,
        Config.TABLE_EMOTIONS,
        Config.TABLE_INCIDENTS,
    )

    def __init__(
        self,
        storage_dir: str | None = None,
        filesystem: FileSystem | None = None,
    ) -> None:
        """
        Initialize the store and create missing table files.

        Args:
            storage_dir: Directory holding table files.
                Default: Config.get_storage_dir()
            filesystem: FileSystem implementation. Default: RealFileSystem
        """
        self.storage_dir = storage_dir or Config.get_storage_dir()
        self._fs: FileSystem = filesystem or RealFileSystem()
        self._initialize_storage()

    def _initialize_storage(self) -> None:
        """Create the directory and empty table files. Logs instead of raising."""
        try:
            self._fs.makedirs(self.storage_dir, exist_ok=True)
            for table in self.TABLES:
                path = self.table_path(table)
                if not self._fs.exists(path):
                    self._write_table(table, [])
            logger.info("Event store initialized: %s", self.storage_dir)
        except OSError as e:
            logger.error("Failed to initialize event store: %s", e)

    def table_path(self, table: str) -> str:
        """Path of the JSON file for a table."""
        return os.path.join(self.storage_dir, f"{table}.json")

    def _read_table(self, table: str) -> list[dict[str, Any]]:
        """
        Read all rows of a table.

        Raises:
            ValueError: Table unknown, file is not valid JSON or not a list.
            OSError: File could not be read.
        """
        if table not in self.TABLES:
            raise ValueError(f"unknown table '{table}'")
        try:
            content = self._fs.read_text(self.table_path(table))
        except FileNotFoundError:
            return []
        data = json.loads(content)
        if not isinstance(data, list):
            raise ValueError(f"table '{table}' is not a JSON list")
        return [row for row in data if isinstance(row, dict)]

    def _write_table(self, table: str, rows: list[dict[str, Any]]) -> None:
        """Write all rows of a table through a temp file and rename."""
        path = self.table_path(table)
        tmp_path = f"{path}.tmp"
        self._fs.write_text(tmp_path, json.dumps(rows, indent=2, default=str, ensure_ascii=False))
        self._fs.rename(tmp_path, path)

    # =========================================================================
    # SYNC HELPERS (CLI seeding, tests)
    # =========================================================================

    def load_table(self, table: str) -> list[dict[str, Any]]:
        """
        Load a whole table, returning [] on any error.

        Returns:
            List of row dicts. Empty list if unavailable.
        """
        try:
            return self._read_table(table)
        except (OSError, ValueError) as e:
            logger.error("Error reading table %s: %s", table, e)
            return []

    def save_table(self, table: str, rows: list[dict[str, Any]]) -> bool:
        """
        Replace a whole table.

        Returns:
            True on success.
        """
        try:
            self._write_table(table, rows)
            return True
        except OSError as e:
            logger.error("Error writing table %s: %s", table, e)
            return False

    # =========================================================================
    # ADAPTER OPERATIONS
    # =========================================================================

    async def query(self, table: str, flt: QueryFilter | None = None) -> QueryResult:
        """
        Run a filtered read against one table.

        Args:
            table: Logical table name.
            flt: Filter to apply. None reads every row.

        Returns:
            QueryResult with matching rows, or with error set when the
            table is unknown or its file cannot be read or parsed.
        """
        try:
            rows = self._read_table(table)
        except (OSError, ValueError) as e:
            logger.error("Query on %s failed: %s", table, e)
            return QueryResult(error=str(e))
        return QueryResult(data=apply_filter(rows, flt or QueryFilter()))

    async def insert(self, table: str, row: dict[str, Any]) -> QueryResult:
        """
        Insert a row, assigning the next integer key when none is given.

        Returns:
            QueryResult whose data holds the stored row.
        """
        key = Config.table_key(table)
        try:
            rows = self._read_table(table)
            stored = dict(row)
            if stored.get(key) is None:
                existing = [r.get(key) for r in rows if isinstance(r.get(key), int)]
                stored[key] = max(existing, default=0) + 1
            rows.append(stored)
            self._write_table(table, rows)
        except (OSError, ValueError) as e:
            logger.error("Insert into %s failed: %s", table, e)
            return QueryResult(error=str(e))
        logger.info("Inserted %s %s=%s", table, key, stored[key])
        return QueryResult(data=[stored])

    async def update(self, table: str, key: Any, changes: dict[str, Any]) -> QueryResult:
        """
        Update the row identified by its key column.

        Returns:
            QueryResult with the updated row, or error 'not found'.
        """
        key_col = Config.table_key(table)
        try:
            rows = self._read_table(table)
            for row in rows:
                if row.get(key_col) == key:
                    row.update({k: v for k, v in changes.items() if k != key_col})
                    self._write_table(table, rows)
                    return QueryResult(data=[dict(row)])
        except (OSError, ValueError) as e:
            logger.error("Update of %s failed: %s", table, e)
            return QueryResult(error=str(e))
        return QueryResult(error=f"{table} row {key} not found")

    async def delete(self, table: str, key: Any) -> QueryResult:
        """
        Delete the row identified by its key column.

        Returns:
            QueryResult with the removed row, or error 'not found'.
        """
        key_col = Config.table_key(table)
        try:
            rows = self._read_table(table)
            kept = [r for r in rows if r.get(key_col) != key]
            if len(kept) == len(rows):
                return QueryResult(error=f"{table} row {key} not found")
            self._write_table(table, kept)
        except (OSError, ValueError) as e:
            logger.error("Delete from %s failed: %s", table, e)
            return QueryResult(error=str(e))
        removed = [r for r in rows if r.get(key_col) == key]
        logger.info("Deleted %s %s=%s", table, key_col, key)
        return QueryResult(data=removed)
