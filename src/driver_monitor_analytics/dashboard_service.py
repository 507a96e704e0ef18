"""
Dashboard Service - view pipelines shared by the web app and the CLI.

PURPOSE: Query the event store for one view, aggregate, and report per-section status.
AI CONTEXT: This is the only layer that combines I/O with aggregation.

ARCHITECTURE:
    web routes ──┐
                 ├──► DashboardService ──► EventStore (async)
    CLI ─────────┘          │
                            ├──► SessionResolver
                            └──► buckets / categories / statistics / pagination

SECTION STATUS:
- ok:     query succeeded and returned rows
- empty:  query succeeded with zero rows (fully formed empty aggregation)
- failed: query failed; other sections of the same view still render

VIEWS:
- overview:               7-day fatigue series, top emotions, recent events
- fatigue_details:        date-filtered fatigue events with summary and series
- emotion_details:        date-filtered emotions with distribution and per-driver split
- driver_details:         one driver's sessions -> both event kinds, 30-day series
- recent_fatigue_events:  paginated fatigue table
- list_drivers:           searchable driver list

FILTERED VIEWS:
    apply_filter(view, FilterState) routes fatigue, emotions, recent and
    driver views through one ViewStateHolder per view. A call overtaken by a
    newer filter for the same view returns None.

USAGE:
    service = DashboardService(JsonEventStore())
    view = await service.fatigue_details("2026-03-01", "2026-03-07")
    view.sections["fatigue"].data["series"]
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time, timedelta
from typing import TYPE_CHECKING, Any

from .buckets import bucket_by_day, default_window, window_from_range
from .categories import distribution, distribution_by_group, most_common, top_k
from .config import Config
from .errors import InvalidArgument, QueryFailure
from .filters import FilterState, ViewStateHolder
from .models import Driver, EmotionEvent, FatigueEvent, IncidentReport
from .pagination import page_bounds, paginate
from .sessions import SessionResolver
from .statistics import StatisticsEngine
from .store import QueryFilter

if TYPE_CHECKING:
    from .store import EventStore

__all__ = [
    "DashboardService",
    "Section",
    "ViewResult",
    "ActionResult",
    "STATUS_OK",
    "STATUS_EMPTY",
    "STATUS_FAILED",
    "FILTERED_VIEWS",
]

logger = logging.getLogger(__name__)

STATUS_OK = "ok"
STATUS_EMPTY = "empty"
STATUS_FAILED = "failed"

FILTERED_VIEWS = ("fatigue", "emotions", "recent", "driver")


@dataclass
class Section:
    """
    One independently loaded part of a view.

    Attributes:
        status: STATUS_OK, STATUS_EMPTY or STATUS_FAILED.
        data: Aggregated, JSON-ready values. Empty dict when failed.
        error: Adapter error text when failed.
    """

    status: str
    data: dict[str, Any] = field(default_factory=dict)
    error: str | None = None

    @property
    def failed(self) -> bool:
        """True when this section could not be loaded."""
        return self.status == STATUS_FAILED

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses; error is omitted unless set."""
        result: dict[str, Any] = {"status": self.status, "data": self.data}
        if self.error:
            result["error"] = self.error
        return result


@dataclass
class ViewResult:
    """
    Result of loading one dashboard view.

    Attributes:
        view: View name, e.g. 'fatigue_details'.
        filters: Filters that produced this result (for display and tagging).
        sections: Section name -> Section.
    """

    view: str
    filters: dict[str, Any] = field(default_factory=dict)
    sections: dict[str, Section] = field(default_factory=dict)

    @property
    def failed(self) -> bool:
        """True only if every section failed (whole view shows loading-failed)."""
        return bool(self.sections) and all(s.failed for s in self.sections.values())

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        return {
            "view": self.view,
            "filters": self.filters,
            "failed": self.failed,
            "sections": {name: s.to_dict() for name, s in self.sections.items()},
        }


@dataclass
class ActionResult:
    """
    Result from a write operation (driver CRUD, incident submission).

    Attributes:
        success: Whether the operation completed successfully.
        message: Human-readable result message.
        data: Optional dict with operation-specific data.
        error: Optional error message if success is False.
    """

    success: bool
    message: str
    data: dict[str, Any] | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dict, omitting empty data/error."""
        result: dict[str, Any] = {
            "success": self.success,
            "message": self.message,
        }
        if self.data:
            result["data"] = self.data
        if self.error:
            result["error"] = self.error
        return result


def parse_day(value: str | date | None, name: str) -> date | None:
    """
    Parse a 'YYYY-MM-DD' filter value.

    Args:
        value: Date string, date, or None / "" for "no bound".
        name: Parameter name for the error message.

    Returns:
        date or None.

    Raises:
        InvalidArgument: If the value is not a valid calendar date.

    Example:
        >>> parse_day('2026-03-01', 'start_date')
        datetime.date(2026, 3, 1)
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value.strip())
    except (ValueError, AttributeError) as e:
        raise InvalidArgument(f"{name} must be YYYY-MM-DD, got {value!r}") from e


def _range_filter(start: date | None, end: date | None) -> tuple[dict[str, str], dict[str, str]]:
    """gte/lte bounds on event_time: start-of-day for start, end-of-day for end."""
    gte: dict[str, str] = {}
    lte: dict[str, str] = {}
    if start is not None:
        gte["event_time"] = datetime.combine(start, time.min, tzinfo=UTC).isoformat()
    if end is not None:
        lte["event_time"] = datetime.combine(end, time.max, tzinfo=UTC).isoformat()
    return gte, lte


def _status_for(rows: list[Any]) -> str:
    return STATUS_OK if rows else STATUS_EMPTY


def _failed(error: QueryFailure) -> Section:
    return Section(status=STATUS_FAILED, error=str(error))


class DashboardService:
    """
    Loads dashboard views from an event store.

    Every view is recomputed from fresh queries; nothing is cached between
    calls. Driver-scoped views resolve sessions first and then read the two
    event tables concurrently.

    Example:
        >>> service = DashboardService(JsonEventStore())
        >>> view = await service.overview()
        >>> view.sections["fatigue"].data["series"]["counts"]
        [0, 2, 1, 0, 0, 3, 1]
    """

    def __init__(
        self,
        store: EventStore,
        statistics: StatisticsEngine | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """
        Initialize the service with its store and calculation dependencies.

        Args:
            store: EventStore implementation used for every read and write.
            statistics: StatisticsEngine for summaries. Default: StatisticsEngine()
            clock: Function returning "now" as an aware datetime. Default:
                current UTC time. Injected by tests for deterministic windows.
        """
        self.store = store
        self.statistics = statistics or StatisticsEngine()
        self.resolver = SessionResolver(store)
        self._clock = clock or (lambda: datetime.now(UTC))
        self._holders: dict[str, ViewStateHolder[ViewResult]] = {
            name: ViewStateHolder() for name in FILTERED_VIEWS
        }

    # =========================================================================
    # QUERY HELPERS
    # =========================================================================

    async def _fetch(self, table: str, flt: QueryFilter | None = None) -> list[dict[str, Any]]:
        """Run one query; raise QueryFailure if the store reports an error."""
        result = await self.store.query(table, flt)
        if not result.ok:
            logger.error("Query on %s failed: %s", table, result.error)
            raise QueryFailure(table, result.error or "unknown error")
        return result.data

    async def _try_fetch(
        self, table: str, flt: QueryFilter | None = None
    ) -> list[dict[str, Any]] | QueryFailure:
        """Like _fetch but returns the QueryFailure instead of raising."""
        try:
            return await self._fetch(table, flt)
        except QueryFailure as e:
            return e

    async def _driver_lookup(self) -> dict[Any, tuple[Any, str]]:
        """
        Map session_id -> (driver_id, driver_name).

        A failure here only costs the driver-name column, so it is logged
        and an empty mapping is returned.
        """
        sessions, drivers = await asyncio.gather(
            self._try_fetch(Config.TABLE_SESSIONS),
            self._try_fetch(Config.TABLE_DRIVERS),
        )
        if isinstance(sessions, QueryFailure) or isinstance(drivers, QueryFailure):
            logger.warning("Driver names unavailable; event rows will not be annotated")
            return {}
        names = {d.get("driver_id"): d.get("driver_name") or "" for d in drivers}
        return {
            s.get("session_id"): (s.get("driver_id"), names.get(s.get("driver_id"), ""))
            for s in sessions
        }

    @staticmethod
    def _annotate(row: dict[str, Any], lookup: dict[Any, tuple[Any, str]]) -> dict[str, Any]:
        """Attach driver_id / driver_name to a normalized event row."""
        driver_id, driver_name = lookup.get(row.get("session_id"), (None, ""))
        return {**row, "driver_id": driver_id, "driver_name": driver_name}

    def _detail_window(self, start: date | None, end: date | None) -> tuple[datetime, int]:
        """
        Window for detail charts.

        - start and end: inclusive range
        - start only: DETAIL_WINDOW_DAYS from start
        - end only: DETAIL_WINDOW_DAYS ending at end
        - neither: default window ending today
        """
        size = Config.DETAIL_WINDOW_DAYS
        if start is not None and end is not None:
            return window_from_range(start, end)
        if start is not None:
            return datetime.combine(start, time.min, tzinfo=UTC), size
        if end is not None:
            return datetime.combine(end - timedelta(days=size - 1), time.min, tzinfo=UTC), size
        return default_window(size, self._clock()), size

    # =========================================================================
    # FILTERED VIEWS
    # =========================================================================

    def holder(self, view: str) -> ViewStateHolder[ViewResult]:
        """Return the ViewStateHolder for one filtered view."""
        try:
            return self._holders[view]
        except KeyError:
            raise InvalidArgument(
                f"unknown view {view!r}; expected one of {', '.join(FILTERED_VIEWS)}"
            ) from None

    async def apply_filter(self, view: str, filter_state: FilterState) -> ViewResult | None:
        """
        Recompute a filtered view, keeping only the newest filter's result.

        Each view has its own holder, so a fatigue filter never discards an
        emotions result. The view is always rebuilt from fresh queries.

        Args:
            view: One of FILTERED_VIEWS.
            filter_state: Dates, driver and page to load.

        Returns:
            The ViewResult, or None if a newer filter for the same view was
            applied while this one was loading.

        Raises:
            InvalidArgument: If `view` is unknown or a date is malformed.
        """
        holder = self.holder(view)
        return await holder.apply(filter_state, self._loaders[view])

    @property
    def _loaders(self) -> dict[str, Callable[[FilterState], Any]]:
        return {
            "fatigue": lambda f: self.fatigue_details(f.start_date, f.end_date),
            "emotions": lambda f: self.emotion_details(f.start_date, f.end_date),
            "recent": lambda f: self.recent_fatigue_events(f.start_date, f.end_date, f.page),
            "driver": lambda f: self.driver_details(f.driver_id),
        }

    # =========================================================================
    # VIEWS
    # =========================================================================

    async def overview(self) -> ViewResult:
        """
        Admin overview for the last OVERVIEW_WINDOW_DAYS days.

        Loads drivers, fatigue events and emotions concurrently. Each
        becomes its own section so one failed table never blanks the
        others.

        Returns:
            ViewResult with sections:
            - drivers:  {count}
            - fatigue:  {series, summary, recent (5 newest, with driver names)}
            - emotions: {top (top-5 pairs), distribution, summary}
        """
        days = Config.OVERVIEW_WINDOW_DAYS
        window_start = default_window(days, self._clock())
        since = QueryFilter(
            gte={"event_time": window_start.isoformat()},
            order="event_time",
            descending=True,
        )
        drivers, fatigue_rows, emotion_rows, lookup = await asyncio.gather(
            self._try_fetch(Config.TABLE_DRIVERS),
            self._try_fetch(Config.TABLE_FATIGUE, since),
            self._try_fetch(Config.TABLE_EMOTIONS, since),
            self._driver_lookup(),
        )

        view = ViewResult(view="overview", filters={"window_days": days})

        if isinstance(drivers, QueryFailure):
            view.sections["drivers"] = _failed(drivers)
        else:
            view.sections["drivers"] = Section(_status_for(drivers), {"count": len(drivers)})

        if isinstance(fatigue_rows, QueryFailure):
            view.sections["fatigue"] = _failed(fatigue_rows)
        else:
            events = [FatigueEvent.from_dict(r).to_dict() for r in fatigue_rows]
            view.sections["fatigue"] = Section(
                _status_for(events),
                {
                    "series": bucket_by_day(events, window_start, days).to_dict(),
                    "summary": self.statistics.fatigue_summary(events).to_dict(),
                    "recent": [
                        self._annotate(e, lookup)
                        for e in events[: Config.OVERVIEW_RECENT_EVENTS]
                    ],
                },
            )

        if isinstance(emotion_rows, QueryFailure):
            view.sections["emotions"] = _failed(emotion_rows)
        else:
            events = [EmotionEvent.from_dict(r).to_dict() for r in emotion_rows]
            dist = distribution(events)
            view.sections["emotions"] = Section(
                _status_for(events),
                {
                    "top": [list(pair) for pair in top_k(dist, Config.TOP_EMOTIONS)],
                    "distribution": dist.to_dict(),
                    "summary": self.statistics.emotion_summary(events).to_dict(),
                },
            )
        return view

    async def fatigue_details(
        self,
        start_date: str | date | None = None,
        end_date: str | date | None = None,
    ) -> ViewResult:
        """
        Date-filtered fatigue events with summary cards and a day series.

        Business context: Safety analysts pick a date range and compare the
        event count, average eye-closure and alarms against the per-day
        trend, then drill into individual rows.

        Args:
            start_date: 'YYYY-MM-DD' lower bound (inclusive), optional.
            end_date: 'YYYY-MM-DD' upper bound (inclusive), optional.

        Returns:
            ViewResult with section 'fatigue': {events, summary, series}.
            Events are newest first and carry driver_id / driver_name.

        Raises:
            InvalidArgument: If a date is malformed or end precedes start.
        """
        start = parse_day(start_date, "start_date")
        end = parse_day(end_date, "end_date")
        window_start, window_size = self._detail_window(start, end)
        gte, lte = _range_filter(start, end)

        rows, lookup = await asyncio.gather(
            self._try_fetch(
                Config.TABLE_FATIGUE,
                QueryFilter(gte=gte, lte=lte, order="event_time", descending=True),
            ),
            self._driver_lookup(),
        )
        view = ViewResult(
            view="fatigue_details",
            filters={"start_date": start_date or None, "end_date": end_date or None},
        )
        if isinstance(rows, QueryFailure):
            view.sections["fatigue"] = _failed(rows)
            return view

        events = [self._annotate(FatigueEvent.from_dict(r).to_dict(), lookup) for r in rows]
        view.sections["fatigue"] = Section(
            _status_for(events),
            {
                "events": events,
                "summary": self.statistics.fatigue_summary(events).to_dict(),
                "series": bucket_by_day(events, window_start, window_size).to_dict(),
            },
        )
        return view

    async def emotion_details(
        self,
        start_date: str | date | None = None,
        end_date: str | date | None = None,
    ) -> ViewResult:
        """
        Date-filtered emotions with distribution, positive share and per-driver split.

        Args:
            start_date: 'YYYY-MM-DD' lower bound (inclusive), optional.
            end_date: 'YYYY-MM-DD' upper bound (inclusive), optional.

        Returns:
            ViewResult with section 'emotions':
            {events, total, most_common, positive_share, distribution, by_driver}.

        Raises:
            InvalidArgument: If a date is malformed.
        """
        start = parse_day(start_date, "start_date")
        end = parse_day(end_date, "end_date")
        gte, lte = _range_filter(start, end)

        rows, lookup = await asyncio.gather(
            self._try_fetch(
                Config.TABLE_EMOTIONS,
                QueryFilter(gte=gte, lte=lte, order="event_time", descending=True),
            ),
            self._driver_lookup(),
        )
        view = ViewResult(
            view="emotion_details",
            filters={"start_date": start_date or None, "end_date": end_date or None},
        )
        if isinstance(rows, QueryFailure):
            view.sections["emotions"] = _failed(rows)
            return view

        events = [self._annotate(EmotionEvent.from_dict(r).to_dict(), lookup) for r in rows]
        dist = distribution(events)
        summary = self.statistics.emotion_summary(events)
        by_driver = distribution_by_group(events, lambda e: e.get("driver_name") or None)
        view.sections["emotions"] = Section(
            _status_for(events),
            {
                "events": events,
                "total": summary.total,
                "most_common": most_common(dist, Config.NO_EMOTION_LABEL),
                "positive_share": summary.positive_share,
                "distribution": dist.to_dict(),
                "by_driver": {name: d.to_dict() for name, d in by_driver.items()},
            },
        )
        return view

    async def driver_details(self, driver_id: Any) -> ViewResult:
        """
        One driver's emotions and fatigue events over the last 30 days.

        Resolves the driver's sessions first, then reads emotions and
        fatigue events for those sessions concurrently. Aggregation waits
        for both reads and does not depend on which finished first.

        Business context: Supervisors open a driver to decide on coaching
        or rest; the page must show whichever event kind loaded even if
        the other table is down.

        Args:
            driver_id: Identifier of the driver.

        Returns:
            ViewResult with sections 'driver', 'fatigue' and 'emotions'.
            A driver without sessions yields 'empty' sections, not failures.
            If sessions cannot be resolved, both event sections fail.
        """
        view = ViewResult(view="driver_details", filters={"driver_id": driver_id})

        driver_rows, sessions = await asyncio.gather(
            self._try_fetch(Config.TABLE_DRIVERS, QueryFilter(eq={"driver_id": driver_id})),
            self._resolve(driver_id),
        )
        if isinstance(driver_rows, QueryFailure):
            view.sections["driver"] = _failed(driver_rows)
        elif driver_rows:
            view.sections["driver"] = Section(
                STATUS_OK, Driver.from_dict(driver_rows[0]).to_dict()
            )
        else:
            view.sections["driver"] = Section(STATUS_EMPTY)

        if isinstance(sessions, QueryFailure):
            view.sections["fatigue"] = _failed(sessions)
            view.sections["emotions"] = _failed(sessions)
            return view

        window_days = Config.DETAIL_WINDOW_DAYS
        window_start = default_window(window_days, self._clock())

        if not sessions:
            fatigue_rows: list[dict[str, Any]] | QueryFailure = []
            emotion_rows: list[dict[str, Any]] | QueryFailure = []
        else:
            scoped = QueryFilter(in_={"session_id": sessions}, order="event_time", descending=True)
            emotion_rows, fatigue_rows = await asyncio.gather(
                self._try_fetch(Config.TABLE_EMOTIONS, scoped),
                self._try_fetch(Config.TABLE_FATIGUE, scoped),
            )

        if isinstance(fatigue_rows, QueryFailure):
            view.sections["fatigue"] = _failed(fatigue_rows)
        else:
            events = [FatigueEvent.from_dict(r).to_dict() for r in fatigue_rows]
            summary = self.statistics.fatigue_summary(events)
            view.sections["fatigue"] = Section(
                _status_for(events),
                {
                    "events": events,
                    "summary": summary.to_dict(),
                    "alarms_triggered": summary.count_where,
                    "series": bucket_by_day(events, window_start, window_days).to_dict(),
                },
            )

        if isinstance(emotion_rows, QueryFailure):
            view.sections["emotions"] = _failed(emotion_rows)
        else:
            events = [EmotionEvent.from_dict(r).to_dict() for r in emotion_rows]
            view.sections["emotions"] = Section(
                _status_for(events),
                {
                    "events": events,
                    "distribution": distribution(events).to_dict(),
                    "summary": self.statistics.emotion_summary(events).to_dict(),
                },
            )
        return view

    async def _resolve(self, driver_id: Any) -> list[Any] | QueryFailure:
        try:
            return await self.resolver.resolve_sessions(driver_id)
        except QueryFailure as e:
            logger.error("Could not resolve sessions for driver %s: %s", driver_id, e)
            return e

    async def recent_fatigue_events(
        self,
        start_date: str | date | None = None,
        end_date: str | date | None = None,
        page: int = 1,
        page_size: int | None = None,
    ) -> ViewResult:
        """
        Paginated fatigue events, newest first.

        Args:
            start_date: 'YYYY-MM-DD' lower bound (inclusive), optional.
            end_date: 'YYYY-MM-DD' upper bound (inclusive), optional.
            page: Requested 1-based page; clamped into range.
            page_size: Rows per page. Default: Config.RECENT_EVENTS_PAGE_SIZE

        Returns:
            ViewResult with section 'events': PaginatedPage fields plus
            'previous_page' / 'next_page'.

        Raises:
            InvalidArgument: If a date is malformed or page_size < 1.
        """
        size = Config.RECENT_EVENTS_PAGE_SIZE if page_size is None else page_size
        start = parse_day(start_date, "start_date")
        end = parse_day(end_date, "end_date")
        gte, lte = _range_filter(start, end)

        rows, lookup = await asyncio.gather(
            self._try_fetch(
                Config.TABLE_FATIGUE,
                QueryFilter(gte=gte, lte=lte, order="event_time", descending=True),
            ),
            self._driver_lookup(),
        )
        view = ViewResult(
            view="recent_fatigue_events",
            filters={"start_date": start_date or None, "end_date": end_date or None, "page": page},
        )
        if isinstance(rows, QueryFailure):
            # Still validate page_size so bad input is reported consistently.
            paginate([], size, page)
            view.sections["events"] = _failed(rows)
            return view

        events = [self._annotate(FatigueEvent.from_dict(r).to_dict(), lookup) for r in rows]
        current = paginate(events, size, page)
        previous_page, next_page = page_bounds(current)
        view.sections["events"] = Section(
            _status_for(events),
            {**current.to_dict(), "previous_page": previous_page, "next_page": next_page},
        )
        return view

    async def list_drivers(self, search: str = "") -> ViewResult:
        """
        Drivers ordered by id, filtered by a case-insensitive name/email search.

        Returns:
            ViewResult with section 'drivers': {drivers, total}.
        """
        view = ViewResult(view="drivers", filters={"search": search})
        rows = await self._try_fetch(
            Config.TABLE_DRIVERS, QueryFilter(order="driver_id", descending=False)
        )
        if isinstance(rows, QueryFailure):
            view.sections["drivers"] = _failed(rows)
            return view
        drivers = [Driver.from_dict(r) for r in rows]
        matched = [d.to_dict() for d in drivers if d.matches(search)]
        view.sections["drivers"] = Section(
            _status_for(matched), {"drivers": matched, "total": len(drivers)}
        )
        return view

    async def build_report(
        self,
        start_date: str | date | None = None,
        end_date: str | date | None = None,
    ) -> str:
        """
        Text report over a date range (default: last DETAIL_WINDOW_DAYS days).

        Raises:
            QueryFailure: If any of the three tables cannot be read.
            InvalidArgument: If a date is malformed or end precedes start.
        """
        start = parse_day(start_date, "start_date")
        end = parse_day(end_date, "end_date")
        window_start, window_size = self._detail_window(start, end)
        window_end = window_start + timedelta(days=window_size)
        in_window = QueryFilter(
            gte={"event_time": window_start.isoformat()},
            lte={"event_time": (window_end - timedelta(microseconds=1)).isoformat()},
            order="event_time",
        )
        drivers, fatigue_rows, emotion_rows = await asyncio.gather(
            self._fetch(Config.TABLE_DRIVERS),
            self._fetch(Config.TABLE_FATIGUE, in_window),
            self._fetch(Config.TABLE_EMOTIONS, in_window),
        )
        series = bucket_by_day(fatigue_rows, window_start, window_size)
        return self.statistics.generate_summary_report(drivers, fatigue_rows, emotion_rows, series)

    # =========================================================================
    # WRITES
    # =========================================================================

    async def create_driver(self, driver_name: str, driver_email: str) -> ActionResult:
        """
        Create a driver. Name and email are required.

        Returns:
            ActionResult with the stored driver in data['driver'].
        """
        name, email = (driver_name or "").strip(), (driver_email or "").strip()
        if not name or not email:
            return ActionResult(
                success=False,
                message="Invalid driver",
                error="driver_name and driver_email are required",
            )
        result = await self.store.insert(
            Config.TABLE_DRIVERS,
            {
                "driver_name": name,
                "driver_email": email,
                "created_at": self._clock().isoformat(),
            },
        )
        if not result.ok:
            return ActionResult(success=False, message="Failed to create driver", error=result.error)
        driver = Driver.from_dict(result.data[0])
        logger.info("Created driver %s", driver.driver_id)
        return ActionResult(
            success=True,
            message=f"Driver created: {driver.driver_id}",
            data={"driver": driver.to_dict()},
        )

    async def update_driver(
        self, driver_id: Any, driver_name: str, driver_email: str
    ) -> ActionResult:
        """
        Rename / re-email a driver. Name and email are required.

        Returns:
            ActionResult with the updated driver in data['driver'].
        """
        name, email = (driver_name or "").strip(), (driver_email or "").strip()
        if not name or not email:
            return ActionResult(
                success=False,
                message="Invalid driver",
                error="driver_name and driver_email are required",
            )
        result = await self.store.update(
            Config.TABLE_DRIVERS, driver_id, {"driver_name": name, "driver_email": email}
        )
        if not result.ok:
            return ActionResult(success=False, message="Failed to update driver", error=result.error)
        return ActionResult(
            success=True,
            message=f"Driver updated: {driver_id}",
            data={"driver": Driver.from_dict(result.data[0]).to_dict()},
        )

    async def delete_driver(self, driver_id: Any) -> ActionResult:
        """Delete a driver by id."""
        result = await self.store.delete(Config.TABLE_DRIVERS, driver_id)
        if not result.ok:
            return ActionResult(success=False, message="Failed to delete driver", error=result.error)
        logger.info("Deleted driver %s", driver_id)
        return ActionResult(success=True, message=f"Driver deleted: {driver_id}")

    async def submit_incident(
        self,
        incident_date: str,
        incident_time: str,
        location: str,
        description: str,
        driver_state: str,
        driver_id: Any,
    ) -> ActionResult:
        """
        Store an incident report. Every field is required.

        Returns:
            ActionResult with the stored report in data['report'].
        """
        report = IncidentReport(
            incident_date=(incident_date or "").strip(),
            incident_time=(incident_time or "").strip(),
            location=(location or "").strip(),
            description=(description or "").strip(),
            driver_state=(driver_state or "").strip(),
            driver_id=driver_id,
            created_at=self._clock().isoformat(),
        )
        missing = report.missing_fields()
        if missing:
            return ActionResult(
                success=False,
                message="Incomplete incident report",
                error=f"missing fields: {', '.join(missing)}",
            )
        result = await self.store.insert(Config.TABLE_INCIDENTS, report.to_dict())
        if not result.ok:
            return ActionResult(
                success=False, message="Failed to report incident", error=result.error
            )
        stored = IncidentReport.from_dict(result.data[0])
        logger.info("Incident reported for driver %s", stored.driver_id)
        return ActionResult(
            success=True,
            message="Incident reported",
            data={"report": stored.to_dict()},
        )
