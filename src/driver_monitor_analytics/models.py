"""
Data models for Driver Monitor Analytics.

PURPOSE: Type-safe dataclasses for stored records and derived analytics.
AI CONTEXT: Stored rows come from the event store as dicts; derived values
are recomputed on every view load and never persisted.

MODEL HIERARCHY:
- Driver: Person being monitored (has many DriverSessions)
- DriverSession: One monitored drive (has many FatigueEvents, EmotionEvents)
- FatigueEvent: Eye-closure / drowsiness alert within a session
- EmotionEvent: Detected emotion label within a session
- IncidentReport: Manually submitted incident for a driver

DERIVED MODELS:
- DayBucketSeries: Fixed-length per-day counts plus labels
- CategoryDistribution: Label -> count in first-seen order
- SummaryStats: Total, mean and predicate count for a filtered set
- PaginatedPage: One page of an ordered list with clamped navigation

SERIALIZATION:
Stored models have to_dict() and from_dict(). from_dict() never raises for
missing fields: numbers default to 0, flags to False, text to "".
Timestamps use ISO 8601; a trailing 'Z' is accepted.

USAGE:
    event = FatigueEvent.from_dict(row)
    if event.timestamp is not None:
        ...
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from datetime import UTC, date, datetime
from typing import Any


def parse_timestamp(value: Any) -> datetime | None:
    """
    Parse an ISO 8601 timestamp into a timezone-aware UTC datetime.

    Accepts datetime objects, date objects (midnight UTC) and ISO strings
    with 'Z' or numeric offsets. Naive values are treated as UTC so that
    every comparison in the aggregation layer happens on one timeline.

    Business context: Event rows come from devices and from the hosted
    database with mixed timestamp styles. Bucketing needs exact
    millisecond arithmetic, so everything is normalized to aware UTC.

    Args:
        value: Timestamp in any of the accepted forms, or None.

    Returns:
        Aware datetime in UTC, or None if value is empty or unparseable.

    Raises:
        None: Parsing failures return None.

    Example:
        >>> parse_timestamp('2026-03-05T10:00:00Z')
        datetime.datetime(2026, 3, 5, 10, 0, tzinfo=datetime.timezone.utc)
        >>> parse_timestamp('not a date') is None
        True
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def get_field(record: Any, name: str, default: Any = None) -> Any:
    """
    Read a field from a row dict or a model instance.

    Aggregators accept both raw store rows and dataclass models, so field
    access goes through here. Missing fields return default.

    Example:
        >>> get_field({'emotion': 'feliz'}, 'emotion')
        'feliz'
        >>> get_field(EmotionEvent(1, 1, '', 'triste'), 'emotion')
        'triste'
    """
    if isinstance(record, Mapping):
        return record.get(name, default)
    return getattr(record, name, default)


def _now_iso() -> str:
    """Current UTC time as an ISO 8601 string."""
    return datetime.now(UTC).isoformat()


def _as_float(value: Any) -> float:
    """Coerce a possibly missing numeric field to float, 0.0 on failure or NaN/inf."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


# =============================================================================
# STORED RECORDS
# =============================================================================


@dataclass
class Driver:
    """
    Monitored driver.

    Created, edited and deleted through the driver CRUD operations;
    read-only for the aggregation layer.
    """

    driver_id: int
    driver_name: str
    driver_email: str
    created_at: str = ""

    def matches(self, search: str) -> bool:
        """
        Check whether the driver matches a free-text search.

        Case-insensitive substring match on name or email. An empty
        search matches every driver.

        Args:
            search: Text typed into the driver search box.

        Returns:
            True if search is empty or found in name or email.

        Example:
            >>> Driver(1, 'Ana Ruiz', 'ana@fleet.io').matches('RUIZ')
            True
        """
        needle = search.strip().lower()
        if not needle:
            return True
        return needle in self.driver_name.lower() or needle in self.driver_email.lower()

    def to_dict(self) -> dict[str, Any]:
        """Convert to a row dict for the drivers table."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Driver:
        """Build from a drivers row, defaulting missing fields."""
        return cls(
            driver_id=data.get("driver_id", 0),
            driver_name=data.get("driver_name") or "",
            driver_email=data.get("driver_email") or "",
            created_at=data.get("created_at") or "",
        )


@dataclass
class DriverSession:
    """Link between one monitored drive and its driver. Immutable once created."""

    session_id: int
    driver_id: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to a row dict for the driver_sessions table."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DriverSession:
        """Build from a driver_sessions row."""
        return cls(
            session_id=data.get("session_id", 0),
            driver_id=data.get("driver_id", 0),
        )


@dataclass
class FatigueEvent:
    """
    Drowsiness alert recorded during a session.

    FIELDS:
    - alert_type: Detector label, e.g. "microsueño", "bostezo"
    - eye_closed_seconds: Non-negative seconds with eyes closed
    - alarm_triggered: Whether the in-cab alarm sounded
    """

    event_id: int
    session_id: int
    event_time: str
    alert_type: str = ""
    eye_closed_seconds: float = 0.0
    alarm_triggered: bool = False

    @property
    def timestamp(self) -> datetime | None:
        """Parsed event_time in UTC, or None if missing/invalid."""
        return parse_timestamp(self.event_time)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a row dict for the fatigue_events table."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FatigueEvent:
        """
        Build from a fatigue_events row.

        Negative eye_closed_seconds values are clamped to 0 since the
        detector only reports durations. alarm_triggered is only True for a
        real boolean True; strings such as "false" are not alarms.
        """
        return cls(
            event_id=data.get("event_id", 0),
            session_id=data.get("session_id", 0),
            event_time=data.get("event_time") or "",
            alert_type=data.get("alert_type") or "",
            eye_closed_seconds=max(0.0, _as_float(data.get("eye_closed_seconds"))),
            alarm_triggered=data.get("alarm_triggered") is True,
        )


@dataclass
class EmotionEvent:
    """
    Emotion detected during a session.

    The emotion label is free text ("Feliz", "cansado", ...). Display keeps
    the original casing; classification lower-cases it.
    """

    emotion_id: int
    session_id: int
    event_time: str
    emotion: str = ""

    @property
    def timestamp(self) -> datetime | None:
        """Parsed event_time in UTC, or None if missing/invalid."""
        return parse_timestamp(self.event_time)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a row dict for the emotions table."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EmotionEvent:
        """Build from an emotions row."""
        return cls(
            emotion_id=data.get("emotion_id", 0),
            session_id=data.get("session_id", 0),
            event_time=data.get("event_time") or "",
            emotion=data.get("emotion") or "",
        )


@dataclass
class IncidentReport:
    """
    Incident reported by a fleet supervisor.

    All descriptive fields are required; report_id is assigned by the store.
    """

    incident_date: str
    incident_time: str
    location: str
    description: str
    driver_state: str
    driver_id: int | None
    created_at: str = field(default_factory=_now_iso)
    report_id: int | None = None

    REQUIRED_FIELDS = (
        "incident_date",
        "incident_time",
        "location",
        "description",
        "driver_state",
    )

    def missing_fields(self) -> list[str]:
        """
        List required fields that are blank.

        Returns:
            Names of blank required fields plus 'driver_id' when no driver
            was chosen. Empty list when the report is complete.

        Example:
            >>> IncidentReport('2026-03-01', '', 'km 45', 'x', 'cansado', 3).missing_fields()
            ['incident_time']
        """
        missing = [name for name in self.REQUIRED_FIELDS if not str(getattr(self, name)).strip()]
        if self.driver_id is None:
            missing.append("driver_id")
        return missing

    def to_dict(self) -> dict[str, Any]:
        """Convert to a row dict, omitting report_id until assigned."""
        data = asdict(self)
        if self.report_id is None:
            data.pop("report_id")
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> IncidentReport:
        """Build from an incident_reports row."""
        return cls(
            incident_date=data.get("incident_date") or "",
            incident_time=data.get("incident_time") or "",
            location=data.get("location") or "",
            description=data.get("description") or "",
            driver_state=data.get("driver_state") or "",
            driver_id=data.get("driver_id"),
            created_at=data.get("created_at") or "",
            report_id=data.get("report_id"),
        )


# =============================================================================
# DERIVED ANALYTICS
# =============================================================================


@dataclass
class DayBucketSeries:
    """
    Per-day event counts over a fixed window.

    INVARIANT: len(labels) == len(counts) == window size, whatever the
    number of events. Index i is the day start + i days.
    """

    start: date
    labels: list[str]
    counts: list[int]

    @property
    def size(self) -> int:
        """Number of day buckets in the window."""
        return len(self.counts)

    @property
    def total(self) -> int:
        """Number of events that landed inside the window."""
        return sum(self.counts)

    def as_pairs(self) -> list[tuple[str, int]]:
        """Return (label, count) pairs in day order."""
        return list(zip(self.labels, self.counts, strict=True))

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        return {
            "start": self.start.isoformat(),
            "labels": list(self.labels),
            "counts": list(self.counts),
        }


@dataclass
class CategoryDistribution:
    """
    Label -> count mapping in first-seen order.

    Labels are kept exactly as observed; insertion order is the order in
    which each label first appeared in the source list and is used to break
    ties when ranking.
    """

    counts: dict[str, int] = field(default_factory=dict)

    @property
    def total(self) -> int:
        """Sum of all counts."""
        return sum(self.counts.values())

    @property
    def labels(self) -> list[str]:
        """Labels in first-seen order."""
        return list(self.counts)

    def get(self, label: str) -> int:
        """Count for a label, 0 if never observed."""
        return self.counts.get(label, 0)

    def to_dict(self) -> dict[str, int]:
        """Serialize for JSON responses."""
        return dict(self.counts)


@dataclass
class SummaryStats:
    """
    Scalar aggregates for one filtered event set.

    mean is 0.0 for an empty set, never NaN.
    """

    total: int = 0
    mean: float = 0.0
    count_where: int = 0
    positive_share: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        return asdict(self)


@dataclass
class PaginatedPage:
    """One page of an ordered list. page_number is always within [1, total_pages]."""

    items: list[Any]
    page_number: int
    total_pages: int
    page_size: int
    total_items: int

    @property
    def has_previous(self) -> bool:
        """True unless this is the first page."""
        return self.page_number > 1

    @property
    def has_next(self) -> bool:
        """True unless this is the last page."""
        return self.page_number < self.total_pages

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses; items must already be JSON-ready."""
        return {
            "items": list(self.items),
            "page_number": self.page_number,
            "total_pages": self.total_pages,
            "page_size": self.page_size,
            "total_items": self.total_items,
            "has_previous": self.has_previous,
            "has_next": self.has_next,
        }
