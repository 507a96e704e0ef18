"""
Day-window bucketing for event time series.

PURPOSE: Count timestamped events per calendar day over a fixed window.
AI CONTEXT: Pure functions - no I/O, no clock reads unless `now` is omitted.

WINDOW MATH:
- A window is (start, N): days start, start+1d, ..., start+(N-1)d
- day_index = floor((event_ts - start) / 86_400_000 ms)
- 0 <= day_index < N  -> counted in that bucket
- anything else       -> dropped (never clipped into an edge bucket)
- Labels come from the window alone, so output length is always N

DEFAULT WINDOW:
    today - (N-1) days .. today, start at 00:00 UTC

EXPLICIT RANGE:
    N = floor((end - start) / 1 day) + 1   (both endpoints inclusive)

USAGE:
    start = default_window(7)
    series = bucket_by_day(fatigue_rows, start, 7)
    series.labels  # ['12 oct', ..., '18 oct']
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, date, datetime, timedelta
from typing import Any

from .config import Config
from .errors import InvalidArgument
from .models import DayBucketSeries, get_field, parse_timestamp

__all__ = [
    "start_of_day",
    "default_window",
    "window_from_range",
    "day_label",
    "window_labels",
    "bucket_by_day",
]

_ONE_MS = timedelta(milliseconds=1)


def _require_window_size(window_size_days: int) -> None:
    if not isinstance(window_size_days, int) or window_size_days < 1:
        raise InvalidArgument(f"window_size_days must be >= 1, got {window_size_days!r}")


def _to_instant(value: datetime | date | str, name: str) -> datetime:
    """Normalize a window boundary to an aware UTC datetime."""
    parsed = parse_timestamp(value)
    if parsed is None:
        raise InvalidArgument(f"{name} is not a valid date: {value!r}")
    return parsed


def start_of_day(moment: datetime | date | str) -> datetime:
    """
    Truncate a moment to 00:00 UTC of its day.

    Example:
        >>> start_of_day('2026-03-05T17:45:00Z')
        datetime.datetime(2026, 3, 5, 0, 0, tzinfo=datetime.timezone.utc)
    """
    instant = _to_instant(moment, "moment")
    return instant.replace(hour=0, minute=0, second=0, microsecond=0)


def default_window(window_size_days: int, now: datetime | None = None) -> datetime:
    """
    Start of the default lookback window ending today.

    The window covers today and the N-1 days before it, so the last bucket
    is always "today" and the first is "today - (N-1) days".

    Args:
        window_size_days: N, typically 7 (overview) or 30 (details).
        now: Reference moment. Default: current UTC time.

    Returns:
        Window start at 00:00 UTC.

    Raises:
        InvalidArgument: If window_size_days < 1.

    Example:
        >>> default_window(7, datetime(2026, 3, 7, 15, 0, tzinfo=UTC))
        datetime.datetime(2026, 3, 1, 0, 0, tzinfo=datetime.timezone.utc)
    """
    _require_window_size(window_size_days)
    today = start_of_day(now or datetime.now(UTC))
    return today - timedelta(days=window_size_days - 1)


def window_from_range(
    start: datetime | date | str,
    end: datetime | date | str,
) -> tuple[datetime, int]:
    """
    Window start and size for an explicit, inclusive date range.

    Both endpoints are inclusive: a range from March 1 to March 7 yields a
    7-day window. Getting this +1 wrong silently truncates the last day of
    the chart.

    Args:
        start: First day of the range (date, datetime or ISO string).
        end: Last day of the range (date, datetime or ISO string).

    Returns:
        (window_start, window_size_days). window_start is `start` as an
        aware UTC datetime, not truncated, so that day indices line up with
        the range the caller filtered by.

    Raises:
        InvalidArgument: If either bound is unparseable or end < start.

    Example:
        >>> window_from_range('2026-03-01', '2026-03-07')
        (datetime.datetime(2026, 3, 1, 0, 0, tzinfo=datetime.timezone.utc), 7)
    """
    start_at = _to_instant(start, "start")
    end_at = _to_instant(end, "end")
    if end_at < start_at:
        raise InvalidArgument(f"end {end_at.date()} is before start {start_at.date()}")
    elapsed_ms = (end_at - start_at) // _ONE_MS
    return start_at, elapsed_ms // Config.MS_PER_DAY + 1


def day_label(day: date | datetime) -> str:
    """
    Short day/month label for chart axes.

    Example:
        >>> day_label(date(2026, 9, 5))
        '5 sept'
    """
    return f"{day.day} {Config.MONTH_ABBREVIATIONS[day.month - 1]}"


def window_labels(window_start: datetime | date | str, window_size_days: int) -> list[str]:
    """
    Labels for every day of a window, independent of any events.

    Raises:
        InvalidArgument: If window_size_days < 1 or window_start is invalid.
    """
    _require_window_size(window_size_days)
    start_at = _to_instant(window_start, "window_start")
    return [day_label(start_at + timedelta(days=i)) for i in range(window_size_days)]


def bucket_by_day(
    events: Iterable[Any],
    window_start: datetime | date | str,
    window_size_days: int,
    timestamp_field: str = "event_time",
) -> DayBucketSeries:
    """
    Count events per day over a fixed window.

    Each event's day index is the floor of its millisecond offset from
    window_start divided by one day. Events before the window, at or after
    window_start + N days, or without a parseable timestamp are dropped.

    Business context: Fatigue trend charts must show one point per day even
    on quiet days, and must never pile out-of-range events into the first
    or last day, which would fake a spike at the chart edge.

    Args:
        events: Row dicts or models carrying timestamp_field.
        window_start: First instant of the window.
        window_size_days: N >= 1.
        timestamp_field: Name of the ISO 8601 timestamp field.

    Returns:
        DayBucketSeries with exactly N labels and N counts.

    Raises:
        InvalidArgument: If window_size_days < 1 or window_start is invalid.

    Example:
        >>> rows = [{'event_time': '2026-03-01T08:00:00Z'}, {'event_time': '2026-03-03T23:59:00Z'}]
        >>> bucket_by_day(rows, '2026-03-01', 3).counts
        [1, 0, 1]
    """
    labels = window_labels(window_start, window_size_days)
    start_at = _to_instant(window_start, "window_start")
    counts = [0] * window_size_days

    for event in events:
        instant = parse_timestamp(get_field(event, timestamp_field))
        if instant is None:
            continue
        day_index = ((instant - start_at) // _ONE_MS) // Config.MS_PER_DAY
        if 0 <= day_index < window_size_days:
            counts[day_index] += 1

    return DayBucketSeries(start=start_at.date(), labels=labels, counts=counts)
