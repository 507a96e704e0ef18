"""
Statistics engine for Driver Monitor Analytics.

PURPOSE: Scalar summaries over filtered event sets, plus the text report.
AI CONTEXT: Pure data processing - no visualization, no I/O.

METRIC CATEGORIES:
1. Counts: total events, events matching a flag or predicate
2. Averages: mean of a numeric field (eye-closed seconds)
3. Shares: percentage of positive emotions
4. Report: plain-text digest combining series, distributions and summaries

DEGRADATION RULES:
- Empty input: total 0, mean 0.0, count 0 - never NaN, never an error
- Missing, non-numeric or non-finite value: counts as 0.0 toward the mean
- Missing flag or failing predicate: counts as False

USAGE:
    engine = StatisticsEngine()
    stats = engine.summarize(fatigue_rows, field="eye_closed_seconds", predicate="alarm_triggered")
    report = engine.generate_summary_report(drivers, fatigue_rows, emotion_rows, series)
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Sequence
from typing import Any

from .categories import distribution, most_common, positive_share, top_k
from .config import Config
from .models import DayBucketSeries, SummaryStats, get_field

__all__ = ["StatisticsEngine", "Predicate"]

Predicate = str | Callable[[Any], bool]


class StatisticsEngine:
    """
    Calculator for fatigue and emotion summary statistics.

    DESIGN:
    - Stateless: Each method operates on provided data
    - Pure: No side effects, only data transformation
    - Configurable: Positive emotion set and mean precision from Config or constructor
    """

    def __init__(
        self,
        positive_emotions: Iterable[str] | None = None,
        mean_decimals: int | None = None,
    ) -> None:
        """
        Initialize statistics engine with classification and rounding settings.

        Business context: Fleets disagree on which emotions are "positive".
        Injecting the set keeps that policy out of the aggregation code and
        lets one dashboard process serve a per-request override.

        Args:
            positive_emotions: Labels counted as favorable (any casing).
                Default: Config.get_positive_emotions()
            mean_decimals: Decimal places for means. Default: Config.MEAN_DECIMALS (1)

        Example:
            >>> engine = StatisticsEngine(positive_emotions={'Feliz'})
            >>> engine.positive_emotions
            frozenset({'feliz'})
        """
        source = positive_emotions if positive_emotions is not None else Config.get_positive_emotions()
        self.positive_emotions = frozenset(p.strip().lower() for p in source)
        self.mean_decimals = Config.MEAN_DECIMALS if mean_decimals is None else mean_decimals

    def mean(self, events: Sequence[Any], field: str) -> float:
        """
        Mean of a numeric field, rounded for display.

        Computes the arithmetic mean over every event. A missing,
        non-numeric or non-finite (NaN, inf) value counts as 0.0 rather
        than aborting the summary.

        Args:
            events: Row dicts or models.
            field: Numeric field name, e.g. 'eye_closed_seconds'.

        Returns:
            Mean rounded to mean_decimals places. 0.0 for no events.

        Example:
            >>> StatisticsEngine().mean([{'s': 1.0}, {'s': 2.5}, {}], 's')
            1.2
        """
        if not events:
            return 0.0
        total = 0.0
        for event in events:
            value = get_field(event, field)
            if isinstance(value, bool):
                continue
            try:
                number = float(value)
            except (TypeError, ValueError):
                continue
            if math.isfinite(number):
                total += number
        return round(total / len(events), self.mean_decimals)

    def count_where(self, events: Iterable[Any], predicate: Predicate) -> int:
        """
        Count events matching a boolean field or predicate function.

        Args:
            events: Row dicts or models.
            predicate: Field name whose value must be truthy, or a callable
                returning bool. A callable that raises KeyError, TypeError,
                AttributeError or ValueError for a malformed record counts
                that record as not matching.

        Returns:
            Number of matching events.

        Example:
            >>> StatisticsEngine().count_where([{'alarm_triggered': True}, {}], 'alarm_triggered')
            1
        """
        count = 0
        for event in events:
            if isinstance(predicate, str):
                matched = get_field(event, predicate) is True
            else:
                try:
                    matched = bool(predicate(event))
                except (KeyError, TypeError, AttributeError, ValueError):
                    matched = False
            if matched:
                count += 1
        return count

    def summarize(
        self,
        events: Sequence[Any],
        field: str | None = None,
        predicate: Predicate | None = None,
        category_field: str | None = None,
    ) -> SummaryStats:
        """
        Total, mean, predicate count and positive share for one event set.

        Each part is optional: without `field` the mean is 0.0, without
        `predicate` the count is 0, without `category_field` the positive
        share is 0.0. The scope (date range, driver) is whatever filter
        produced `events`.

        Business context: Summary cards above each table ("Total events",
        "Avg. eyes closed", "Alarms triggered", "Positive emotions") are all
        produced by this one call so they always agree with each other.

        Args:
            events: Filtered events.
            field: Numeric field to average.
            predicate: Flag name or callable to count.
            category_field: Categorical field for the positive share.

        Returns:
            SummaryStats.

        Example:
            >>> StatisticsEngine().summarize([], field='x', predicate='y')
            SummaryStats(total=0, mean=0.0, count_where=0, positive_share=0.0)
        """
        return SummaryStats(
            total=len(events),
            mean=self.mean(events, field) if field else 0.0,
            count_where=self.count_where(events, predicate) if predicate is not None else 0,
            positive_share=(
                positive_share(events, self.positive_emotions, category_field)
                if category_field
                else 0.0
            ),
        )

    def fatigue_summary(self, events: Sequence[Any]) -> SummaryStats:
        """Summary for fatigue events: mean eyes-closed seconds, alarms triggered."""
        return self.summarize(events, field="eye_closed_seconds", predicate="alarm_triggered")

    def emotion_summary(self, events: Sequence[Any]) -> SummaryStats:
        """Summary for emotion events: total and positive share."""
        return self.summarize(events, category_field="emotion")

    def generate_summary_report(
        self,
        drivers: Sequence[Any],
        fatigue_events: Sequence[Any],
        emotions: Sequence[Any],
        series: DayBucketSeries,
    ) -> str:
        """
        Generate a plain-text digest of fleet fatigue and emotion metrics.

        Combines driver count, fatigue summary, the per-day fatigue series,
        emotion summary and the top emotions into one report for terminals
        and log files.

        Business context: Supervisors without dashboard access get the same
        numbers by running the CLI report or piping it into an email.

        Args:
            drivers: Driver rows.
            fatigue_events: Fatigue rows within the report window.
            emotions: Emotion rows within the report window.
            series: Fatigue day series for the same window.

        Returns:
            Multi-line report string.

        Example:
            >>> print(engine.generate_summary_report(drivers, fatigue, emotions, series))
            ==================================================
            DRIVER MONITOR - ANALYTICS REPORT
            ...
        """
        fatigue = self.fatigue_summary(fatigue_events)
        mood = self.emotion_summary(emotions)
        dist = distribution(emotions)
        window_end = series.labels[-1] if series.labels else "-"
        window_start = series.labels[0] if series.labels else "-"

        lines = [
            "=" * 50,
            "DRIVER MONITOR - ANALYTICS REPORT",
            "=" * 50,
            f"Window: {window_start} .. {window_end} ({series.size} days)",
            "",
            "DRIVERS",
            f"  Registered drivers: {len(drivers)}",
            "",
            "FATIGUE",
            f"  Events: {fatigue.total}",
            f"  Avg. eyes closed: {fatigue.mean:.1f} s",
            f"  Alarms triggered: {fatigue.count_where}",
            "",
            "FATIGUE PER DAY",
        ]
        peak = max(series.counts, default=0)
        for label, count in series.as_pairs():
            bar = "#" * (round(count / peak * 20) if peak else 0)
            lines.append(f"  {label:>8} | {bar} {count}")

        lines.extend(
            [
                "",
                "EMOTIONS",
                f"  Events: {mood.total}",
                f"  Most common: {most_common(dist, Config.NO_EMOTION_LABEL)}",
                f"  Positive share: {mood.positive_share:.1f}%",
            ]
        )
        for label, count in top_k(dist, Config.TOP_EMOTIONS):
            lines.append(f"  - {label}: {count}")

        lines.extend(["", "=" * 50])
        return "\n".join(lines)
