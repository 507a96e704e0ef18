"""
Presenters for Driver Monitor Analytics dashboards.

PURPOSE: Turn ViewResult sections into display-ready view models and charts.
AI CONTEXT: Pure data transformation plus matplotlib rendering - no queries.

DESIGN PRINCIPLES:
1. Presenters receive already-aggregated section data, return view models
2. No dependencies on a specific UI framework
3. View models are unit-testable without mocking
4. ChartPresenter renders PNG bytes; matplotlib is imported lazily

USAGE:
    view = await service.fatigue_details(start, end)
    cards = DashboardPresenter.summary_cards(view.sections["fatigue"])
    png = ChartPresenter().render_fatigue_chart(view.sections["fatigue"].data["series"])
"""

from __future__ import annotations

import io
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from .config import Config
from .models import parse_timestamp

__all__ = [
    "SummaryCardsViewModel",
    "FatigueEventRowViewModel",
    "PageNavViewModel",
    "DashboardPresenter",
    "ChartPresenter",
]

# Chart color palette for consistent styling
FATIGUE_COLOR = "#ef4444"
EMOTION_COLORS: dict[str, str] = {
    "feliz": "#22c55e",
    "alerta": "#3b82f6",
    "calmado": "#14b8a6",
    "triste": "#6366f1",
    "enojado": "#f97316",
    "cansado": "#eab308",
    "default": "#94a3b8",
}

UNAVAILABLE = "-"


@dataclass
class SummaryCardsViewModel:
    """Values for the summary cards above a table."""

    total: int
    mean: float
    count_where: int
    positive_share: float
    failed: bool = False

    @property
    def total_display(self) -> str:
        """Event count, or a dash when the section failed to load."""
        return UNAVAILABLE if self.failed else str(self.total)

    @property
    def mean_display(self) -> str:
        """
        Mean eyes-closed time with unit.

        Business context: Analysts compare this against the ~2 s microsleep
        threshold, so one decimal place is enough and seconds are explicit.

        Returns:
            String like "2.3 s", or a dash when the section failed.

        Example:
            >>> SummaryCardsViewModel(total=3, mean=2.3, count_where=1, positive_share=0).mean_display
            '2.3 s'
        """
        if self.failed:
            return UNAVAILABLE
        return f"{self.mean:.{Config.MEAN_DECIMALS}f} s"

    @property
    def count_display(self) -> str:
        return UNAVAILABLE if self.failed else str(self.count_where)

    @property
    def positive_share_display(self) -> str:
        """Positive emotion percentage, e.g. "75.0%"."""
        return UNAVAILABLE if self.failed else f"{self.positive_share:.1f}%"


@dataclass
class FatigueEventRowViewModel:
    """One row of a fatigue events table."""

    event_id: Any
    event_time: str
    driver_name: str
    alert_type: str
    eye_closed_seconds: float
    alarm_triggered: bool

    @property
    def time_display(self) -> str:
        """
        Event time as "5 sept 14:30" in UTC.

        Returns:
            Short day/month plus HH:MM, or the raw value if it cannot be
            parsed.
        """
        ts = parse_timestamp(self.event_time)
        if ts is None:
            return self.event_time or UNAVAILABLE
        month = Config.MONTH_ABBREVIATIONS[ts.month - 1]
        return f"{ts.day} {month} {ts:%H:%M}"

    @property
    def driver_display(self) -> str:
        return self.driver_name or UNAVAILABLE

    @property
    def eye_closed_display(self) -> str:
        return f"{self.eye_closed_seconds:.1f} s"

    @property
    def alarm_display(self) -> str:
        return "Sí" if self.alarm_triggered else "No"

    @property
    def alarm_class(self) -> str:
        """CSS class for the alarm badge: "alarm-on" or "alarm-off"."""
        return "alarm-on" if self.alarm_triggered else "alarm-off"


@dataclass
class PageNavViewModel:
    """State of the previous/next controls under a paginated table."""

    page_number: int
    total_pages: int
    previous_page: int
    next_page: int
    has_previous: bool
    has_next: bool

    @property
    def label(self) -> str:
        """
        Position text under the table.

        Example:
            >>> PageNavViewModel(2, 5, 1, 3, True, True).label
            'Página 2 de 5'
        """
        return f"Página {self.page_number} de {self.total_pages}"


class DashboardPresenter:
    """
    Builds view models from ViewResult section data.

    Stateless: every method is a static transformation of the dicts that
    DashboardService puts into Section.data.
    """

    @staticmethod
    def summary_cards(section: Any) -> SummaryCardsViewModel:
        """
        Summary cards for a section carrying a 'summary' dict.

        Args:
            section: Section from a ViewResult.

        Returns:
            SummaryCardsViewModel; all zeros with failed=True when the
            section did not load.
        """
        if section.failed:
            return SummaryCardsViewModel(0, 0.0, 0, 0.0, failed=True)
        summary = section.data.get("summary", {})
        return SummaryCardsViewModel(
            total=int(summary.get("total", 0)),
            mean=float(summary.get("mean", 0.0)),
            count_where=int(summary.get("count_where", 0)),
            positive_share=float(summary.get("positive_share", 0.0)),
        )

    @staticmethod
    def event_rows(events: Sequence[Mapping[str, Any]]) -> list[FatigueEventRowViewModel]:
        """Table rows for normalized fatigue event dicts."""
        return [
            FatigueEventRowViewModel(
                event_id=e.get("event_id"),
                event_time=e.get("event_time") or "",
                driver_name=e.get("driver_name") or "",
                alert_type=e.get("alert_type") or "",
                eye_closed_seconds=float(e.get("eye_closed_seconds") or 0.0),
                alarm_triggered=e.get("alarm_triggered") is True,
            )
            for e in events
        ]

    @staticmethod
    def page_nav(page_data: Mapping[str, Any]) -> PageNavViewModel:
        """Navigation controls from a recent_fatigue_events 'events' section."""
        page_number = int(page_data.get("page_number", 1))
        total_pages = int(page_data.get("total_pages", 1))
        return PageNavViewModel(
            page_number=page_number,
            total_pages=total_pages,
            previous_page=int(page_data.get("previous_page", max(1, page_number - 1))),
            next_page=int(page_data.get("next_page", min(total_pages, page_number + 1))),
            has_previous=page_number > 1,
            has_next=page_number < total_pages,
        )


class ChartPresenter:
    """
    Presenter for generating chart images.

    Uses matplotlib for server-side chart rendering.
    Returns PNG images as bytes.
    """

    def __init__(self, dpi: int = 100) -> None:
        """
        Initialize chart presenter.

        Args:
            dpi: Resolution of rendered PNGs.
        """
        self.dpi = dpi

    @staticmethod
    def _pyplot() -> Any:
        # Lazy import matplotlib to keep it optional
        import matplotlib

        matplotlib.use("Agg")  # Non-interactive backend
        import matplotlib.pyplot as plt

        return plt

    def _to_png(self, plt: Any, fig: Any) -> bytes:
        buf = io.BytesIO()
        plt.tight_layout()
        plt.savefig(buf, format="png", dpi=self.dpi, bbox_inches="tight")
        plt.close(fig)
        buf.seek(0)
        return buf.read()

    def _render_placeholder(self, plt: Any, message: str) -> Any:
        """Figure with a centered message, used when there is nothing to plot."""
        fig, ax = plt.subplots(figsize=(8, 3))
        ax.text(0.5, 0.5, message, ha="center", va="center", fontsize=14)
        ax.set_xlim(0, 1)
        ax.set_ylim(0, 1)
        ax.axis("off")
        return fig

    def render_fatigue_chart(self, series: Mapping[str, Any], title: str = "Fatiga por día") -> bytes:
        """
        Render a day series of fatigue events as a line chart PNG.

        Every bucket is plotted, including zero days, so gaps in detection
        read as flat stretches instead of being skipped.

        Business context: The trend line is the first thing supervisors look
        at; a rising week means schedules or routes need attention.

        Args:
            series: DayBucketSeries.to_dict() output ({labels, counts, ...}).
            title: Chart title.

        Returns:
            PNG image as bytes.

        Raises:
            ImportError: If matplotlib is not installed. Caller should
                catch this and provide a fallback (e.g., placeholder SVG).
        """
        plt = self._pyplot()
        labels = list(series.get("labels", []))
        counts = list(series.get("counts", []))

        fig, ax = plt.subplots(figsize=(8, 3))
        positions = range(len(labels))
        ax.plot(positions, counts, color=FATIGUE_COLOR, marker="o", linewidth=2)
        ax.fill_between(positions, counts, color=FATIGUE_COLOR, alpha=0.1)
        ax.set_title(title)
        ax.set_ylabel("Eventos")
        ax.set_ylim(bottom=0)

        # Long windows get every Nth label so ticks stay readable
        step = max(1, len(labels) // 10)
        ax.set_xticks(list(positions)[::step])
        ax.set_xticklabels(labels[::step], rotation=45, ha="right")
        ax.spines["top"].set_visible(False)
        ax.spines["right"].set_visible(False)
        return self._to_png(plt, fig)

    def render_emotion_chart(
        self, pairs: Sequence[Sequence[Any]], title: str = "Emociones principales"
    ) -> bytes:
        """
        Render (label, count) pairs as a bar chart PNG.

        Args:
            pairs: Output of top_k() or distribution items, in display order.
            title: Chart title.

        Returns:
            PNG image as bytes. Shows placeholder text when pairs is empty.

        Raises:
            ImportError: If matplotlib is not installed.
        """
        plt = self._pyplot()
        if not pairs:
            fig = self._render_placeholder(plt, "Sin emociones registradas")
            return self._to_png(plt, fig)

        labels = [str(label) for label, _count in pairs]
        counts = [count for _label, count in pairs]
        colors = [
            EMOTION_COLORS.get(label.strip().lower(), EMOTION_COLORS["default"]) for label in labels
        ]

        fig, ax = plt.subplots(figsize=(6, 3))
        bars = ax.bar(labels, counts, color=colors)
        for bar, val in zip(bars, counts, strict=True):
            ax.text(
                bar.get_x() + bar.get_width() / 2,
                bar.get_height(),
                str(val),
                ha="center",
                va="bottom",
                fontsize=10,
            )
        ax.set_title(title)
        ax.set_ylabel("Registros")
        ax.spines["top"].set_visible(False)
        ax.spines["right"].set_visible(False)
        return self._to_png(plt, fig)

    def render_emotions_by_driver_chart(
        self, by_driver: Mapping[str, Mapping[str, int]]
    ) -> bytes:
        """
        Render per-driver emotion counts as grouped bars.

        Args:
            by_driver: driver name -> {emotion label: count}.

        Returns:
            PNG image as bytes. Shows placeholder text when no driver
            has a labelled emotion.

        Raises:
            ImportError: If matplotlib is not installed.
        """
        plt = self._pyplot()
        drivers = [d for d, counts in by_driver.items() if counts]
        emotions: list[str] = []
        for driver in drivers:
            for label in by_driver[driver]:
                if label not in emotions:
                    emotions.append(label)
        if not emotions:
            fig = self._render_placeholder(plt, "Sin emociones registradas")
            return self._to_png(plt, fig)

        width = 0.8 / len(emotions)
        fig, ax = plt.subplots(figsize=(8, 4))
        for i, label in enumerate(emotions):
            ax.bar(
                [x + i * width for x in range(len(drivers))],
                [by_driver[d].get(label, 0) for d in drivers],
                width=width,
                label=label,
                color=EMOTION_COLORS.get(label.strip().lower(), EMOTION_COLORS["default"]),
            )
        ax.set_xticks([x + width * (len(emotions) - 1) / 2 for x in range(len(drivers))])
        ax.set_xticklabels(drivers, rotation=30, ha="right")
        ax.set_title("Emociones por conductor")
        ax.set_ylabel("Registros")
        ax.legend(fontsize=8)
        ax.spines["top"].set_visible(False)
        ax.spines["right"].set_visible(False)
        return self._to_png(plt, fig)

    def render_placeholder(self, message: str = "Datos no disponibles") -> bytes:
        """
        Render a message-only PNG, used for failed sections.

        Raises:
            ImportError: If matplotlib is not installed.
        """
        plt = self._pyplot()
        return self._to_png(plt, self._render_placeholder(plt, message))
