"""
FastAPI routes for the Driver Monitor Analytics dashboard.

PURPOSE: Thin route handlers that delegate to DashboardService and presenters.
AI CONTEXT: Routes should be simple - aggregation lives in the service layer.

ROUTE STRUCTURE:
- / : Overview page (full HTML)
- /charts/* : PNG chart images
- /api/* : JSON endpoints for every view, driver CRUD and incidents

Every route sits behind require_auth, which only rejects requests when
authentication is required (DMA_REQUIRE_AUTH) and the AuthState says the
operator is signed out.
"""

from __future__ import annotations

import html
from collections.abc import Sequence
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse, Response
from pydantic import BaseModel

from ..auth import AuthState
from ..categories import top_k
from ..config import Config
from ..dashboard_service import DashboardService, ViewResult
from ..errors import QueryFailure
from ..filters import FilterState
from ..models import CategoryDistribution
from ..presenters import ChartPresenter, DashboardPresenter
from ..statistics import StatisticsEngine
from ..store import JsonEventStore

__all__ = [
    "router",
    "get_store",
    "get_statistics",
    "get_service",
    "get_chart_presenter",
    "get_auth_state",
    "require_auth",
]

# =============================================================================
# Dependency Factory Functions
# =============================================================================


def get_store() -> JsonEventStore:
    """
    Create the event store used by route handlers.

    A new JsonEventStore per request so every view reads fresh files.

    Returns:
        JsonEventStore on Config.get_storage_dir().
    """
    return JsonEventStore()


def get_statistics() -> StatisticsEngine:
    """Create a StatisticsEngine with the configured positive emotions."""
    return StatisticsEngine()


def get_service() -> DashboardService:
    """
    Assemble the DashboardService with store and statistics dependencies.

    Business context: Each request recomputes its view from fresh queries,
    so filter changes never show numbers from an older filter.

    Returns:
        DashboardService ready to load any dashboard view.
    """
    return DashboardService(get_store(), get_statistics())


def get_chart_presenter() -> ChartPresenter:
    """Create the matplotlib chart presenter."""
    return ChartPresenter()


def get_auth_state(request: Request) -> AuthState:
    """Return the AuthState registered on the app by create_app()."""
    return request.app.state.auth_state


def require_auth(auth: Annotated[AuthState, Depends(get_auth_state)]) -> None:
    """
    Reject signed-out operators when authentication is required.

    Raises:
        HTTPException: 401 if DMA_REQUIRE_AUTH is enabled and the AuthState
            reports the operator as not authenticated.
    """
    if Config.is_auth_required() and not auth.is_authenticated():
        raise HTTPException(status_code=401, detail="Authentication required")


router = APIRouter(dependencies=[Depends(require_auth)])

ServiceDep = Annotated[DashboardService, Depends(get_service)]
ChartDep = Annotated[ChartPresenter, Depends(get_chart_presenter)]
DateParam = Annotated[str | None, Query(description="YYYY-MM-DD")]


class DriverPayload(BaseModel):
    """Body for creating or updating a driver."""

    driver_name: str
    driver_email: str


class IncidentPayload(BaseModel):
    """Body for an incident report."""

    incident_date: str
    incident_time: str
    location: str
    description: str
    driver_state: str
    driver_id: int


async def _filtered_view(
    service: DashboardService, view: str, filter_state: FilterState
) -> dict[str, Any]:
    result = await service.apply_filter(view, filter_state)
    if result is None:
        raise HTTPException(status_code=409, detail="Superseded by a newer filter")
    return result.to_dict()


def _action_response(result: Any, success_status: int = 200) -> JSONResponse:
    return JSONResponse(
        status_code=success_status if result.success else 400,
        content=result.to_dict(),
    )


# ============================================================================
# Full Page Routes
# ============================================================================


@router.get("/", response_class=HTMLResponse)
async def dashboard_page(service: ServiceDep) -> HTMLResponse:
    """
    Render the overview page: summary cards, charts and recent events.

    Failed sections render a "not available" panel; the rest of the page
    still shows.

    Returns:
        HTMLResponse with the complete overview page.
    """
    overview = await service.overview()
    return HTMLResponse(
        content=_render_dashboard_html(overview), media_type="text/html; charset=utf-8"
    )


# ============================================================================
# Chart Routes (PNG images)
# ============================================================================


def _chart_response(render: Any, title: str, *args: Any) -> Response:
    """Render a chart, falling back to an SVG placeholder without matplotlib."""
    try:
        return Response(content=render(*args), media_type="image/png")
    except ImportError:
        # matplotlib not installed - return placeholder
        return Response(content=_placeholder_chart_svg(title), media_type="image/svg+xml")


@router.get("/charts/overview-fatigue.png")
async def overview_fatigue_chart(service: ServiceDep, charts: ChartDep) -> Response:
    """7-day fatigue line chart for the overview page."""
    section = (await service.overview()).sections["fatigue"]
    if section.failed:
        return _chart_response(charts.render_placeholder, "Fatigue")
    return _chart_response(charts.render_fatigue_chart, "Fatigue", section.data["series"])


@router.get("/charts/overview-emotions.png")
async def overview_emotions_chart(service: ServiceDep, charts: ChartDep) -> Response:
    """Top-5 emotions bar chart for the overview page."""
    section = (await service.overview()).sections["emotions"]
    if section.failed:
        return _chart_response(charts.render_placeholder, "Emotions")
    return _chart_response(charts.render_emotion_chart, "Emotions", section.data["top"])


@router.get("/charts/fatigue.png")
async def fatigue_chart(
    service: ServiceDep,
    charts: ChartDep,
    start_date: DateParam = None,
    end_date: DateParam = None,
) -> Response:
    """Fatigue day series over the requested range (default: last 30 days)."""
    section = (await service.fatigue_details(start_date, end_date)).sections["fatigue"]
    if section.failed:
        return _chart_response(charts.render_placeholder, "Fatigue")
    return _chart_response(charts.render_fatigue_chart, "Fatigue", section.data["series"])


@router.get("/charts/emotions.png")
async def emotions_chart(
    service: ServiceDep,
    charts: ChartDep,
    start_date: DateParam = None,
    end_date: DateParam = None,
) -> Response:
    """Emotion distribution bar chart over the requested range."""
    section = (await service.emotion_details(start_date, end_date)).sections["emotions"]
    if section.failed:
        return _chart_response(charts.render_placeholder, "Emotions")
    dist = CategoryDistribution(dict(section.data["distribution"]))
    pairs = [list(p) for p in top_k(dist, len(dist.counts))]
    return _chart_response(charts.render_emotion_chart, "Emotions", pairs)


@router.get("/charts/emotions-by-driver.png")
async def emotions_by_driver_chart(
    service: ServiceDep,
    charts: ChartDep,
    start_date: DateParam = None,
    end_date: DateParam = None,
) -> Response:
    """Per-driver emotion breakdown as grouped bars."""
    section = (await service.emotion_details(start_date, end_date)).sections["emotions"]
    if section.failed:
        return _chart_response(charts.render_placeholder, "Emotions by driver")
    return _chart_response(
        charts.render_emotions_by_driver_chart, "Emotions by driver", section.data["by_driver"]
    )


@router.get("/charts/drivers/{driver_id}/fatigue.png")
async def driver_fatigue_chart(driver_id: int, service: ServiceDep, charts: ChartDep) -> Response:
    """30-day fatigue series for one driver."""
    section = (await service.driver_details(driver_id)).sections["fatigue"]
    if section.failed:
        return _chart_response(charts.render_placeholder, "Driver fatigue")
    return _chart_response(charts.render_fatigue_chart, "Driver fatigue", section.data["series"])


# ============================================================================
# API Routes (JSON)
# ============================================================================


@router.get("/api/overview")
async def api_overview(service: ServiceDep) -> dict[str, Any]:
    """
    Overview view as JSON.

    Returns:
        ViewResult dict with 'drivers', 'fatigue' and 'emotions' sections,
        each carrying its own status (ok / empty / failed).

    Example:
        >>> # GET /api/overview
        >>> {"view": "overview", "failed": false, "sections": {"fatigue": {"status": "ok", ...}}}
    """
    return (await service.overview()).to_dict()


@router.get("/api/fatigue")
async def api_fatigue(
    service: ServiceDep,
    start_date: DateParam = None,
    end_date: DateParam = None,
) -> dict[str, Any]:
    """Date-filtered fatigue events, summary and day series."""
    return await _filtered_view(service, "fatigue", FilterState(start_date, end_date))


@router.get("/api/fatigue/recent")
async def api_recent_fatigue(
    service: ServiceDep,
    start_date: DateParam = None,
    end_date: DateParam = None,
    page: int = 1,
    page_size: int | None = None,
) -> dict[str, Any]:
    """One page of recent fatigue events (10 per page by default)."""
    view = await service.recent_fatigue_events(start_date, end_date, page, page_size)
    return view.to_dict()


@router.get("/api/emotions")
async def api_emotions(
    service: ServiceDep,
    start_date: DateParam = None,
    end_date: DateParam = None,
) -> dict[str, Any]:
    """Date-filtered emotions with distribution and per-driver breakdown."""
    return await _filtered_view(service, "emotions", FilterState(start_date, end_date))


@router.get("/api/drivers")
async def api_list_drivers(service: ServiceDep, search: str = "") -> dict[str, Any]:
    """Drivers matching a name/email search."""
    return (await service.list_drivers(search)).to_dict()


@router.post("/api/drivers")
async def api_create_driver(payload: DriverPayload, service: ServiceDep) -> JSONResponse:
    """Create a driver; 201 on success, 400 on validation or store errors."""
    result = await service.create_driver(payload.driver_name, payload.driver_email)
    return _action_response(result, success_status=201)


@router.get("/api/drivers/{driver_id}")
async def api_driver_details(driver_id: int, service: ServiceDep) -> dict[str, Any]:
    """One driver's profile, fatigue and emotion sections."""
    return await _filtered_view(service, "driver", FilterState(driver_id=driver_id))


@router.put("/api/drivers/{driver_id}")
async def api_update_driver(
    driver_id: int, payload: DriverPayload, service: ServiceDep
) -> JSONResponse:
    """Update a driver's name and email."""
    result = await service.update_driver(driver_id, payload.driver_name, payload.driver_email)
    return _action_response(result)


@router.delete("/api/drivers/{driver_id}")
async def api_delete_driver(driver_id: int, service: ServiceDep) -> JSONResponse:
    """Delete a driver."""
    return _action_response(await service.delete_driver(driver_id))


@router.post("/api/incidents")
async def api_submit_incident(payload: IncidentPayload, service: ServiceDep) -> JSONResponse:
    """Submit an incident report; 201 on success."""
    result = await service.submit_incident(**payload.model_dump())
    return _action_response(result, success_status=201)


@router.get("/api/report")
async def api_report(
    service: ServiceDep,
    start_date: DateParam = None,
    end_date: DateParam = None,
) -> dict[str, str]:
    """
    Text analytics report wrapped in JSON.

    Raises:
        HTTPException: 503 if any table needed by the report cannot be read.
    """
    try:
        report = await service.build_report(start_date, end_date)
    except QueryFailure as e:
        raise HTTPException(status_code=503, detail=str(e)) from e
    return {"report": report}


# ============================================================================
# Template Rendering Helpers
# ============================================================================


def _placeholder_chart_svg(title: str) -> bytes:
    """
    Placeholder SVG used when matplotlib is unavailable.

    Example:
        >>> b'Fatigue Chart' in _placeholder_chart_svg('Fatigue')
        True
    """
    svg = f"""<svg xmlns="http://www.w3.org/2000/svg" width="400" height="200">
        <rect width="100%" height="100%" fill="#f1f5f9"/>
        <text x="50%" y="50%" text-anchor="middle" fill="#64748b" font-size="16">
            {html.escape(title)} Chart (install matplotlib)
        </text>
    </svg>"""
    return svg.encode("utf-8")


_DASHBOARD_CSS = """
:root {
    --bg: #0f172a;
    --surface: #1e293b;
    --border: #334155;
    --text: #f1f5f9;
    --text-muted: #94a3b8;
    --danger: #ef4444;
}
* { box-sizing: border-box; margin: 0; padding: 0; }
body { font-family: system-ui, sans-serif; background: var(--bg); color: var(--text); padding: 1rem; }
.container { max-width: 1200px; margin: 0 auto; }
h1 { font-size: 1.5rem; margin-bottom: 1rem; }
.grid { display: grid; grid-template-columns: repeat(auto-fit, minmax(220px, 1fr)); gap: 1rem; }
.panel { background: var(--surface); border: 1px solid var(--border); border-radius: 0.5rem;
         padding: 1rem; margin-bottom: 1rem; }
.panel h2 { font-size: 1rem; color: var(--text-muted); margin-bottom: 0.5rem; }
.metric { font-size: 2rem; font-weight: 700; }
.unavailable { color: var(--text-muted); font-style: italic; }
table { width: 100%; border-collapse: collapse; }
th, td { text-align: left; padding: 0.5rem; border-bottom: 1px solid var(--border); }
.alarm-on { color: var(--danger); font-weight: 600; }
img { max-width: 100%; }
"""


def _render_card(title: str, value: str) -> str:
    return f'<div class="panel"><h2>{html.escape(title)}</h2><div class="metric">{value}</div></div>'


def _render_events_table(events: Sequence[dict[str, Any]]) -> str:
    """Recent fatigue events as an HTML table."""
    if not events:
        return '<p class="unavailable">No fatigue events in this window</p>'
    rows = "".join(
        f"<tr><td>{html.escape(row.time_display)}</td>"
        f"<td>{html.escape(row.driver_display)}</td>"
        f"<td>{html.escape(row.alert_type)}</td>"
        f"<td>{row.eye_closed_display}</td>"
        f'<td class="{row.alarm_class}">{row.alarm_display}</td></tr>'
        for row in DashboardPresenter.event_rows(events)
    )
    return (
        "<table><thead><tr><th>Time</th><th>Driver</th><th>Alert</th>"
        "<th>Eyes closed</th><th>Alarm</th></tr></thead>"
        f"<tbody>{rows}</tbody></table>"
    )


def _render_dashboard_html(overview: ViewResult) -> str:
    """
    Render the overview page from an overview ViewResult.

    Args:
        overview: Result of DashboardService.overview().

    Returns:
        Complete HTML document.
    """
    drivers = overview.sections["drivers"]
    fatigue = overview.sections["fatigue"]
    emotions = overview.sections["emotions"]
    fatigue_cards = DashboardPresenter.summary_cards(fatigue)
    emotion_cards = DashboardPresenter.summary_cards(emotions)

    driver_count = "-" if drivers.failed else str(drivers.data.get("count", 0))
    if fatigue.failed:
        events_html = '<p class="unavailable">Fatigue data not available</p>'
    else:
        events_html = _render_events_table(fatigue.data.get("recent", []))

    cards = "".join(
        [
            _render_card("Drivers", driver_count),
            _render_card(
                f"Fatigue events ({Config.OVERVIEW_WINDOW_DAYS} days)", fatigue_cards.total_display
            ),
            _render_card("Avg. eyes closed", fatigue_cards.mean_display),
            _render_card("Alarms triggered", fatigue_cards.count_display),
            _render_card("Positive emotions", emotion_cards.positive_share_display),
        ]
    )

    return f"""<!DOCTYPE html>
<html lang="es">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Driver Monitor - Dashboard</title>
    <style>
        {_DASHBOARD_CSS}
    </style>
</head>
<body>
    <div class="container">
        <h1>Driver Monitor</h1>
        <div class="grid">{cards}</div>
        <div class="panel">
            <h2>Fatigue per day ({Config.OVERVIEW_WINDOW_DAYS} days)</h2>
            <img src="/charts/overview-fatigue.png" alt="Fatigue Chart">
        </div>
        <div class="panel">
            <h2>Top emotions</h2>
            <img src="/charts/overview-emotions.png" alt="Emotions Chart">
        </div>
        <div class="panel">
            <h2>Recent fatigue events</h2>
            {events_html}
        </div>
    </div>
</body>
</html>"""
