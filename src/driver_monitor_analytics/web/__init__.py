"""
Web dashboard module for Driver Monitor Analytics.

PURPOSE: FastAPI-based dashboard and JSON API over the dashboard views.
AI CONTEXT: Presentation only - every number comes from DashboardService.

FEATURES:
- Overview page with summary cards and server-rendered charts
- JSON endpoints for every view, driver CRUD and incident reports
- Server-side chart rendering (matplotlib)
- Optional authentication gate driven by an injected AuthState

USAGE:
    # Via CLI
    driver-monitor dashboard

    # Programmatically
    from driver_monitor_analytics.web import create_app
    app = create_app()
    # Run with uvicorn
"""

from .app import create_app, run_dashboard

__all__ = ["create_app", "run_dashboard"]
