"""
FastAPI application for the Driver Monitor Analytics dashboard.

PURPOSE: Application factory and server runner.
AI CONTEXT: Creates the app with routes, auth state and error handlers registered.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..__version__ import __version__
from ..auth import default_auth_state
from ..config import Config
from ..errors import InvalidArgument
from .routes import router

if TYPE_CHECKING:
    from ..auth import AuthState

__all__ = ["create_app", "run_dashboard"]

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:  # noqa: ARG001
    """
    Log dashboard startup and shutdown.

    Args:
        app: The FastAPI application instance (provided by FastAPI).

    Yields:
        None. Control returns to FastAPI to handle requests.
    """
    logger.info(
        "Driver Monitor dashboard starting (v%s, storage=%s, auth_required=%s)",
        __version__,
        Config.get_storage_dir(),
        Config.is_auth_required(),
    )
    yield
    logger.info("Driver Monitor dashboard shutting down")


async def _invalid_argument_handler(request: Request, exc: Exception) -> JSONResponse:
    """Map InvalidArgument (bad dates, page size) to HTTP 422."""
    logger.info("Rejected %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=422, content={"detail": str(exc)})


def create_app(auth_state: AuthState | None = None) -> FastAPI:
    """
    Create and configure the FastAPI dashboard application.

    Factory function so tests and uvicorn (factory=True) each get a fresh
    app. The AuthState is stored on app.state and read by the auth gate
    in routes; the aggregation layer never sees it.

    Business context: The dashboard is how supervisors watch fleet
    fatigue; the JSON API feeds the same numbers to other tools.

    Args:
        auth_state: AuthState capability. Default: the one named by
            DMA_AUTH_STATE, else a StaticAuthState that reports
            authenticated unless DMA_REQUIRE_AUTH is enabled.

    Returns:
        Configured FastAPI application with:
        - Dashboard page (/), chart routes (/charts/*), JSON API (/api/*)
        - InvalidArgument mapped to 422 responses
        - OpenAPI documentation at /docs

    Example:
        >>> from fastapi.testclient import TestClient
        >>> client = TestClient(create_app(StaticAuthState(authenticated=True)))
        >>> client.get('/api/overview').status_code
        200
    """
    app = FastAPI(
        title="Driver Monitor Analytics",
        description="Fatigue and emotion analytics for fleet drivers",
        version=__version__,
        lifespan=lifespan,
    )
    if auth_state is None:
        auth_state = default_auth_state()
    app.state.auth_state = auth_state

    app.add_exception_handler(InvalidArgument, _invalid_argument_handler)
    app.include_router(router)
    return app


def run_dashboard(
    host: str = "127.0.0.1",
    port: int = 8000,
    reload: bool = False,
    log_level: str = "info",
) -> None:
    """
    Launch the dashboard server with uvicorn.

    Args:
        host: Network interface to bind. '127.0.0.1' for local-only access
            (default) or '0.0.0.0' for network access.
        port: TCP port. Default 8000.
        reload: Enable auto-reload on code changes for development.
        log_level: Uvicorn logging verbosity.

    Returns:
        None. Blocks until the server is stopped (Ctrl+C).

    Raises:
        OSError: If the port is already in use or host is invalid.
    """
    uvicorn.run(
        "driver_monitor_analytics.web.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=log_level,
    )


if __name__ == "__main__":
    run_dashboard()
