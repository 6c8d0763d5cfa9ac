"""FastAPI application factory for the journal API."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from journal.api.routes import calculator, trades, views


def create_app(
    lifespan: Any = None,
    screenshot_dir: str | None = None,
    screenshot_base_url: str = "/screenshots",
) -> FastAPI:
    """Create and configure the journal API application.

    Args:
        lifespan: Optional async context manager for application lifespan events.
                  Used by main.py to open and close the database.
        screenshot_dir: Directory served at screenshot_base_url. Not mounted
                        when None (screenshots served elsewhere).
        screenshot_base_url: Public URL prefix for stored screenshots.

    Returns:
        Configured FastAPI application. Route handlers expect
        app.state.service (JournalService) to be set before serving.
    """
    app = FastAPI(
        title="Trade Journal API",
        lifespan=lifespan,
    )

    app.include_router(calculator.router, prefix="/api")
    app.include_router(trades.router, prefix="/api")
    app.include_router(views.router, prefix="/api")

    @app.get("/health")
    async def health(request: Request) -> JSONResponse:
        database = getattr(request.app.state, "database", None)
        connected = database.is_connected if database is not None else None
        return JSONResponse(content={"status": "ok", "database_connected": connected})

    if screenshot_dir is not None:
        app.mount(
            screenshot_base_url.rstrip("/"),
            StaticFiles(directory=screenshot_dir, check_dir=False),
            name="screenshots",
        )

    return app
