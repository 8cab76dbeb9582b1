"""Application factory for the Shrine API."""
from __future__ import annotations

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routers import health, shrine
from .settings import ShrineSettings
from .state import AppState


def create_app(
    settings: ShrineSettings | None = None,
    *,
    transport: httpx.BaseTransport | None = None,
) -> FastAPI:
    """Build and configure the FastAPI application."""

    resolved_settings = settings or ShrineSettings()
    app_state = AppState(settings=resolved_settings, transport=transport)

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        app_state.start_background()
        try:
            yield
        finally:
            app_state.stop_background()

    app = FastAPI(title="Shrine API", version="0.1.0", lifespan=lifespan)
    app.state.app_state = app_state
    app.state.settings = app_state.settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    for router in (shrine.router, health.router):
        app.include_router(router)

    return app
