"""FastAPI dependencies for the Shrine API."""
from fastapi import Depends, Request

from .services import ShrineCache
from .settings import ShrineSettings
from .state import AppState


def get_app_state(request: Request) -> AppState:
    """Resolve the shared application state from the FastAPI request."""
    return request.app.state.app_state


def get_settings(app_state: AppState = Depends(get_app_state)) -> ShrineSettings:
    """Return the active service settings."""
    return app_state.settings


def get_shrine_cache(app_state: AppState = Depends(get_app_state)) -> ShrineCache:
    """Return the shrine cache dependency."""
    return app_state.cache
