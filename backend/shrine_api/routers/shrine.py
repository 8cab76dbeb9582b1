"""Shrine endpoints."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, Response

from ..dependencies import get_settings, get_shrine_cache
from ..schemas import ErrorResponse
from ..services import ShrineCache, fallback_payload
from ..settings import ShrineSettings
from ..utils.paths import resolve_snapshot_path

logger = logging.getLogger(__name__)

router = APIRouter(tags=["shrine"])

STALE_HEADER = "X-Shrine-Stale"


@router.get(
    "/shrine",
    summary="Current enriched shrine snapshot",
    responses={500: {"model": ErrorResponse}},
)
def read_shrine(
    cache: ShrineCache = Depends(get_shrine_cache),
    settings: ShrineSettings = Depends(get_settings),
) -> JSONResponse:
    """Return the cached shrine, refreshing it when the cache has expired."""

    result = cache.read()
    if result.error is None:
        return JSONResponse(result.snapshot.to_payload())

    if result.snapshot is None:
        return JSONResponse(fallback_payload())

    if settings.serve_stale_on_error:
        return JSONResponse(result.snapshot.to_payload(), headers={STALE_HEADER: "true"})

    return JSONResponse({"error": "Could not fetch shrine data"}, status_code=500)


@router.get(
    "/shrine.json",
    summary="Last snapshot written to disk",
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def read_shrine_file(settings: ShrineSettings = Depends(get_settings)) -> Response:
    """Serve the persisted snapshot file verbatim."""

    path = resolve_snapshot_path(settings.snapshot_path)
    if not path.exists():
        return JSONResponse({"error": "shrine.json not generated yet"}, status_code=404)
    try:
        content = path.read_bytes()
    except OSError:
        logger.exception("Could not read %s", path)
        return JSONResponse({"error": "Could not read shrine.json"}, status_code=500)
    return Response(content=content, media_type="application/json")
