"""Health endpoints."""
from fastapi import APIRouter, Depends

from ..dependencies import get_shrine_cache
from ..schemas import HealthStatus
from ..services import ShrineCache

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthStatus, response_model_by_alias=True)
def get_health(cache: ShrineCache = Depends(get_shrine_cache)) -> HealthStatus:
    """Return service heartbeat and cache information."""

    cached = cache.is_warm
    return HealthStatus(
        cache_age_ms=cache.age_ms(),
        cached=cached,
        source="cache" if cached else "none",
    )
