"""Pydantic models exposed by the Shrine API."""
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class HealthStatus(BaseModel):
    """Service health payload."""

    model_config = ConfigDict(populate_by_name=True)

    status: Literal["ok"] = Field(default="ok")
    cache_age_ms: int | None = Field(
        default=None,
        alias="cacheAgeMs",
        description="Milliseconds since the cached snapshot was fetched.",
    )
    cached: bool = Field(default=False, description="Whether a snapshot is cached.")
    source: Literal["cache", "none"] = Field(
        default="none", description="Where /shrine would currently be answered from."
    )


class ErrorResponse(BaseModel):
    """JSON body returned for failed requests."""

    error: str = Field(..., description="Human readable failure description.")
