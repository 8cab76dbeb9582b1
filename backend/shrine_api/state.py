"""Shared state container for the Shrine API."""
from __future__ import annotations

from dataclasses import dataclass

import httpx

from .services import ShrineCache, ShrineRefresher, build_pipeline
from .settings import ShrineSettings


@dataclass(slots=True)
class AppState:
    """Encapsulates the cache and refresher shared across routers."""

    settings: ShrineSettings
    cache: ShrineCache
    refresher: ShrineRefresher

    def __init__(
        self,
        settings: ShrineSettings,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.settings = settings
        pipeline = build_pipeline(settings, transport=transport)
        self.cache = ShrineCache(pipeline, ttl_seconds=settings.cache_ttl_seconds)
        self.refresher = ShrineRefresher(
            self.cache,
            warm_on_start=settings.warm_on_startup,
            repeat=settings.background_refresh,
        )

    def start_background(self) -> None:
        """Start the warm-up and periodic refresh thread when enabled."""

        if self.settings.warm_on_startup or self.settings.background_refresh:
            self.refresher.start()

    def stop_background(self) -> None:
        self.refresher.stop()
