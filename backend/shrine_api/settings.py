"""Runtime configuration for the Shrine API."""
from __future__ import annotations

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_SHRINE_SOURCES = [
    "https://dbd.tricky.lol/api/shrine",
    "https://dbd-api.herokuapp.com/shrineofsecrets?pretty=false&branch=live",
]
DEFAULT_CATALOG_SOURCES = ["https://dbd.tricky.lol/api/perks"]
DEFAULT_PERK_OVERRIDES = {
    "k28p02": "Darkness Revealed",
    "k32p02": "Forced Hesitation",
}
ONE_WEEK_SECONDS = 60 * 60 * 24 * 7


class ShrineSettings(BaseSettings):
    """Environment-aware settings for the Shrine API service."""

    shrine_source: str = Field(
        default="",
        validation_alias=AliasChoices("SHRINE_API_SHRINE_SOURCE", "SHRINE_SOURCE"),
        description="Comma-separated shrine URLs overriding the built-in mirrors.",
    )
    default_sources: list[str] = Field(
        default_factory=lambda: list(DEFAULT_SHRINE_SOURCES),
        description="Built-in shrine mirrors tried in order.",
    )
    catalog_sources: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CATALOG_SOURCES),
        description="Perk catalog endpoints used for enrichment.",
    )
    perk_overrides: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_PERK_OVERRIDES),
        description="Perk id to display name corrections applied with top priority.",
    )
    image_base_url: str = Field(
        default="https://dbd.tricky.lol",
        description="Host prepended to relative perk icon paths.",
    )
    cache_ttl_seconds: float = Field(
        default=ONE_WEEK_SECONDS,
        gt=0,
        description="Cache lifetime, also used as the background refresh period.",
    )
    request_timeout: float = Field(
        default=10.0, gt=0, description="Timeout in seconds for each upstream request."
    )
    snapshot_path: str = Field(
        default="./data/shrine.json",
        description="Location of the snapshot file written by the update command.",
    )
    warm_on_startup: bool = Field(
        default=True, description="Fetch the shrine once when the service starts."
    )
    background_refresh: bool = Field(
        default=True, description="Refresh the cache on a timer even without traffic."
    )
    serve_stale_on_error: bool = Field(
        default=True,
        description="Serve the previous snapshot when a refresh fails instead of a 500.",
    )
    host: str = Field(default="0.0.0.0", description="Interface bound by the HTTP server.")
    port: int = Field(
        default=3000,
        validation_alias=AliasChoices("SHRINE_API_PORT", "PORT"),
        description="Port bound by the HTTP server.",
    )
    log_level: str = Field(default="INFO", description="Root logging level.")

    model_config = SettingsConfigDict(
        env_prefix="SHRINE_API_",
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
        extra="ignore",
    )

    @property
    def operator_sources(self) -> list[str]:
        """Return the operator-supplied shrine URLs, if any."""

        return [item.strip() for item in self.shrine_source.split(",") if item.strip()]

    @property
    def source_candidates(self) -> list[str]:
        """Return the shrine URLs to try, operator list first."""

        return self.operator_sources or list(self.default_sources)
