"""Shrine fetch and enrichment pipeline shared by the API and the CLI."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
import json
import logging
from pathlib import Path
from typing import Any, Callable, Mapping

import httpx

from ..settings import ShrineSettings
from ..utils.paths import ensure_parent_directory
from .catalog import fetch_catalog
from .enrichment import ImageRecord, attach_images, merge_with_catalog
from .sources import SourceFetcher, SourceFetchError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ShrineSnapshot:
    """One fully enriched cache generation. Never mutated after creation."""

    fetched_at: datetime
    source_used: str
    source_tried: tuple[str, ...]
    data: Any
    perks_with_images: tuple[Any, ...] = field(default_factory=tuple)
    images: tuple[ImageRecord, ...] = field(default_factory=tuple)

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON document served to clients."""

        return {
            "fetchedAt": self.fetched_at.isoformat().replace("+00:00", "Z"),
            "sourceUsed": self.source_used,
            "sourceTried": list(self.source_tried),
            "data": self.data,
            "perksWithImages": list(self.perks_with_images),
            "images": list(self.images),
        }


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ShrinePipeline:
    """Fetches the shrine, enriches its perks and builds a snapshot."""

    def __init__(
        self,
        settings: ShrineSettings,
        fetcher: SourceFetcher,
        *,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._settings = settings
        self._fetcher = fetcher
        self._now = now

    def run(self, fetched_at: datetime | None = None) -> ShrineSnapshot:
        """Execute one full pipeline pass.

        ``fetched_at`` stamps the snapshot; it defaults to the current time.

        Raises ``SourceFetchError`` when no shrine source answers. Catalog failures
        only disable the metadata merge.
        """

        candidates = self._settings.source_candidates
        result = self._fetcher.fetch_first(candidates, label="shrine")
        perks = _shrine_perks(result.payload)
        base_url = self._settings.image_base_url

        try:
            catalog = fetch_catalog(self._fetcher, self._settings.catalog_sources)
        except SourceFetchError as exc:
            logger.warning("Perk catalog enrich failed: %s", exc)
        else:
            perks = merge_with_catalog(
                perks,
                catalog,
                self._settings.perk_overrides,
                image_base_url=base_url,
            )

        perks_with_images, images = attach_images(perks, image_base_url=base_url)
        return ShrineSnapshot(
            fetched_at=fetched_at or self._now(),
            source_used=result.url,
            source_tried=tuple(candidates),
            data=result.payload,
            perks_with_images=tuple(perks_with_images),
            images=tuple(images),
        )


def _shrine_perks(payload: Any) -> list[Any]:
    if isinstance(payload, Mapping) and isinstance(payload.get("perks"), list):
        return list(payload["perks"])
    return []


def build_pipeline(
    settings: ShrineSettings, *, transport: httpx.BaseTransport | None = None
) -> ShrinePipeline:
    """Create a pipeline wired to a fetcher honouring the configured timeout."""

    fetcher = SourceFetcher(timeout=settings.request_timeout, transport=transport)
    return ShrinePipeline(settings, fetcher)


def write_snapshot(snapshot: ShrineSnapshot, path: str | Path) -> Path:
    """Persist a snapshot as pretty-printed JSON, creating parent directories."""

    target = ensure_parent_directory(path)
    tmp_path = target.with_name(f"{target.name}.tmp")
    try:
        tmp_path.write_text(
            json.dumps(snapshot.to_payload(), indent=2, ensure_ascii=False), encoding="utf-8"
        )
        tmp_path.replace(target)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise
    logger.info("Saved shrine data to %s", target)
    return target
