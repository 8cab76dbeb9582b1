"""Perk catalog retrieval and shape normalization."""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping

from .sources import SourceFetcher

CatalogEntry = Dict[str, Any]


def normalize_catalog(payload: Any) -> List[CatalogEntry]:
    """Flatten the supported catalog shapes into a list of entries.

    Accepts a bare list, an object wrapping a list under ``data`` or an object keyed
    by perk id.
    """

    if isinstance(payload, list):
        items: Iterable[Any] = payload
    elif isinstance(payload, Mapping) and isinstance(payload.get("data"), list):
        items = payload["data"]
    elif isinstance(payload, Mapping):
        return [
            {"id": key, **value} if isinstance(value, Mapping) else {"id": key}
            for key, value in payload.items()
        ]
    else:
        return []
    return [dict(item) for item in items if isinstance(item, Mapping)]


def fetch_catalog(fetcher: SourceFetcher, urls: Iterable[str]) -> List[CatalogEntry]:
    """Fetch the first reachable catalog and return its entries.

    Raises ``SourceFetchError`` when no catalog source answers.
    """

    result = fetcher.fetch_first(urls, label="perk catalog")
    return normalize_catalog(result.payload)
