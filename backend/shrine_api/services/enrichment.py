"""Merge shrine perks with catalog metadata and attach canonical images."""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .catalog import CatalogEntry
from .images import DEFAULT_IMAGE_BASE_URL, extract_image, normalize_image_url, resolve_image

Perk = Dict[str, Any]
ImageRecord = Dict[str, Optional[str]]

CATALOG_KEY_FIELDS = ("id", "perkId", "name")
CHARACTER_FIELDS = ("character", "owner", "survivor", "killer")
IMAGE_NAME_FIELDS = ("name", "perkName", "displayName", "id")


def _first_present(record: Mapping[str, Any], fields: Sequence[str]) -> Any:
    for field in fields:
        value = record.get(field)
        if value:
            return value
    return None


def _normalize_key(value: Any) -> str:
    return str(value).lower() if value else ""


def catalog_key(entry: Mapping[str, Any]) -> str:
    """Lookup key of a catalog entry: its id, perkId or name, lower-cased."""

    return _normalize_key(_first_present(entry, CATALOG_KEY_FIELDS))


def perk_key(perk: Mapping[str, Any]) -> str:
    """Lookup key of a shrine perk, derived from its id only."""

    return _normalize_key(perk.get("id"))


def build_catalog_index(catalog: Iterable[CatalogEntry]) -> Dict[str, CatalogEntry]:
    """Index catalog entries by key; later duplicates replace earlier ones."""

    index: Dict[str, CatalogEntry] = {}
    for entry in catalog:
        if not isinstance(entry, Mapping):
            continue
        key = catalog_key(entry)
        if key:
            index[key] = entry
    return index


def merge_with_catalog(
    perks: Sequence[Any],
    catalog: Iterable[CatalogEntry],
    overrides: Mapping[str, str] | None = None,
    *,
    image_base_url: str = DEFAULT_IMAGE_BASE_URL,
) -> List[Any]:
    """Return ``perks`` with catalog metadata and override names applied.

    Order and length are preserved. Perks with neither a catalog match nor an
    override are returned untouched.
    """

    index = build_catalog_index(catalog)
    override_names = {key.lower(): name for key, name in (overrides or {}).items() if name}

    merged: List[Any] = []
    for perk in perks:
        if not isinstance(perk, Mapping):
            merged.append(perk)
            continue

        key = perk_key(perk)
        found = index.get(key) if key else None
        override_name = override_names.get(key) if key else None
        if found is None and not override_name:
            merged.append(perk)
            continue

        found = found or {}
        record = dict(perk)
        record["name"] = (
            override_name
            or found.get("name")
            or found.get("displayName")
            or perk.get("name")
            or key
        )
        record["description"] = found.get("description") or perk.get("description")
        record["role"] = found.get("role") or found.get("roleCategory")
        record["character"] = _first_present(found, CHARACTER_FIELDS)
        record["image"] = (
            normalize_image_url(extract_image(found), image_base_url) or perk.get("image")
        )
        merged.append(record)
    return merged


def attach_images(
    perks: Sequence[Any], *, image_base_url: str = DEFAULT_IMAGE_BASE_URL
) -> Tuple[List[Any], List[ImageRecord]]:
    """Set a canonical ``image`` on each perk and collect ``{name, image}`` records."""

    with_images: List[Any] = []
    images: List[ImageRecord] = []
    for perk in perks:
        if not isinstance(perk, Mapping):
            with_images.append(perk)
            continue
        image = resolve_image(perk, image_base_url)
        if not image:
            with_images.append(perk)
            continue
        with_images.append({**perk, "image": image})
        name = _first_present(perk, IMAGE_NAME_FIELDS)
        images.append({"name": str(name) if name else None, "image": image})
    return with_images, images
