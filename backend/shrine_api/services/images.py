"""Perk icon extraction and URL normalization."""
from __future__ import annotations

from typing import Any, Mapping

DEFAULT_IMAGE_BASE_URL = "https://dbd.tricky.lol"

# Checked in order; the first non-empty value wins.
IMAGE_FIELDS = ("icon", "iconUrl", "iconPath", "image", "perkImage", "perkIcon")


def extract_image(record: Any) -> Any | None:
    """Return the first populated image-like field of a perk record."""

    if not isinstance(record, Mapping):
        return None
    for field in IMAGE_FIELDS:
        value = record.get(field)
        if value:
            return value
    return None


def is_absolute_url(value: Any) -> bool:
    return isinstance(value, str) and value.lower().startswith(("http://", "https://"))


def normalize_image_url(image: Any, base_url: str = DEFAULT_IMAGE_BASE_URL) -> str | None:
    """Turn a relative icon path into an absolute URL under ``base_url``."""

    if not image:
        return None
    image = str(image)
    if is_absolute_url(image):
        return image
    separator = "" if image.startswith("/") else "/"
    return f"{base_url.rstrip('/')}{separator}{image}"


def resolve_image(record: Mapping[str, Any], base_url: str = DEFAULT_IMAGE_BASE_URL) -> str | None:
    """Return the canonical image URL for a perk record.

    An absolute ``image`` value is kept as-is, otherwise the first image-like field
    is normalized.
    """

    current = record.get("image")
    if is_absolute_url(current):
        return current
    return normalize_image_url(extract_image(record), base_url)
