"""Filesystem helpers for snapshot paths."""
from __future__ import annotations

from pathlib import Path


def resolve_snapshot_path(path: str | Path) -> Path:
    """Expand a configured snapshot location into an absolute path."""

    return Path(path).expanduser().resolve()


def ensure_parent_directory(path: str | Path) -> Path:
    """Expand the path and create its parent directory if it does not exist."""

    resolved = resolve_snapshot_path(path)
    resolved.parent.mkdir(parents=True, exist_ok=True)
    return resolved
