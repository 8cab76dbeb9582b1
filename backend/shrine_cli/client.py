"""HTTP helpers used by the shrine CLI to talk to a running service."""
from __future__ import annotations

from typing import Any

import httpx

from backend.shrine_api.settings import ShrineSettings


class ShrineApiError(RuntimeError):
    """Raised when the service answers with an error status."""

    def __init__(self, status_code: int, detail: str) -> None:
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"HTTP {status_code}: {detail}")


def create_client(
    base_url: str,
    *,
    timeout: float | None = None,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """Return a JSON client for the Shrine API, using the configured request timeout."""

    return httpx.Client(
        base_url=base_url.rstrip("/"),
        timeout=timeout if timeout is not None else ShrineSettings().request_timeout,
        transport=transport,
        headers={"Accept": "application/json"},
    )


def get_json(client: httpx.Client, path: str) -> Any:
    """GET ``path`` and return the decoded body, raising ``ShrineApiError`` on failure.

    Error bodies carry an ``error`` field, which becomes the exception detail.
    """

    response = client.get(path)
    try:
        payload = response.json()
    except ValueError:
        payload = None

    if response.is_error:
        detail = payload.get("error") if isinstance(payload, dict) else None
        raise ShrineApiError(response.status_code, detail or response.text or "no response body")
    if payload is None:
        raise ShrineApiError(response.status_code, "response was not JSON")
    return payload
