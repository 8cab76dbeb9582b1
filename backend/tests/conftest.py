"""Shared fixtures for the Shrine API test suite."""
from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


class Upstream:
    """Routes requests to canned responses keyed by URL and counts calls."""

    def __init__(self) -> None:
        self.routes: dict[str, Callable[[httpx.Request], httpx.Response]] = {}
        self.calls: list[str] = []

    def json(self, url: str, payload: Any, status_code: int = 200) -> None:
        self.routes[url] = lambda request: httpx.Response(status_code, json=payload)

    def status(self, url: str, status_code: int) -> None:
        self.routes[url] = lambda request: httpx.Response(status_code, text="unavailable")

    def text(self, url: str, body: str) -> None:
        self.routes[url] = lambda request: httpx.Response(200, text=body)

    def error(self, url: str, message: str = "connection refused") -> None:
        def _raise(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError(message, request=request)

        self.routes[url] = _raise

    def count(self, url: str) -> int:
        return self.calls.count(url)

    def handle(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.calls.append(url)
        route = self.routes.get(url)
        if route is None:
            return httpx.Response(404, json={"error": "not found"})
        return route(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)


class FakeClock:
    """Manually advanced replacement for ``time.time``."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def upstream() -> Upstream:
    return Upstream()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()
