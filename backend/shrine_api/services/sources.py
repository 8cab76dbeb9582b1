"""Ordered upstream fetching with per-source fallback."""
from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Iterable

import httpx

logger = logging.getLogger(__name__)


class ShrineServiceError(RuntimeError):
    """Raised when the shrine pipeline cannot produce a snapshot."""


@dataclass(frozen=True, slots=True)
class SourceFailure:
    """A single candidate URL and the reason it was rejected."""

    url: str
    reason: str

    def __str__(self) -> str:
        return f"{self.url} -> {self.reason}"


class SourceFetchError(ShrineServiceError):
    """Raised when every candidate in a source list failed."""

    def __init__(self, label: str, failures: list[SourceFailure]) -> None:
        self.label = label
        self.failures = list(failures)
        detail = " | ".join(str(failure) for failure in self.failures) or "no sources configured"
        super().__init__(f"All {label} sources failed: {detail}")


@dataclass(frozen=True, slots=True)
class FetchResult:
    """JSON payload returned by the first healthy source."""

    url: str
    payload: Any


class SourceFetcher:
    """Tries candidate URLs in order and returns the first valid JSON body."""

    def __init__(
        self,
        *,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._timeout = timeout
        self._transport = transport

    def fetch_first(self, urls: Iterable[str], *, label: str = "shrine") -> FetchResult:
        """Return the payload of the first candidate answering 2xx with JSON.

        Non-success statuses, transport errors and undecodable bodies are recorded
        and the next candidate is tried. Each candidate is attempted once.
        """

        failures: list[SourceFailure] = []
        with httpx.Client(
            timeout=self._timeout, transport=self._transport, follow_redirects=True
        ) as client:
            for url in urls:
                logger.info("Trying %s source: %s", label, url)
                try:
                    response = client.get(url)
                except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
                    # Malformed URLs fail here before any request is sent.
                    failures.append(SourceFailure(url, str(exc) or type(exc).__name__))
                    logger.warning("%s source %s failed: %s", label, url, failures[-1].reason)
                    continue

                if not response.is_success:
                    failures.append(SourceFailure(url, str(response.status_code)))
                    logger.warning("%s source %s responded with HTTP %s", label, url, response.status_code)
                    continue

                try:
                    payload = response.json()
                except ValueError as exc:
                    failures.append(SourceFailure(url, f"invalid JSON: {exc}"))
                    logger.warning("%s source %s returned invalid JSON", label, url)
                    continue

                return FetchResult(url=url, payload=payload)

        raise SourceFetchError(label, failures)
