"""Resilient HTTP client for the Hacker News API."""

from dataclasses import dataclass
from typing import Protocol

import httpx

from best_stories.adapters.resilience import (
    CircuitBreaker,
    RateLimitedError,
    RetryPolicy,
    TransientUpstreamError,
    UpstreamStatusError,
    UpstreamTimeoutError,
    call_with_timeout,
)
from best_stories.config import Settings

_TOO_MANY_REQUESTS = 429


class UpstreamClient(Protocol):
    """Interface for raw upstream GET requests."""

    async def fetch(self, url: str) -> bytes:
        """Return the response body or raise an ``UpstreamError``."""


@dataclass
class HttpxUpstreamClient(UpstreamClient):
    """HTTPX-backed client wrapped in timeout, circuit breaker and retry."""

    http_client: httpx.AsyncClient
    circuit_breaker: CircuitBreaker
    retry_policy: RetryPolicy
    timeout_seconds: float = 10.0

    @classmethod
    def create(cls, settings: Settings) -> "HttpxUpstreamClient":
        """Create a client with a managed httpx session and default policies."""
        return cls(
            http_client=httpx.AsyncClient(),
            circuit_breaker=CircuitBreaker(
                failure_threshold=settings.circuit_breaker_failure_threshold,
                window_seconds=settings.circuit_breaker_window_seconds,
                break_seconds=settings.circuit_breaker_break_seconds,
                name="hacker_news",
            ),
            retry_policy=RetryPolicy(
                max_retries=settings.retry_attempts,
                backoff_base=settings.retry_backoff_base_seconds,
            ),
            timeout_seconds=settings.request_timeout_seconds,
        )

    async def fetch(self, url: str) -> bytes:
        """GET ``url`` through timeout -> circuit breaker -> retry.

        A timeout cancels the call inside the breaker, so it is counted
        against the breaker here.
        """
        try:
            return await call_with_timeout(
                lambda: self.circuit_breaker.call(
                    lambda: self.retry_policy.call(lambda: self._get(url))
                ),
                self.timeout_seconds,
            )
        except UpstreamTimeoutError:
            self.circuit_breaker.record_failure()
            raise

    async def _get(self, url: str) -> bytes:
        try:
            response = await self.http_client.get(url)
        except httpx.TransportError as exc:
            raise TransientUpstreamError(f"GET {url} failed: {exc}") from exc
        if response.status_code == _TOO_MANY_REQUESTS:
            raise RateLimitedError(f"GET {url} was rate limited")
        if response.is_error:
            raise UpstreamStatusError(url, response.status_code)
        return response.content

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
