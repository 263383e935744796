"""Retry, circuit breaker and timeout policies for upstream calls."""

import asyncio
import logging
import time
from collections import deque
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import TypeVar

T = TypeVar("T")

_logger = logging.getLogger(__name__)


class UpstreamError(Exception):
    """Base error for failed upstream calls."""


class TransientUpstreamError(UpstreamError):
    """Network-level failure worth retrying."""


class RateLimitedError(TransientUpstreamError):
    """Upstream answered 429 Too Many Requests."""


class UpstreamStatusError(UpstreamError):
    """Upstream answered with a non-retryable error status."""

    def __init__(self, url: str, status_code: int) -> None:
        super().__init__(f"Upstream {url} returned HTTP {status_code}")
        self.url = url
        self.status_code = status_code


class CircuitOpenError(UpstreamError):
    """Circuit breaker is open; the call was not attempted."""


class UpstreamTimeoutError(UpstreamError):
    """Upstream call exceeded its time budget."""


class CircuitState(Enum):
    """Circuit breaker states."""

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class RetryPolicy:
    """Retry transient failures with exponential backoff."""

    def __init__(
        self,
        max_retries: int = 3,
        backoff_base: float = 2.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self._sleep = sleep

    def delay_for(self, retry: int) -> float:
        """Return the delay before the given 1-based retry."""
        return self.backoff_base**retry

    async def call(self, func: Callable[[], Awaitable[T]]) -> T:
        """Run ``func``, retrying transient errors until the budget is spent."""
        retry = 0
        while True:
            try:
                return await func()
            except TransientUpstreamError as exc:
                retry += 1
                if retry > self.max_retries:
                    raise
                delay = self.delay_for(retry)
                _logger.warning(
                    "Transient upstream failure (retry %s/%s in %.1fs): %s",
                    retry,
                    self.max_retries,
                    delay,
                    exc,
                )
                await self._sleep(delay)


class CircuitBreaker:
    """Open after consecutive transient failures inside a rolling window."""

    def __init__(
        self,
        failure_threshold: int = 5,
        window_seconds: float = 30.0,
        break_seconds: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
        name: str = "upstream",
    ) -> None:
        self.failure_threshold = failure_threshold
        self.window_seconds = window_seconds
        self.break_seconds = break_seconds
        self.name = name
        self._clock = clock
        self._state = CircuitState.CLOSED
        self._failures: deque[float] = deque()
        self._opened_at = 0.0
        self._trial_in_flight = False

    @property
    def state(self) -> CircuitState:
        """Current state, moving from open to half-open once the break ends."""
        if (
            self._state is CircuitState.OPEN
            and self._clock() - self._opened_at >= self.break_seconds
        ):
            self._state = CircuitState.HALF_OPEN
            _logger.info("Circuit breaker '%s' half-open", self.name)
        return self._state

    async def call(self, func: Callable[[], Awaitable[T]]) -> T:
        """Execute ``func`` unless the breaker is open.

        While half-open only one trial call runs; concurrent callers fail
        fast until it settles.
        """
        state = self.state
        if state is CircuitState.OPEN or (
            state is CircuitState.HALF_OPEN and self._trial_in_flight
        ):
            raise CircuitOpenError(f"Circuit breaker '{self.name}' is open")

        is_trial = state is CircuitState.HALF_OPEN
        if is_trial:
            self._trial_in_flight = True
        try:
            result = await func()
        except TransientUpstreamError:
            self.record_failure()
            raise
        finally:
            if is_trial:
                self._trial_in_flight = False

        self._record_success()
        return result

    def record_failure(self) -> None:
        """Count a failure observed outside ``call``, such as a timeout."""
        now = self._clock()
        if self._state is CircuitState.HALF_OPEN:
            self._open(now)
            return
        if self._state is CircuitState.OPEN:
            return
        self._failures.append(now)
        while self._failures and now - self._failures[0] > self.window_seconds:
            self._failures.popleft()
        if len(self._failures) >= self.failure_threshold:
            self._open(now)

    def _record_success(self) -> None:
        if self._state is CircuitState.HALF_OPEN:
            _logger.info("Circuit breaker '%s' closed", self.name)
        self._state = CircuitState.CLOSED
        self._failures.clear()

    def _open(self, now: float) -> None:
        self._state = CircuitState.OPEN
        self._opened_at = now
        self._failures.clear()
        _logger.warning(
            "Circuit breaker '%s' opened for %ss", self.name, self.break_seconds
        )


async def call_with_timeout(
    func: Callable[[], Awaitable[T]], timeout_seconds: float
) -> T:
    """Run ``func`` under a fixed time budget."""
    try:
        async with asyncio.timeout(timeout_seconds):
            return await func()
    except TimeoutError as exc:
        raise UpstreamTimeoutError(
            f"Upstream call exceeded {timeout_seconds}s"
        ) from exc
