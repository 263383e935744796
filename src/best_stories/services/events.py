"""Observability events emitted by the stories service."""

import logging
from dataclasses import dataclass, field
from typing import Protocol


class EventSink(Protocol):
    """Fire-and-forget sink for cache and upstream events."""

    def cache_hit(self, key: str) -> None:
        """Record a cache hit."""

    def cache_miss(self, key: str) -> None:
        """Record a cache miss."""

    def upstream_failure(self, url: str, error: Exception) -> None:
        """Record a failed upstream call."""

    def unexpected_error(self, error: Exception) -> None:
        """Record an error that was not anticipated."""


@dataclass
class LoggingEventSink(EventSink):
    """Event sink that writes events to the application log."""

    logger: logging.Logger = field(
        default_factory=lambda: logging.getLogger("best_stories.events")
    )

    def cache_hit(self, key: str) -> None:
        """Log a cache hit."""
        self.logger.debug("Cache hit for key: %s", key)

    def cache_miss(self, key: str) -> None:
        """Log a cache miss."""
        self.logger.debug("Cache miss for key: %s", key)

    def upstream_failure(self, url: str, error: Exception) -> None:
        """Log a failed upstream call."""
        self.logger.warning("Upstream call failed: url=%s error=%r", url, error)

    def unexpected_error(self, error: Exception) -> None:
        """Log an unexpected error with its traceback."""
        self.logger.error("Error getting best stories", exc_info=error)
