"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from best_stories.adapters.upstream_client import HttpxUpstreamClient
from best_stories.config import Settings
from best_stories.services.cache import InMemoryCache
from best_stories.services.events import LoggingEventSink
from best_stories.services.stories import BestStoriesService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    stories_service: BestStoriesService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    upstream_client = HttpxUpstreamClient.create(resolved_settings)
    stories_service = BestStoriesService(
        upstream=upstream_client,
        cache=InMemoryCache(),
        settings=resolved_settings,
        events=LoggingEventSink(),
    )

    async def close_resources() -> None:
        await upstream_client.close()

    return AppContainer(
        settings=resolved_settings,
        stories_service=stories_service,
        close_resources=close_resources,
    )
