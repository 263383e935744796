"""Shared test fixtures."""

import asyncio
import json
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import pytest

from best_stories.adapters.resilience import TransientUpstreamError
from best_stories.adapters.upstream_client import UpstreamClient
from best_stories.config import Settings
from best_stories.containers import AppContainer
from best_stories.services.cache import InMemoryCache
from best_stories.services.events import EventSink
from best_stories.services.stories import BestStoriesService

BEST_STORIES_URL = "https://hn.test/v0/beststories.json"
ITEM_URL_TEMPLATE = "https://hn.test/v0/item/{item_id}.json"


def item_url(item_id: int) -> str:
    return ITEM_URL_TEMPLATE.format(item_id=item_id)


def make_item(item_id: int, score: int, **overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "id": item_id,
        "title": f"Story {item_id}",
        "url": f"https://example.com/{item_id}",
        "by": f"user{item_id}",
        "time": 1609459200 + item_id,
        "score": score,
        "descendants": item_id * 2,
        "type": "story",
    }
    payload.update(overrides)
    return payload


@dataclass
class FakeUpstreamClient(UpstreamClient):
    """Fake upstream that serves canned bodies and tracks concurrency."""

    responses: dict[str, bytes | Exception] = field(default_factory=dict)
    delay_seconds: float = 0.0
    calls: list[str] = field(default_factory=list)
    in_flight: int = 0
    max_in_flight: int = 0

    def add_story_ids(self, story_ids: list[int]) -> None:
        self.responses[BEST_STORIES_URL] = json.dumps(story_ids).encode()

    def add_item(self, item_id: int, score: int, **overrides: object) -> None:
        self.responses[item_url(item_id)] = json.dumps(
            make_item(item_id, score, **overrides)
        ).encode()

    def fail(self, url: str, error: Exception | None = None) -> None:
        self.responses[url] = error or TransientUpstreamError(f"GET {url} failed")

    async def fetch(self, url: str) -> bytes:
        self.calls.append(url)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay_seconds:
                await asyncio.sleep(self.delay_seconds)
            response = self.responses.get(url)
            if response is None:
                raise TransientUpstreamError(f"No canned response for {url}")
            if isinstance(response, Exception):
                raise response
            return response
        finally:
            self.in_flight -= 1


@dataclass
class RecordingEventSink(EventSink):
    """Event sink that keeps every event in memory."""

    hits: list[str] = field(default_factory=list)
    misses: list[str] = field(default_factory=list)
    failures: list[tuple[str, Exception]] = field(default_factory=list)
    errors: list[Exception] = field(default_factory=list)

    def cache_hit(self, key: str) -> None:
        self.hits.append(key)

    def cache_miss(self, key: str) -> None:
        self.misses.append(key)

    def upstream_failure(self, url: str, error: Exception) -> None:
        self.failures.append((url, error))

    def unexpected_error(self, error: Exception) -> None:
        self.errors.append(error)


@dataclass
class FakeClock:
    """Manually advanced clock for cache expiry tests."""

    now: datetime = field(default_factory=lambda: datetime(2021, 1, 1, tzinfo=UTC))

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        best_stories_url=BEST_STORIES_URL,
        item_details_url_template=ITEM_URL_TEMPLATE,
        max_concurrent_requests=3,
    )


@pytest.fixture
def upstream() -> FakeUpstreamClient:
    return FakeUpstreamClient()


@pytest.fixture
def events() -> RecordingEventSink:
    return RecordingEventSink()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> InMemoryCache:
    return InMemoryCache(clock=clock)


@pytest.fixture
def stories_service(
    settings: Settings,
    upstream: FakeUpstreamClient,
    cache: InMemoryCache,
    events: RecordingEventSink,
) -> BestStoriesService:
    return BestStoriesService(
        upstream=upstream, cache=cache, settings=settings, events=events
    )


@pytest.fixture
def container(
    settings: Settings, stories_service: BestStoriesService
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        stories_service=stories_service,
        close_resources=close_resources,
    )
