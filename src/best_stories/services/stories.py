"""Best stories aggregation with layered caching."""

import asyncio
import logging
from dataclasses import dataclass

from pydantic import ValidationError

from best_stories.adapters.hacker_news_models import (
    HackerNewsItem,
    parse_item,
    parse_story_ids,
)
from best_stories.adapters.resilience import UpstreamError
from best_stories.adapters.upstream_client import UpstreamClient
from best_stories.config import Settings
from best_stories.domain.stories import Story
from best_stories.services.cache import Cache
from best_stories.services.events import EventSink

STORY_IDS_CACHE_KEY = "best_stories:ids"
_ITEM_CACHE_KEY_PREFIX = "best_stories:item:"
_RESULT_CACHE_KEY_PREFIX = "best_stories:result:"

_logger = logging.getLogger(__name__)


def item_cache_key(item_id: int) -> str:
    """Cache key for a single item's details."""
    return f"{_ITEM_CACHE_KEY_PREFIX}{item_id}"


def result_cache_key(count: int) -> str:
    """Cache key for the ranked result of a given count."""
    return f"{_RESULT_CACHE_KEY_PREFIX}{count}"


@dataclass
class BestStoriesService:
    """Fetch, rank and cache the best Hacker News stories."""

    upstream: UpstreamClient
    cache: Cache
    settings: Settings
    events: EventSink

    async def get_best_stories(self, count: int) -> list[Story]:
        """Return up to ``count`` best stories ordered by score descending.

        Never raises: an id list failure or any unexpected error yields an
        empty list, and items whose details cannot be fetched are left out.
        """
        try:
            return await self._get_best_stories(count)
        except Exception as exc:
            self.events.unexpected_error(exc)
            return []

    async def _get_best_stories(self, count: int) -> list[Story]:
        cache_key = result_cache_key(count)
        found, cached = self.cache.try_get(cache_key)
        if found and isinstance(cached, tuple):
            self.events.cache_hit(cache_key)
            return list(cached)
        self.events.cache_miss(cache_key)

        story_ids = await self._get_story_ids()
        if not story_ids:
            _logger.warning("No story ids available from upstream")
            return []

        selected_ids = story_ids[: min(count, len(story_ids))]
        semaphore = asyncio.Semaphore(self.settings.max_concurrent_requests)

        async def fetch_bounded(item_id: int) -> HackerNewsItem | None:
            async with semaphore:
                return await self._get_item(item_id)

        items = await asyncio.gather(*(fetch_bounded(i) for i in selected_ids))
        resolved = [item for item in items if item is not None]
        resolved.sort(key=lambda item: item.score, reverse=True)
        stories = tuple(Story.from_item(item) for item in resolved)

        self.cache.set(
            cache_key,
            stories,
            ttl_seconds=self.settings.full_result_cache_minutes * 60,
        )
        _logger.info(
            "Ranked %s of %s requested stories", len(stories), len(selected_ids)
        )
        return list(stories)

    async def _get_story_ids(self) -> tuple[int, ...]:
        """Return the ranked id list, or an empty tuple if upstream fails."""
        found, cached = self.cache.try_get(STORY_IDS_CACHE_KEY)
        if found and isinstance(cached, tuple):
            self.events.cache_hit(STORY_IDS_CACHE_KEY)
            return cached
        self.events.cache_miss(STORY_IDS_CACHE_KEY)

        url = self.settings.best_stories_url
        try:
            story_ids = parse_story_ids(await self.upstream.fetch(url))
        except (UpstreamError, ValidationError) as exc:
            self.events.upstream_failure(url, exc)
            return ()

        if story_ids:
            self.cache.set(
                STORY_IDS_CACHE_KEY,
                story_ids,
                ttl_seconds=self.settings.story_ids_cache_minutes * 60,
            )
        return story_ids

    async def _get_item(self, item_id: int) -> HackerNewsItem | None:
        """Return one item's details, or ``None`` if they cannot be fetched."""
        cache_key = item_cache_key(item_id)
        found, cached = self.cache.try_get(cache_key)
        if found and isinstance(cached, HackerNewsItem):
            self.events.cache_hit(cache_key)
            return cached
        self.events.cache_miss(cache_key)

        url = self.settings.item_details_url(item_id)
        try:
            item = parse_item(await self.upstream.fetch(url))
        except (UpstreamError, ValidationError) as exc:
            self.events.upstream_failure(url, exc)
            return None

        self.cache.set(
            cache_key,
            item,
            ttl_seconds=self.settings.story_details_cache_minutes * 60,
        )
        return item
