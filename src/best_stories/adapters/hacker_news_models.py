"""Pydantic models for Hacker News API payloads."""

from pydantic import BaseModel, ConfigDict, TypeAdapter

_STORY_IDS = TypeAdapter(list[int])


class HackerNewsItem(BaseModel):
    """Hacker News item payload."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    title: str = ""
    url: str = ""
    by: str = ""
    time: int = 0
    score: int = 0
    descendants: int = 0
    type: str = ""


def parse_story_ids(payload: bytes) -> tuple[int, ...]:
    """Parse the ranked id list returned by the best stories endpoint."""
    return tuple(_STORY_IDS.validate_json(payload))


def parse_item(payload: bytes) -> HackerNewsItem:
    """Parse a single item payload. A ``null`` body fails validation."""
    return HackerNewsItem.model_validate_json(payload)
