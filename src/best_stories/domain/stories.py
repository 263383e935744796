"""Story domain models."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from best_stories.adapters.hacker_news_models import HackerNewsItem

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_ONE_SECOND = timedelta(seconds=1)
_MIN_SECONDS = (datetime.min.replace(tzinfo=UTC) - _EPOCH) // _ONE_SECOND
_MAX_SECONDS = (datetime.max.replace(tzinfo=UTC) - _EPOCH) // _ONE_SECOND


def unix_timestamp_to_utc_iso(seconds: int) -> str:
    """Format epoch seconds as ISO-8601 with an explicit UTC offset.

    Values outside the representable years 1-9999 are clamped to the range.
    """
    clamped = min(max(seconds, _MIN_SECONDS), _MAX_SECONDS)
    return (_EPOCH + timedelta(seconds=clamped)).isoformat()


@dataclass(frozen=True)
class Story:
    """A ranked story as returned to API callers."""

    title: str
    uri: str
    posted_by: str
    time: str
    score: int
    comment_count: int

    @classmethod
    def from_item(cls, item: HackerNewsItem) -> "Story":
        """Project an upstream item into a story."""
        return cls(
            title=item.title,
            uri=item.url,
            posted_by=item.by,
            time=unix_timestamp_to_utc_iso(item.time),
            score=item.score,
            comment_count=item.descendants,
        )
