"""Pydantic response models for the stories API."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from best_stories.domain.stories import Story


class StoryResponse(BaseModel):
    """A story as serialized to API clients."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str
    uri: str
    posted_by: str
    time: str
    score: int
    comment_count: int

    @classmethod
    def from_story(cls, story: Story) -> "StoryResponse":
        """Build a response model from a domain story."""
        return cls(
            title=story.title,
            uri=story.uri,
            posted_by=story.posted_by,
            time=story.time,
            score=story.score,
            comment_count=story.comment_count,
        )
