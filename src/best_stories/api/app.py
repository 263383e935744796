"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status

from best_stories.api.models import StoryResponse
from best_stories.app_logging import configure_logging
from best_stories.containers import AppContainer


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(title="Hacker News Best Stories API", lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/api/stories/best", response_model=list[StoryResponse])
    async def best_stories(
        request: Request, count: int | None = None
    ) -> list[StoryResponse]:
        """Return the best ``count`` stories ordered by score descending."""
        state_container: AppContainer = request.app.state.container
        settings = state_container.settings
        if count is None:
            count = settings.default_story_count
        if count < 1:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Count must be greater than 0",
            )
        if count > settings.max_story_count:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=(
                    "Count must be less than or equal to "
                    f"{settings.max_story_count}"
                ),
            )

        logger.info("Getting %s best stories", count)
        stories = await state_container.stories_service.get_best_stories(count)
        return [StoryResponse.from_story(story) for story in stories]

    return app
