"""ASGI entrypoint for the best stories API."""

from best_stories.api.app import create_app
from best_stories.containers import build_container

app = create_app(build_container())
