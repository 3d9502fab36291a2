"""ASGI entrypoint for the tag arena API."""

from tag_arena.api.app import create_app
from tag_arena.containers import build_container

app = create_app(build_container())
