"""ASGI entrypoint for the recipe costing API."""

from recipe_costing.api.app import create_app
from recipe_costing.containers import build_container

app = create_app(build_container())
