"""ASGI entrypoint for the nutrition resolver API."""

from nutrition_resolver.api.app import create_app
from nutrition_resolver.containers import build_container

app = create_app(build_container())
