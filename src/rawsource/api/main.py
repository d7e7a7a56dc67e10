"""ASGI entrypoint: `uvicorn rawsource.api.main:app`."""

from __future__ import annotations

from rawsource.api.app import create_app

app = create_app()
