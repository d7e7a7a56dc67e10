"""Uvicorn server launcher.

Console scripts must point to a callable, not an ASGI app object. Bind address and log level
default to the `RAWSOURCE_API_HOST` / `RAWSOURCE_API_PORT` / `RAWSOURCE_LOG_LEVEL` settings.
"""

from __future__ import annotations

from typing import Annotated, Any, Optional

import typer
import uvicorn

from rawsource.config import Settings, load_settings


def uvicorn_options(
    settings: Settings,
    host: Optional[str] = None,
    port: Optional[int] = None,
    reload: bool = False,
) -> dict[str, Any]:
    """Keyword arguments for `uvicorn.run`; explicit options win over settings."""

    return {
        "host": host or settings.api_host,
        "port": port or settings.api_port,
        "reload": reload,
        "log_level": settings.log_level.lower(),
        # rawsource.logging owns the root logger.
        "log_config": None,
    }


def main(
    host: Annotated[Optional[str], typer.Option(help="Bind host (default: RAWSOURCE_API_HOST)")] = None,
    port: Annotated[Optional[int], typer.Option(help="Bind port (default: RAWSOURCE_API_PORT)")] = None,
    reload: Annotated[bool, typer.Option(help="Enable auto-reload (dev)")] = False,
) -> None:
    """Start the rawsource API server."""

    options = uvicorn_options(load_settings(), host=host, port=port, reload=reload)
    uvicorn.run("rawsource.api.main:app", **options)


def run() -> None:
    typer.run(main)


if __name__ == "__main__":
    run()
