"""CLI entrypoints for rawsource."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import typer

from rawsource.config import Settings, load_settings
from rawsource.logging import configure_logging, get_logger
from rawsource.models.resolution import ResolvedTitle
from rawsource.orchestrator.runner import Pipeline, PipelineError
from rawsource.sources.links import ENGINE_URLS, build_engine_url, build_source_links
from rawsource.sources.registry import detect_source, get_source
from rawsource.tools.page_fetcher import build_http_client

app = typer.Typer(add_completion=False, help="Find a novel's raw title and its source pages")
logger = get_logger(__name__)


async def _run_search(settings: Settings, title: str, debug: bool) -> dict[str, Any]:
    async with build_http_client(settings) as client:
        pipeline = Pipeline.from_settings(settings, client)
        return await pipeline.run_payload(title, debug=debug)


async def _run_resolve(settings: Settings, title: str) -> ResolvedTitle:
    async with build_http_client(settings) as client:
        pipeline = Pipeline.from_settings(settings, client)
        return await pipeline.resolver.resolve(title)


def _settings() -> Settings:
    settings = load_settings()
    configure_logging(settings.log_level)
    return settings


@app.command()
def search(
    title: str = typer.Argument(..., help="Novel title, English or raw."),
    debug: bool = typer.Option(False, "--debug", help="Include per-backend diagnostics"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw JSON payload"),
) -> None:
    """Resolve TITLE and list the known sources publishing it."""

    settings = _settings()
    logger.info("CLI search requested")
    try:
        payload = asyncio.run(_run_search(settings, title, debug))
    except PipelineError as e:
        raise typer.BadParameter(e.message or e.error) from e

    if as_json:
        typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))
        return

    if payload["rawTitle"]:
        typer.echo(f"Raw title: {payload['rawTitle']}")
    if payload["nu"].get("seriesUrl"):
        typer.echo(f"Index page: {payload['nu']['seriesUrl']}")
    if payload["notFound"]:
        typer.echo("Not found: no matching source links.")
        raise typer.Exit(code=1)
    for m in payload["matches"]:
        typer.echo(f"{m['source']:<12} {m['canonicalUrl']}")


@app.command()
def resolve(title: str = typer.Argument(..., help="English title to resolve.")) -> None:
    """Look TITLE up on the index site and print its raw title."""

    settings = _settings()
    nu = asyncio.run(_run_resolve(settings, title))
    typer.echo(json.dumps(nu.model_dump(mode="json", by_alias=True, exclude={"debug"}), ensure_ascii=False, indent=2))
    if not nu.resolved:
        raise typer.Exit(code=1)


@app.command()
def detect(url: str = typer.Argument(..., help="A URL copied from a source site.")) -> None:
    """Detect which known source URL belongs to."""

    match = detect_source(url)
    if match is None:
        typer.echo("No known source matches this URL.")
        raise typer.Exit(code=1)
    typer.echo(f"{match.source_id} {match.item_id} {match.canonical_url}")


@app.command()
def links(
    title: str = typer.Argument(..., help="Title to search for."),
    engine: str = typer.Option("google", "--engine", "-e", help=f"One of: {', '.join(ENGINE_URLS)}"),
    source: str | None = typer.Option(None, "--source", "-s", help="Only this source id"),
) -> None:
    """Print manual search-engine URLs restricted to each known source."""

    if engine not in ENGINE_URLS:
        raise typer.BadParameter(f"Unknown engine {engine!r}.")
    if source is not None:
        s = get_source(source)
        if s is None:
            raise typer.BadParameter(f"Unknown source {source!r}.")
        typer.echo(build_engine_url(engine, title, s.domain))  # type: ignore[arg-type]
        return
    for source_id, url in build_source_links(title, engine):  # type: ignore[arg-type]
        typer.echo(f"{source_id:<12} {url}")


if __name__ == "__main__":
    app()
