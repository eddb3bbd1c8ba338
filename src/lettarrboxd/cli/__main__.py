from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

import httpx
import typer

from lettarrboxd import __version__
from lettarrboxd.clients.radarr import RadarrClient
from lettarrboxd.config import Settings, SettingsError, SettingsLoadResult, load_settings
from lettarrboxd.models import MovieRecord
from lettarrboxd.scrapers import PageFetcher, ScraperError, detect_list_type
from lettarrboxd.services import PipelineResult, SnapshotError, SyncError, fetch_current_list, run_once

logger = logging.getLogger(__name__)

app = typer.Typer(
    add_completion=False,
    help="Keep a Radarr library in sync with a Letterboxd list.",
)

# Failures that end one run but must not kill the watch loop
RUN_ERRORS = (ScraperError, SyncError, SnapshotError, SettingsError, httpx.HTTPError)


@app.callback()
def _cli_entry(ctx: typer.Context) -> None:
    """Entrypoint for the lettarrboxd CLI."""
    ctx.obj = {} if ctx.obj is None else ctx.obj


@app.command()
def version() -> None:
    """Print the installed version."""
    typer.echo(__version__)


@app.command()
def config(show_sources: bool = typer.Option(False, help="Display where settings came from.")) -> None:
    """Describe the resolved configuration."""
    load_result = _safe_load_settings(load_even_if_missing=True)
    if load_result is None:
        raise typer.Exit(code=1)

    settings = load_result.settings
    values: dict[str, Any] = {
        "letterboxd_url": settings.letterboxd_url or "<unset>",
        "take_amount": settings.take_amount or "<unset>",
        "take_strategy": settings.take_strategy.value if settings.take_strategy else "<unset>",
        "radarr_api_url": settings.radarr_api_url or "<unset>",
        "radarr_api_key": "<set>" if settings.radarr_api_key else "<unset>",
        "quality_profile": settings.quality_profile or "<unset>",
        "minimum_availability": settings.minimum_availability,
        "root_folder_id": settings.root_folder_id or "<first available>",
        "tags": settings.tags or [],
        "add_unmonitored": settings.add_unmonitored,
        "dry_run": settings.dry_run,
        "data_dir": settings.data_dir,
        "check_interval_minutes": settings.check_interval_minutes,
        "flaresolverr_url": settings.flaresolverr_url or "<unset>",
        "log_level": settings.log_level,
    }

    for key, value in values.items():
        typer.echo(f"{key}: {value}")

    if show_sources:
        source_hint = load_result.source_path or "<env/.env>"
        typer.echo(f"resolved_from: {source_hint}")
        typer.echo("Configure ~/.config/lettarrboxd/config.toml for persistent settings.")


@app.command()
def classify(url: str = typer.Argument(..., help="Letterboxd URL to inspect.")) -> None:
    """Show which list shape a Letterboxd URL is recognized as."""
    list_type = detect_list_type(url)
    if list_type is None:
        typer.secho(f"Unsupported URL format: {url}", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    typer.echo(list_type.value)


@app.command()
def fetch(
    url: str | None = typer.Option(None, help="Override LETTERBOXD_URL for this invocation."),
    json_output: bool = typer.Option(False, "--json/--no-json", help="Output as JSON."),
    debug: bool = typer.Option(False, help="Enable debug logging."),
) -> None:
    """Scrape the Letterboxd list and print it without touching Radarr."""
    load_result = _safe_load_settings()
    if load_result is None:
        raise typer.Exit(code=1)

    settings = load_result.settings
    if url:
        settings = settings.model_copy(update={"letterboxd_url": url})
    _setup_logging(logging.DEBUG if debug else settings.logging_level)

    if not settings.letterboxd_url:
        typer.secho("Missing LETTERBOXD_URL. Pass --url or configure it.", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    try:
        movies = asyncio.run(_run_fetch(settings))
    except ScraperError as exc:
        typer.secho(str(exc), fg=typer.colors.RED)
        raise typer.Exit(code=1) from exc

    if json_output:
        payload = [movie.model_dump(by_alias=True) for movie in movies]
        typer.echo(json.dumps(payload, indent=2))
        return
    _render_movies(movies)


@app.command()
def check(
    tmdb_id: int = typer.Argument(..., help="TMDB movie ID."),
    debug: bool = typer.Option(False, help="Enable debug logging."),
) -> None:
    """Check whether a TMDB ID is already in Radarr and what Radarr knows about it."""
    load_result = _safe_load_settings()
    if load_result is None:
        raise typer.Exit(code=1)

    settings = load_result.settings
    _setup_logging(logging.DEBUG if debug else settings.logging_level)
    try:
        settings.require_radarr()
    except SettingsError as exc:
        typer.secho(str(exc), fg=typer.colors.RED)
        raise typer.Exit(code=1) from exc

    try:
        in_library, lookup = asyncio.run(_run_check(settings, tmdb_id))
    except httpx.HTTPError as exc:
        typer.secho(f"Radarr request failed: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=1) from exc

    if lookup is None:
        typer.secho(f"TMDB {tmdb_id}: not found in Radarr's catalog", fg=typer.colors.YELLOW)
    else:
        typer.echo(f"TMDB {tmdb_id}: {lookup.get('title')} ({lookup.get('year') or 'TBA'})")
    typer.echo(f"in_library: {in_library}")


@app.command()
def sync(
    dry_run: bool | None = typer.Option(
        None,
        "--dry-run/--no-dry-run",
        help="Preview actions without modifying Radarr (default: DRY_RUN).",
    ),
    debug: bool = typer.Option(False, help="Enable debug logging."),
) -> None:
    """Run one scrape-and-sync pass."""
    settings = _load_run_settings(dry_run=dry_run, debug=debug)

    try:
        result = asyncio.run(run_once(settings))
    except RUN_ERRORS as exc:
        typer.secho(f"Run failed: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=1) from exc

    _render_result(result)


@app.command()
def watch(
    dry_run: bool | None = typer.Option(
        None,
        "--dry-run/--no-dry-run",
        help="Preview actions without modifying Radarr (default: DRY_RUN).",
    ),
    debug: bool = typer.Option(False, help="Enable debug logging."),
) -> None:
    """Run immediately, then again every CHECK_INTERVAL_MINUTES."""
    settings = _load_run_settings(dry_run=dry_run, debug=debug)
    typer.secho(
        f"Starting scheduled monitoring. Will check every {settings.check_interval_minutes} minutes.",
        fg=typer.colors.GREEN,
    )
    typer.echo("Press Ctrl+C to stop")

    try:
        asyncio.run(_watch(settings))
    except KeyboardInterrupt:
        typer.echo("\nStopped")


def main() -> None:
    """Expose Typer app for the console script."""
    app()


def _safe_load_settings(load_even_if_missing: bool = False) -> SettingsLoadResult | None:
    try:
        return load_settings()
    except SettingsError as exc:
        if load_even_if_missing:
            typer.secho(
                f"Warning: configuration incomplete: {exc}",
                fg=typer.colors.YELLOW,
            )
            return SettingsLoadResult(settings=Settings(), source_path=None)
        typer.secho(str(exc), fg=typer.colors.RED)
        return None


def _load_run_settings(*, dry_run: bool | None, debug: bool) -> Settings:
    load_result = _safe_load_settings()
    if load_result is None:
        raise typer.Exit(code=1)

    settings = load_result.settings
    if dry_run is not None:
        settings = settings.model_copy(update={"dry_run": dry_run})
    _setup_logging(logging.DEBUG if debug else settings.logging_level)

    try:
        settings.require_run()
    except SettingsError as exc:
        typer.secho(str(exc), fg=typer.colors.RED)
        raise typer.Exit(code=1) from exc
    return settings


def _setup_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        level=level,
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))


async def _run_fetch(settings: Settings) -> list[MovieRecord]:
    async with PageFetcher.from_settings(settings) as fetcher:
        return await fetch_current_list(settings, fetcher)


async def _run_check(settings: Settings, tmdb_id: int) -> tuple[bool, dict[str, Any] | None]:
    assert settings.radarr_api_url is not None
    assert settings.radarr_api_key is not None

    async with RadarrClient(
        base_url=settings.radarr_api_url,
        api_key=settings.radarr_api_key,
    ) as client:
        existing = await client.get_movies_by_tmdb(tmdb_id)
        lookup = await client.lookup_movie_by_tmdb(tmdb_id)
    return bool(existing), lookup


async def _watch(settings: Settings, *, max_runs: int | None = None) -> None:
    interval_seconds = settings.check_interval_minutes * 60
    runs = 0
    while True:
        try:
            result = await run_once(settings)
        except RUN_ERRORS as exc:
            logger.error(f"Run failed, retrying in {settings.check_interval_minutes} minutes: {exc}")
        except Exception:
            logger.exception(f"Unexpected error, retrying in {settings.check_interval_minutes} minutes")
        else:
            _log_result(result)

        runs += 1
        if max_runs is not None and runs >= max_runs:
            return
        await asyncio.sleep(interval_seconds)


def _render_movies(movies: list[MovieRecord]) -> None:
    if not movies:
        typer.secho("No movies found.", fg=typer.colors.YELLOW)
        return

    for idx, movie in enumerate(movies, start=1):
        ids = []
        if movie.tmdb_id:
            ids.append(f"tmdb:{movie.tmdb_id}")
        if movie.imdb_id:
            ids.append(f"imdb:{movie.imdb_id}")
        suffix = f" • {', '.join(ids)}" if ids else " • no TMDB id"
        typer.echo(f"{idx}. {movie.label}{suffix}")


def _render_result(result: PipelineResult) -> None:
    typer.secho(
        f"Discovered: {result.total_movies} | New: {len(result.new_movies)}",
        fg=typer.colors.CYAN,
    )
    summary = result.summary
    if summary is None:
        return

    prefix = "[DRY RUN] " if summary.dry_run else ""
    typer.secho(
        f"{prefix}Added: {len(summary.added)} | "
        f"Already present: {len(summary.existing)} | "
        f"Skipped: {len(summary.skipped)} | "
        f"Errors: {len(summary.errors)}",
        fg=typer.colors.CYAN,
    )
    if summary.added:
        typer.echo("Added titles:")
        for title in summary.added:
            typer.echo(f"  - {title}")
    if summary.skipped:
        typer.echo("Skipped titles (no TMDB id):")
        for title in summary.skipped:
            typer.echo(f"  - {title}")
    if summary.errors:
        typer.secho("Errors:", fg=typer.colors.RED)
        for reason in summary.errors:
            typer.echo(f"  - {reason}")


def _log_result(result: PipelineResult) -> None:
    if result.summary is None:
        logger.info(f"Run complete: {result.total_movies} movies, nothing new")
        return
    summary = result.summary
    logger.info(
        f"Run complete: {result.total_movies} movies, {len(result.new_movies)} new, "
        f"{len(summary.added)} added, {len(summary.existing)} already present, "
        f"{len(summary.skipped)} skipped, {len(summary.errors)} failed",
    )


if __name__ == "__main__":  # pragma: no cover
    main()
