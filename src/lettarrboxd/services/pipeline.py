"""End-to-end run: scrape the configured list, diff it, and push new movies to Radarr."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from lettarrboxd.clients.radarr import RadarrClient, radarr_client
from lettarrboxd.config import Settings, SettingsError
from lettarrboxd.models import MovieRecord, SyncSummary
from lettarrboxd.scrapers import PageFetcher, Selection, build_scraper
from lettarrboxd.scrapers.base import HtmlFetcher
from lettarrboxd.scrapers.lists import DETAIL_CONCURRENCY
from lettarrboxd.scrapers.pagination import PAGE_DELAY_SECONDS
from lettarrboxd.services.snapshot import SnapshotStore, find_new_movies
from lettarrboxd.services.sync import REGISTRATION_DELAY_SECONDS, SyncService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineResult:
    total_movies: int
    new_movies: list[MovieRecord] = field(default_factory=list)
    summary: SyncSummary | None = None


async def fetch_current_list(
    settings: Settings,
    fetcher: HtmlFetcher,
    *,
    page_delay: float = PAGE_DELAY_SECONDS,
    concurrency: int = DETAIL_CONCURRENCY,
) -> list[MovieRecord]:
    """Scrape the configured Letterboxd URL into movie records."""
    if not settings.letterboxd_url:
        raise SettingsError("LETTERBOXD_URL is not configured")

    scraper = build_scraper(
        settings.letterboxd_url,
        fetcher,
        selection=Selection.from_settings(settings),
        page_delay=page_delay,
        concurrency=concurrency,
    )
    logger.info(f"Fetching movies from {settings.letterboxd_url} using the {scraper.name} scraper")
    return await scraper.get_movies()


async def reconcile(
    settings: Settings,
    movies: list[MovieRecord],
    client: RadarrClient,
    *,
    store: SnapshotStore | None = None,
    registration_delay: float = REGISTRATION_DELAY_SECONDS,
) -> PipelineResult:
    """Sync movies unseen by the previous run, then make ``movies`` the new baseline.

    The snapshot is only replaced once syncing finished; a run aborted by a
    missing quality profile or root folder leaves the old baseline in place so
    the next run retries the same movies.
    """
    store = store or SnapshotStore(settings.snapshot_path)
    previous = store.load()
    new_movies = find_new_movies(movies, previous)

    summary: SyncSummary | None = None
    if new_movies:
        logger.info(f"Found {len(new_movies)} new movies out of {len(movies)} total movies")
        service = SyncService(client, settings.sync_preferences(), delay=registration_delay)
        summary = await service.sync(new_movies)
    else:
        logger.info("No new movies found, skipping Radarr processing")

    store.save(movies)
    return PipelineResult(total_movies=len(movies), new_movies=new_movies, summary=summary)


async def run_once(settings: Settings) -> PipelineResult:
    """One complete, unattended run using live Letterboxd and Radarr connections."""
    settings.require_run()
    assert settings.radarr_api_url is not None
    assert settings.radarr_api_key is not None

    async with PageFetcher.from_settings(settings) as fetcher:
        movies = await fetch_current_list(settings, fetcher)

    async with radarr_client(settings.radarr_api_url, settings.radarr_api_key) as client:
        return await reconcile(settings, movies, client)


__all__ = ["PipelineResult", "fetch_current_list", "reconcile", "run_once"]
