"""Concrete scrapers, one per Letterboxd source shape."""

from __future__ import annotations

import asyncio
import logging

from lettarrboxd.models import ListType, MovieRecord
from lettarrboxd.scrapers.base import HtmlFetcher, MovieListScraper, UnsupportedListError
from lettarrboxd.scrapers.movie import MovieDetailExtractor
from lettarrboxd.scrapers.pagination import PAGE_DELAY_SECONDS, LinkProfile, Paginator
from lettarrboxd.scrapers.selection import Selection

logger = logging.getLogger(__name__)

DETAIL_CONCURRENCY = 10

_FILMOGRAPHY_TYPES = {
    ListType.ACTOR_FILMOGRAPHY,
    ListType.DIRECTOR_FILMOGRAPHY,
    ListType.WRITER_FILMOGRAPHY,
}


class PaginatedScraper(MovieListScraper):
    """Paginate, select, then resolve film pages with bounded concurrency."""

    link_profiles: tuple[LinkProfile, ...] = (LinkProfile.REACT,)

    def __init__(
        self,
        url: str,
        fetcher: HtmlFetcher,
        *,
        selection: Selection | None = None,
        page_delay: float = PAGE_DELAY_SECONDS,
        concurrency: int = DETAIL_CONCURRENCY,
    ) -> None:
        self._url = url
        self._fetcher = fetcher
        self._selection = selection or Selection()
        self._page_delay = page_delay
        self._concurrency = concurrency
        self._extractor = MovieDetailExtractor(fetcher)

    def start_url(self) -> str:
        """URL the paginator starts from, after any sort or endpoint rewrite."""
        return self._url

    async def get_movies(self) -> list[MovieRecord]:
        start_url = self.start_url()
        paginator = Paginator(self._fetcher, profiles=self.link_profiles, page_delay=self._page_delay)
        all_links = await paginator.collect_links(start_url)

        selected = self._selection.apply(all_links)
        logger.info(
            f"[{self.name}] Discovered {len(all_links)} films, resolving {len(selected)} from {start_url}",
        )
        return await self._resolve_movies(selected)

    async def _resolve_movies(self, links: list[str]) -> list[MovieRecord]:
        semaphore = asyncio.Semaphore(self._concurrency)

        async def resolve_one(link: str) -> MovieRecord:
            async with semaphore:
                return await self._extractor.get_movie(link)

        # The first failure cancels every sibling fetch
        try:
            async with asyncio.TaskGroup() as group:
                tasks = [group.create_task(resolve_one(link)) for link in links]
        except ExceptionGroup as exc_group:
            raise exc_group.exceptions[0] from None
        return [task.result() for task in tasks]


class ListScraper(PaginatedScraper):
    """Watchlists, user lists, watched films and filmographies."""

    name = "list"
    # Older list pages still render plain poster containers
    link_profiles = (LinkProfile.REACT, LinkProfile.POSTER)

    def __init__(
        self,
        url: str,
        fetcher: HtmlFetcher,
        *,
        list_type: ListType = ListType.REGULAR_LIST,
        selection: Selection | None = None,
        page_delay: float = PAGE_DELAY_SECONDS,
        concurrency: int = DETAIL_CONCURRENCY,
    ) -> None:
        super().__init__(
            url,
            fetcher,
            selection=selection,
            page_delay=page_delay,
            concurrency=concurrency,
        )
        self._list_type = list_type

    def start_url(self) -> str:
        if not self._selection.oldest_first:
            return self._url
        # Filmographies have no "date added", only release dates
        sort = "release-earliest" if self._list_type in _FILMOGRAPHY_TYPES else "date-earliest"
        return f"{self._url.rstrip('/')}/by/{sort}/"


class CollectionsScraper(PaginatedScraper):
    """Franchise collections, served through the AJAX film grid."""

    name = "collections"

    def start_url(self) -> str:
        url = self._url
        if self._selection.oldest_first:
            url = f"{url.rstrip('/')}/by/release-earliest/"
        return self._to_ajax_url(url)

    @staticmethod
    def _to_ajax_url(url: str) -> str:
        clean_url = url.rstrip("/")
        if "/films/in/" in clean_url:
            return clean_url.replace("/films/in/", "/films/ajax/in/", 1) + "/"
        if "/films/ajax/" in clean_url:
            return clean_url + "/"
        raise UnsupportedListError(f"Unsupported collections URL format: {url}")


class PopularScraper(PaginatedScraper):
    """The site-wide popularity ranking, served through the AJAX film grid."""

    name = "popular"

    def start_url(self) -> str:
        if self._selection.oldest_first:
            logger.warning(
                "Popular films have no earliest-first ordering; "
                "the oldest strategy only truncates the popularity ranking",
            )
        return self._to_ajax_url(self._url)

    @staticmethod
    def _to_ajax_url(url: str) -> str:
        clean_url = url.rstrip("/")
        if clean_url.endswith("/films/popular"):
            return clean_url[: -len("/films/popular")] + "/films/ajax/popular/"
        if "/films/ajax/popular" in clean_url:
            return clean_url + "/"
        raise UnsupportedListError(f"Unsupported popular movies URL format: {url}")


__all__ = [
    "CollectionsScraper",
    "DETAIL_CONCURRENCY",
    "ListScraper",
    "PaginatedScraper",
    "PopularScraper",
]
