"""Factory selecting the scraper for a classified Letterboxd URL."""

from __future__ import annotations

from lettarrboxd.models import ListType
from lettarrboxd.scrapers.base import HtmlFetcher, MovieListScraper, classify_source
from lettarrboxd.scrapers.lists import (
    DETAIL_CONCURRENCY,
    CollectionsScraper,
    ListScraper,
    PopularScraper,
)
from lettarrboxd.scrapers.pagination import PAGE_DELAY_SECONDS
from lettarrboxd.scrapers.selection import Selection

_LIST_TYPES = {
    ListType.WATCHLIST,
    ListType.REGULAR_LIST,
    ListType.WATCHED_MOVIES,
    ListType.ACTOR_FILMOGRAPHY,
    ListType.DIRECTOR_FILMOGRAPHY,
    ListType.WRITER_FILMOGRAPHY,
}


def build_scraper(
    url: str,
    fetcher: HtmlFetcher,
    *,
    selection: Selection | None = None,
    page_delay: float = PAGE_DELAY_SECONDS,
    concurrency: int = DETAIL_CONCURRENCY,
) -> MovieListScraper:
    """
    Build the scraper matching the shape of a Letterboxd URL.

    Args:
        url: A watchlist, list, films, filmography, collection or popular URL
        fetcher: Used for both listing pages and film pages
        selection: Optional take/strategy truncation
        page_delay: Pause between listing pages, in seconds
        concurrency: Maximum film pages fetched at once

    Returns:
        Configured MovieListScraper instance

    Raises:
        UnsupportedListError: If the URL matches no supported shape
    """
    source = classify_source(url)
    options = {"selection": selection, "page_delay": page_delay, "concurrency": concurrency}

    if source.list_type in _LIST_TYPES:
        return ListScraper(source.url, fetcher, list_type=source.list_type, **options)

    if source.list_type is ListType.COLLECTIONS:
        return CollectionsScraper(source.url, fetcher, **options)

    return PopularScraper(source.url, fetcher, **options)


__all__ = ["build_scraper"]
