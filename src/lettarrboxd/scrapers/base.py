"""Shared building blocks for the Letterboxd list scrapers."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Protocol
from urllib.parse import urljoin

from lettarrboxd.models import ListType, MovieRecord

LETTERBOXD_BASE_URL = "https://letterboxd.com"

# Checked in order, first match wins.
URL_PATTERNS: dict[ListType, re.Pattern[str]] = {
    ListType.WATCHLIST: re.compile(r"^https://letterboxd\.com/[^/]+/watchlist/?$"),
    ListType.REGULAR_LIST: re.compile(r"^https://letterboxd\.com/[^/]+/list/[^/]+/?$"),
    ListType.WATCHED_MOVIES: re.compile(r"^https://letterboxd\.com/[^/]+/films/?$"),
    ListType.ACTOR_FILMOGRAPHY: re.compile(r"^https://letterboxd\.com/actor/[^/]+/?$"),
    ListType.DIRECTOR_FILMOGRAPHY: re.compile(r"^https://letterboxd\.com/director/[^/]+/?$"),
    ListType.WRITER_FILMOGRAPHY: re.compile(r"^https://letterboxd\.com/writer/[^/]+/?$"),
    ListType.COLLECTIONS: re.compile(r"^https://letterboxd\.com/films/in/[^/]+/?$"),
    ListType.POPULAR_MOVIES: re.compile(r"^https://letterboxd\.com/films/popular/?$"),
}


class ScraperError(Exception):
    """Raised when scraping fails."""


class UnsupportedListError(ScraperError):
    """Raised when a URL does not match any supported Letterboxd list shape."""


class FetchError(ScraperError):
    """Raised when a page cannot be retrieved."""

    def __init__(self, message: str, *, url: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ExtractionError(ScraperError):
    """Raised when a film page lacks the fields a record cannot exist without."""

    def __init__(self, message: str, *, url: str) -> None:
        super().__init__(f"{message} ({url})")
        self.url = url


class HtmlFetcher(Protocol):
    """Anything able to turn a URL into raw HTML."""

    async def fetch_html(self, url: str) -> str:
        """Return the page body or raise FetchError."""


@dataclass(frozen=True)
class ListSource:
    url: str
    list_type: ListType


def detect_list_type(url: str) -> ListType | None:
    for list_type, pattern in URL_PATTERNS.items():
        if pattern.match(url):
            return list_type
    return None


def classify_source(url: str) -> ListSource:
    list_type = detect_list_type(url)
    if list_type is None:
        raise UnsupportedListError(f"Unsupported URL format: {url}")
    return ListSource(url=url, list_type=list_type)


def absolute_url(link: str) -> str:
    """Resolve a (possibly relative) Letterboxd link against the site origin."""
    return urljoin(f"{LETTERBOXD_BASE_URL}/", link)


class MovieListScraper(ABC):
    """Base class for scrapers turning one Letterboxd source into movie records."""

    name: str = "base"

    @abstractmethod
    async def get_movies(self) -> list[MovieRecord]:
        """
        Retrieve every movie of the configured source.

        Walks all pages of the source, applies the take strategy and resolves
        each selected film page into a MovieRecord.

        Raises:
            FetchError: If any page or film page cannot be fetched
            ExtractionError: If a film page is missing its name or id
        """


__all__ = [
    "ExtractionError",
    "FetchError",
    "HtmlFetcher",
    "LETTERBOXD_BASE_URL",
    "ListSource",
    "MovieListScraper",
    "ScraperError",
    "URL_PATTERNS",
    "UnsupportedListError",
    "absolute_url",
    "classify_source",
    "detect_list_type",
]
