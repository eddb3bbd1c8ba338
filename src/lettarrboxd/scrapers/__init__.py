"""Letterboxd list scraping."""

from lettarrboxd.scrapers.base import (
    ExtractionError,
    FetchError,
    MovieListScraper,
    ScraperError,
    UnsupportedListError,
    classify_source,
    detect_list_type,
)
from lettarrboxd.scrapers.factory import build_scraper
from lettarrboxd.scrapers.fetch import PageFetcher
from lettarrboxd.scrapers.selection import Selection

__all__ = [
    "ExtractionError",
    "FetchError",
    "MovieListScraper",
    "PageFetcher",
    "ScraperError",
    "Selection",
    "UnsupportedListError",
    "build_scraper",
    "classify_source",
    "detect_list_type",
]
