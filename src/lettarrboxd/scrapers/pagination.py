"""Link extraction and sequential, paced pagination across Letterboxd pages."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from enum import Enum

from selectolax.lexbor import LexborHTMLParser

from lettarrboxd.scrapers.base import HtmlFetcher, absolute_url

logger = logging.getLogger(__name__)

PAGE_DELAY_SECONDS = 1.0
NEXT_PAGE_SELECTOR = ".paginate-nextprev .next"


class LinkProfile(str, Enum):
    """CSS selectors locating film links on a listing page."""

    # Server-rendered list pages wrap each film in a poster container
    POSTER = ".poster-container [data-target-link], .posteritem [data-target-link]"
    # AJAX collection and popularity pages render lazy react components
    REACT = ".react-component[data-target-link]"


def extract_movie_links(html: str, profile: LinkProfile) -> list[str]:
    tree = LexborHTMLParser(html)
    links: list[str] = []
    for node in tree.css(profile.value):
        link = node.attributes.get("data-target-link")
        if link:
            links.append(link)
    logger.debug(f"Found {len(links)} links.")
    return links


def extract_next_page_url(html: str) -> str | None:
    tree = LexborHTMLParser(html)
    node = tree.css_first(NEXT_PAGE_SELECTOR)
    if node is None:
        return None
    href = node.attributes.get("href")
    return absolute_url(href) if href else None


class Paginator:
    """Walks a paginated listing one page at a time, pausing between pages."""

    def __init__(
        self,
        fetcher: HtmlFetcher,
        *,
        profiles: Sequence[LinkProfile],
        page_delay: float = PAGE_DELAY_SECONDS,
    ) -> None:
        self._fetcher = fetcher
        self._profiles = tuple(profiles)
        self._page_delay = page_delay

    async def collect_links(self, start_url: str) -> list[str]:
        """Return every film link across all pages, in discovery order.

        Fetch errors propagate and discard whatever was accumulated, so callers
        never diff against a partial listing.
        """
        current_url: str | None = start_url
        all_links: list[str] = []

        while current_url:
            logger.debug(f"Fetching page: {current_url}")
            html = await self._fetcher.fetch_html(current_url)

            page_links = self._extract_links(html)
            if not page_links:
                break
            all_links.extend(page_links)

            current_url = extract_next_page_url(html)
            if current_url:
                await asyncio.sleep(self._page_delay)

        logger.debug(f"Retrieved {len(all_links)} links from {start_url}.")
        return all_links

    def _extract_links(self, html: str) -> list[str]:
        # First profile that matches anything wins
        for profile in self._profiles:
            links = extract_movie_links(html, profile)
            if links:
                return links
        return []


__all__ = [
    "LinkProfile",
    "NEXT_PAGE_SELECTOR",
    "PAGE_DELAY_SECONDS",
    "Paginator",
    "extract_movie_links",
    "extract_next_page_url",
]
