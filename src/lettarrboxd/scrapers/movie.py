"""Film page parsing: turns one Letterboxd film page into a MovieRecord."""

from __future__ import annotations

import json
import logging
import re

from selectolax.lexbor import LexborHTMLParser

from lettarrboxd.models import MovieRecord
from lettarrboxd.scrapers.base import ExtractionError, HtmlFetcher, absolute_url

logger = logging.getLogger(__name__)

TITLE_SELECTORS = (".primaryname", "h1.headline-1")
FILM_ID_SELECTORS = (".film-poster[data-film-id]", "body[data-film-id]", "[data-film-id]")
TMDB_LINK_SELECTOR = 'a[data-track-action="TMDB"], a[data-track-action="TMDb"]'
IMDB_LINK_SELECTOR = 'a[href*="imdb.com"]'
RELEASE_DATE_SELECTOR = ".releasedate a, .release-year a"

TMDB_MOVIE_PATTERN = re.compile(r"/movie/(\d+)")
IMDB_TITLE_PATTERN = re.compile(r"/title/(tt\d+)")
RELEASE_YEAR_PATTERN = re.compile(r"/films/year/(\d{4})/?")


class MovieDetailExtractor:
    """Fetches film pages and extracts their canonical identifiers."""

    def __init__(self, fetcher: HtmlFetcher) -> None:
        self._fetcher = fetcher

    async def get_movie(self, link: str) -> MovieRecord:
        """
        Resolve one film link into a MovieRecord.

        Args:
            link: The ``data-target-link`` value of a poster (relative or absolute)

        Raises:
            FetchError: If the film page cannot be retrieved
            ExtractionError: If the page has no title or Letterboxd film id
        """
        movie_url = absolute_url(link)
        html = await self._fetcher.fetch_html(movie_url)
        return extract_movie_from_html(link, html, url=movie_url)


def extract_movie_from_html(slug: str, html: str, *, url: str | None = None) -> MovieRecord:
    tree = LexborHTMLParser(html)
    source = url or absolute_url(slug)

    name = _extract_name(tree)
    if not name:
        raise ExtractionError("Could not extract movie name", url=source)

    film_id = _extract_film_id(tree)
    if film_id is None:
        raise ExtractionError("Could not find Letterboxd film ID", url=source)

    tmdb_id = _extract_tmdb_id(tree)
    if tmdb_id is None:
        logger.debug(f"No TMDB movie link on {source}")

    return MovieRecord(
        id=film_id,
        name=name,
        slug=slug,
        tmdb_id=tmdb_id,
        imdb_id=_extract_imdb_id(tree),
        published_year=_extract_published_year(tree),
    )


def _extract_name(tree: LexborHTMLParser) -> str | None:
    for selector in TITLE_SELECTORS:
        node = tree.css_first(selector)
        if node is not None:
            text = node.text().strip()
            if text:
                return text
    return _extract_ld_json_name(tree)


def _extract_ld_json_name(tree: LexborHTMLParser) -> str | None:
    node = tree.css_first("script[type='application/ld+json']")
    if node is None:
        return None
    # Letterboxd wraps the payload in /* <![CDATA[ */ ... /* ]]> */
    cleaned = re.sub(r"/\*.*?\*/", "", node.text(), flags=re.S).strip()
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        return None
    if isinstance(data, list):
        data = data[0] if data else {}
    if not isinstance(data, dict):
        return None
    name = data.get("name")
    return name.strip() if isinstance(name, str) and name.strip() else None


def _extract_film_id(tree: LexborHTMLParser) -> int | None:
    for selector in FILM_ID_SELECTORS:
        node = tree.css_first(selector)
        if node is None:
            continue
        raw = (node.attributes.get("data-film-id") or "").strip()
        if raw.isdigit():
            return int(raw)
    return None


def _extract_tmdb_id(tree: LexborHTMLParser) -> str | None:
    # TV entries link to /tv/<id>, which Radarr cannot use
    node = tree.css_first(TMDB_LINK_SELECTOR)
    if node is None:
        return None
    match = TMDB_MOVIE_PATTERN.search(node.attributes.get("href") or "")
    return match.group(1) if match else None


def _extract_imdb_id(tree: LexborHTMLParser) -> str | None:
    for node in tree.css(IMDB_LINK_SELECTOR):
        match = IMDB_TITLE_PATTERN.search(node.attributes.get("href") or "")
        if match:
            return match.group(1)
    return None


def _extract_published_year(tree: LexborHTMLParser) -> int | None:
    node = tree.css_first(RELEASE_DATE_SELECTOR)
    if node is None:
        return None
    match = RELEASE_YEAR_PATTERN.search(node.attributes.get("href") or "")
    return int(match.group(1)) if match else None


__all__ = ["MovieDetailExtractor", "extract_movie_from_html"]
