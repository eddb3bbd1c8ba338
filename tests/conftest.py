"""Shared test doubles."""

from collections.abc import Callable
from unittest.mock import AsyncMock

import pytest

from lettarrboxd.scrapers.base import FetchError


def build_fetcher(pages: dict[str, str]) -> AsyncMock:
    """An HtmlFetcher double serving ``pages`` and failing with 404 for anything else."""

    async def fetch_html(url: str) -> str:
        if url not in pages:
            raise FetchError(f"HTTP request failed: 404 Not Found ({url})", url=url, status_code=404)
        return pages[url]

    fetcher = AsyncMock()
    fetcher.fetch_html = AsyncMock(side_effect=fetch_html)
    return fetcher


@pytest.fixture
def fake_fetcher() -> Callable[[dict[str, str]], AsyncMock]:
    return build_fetcher
