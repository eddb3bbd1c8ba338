"""HTML retrieval for Letterboxd pages, optionally routed through FlareSolverr."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from lettarrboxd.scrapers.base import FetchError

if TYPE_CHECKING:
    from lettarrboxd.config import Settings

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_TIMEOUT_MS = 60000
USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)


class PageFetcher:
    """Fetches raw HTML, transparently using a FlareSolverr endpoint when configured."""

    def __init__(
        self,
        *,
        flaresolverr_url: str | None = None,
        max_timeout: int = DEFAULT_MAX_TIMEOUT_MS,
        session: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._flaresolverr_url = flaresolverr_url
        self._max_timeout = max_timeout
        self._session = session
        # The bypass channel must outlive the challenge it is solving
        bypass_timeout = max(timeout, max_timeout / 1000 + 10)
        self._client = httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT, "Accept": "text/html,application/xhtml+xml"},
            timeout=bypass_timeout if flaresolverr_url else timeout,
            follow_redirects=True,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> PageFetcher:
        return cls(
            flaresolverr_url=settings.flaresolverr_url,
            max_timeout=settings.flaresolverr_max_timeout,
            session=settings.flaresolverr_session,
        )

    @property
    def bypass_enabled(self) -> bool:
        return bool(self._flaresolverr_url)

    async def fetch_html(self, url: str) -> str:
        if self.bypass_enabled:
            logger.debug(f"Fetching via FlareSolverr: {url}")
            return await self._fetch_via_flaresolverr(url)

        logger.debug(f"Fetching directly: {url}")
        return await self._fetch_direct(url)

    async def _fetch_direct(self, url: str) -> str:
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as exc:
            raise FetchError(f"HTTP request failed for {url}: {exc}", url=url) from exc

        if not response.is_success:
            raise FetchError(
                f"HTTP request failed: {response.status_code} {response.reason_phrase} ({url})",
                url=url,
                status_code=response.status_code,
            )
        return response.text

    async def _fetch_via_flaresolverr(self, url: str) -> str:
        assert self._flaresolverr_url is not None

        payload: dict[str, Any] = {
            "cmd": "request.get",
            "url": url,
            "maxTimeout": self._max_timeout,
        }
        if self._session:
            payload["session"] = self._session

        try:
            response = await self._client.post(self._flaresolverr_url, json=payload)
        except httpx.HTTPError as exc:
            raise FetchError(f"FlareSolverr request failed for {url}: {exc}", url=url) from exc

        if not response.is_success:
            raise FetchError(
                f"FlareSolverr request failed: {response.status_code} {response.reason_phrase}",
                url=url,
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise FetchError(f"FlareSolverr returned invalid JSON for {url}", url=url) from exc

        if data.get("status") != "ok":
            raise FetchError(f"FlareSolverr error: {data.get('message', 'unknown error')}", url=url)

        solution = data.get("solution") or {}
        status = solution.get("status")
        if isinstance(status, int) and status >= 400:
            raise FetchError(
                f"HTTP request failed via FlareSolverr: {status} ({url})",
                url=url,
                status_code=status,
            )

        logger.debug(f"FlareSolverr solved challenge for: {url}")
        return solution.get("response", "")

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> PageFetcher:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        await self.close()


__all__ = ["PageFetcher", "USER_AGENT"]
