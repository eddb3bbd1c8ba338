from __future__ import annotations

from collections.abc import Iterable, Mapping
from contextlib import asynccontextmanager
from typing import Any

import httpx

from lettarrboxd import __version__
from lettarrboxd.models import MovieRecord

DEFAULT_TIMEOUT = 20.0
USER_AGENT = f"lettarrboxd/{__version__}"
API_PREFIX = "/api/v3"
ALREADY_ADDED_MARKER = "already been added"


class RadarrClient:
    """Thin asynchronous wrapper around the Radarr v3 API."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        # Accept both http://host:7878 and http://host:7878/api/v3
        normalized_url = base_url.rstrip("/")
        if normalized_url.endswith(API_PREFIX):
            normalized_url = normalized_url[: -len(API_PREFIX)]

        headers = {
            "X-Api-Key": api_key,
            "User-Agent": USER_AGENT,
            "Accept": "application/json",
        }
        self._client = httpx.AsyncClient(
            base_url=normalized_url,
            headers=headers,
            timeout=timeout,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def lookup_movie_by_tmdb(self, tmdb_id: int | str) -> dict[str, Any] | None:
        """Lookup a movie in Radarr's metadata catalog by TMDB ID.

        Returns:
            The catalog entry, or None when Radarr does not know the ID
        """
        response = await self._client.get(
            f"{API_PREFIX}/movie/lookup/tmdb",
            params={"tmdbId": str(tmdb_id)},
        )
        if response.status_code == 404:
            return None
        response.raise_for_status()
        data = response.json()
        if isinstance(data, list):
            data = data[0] if data else None
        return data or None

    async def get_movies_by_tmdb(self, tmdb_id: int | str) -> list[dict[str, Any]]:
        """Return library entries with the given TMDB ID (empty when not in the library)."""
        response = await self._client.get(f"{API_PREFIX}/movie", params={"tmdbId": str(tmdb_id)})
        response.raise_for_status()
        return response.json()

    async def list_quality_profiles(self) -> list[dict[str, Any]]:
        return await self._get_json("/qualityprofile")

    async def list_root_folders(self) -> list[dict[str, Any]]:
        return await self._get_json("/rootfolder")

    async def get_root_folder(self, folder_id: int) -> dict[str, Any] | None:
        response = await self._client.get(f"{API_PREFIX}/rootfolder/{folder_id}")
        if response.status_code == 404:
            return None
        response.raise_for_status()
        return response.json() or None

    async def list_tags(self) -> list[dict[str, Any]]:
        return await self._get_json("/tag")

    async def create_tag(self, label: str) -> dict[str, Any]:
        response = await self._client.post(f"{API_PREFIX}/tag", json={"label": label})
        response.raise_for_status()
        return response.json()

    async def add_movie(self, payload: Mapping[str, Any]) -> Mapping[str, Any]:
        response = await self._client.post(f"{API_PREFIX}/movie", json=payload)
        response.raise_for_status()
        return response.json()

    async def _get_json(self, path: str) -> Any:
        response = await self._client.get(f"{API_PREFIX}{path}")
        response.raise_for_status()
        return response.json()

    async def __aenter__(self) -> RadarrClient:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        await self.close()


@asynccontextmanager
async def radarr_client(
    base_url: str,
    api_key: str,
    *,
    timeout: float = DEFAULT_TIMEOUT,
):
    client = RadarrClient(base_url=base_url, api_key=api_key, timeout=timeout)
    try:
        yield client
    finally:
        await client.close()


def build_add_movie_payload(
    *,
    movie: MovieRecord,
    quality_profile_id: int,
    root_folder_path: str,
    minimum_availability: str,
    monitored: bool,
    tag_ids: Iterable[int] | None = None,
    search_on_add: bool = True,
) -> dict[str, Any]:
    """Assemble the payload expected by Radarr's POST /movie endpoint."""

    if movie.tmdb_id is None:
        raise ValueError(f"{movie.name} has no TMDB id")

    return {
        "title": movie.name,
        "qualityProfileId": quality_profile_id,
        "rootFolderPath": root_folder_path,
        "tmdbId": int(movie.tmdb_id),
        "minimumAvailability": minimum_availability,
        "monitored": monitored,
        "tags": list(tag_ids or []),
        "addOptions": {
            "searchForMovie": search_on_add,
        },
    }


def is_already_added(exc: httpx.HTTPStatusError) -> bool:
    """Whether Radarr rejected an add because the movie is already in the library."""
    return exc.response.status_code == 400 and ALREADY_ADDED_MARKER in exc.response.text


__all__ = [
    "RadarrClient",
    "build_add_movie_payload",
    "is_already_added",
    "radarr_client",
]
