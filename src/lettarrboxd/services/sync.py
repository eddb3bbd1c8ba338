from __future__ import annotations

import asyncio
import logging

import httpx

from lettarrboxd.clients.radarr import RadarrClient, build_add_movie_payload, is_already_added
from lettarrboxd.models import MovieRecord, SyncPreferences, SyncSummary

logger = logging.getLogger(__name__)

DEFAULT_TAG_NAME = "letterboxd"
REGISTRATION_DELAY_SECONDS = 1.0


class SyncError(RuntimeError):
    """Raised when a run cannot proceed because Radarr prerequisites are missing."""


class SyncService:
    """Registers Letterboxd movies with Radarr, one at a time."""

    def __init__(
        self,
        client: RadarrClient,
        preferences: SyncPreferences,
        *,
        delay: float = REGISTRATION_DELAY_SECONDS,
    ) -> None:
        self._client = client
        self._preferences = preferences
        self._delay = delay

    async def resolve_quality_profile_id(self) -> int | None:
        name = self._preferences.quality_profile_name
        logger.debug(f"Getting quality profile ID for: {name}")
        try:
            profiles = await self._client.list_quality_profiles()
        except httpx.HTTPError as exc:
            logger.error(f"Error getting quality profiles: {exc}")
            return None

        for profile in profiles:
            if profile.get("name") == name:
                logger.debug(f"Found quality profile: {name} (ID: {profile.get('id')})")
                return profile.get("id")

        available = ", ".join(str(p.get("name")) for p in profiles) or "<none>"
        logger.error(f"Quality profile not found: {name}. Available profiles: {available}")
        return None

    async def resolve_root_folder_path(self) -> str | None:
        folder_id = self._preferences.root_folder_id
        try:
            if folder_id is not None:
                folder = await self._client.get_root_folder(folder_id)
                if not folder:
                    logger.error(f"Root folder not found in Radarr: ID {folder_id}")
                    return None
            else:
                folders = await self._client.list_root_folders()
                if not folders:
                    logger.error("No root folders found in Radarr")
                    return None
                folder = folders[0]
        except httpx.HTTPError as exc:
            target = f"root folder {folder_id}" if folder_id is not None else "root folders"
            logger.error(f"Error getting {target}: {exc}")
            return None

        path = folder.get("path")
        logger.debug(f"Using root folder: {path}")
        return path

    async def resolve_tag_ids(self) -> list[int]:
        """Resolve (creating when missing) every tag this run applies.

        A tag that cannot be resolved is logged and left out; it never aborts the run.
        """
        tag_ids: list[int] = []
        for tag_name in self._required_tag_names():
            tag_id = await self._get_or_create_tag(tag_name)
            if tag_id is None:
                if not self._preferences.dry_run:
                    logger.warning(f"Failed to create or retrieve tag: {tag_name}")
                continue
            tag_ids.append(tag_id)
        return tag_ids

    async def sync(self, movies: list[MovieRecord]) -> SyncSummary:
        dry_run = self._preferences.dry_run
        summary = SyncSummary(dry_run=dry_run)
        if not movies:
            return summary

        quality_profile_id = await self.resolve_quality_profile_id()
        if quality_profile_id is None:
            raise SyncError("Could not get quality profile ID.")

        root_folder_path = await self.resolve_root_folder_path()
        if root_folder_path is None:
            raise SyncError("Could not get root folder.")

        tag_ids = await self.resolve_tag_ids()

        for index, movie in enumerate(movies):
            if index > 0:
                await asyncio.sleep(self._delay)
            await self._add_movie(
                movie,
                summary,
                quality_profile_id=quality_profile_id,
                root_folder_path=root_folder_path,
                tag_ids=tag_ids,
            )

        logger.info(
            f"Sync finished: {len(summary.added)} added, {len(summary.existing)} already present, "
            f"{len(summary.skipped)} skipped, {len(summary.errors)} failed",
        )
        return summary

    async def _add_movie(
        self,
        movie: MovieRecord,
        summary: SyncSummary,
        *,
        quality_profile_id: int,
        root_folder_path: str,
        tag_ids: list[int],
    ) -> None:
        if movie.tmdb_id is None:
            logger.warning(
                f"Could not add movie {movie.name} because no tmdb id was found. Is this a TV show?",
            )
            summary.skipped.append(movie.label)
            return

        payload = build_add_movie_payload(
            movie=movie,
            quality_profile_id=quality_profile_id,
            root_folder_path=root_folder_path,
            minimum_availability=self._preferences.minimum_availability,
            monitored=self._preferences.monitored,
            tag_ids=tag_ids,
        )

        if self._preferences.dry_run:
            logger.info(
                f"[DRY RUN] Would add movie to Radarr: {payload['title']} "
                f"(TMDB: {payload['tmdbId']}) {payload}",
            )
            summary.added.append(movie.label)
            return

        logger.debug(f"Adding movie to Radarr: {movie.name}")
        try:
            await self._client.add_movie(payload)
        except httpx.HTTPStatusError as exc:
            if is_already_added(exc):
                logger.debug(f"Movie {movie.name} already exists in Radarr, skipping")
                summary.existing.append(movie.label)
                return
            status = exc.response.status_code
            logger.error(
                f"Error adding movie {movie.name} (TMDB: {movie.tmdb_id}): "
                f"HTTP {status} {exc.response.text[:500]}",
            )
            summary.errors.append(f"{movie.label} (TMDB: {movie.tmdb_id}): HTTP {status}")
            return
        except httpx.HTTPError as exc:
            logger.error(f"Error adding movie {movie.name} (TMDB: {movie.tmdb_id}): {exc}")
            summary.errors.append(f"{movie.label} (TMDB: {movie.tmdb_id}): {exc}")
            return
        except Exception as exc:
            logger.exception(f"Unexpected error adding movie {movie.name} (TMDB: {movie.tmdb_id})")
            summary.errors.append(f"{movie.label} (TMDB: {movie.tmdb_id}): {exc}")
            return

        logger.info(f"Successfully added movie: {payload['title']}")
        summary.added.append(movie.label)

    def _required_tag_names(self) -> list[str]:
        names = [DEFAULT_TAG_NAME, *self._preferences.tag_names]
        return list(dict.fromkeys(name for name in names if name))

    async def _get_or_create_tag(self, tag_name: str) -> int | None:
        logger.debug(f"Getting or creating tag: {tag_name}")
        try:
            tags = await self._client.list_tags()
            for tag in tags:
                if tag.get("label") == tag_name:
                    logger.debug(f"Tag already exists: {tag_name} (ID: {tag.get('id')})")
                    return tag.get("id")

            if self._preferences.dry_run:
                logger.info(f"[DRY RUN] Would create tag: {tag_name}")
                return None

            created = await self._client.create_tag(tag_name)
        except httpx.HTTPError as exc:
            logger.error(f"Error getting or creating tag {tag_name}: {exc}")
            return None

        logger.info(f"Created tag: {tag_name} (ID: {created.get('id')})")
        return created.get("id")


__all__ = ["DEFAULT_TAG_NAME", "SyncError", "SyncService"]
