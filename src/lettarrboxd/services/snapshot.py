from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

from pydantic import ValidationError

from lettarrboxd.models import MovieRecord, Snapshot
from lettarrboxd.scrapers.base import absolute_url

logger = logging.getLogger(__name__)


class SnapshotError(RuntimeError):
    """Raised when the snapshot file cannot be written."""


class SnapshotStore:
    """Reads and replaces the single JSON file holding the previous run's movies."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> list[MovieRecord]:
        """Return the previous run's movies; a missing or unreadable file counts as empty."""
        if not self._path.exists():
            logger.debug(f"No previous {self._path.name} found, treating all movies as new")
            return []

        try:
            snapshot = Snapshot.model_validate_json(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError, ValidationError) as exc:
            logger.warning(f"Could not read snapshot {self._path}, treating all movies as new: {exc}")
            return []

        return snapshot.movies

    def save(self, movies: Iterable[MovieRecord], *, now: datetime | None = None) -> Snapshot:
        """Overwrite the snapshot with exactly ``movies``."""
        moment = now or datetime.now(UTC)
        movie_list = list(movies)
        snapshot = Snapshot(
            timestamp=moment.isoformat(),
            query_date=moment.astimezone().date().isoformat(),
            total_movies=len(movie_list),
            movies=movie_list,
        )

        tmp_path = self._path.with_name(f"{self._path.name}.tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(
                snapshot.model_dump_json(by_alias=True, indent=2),
                encoding="utf-8",
            )
            os.replace(tmp_path, self._path)
        except OSError as exc:
            raise SnapshotError(f"Failed to write snapshot {self._path}: {exc}") from exc

        logger.debug(f"Saved {len(movie_list)} movies to {self._path}")
        return snapshot


def find_new_movies(current: list[MovieRecord], previous: list[MovieRecord]) -> list[MovieRecord]:
    """Movies in ``current`` whose film link was not present in ``previous``.

    Identity is the absolute film link only; title or year edits never make a
    movie new again.
    """
    seen = {absolute_url(movie.slug) for movie in previous}
    return [movie for movie in current if absolute_url(movie.slug) not in seen]


__all__ = ["SnapshotError", "SnapshotStore", "find_new_movies"]
