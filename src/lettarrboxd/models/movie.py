from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class ListType(str, Enum):
    """Shapes of Letterboxd pages that can be scraped into a movie list."""

    WATCHLIST = "watchlist"
    REGULAR_LIST = "regular_list"
    WATCHED_MOVIES = "watched_movies"
    ACTOR_FILMOGRAPHY = "actor_filmography"
    DIRECTOR_FILMOGRAPHY = "director_filmography"
    WRITER_FILMOGRAPHY = "writer_filmography"
    COLLECTIONS = "collections"
    POPULAR_MOVIES = "popular_movies"


class TakeStrategy(str, Enum):
    OLDEST = "oldest"
    NEWEST = "newest"


class MovieRecord(BaseModel):
    """A Letterboxd film resolved from its detail page."""

    id: int
    name: str
    slug: str
    tmdb_id: str | None = Field(default=None, alias="tmdbId")
    imdb_id: str | None = Field(default=None, alias="imdbId")
    published_year: int | None = Field(default=None, alias="publishedYear")

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
    }

    @property
    def label(self) -> str:
        """Human-readable title used in logs and summaries."""
        if self.published_year:
            return f"{self.name} ({self.published_year})"
        return self.name


class Snapshot(BaseModel):
    """Full result set of the previous run, persisted as ``movies.json``."""

    timestamp: str
    query_date: str = Field(alias="queryDate")
    total_movies: int = Field(alias="totalMovies")
    movies: list[MovieRecord] = Field(default_factory=list)

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
    }


class SyncPreferences(BaseModel):
    """Radarr preferences applied to every movie added during one run."""

    quality_profile_name: str
    minimum_availability: str = "released"
    root_folder_id: int | None = None
    tag_names: list[str] = Field(default_factory=list)
    add_unmonitored: bool = False
    dry_run: bool = False

    model_config = {"frozen": True}

    @property
    def monitored(self) -> bool:
        return not self.add_unmonitored


class SyncSummary(BaseModel):
    """Outcome of a synchronization attempt."""

    dry_run: bool
    added: list[str] = Field(default_factory=list)
    existing: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)

    @property
    def total_processed(self) -> int:
        return len(self.added) + len(self.existing) + len(self.skipped) + len(self.errors)
