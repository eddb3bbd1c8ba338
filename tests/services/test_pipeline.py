"""Tests for the end-to-end run."""

import json
from unittest.mock import AsyncMock

import pytest

from lettarrboxd.clients.radarr import RadarrClient
from lettarrboxd.config import Settings, SettingsError
from lettarrboxd.models import MovieRecord
from lettarrboxd.services.pipeline import fetch_current_list, reconcile
from lettarrboxd.services.snapshot import SnapshotStore
from lettarrboxd.services.sync import SyncError
from tests.fixtures.letterboxd_pages import film_page, list_page
from tests.fixtures.radarr_responses import (
    ADD_MOVIE_SUCCESS_RESPONSE,
    QUALITY_PROFILES_RESPONSE,
    ROOT_FOLDERS_RESPONSE,
    TAGS_RESPONSE,
)

MATRIX = MovieRecord(id=51518, name="The Matrix", slug="/film/the-matrix/", tmdb_id="603", published_year=1999)
HEAT = MovieRecord(id=51970, name="Heat", slug="/film/heat-1995/", tmdb_id="949", published_year=1995)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        letterboxd_url="https://letterboxd.com/someone/watchlist/",
        radarr_api_url="http://localhost:7878",
        radarr_api_key="secret",
        quality_profile="HD-1080p",
        data_dir=tmp_path,
    )


@pytest.fixture
def client() -> AsyncMock:
    mock = AsyncMock(spec=RadarrClient)
    mock.list_quality_profiles.return_value = QUALITY_PROFILES_RESPONSE
    mock.list_root_folders.return_value = ROOT_FOLDERS_RESPONSE
    mock.list_tags.return_value = TAGS_RESPONSE
    mock.add_movie.return_value = ADD_MOVIE_SUCCESS_RESPONSE
    return mock


class TestReconcile:
    @pytest.mark.asyncio
    async def test_first_run_treats_everything_as_new(self, settings, client):
        result = await reconcile(settings, [MATRIX, HEAT], client, registration_delay=0)

        assert result.total_movies == 2
        assert result.new_movies == [MATRIX, HEAT]
        assert client.add_movie.await_count == 2
        document = json.loads(settings.snapshot_path.read_text())
        assert document["totalMovies"] == 2
        assert [movie["slug"] for movie in document["movies"]] == ["/film/the-matrix/", "/film/heat-1995/"]

    @pytest.mark.asyncio
    async def test_only_unseen_movies_are_registered(self, settings, client):
        SnapshotStore(settings.snapshot_path).save([MATRIX])

        result = await reconcile(settings, [MATRIX, HEAT], client, registration_delay=0)

        assert result.new_movies == [HEAT]
        client.add_movie.assert_awaited_once()
        assert client.add_movie.await_args.args[0]["tmdbId"] == 949
        assert SnapshotStore(settings.snapshot_path).load() == [MATRIX, HEAT]

    @pytest.mark.asyncio
    async def test_nothing_new_skips_radarr(self, settings, client):
        SnapshotStore(settings.snapshot_path).save([MATRIX, HEAT])

        result = await reconcile(settings, [HEAT], client, registration_delay=0)

        assert result.summary is None
        client.list_quality_profiles.assert_not_awaited()
        assert SnapshotStore(settings.snapshot_path).load() == [HEAT]

    @pytest.mark.asyncio
    async def test_aborted_sync_keeps_previous_snapshot(self, settings, client):
        SnapshotStore(settings.snapshot_path).save([MATRIX])
        client.list_quality_profiles.return_value = []

        with pytest.raises(SyncError):
            await reconcile(settings, [MATRIX, HEAT], client, registration_delay=0)

        assert SnapshotStore(settings.snapshot_path).load() == [MATRIX]


class TestFetchCurrentList:
    @pytest.mark.asyncio
    async def test_scrapes_configured_url(self, settings, fake_fetcher):
        fetcher = fake_fetcher(
            {
                "https://letterboxd.com/someone/watchlist/": list_page(["/film/the-matrix/"]),
                "https://letterboxd.com/film/the-matrix/": film_page(),
            }
        )

        movies = await fetch_current_list(settings, fetcher, page_delay=0)

        assert [movie.tmdb_id for movie in movies] == ["603"]

    @pytest.mark.asyncio
    async def test_missing_url(self, settings, fake_fetcher):
        settings = settings.model_copy(update={"letterboxd_url": None})

        with pytest.raises(SettingsError):
            await fetch_current_list(settings, fake_fetcher({}))
