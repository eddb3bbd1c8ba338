"""Tests for the snapshot store and the new-movie diff."""

import json
from datetime import UTC, datetime

import pytest

from lettarrboxd.models import MovieRecord
from lettarrboxd.services.snapshot import SnapshotError, SnapshotStore, find_new_movies


def _movie(slug: str, film_id: int = 1, **kwargs) -> MovieRecord:
    return MovieRecord(id=film_id, name=slug.strip("/").split("/")[-1], slug=slug, **kwargs)


class TestSnapshotStore:
    def test_missing_file_is_empty(self, tmp_path):
        assert SnapshotStore(tmp_path / "movies.json").load() == []

    @pytest.mark.parametrize("content", ["{not json", '{"movies": "nope"}', "[]"])
    def test_unreadable_file_is_empty(self, tmp_path, content):
        path = tmp_path / "movies.json"
        path.write_text(content)

        assert SnapshotStore(path).load() == []

    def test_save_writes_camel_case_document(self, tmp_path):
        path = tmp_path / "data" / "movies.json"
        movie = _movie("/film/the-matrix/", 51518, tmdb_id="603", imdb_id="tt0133093", published_year=1999)

        SnapshotStore(path).save([movie], now=datetime(2024, 3, 1, 12, 0, tzinfo=UTC))

        document = json.loads(path.read_text())
        assert document["timestamp"] == "2024-03-01T12:00:00+00:00"
        assert "queryDate" in document
        assert document["totalMovies"] == 1
        assert document["movies"] == [
            {
                "id": 51518,
                "name": "the-matrix",
                "slug": "/film/the-matrix/",
                "tmdbId": "603",
                "imdbId": "tt0133093",
                "publishedYear": 1999,
            }
        ]
        assert not (tmp_path / "data" / "movies.json.tmp").exists()

    def test_save_then_load(self, tmp_path):
        store = SnapshotStore(tmp_path / "movies.json")
        movies = [_movie("/film/heat-1995/", 1), _movie("/film/ronin/", 2)]

        store.save(movies)

        assert store.load() == movies

    def test_save_replaces_previous_content(self, tmp_path):
        store = SnapshotStore(tmp_path / "movies.json")
        store.save([_movie("/film/heat-1995/", 1), _movie("/film/ronin/", 2)])

        store.save([_movie("/film/ronin/", 2)])

        assert [movie.slug for movie in store.load()] == ["/film/ronin/"]

    def test_save_failure_raises(self, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")

        with pytest.raises(SnapshotError):
            SnapshotStore(blocker / "movies.json").save([])


class TestFindNewMovies:
    def test_everything_is_new_without_history(self):
        current = [_movie("/film/a/"), _movie("/film/b/")]

        assert find_new_movies(current, []) == current

    def test_only_unseen_links(self):
        previous = [_movie("/film/a/")]
        current = [_movie("/film/a/"), _movie("/film/b/")]

        assert [movie.slug for movie in find_new_movies(current, previous)] == ["/film/b/"]

    def test_removed_movies_are_ignored(self):
        previous = [_movie("/film/a/"), _movie("/film/gone/")]

        assert find_new_movies([_movie("/film/a/")], previous) == []

    def test_identity_is_the_link_only(self):
        previous = [MovieRecord(id=1, name="Old Title", slug="/film/a/", published_year=1990)]
        current = [MovieRecord(id=1, name="New Title", slug="/film/a/", published_year=1991)]

        assert find_new_movies(current, previous) == []

    def test_relative_and_absolute_links_match(self):
        previous = [_movie("https://letterboxd.com/film/a/")]

        assert find_new_movies([_movie("/film/a/")], previous) == []
