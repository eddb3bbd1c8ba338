"""Fixture data for Radarr API responses."""

from typing import Any

QUALITY_PROFILES_RESPONSE: list[dict[str, Any]] = [
    {
        "id": 1,
        "name": "SD",
        "upgradeAllowed": False,
        "cutoff": 1,
        "items": [],
    },
    {
        "id": 4,
        "name": "HD-1080p",
        "upgradeAllowed": True,
        "cutoff": 7,
        "items": [],
    },
    {
        "id": 5,
        "name": "Ultra-HD",
        "upgradeAllowed": True,
        "cutoff": 19,
        "items": [],
    },
]

ROOT_FOLDERS_RESPONSE: list[dict[str, Any]] = [
    {
        "id": 1,
        "path": "/data/movies",
        "accessible": True,
        "freeSpace": 1099511627776,
        "unmappedFolders": [],
    },
    {
        "id": 2,
        "path": "/data/movies-4k",
        "accessible": True,
        "freeSpace": 549755813888,
        "unmappedFolders": [],
    },
]

TAGS_RESPONSE: list[dict[str, Any]] = [
    {"id": 1, "label": "letterboxd"},
    {"id": 3, "label": "kids"},
]

CREATED_TAG_RESPONSE: dict[str, Any] = {"id": 7, "label": "watchlist"}

MOVIE_LOOKUP_TMDB_RESPONSE: dict[str, Any] = {
    "title": "The Matrix",
    "originalTitle": "The Matrix",
    "sortTitle": "matrix",
    "status": "released",
    "overview": "Set in the 22nd century, The Matrix tells the story of a computer hacker "
    "who joins a group of underground insurgents fighting the vast and powerful computers "
    "who now rule the earth.",
    "year": 1999,
    "runtime": 136,
    "imdbId": "tt0133093",
    "tmdbId": 603,
    "titleSlug": "the-matrix-603",
    "monitored": False,
    "minimumAvailability": "announced",
    "tags": [],
}

LIBRARY_MOVIE_RESPONSE: list[dict[str, Any]] = [
    {
        "id": 12,
        "title": "The Matrix",
        "year": 1999,
        "tmdbId": 603,
        "imdbId": "tt0133093",
        "hasFile": True,
        "monitored": True,
        "qualityProfileId": 4,
        "path": "/data/movies/The Matrix (1999)",
        "tags": [1],
    }
]

ADD_MOVIE_SUCCESS_RESPONSE: dict[str, Any] = {
    "id": 42,
    "title": "The Matrix",
    "tmdbId": 603,
    "qualityProfileId": 4,
    "rootFolderPath": "/data/movies",
    "monitored": True,
    "minimumAvailability": "released",
    "tags": [1],
    "added": "2024-03-01T12:00:00Z",
}

ADD_MOVIE_ALREADY_ADDED_RESPONSE: list[dict[str, Any]] = [
    {
        "propertyName": "TmdbId",
        "errorMessage": "This movie has already been added",
        "attemptedValue": 603,
        "severity": "error",
        "errorCode": "MovieExistsValidator",
    }
]

ADD_MOVIE_VALIDATION_ERROR_RESPONSE: list[dict[str, Any]] = [
    {
        "propertyName": "RootFolderPath",
        "errorMessage": "Folder '/data/movies' is not writable by user 'abc'",
        "attemptedValue": "/data/movies",
        "severity": "error",
        "errorCode": "FolderWritableValidator",
    }
]
