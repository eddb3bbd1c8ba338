from .radarr import RadarrClient, build_add_movie_payload, is_already_added, radarr_client

__all__ = ["RadarrClient", "build_add_movie_payload", "is_already_added", "radarr_client"]
