"""Synchronize Letterboxd lists into a Radarr library."""

__version__ = "0.1.0"

__all__ = ["__version__"]
