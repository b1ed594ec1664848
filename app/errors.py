"""Exception types raised across the trailer pipeline."""

from __future__ import annotations


class TrailerError(Exception):
    """Base class for errors raised by the trailer service."""


class CatalogError(TrailerError):
    """Raised when TMDb cannot be queried or returns an unusable payload."""


class StreamResolutionError(TrailerError):
    """Raised by a site resolver when no playable stream can be produced."""

    def __init__(self, site: str, key: str, reason: str):
        super().__init__(f"{site} video {key}: {reason}")
        self.site = site
        self.key = key
        self.reason = reason


class DownloadError(TrailerError):
    """Raised when a trailer could not be written to the local cache."""
