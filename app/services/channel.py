"""Builds channel listings from TMDb movies and their videos."""

from __future__ import annotations

import logging
from typing import Iterable

from ..cache import CacheKey, MetadataCache
from ..categories import LISTING_CATEGORIES, TrailerType
from ..models import CatalogMovie, CatalogVideo, ChannelEntry, ChannelItemResult
from ..utils import build_image_url

logger = logging.getLogger(__name__)

CATALOG_PROVIDER = "Tmdb"


class ChannelItemBuilder:
    """Turns catalog payloads into channel entries, writing through the cache.

    Category listings record each movie's summary, poster and trailer type so
    that later video listings for the same movie can pick them up again.
    """

    def __init__(self, cache: MetadataCache):
        self._cache = cache

    @staticmethod
    def channel_types() -> ChannelItemResult:
        """Return the fixed root listing of category folders."""

        return ChannelItemResult.of(
            [
                ChannelEntry(id=category.key, name=category.title, is_folder=True)
                for category in LISTING_CATEGORIES
            ]
        )

    def build_category_listing(
        self, movies: Iterable[CatalogMovie], trailer_type: TrailerType
    ) -> ChannelItemResult:
        entries: list[ChannelEntry] = []
        for movie in movies:
            poster_url = build_image_url(movie.poster_path)
            self._cache.set(CacheKey.item(movie.id), movie)
            self._cache.set(CacheKey.poster(movie.id), poster_url)
            self._cache.set(CacheKey.trailer_type(movie.id), trailer_type)
            entries.append(
                ChannelEntry(
                    id=str(movie.id),
                    name=movie.title,
                    is_folder=True,
                    image_url=poster_url,
                )
            )
        return ChannelItemResult.of(entries)

    def build_video_listing(
        self,
        movie: CatalogMovie,
        videos: Iterable[CatalogVideo],
        *,
        trailer_only: bool,
    ) -> ChannelItemResult:
        """Return entries for ``movie``'s videos in upstream order.

        In trailer-only mode just the first trailer is kept.
        """

        logger.debug(
            "Building video entries for movie %s (trailer_only=%s)",
            movie.id,
            trailer_only,
        )
        entries: list[ChannelEntry] = []
        for video in videos:
            if trailer_only and entries:
                break
            entry = self._build_video_entry(movie.id, video, trailer_only=trailer_only)
            if entry is None:
                continue
            if movie.title:
                entry.name = f"{movie.title} - {entry.name}"
            entries.append(entry)
        return ChannelItemResult.of(entries)

    def _build_video_entry(
        self, movie_id: int, video: CatalogVideo, *, trailer_only: bool
    ) -> ChannelEntry | None:
        if trailer_only and not video.is_trailer():
            return None

        poster_url: str | None = self._cache.get(CacheKey.poster(movie_id))
        trailer_type: TrailerType = self._cache.get(
            CacheKey.trailer_type(movie_id), TrailerType.ARCHIVE
        )
        self._cache.set(CacheKey.video(video.id), video)

        entry = ChannelEntry(id=video.id, name=video.name)
        if poster_url:
            entry.image_url = poster_url
        if trailer_only:
            entry.extra_type = "Trailer"
            entry.trailer_types = [trailer_type]
            entry.provider_ids = {CATALOG_PROVIDER: str(movie_id)}
        return entry
