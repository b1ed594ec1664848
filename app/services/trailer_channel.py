"""High level orchestration of the TMDb trailer channel."""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from ..cache import CacheKey, MetadataCache
from ..categories import find_category
from ..config import Settings
from ..errors import CatalogError
from ..models import (
    CatalogMovie,
    CatalogVideo,
    ChannelEntry,
    ChannelItemResult,
    MediaSource,
    MovieVideos,
)
from ..utils import page_number
from .channel import ChannelItemBuilder
from .pagination import CategoryAggregator, ListingSource
from .resolver import StreamResolver

logger = logging.getLogger(__name__)


class CatalogSource(ListingSource, Protocol):
    async def get_movie_videos(self, movie_id: int) -> MovieVideos: ...


class TrailerChannel:
    """Coordinates TMDb listings, the metadata cache and stream resolution."""

    def __init__(
        self,
        settings: Settings,
        catalog: CatalogSource,
        resolver: StreamResolver,
        cache: MetadataCache,
    ):
        self._settings = settings
        self._catalog = catalog
        self._resolver = resolver
        self._cache = cache
        self._aggregator = CategoryAggregator(settings, catalog)
        self._builder = ChannelItemBuilder(cache)

    @property
    def resolver(self) -> StreamResolver:
        return self._resolver

    async def get_channel_items(
        self, folder_id: str | None = None, start_index: int | None = None
    ) -> ChannelItemResult:
        """Return the listing for a channel folder.

        An empty folder id yields the category folders, a category id the
        movies of that category and a numeric id the videos of that movie.
        """

        if not folder_id:
            return self._builder.channel_types()

        cache_key = CacheKey.page(folder_id, page_number(start_index))
        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.debug("Folder %s cache hit", folder_id)
            return cached

        try:
            result = await self._build_folder(folder_id, start_index)
        except CatalogError:
            logger.exception("Listing folder %s failed", folder_id)
            raise

        if result is None:
            return ChannelItemResult()
        self._cache.set(cache_key, result)
        return result

    async def _build_folder(
        self, folder_id: str, start_index: int | None
    ) -> ChannelItemResult | None:
        category = find_category(folder_id)
        if category is not None:
            movies = await self._aggregator.fetch_category(category, start_index)
            return self._builder.build_category_listing(movies, category.trailer_type)

        try:
            movie_id = int(folder_id)
        except ValueError:
            logger.debug("Unknown channel folder %s", folder_id)
            return None

        movie: CatalogMovie = self._cache.get(
            CacheKey.item(movie_id), CatalogMovie(id=movie_id)
        )
        videos = await self._catalog.get_movie_videos(movie_id)
        return self._builder.build_video_listing(
            movie, videos.results, trailer_only=False
        )

    async def get_all_channel_items(
        self, *, ignore_cache: bool = False
    ) -> ChannelItemResult:
        """Return one trailer per movie across every enabled category."""

        cache_key = CacheKey.all_trailers()
        if not ignore_cache:
            cached = self._cache.get(cache_key)
            if cached is not None:
                logger.debug("All trailers cache hit")
                return cached

        movies: list[CatalogMovie] = []
        seen: set[int] = set()
        for category in self._settings.enabled_categories:
            try:
                listing = await self._aggregator.fetch_category(category)
            except CatalogError:
                logger.exception("Aggregating %s trailers failed", category.key)
                raise
            fresh = [movie for movie in listing if movie.id not in seen]
            seen.update(movie.id for movie in fresh)
            self._builder.build_category_listing(fresh, category.trailer_type)
            movies.extend(fresh)

        results = await asyncio.gather(
            *(self._catalog.get_movie_videos(movie.id) for movie in movies),
            return_exceptions=True,
        )

        entries: list[ChannelEntry] = []
        failed: list[int] = []
        for movie, result in zip(movies, results):
            if isinstance(result, BaseException):
                if isinstance(result, asyncio.CancelledError):
                    raise result
                logger.warning(
                    "Skipping trailers for movie %s: %s", movie.id, result
                )
                failed.append(movie.id)
                continue
            listing = self._builder.build_video_listing(
                movie, result.results, trailer_only=True
            )
            entries.extend(listing.items)

        aggregate = ChannelItemResult.of(entries, failed)
        if failed:
            logger.warning(
                "Not caching trailer aggregate, %s movies failed", len(failed)
            )
        else:
            self._cache.set(
                cache_key, aggregate, ttl=self._settings.all_trailers_cache_seconds
            )
        logger.info(
            "Collected %s trailers from %s movies", len(entries), len(movies)
        )
        return aggregate

    def get_cached_video(self, video_id: str) -> CatalogVideo | None:
        return self._cache.get(CacheKey.video(video_id))

    async def get_media_source(self, video_id: str) -> MediaSource | None:
        """Return a playback descriptor for a previously listed video."""

        video = self.get_cached_video(video_id)
        if video is None:
            logger.debug("No cached video for %s", video_id)
            return None

        stream = await self._resolver.resolve(video.site, video.key)
        if stream is None:
            return None

        return MediaSource(
            id=video.id,
            name=video.name,
            path=stream.url,
            transcoding_url=video.key,
            bitrate=stream.bitrate,
            container=stream.container,
        )
