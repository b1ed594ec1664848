"""Keeps the on-disk intro trailer cache in line with the live TMDb listing."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Protocol

from ..config import Settings
from ..errors import DownloadError
from ..models import ChannelEntry, ReconcileReport
from ..utils import item_id_for
from .library import TrailerLibrary
from .trailer_channel import TrailerChannel

logger = logging.getLogger(__name__)


class Downloader(Protocol):
    async def download(self, source_url: str, destination: Path) -> Path: ...


class IntroCacheReconciler:
    """Evicts trailers TMDb no longer lists and downloads the missing ones.

    Every cached trailer is a ``{id}.mp4`` file in the cache directory paired
    with a library item whose id is derived from the trailer id, so files and
    items are always created and deleted together.
    """

    def __init__(
        self,
        settings: Settings,
        channel: TrailerChannel,
        library: TrailerLibrary,
        downloader: Downloader,
    ):
        self._cache_path = Path(settings.cache_path)
        self._register_failed = settings.register_failed_downloads
        self._channel = channel
        self._library = library
        self._downloader = downloader
        self._lock = asyncio.Lock()

    @property
    def cache_path(self) -> Path:
        return self._cache_path

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    async def reconcile(self) -> ReconcileReport:
        """Run one reconciliation pass; overlapping calls wait their turn."""

        async with self._lock:
            return await self._reconcile()

    async def _reconcile(self) -> ReconcileReport:
        await asyncio.to_thread(self._cache_path.mkdir, parents=True, exist_ok=True)
        listing = await self._channel.get_all_channel_items(ignore_cache=True)
        fresh_ids = {entry.id.casefold() for entry in listing.items}
        existing = await self._existing_cache()

        report = ReconcileReport()
        stale = [
            (cache_id, files)
            for key, (cache_id, files) in existing.items()
            if key not in fresh_ids
        ]
        if listing.failed_movie_ids:
            # Trailers of movies that failed to load would look stale.
            logger.warning(
                "Keeping %s stale trailers, videos for movies %s could not be fetched",
                len(stale),
                listing.failed_movie_ids,
            )
        else:
            for cache_id, files in stale:
                await self._evict(cache_id, files)
                report.deleted.append(cache_id)

        seen: set[str] = set()
        for entry in listing.items:
            key = entry.id.casefold()
            if key in seen:
                continue
            seen.add(key)
            if key in existing:
                report.cached_ids.append(entry.id)
                continue
            await self._cache_entry(entry, report)

        if listing.failed_movie_ids:
            report.cached_ids.extend(cache_id for cache_id, _ in stale)

        report.finished_at = datetime.utcnow()
        logger.info(
            "Intro cache reconciled: %s cached, %s downloaded, %s deleted, %s failed",
            len(report.cached_ids),
            len(report.downloaded),
            len(report.deleted),
            len(report.failed),
        )
        return report

    async def _existing_cache(self) -> dict[str, tuple[str, list[Path]]]:
        """Map each cached id (casefolded) to its on-disk spelling and files.

        Library items whose download failed have no file but still count as
        cached so a dead link is not retried on every pass.
        """

        existing: dict[str, tuple[str, list[Path]]] = {}
        for path in await asyncio.to_thread(self._list_files):
            _, files = existing.setdefault(path.stem.casefold(), (path.stem, []))
            files.append(path)

        cache_dir = await asyncio.to_thread(self._cache_path.resolve)
        for item in await self._library.list_items():
            item_path = Path(item.path)
            if not item_path.stem:
                continue
            if await asyncio.to_thread(item_path.parent.resolve) != cache_dir:
                continue
            existing.setdefault(item_path.stem.casefold(), (item_path.stem, []))
        return existing

    def _list_files(self) -> list[Path]:
        return sorted(
            path
            for path in self._cache_path.iterdir()
            if path.is_file() and path.stem
        )

    async def _evict(self, cache_id: str, files: list[Path]) -> None:
        item = await self._library.get_item_by_id(item_id_for(cache_id))
        if item is not None:
            await self._library.delete_item(item, delete_file=True)
        for path in files:
            try:
                await asyncio.to_thread(path.unlink, missing_ok=True)
            except OSError as exc:
                logger.warning("Unable to remove stale trailer %s: %s", path, exc)
        logger.debug("Evicted trailer %s", cache_id)

    async def _cache_entry(self, entry: ChannelEntry, report: ReconcileReport) -> None:
        video = self._channel.get_cached_video(entry.id)
        source = await self._channel.get_media_source(entry.id) if video else None
        source_url = (
            self._channel.resolver.source_url(video.site, video.key) if video else None
        )
        if video is None or source is None or source_url is None:
            logger.debug("No playable stream for %s, skipping", entry.id)
            report.skipped.append(entry.id)
            return

        destination = self._cache_path / f"{entry.id}.mp4"
        try:
            await self._downloader.download(source_url, destination)
        except DownloadError as exc:
            logger.warning("Unable to cache %s: %s", source.path, exc)
            report.failed.append(entry.id)
            if not self._register_failed:
                return
        else:
            report.downloaded.append(entry.id)

        report.cached_ids.append(entry.id)
        await self._library.create_item(item_id_for(entry.id), entry.name, destination)
