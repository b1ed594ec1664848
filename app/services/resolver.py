"""Resolve hosted trailer videos to concrete playable streams."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable, Protocol

import yt_dlp
from yt_dlp.utils import YoutubeDLError

from ..errors import StreamResolutionError
from ..models import StreamDescriptor

logger = logging.getLogger(__name__)


class SiteResolver(Protocol):
    """Resolver for a single video-hosting site."""

    site: str

    def source_url(self, key: str) -> str: ...

    async def resolve(self, key: str) -> StreamDescriptor: ...


class YouTubeResolver:
    """Picks the best video-only YouTube stream using yt-dlp."""

    site = "youtube"

    _YDL_OPTIONS: dict[str, Any] = {
        "quiet": True,
        "no_warnings": True,
        "skip_download": True,
        "noplaylist": True,
    }

    def source_url(self, key: str) -> str:
        return f"https://www.youtube.com/watch?v={key}"

    async def resolve(self, key: str) -> StreamDescriptor:
        info = await asyncio.to_thread(self._extract_info, key)
        return self.select_best_stream(key, info.get("formats") or [])

    def _extract_info(self, key: str) -> dict[str, Any]:
        try:
            with yt_dlp.YoutubeDL(dict(self._YDL_OPTIONS)) as ydl:
                info = ydl.extract_info(self.source_url(key), download=False)
        except YoutubeDLError as exc:
            raise StreamResolutionError(self.site, key, str(exc)) from exc
        if not isinstance(info, dict):
            raise StreamResolutionError(self.site, key, "no video metadata returned")
        return info

    @classmethod
    def select_best_stream(
        cls, key: str, formats: Iterable[dict[str, Any]]
    ) -> StreamDescriptor:
        """Return the video-only format with the highest quality."""

        candidates = [fmt for fmt in formats if cls._is_video_only(fmt)]
        if not candidates:
            raise StreamResolutionError(cls.site, key, "no video-only streams")

        best = max(candidates, key=cls._quality)
        tbr = best.get("tbr") or best.get("vbr")
        bitrate = int(float(tbr) * 1000) if tbr else None
        return StreamDescriptor(
            url=str(best["url"]),
            bitrate=bitrate,
            container=best.get("ext"),
        )

    @staticmethod
    def _is_video_only(fmt: dict[str, Any]) -> bool:
        if not fmt.get("url"):
            return False
        vcodec = fmt.get("vcodec")
        acodec = fmt.get("acodec")
        return vcodec not in (None, "none") and acodec == "none"

    @staticmethod
    def _quality(fmt: dict[str, Any]) -> tuple[float, float, float]:
        return (
            float(fmt.get("height") or 0),
            float(fmt.get("fps") or 0),
            float(fmt.get("tbr") or fmt.get("vbr") or 0),
        )


class StreamResolver:
    """Dispatches stream lookups to the resolver registered for a site."""

    def __init__(self, resolvers: Iterable[SiteResolver]):
        self._resolvers = {resolver.site.casefold(): resolver for resolver in resolvers}

    def supports(self, site: str) -> bool:
        return bool(site) and site.casefold() in self._resolvers

    def source_url(self, site: str, key: str) -> str | None:
        """Return the page URL the downloader should fetch, if supported."""

        resolver = self._resolvers.get((site or "").casefold())
        if resolver is None:
            return None
        return resolver.source_url(key)

    async def resolve(self, site: str, key: str) -> StreamDescriptor | None:
        """Return the playable stream for ``key`` or ``None``.

        Unsupported sites and resolver failures of any kind yield ``None`` so
        one broken video never blocks a whole batch. Cancellation propagates.
        """

        resolver = self._resolvers.get((site or "").casefold())
        if resolver is None:
            logger.debug("No stream resolver registered for site %s", site)
            return None
        try:
            return await resolver.resolve(key)
        except StreamResolutionError as exc:
            logger.warning("Unable to resolve stream: %s", exc)
            return None
        except Exception:
            logger.exception("Resolver for %s failed on video %s", site, key)
            return None
