"""Pytest configuration and test helpers."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import pytest


# Ensure the application package is importable when running tests without an
# editable install. This mirrors the expected runtime layout where ``app`` sits
# at the project root.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.errors import DownloadError, StreamResolutionError  # noqa: E402
from app.models import (  # noqa: E402
    CatalogMovie,
    CatalogVideo,
    MoviePage,
    MovieVideos,
    StreamDescriptor,
)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self) -> None:
        self.now = 1_000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeCatalog:
    """In-memory stand-in for the TMDb client."""

    def __init__(self) -> None:
        self.pages: dict[str, list[list[CatalogMovie]]] = {}
        self.videos: dict[int, list[CatalogVideo] | Exception] = {}
        self.listing_calls: list[tuple[str, int]] = []
        self.video_calls: list[int] = []
        self.listing_error: Exception | None = None
        self.video_delays: dict[int, float] = {}

    async def list_category(self, category, *, language, page, region=None) -> MoviePage:
        self.listing_calls.append((category.key, page))
        if self.listing_error is not None:
            raise self.listing_error
        pages = self.pages.get(category.key, [])
        results = pages[page] if page < len(pages) else []
        return MoviePage(page=page + 1, results=results, total_pages=len(pages))

    async def get_movie_videos(self, movie_id: int) -> MovieVideos:
        self.video_calls.append(movie_id)
        if movie_id in self.video_delays:
            await asyncio.sleep(self.video_delays[movie_id])
        videos = self.videos.get(movie_id, [])
        if isinstance(videos, Exception):
            raise videos
        return MovieVideos(id=movie_id, results=videos)


class FakeSiteResolver:
    """YouTube resolver double returning predictable CDN URLs."""

    site = "youtube"

    def __init__(self) -> None:
        self.broken_keys: set[str] = set()
        self.crashes: dict[str, Exception] = {}
        self.calls: list[str] = []

    def source_url(self, key: str) -> str:
        return f"https://www.youtube.com/watch?v={key}"

    async def resolve(self, key: str) -> StreamDescriptor:
        self.calls.append(key)
        if key in self.crashes:
            raise self.crashes[key]
        if key in self.broken_keys:
            raise StreamResolutionError(self.site, key, "video unavailable")
        return StreamDescriptor(
            url=f"https://cdn.example.com/{key}.mp4",
            bitrate=2_500_000,
            container="mp4",
        )


class FakeDownloader:
    """Downloader double that writes a placeholder file."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, Path]] = []
        self.failing_urls: set[str] = set()

    async def download(self, source_url: str, destination: Path) -> Path:
        self.calls.append((source_url, destination))
        if source_url in self.failing_urls:
            raise DownloadError(f"failed to fetch {source_url}")
        destination.write_bytes(b"trailer")
        return destination


def movie(movie_id: int, title: str = "", poster_path: str | None = None) -> CatalogMovie:
    return CatalogMovie(id=movie_id, title=title, poster_path=poster_path)


def video(
    video_id: str,
    *,
    type: str = "Trailer",
    name: str | None = None,
    site: str = "YouTube",
    key: str | None = None,
) -> CatalogVideo:
    return CatalogVideo(
        id=video_id,
        name=name or f"Video {video_id}",
        site=site,
        key=key or f"key{video_id}",
        type=type,
    )


@pytest.fixture
def anyio_backend() -> str:
    """Force AnyIO tests to run on asyncio without requiring trio."""

    return "asyncio"


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_catalog() -> FakeCatalog:
    return FakeCatalog()


@pytest.fixture
def fake_site_resolver() -> FakeSiteResolver:
    return FakeSiteResolver()


@pytest.fixture
def fake_downloader() -> FakeDownloader:
    return FakeDownloader()
