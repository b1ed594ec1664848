"""Tests for the TMDb API client."""

from __future__ import annotations

from typing import Any, cast

import httpx
import pytest

from app.categories import NOW_PLAYING, UPCOMING
from app.config import Settings
from app.errors import CatalogError
from app.services.tmdb import TmdbClient


def build_settings(**overrides: Any) -> Settings:
    """Return a settings object with defaults suitable for tests."""

    base = {"TMDB_API_KEY": "tmdb-key"}
    base.update(overrides)
    return Settings(_env_file=None, **base)  # type: ignore[arg-type]


def test_client_requires_api_key() -> None:
    with pytest.raises(ValueError, match="TMDB API key is required"):
        TmdbClient(Settings(_env_file=None), cast(httpx.AsyncClient, object()))


@pytest.mark.anyio("asyncio")
async def test_list_category_maps_zero_based_pages() -> None:
    """Page 0 is TMDb's first page and credentials ride along as query params."""

    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(
            200,
            json={
                "page": 1,
                "results": [
                    {"id": 550, "title": "Fight Club", "poster_path": "/fc.jpg"},
                    {"id": 551, "title": "No Poster", "poster_path": None},
                ],
                "total_pages": 3,
                "total_results": 42,
            },
        )

    transport = httpx.MockTransport(handler)
    async with httpx.AsyncClient(transport=transport, base_url="https://api.example.com/3") as http_client:
        client = TmdbClient(build_settings(), http_client)
        page = await client.list_category(
            UPCOMING, language="de-DE", page=0, region="DE"
        )

    assert [movie.id for movie in page.results] == [550, 551]
    assert page.results[0].poster_path == "/fc.jpg"
    assert page.results[1].poster_path is None
    assert page.total_pages == 3
    params = requests[0].url.params
    assert requests[0].url.path == "/3/movie/upcoming"
    assert params["page"] == "1"
    assert params["language"] == "de-DE"
    assert params["region"] == "DE"
    assert params["api_key"] == "tmdb-key"


@pytest.mark.anyio("asyncio")
async def test_list_category_omits_blank_region() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"page": 3, "results": []})

    transport = httpx.MockTransport(handler)
    async with httpx.AsyncClient(transport=transport, base_url="https://api.example.com") as http_client:
        client = TmdbClient(build_settings(), http_client)
        page = await client.list_category(NOW_PLAYING, language="en-US", page=2)

    assert page.results == []
    assert "region" not in requests[0].url.params
    assert requests[0].url.params["page"] == "3"
    assert requests[0].url.path == "/movie/now_playing"


@pytest.mark.anyio("asyncio")
async def test_pages_beyond_tmdb_limit_are_empty_without_request() -> None:
    def handler(_: httpx.Request) -> httpx.Response:  # pragma: no cover - must not be called
        raise AssertionError("no request expected")

    transport = httpx.MockTransport(handler)
    async with httpx.AsyncClient(transport=transport, base_url="https://api.example.com") as http_client:
        client = TmdbClient(build_settings(), http_client)
        page = await client.list_category(UPCOMING, language="en-US", page=500)

    assert page.results == []


@pytest.mark.anyio("asyncio")
async def test_error_status_raises_catalog_error() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"status_message": "Invalid API key"})

    transport = httpx.MockTransport(handler)
    async with httpx.AsyncClient(transport=transport, base_url="https://api.example.com") as http_client:
        client = TmdbClient(build_settings(), http_client)
        with pytest.raises(CatalogError, match="401"):
            await client.list_category(UPCOMING, language="en-US", page=0)


@pytest.mark.anyio("asyncio")
async def test_transport_failure_raises_catalog_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    transport = httpx.MockTransport(handler)
    async with httpx.AsyncClient(transport=transport, base_url="https://api.example.com") as http_client:
        client = TmdbClient(build_settings(), http_client)
        with pytest.raises(CatalogError):
            await client.get_movie_videos(550)


@pytest.mark.anyio("asyncio")
async def test_invalid_payload_raises_catalog_error() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"results": [{"title": "missing id"}]})

    transport = httpx.MockTransport(handler)
    async with httpx.AsyncClient(transport=transport, base_url="https://api.example.com") as http_client:
        client = TmdbClient(build_settings(), http_client)
        with pytest.raises(CatalogError, match="Unexpected TMDb payload"):
            await client.list_category(UPCOMING, language="en-US", page=0)


@pytest.mark.anyio("asyncio")
async def test_get_movie_videos_parses_results() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(
            200,
            json={
                "id": 550,
                "results": [
                    {
                        "id": "5c9294240e0a267cd516835f",
                        "iso_639_1": "en",
                        "name": "Official Trailer",
                        "site": "YouTube",
                        "key": "BdJKm16Co6M",
                        "type": "Trailer",
                        "size": 1080,
                    }
                ],
            },
        )

    transport = httpx.MockTransport(handler)
    async with httpx.AsyncClient(transport=transport, base_url="https://api.example.com") as http_client:
        client = TmdbClient(build_settings(), http_client)
        videos = await client.get_movie_videos(550)

    assert requests[0].url.path == "/movie/550/videos"
    assert videos.id == 550
    assert len(videos.results) == 1
    assert videos.results[0].key == "BdJKm16Co6M"
    assert videos.results[0].is_trailer()
