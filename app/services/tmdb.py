"""Client for the TMDb movie listing and video endpoints."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx
from pydantic import ValidationError

from ..categories import ListingCategory
from ..config import Settings
from ..errors import CatalogError
from ..models import MoviePage, MovieVideos

logger = logging.getLogger(__name__)

MAX_PAGE = 500
"""TMDb rejects listing requests beyond page 500."""


class TmdbClient:
    """Thin wrapper around the TMDb v3 HTTP API."""

    def __init__(
        self,
        settings: Settings,
        http_client: httpx.AsyncClient,
        *,
        max_concurrency: int = 8,
    ):
        if not settings.tmdb_api_key:
            raise ValueError("TMDB API key is required when initialising TmdbClient")
        self._settings = settings
        self._client = http_client
        self._semaphore = asyncio.Semaphore(max_concurrency)

    async def list_category(
        self,
        category: ListingCategory,
        *,
        language: str,
        page: int,
        region: str | None = None,
    ) -> MoviePage:
        """Return one listing page; ``page`` is zero-based."""

        tmdb_page = page + 1
        if tmdb_page > MAX_PAGE:
            logger.debug(
                "Page %s of %s is beyond the TMDb limit", tmdb_page, category.key
            )
            return MoviePage(page=tmdb_page, results=[])

        params: dict[str, Any] = {"language": language, "page": tmdb_page}
        if region:
            params["region"] = region
        payload = await self._get(category.endpoint, params)
        try:
            return MoviePage.model_validate(payload)
        except ValidationError as exc:
            raise CatalogError(
                f"Unexpected TMDb payload for {category.key} page {tmdb_page}"
            ) from exc

    async def get_movie_videos(self, movie_id: int) -> MovieVideos:
        """Return the videos attached to ``movie_id``."""

        payload = await self._get(f"/movie/{movie_id}/videos", {})
        if isinstance(payload, dict):
            payload.setdefault("id", movie_id)
        try:
            return MovieVideos.model_validate(payload)
        except ValidationError as exc:
            raise CatalogError(
                f"Unexpected TMDb video payload for movie {movie_id}"
            ) from exc

    async def _get(self, path: str, params: dict[str, Any]) -> Any:
        query = {**params, "api_key": self._settings.tmdb_api_key}
        try:
            async with self._semaphore:
                response = await self._client.get(path, params=query)
        except httpx.HTTPError as exc:
            raise CatalogError(f"TMDb request {path} failed: {exc}") from exc

        if response.status_code >= 400:
            raise CatalogError(
                f"TMDb request {path} returned {response.status_code}: "
                f"{response.text[:200]}"
            )
        try:
            return response.json()
        except ValueError as exc:
            raise CatalogError(f"TMDb returned non-JSON content for {path}") from exc
