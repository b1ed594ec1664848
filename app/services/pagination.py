"""Aggregates paginated TMDb listings into bounded movie lists."""

from __future__ import annotations

import logging
from typing import Protocol

from ..categories import ListingCategory
from ..config import Settings
from ..errors import CatalogError
from ..models import CatalogMovie, MoviePage
from ..utils import page_number

logger = logging.getLogger(__name__)


class ListingSource(Protocol):
    async def list_category(
        self,
        category: ListingCategory,
        *,
        language: str,
        page: int,
        region: str | None = None,
    ) -> MoviePage: ...


class CategoryAggregator:
    """Walks listing pages until the limit is met or TMDb runs dry."""

    def __init__(self, settings: Settings, source: ListingSource):
        self._settings = settings
        self._source = source

    async def fetch_category(
        self,
        category: ListingCategory,
        start_index: int | None = None,
        item_limit: int | None = None,
    ) -> list[CatalogMovie]:
        """Return up to ``item_limit`` movies starting at ``start_index``.

        The page cursor always advances by one per request, whatever the size
        of the returned page, and pagination only stops early on an empty page.
        """

        limit = self._settings.trailer_limit if item_limit is None else item_limit
        if limit <= 0:
            return []

        page = page_number(start_index)
        movies: list[CatalogMovie] = []
        while True:
            logger.debug("Fetching %s page %s", category.key, page)
            try:
                result = await self._source.list_category(
                    category,
                    language=self._settings.language,
                    page=page,
                    region=self._settings.region,
                )
            except CatalogError as exc:
                logger.warning(
                    "Fetching %s listing failed at page %s: %s",
                    category.key,
                    page,
                    exc,
                )
                raise
            page += 1
            movies.extend(result.results)
            if not result.results or len(movies) >= limit:
                break

        return movies[:limit]
