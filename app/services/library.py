"""Persistent library of downloaded intro trailers."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..db_models import TrailerItem

logger = logging.getLogger(__name__)


class TrailerLibrary:
    """Creates, looks up and deletes trailer items by their hashed id."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get_item_by_id(self, item_id: str) -> TrailerItem | None:
        async with self._session_factory() as session:
            return await session.get(TrailerItem, item_id)

    async def list_items(self) -> list[TrailerItem]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(TrailerItem).order_by(TrailerItem.created_at)
            )
            return list(result.scalars().all())

    async def create_item(self, item_id: str, name: str, path: Path | str) -> TrailerItem:
        """Register a trailer, replacing any item stored under the same id."""

        async with self._session_factory() as session:
            item = await session.get(TrailerItem, item_id)
            if item is None:
                item = TrailerItem(id=item_id, name=name, path=str(path))
                session.add(item)
            else:
                item.name = name
                item.path = str(path)
            await session.commit()
        logger.debug("Registered trailer %s (%s)", item_id, name)
        return item

    async def delete_item(self, item: TrailerItem, *, delete_file: bool = True) -> None:
        """Remove ``item`` and, by default, the file backing it."""

        async with self._session_factory() as session:
            stored = await session.get(TrailerItem, item.id)
            if stored is not None:
                await session.delete(stored)
                await session.commit()

        if delete_file and item.path:
            path = Path(item.path)
            try:
                await asyncio.to_thread(path.unlink, missing_ok=True)
            except OSError as exc:
                logger.warning("Unable to delete trailer file %s: %s", path, exc)
        logger.debug("Deleted trailer %s", item.id)
