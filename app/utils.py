"""Utility helpers for the trailer service."""

from __future__ import annotations

import hashlib
import uuid


PAGE_SIZE = 20
"""TMDb always returns 20 movies per listing page."""

POSTER_BASE_URL = "https://image.tmdb.org/t/p/original/"


def page_number(start_index: int | None) -> int:
    """Return the zero-based listing page that contains ``start_index``."""

    start = start_index or 0
    if start < 0:
        return 0
    return start // PAGE_SIZE


def build_image_url(path: str | None) -> str | None:
    """Return an absolute TMDb image URL for ``path``."""

    if not path:
        return None
    if path.startswith("http"):
        return path
    return f"{POSTER_BASE_URL}{path.lstrip('/')}"


def item_id_for(cache_id: str) -> str:
    """Return the deterministic library item id for a cached trailer id."""

    digest = hashlib.md5(cache_id.encode("utf-8")).digest()
    return str(uuid.UUID(bytes=digest))
