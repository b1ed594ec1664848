"""Time-expiring in-memory cache shared by the trailer components."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

logger = logging.getLogger(__name__)


class CacheNamespace(str, Enum):
    """Kinds of values stored in the metadata cache."""

    ITEM = "item"
    POSTER = "poster"
    TRAILER_TYPE = "trailer"
    VIDEO = "video"
    PAGE = "page"
    ALL_TRAILERS = "all-trailer"


@dataclass(frozen=True, slots=True)
class CacheKey:
    """Typed cache key pairing a namespace with a movie, video or folder id."""

    namespace: CacheNamespace
    ident: str = ""

    @classmethod
    def item(cls, movie_id: int) -> "CacheKey":
        return cls(CacheNamespace.ITEM, str(movie_id))

    @classmethod
    def poster(cls, movie_id: int) -> "CacheKey":
        return cls(CacheNamespace.POSTER, str(movie_id))

    @classmethod
    def trailer_type(cls, movie_id: int) -> "CacheKey":
        return cls(CacheNamespace.TRAILER_TYPE, str(movie_id))

    @classmethod
    def video(cls, video_id: str) -> "CacheKey":
        return cls(CacheNamespace.VIDEO, video_id)

    @classmethod
    def page(cls, folder_id: str, page: int = 0) -> "CacheKey":
        ident = folder_id.casefold()
        if page:
            ident = f"{ident}@{page}"
        return cls(CacheNamespace.PAGE, ident)

    @classmethod
    def all_trailers(cls) -> "CacheKey":
        return cls(CacheNamespace.ALL_TRAILERS)

    def __str__(self) -> str:
        if self.namespace is CacheNamespace.PAGE:
            return self.ident
        if self.namespace is CacheNamespace.ALL_TRAILERS:
            return self.namespace.value
        return f"{self.ident}-{self.namespace.value}"


_DEFAULT_TTL: Any = object()


@dataclass(slots=True)
class _Entry:
    value: Any
    expires_at: float | None


class MetadataCache:
    """Thread-safe key/value store with per-entry expiry.

    Expired entries are dropped lazily the next time they are read, so a
    lookup after expiry behaves exactly like a key that was never stored.
    """

    def __init__(
        self,
        default_ttl: float | None = 86_400,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._default_ttl = default_ttl
        self._clock = clock
        self._entries: dict[CacheKey, _Entry] = {}
        self._lock = threading.Lock()

    @property
    def default_ttl(self) -> float | None:
        return self._default_ttl

    def set(self, key: CacheKey, value: Any, ttl: float | None = _DEFAULT_TTL) -> None:
        """Store ``value``; ``ttl=None`` keeps it for the process lifetime."""

        if ttl is _DEFAULT_TTL:
            ttl = self._default_ttl
        expires_at = None if ttl is None else self._clock() + float(ttl)
        with self._lock:
            self._entries[key] = _Entry(value=value, expires_at=expires_at)

    def get(self, key: CacheKey, default: Any = None) -> Any:
        """Return the cached value or ``default`` on a miss."""

        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return default
            if entry.expires_at is not None and entry.expires_at <= now:
                del self._entries[key]
                logger.debug("Cache entry %s expired", key)
                return default
            return entry.value

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, CacheKey):
            return False
        marker = object()
        return self.get(key, marker) is not marker

    def delete(self, key: CacheKey) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def purge_expired(self) -> int:
        """Drop every expired entry and return how many were removed."""

        now = self._clock()
        with self._lock:
            expired = [
                key
                for key, entry in self._entries.items()
                if entry.expires_at is not None and entry.expires_at <= now
            ]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
