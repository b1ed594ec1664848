"""Listing category definitions for the trailer channel."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TrailerType(str, Enum):
    """How a trailer relates to the theatrical release of its movie."""

    COMING_SOON_TO_THEATERS = "ComingSoonToTheaters"
    ARCHIVE = "Archive"


@dataclass(frozen=True)
class ListingCategory:
    """Describes a curated TMDb movie listing exposed as a channel folder."""

    key: str
    title: str
    endpoint: str
    trailer_type: TrailerType


UPCOMING = ListingCategory(
    key="upcoming",
    title="Upcoming",
    endpoint="/movie/upcoming",
    trailer_type=TrailerType.COMING_SOON_TO_THEATERS,
)
NOW_PLAYING = ListingCategory(
    key="nowplaying",
    title="Now Playing",
    endpoint="/movie/now_playing",
    trailer_type=TrailerType.COMING_SOON_TO_THEATERS,
)
POPULAR = ListingCategory(
    key="popular",
    title="Popular",
    endpoint="/movie/popular",
    trailer_type=TrailerType.ARCHIVE,
)
TOP_RATED = ListingCategory(
    key="toprated",
    title="Top Rated",
    endpoint="/movie/top_rated",
    trailer_type=TrailerType.ARCHIVE,
)

LISTING_CATEGORIES: tuple[ListingCategory, ...] = (
    UPCOMING,
    NOW_PLAYING,
    POPULAR,
    TOP_RATED,
)


def find_category(folder_id: str | None) -> ListingCategory | None:
    """Return the category matching ``folder_id`` ignoring case."""

    if not folder_id:
        return None
    wanted = folder_id.strip().casefold()
    for category in LISTING_CATEGORIES:
        if category.key == wanted:
            return category
    return None
