"""Pydantic models describing catalog payloads and channel listings."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .categories import TrailerType


class CatalogMovie(BaseModel):
    """Movie summary returned by the TMDb listing endpoints."""

    model_config = ConfigDict(frozen=True)

    id: int
    title: str = ""
    poster_path: str | None = None


class CatalogVideo(BaseModel):
    """A video attached to a TMDb movie (trailer, teaser, clip...)."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    site: str = ""
    key: str = ""
    type: str = ""

    def is_trailer(self) -> bool:
        return self.type.casefold() == "trailer"


class MoviePage(BaseModel):
    """One page of a TMDb movie listing."""

    page: int = 1
    results: list[CatalogMovie] = Field(default_factory=list)
    total_pages: int = 0
    total_results: int = 0


class MovieVideos(BaseModel):
    """The videos TMDb knows about for a single movie."""

    id: int
    results: list[CatalogVideo] = Field(default_factory=list)


class _ChannelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)


class ChannelEntry(_ChannelModel):
    """A single folder or playable video exposed to the browsing layer."""

    id: str
    name: str
    image_url: str | None = None
    is_folder: bool = False
    media_type: Literal["video"] = "video"
    extra_type: Literal["Trailer"] | None = None
    trailer_types: list[TrailerType] | None = None
    provider_ids: dict[str, str] | None = None


class ChannelItemResult(_ChannelModel):
    """An ordered listing plus its total count.

    ``failed_movie_ids`` names movies whose videos could not be fetched while
    building an aggregate listing. It is never serialized.
    """

    items: list[ChannelEntry] = Field(default_factory=list)
    total_record_count: int = 0
    failed_movie_ids: list[int] = Field(default_factory=list, exclude=True)

    @classmethod
    def of(
        cls, items: list[ChannelEntry], failed_movie_ids: list[int] | None = None
    ) -> "ChannelItemResult":
        return cls(
            items=items,
            total_record_count=len(items),
            failed_movie_ids=failed_movie_ids or [],
        )


class MediaSource(_ChannelModel):
    """Playback descriptor for a resolved trailer stream."""

    id: str
    name: str
    path: str
    transcoding_url: str
    protocol: Literal["http"] = "http"
    is_remote: bool = True
    bitrate: int | None = None
    container: str | None = None


class IntroInfo(_ChannelModel):
    """Reference to a cached trailer to play before the main feature."""

    item_id: str


class ReconcileReport(_ChannelModel):
    """Outcome of a single intro cache reconciliation pass."""

    cached_ids: list[str] = Field(default_factory=list)
    downloaded: list[str] = Field(default_factory=list)
    deleted: list[str] = Field(default_factory=list)
    failed: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
    finished_at: datetime | None = None


@dataclass(slots=True)
class StreamDescriptor:
    """Concrete stream chosen by a site resolver."""

    url: str
    bitrate: int | None
    container: str | None
