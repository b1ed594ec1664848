"""Entry point for the FastAPI-powered TMDb trailer channel."""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any

import httpx
from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .cache import MetadataCache
from .config import settings
from .database import Database
from .errors import CatalogError
from .services.downloader import TrailerDownloader
from .services.intro_cache import IntroCacheReconciler
from .services.intros import IntroService
from .services.library import TrailerLibrary
from .services.resolver import StreamResolver, YouTubeResolver
from .services.tmdb import TmdbClient
from .services.trailer_channel import TrailerChannel

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app: FastAPI


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    exit_stack = AsyncExitStack()
    tmdb_http_client = await exit_stack.enter_async_context(
        httpx.AsyncClient(
            base_url=str(settings.tmdb_api_url),
            timeout=httpx.Timeout(20.0, connect=10.0),
        )
    )
    database = Database(settings.database_url)
    await database.create_all()

    cache = MetadataCache(default_ttl=settings.metadata_cache_seconds)
    tmdb = TmdbClient(settings, tmdb_http_client)
    resolver = StreamResolver([YouTubeResolver()])
    channel = TrailerChannel(settings, tmdb, resolver, cache)
    reconciler = IntroCacheReconciler(
        settings,
        channel,
        TrailerLibrary(database.session_factory),
        TrailerDownloader(settings),
    )
    intro_service = IntroService(settings, reconciler)

    fastapi_app.state.trailer_channel = channel
    fastapi_app.state.intro_service = intro_service
    fastapi_app.state.database = database
    await intro_service.start()

    try:
        yield
    finally:  # pragma: no cover - teardown path exercised at runtime
        await intro_service.stop()
        await database.dispose()
        await exit_stack.aclose()


def create_app() -> FastAPI:
    fastapi_app = FastAPI(
        title=settings.app_name,
        description="TMDb trailer channel and intro cache",
        version="1.0.0",
        lifespan=lifespan,
    )

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    register_routes(fastapi_app)
    return fastapi_app


def get_trailer_channel(fastapi_app: FastAPI) -> TrailerChannel:
    channel = getattr(fastapi_app.state, "trailer_channel", None)
    if not isinstance(channel, TrailerChannel):
        raise RuntimeError("Trailer channel not initialised")
    return channel


def get_intro_service(fastapi_app: FastAPI) -> IntroService:
    service = getattr(fastapi_app.state, "intro_service", None)
    if not isinstance(service, IntroService):
        raise RuntimeError("Intro service not initialised")
    return service


def _dump(model: Any) -> Any:
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)


def register_routes(fastapi_app: FastAPI) -> None:
    @fastapi_app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @fastapi_app.get("/channel/items")
    async def channel_items(
        folder_id: str | None = Query(default=None, alias="folderId"),
        start_index: int | None = Query(default=None, alias="startIndex", ge=0),
    ) -> JSONResponse:
        channel = get_trailer_channel(fastapi_app)
        try:
            result = await channel.get_channel_items(folder_id, start_index)
        except CatalogError as exc:
            raise HTTPException(status_code=502, detail=str(exc)) from exc
        return JSONResponse(_dump(result))

    @fastapi_app.get("/channel/trailers")
    async def channel_trailers(refresh: bool = False) -> JSONResponse:
        channel = get_trailer_channel(fastapi_app)
        try:
            result = await channel.get_all_channel_items(ignore_cache=refresh)
        except CatalogError as exc:
            raise HTTPException(status_code=502, detail=str(exc)) from exc
        return JSONResponse(_dump(result))

    @fastapi_app.get("/channel/media-source/{video_id}")
    async def media_source(video_id: str) -> JSONResponse:
        channel = get_trailer_channel(fastapi_app)
        source = await channel.get_media_source(video_id)
        if source is None:
            raise HTTPException(status_code=404, detail=f"No stream for {video_id}")
        return JSONResponse(_dump(source))

    @fastapi_app.post("/intros/refresh")
    async def refresh_intros() -> JSONResponse:
        service = get_intro_service(fastapi_app)
        try:
            report = await service.refresh()
        except CatalogError as exc:
            raise HTTPException(status_code=502, detail=str(exc)) from exc
        return JSONResponse(_dump(report))

    @fastapi_app.get("/intros")
    async def intros(
        count: int | None = Query(default=None, ge=0, le=50),
    ) -> JSONResponse:
        service = get_intro_service(fastapi_app)
        return JSONResponse([_dump(intro) for intro in service.get_intros(count)])


app = create_app()
