"""Entry point for the FastAPI-powered movie catalog."""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any

import httpx
from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse

from .catalog import CatalogView
from .config import settings
from .database import Database
from .filters import (
    Predicate,
    category_predicate,
    facet_predicate,
    search_predicate,
    tags_predicate,
)
from .normalizer import format_display_date
from .services.cache import CacheGateway
from .services.ingestion import CatalogService
from .services.snapshot import SnapshotLoader, dump_records
from .services.tmdb import TMDBDiscoveryClient, create_fetcher
from .web import render_catalog_page

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app: FastAPI


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    exit_stack = AsyncExitStack()
    http_client = await exit_stack.enter_async_context(
        httpx.AsyncClient(timeout=httpx.Timeout(20.0, connect=10.0))
    )
    database = Database(settings.database_url)
    await database.create_all()

    cache = CacheGateway(
        database.session_factory,
        key=settings.cache_key,
        ttl_ms=settings.cache_ttl_ms,
    )
    snapshot = SnapshotLoader(settings.static_movies_url, http_client)
    discovery: TMDBDiscoveryClient | None = None
    if settings.tmdb_api_key:
        discovery = TMDBDiscoveryClient(settings, create_fetcher(settings, http_client))
    catalog_service = CatalogService(settings, cache, snapshot, discovery)

    fastapi_app.state.catalog_service = catalog_service
    fastapi_app.state.database = database
    await catalog_service.start()

    try:
        yield
    finally:  # pragma: no cover - teardown path exercised at runtime
        await catalog_service.stop()
        await database.dispose()
        await exit_stack.aclose()


def create_app() -> FastAPI:
    fastapi_app = FastAPI(
        title=settings.app_name,
        description="Paginated, filterable movie catalog sourced from TMDB",
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


def get_catalog_service(app: FastAPI) -> CatalogService:
    service = getattr(app.state, "catalog_service", None)
    if not isinstance(service, CatalogService):
        raise RuntimeError("Catalog service not initialised")
    return service


def resolve_predicate(
    *,
    year: int,
    q: str | None = None,
    facet: str | None = None,
    category: str | None = None,
    tags: str | None = None,
) -> Predicate | None:
    """Pick the single filter that replaces the active view.

    Precedence is search, then facet, then category, then the tag set.
    """

    tag_values = [part for part in (tags or "").split(",") if part.strip()]
    for predicate in (
        search_predicate(q),
        facet_predicate(facet),
        category_predicate(category, year=year),
        tags_predicate(tag_values),
    ):
        if predicate is not None:
            return predicate
    return None


def serialize_view(view: CatalogView) -> dict[str, Any]:
    movies = []
    for record in view.page():
        payload = record.model_dump(mode="json")
        payload["display_date"] = format_display_date(record.date)
        movies.append(payload)
    return {
        "page": view.active_page,
        "total_pages": view.total_pages,
        "total": view.total,
        "is_default": view.is_default,
        "movies": movies,
    }


def register_routes(fastapi_app: FastAPI) -> None:
    def _select_view(
        page: int,
        q: str | None,
        facet: str | None,
        category: str | None,
        tags: str | None,
    ) -> CatalogView:
        service = get_catalog_service(fastapi_app)
        predicate = resolve_predicate(
            year=service.today.year, q=q, facet=facet, category=category, tags=tags
        )
        service.store.apply_filter(predicate)
        try:
            return service.store.set_page(page)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

    @fastapi_app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @fastapi_app.get("/api/movies")
    async def list_movies(
        page: int = 1,
        q: str | None = None,
        facet: str | None = None,
        category: str | None = None,
        tags: str | None = Query(default=None),
    ) -> JSONResponse:
        view = _select_view(page, q, facet, category, tags)
        return JSONResponse(serialize_view(view))

    @fastapi_app.get("/api/status")
    async def catalog_status() -> dict[str, Any]:
        return get_catalog_service(fastapi_app).status()

    @fastapi_app.post("/api/refresh", status_code=202)
    async def refresh_catalog() -> dict[str, bool]:
        service = get_catalog_service(fastapi_app)
        return {"scheduled": service.request_refresh()}

    @fastapi_app.get("/movies.json")
    async def movies_snapshot() -> JSONResponse:
        service = get_catalog_service(fastapi_app)
        return JSONResponse(dump_records(service.store.canonical))

    @fastapi_app.get("/", response_class=HTMLResponse)
    async def catalog_page(
        page: int = 1,
        q: str | None = None,
        facet: str | None = None,
        category: str | None = None,
        tags: str | None = None,
    ) -> HTMLResponse:
        view = _select_view(page, q, facet, category, tags)
        return HTMLResponse(render_catalog_page(settings, view, search=q or ""))


app = create_app()
