"""FastAPI application factory."""
from __future__ import annotations
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from catalog import __version__
from catalog.config import settings
from catalog.domain.exceptions import (
    CatalogError, InvalidFilterValue, StorageUnavailable,
)
from catalog.logging import configure_logging, logger, set_request_id


def create_app() -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.LOG_LEVEL)
        from catalog.infra.db.engine import engine  # triggers SQLite hooks + mapper registration
        from catalog.db import check_isolation_level, init_db
        init_db(engine)
        check_isolation_level(engine, settings.SEARCH_ISOLATION_LEVEL)
        yield

    app = FastAPI(
        title="Catalog Search API",
        version=__version__,
        lifespan=lifespan,
    )

    # Import routers inside create_app() to avoid circular imports at module load time
    from catalog.api.routers.search import router as search_router

    app.include_router(search_router)

    @app.middleware("http")
    async def _request_id(request: Request, call_next):
        rid = set_request_id(request.headers.get("X-Request-ID"))
        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response

    @app.exception_handler(CatalogError)
    def _bad_request(request: Request, exc: CatalogError) -> JSONResponse:
        content = {"detail": exc.message, "error": type(exc).__name__}
        if isinstance(exc, InvalidFilterValue) and exc.filter_name:
            content["filter"] = exc.filter_name
        return JSONResponse(status_code=400, content=content)

    @app.exception_handler(StorageUnavailable)
    def _unavailable(request: Request, exc: StorageUnavailable) -> JSONResponse:
        logger.warning("Responding 503: %s", exc.message)
        return JSONResponse(
            status_code=503, content={"detail": exc.message, "error": type(exc).__name__},
        )

    @app.get("/health", tags=["ops"])
    def health() -> dict:
        return {"status": "ok"}

    return app
