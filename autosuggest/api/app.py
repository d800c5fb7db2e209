"""FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from autosuggest.api.routes.autocomplete import router as autocomplete_router
from autosuggest.api.routes.health import router as health_router
from autosuggest.config.settings import Settings, get_settings
from autosuggest.engine.errors import (
    EngineClosedError,
    InternalIndexError,
    QueryError,
    QueryTimeoutError,
)
from autosuggest.engine.service import SuggestionEngine
from autosuggest.vocabulary.loader import VocabularyLoader
from autosuggest.vocabulary.refresher import VocabularyRefresher

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _install_error_handlers(app: FastAPI) -> None:
    """Map engine errors to HTTP status codes."""

    @app.exception_handler(QueryError)
    async def _query_error(request: Request, exc: QueryError) -> JSONResponse:
        return _error(400, str(exc))

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        first = exc.errors()[0] if exc.errors() else {}
        field = ".".join(str(p) for p in first.get("loc", ())[1:]) or "request"
        return _error(400, f"Invalid {field}: {first.get('msg', 'bad value')}")

    @app.exception_handler(QueryTimeoutError)
    async def _timeout(request: Request, exc: QueryTimeoutError) -> JSONResponse:
        logger.warning("%s", exc)
        return _error(503, str(exc))

    @app.exception_handler(EngineClosedError)
    async def _closed(request: Request, exc: EngineClosedError) -> JSONResponse:
        return _error(503, str(exc))

    @app.exception_handler(InternalIndexError)
    async def _internal(request: Request, exc: InternalIndexError) -> JSONResponse:
        logger.error("Internal index error: %s", exc)
        return _error(500, "Internal index error")


def create_app(
    settings: Settings | None = None,
    engine: Optional[SuggestionEngine] = None,
) -> FastAPI:
    """
    Build and return a fully wired FastAPI application.

    The engine is created here (not in the lifespan) so that it exists
    even when the app is driven without startup events. The lifespan
    loads the seed file, runs the refresher and closes the engine.
    """
    settings = settings or get_settings()
    engine = engine or SuggestionEngine(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        refresher: Optional[VocabularyRefresher] = None
        seed = settings.seed_path
        if seed is not None:
            loader = VocabularyLoader(engine)
            try:
                loader.load(seed)
            except (OSError, ValueError):
                logger.exception("Could not load seed vocabulary from %s", seed)
            refresher = VocabularyRefresher(loader, seed, settings.vocabulary)
            refresher.mark_loaded()
            refresher.start()
        app.state.refresher = refresher
        try:
            yield
        finally:
            if refresher is not None:
                refresher.stop()
            engine.close()

    app = FastAPI(
        title=settings.api.title,
        version=settings.api.version,
        description="Ranked prefix autocomplete over a weighted vocabulary",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.engine = engine
    app.state.refresher = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.api.cors_origins),
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    _install_error_handlers(app)

    app.include_router(health_router)
    app.include_router(autocomplete_router)

    return app
