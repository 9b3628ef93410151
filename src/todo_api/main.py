from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .db import ConnectionPool, open_pool
from .errors import RowNotFound, StoreError
from .routers import health as health_router
from .routers import todos as todos_router
from .settings import Settings, get_settings
from .utils import error_envelope

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Liveness check backed by a store round trip."},
    {"name": "todos", "description": "CRUD operations for Todo items."},
]


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Return a consistent JSON structure for request validation errors.

    Response format:
        {
            "status": "fail",
            "message": "Request validation failed",
            "detail": [... pydantic/fastapi error details ...]
        }
    """
    return JSONResponse(
        status_code=422,
        content=error_envelope("fail", "Request validation failed", jsonable_encoder(exc.errors())),
    )


async def not_found_handler(request: Request, exc: RowNotFound) -> JSONResponse:
    return JSONResponse(status_code=404, content=error_envelope("fail", exc.public_message))


async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    # Full diagnostics stay in the log; the client only sees the classified message.
    logger.error("%s %s failed: %s", request.method, request.url.path, exc, exc_info=exc)
    return JSONResponse(status_code=500, content=error_envelope("error", exc.public_message))


# PUBLIC_INTERFACE
def create_app(settings: Optional[Settings] = None, pool: Optional[ConnectionPool] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Configuration; read from the environment when omitted.
        pool: Pre-opened connection pool. When omitted the lifespan opens one
            from settings (running migrations) and closes it on shutdown. An
            injected pool is left open for its owner to close.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owned = pool is None
        app.state.pool = open_pool(settings) if owned else pool
        try:
            yield
        finally:
            if owned:
                app.state.pool.close()

    app = FastAPI(
        title="Todo API",
        description="Minimal CRUD service for todo items backed by SQLite.",
        version="0.1.0",
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(RowNotFound, not_found_handler)
    app.add_exception_handler(StoreError, store_error_handler)

    app.include_router(health_router.router)
    app.include_router(todos_router.router)
    return app


app = create_app()
