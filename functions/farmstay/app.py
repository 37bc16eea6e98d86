"""
FastAPI application entry point for the farm-stay site backend.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from farmstay.admin_routes import admin_router
from farmstay.config import get_settings
from farmstay.db import DbError
from farmstay.dependencies import get_auth_client, get_db_client, get_storage_client
from farmstay.routes import router
from farmstay.storage import StorageError

logger = logging.getLogger(__name__)


async def _backend_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=502, content={"detail": "Backend service error"})


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    if settings.is_production:
        # Fail at startup rather than on the first request.
        get_db_client()
        get_storage_client()
        get_auth_client()
    elif settings.is_mock_mode:
        logger.warning("Running in local mock mode; data is not persisted.")

    app = FastAPI(title=settings.app_name, version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list(),
        allow_credentials=settings.cors_origin_list() != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(DbError, _backend_error_handler)
    app.add_exception_handler(StorageError, _backend_error_handler)
    app.include_router(router, prefix=settings.api_prefix)
    app.include_router(admin_router, prefix=settings.api_prefix)
    return app


app = create_app()
