"""FastAPI application with lifespan, router mounting and error mapping."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from fieldmap.api.routes import collections, health, taxonomy, uploads
from fieldmap.core.config import AppSettings
from fieldmap.core.exceptions import (
    CacheError,
    CollectionNotFoundError,
    FieldMapError,
    FileStoreError,
    MappingConflictError,
    ParseError,
    PersistenceError,
    UploadNotFoundError,
    ValidationError,
)
from fieldmap.models.taxonomy import load_taxonomy
from fieldmap.persistence import create_persistence
from fieldmap.services.uploads import UploadService

logger = logging.getLogger(__name__)

# Most specific first; ValidationError also covers UnknownTargetFieldError.
STATUS_BY_ERROR: list[tuple[type[FieldMapError], int]] = [
    (ValidationError, 400),
    (UploadNotFoundError, 404),
    (CollectionNotFoundError, 404),
    (MappingConflictError, 409),
    (ParseError, 422),
    (PersistenceError, 502),
    (CacheError, 502),
    (FileStoreError, 502),
]


def status_for(exc: FieldMapError) -> int:
    for error_type, status in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status
    return 500


async def _fieldmap_error_handler(request: Request, exc: FieldMapError) -> JSONResponse:
    status = status_for(exc)
    if status >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    body: dict = {"detail": str(exc)}
    if isinstance(exc, MappingConflictError):
        body["conflicts"] = exc.conflicts
    if isinstance(exc, PersistenceError):
        body["collection_id"] = exc.collection_id
        body["compensated"] = exc.compensated
    return JSONResponse(status_code=status, content=body)


def build_service(settings: AppSettings) -> UploadService:
    collection_store, cache, file_store = create_persistence(settings)
    return UploadService(
        settings=settings,
        taxonomy=load_taxonomy(settings.mapping.taxonomy_path),
        collection_store=collection_store,
        cache=cache,
        file_store=file_store,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Initialize and tear down application resources."""
    settings = getattr(app.state, "settings", None) or AppSettings()
    logging.basicConfig(level=settings.log_level.upper())
    app.state.settings = settings
    if getattr(app.state, "service", None) is None:
        app.state.service = build_service(settings)
    logger.info(
        f"fieldmap started (environment={settings.environment}, "
        f"backend={settings.persistence.backend})"
    )
    yield


def create_app(settings: AppSettings | None = None, service: UploadService | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Tests pass a pre-wired ``service`` to run against in-memory backends.
    """
    app = FastAPI(
        title="fieldmap column mapping service",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.service = service
    app.add_exception_handler(FieldMapError, _fieldmap_error_handler)
    app.include_router(health.router)
    app.include_router(taxonomy.router)
    app.include_router(uploads.router, prefix="/uploads")
    app.include_router(collections.router, prefix="/collections")
    return app
