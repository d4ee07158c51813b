"""Request-scoped accessors for objects wired in the lifespan."""

from __future__ import annotations

from fastapi import Request

from fieldmap.services.uploads import UploadService


def get_service(request: Request) -> UploadService:
    return request.app.state.service
