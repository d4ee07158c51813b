"""Upload, mapping and collection-creation endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from fieldmap.api.deps import get_service
from fieldmap.models.collection import Collection
from fieldmap.models.upload import UploadView
from fieldmap.services.uploads import UploadService

router = APIRouter(tags=["uploads"])


class MappingUpdate(BaseModel):
    header: str
    target: Optional[str] = None


@router.post("", response_model=UploadView, status_code=201)
async def create_upload(
    name: str = Form(""),
    type: str = Form(""),
    file: Optional[UploadFile] = File(None),
    service: UploadService = Depends(get_service),
) -> UploadView:
    """Store the file, read its headers and propose a mapping."""
    data = await file.read() if file is not None else None
    filename = file.filename if file is not None else None
    return await run_in_threadpool(service.start_upload, name, type, filename, data)


@router.get("/{upload_id}", response_model=UploadView)
def get_upload(upload_id: str, service: UploadService = Depends(get_service)) -> UploadView:
    return service.get_session(upload_id)


@router.put("/{upload_id}/mapping", response_model=UploadView)
def update_mapping(
    upload_id: str,
    update: MappingUpdate,
    service: UploadService = Depends(get_service),
) -> UploadView:
    """Assign a header to a target field, or clear it with ``target: null``."""
    return service.set_mapping(upload_id, update.header, update.target)


@router.post("/{upload_id}/mapping/auto", response_model=UploadView)
def auto_map(upload_id: str, service: UploadService = Depends(get_service)) -> UploadView:
    return service.auto_map(upload_id)


@router.delete("/{upload_id}/mapping", response_model=UploadView)
def reset_mapping(upload_id: str, service: UploadService = Depends(get_service)) -> UploadView:
    return service.reset_mapping(upload_id)


@router.post("/{upload_id}/collection", response_model=Collection, status_code=201)
def create_collection(
    upload_id: str,
    compensate: Optional[bool] = None,
    service: UploadService = Depends(get_service),
) -> Collection:
    """Create the collection and insert every transformed record."""
    return service.create_collection(upload_id, compensate=compensate)
