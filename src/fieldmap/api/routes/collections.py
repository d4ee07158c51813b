"""Collection lookup endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from fieldmap.api.deps import get_service
from fieldmap.models.collection import Collection
from fieldmap.services.uploads import UploadService

router = APIRouter(tags=["collections"])


@router.get("/{collection_id}", response_model=Collection)
def get_collection(collection_id: str, service: UploadService = Depends(get_service)) -> Collection:
    return service.get_collection(collection_id)
