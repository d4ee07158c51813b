"""Target field catalog endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from fieldmap.api.deps import get_service
from fieldmap.models.taxonomy import Taxonomy
from fieldmap.services.uploads import UploadService

router = APIRouter(tags=["taxonomy"])


@router.get("/taxonomy", response_model=Taxonomy)
async def get_taxonomy(service: UploadService = Depends(get_service)) -> Taxonomy:
    """Return the ordered categories and their fields."""
    return service.taxonomy
