"""
Studio endpoints.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from mediavault.api.schemas import (
    CreateStudioRequest,
    LabelResponse,
    RemoveStudiosRequest,
    RunStudioPluginsRequest,
    StudioResponse,
    StudioSearchResult,
    SuccessResponse,
    UpdateStudiosRequest,
)
from mediavault.core.dependencies import get_db, get_studio_index, get_studio_service
from mediavault.models import Studio
from mediavault.services.search import StudioIndex
from mediavault.services.studio import StudioService

router = APIRouter()


async def _to_response(
    db: AsyncSession, service: StudioService, studio: Studio
) -> StudioResponse:
    labels = await service.get_studio_labels(db, studio.id)
    response = StudioResponse.model_validate(studio)
    response.labels = [LabelResponse.model_validate(label) for label in labels]
    return response


@router.post("", response_model=StudioResponse, status_code=status.HTTP_201_CREATED)
async def create_studio(
    request: CreateStudioRequest,
    db: AsyncSession = Depends(get_db),
    service: StudioService = Depends(get_studio_service),
) -> StudioResponse:
    """
    Create a studio.

    Runs the studio creation plugins, then attaches the new studio to the
    unmatched scenes that mention it.
    """
    studio = await service.add_studio(db, request.name, request.labels)
    return await _to_response(db, service, studio)


@router.patch("", response_model=List[StudioResponse])
async def update_studios(
    request: UpdateStudiosRequest,
    db: AsyncSession = Depends(get_db),
    service: StudioService = Depends(get_studio_service),
) -> List[StudioResponse]:
    """
    Apply the same sparse update to several studios.

    Unknown IDs are skipped and left out of the response.
    """
    studios = await service.update_studios(db, request.ids, request.opts)
    return [await _to_response(db, service, studio) for studio in studios]


@router.delete("", response_model=SuccessResponse)
async def remove_studios(
    request: RemoveStudiosRequest,
    db: AsyncSession = Depends(get_db),
    service: StudioService = Depends(get_studio_service),
) -> SuccessResponse:
    """Remove studios and every reference to them."""
    success = await service.remove_studios(db, request.ids)
    return SuccessResponse(success=success)


@router.post("/run-plugins", response_model=List[StudioResponse])
async def run_studio_plugins(
    request: RunStudioPluginsRequest,
    db: AsyncSession = Depends(get_db),
    service: StudioService = Depends(get_studio_service),
) -> List[StudioResponse]:
    """Re-run the custom studio plugins on several studios."""
    studios = await service.run_studio_plugins(db, request.ids)
    return [await _to_response(db, service, studio) for studio in studios]


@router.get("/search", response_model=List[StudioSearchResult])
async def search_studios(
    q: str = Query("", description="Text to look for in names, aliases and labels"),
    db: AsyncSession = Depends(get_db),
    index: StudioIndex = Depends(get_studio_index),
) -> List[StudioSearchResult]:
    """Search the studio index."""
    documents = await index.search(db, q)
    return [StudioSearchResult.model_validate(document) for document in documents]


@router.get("/{studio_id}", response_model=StudioResponse)
async def get_studio(
    studio_id: str,
    db: AsyncSession = Depends(get_db),
    service: StudioService = Depends(get_studio_service),
) -> StudioResponse:
    """Get a studio with its labels."""
    studio = await service.get_studio(db, studio_id)
    return await _to_response(db, service, studio)


@router.post(
    "/{studio_id}/attach-unmatched-scenes", response_model=Optional[StudioResponse]
)
async def attach_studio_to_unmatched_scenes(
    studio_id: str,
    db: AsyncSession = Depends(get_db),
    service: StudioService = Depends(get_studio_service),
) -> Optional[StudioResponse]:
    """
    Attach a studio to the unmatched scenes that mention it.

    Responds with null when the studio does not exist or matching failed;
    both are logged by the service.
    """
    studio = await service.attach_studio_to_unmatched_scenes(db, studio_id)
    if studio is None:
        return None
    return await _to_response(db, service, studio)
