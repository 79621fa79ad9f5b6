"""
DiveLog Backend: Dive Route Handlers
====================================

What:  /api/v1/dives: list, create, batch import, update, delete.
Who:   Called by the frontend dive log and the import dialog.

Every endpoint requires `?user_id=`; dives are always scoped to that user,
so another user's dive id answers 404.

Status codes:
    201  dive(s) created
    400  missing/invalid user_id or id, malformed body, empty batch
    404  dive not found for this user
    409  a dive already exists for this user, date and location
"""

import logging
from typing import List

from fastapi import APIRouter, Body, Depends

from app.routes.deps import get_dive_service, get_user_id, parse_int_id
from app.schemas.common import ErrorResponse, MessageResponse
from app.schemas.dive import BatchCreateResponse, DiveRequest, DiveResponse
from app.services.dive_service import DiveService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/dives", tags=["Dives"])

CONFLICT_RESPONSE = {409: {"description": "Duplicate dive", "model": ErrorResponse}}
NOT_FOUND_RESPONSE = {404: {"description": "Dive not found", "model": ErrorResponse}}


@router.get(
    "",
    response_model=List[DiveResponse],
    response_model_exclude_none=True,
    summary="List a user's dives, newest first",
)
async def list_dives(
    user_id: int = Depends(get_user_id),
    service: DiveService = Depends(get_dive_service),
) -> List[DiveResponse]:
    return await service.list_dives(user_id)


@router.post(
    "",
    status_code=201,
    response_model=DiveResponse,
    response_model_exclude_none=True,
    responses=CONFLICT_RESPONSE,
    summary="Log a dive",
    description=(
        "Resolves the dive site from location name and coordinates (same name "
        "within 100 m reuses the existing site) and rejects a second dive for the "
        "same user at the same site on the same calendar date."
    ),
)
async def create_dive(
    request: DiveRequest,
    user_id: int = Depends(get_user_id),
    service: DiveService = Depends(get_dive_service),
) -> DiveResponse:
    return await service.create_dive(user_id, request)


@router.post(
    "/batch",
    status_code=201,
    response_model=BatchCreateResponse,
    response_model_exclude_none=True,
    summary="Import several dives in one transaction",
    description="Duplicates are skipped and listed under `skipped`; any other failure creates nothing.",
)
async def create_dives_batch(
    requests: List[DiveRequest] = Body(...),
    user_id: int = Depends(get_user_id),
    service: DiveService = Depends(get_dive_service),
) -> BatchCreateResponse:
    return await service.create_dives_batch(user_id, requests)


@router.put(
    "/{dive_id}",
    response_model=DiveResponse,
    response_model_exclude_none=True,
    responses={**CONFLICT_RESPONSE, **NOT_FOUND_RESPONSE},
    summary="Edit a dive",
)
async def update_dive(
    dive_id: str,
    request: DiveRequest,
    user_id: int = Depends(get_user_id),
    service: DiveService = Depends(get_dive_service),
) -> DiveResponse:
    return await service.update_dive(user_id, parse_int_id(dive_id, "dive id"), request)


@router.delete(
    "/{dive_id}",
    response_model=MessageResponse,
    responses=NOT_FOUND_RESPONSE,
    summary="Delete a dive",
)
async def delete_dive(
    dive_id: str,
    user_id: int = Depends(get_user_id),
    service: DiveService = Depends(get_dive_service),
) -> MessageResponse:
    await service.delete_dive(user_id, parse_int_id(dive_id, "dive id"))
    return MessageResponse(message="Dive deleted successfully")
