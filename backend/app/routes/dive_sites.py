"""
DiveLog Backend: Dive Site Route Handlers
=========================================

/api/v1/dive-sites: browse, search and curate the canonical site list.

Unlike dive creation, POST here refuses to reuse an existing site: asking
to create "blue hole" 15 m from an existing "Blue Hole" is a 409.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from app.routes.deps import get_dive_site_service, parse_int_id
from app.schemas.common import ErrorResponse, MessageResponse
from app.schemas.dive_site import DiveSiteRequest, DiveSiteResponse
from app.services.dive_site_service import DiveSiteService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/dive-sites", tags=["Dive Sites"])


@router.get("", response_model=List[DiveSiteResponse], summary="List all dive sites by name")
async def list_dive_sites(
    service: DiveSiteService = Depends(get_dive_site_service),
) -> List[DiveSiteResponse]:
    sites = await service.list_sites()
    return [DiveSiteResponse.model_validate(site) for site in sites]


@router.get(
    "/search",
    response_model=List[DiveSiteResponse],
    responses={400: {"description": "Missing query", "model": ErrorResponse}},
    summary="Search dive sites by name (max 10 results)",
)
async def search_dive_sites(
    q: Optional[str] = Query(default=None, description="Case-insensitive name fragment"),
    service: DiveSiteService = Depends(get_dive_site_service),
) -> List[DiveSiteResponse]:
    sites = await service.search_sites(q)
    return [DiveSiteResponse.model_validate(site) for site in sites]


@router.get(
    "/{site_id}",
    response_model=DiveSiteResponse,
    responses={404: {"description": "Not found", "model": ErrorResponse}},
)
async def get_dive_site(
    site_id: str,
    service: DiveSiteService = Depends(get_dive_site_service),
) -> DiveSiteResponse:
    site = await service.get_site(parse_int_id(site_id, "dive site id"))
    return DiveSiteResponse.model_validate(site)


@router.post(
    "",
    status_code=201,
    response_model=DiveSiteResponse,
    responses={409: {"description": "Site already exists", "model": ErrorResponse}},
)
async def create_dive_site(
    request: DiveSiteRequest,
    service: DiveSiteService = Depends(get_dive_site_service),
) -> DiveSiteResponse:
    site = await service.create_named_site(request)
    return DiveSiteResponse.model_validate(site)


@router.put(
    "/{site_id}",
    response_model=DiveSiteResponse,
    responses={
        404: {"description": "Not found", "model": ErrorResponse},
        409: {"description": "Collides with another site", "model": ErrorResponse},
    },
)
async def update_dive_site(
    site_id: str,
    request: DiveSiteRequest,
    service: DiveSiteService = Depends(get_dive_site_service),
) -> DiveSiteResponse:
    site = await service.update_site(parse_int_id(site_id, "dive site id"), request)
    return DiveSiteResponse.model_validate(site)


@router.delete(
    "/{site_id}",
    response_model=MessageResponse,
    responses={
        404: {"description": "Not found", "model": ErrorResponse},
        409: {"description": "Site still has dives", "model": ErrorResponse},
    },
)
async def delete_dive_site(
    site_id: str,
    service: DiveSiteService = Depends(get_dive_site_service),
) -> MessageResponse:
    await service.delete_site(parse_int_id(site_id, "dive site id"))
    return MessageResponse(message="Dive site deleted successfully")
