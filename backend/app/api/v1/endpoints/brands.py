"""Brand and brand brain read endpoints.

- GET /api/v1/brands?owner_id= - List an owner's brands
- GET /api/v1/brands/{brand_id} - Get a brand
- GET /api/v1/brand-brains?owner_id=[&brand_id=] - List an owner's brand brains
- GET /api/v1/brand-brains/{brain_id} - Get a brand brain

Unknown IDs return 404 {"error", "code": "NOT_FOUND", "request_id"}.
"""

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.dependencies import get_request_id, pipeline_error_response
from app.core.database import get_session
from app.core.errors import NotFoundError
from app.core.logging import get_logger
from app.repositories.brand import BrandRepository
from app.repositories.brand_brain import BrandBrainRepository
from app.schemas.brand import (
    BrandBrainListResponse,
    BrandBrainResponse,
    BrandListResponse,
    BrandResponse,
)

logger = get_logger(__name__)

router = APIRouter()


@router.get(
    "/brands",
    response_model=BrandListResponse,
    summary="List brands for an owner",
)
async def list_brands(
    request: Request,
    owner_id: str = Query(..., min_length=1),
    session: AsyncSession = Depends(get_session),
) -> BrandListResponse:
    """List an owner's brands, newest first."""
    logger.debug(
        "List brands request",
        extra={"request_id": get_request_id(request), "owner_id": owner_id},
    )
    brands = await BrandRepository(session).list_by_owner(owner_id)
    return BrandListResponse(
        items=[BrandResponse.model_validate(b) for b in brands],
        total=len(brands),
    )


@router.get(
    "/brands/{brand_id}",
    response_model=BrandResponse,
    summary="Get a brand",
    responses={404: {"description": "Brand not found"}},
)
async def get_brand(
    request: Request,
    brand_id: str,
    session: AsyncSession = Depends(get_session),
) -> BrandResponse | JSONResponse:
    """Get a brand by ID."""
    try:
        brand = await BrandRepository(session).require(brand_id)
    except NotFoundError as e:
        return pipeline_error_response(
            get_request_id(request), e, status_code=status.HTTP_404_NOT_FOUND
        )
    return BrandResponse.model_validate(brand)


@router.get(
    "/brand-brains",
    response_model=BrandBrainListResponse,
    summary="List brand brains for an owner",
)
async def list_brand_brains(
    request: Request,
    owner_id: str = Query(..., min_length=1),
    brand_id: str | None = Query(None),
    session: AsyncSession = Depends(get_session),
) -> BrandBrainListResponse:
    """List an owner's brand brains, optionally for one brand, newest first."""
    logger.debug(
        "List brand brains request",
        extra={
            "request_id": get_request_id(request),
            "owner_id": owner_id,
            "brand_id": brand_id,
        },
    )
    brains = await BrandBrainRepository(session).list_by_owner(owner_id, brand_id)
    return BrandBrainListResponse(
        items=[BrandBrainResponse.model_validate(b) for b in brains],
        total=len(brains),
    )


@router.get(
    "/brand-brains/{brain_id}",
    response_model=BrandBrainResponse,
    summary="Get a brand brain",
    responses={404: {"description": "Brand brain not found"}},
)
async def get_brand_brain(
    request: Request,
    brain_id: str,
    session: AsyncSession = Depends(get_session),
) -> BrandBrainResponse | JSONResponse:
    """Get a brand brain by ID."""
    try:
        brain = await BrandBrainRepository(session).require(brain_id)
    except NotFoundError as e:
        return pipeline_error_response(
            get_request_id(request), e, status_code=status.HTTP_404_NOT_FOUND
        )
    return BrandBrainResponse.model_validate(brain)
