"""FastAPI dependencies shared by the v1 endpoints.

Services are assembled per request from process-wide clients, so tests can
swap any collaborator through `app.dependency_overrides`.
"""

from typing import Any

from fastapi import Depends, Request
from fastapi.responses import JSONResponse

from app.core.errors import BrandPipelineError
from app.integrations.openai import (
    CompletionClient,
    ImageClient,
    get_completion_client,
    get_image_client,
)
from app.integrations.s3 import S3Client, get_s3
from app.services.archetypes import ArchetypeCatalog, get_archetype_catalog
from app.services.assets import AssetRelocator
from app.services.brand_identity import BrandIdentityService
from app.services.brand_visuals import BrandVisualService


def get_request_id(request: Request) -> str:
    """Get request_id from request state."""
    return getattr(request.state, "request_id", "unknown")


def pipeline_error_response(
    request_id: str,
    error: BrandPipelineError,
    message: str | None = None,
    status_code: int | None = None,
) -> JSONResponse:
    """Render a pipeline error as {"error", "details", "code", "request_id"}.

    Args:
        request_id: Request correlation ID
        error: The pipeline error
        message: Route-specific summary; the error's own message moves to details
        status_code: Override for the error's default HTTP status
    """
    details: Any = error.details
    if message is not None:
        details = {"message": error.message, **(details if isinstance(details, dict) else {})}

    return JSONResponse(
        status_code=status_code or error.status_code,
        content={
            "error": message or error.message,
            "details": details,
            "code": error.code,
            "request_id": request_id,
        },
    )


async def get_asset_relocator(s3: S3Client = Depends(get_s3)) -> AssetRelocator:
    """Dependency for the asset relocator."""
    return AssetRelocator(s3)


async def get_brand_identity_service(
    completion: CompletionClient = Depends(get_completion_client),
    catalog: ArchetypeCatalog = Depends(get_archetype_catalog),
) -> BrandIdentityService:
    """Dependency for the brand identity pipeline."""
    return BrandIdentityService(completion, catalog)


async def get_brand_visual_service(
    images: ImageClient = Depends(get_image_client),
    relocator: AssetRelocator = Depends(get_asset_relocator),
    catalog: ArchetypeCatalog = Depends(get_archetype_catalog),
) -> BrandVisualService:
    """Dependency for visual asset generation."""
    return BrandVisualService(images, relocator, catalog)
