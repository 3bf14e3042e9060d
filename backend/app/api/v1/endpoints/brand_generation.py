"""Brand generation API endpoints.

Provides endpoints for the brand pipeline:
- POST /api/v1/create-brand-identity - Generate and persist a brand brain from a description
- POST /api/v1/generate-hero-image - Generate, store and attach a hero image
- POST /api/v1/generate-logo - Generate, store and attach a logo
- POST /api/v1/generate-mockups - Generate, store and attach the five mockups
- POST /api/v1/test-completion - Forward a prompt to the completion model

Every pipeline failure is returned as
{"error": str, "details": Any, "code": str, "request_id": str}; nothing is
retried and no partial brain or asset reference is committed.

Error Logging Requirements:
- Log all incoming requests with method, path, request_id
- Log request body at DEBUG level (sanitize sensitive fields)
- Log 4xx errors at WARNING, 5xx at ERROR
"""

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.dependencies import (
    get_brand_identity_service,
    get_brand_visual_service,
    get_request_id,
    pipeline_error_response,
)
from app.core.database import get_session
from app.core.errors import BrandPipelineError, ParseError
from app.core.logging import get_logger
from app.integrations.openai import CompletionClient, get_completion_client
from app.schemas.brand import (
    CreateBrandIdentityRequest,
    CreateBrandIdentityResponse,
    GenerateHeroImageRequest,
    GenerateLogoRequest,
    GenerateMockupsRequest,
    HeroImageResponse,
    LogoResponse,
    MockupsResponse,
    TestCompletionRequest,
    TestCompletionResponse,
)
from app.services.brand_identity import BrandIdentityService
from app.services.brand_visuals import BrandVisualService
from app.services.prompts import user_messages

logger = get_logger(__name__)

router = APIRouter()

_ERROR_EXAMPLE = {
    "error": "Failed to parse brand analysis",
    "details": {"message": "Invalid JSON in model response: Expecting value"},
    "code": "PARSE_ERROR",
    "request_id": "<request_id>",
}
_MISSING_EXAMPLE = {
    "error": "Missing required fields",
    "details": ["input"],
    "code": "MISSING_INPUT",
    "request_id": "<request_id>",
}


async def _fail(
    session: AsyncSession,
    request_id: str,
    error: BrandPipelineError,
    message: str | None,
    operation: str,
) -> JSONResponse:
    """Roll back the request's writes and render the error."""
    await session.rollback()
    log = logger.warning if error.status_code < 500 else logger.error
    log(
        f"{operation} failed",
        extra={
            "request_id": request_id,
            "error_code": error.code,
            "error": error.message,
        },
    )
    return pipeline_error_response(request_id, error, message)


@router.post(
    "/create-brand-identity",
    response_model=CreateBrandIdentityResponse,
    summary="Generate a brand brain from a description",
    description="""
Generate a brand identity (story, tagline, tone, archetypes, palette, fonts,
logo direction, layout style, photo treatment) from a free-text description
and persist it as a brand brain.

A new brand is created unless `brand_id` names an existing one.
""",
    responses={
        400: {
            "description": "Missing required fields",
            "content": {"application/json": {"example": _MISSING_EXAMPLE}},
        },
        500: {
            "description": "Upstream, parse, validation or persistence failure",
            "content": {"application/json": {"example": _ERROR_EXAMPLE}},
        },
    },
)
async def create_brand_identity(
    request: Request,
    data: CreateBrandIdentityRequest,
    session: AsyncSession = Depends(get_session),
    service: BrandIdentityService = Depends(get_brand_identity_service),
) -> CreateBrandIdentityResponse | JSONResponse:
    """Run the identity pipeline for one description."""
    request_id = get_request_id(request)
    logger.debug(
        "Create brand identity request",
        extra={
            "request_id": request_id,
            "owner_id": data.user_id,
            "brand_id": data.brand_id,
            "input_length": len(data.input),
            "creation_method": data.creation_method.value,
        },
    )

    try:
        result = await service.create_brand_identity(
            session,
            owner_id=data.user_id,
            description=data.input,
            brand_id=data.brand_id,
            creation_method=data.creation_method,
            brand_type=data.brand_type,
        )
    except ParseError as e:
        return await _fail(
            session, request_id, e, "Failed to parse brand analysis", "Create brand identity"
        )
    except BrandPipelineError as e:
        return await _fail(session, request_id, e, None, "Create brand identity")

    return CreateBrandIdentityResponse(
        id=result.brain_id,
        brand_id=result.brand_id,
        brand_name=result.brand_name,
    )


@router.post(
    "/generate-hero-image",
    response_model=HeroImageResponse,
    summary="Generate the hero image for a brand brain",
    responses={500: {"description": "Generation, storage or persistence failure"}},
)
async def generate_hero_image(
    request: Request,
    data: GenerateHeroImageRequest,
    session: AsyncSession = Depends(get_session),
    service: BrandVisualService = Depends(get_brand_visual_service),
) -> HeroImageResponse | JSONResponse:
    """Generate a 1792x1024 hero image and attach it to the brain."""
    request_id = get_request_id(request)
    logger.debug(
        "Generate hero image request",
        extra={
            "request_id": request_id,
            "brain_id": data.brain_id,
            "archetype_primary": data.archetype_primary,
            "archetype_secondary": data.archetype_secondary,
        },
    )

    try:
        url = await service.generate_hero_image(
            session,
            brain_id=data.brain_id,
            brand_name=data.brand_name,
            primary_archetype=data.archetype_primary,
            secondary_archetype=data.archetype_secondary,
            color_palette=data.color_palette.as_dict(),
            photo_transform=data.photo_transformation,
        )
    except BrandPipelineError as e:
        return await _fail(
            session, request_id, e, "Failed to generate hero image", "Generate hero image"
        )

    return HeroImageResponse(image_url=url)


@router.post(
    "/generate-logo",
    response_model=LogoResponse,
    summary="Generate the logo for a brand brain",
    responses={500: {"description": "Generation, storage or persistence failure"}},
)
async def generate_logo(
    request: Request,
    data: GenerateLogoRequest,
    session: AsyncSession = Depends(get_session),
    service: BrandVisualService = Depends(get_brand_visual_service),
) -> LogoResponse | JSONResponse:
    """Generate a 1024x1024 icon logo and attach it to the brain."""
    request_id = get_request_id(request)
    logger.debug(
        "Generate logo request",
        extra={"request_id": request_id, "brain_id": data.brain_id},
    )

    try:
        url = await service.generate_logo(
            session,
            brain_id=data.brain_id,
            brand_name=data.brand_name,
            primary_archetype=data.archetype_primary,
            secondary_archetype=data.archetype_secondary,
            color_palette=data.color_palette.as_dict(),
            logo_direction=data.logo_direction,
        )
    except BrandPipelineError as e:
        return await _fail(session, request_id, e, "Failed to generate logo", "Generate logo")

    return LogoResponse(logo_url=url)


@router.post(
    "/generate-mockups",
    response_model=MockupsResponse,
    summary="Generate the five brand mockups",
    description="""
Generate billboard, storefront, product, stationery and environment mockups,
one after another. Either all five URLs are stored, in that order, or none are.
""",
    responses={500: {"description": "Generation, storage or persistence failure"}},
)
async def generate_mockups(
    request: Request,
    data: GenerateMockupsRequest,
    session: AsyncSession = Depends(get_session),
    service: BrandVisualService = Depends(get_brand_visual_service),
) -> MockupsResponse | JSONResponse:
    """Generate all mockups and attach them to the brain."""
    request_id = get_request_id(request)
    logger.debug(
        "Generate mockups request",
        extra={
            "request_id": request_id,
            "brain_id": data.brain_id,
            "brand_type": data.brand_type,
        },
    )

    try:
        urls = await service.generate_mockups(
            session,
            brain_id=data.brain_id,
            brand_name=data.brand_name,
            color_palette=data.color_palette.as_dict(),
            brand_type=data.brand_type,
            logo_url=data.logo_url,
        )
    except BrandPipelineError as e:
        return await _fail(
            session, request_id, e, "Failed to generate mockups", "Generate mockups"
        )

    return MockupsResponse(mockup_urls=urls)


@router.post(
    "/test-completion",
    response_model=TestCompletionResponse,
    status_code=status.HTTP_200_OK,
    summary="Forward a prompt to the completion model",
)
async def test_completion(
    request: Request,
    data: TestCompletionRequest,
    completion: CompletionClient = Depends(get_completion_client),
) -> TestCompletionResponse | JSONResponse:
    """Return the completion model's raw reply to a prompt."""
    request_id = get_request_id(request)

    try:
        result = await completion.complete(user_messages(data.prompt))
    except BrandPipelineError as e:
        logger.error(
            "Test completion failed",
            extra={"request_id": request_id, "error": e.message},
        )
        return pipeline_error_response(request_id, e, "Failed to process request")

    return TestCompletionResponse(result=result.text)
