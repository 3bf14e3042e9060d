"""Schemas layer - Pydantic models for API validation.

Schemas define the shape of data for API requests and responses.
They handle validation, serialization, and documentation.
"""

from app.schemas.brand import (
    BrandBrainListResponse,
    BrandBrainResponse,
    BrandListResponse,
    BrandResponse,
    ColorPalette,
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

__all__ = [
    "BrandBrainListResponse",
    "BrandBrainResponse",
    "BrandListResponse",
    "BrandResponse",
    "ColorPalette",
    "CreateBrandIdentityRequest",
    "CreateBrandIdentityResponse",
    "GenerateHeroImageRequest",
    "GenerateLogoRequest",
    "GenerateMockupsRequest",
    "HeroImageResponse",
    "LogoResponse",
    "MockupsResponse",
    "TestCompletionRequest",
    "TestCompletionResponse",
]
