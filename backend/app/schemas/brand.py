"""Pydantic schemas for brand and brand brain endpoints.

Request field names follow the browser client's payloads (user_id, input,
archetype_primary, photo_transformation, ...). Image responses keep the
client's camelCase keys (imageUrl, logoUrl, mockupUrls) via aliases.

Required string fields are stripped and must be non-empty; a missing or
blank field is reported as 400 "Missing required fields".
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.models.brand import CreationMethod

# =============================================================================
# SHARED
# =============================================================================


class ColorPalette(BaseModel):
    """Brand color palette (hex strings)."""

    model_config = ConfigDict(extra="ignore")

    primary: str | None = Field(None, examples=["#2A2A8C"])
    secondary: str | None = Field(None, examples=["#F5F5F5"])
    accent: str | None = Field(None, examples=["#FFB800"])
    neutral: str | None = Field(None, examples=["#EFEFEF"])

    def as_dict(self) -> dict[str, str]:
        """Palette as a plain dict without unset colors."""
        return self.model_dump(exclude_none=True)


class RequiredTextModel(BaseModel):
    """Base for request bodies: strips strings so blank counts as missing."""

    model_config = ConfigDict(str_strip_whitespace=True)


# =============================================================================
# CREATE BRAND IDENTITY
# =============================================================================


class CreateBrandIdentityRequest(RequiredTextModel):
    """Request to generate a brand brain from a free-text description."""

    user_id: str = Field(..., min_length=1, description="Owning account ID")
    input: str = Field(
        ...,
        min_length=1,
        description="Free-text brand description",
        examples=["A calm meditation app called Stillwater"],
    )
    brand_id: str | None = Field(
        None, description="Existing brand to attach the brain to"
    )
    creation_method: CreationMethod = Field(
        CreationMethod.FREESTYLE, description="How the description was collected"
    )
    brand_type: str | None = Field(
        None,
        description="Kind of business, kept on a new brand for mockup prompts",
        examples=["restaurant", "tech company"],
    )


class CreateBrandIdentityResponse(BaseModel):
    """IDs of the created brain and its brand."""

    id: str = Field(..., description="Brand brain ID")
    brand_id: str
    brand_name: str


# =============================================================================
# VISUAL ASSETS
# =============================================================================


class GenerateHeroImageRequest(RequiredTextModel):
    """Request to generate a hero image for a brand brain."""

    brand_name: str = Field(..., min_length=1)
    archetype_primary: str = Field(..., min_length=1, examples=["The Creator"])
    archetype_secondary: str = Field(..., min_length=1, examples=["The Architect"])
    color_palette: ColorPalette
    photo_transformation: Any = Field(
        None, description="photo_transform of the brain (mapping or text)"
    )
    brain_id: str = Field(..., min_length=1)


class GenerateLogoRequest(RequiredTextModel):
    """Request to generate a logo for a brand brain."""

    brand_name: str = Field(..., min_length=1)
    archetype_primary: str = Field(..., min_length=1)
    archetype_secondary: str = Field(..., min_length=1)
    color_palette: ColorPalette
    logo_direction: Any = Field(
        None, description="logo_direction of the brain (mapping or text)"
    )
    brain_id: str = Field(..., min_length=1)


class GenerateMockupsRequest(RequiredTextModel):
    """Request to generate the five brand mockups."""

    brand_name: str = Field(..., min_length=1)
    brand_type: str | None = Field(
        None, examples=["restaurant", "tech company", "fashion brand"]
    )
    logo_url: str | None = None
    color_palette: ColorPalette
    brain_id: str = Field(..., min_length=1)


class HeroImageResponse(BaseModel):
    """Stored hero image."""

    success: bool = True
    image_url: str = Field(..., serialization_alias="imageUrl")


class LogoResponse(BaseModel):
    """Stored logo."""

    success: bool = True
    logo_url: str = Field(..., serialization_alias="logoUrl")


class MockupsResponse(BaseModel):
    """Stored mockups in billboard, storefront, product, stationery, environment order."""

    success: bool = True
    mockup_urls: list[str] = Field(..., serialization_alias="mockupUrls")


# =============================================================================
# COMPLETION PASSTHROUGH
# =============================================================================


class TestCompletionRequest(RequiredTextModel):
    """Prompt forwarded verbatim to the completion model."""

    __test__ = False

    prompt: str = Field(..., min_length=1)


class TestCompletionResponse(BaseModel):
    """Raw completion text."""

    __test__ = False

    result: str


# =============================================================================
# READ MODELS
# =============================================================================


class BrandResponse(BaseModel):
    """Brand row."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    owner_id: str
    name: str
    description: str
    creation_method: str
    brand_type: str | None = None
    created_at: datetime


class BrandListResponse(BaseModel):
    """Brands for an owner, newest first."""

    items: list[BrandResponse]
    total: int


class BrandBrainResponse(BaseModel):
    """Brand brain row."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    owner_id: str
    brand_id: str
    brand_story: str
    tagline: str
    tone: str
    voice_traits: list[str]
    primary_archetype: str
    secondary_archetype: str
    color_palette: dict[str, Any]
    font_suggestions: dict[str, Any]
    logo_direction: Any = None
    layout_style: Any = None
    photo_transform: Any = None
    hero_image_url: str | None = None
    logo_url: str | None = None
    mockup_urls: list[str] | None = None
    status: str
    created_at: datetime
    updated_at: datetime


class BrandBrainListResponse(BaseModel):
    """Brand brains for an owner, newest first."""

    items: list[BrandBrainResponse]
    total: int
