"""Brand identity generation pipeline.

Turns a free-text brand description into a persisted brand brain:

1. (optional) Archetype match: pick a primary/secondary archetype pair
   from the catalog.
2. Identity: ask the completion model for the identity JSON, using the
   archetype-aware template when a match was made.
3. Extraction: parse the reply and check every required key, including
   the four palette keys and both font keys.
4. (optional) Name: ask the model for a brand name; otherwise the name is
   taken from the first line of the description.
5. Persistence: create (or reuse) the brand row, then insert the brain.

All model calls happen before anything is written, and both inserts share
the request's session, so a failure at any step leaves no brain row.

ERROR LOGGING REQUIREMENTS:
- Log pipeline start/finish at INFO with owner_id, brand_id, brain_id
- Log stage failures with the error code
- Raw model text is logged by the extractor when parsing fails
"""

import time
from dataclasses import dataclass
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.errors import BrandPipelineError, ExtractionValidationError
from app.core.logging import pipeline_logger
from app.integrations.openai import CompletionClient
from app.models.brand import Brand, CreationMethod
from app.models.brand_brain import COLOR_PALETTE_KEYS
from app.repositories.brand import BrandRepository
from app.repositories.brand_brain import BrandBrainRepository
from app.services.archetype_matcher import ArchetypeMatch, match_archetypes
from app.services.archetypes import ArchetypeCatalog
from app.services.extractor import extract_json
from app.services.prompts import PromptInputs, PromptStage, build_prompt, user_messages

IDENTITY_STAGE = "Brand identity generation"

IDENTITY_KEYS: tuple[str, ...] = (
    "brand_story",
    "tagline",
    "tone",
    "voice_traits",
    "primary_archetype",
    "secondary_archetype",
    "color_palette",
    "font_suggestions",
    "logo_direction",
    "layout_style",
    "photo_transform",
)

FONT_KEYS: tuple[str, ...] = ("headings", "body")

BRAND_NAME_MAX_LENGTH = 50
DEFAULT_BRAND_NAME = "New Brand"


@dataclass
class BrandIdentityResult:
    """Identifiers of the rows written by one pipeline run."""

    brain_id: str
    brand_id: str
    brand_name: str


def default_brand_name(description: str) -> str:
    """First non-blank line of the description, cut to 50 characters."""
    for line in description.splitlines():
        line = line.strip()
        if line:
            return line[:BRAND_NAME_MAX_LENGTH].rstrip()
    return DEFAULT_BRAND_NAME


def validate_identity(identity: dict[str, Any]) -> None:
    """Check the nested keys the brain schema depends on.

    Raises:
        ExtractionValidationError: Naming missing keys as "color_palette.accent" etc.
    """
    missing: list[str] = []
    for parent, keys in (("color_palette", COLOR_PALETTE_KEYS), ("font_suggestions", FONT_KEYS)):
        value = identity.get(parent)
        present = value if isinstance(value, dict) else {}
        missing.extend(f"{parent}.{key}" for key in keys if key not in present)
    if missing:
        raise ExtractionValidationError(missing)


def brain_fields(identity: dict[str, Any]) -> dict[str, Any]:
    """Map a validated identity object onto brand_brains columns."""
    palette = identity["color_palette"]
    fonts = identity["font_suggestions"]
    voice_traits = identity["voice_traits"]
    if not isinstance(voice_traits, list):
        voice_traits = [voice_traits]

    return {
        "brand_story": str(identity["brand_story"]),
        "tagline": str(identity["tagline"]),
        "tone": str(identity["tone"]),
        "voice_traits": [str(trait) for trait in voice_traits],
        "primary_archetype": str(identity["primary_archetype"]),
        "secondary_archetype": str(identity["secondary_archetype"]),
        "color_palette": {key: palette[key] for key in COLOR_PALETTE_KEYS},
        "font_suggestions": {key: fonts[key] for key in FONT_KEYS},
        "logo_direction": identity["logo_direction"],
        "layout_style": identity["layout_style"],
        "photo_transform": identity["photo_transform"],
        "status": "active",
    }


class BrandIdentityService:
    """Runs the identity pipeline with injected collaborators."""

    def __init__(
        self,
        completion: CompletionClient,
        catalog: ArchetypeCatalog,
        archetype_matching: bool | None = None,
        name_generation: bool | None = None,
    ) -> None:
        settings = get_settings()
        self.completion = completion
        self.catalog = catalog
        self.archetype_matching = (
            settings.identity_match_archetypes
            if archetype_matching is None
            else archetype_matching
        )
        self.name_generation = (
            settings.identity_generate_name if name_generation is None else name_generation
        )

    async def generate_identity(self, description: str) -> dict[str, Any]:
        """Run the model stages and return a validated identity object."""
        match: ArchetypeMatch | None = None
        if self.archetype_matching:
            match = await match_archetypes(description, self.catalog, self.completion)
            prompt = build_prompt(
                PromptStage.ARCHETYPE_IDENTITY,
                PromptInputs(
                    description=description,
                    primary_record=match.primary,
                    secondary_record=match.secondary,
                ),
            )
        else:
            prompt = build_prompt(
                PromptStage.IDENTITY, PromptInputs(description=description)
            )

        result = await self.completion.complete(user_messages(prompt))
        identity: dict[str, Any] = extract_json(result.text, required_keys=IDENTITY_KEYS)
        validate_identity(identity)

        if match is not None:
            # The matched pair is authoritative over whatever the identity stage echoed
            identity["primary_archetype"] = match.primary.name
            identity["secondary_archetype"] = match.secondary.name

        return identity

    async def generate_brand_name(self, description: str) -> str:
        """Ask the model for a brand name."""
        prompt = build_prompt(PromptStage.BRAND_NAME, PromptInputs(description=description))
        result = await self.completion.complete(user_messages(prompt))
        data = extract_json(result.text, required_keys=("brand_name",))
        name = str(data["brand_name"]).strip()
        if not name:
            raise ExtractionValidationError(["brand_name"])
        return name[:BRAND_NAME_MAX_LENGTH]

    async def create_brand_identity(
        self,
        session: AsyncSession,
        owner_id: str,
        description: str,
        brand_id: str | None = None,
        creation_method: CreationMethod = CreationMethod.FREESTYLE,
        brand_type: str | None = None,
    ) -> BrandIdentityResult:
        """Generate and persist a brand brain for a description.

        Args:
            session: Request-scoped session; the caller commits
            owner_id: Owning account
            description: Free-text brand description
            brand_id: Existing brand to attach the brain to; a new brand is
                created when omitted
            creation_method: How the description was collected
            brand_type: Kind of business; stored on a newly created brand

        Raises:
            NotFoundError: If brand_id is given but does not exist
            BrandPipelineError: Any stage failure (upstream, parse, validation,
                match, persistence)
        """
        start_time = time.monotonic()
        brands = BrandRepository(session)
        brains = BrandBrainRepository(session)

        pipeline_logger.stage_started(
            IDENTITY_STAGE,
            owner_id=owner_id,
            brand_id=brand_id,
            description_length=len(description),
            archetype_matching=self.archetype_matching,
            name_generation=self.name_generation,
        )

        existing: Brand | None = None
        if brand_id is not None:
            existing = await brands.require(brand_id)

        try:
            identity = await self.generate_identity(description)
            brand_name = (
                await self.generate_brand_name(description)
                if self.name_generation
                else None
            )
        except BrandPipelineError as e:
            pipeline_logger.stage_failed(IDENTITY_STAGE, e, owner_id=owner_id, brand_id=brand_id)
            raise

        if existing is not None:
            brand = existing
            if brand_name and brand_name != brand.name:
                await brands.rename(brand, brand_name)
        else:
            brand = await brands.create(
                owner_id=owner_id,
                name=brand_name or default_brand_name(description),
                description=description,
                creation_method=creation_method,
                brand_type=brand_type,
            )

        brain = await brains.create(
            owner_id=owner_id,
            brand_id=brand.id,
            **brain_fields(identity),
        )

        pipeline_logger.stage_completed(
            IDENTITY_STAGE,
            (time.monotonic() - start_time) * 1000,
            owner_id=owner_id,
            brand_id=brand.id,
            brain_id=brain.id,
        )
        return BrandIdentityResult(brain_id=brain.id, brand_id=brand.id, brand_name=brand.name)
