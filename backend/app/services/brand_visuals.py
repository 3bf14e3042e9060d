"""Visual asset generation for an existing brand brain.

Each operation checks the brain exists, builds the image prompt, asks the
image API for one image per asset, relocates it to storage and only then
writes the asset column. Hero, logo and mockups each own one column, so
the three can be generated independently.

ERROR LOGGING REQUIREMENTS:
- Log each generation start/finish at INFO with brain_id
- Log which mockup type failed
"""

import time
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import BrandPipelineError
from app.core.logging import get_logger, pipeline_logger
from app.integrations.openai import ImageClient
from app.models.brand_brain import MOCKUP_TYPES
from app.repositories.brand import BrandRepository
from app.repositories.brand_brain import BrandBrainRepository
from app.services.archetypes import ArchetypeCatalog, ArchetypeRecord
from app.services.assets import HERO_FOLDER, LOGO_FOLDER, MOCKUP_FOLDER, AssetRelocator
from app.services.prompts import (
    HERO_IMAGE_SIZE,
    LOGO_IMAGE_SIZE,
    MOCKUP_IMAGE_SIZE,
    PromptInputs,
    PromptStage,
    build_prompt,
)

logger = get_logger(__name__)

MOCKUP_STAGE = "Mockup generation"


class BrandVisualService:
    """Generates hero, logo and mockup images for a brand brain."""

    def __init__(
        self,
        images: ImageClient,
        relocator: AssetRelocator,
        catalog: ArchetypeCatalog,
    ) -> None:
        self.images = images
        self.relocator = relocator
        self.catalog = catalog

    def _reference(self, archetype: str) -> ArchetypeRecord | None:
        record = self.catalog.find(archetype)
        if record is None:
            logger.warning(
                "No archetype reference data, continuing without it",
                extra={"archetype": archetype},
            )
        return record

    async def _generate(self, prompt: str, size: str, brand_name: str, folder: str, kind: str) -> str:
        image = await self.images.generate(prompt, size=size)
        return await self.relocator.relocate(image.url, brand_name, folder, kind)

    async def generate_hero_image(
        self,
        session: AsyncSession,
        brain_id: str,
        brand_name: str,
        primary_archetype: str,
        secondary_archetype: str,
        color_palette: dict[str, Any],
        photo_transform: Any = None,
    ) -> str:
        """Generate, store and attach a hero image. Returns its public URL."""
        brains = BrandBrainRepository(session)
        await brains.require(brain_id)
        start_time = time.monotonic()
        pipeline_logger.stage_started("Hero image generation", brain_id=brain_id)

        prompt = build_prompt(
            PromptStage.HERO_IMAGE,
            PromptInputs(
                brand_name=brand_name,
                primary_archetype=primary_archetype,
                secondary_archetype=secondary_archetype,
                primary_record=self._reference(primary_archetype),
                secondary_record=self._reference(secondary_archetype),
                color_palette=color_palette,
                photo_transform=photo_transform,
            ),
        )
        url = await self._generate(prompt, HERO_IMAGE_SIZE, brand_name, HERO_FOLDER, "hero")
        await brains.update_assets(brain_id, hero_image_url=url)

        pipeline_logger.stage_completed(
            "Hero image generation", (time.monotonic() - start_time) * 1000, brain_id=brain_id
        )
        return url

    async def generate_logo(
        self,
        session: AsyncSession,
        brain_id: str,
        brand_name: str,
        primary_archetype: str,
        secondary_archetype: str,
        color_palette: dict[str, Any],
        logo_direction: Any = None,
    ) -> str:
        """Generate, store and attach a logo. Returns its public URL."""
        brains = BrandBrainRepository(session)
        await brains.require(brain_id)
        start_time = time.monotonic()
        pipeline_logger.stage_started("Logo generation", brain_id=brain_id)

        prompt = build_prompt(
            PromptStage.LOGO,
            PromptInputs(
                brand_name=brand_name,
                primary_archetype=primary_archetype,
                secondary_archetype=secondary_archetype,
                primary_record=self._reference(primary_archetype),
                secondary_record=self._reference(secondary_archetype),
                color_palette=color_palette,
                logo_direction=logo_direction,
            ),
        )
        url = await self._generate(prompt, LOGO_IMAGE_SIZE, brand_name, LOGO_FOLDER, "logo")
        await brains.update_assets(brain_id, logo_url=url)

        pipeline_logger.stage_completed(
            "Logo generation", (time.monotonic() - start_time) * 1000, brain_id=brain_id
        )
        return url

    async def generate_mockups(
        self,
        session: AsyncSession,
        brain_id: str,
        brand_name: str,
        color_palette: dict[str, Any],
        brand_type: str | None = None,
        logo_url: str | None = None,
    ) -> list[str]:
        """Generate all five mockups in MOCKUP_TYPES order.

        Without brand_type the brain's brand supplies its stored one.
        Mockups are generated one at a time. The mockup_urls column is
        written once, after all five are stored; any failure leaves it as it was.
        """
        brains = BrandBrainRepository(session)
        brain = await brains.require(brain_id)
        if brand_type is None:
            brand = await BrandRepository(session).get_by_id(brain.brand_id)
            brand_type = brand.brand_type if brand is not None else None
        start_time = time.monotonic()
        pipeline_logger.stage_started(
            MOCKUP_STAGE, brain_id=brain_id, has_logo=bool(logo_url)
        )

        urls: list[str] = []
        for mockup_type in MOCKUP_TYPES:
            prompt = build_prompt(
                PromptStage.MOCKUP,
                PromptInputs(
                    brand_name=brand_name,
                    brand_type=brand_type,
                    color_palette=color_palette,
                    mockup_type=mockup_type,
                ),
            )
            try:
                url = await self._generate(
                    prompt, MOCKUP_IMAGE_SIZE, brand_name, MOCKUP_FOLDER, mockup_type
                )
            except BrandPipelineError as e:
                pipeline_logger.stage_failed(
                    MOCKUP_STAGE,
                    e,
                    brain_id=brain_id,
                    mockup_type=mockup_type,
                    completed=len(urls),
                )
                raise
            urls.append(url)

        await brains.update_assets(brain_id, mockup_urls=urls)
        pipeline_logger.stage_completed(
            MOCKUP_STAGE,
            (time.monotonic() - start_time) * 1000,
            brain_id=brain_id,
            count=len(urls),
        )
        return urls
