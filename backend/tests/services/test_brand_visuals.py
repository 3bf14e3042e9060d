"""Tests for hero, logo and mockup generation.

Each operation must leave the brain untouched on any failure and write
only its own asset column on success.
"""

from typing import Any

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.errors import NotFoundError, UpstreamError
from app.models import MOCKUP_TYPES, BrandBrain
from app.repositories.brand import BrandRepository
from app.repositories.brand_brain import BrandBrainRepository
from app.services.archetypes import ArchetypeCatalog
from app.services.assets import AssetRelocator
from app.services.brand_identity import brain_fields
from app.services.brand_visuals import BrandVisualService
from app.services.prompts import HERO_IMAGE_SIZE, LOGO_IMAGE_SIZE

PALETTE = {"primary": "#2A2A8C", "secondary": "#F5F5F5", "accent": "#FFB800", "neutral": "#EFEFEF"}


@pytest.fixture
async def brain_id(db_session: AsyncSession, identity: dict[str, Any]) -> str:
    brand = await BrandRepository(db_session).create(
        owner_id="user-1", name="Stillwater", description="A calm meditation app"
    )
    brain = await BrandBrainRepository(db_session).create(
        owner_id="user-1", brand_id=brand.id, **brain_fields(identity)
    )
    await db_session.commit()
    return brain.id


@pytest.fixture
def service(
    image_client, relocator: AssetRelocator, archetype_catalog: ArchetypeCatalog
) -> BrandVisualService:
    return BrandVisualService(image_client, relocator, archetype_catalog)


async def _reload(
    factory: async_sessionmaker[AsyncSession], brain_id: str
) -> BrandBrain:
    async with factory() as session:
        brain = await session.get(BrandBrain, brain_id)
        assert brain is not None
        return brain


class TestHeroImage:
    """Tests for generate_hero_image."""

    async def test_stores_and_attaches(
        self,
        service: BrandVisualService,
        db_session: AsyncSession,
        async_session_factory,
        brain_id: str,
        image_client,
        fake_s3,
    ) -> None:
        url = await service.generate_hero_image(
            db_session,
            brain_id=brain_id,
            brand_name="Stillwater",
            primary_archetype="The Creator",
            secondary_archetype="The Jester",
            color_palette=PALETTE,
            photo_transform="soft duotone",
        )
        await db_session.commit()

        (prompt, size), = image_client.calls
        assert size == HERO_IMAGE_SIZE
        assert "soft duotone" in prompt
        assert url.startswith("https://cdn.example/hero-images/stillwater-hero-")
        assert len(fake_s3.objects) == 1

        brain = await _reload(async_session_factory, brain_id)
        assert brain.hero_image_url == url
        assert brain.logo_url is None
        assert brain.mockup_urls is None

    async def test_unknown_brain(
        self, service: BrandVisualService, db_session: AsyncSession, image_client
    ) -> None:
        with pytest.raises(NotFoundError):
            await service.generate_hero_image(
                db_session,
                brain_id="missing",
                brand_name="Stillwater",
                primary_archetype="Creator",
                secondary_archetype="Magician",
                color_palette=PALETTE,
            )

        assert image_client.calls == []

    async def test_generation_failure_leaves_brain_untouched(
        self,
        service: BrandVisualService,
        db_session: AsyncSession,
        async_session_factory,
        brain_id: str,
        image_client,
    ) -> None:
        image_client.fail_on = 0

        with pytest.raises(UpstreamError):
            await service.generate_hero_image(
                db_session,
                brain_id=brain_id,
                brand_name="Stillwater",
                primary_archetype="Creator",
                secondary_archetype="Magician",
                color_palette=PALETTE,
            )

        brain = await _reload(async_session_factory, brain_id)
        assert brain.hero_image_url is None


class TestLogo:
    """Tests for generate_logo."""

    async def test_stores_and_attaches(
        self,
        service: BrandVisualService,
        db_session: AsyncSession,
        async_session_factory,
        brain_id: str,
        image_client,
    ) -> None:
        url = await service.generate_logo(
            db_session,
            brain_id=brain_id,
            brand_name="Stillwater",
            primary_archetype="Magician",
            secondary_archetype="Architect",
            color_palette=PALETTE,
            logo_direction={"style": "minimal", "elements": ["ripple"]},
        )
        await db_session.commit()

        (prompt, size), = image_client.calls
        assert size == LOGO_IMAGE_SIZE
        assert "style: minimal; elements: ripple" in prompt
        assert "logos/stillwater-logo-" in url

        brain = await _reload(async_session_factory, brain_id)
        assert brain.logo_url == url
        assert brain.hero_image_url is None

    async def test_storage_failure_leaves_brain_untouched(
        self,
        service: BrandVisualService,
        db_session: AsyncSession,
        async_session_factory,
        brain_id: str,
        fake_s3,
    ) -> None:
        fake_s3.fail = True

        with pytest.raises(UpstreamError):
            await service.generate_logo(
                db_session,
                brain_id=brain_id,
                brand_name="Stillwater",
                primary_archetype="Magician",
                secondary_archetype="Architect",
                color_palette=PALETTE,
            )

        brain = await _reload(async_session_factory, brain_id)
        assert brain.logo_url is None


class TestMockups:
    """Tests for generate_mockups."""

    async def test_generates_all_five_in_order(
        self,
        service: BrandVisualService,
        db_session: AsyncSession,
        async_session_factory,
        brain_id: str,
        image_client,
    ) -> None:
        urls = await service.generate_mockups(
            db_session,
            brain_id=brain_id,
            brand_name="Stillwater",
            color_palette=PALETTE,
            brand_type="wellness studio",
            logo_url="https://cdn.example/logos/stillwater-logo-1.png",
        )
        await db_session.commit()

        assert len(urls) == len(MOCKUP_TYPES) == 5
        for url, mockup_type in zip(urls, MOCKUP_TYPES, strict=True):
            assert f"mockups/stillwater-{mockup_type}-" in url
        assert len(image_client.calls) == 5

        brain = await _reload(async_session_factory, brain_id)
        assert brain.mockup_urls == urls

    async def test_failure_midway_stores_nothing(
        self,
        service: BrandVisualService,
        db_session: AsyncSession,
        async_session_factory,
        brain_id: str,
        image_client,
    ) -> None:
        image_client.fail_on = 2

        with pytest.raises(UpstreamError):
            await service.generate_mockups(
                db_session,
                brain_id=brain_id,
                brand_name="Stillwater",
                color_palette=PALETTE,
            )

        assert len(image_client.calls) == 3
        brain = await _reload(async_session_factory, brain_id)
        assert brain.mockup_urls is None

    async def test_brand_type_defaults_to_stored_brand(
        self,
        service: BrandVisualService,
        db_session: AsyncSession,
        image_client,
        identity: dict[str, Any],
    ) -> None:
        brand = await BrandRepository(db_session).create(
            owner_id="user-1",
            name="Ember",
            description="A wood-fired pizza place",
            brand_type="neighbourhood pizzeria",
        )
        brain = await BrandBrainRepository(db_session).create(
            owner_id="user-1", brand_id=brand.id, **brain_fields(identity)
        )

        await service.generate_mockups(
            db_session, brain_id=brain.id, brand_name="Ember", color_palette=PALETTE
        )

        prompts = [prompt for prompt, _ in image_client.calls]
        assert any("neighbourhood pizzeria" in prompt for prompt in prompts)
        assert not any("modern brand" in prompt for prompt in prompts)

    async def test_request_brand_type_wins(
        self,
        service: BrandVisualService,
        db_session: AsyncSession,
        image_client,
        identity: dict[str, Any],
    ) -> None:
        brand = await BrandRepository(db_session).create(
            owner_id="user-1",
            name="Ember",
            description="A wood-fired pizza place",
            brand_type="neighbourhood pizzeria",
        )
        brain = await BrandBrainRepository(db_session).create(
            owner_id="user-1", brand_id=brand.id, **brain_fields(identity)
        )

        await service.generate_mockups(
            db_session,
            brain_id=brain.id,
            brand_name="Ember",
            color_palette=PALETTE,
            brand_type="food truck",
        )

        prompts = [prompt for prompt, _ in image_client.calls]
        assert any("food truck" in prompt for prompt in prompts)
        assert not any("neighbourhood pizzeria" in prompt for prompt in prompts)

    async def test_no_brand_type_anywhere(
        self,
        service: BrandVisualService,
        db_session: AsyncSession,
        brain_id: str,
        image_client,
    ) -> None:
        await service.generate_mockups(
            db_session, brain_id=brain_id, brand_name="Stillwater", color_palette=PALETTE
        )

        assert any("modern brand" in prompt for prompt, _ in image_client.calls)
