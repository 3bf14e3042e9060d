"""Tests for the brand identity pipeline.

Tests cover:
- Default brand naming from the description
- Nested key validation of the identity object
- End-to-end create_brand_identity against SQLite with a scripted model
- Nothing is written when any stage fails
"""

import json
from typing import Any

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import (
    ExtractionValidationError,
    MatchError,
    NotFoundError,
    ParseError,
    UpstreamError,
)
from app.models import Brand, BrandBrain, CreationMethod
from app.repositories.brand import BrandRepository
from app.services.archetypes import ArchetypeCatalog
from app.services.brand_identity import (
    BrandIdentityService,
    brain_fields,
    default_brand_name,
    validate_identity,
)


async def _count(session: AsyncSession, model: type) -> int:
    result = await session.execute(select(func.count()).select_from(model))
    return result.scalar_one()


class TestDefaultBrandName:
    """Tests for default_brand_name."""

    def test_first_line(self) -> None:
        assert default_brand_name("Stillwater\nA calm meditation app") == "Stillwater"

    def test_skips_blank_lines(self) -> None:
        assert default_brand_name("\n   \n  Stillwater  \nmore") == "Stillwater"

    def test_truncates(self) -> None:
        assert len(default_brand_name("x" * 80)) == 50

    def test_blank_description(self) -> None:
        assert default_brand_name("   ") == "New Brand"


class TestValidateIdentity:
    """Tests for nested key validation."""

    def test_complete_identity(self, identity: dict[str, Any]) -> None:
        validate_identity(identity)

    def test_missing_palette_and_font_keys(self, identity_factory) -> None:
        identity = identity_factory(
            color_palette={"primary": "#000000", "secondary": "#111111"},
            font_suggestions={"headings": "Canela"},
        )

        with pytest.raises(ExtractionValidationError) as exc_info:
            validate_identity(identity)

        assert exc_info.value.missing_keys == [
            "color_palette.accent",
            "color_palette.neutral",
            "font_suggestions.body",
        ]

    def test_palette_not_an_object(self, identity_factory) -> None:
        with pytest.raises(ExtractionValidationError) as exc_info:
            validate_identity(identity_factory(color_palette="blue and gold"))

        assert "color_palette.primary" in exc_info.value.missing_keys


class TestBrainFields:
    """Tests for mapping identity to brain columns."""

    def test_drops_extra_palette_keys(self, identity_factory) -> None:
        identity = identity_factory(
            color_palette={
                "primary": "#1",
                "secondary": "#2",
                "accent": "#3",
                "neutral": "#4",
                "highlight": "#5",
            }
        )

        fields = brain_fields(identity)

        assert list(fields["color_palette"]) == ["primary", "secondary", "accent", "neutral"]
        assert fields["status"] == "active"

    def test_wraps_single_voice_trait(self, identity_factory) -> None:
        assert brain_fields(identity_factory(voice_traits="calm"))["voice_traits"] == ["calm"]

    def test_keeps_text_directions(self, identity_factory) -> None:
        fields = brain_fields(identity_factory(logo_direction="a quiet ripple"))
        assert fields["logo_direction"] == "a quiet ripple"


class TestCreateBrandIdentity:
    """Tests for the full pipeline."""

    async def test_creates_brand_and_brain(
        self,
        db_session: AsyncSession,
        completion_client,
        archetype_catalog: ArchetypeCatalog,
        identity: dict[str, Any],
    ) -> None:
        completion_client.queue("```json\n" + json.dumps(identity) + "\n```")
        service = BrandIdentityService(
            completion_client, archetype_catalog, archetype_matching=False, name_generation=False
        )

        result = await service.create_brand_identity(
            db_session,
            owner_id="user-1",
            description="Stillwater\nA calm meditation app",
            creation_method=CreationMethod.GUIDED,
        )

        assert result.brand_name == "Stillwater"
        brain = await db_session.get(BrandBrain, result.brain_id)
        brand = await db_session.get(Brand, result.brand_id)
        assert brain is not None and brand is not None
        assert brain.brand_id == brand.id
        assert brain.owner_id == "user-1"
        assert brain.tagline == "Breathe Slower"
        assert brain.color_palette["accent"] == "#FFB800"
        assert brain.font_suggestions == {"headings": "Canela", "body": "Neue Montreal"}
        assert brain.hero_image_url is None
        assert brain.mockup_urls is None
        assert brand.creation_method == "guided"
        assert brand.description == "Stillwater\nA calm meditation app"
        assert brand.brand_type is None

    async def test_archetype_matching_is_authoritative(
        self,
        db_session: AsyncSession,
        completion_client,
        archetype_catalog: ArchetypeCatalog,
        identity_factory,
    ) -> None:
        completion_client.queue(
            {"primary": "Magician", "secondary": "Architect"},
            identity_factory(primary_archetype="The Magician", secondary_archetype="Sage"),
        )
        service = BrandIdentityService(
            completion_client, archetype_catalog, archetype_matching=True, name_generation=False
        )

        result = await service.create_brand_identity(
            db_session, owner_id="user-1", description="A tarot app"
        )

        brain = await db_session.get(BrandBrain, result.brain_id)
        assert brain.primary_archetype == "Magician"
        assert brain.secondary_archetype == "Architect"
        assert len(completion_client.calls) == 2
        assert "ARCHETYPE PROFILES" in completion_client.prompts[1]

    async def test_generated_name(
        self,
        db_session: AsyncSession,
        completion_client,
        archetype_catalog: ArchetypeCatalog,
        identity: dict[str, Any],
    ) -> None:
        completion_client.queue(identity, {"brand_name": "  Lumen Loom  "})
        service = BrandIdentityService(
            completion_client, archetype_catalog, archetype_matching=False, name_generation=True
        )

        result = await service.create_brand_identity(
            db_session, owner_id="user-1", description="a weaving studio"
        )

        assert result.brand_name == "Lumen Loom"

    async def test_brand_type_stored_on_new_brand(
        self,
        db_session: AsyncSession,
        completion_client,
        archetype_catalog: ArchetypeCatalog,
        identity: dict[str, Any],
    ) -> None:
        completion_client.queue(identity)
        service = BrandIdentityService(
            completion_client, archetype_catalog, archetype_matching=False, name_generation=False
        )

        result = await service.create_brand_identity(
            db_session,
            owner_id="user-1",
            description="Ember\nWood-fired pizza",
            brand_type="neighbourhood pizzeria",
        )

        brand = await db_session.get(Brand, result.brand_id)
        assert brand is not None
        assert brand.brand_type == "neighbourhood pizzeria"

    async def test_existing_brand_is_reused(
        self,
        db_session: AsyncSession,
        completion_client,
        archetype_catalog: ArchetypeCatalog,
        identity: dict[str, Any],
    ) -> None:
        brand = await BrandRepository(db_session).create(
            owner_id="user-1", name="Old Name", description="A bakery"
        )
        completion_client.queue(identity, {"brand_name": "Crumb & Co"})
        service = BrandIdentityService(
            completion_client, archetype_catalog, archetype_matching=False, name_generation=True
        )

        result = await service.create_brand_identity(
            db_session, owner_id="user-1", description="A bakery", brand_id=brand.id
        )

        assert result.brand_id == brand.id
        assert result.brand_name == "Crumb & Co"
        assert await _count(db_session, Brand) == 1

    async def test_unknown_brand_id(
        self,
        db_session: AsyncSession,
        completion_client,
        archetype_catalog: ArchetypeCatalog,
    ) -> None:
        service = BrandIdentityService(
            completion_client, archetype_catalog, archetype_matching=False, name_generation=False
        )

        with pytest.raises(NotFoundError):
            await service.create_brand_identity(
                db_session, owner_id="user-1", description="A bakery", brand_id="missing"
            )

        assert completion_client.calls == []

    @pytest.mark.parametrize(
        ("reply", "error"),
        [
            ("not json at all", ParseError),
            ({"brand_story": "only a story"}, ExtractionValidationError),
            (UpstreamError("No response from OpenAI", service="openai"), UpstreamError),
        ],
    )
    async def test_failures_write_nothing(
        self,
        db_session: AsyncSession,
        completion_client,
        archetype_catalog: ArchetypeCatalog,
        reply: Any,
        error: type[Exception],
    ) -> None:
        completion_client.queue(reply)
        service = BrandIdentityService(
            completion_client, archetype_catalog, archetype_matching=False, name_generation=False
        )

        with pytest.raises(error):
            await service.create_brand_identity(
                db_session, owner_id="user-1", description="A bakery"
            )

        assert await _count(db_session, Brand) == 0
        assert await _count(db_session, BrandBrain) == 0

    async def test_match_failure_writes_nothing(
        self,
        db_session: AsyncSession,
        completion_client,
        archetype_catalog: ArchetypeCatalog,
    ) -> None:
        completion_client.queue({"primary": "Jester", "secondary": "Creator"})
        service = BrandIdentityService(
            completion_client, archetype_catalog, archetype_matching=True, name_generation=False
        )

        with pytest.raises(MatchError):
            await service.create_brand_identity(
                db_session, owner_id="user-1", description="A circus"
            )

        assert await _count(db_session, BrandBrain) == 0
        assert len(completion_client.calls) == 1
