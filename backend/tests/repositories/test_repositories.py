"""Tests for the brand and brand brain repositories against SQLite."""

from typing import Any

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.errors import NotFoundError
from app.models import BrandBrain, CreationMethod
from app.repositories import BrandBrainRepository, BrandRepository
from app.services.brand_identity import brain_fields


class TestBrandRepository:
    """Tests for BrandRepository."""

    async def test_create_and_get(self, db_session: AsyncSession) -> None:
        repo = BrandRepository(db_session)

        brand = await repo.create(
            owner_id="user-1",
            name="Stillwater",
            description="A calm meditation app",
            creation_method=CreationMethod.GUIDED,
            brand_type="wellness app",
        )

        assert len(brand.id) == 36
        assert brand.creation_method == "guided"
        assert await repo.get_by_id(brand.id) is brand

    async def test_require_missing(self, db_session: AsyncSession) -> None:
        with pytest.raises(NotFoundError, match="Brand not found: nope"):
            await BrandRepository(db_session).require("nope")

    async def test_list_by_owner(self, db_session: AsyncSession) -> None:
        repo = BrandRepository(db_session)
        first = await repo.create(owner_id="user-1", name="First", description="one")
        second = await repo.create(owner_id="user-1", name="Second", description="two")
        await repo.create(owner_id="user-2", name="Other", description="three")

        brands = await repo.list_by_owner("user-1")

        assert [b.id for b in brands] == [second.id, first.id]

    async def test_rename(self, db_session: AsyncSession) -> None:
        repo = BrandRepository(db_session)
        brand = await repo.create(owner_id="user-1", name="Old", description="d")

        await repo.rename(brand, "New")

        assert (await repo.require(brand.id)).name == "New"


class TestBrandBrainRepository:
    """Tests for BrandBrainRepository."""

    async def _brain(self, session: AsyncSession, identity: dict[str, Any]) -> BrandBrain:
        brand = await BrandRepository(session).create(
            owner_id="user-1", name="Stillwater", description="d"
        )
        return await BrandBrainRepository(session).create(
            owner_id="user-1", brand_id=brand.id, **brain_fields(identity)
        )

    async def test_create(self, db_session: AsyncSession, identity: dict[str, Any]) -> None:
        brain = await self._brain(db_session, identity)

        assert brain.status == "active"
        assert brain.voice_traits == ["gentle", "clear", "reassuring"]
        assert brain.logo_url is None

    async def test_list_filters_by_brand(
        self, db_session: AsyncSession, identity: dict[str, Any]
    ) -> None:
        brain = await self._brain(db_session, identity)
        other = await self._brain(db_session, identity)
        repo = BrandBrainRepository(db_session)

        assert {b.id for b in await repo.list_by_owner("user-1")} == {brain.id, other.id}
        assert [b.id for b in await repo.list_by_owner("user-1", brain.brand_id)] == [brain.id]
        assert await repo.list_by_owner("user-2") == []

    async def test_update_assets_touches_only_named_columns(
        self,
        db_session: AsyncSession,
        async_session_factory: async_sessionmaker[AsyncSession],
        identity: dict[str, Any],
    ) -> None:
        brain = await self._brain(db_session, identity)
        repo = BrandBrainRepository(db_session)

        await repo.update_assets(brain.id, logo_url="https://cdn.example/logo.png")
        await repo.update_assets(brain.id, hero_image_url="https://cdn.example/hero.png")
        await db_session.commit()

        async with async_session_factory() as session:
            stored = await session.get(BrandBrain, brain.id)
        assert stored.logo_url == "https://cdn.example/logo.png"
        assert stored.hero_image_url == "https://cdn.example/hero.png"
        assert stored.tagline == identity["tagline"]

    async def test_update_assets_rejects_other_columns(
        self, db_session: AsyncSession, identity: dict[str, Any]
    ) -> None:
        brain = await self._brain(db_session, identity)

        with pytest.raises(ValueError):
            await BrandBrainRepository(db_session).update_assets(brain.id, tagline="hacked")

    async def test_update_assets_unknown_brain(self, db_session: AsyncSession) -> None:
        with pytest.raises(NotFoundError, match="Brain not found"):
            await BrandBrainRepository(db_session).update_assets(
                "missing", logo_url="https://cdn.example/logo.png"
            )
