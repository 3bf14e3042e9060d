"""BrandBrainRepository with insert, lookup and asset-column updates.

Asset columns (hero_image_url, logo_url, mockup_urls) are written with
single-statement partial UPDATEs so independent generation requests never
overwrite each other's columns.

ERROR LOGGING REQUIREMENTS:
- Log all exceptions with context
- Include entity IDs (brain_id, brand_id) in all logs
- Log state transitions at INFO level
- Add timing logs for operations >1 second
"""

import time
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFoundError, PersistenceError
from app.core.logging import db_logger, get_logger
from app.models.brand_brain import BrandBrain

logger = get_logger(__name__)

# Columns written after creation, each by its own generation step
ASSET_COLUMNS = frozenset({"hero_image_url", "logo_url", "mockup_urls"})


class BrandBrainRepository:
    """Repository for BrandBrain persistence."""

    TABLE_NAME = "brand_brains"
    SLOW_OPERATION_THRESHOLD_MS = 1000

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, owner_id: str, brand_id: str, **fields: Any) -> BrandBrain:
        """Insert a brand brain and return it with its generated id.

        Args:
            owner_id: Owning account
            brand_id: Brand this brain was generated for
            **fields: Identity columns (brand_story, tagline, color_palette, ...)

        Raises:
            PersistenceError: If the insert is rejected
        """
        start_time = time.monotonic()
        try:
            brain = BrandBrain(owner_id=owner_id, brand_id=brand_id, **fields)
            self.session.add(brain)
            await self.session.flush()
            await self.session.refresh(brain)
        except SQLAlchemyError as e:
            db_logger.transaction_failure(
                e,
                table=self.TABLE_NAME,
                context=f"Creating brand_brain for brand_id={brand_id}",
            )
            raise PersistenceError(
                "Failed to save brand brain", table=self.TABLE_NAME
            ) from e

        duration_ms = (time.monotonic() - start_time) * 1000
        if duration_ms > self.SLOW_OPERATION_THRESHOLD_MS:
            db_logger.slow_query(
                query="INSERT INTO brand_brains",
                duration_ms=duration_ms,
                table=self.TABLE_NAME,
            )

        logger.info(
            "Brand brain created",
            extra={
                "brain_id": brain.id,
                "brand_id": brand_id,
                "owner_id": owner_id,
                "primary_archetype": brain.primary_archetype,
            },
        )
        return brain

    async def get_by_id(self, brain_id: str) -> BrandBrain | None:
        """Get a brand brain by ID, or None if it does not exist."""
        try:
            result = await self.session.execute(
                select(BrandBrain).where(BrandBrain.id == brain_id)
            )
        except SQLAlchemyError as e:
            logger.error(
                "Failed to fetch brand brain by ID",
                extra={
                    "brain_id": brain_id,
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
                exc_info=True,
            )
            raise PersistenceError(
                "Failed to load brand brain", table=self.TABLE_NAME
            ) from e
        return result.scalar_one_or_none()

    async def require(self, brain_id: str) -> BrandBrain:
        """Get a brand brain by ID.

        Raises:
            NotFoundError: If no brain has this ID
        """
        brain = await self.get_by_id(brain_id)
        if brain is None:
            logger.warning("Brand brain not found", extra={"brain_id": brain_id})
            raise NotFoundError("Brain", brain_id)
        return brain

    async def list_by_owner(
        self, owner_id: str, brand_id: str | None = None
    ) -> list[BrandBrain]:
        """List an owner's brains (optionally for one brand), newest first."""
        stmt = select(BrandBrain).where(BrandBrain.owner_id == owner_id)
        if brand_id is not None:
            stmt = stmt.where(BrandBrain.brand_id == brand_id)
        stmt = stmt.order_by(BrandBrain.created_at.desc())

        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error(
                "Failed to list brand brains",
                extra={
                    "owner_id": owner_id,
                    "brand_id": brand_id,
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
                exc_info=True,
            )
            raise PersistenceError(
                "Failed to list brand brains", table=self.TABLE_NAME
            ) from e
        return list(result.scalars().all())

    async def update_assets(self, brain_id: str, **assets: Any) -> None:
        """Write asset URL columns on one brain.

        Only the named columns are touched; other columns (including the
        other asset columns) keep whatever another request last wrote.

        Raises:
            ValueError: If a non-asset column is named
            NotFoundError: If no brain has this ID
            PersistenceError: If the update is rejected
        """
        unknown = set(assets) - ASSET_COLUMNS
        if unknown or not assets:
            raise ValueError(f"Not asset columns: {sorted(unknown) or 'none given'}")

        start_time = time.monotonic()
        try:
            result = await self.session.execute(
                update(BrandBrain)
                .where(BrandBrain.id == brain_id)
                .values(**assets)
                .execution_options(synchronize_session=False)
            )
        except SQLAlchemyError as e:
            db_logger.transaction_failure(
                e,
                table=self.TABLE_NAME,
                context=f"Updating {sorted(assets)} for brain_id={brain_id}",
            )
            raise PersistenceError(
                f"Failed to update brand brain {', '.join(sorted(assets))}",
                table=self.TABLE_NAME,
            ) from e

        if result.rowcount == 0:
            logger.warning("Brand brain not found for update", extra={"brain_id": brain_id})
            raise NotFoundError("Brain", brain_id)

        duration_ms = (time.monotonic() - start_time) * 1000
        logger.info(
            "Brand brain assets updated",
            extra={
                "brain_id": brain_id,
                "columns": sorted(assets),
                "duration_ms": round(duration_ms, 2),
            },
        )
