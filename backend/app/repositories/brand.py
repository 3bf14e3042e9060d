"""BrandRepository with insert, lookup and rename operations.

Handles all database operations for Brand entities.
Follows the layered architecture pattern: API -> Service -> Repository -> Database.

ERROR LOGGING REQUIREMENTS:
- Log method entry/exit at DEBUG level with parameters (sanitized)
- Log all exceptions with context
- Include entity IDs (brand_id, owner_id) in all logs
- Add timing logs for operations >1 second
"""

import time

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFoundError, PersistenceError
from app.core.logging import db_logger, get_logger
from app.models.brand import Brand, CreationMethod

logger = get_logger(__name__)


class BrandRepository:
    """Repository for Brand persistence.

    All methods accept an AsyncSession and translate SQLAlchemy failures
    into PersistenceError after logging them.
    """

    TABLE_NAME = "brands"
    SLOW_OPERATION_THRESHOLD_MS = 1000

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    def _check_slow(self, query: str, start_time: float) -> float:
        duration_ms = (time.monotonic() - start_time) * 1000
        if duration_ms > self.SLOW_OPERATION_THRESHOLD_MS:
            db_logger.slow_query(
                query=query,
                duration_ms=duration_ms,
                table=self.TABLE_NAME,
            )
        return duration_ms

    async def create(
        self,
        owner_id: str,
        name: str,
        description: str,
        creation_method: CreationMethod = CreationMethod.FREESTYLE,
        brand_type: str | None = None,
    ) -> Brand:
        """Insert a brand and return it with its generated id.

        Raises:
            PersistenceError: If the insert is rejected
        """
        start_time = time.monotonic()
        logger.debug(
            "Creating brand",
            extra={
                "owner_id": owner_id,
                "brand_name": name[:50],
                "creation_method": creation_method.value,
            },
        )

        try:
            brand = Brand(
                owner_id=owner_id,
                name=name,
                description=description,
                creation_method=creation_method.value,
                brand_type=brand_type,
            )
            self.session.add(brand)
            await self.session.flush()
            await self.session.refresh(brand)
        except SQLAlchemyError as e:
            db_logger.transaction_failure(
                e,
                table=self.TABLE_NAME,
                context=f"Creating brand for owner_id={owner_id}",
            )
            raise PersistenceError("Failed to create brand", table=self.TABLE_NAME) from e

        duration_ms = self._check_slow("INSERT INTO brands", start_time)
        logger.info(
            "Brand created",
            extra={
                "brand_id": brand.id,
                "owner_id": owner_id,
                "duration_ms": round(duration_ms, 2),
            },
        )
        return brand

    async def get_by_id(self, brand_id: str) -> Brand | None:
        """Get a brand by ID, or None if it does not exist."""
        start_time = time.monotonic()
        try:
            result = await self.session.execute(
                select(Brand).where(Brand.id == brand_id)
            )
            brand = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(
                "Failed to fetch brand by ID",
                extra={
                    "brand_id": brand_id,
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
                exc_info=True,
            )
            raise PersistenceError("Failed to load brand", table=self.TABLE_NAME) from e

        self._check_slow(f"SELECT FROM brands WHERE id={brand_id}", start_time)
        logger.debug(
            "Brand fetch completed",
            extra={"brand_id": brand_id, "found": brand is not None},
        )
        return brand

    async def require(self, brand_id: str) -> Brand:
        """Get a brand by ID.

        Raises:
            NotFoundError: If no brand has this ID
        """
        brand = await self.get_by_id(brand_id)
        if brand is None:
            logger.warning("Brand not found", extra={"brand_id": brand_id})
            raise NotFoundError("Brand", brand_id)
        return brand

    async def list_by_owner(self, owner_id: str) -> list[Brand]:
        """List an owner's brands, newest first."""
        start_time = time.monotonic()
        try:
            result = await self.session.execute(
                select(Brand)
                .where(Brand.owner_id == owner_id)
                .order_by(Brand.created_at.desc())
            )
            brands = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(
                "Failed to list brands",
                extra={
                    "owner_id": owner_id,
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
                exc_info=True,
            )
            raise PersistenceError("Failed to list brands", table=self.TABLE_NAME) from e

        self._check_slow(f"SELECT FROM brands WHERE owner_id={owner_id}", start_time)
        return brands

    async def rename(self, brand: Brand, name: str) -> Brand:
        """Replace a brand's name (the only mutable brand field)."""
        previous = brand.name
        try:
            brand.name = name
            await self.session.flush()
        except SQLAlchemyError as e:
            db_logger.transaction_failure(
                e,
                table=self.TABLE_NAME,
                context=f"Renaming brand_id={brand.id}",
            )
            raise PersistenceError("Failed to rename brand", table=self.TABLE_NAME) from e

        logger.info(
            "Brand renamed",
            extra={
                "brand_id": brand.id,
                "previous_name": previous[:50],
                "new_name": name[:50],
            },
        )
        return brand
