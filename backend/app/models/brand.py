"""Brand model.

A Brand is created once per user submission and holds the free-text
description the brand brain is generated from. Only the name changes
after creation (the pipeline may replace it with a generated one).
"""

from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING
from uuid import uuid4

from sqlalchemy import DateTime, String, Text, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base

if TYPE_CHECKING:
    from app.models.brand_brain import BrandBrain


class CreationMethod(str, Enum):
    """How the brand description was collected."""

    FREESTYLE = "freestyle"
    GUIDED = "guided"


class Brand(Base):
    """Brand submitted by a user.

    Attributes:
        id: UUID primary key
        owner_id: Reference to the owning account (external ID)
        name: Short display name
        description: Free-text brand description supplied by the user
        creation_method: 'freestyle' or 'guided'
        brand_type: Optional business category (e.g. 'restaurant'), used for mockups
        created_at: Timestamp when the brand was created
    """

    __tablename__ = "brands"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
        server_default=text("gen_random_uuid()"),
    )

    owner_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    creation_method: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=CreationMethod.FREESTYLE.value,
        server_default=text("'freestyle'"),
    )

    brand_type: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        server_default=text("now()"),
    )

    brains: Mapped[list["BrandBrain"]] = relationship(
        "BrandBrain",
        back_populates="brand",
        lazy="noload",
    )

    def __repr__(self) -> str:
        return f"<Brand(id={self.id!r}, name={self.name!r}, owner_id={self.owner_id!r})>"
