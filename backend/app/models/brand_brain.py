"""BrandBrain model with JSONB identity fields.

The brand brain is the structured identity generated from a brand's
description. Text fields are written once when generation succeeds;
hero_image_url, logo_url and mockup_urls are attached later by separate
requests, each touching only its own column.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from sqlalchemy import DateTime, ForeignKey, String, Text, text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base

if TYPE_CHECKING:
    from app.models.brand import Brand

# Order in which mockups are generated and stored
MOCKUP_TYPES: tuple[str, ...] = (
    "billboard",
    "storefront",
    "product",
    "stationery",
    "environment",
)

COLOR_PALETTE_KEYS: tuple[str, ...] = ("primary", "secondary", "accent", "neutral")


class BrandBrain(Base):
    """Generated brand identity.

    Attributes:
        id: UUID primary key
        owner_id: Reference to the owning account
        brand_id: Foreign key to brands table
        brand_story, tagline, tone: Narrative identity text
        voice_traits: Ordered list of short voice tags
        primary_archetype, secondary_archetype: Archetype names
        color_palette: {primary, secondary, accent, neutral} hex colors
        font_suggestions: {headings, body}
        logo_direction, layout_style, photo_transform: Structured mapping or free text
        hero_image_url, logo_url: Durable asset URLs, absent until generated
        mockup_urls: Five durable URLs in MOCKUP_TYPES order, absent until generated
        status: Lifecycle status ('active')
        created_at, updated_at: Audit timestamps
    """

    __tablename__ = "brand_brains"

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

    brand_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("brands.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    brand_story: Mapped[str] = mapped_column(Text, nullable=False)
    tagline: Mapped[str] = mapped_column(Text, nullable=False)
    tone: Mapped[str] = mapped_column(Text, nullable=False)

    voice_traits: Mapped[list[str]] = mapped_column(
        JSONB,
        nullable=False,
        default=list,
        server_default=text("'[]'::jsonb"),
    )

    primary_archetype: Mapped[str] = mapped_column(String(100), nullable=False)
    secondary_archetype: Mapped[str] = mapped_column(String(100), nullable=False)

    color_palette: Mapped[dict[str, str]] = mapped_column(JSONB, nullable=False)
    font_suggestions: Mapped[dict[str, str]] = mapped_column(JSONB, nullable=False)

    # Structured mapping or free text depending on what the model returned
    logo_direction: Mapped[Any] = mapped_column(JSONB, nullable=False)
    layout_style: Mapped[Any] = mapped_column(JSONB, nullable=False)
    photo_transform: Mapped[Any] = mapped_column(JSONB, nullable=False)

    hero_image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    logo_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    mockup_urls: Mapped[list[str] | None] = mapped_column(JSONB, nullable=True)

    status: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="active",
        server_default=text("'active'"),
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        server_default=text("now()"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        server_default=text("now()"),
        onupdate=lambda: datetime.now(UTC),
    )

    brand: Mapped["Brand"] = relationship(
        "Brand",
        back_populates="brains",
        lazy="noload",
    )

    def __repr__(self) -> str:
        return f"<BrandBrain(id={self.id!r}, brand_id={self.brand_id!r}, status={self.status!r})>"
