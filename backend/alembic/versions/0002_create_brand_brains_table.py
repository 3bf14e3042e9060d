"""Create brand_brains table with JSONB identity fields.

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-19

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0002"
down_revision: str | None = "0001"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _jsonb(name: str, nullable: bool = False, default: str | None = None) -> sa.Column:
    return sa.Column(
        name,
        postgresql.JSONB(astext_type=sa.Text()),
        server_default=sa.text(default) if default else None,
        nullable=nullable,
    )


def upgrade() -> None:
    """Create brand_brains table."""
    op.create_table(
        "brand_brains",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=False),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column("owner_id", sa.String(length=255), nullable=False),
        sa.Column("brand_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("brand_story", sa.Text(), nullable=False),
        sa.Column("tagline", sa.Text(), nullable=False),
        sa.Column("tone", sa.Text(), nullable=False),
        _jsonb("voice_traits", default="'[]'::jsonb"),
        sa.Column("primary_archetype", sa.String(length=100), nullable=False),
        sa.Column("secondary_archetype", sa.String(length=100), nullable=False),
        _jsonb("color_palette"),
        _jsonb("font_suggestions"),
        _jsonb("logo_direction"),
        _jsonb("layout_style"),
        _jsonb("photo_transform"),
        sa.Column("hero_image_url", sa.Text(), nullable=True),
        sa.Column("logo_url", sa.Text(), nullable=True),
        _jsonb("mockup_urls", nullable=True),
        sa.Column(
            "status",
            sa.String(length=50),
            server_default=sa.text("'active'"),
            nullable=False,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["brand_id"],
            ["brands.id"],
            name="fk_brand_brains_brand_id",
            ondelete="CASCADE",
        ),
    )
    op.create_index(
        op.f("ix_brand_brains_owner_id"),
        "brand_brains",
        ["owner_id"],
        unique=False,
    )
    op.create_index(
        op.f("ix_brand_brains_brand_id"),
        "brand_brains",
        ["brand_id"],
        unique=False,
    )


def downgrade() -> None:
    """Drop brand_brains table."""
    op.drop_index(op.f("ix_brand_brains_brand_id"), table_name="brand_brains")
    op.drop_index(op.f("ix_brand_brains_owner_id"), table_name="brand_brains")
    op.drop_table("brand_brains")
