"""Models layer - SQLAlchemy ORM models.

Models define the database schema and relationships.
All models inherit from the Base class defined in core.database.
"""

from app.core.database import Base
from app.models.brand import Brand, CreationMethod
from app.models.brand_brain import COLOR_PALETTE_KEYS, MOCKUP_TYPES, BrandBrain

__all__ = [
    "Base",
    "Brand",
    "BrandBrain",
    "COLOR_PALETTE_KEYS",
    "CreationMethod",
    "MOCKUP_TYPES",
]
