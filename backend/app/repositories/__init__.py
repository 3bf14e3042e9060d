"""Repositories layer - Data access and persistence.

Repositories handle all database operations using SQLAlchemy.
They abstract the database implementation from the service layer.
"""

from app.repositories.brand import BrandRepository
from app.repositories.brand_brain import BrandBrainRepository

__all__ = [
    "BrandBrainRepository",
    "BrandRepository",
]
