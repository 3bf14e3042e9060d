"""API v1 router and endpoint organization."""

from fastapi import APIRouter

from app.api.v1.endpoints import brand_generation, brands

router = APIRouter(prefix="/api/v1", tags=["v1"])

# Include domain-specific routers
router.include_router(brand_generation.router, tags=["Brand Generation"])
router.include_router(brands.router, tags=["Brands"])
