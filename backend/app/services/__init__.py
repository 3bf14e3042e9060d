"""Services layer - Business logic and orchestration.

Services coordinate between repositories, integrations, and other services
to implement business use cases. They contain no direct database or
external API access - that's delegated to repositories and integrations.
"""

from app.services.archetype_matcher import ArchetypeMatch, match_archetypes
from app.services.archetypes import ArchetypeCatalog, ArchetypeRecord, get_archetype_catalog
from app.services.assets import AssetRelocator
from app.services.brand_identity import BrandIdentityResult, BrandIdentityService
from app.services.brand_visuals import BrandVisualService
from app.services.extractor import extract_json
from app.services.prompts import PromptInputs, PromptStage, build_prompt

__all__ = [
    "ArchetypeCatalog",
    "ArchetypeMatch",
    "ArchetypeRecord",
    "AssetRelocator",
    "BrandIdentityResult",
    "BrandIdentityService",
    "BrandVisualService",
    "PromptInputs",
    "PromptStage",
    "build_prompt",
    "extract_json",
    "get_archetype_catalog",
    "match_archetypes",
]
