"""Archetype matching stage.

Asks the completion model to pick a primary and secondary archetype from
the catalog for a brand description. Returned names are compared to the
catalog's record names with exact string equality; anything else is a
MatchError. There is deliberately no case folding or "the " stripping
here, unlike file lookup in the catalog.
"""

from dataclasses import dataclass

from app.core.errors import MatchError
from app.core.logging import get_logger
from app.integrations.openai import CompletionClient
from app.services.archetypes import ArchetypeCatalog, ArchetypeRecord
from app.services.extractor import extract_json
from app.services.prompts import PromptInputs, PromptStage, build_prompt, user_messages

logger = get_logger(__name__)

MATCH_KEYS = ("primary", "secondary")


@dataclass(frozen=True)
class ArchetypeMatch:
    """The archetype pair chosen for a brand."""

    primary: ArchetypeRecord
    secondary: ArchetypeRecord


def resolve_archetype(name: object, records: list[ArchetypeRecord]) -> ArchetypeRecord:
    """Find the record whose name equals `name` exactly.

    Raises:
        MatchError: If no record name is byte-for-byte equal
    """
    for record in records:
        if isinstance(name, str) and record.name == name:
            return record
    raise MatchError(str(name), [record.name for record in records])


async def match_archetypes(
    description: str,
    catalog: ArchetypeCatalog,
    completion: CompletionClient,
) -> ArchetypeMatch:
    """Pick the archetype pair for a brand description.

    Raises:
        UpstreamError: If the completion call fails
        ParseError: If the reply is not JSON
        ExtractionValidationError: If primary/secondary are missing
        MatchError: If either name is not in the catalog
    """
    records = catalog.all()
    names = [record.name for record in records]

    prompt = build_prompt(
        PromptStage.ARCHETYPE_MATCH,
        PromptInputs(description=description, available_archetypes=names),
    )
    result = await completion.complete(user_messages(prompt))
    picked = extract_json(result.text, required_keys=MATCH_KEYS)

    primary = resolve_archetype(picked["primary"], records)
    secondary = resolve_archetype(picked["secondary"], records)

    logger.info(
        "Archetypes matched",
        extra={"primary": primary.name, "secondary": secondary.name},
    )
    return ArchetypeMatch(primary=primary, secondary=secondary)
