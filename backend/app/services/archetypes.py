"""Archetype reference catalog.

Archetype records are static JSON files shipped with the application
(`app/data/archetypes`). Each file is looked up by its archetype name,
lowercased with a leading "the " removed, first as
`<dir>/<name>/<name>.json` and then as `<dir>/<name>.json`.

Records are read-only prompt-construction input and are cached per
directory for the life of the process.
"""

import json
import re
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from app.core.config import get_settings
from app.core.errors import NotFoundError
from app.core.logging import get_logger

logger = get_logger(__name__)

_THE_PREFIX = re.compile(r"^the\s+")


class ColorBias(BaseModel):
    """One suggested color for an archetype."""

    hex: str
    label: str


class ArchetypeRecord(BaseModel):
    """Reference data describing one brand archetype."""

    model_config = ConfigDict(frozen=True)

    name: str
    tone_flavor: str = ""
    voice_traits: list[str] = Field(default_factory=list)
    color_bias: list[ColorBias] = Field(default_factory=list)
    font_tendencies: list[str] = Field(default_factory=list)
    layout_preferences: list[str] = Field(default_factory=list)
    moodboard_tags: list[str] = Field(default_factory=list)
    photo_transforms: list[str] = Field(default_factory=list)
    visual_references: list[str] = Field(default_factory=list)


def archetype_key(name: str) -> str:
    """Normalize an archetype name to its catalog file key.

    >>> archetype_key("The Creator")
    'creator'
    """
    return _THE_PREFIX.sub("", name.strip().lower()).strip()


class ArchetypeCatalog:
    """Filesystem-backed archetype lookup."""

    def __init__(self, data_dir: Path) -> None:
        self.data_dir = Path(data_dir)
        self._records: dict[str, ArchetypeRecord] = {}

    def _path_for(self, key: str) -> Path | None:
        nested = self.data_dir / key / f"{key}.json"
        if nested.is_file():
            return nested
        flat = self.data_dir / f"{key}.json"
        if flat.is_file():
            return flat
        return None

    def _read(self, path: Path) -> ArchetypeRecord:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return ArchetypeRecord.model_validate(data)
        except (json.JSONDecodeError, ValidationError) as e:
            logger.error(
                "Invalid archetype reference file",
                extra={"path": str(path), "error": str(e)},
            )
            raise

    def find(self, name: str) -> ArchetypeRecord | None:
        """Look up an archetype by name, or None if no file exists for it."""
        key = archetype_key(name)
        if not key:
            return None
        if key in self._records:
            return self._records[key]

        path = self._path_for(key)
        if path is None:
            logger.debug(
                "Archetype reference not found",
                extra={"archetype": name, "key": key, "data_dir": str(self.data_dir)},
            )
            return None

        record = self._read(path)
        self._records[key] = record
        return record

    def get(self, name: str) -> ArchetypeRecord:
        """Look up an archetype by name.

        Raises:
            NotFoundError: If no reference file exists for the name
        """
        record = self.find(name)
        if record is None:
            raise NotFoundError("Archetype", name)
        return record

    def keys(self) -> list[str]:
        """List the catalog keys available on disk, sorted."""
        if not self.data_dir.is_dir():
            return []
        found: set[str] = set()
        for entry in self.data_dir.iterdir():
            if entry.is_dir() and (entry / f"{entry.name}.json").is_file():
                found.add(entry.name)
            elif entry.is_file() and entry.suffix == ".json":
                found.add(entry.stem)
        return sorted(found)

    def all(self) -> list[ArchetypeRecord]:
        """Load every archetype in the catalog."""
        return [self.get(key) for key in self.keys()]


@lru_cache
def _catalog_for(data_dir: str) -> ArchetypeCatalog:
    return ArchetypeCatalog(Path(data_dir))


def get_archetype_catalog() -> ArchetypeCatalog:
    """Dependency for getting the archetype catalog configured in settings."""
    return _catalog_for(str(get_settings().archetype_data_dir))
