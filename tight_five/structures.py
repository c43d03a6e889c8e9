"""Joke structure templates: static, read-only reference data.

Loaded once from presets/structures.json. Each template breaks joke writing
into ordered, labelled parts; the structure-part prompt walks them in order.
"""

import json
from functools import lru_cache
from pathlib import Path

from tight_five.models import JokeStructure, JokeStructurePart, StructureCategory

PRESETS_DIR = Path(__file__).parent / "presets"


@lru_cache(maxsize=1)
def _load() -> tuple[tuple[StructureCategory, ...], tuple[JokeStructure, ...]]:
    data = json.loads((PRESETS_DIR / "structures.json").read_text(encoding="utf-8"))
    categories = tuple(StructureCategory.model_validate(c) for c in data["categories"])
    structures = tuple(JokeStructure.model_validate(s) for s in data["structures"])
    return categories, structures


def list_categories() -> list[StructureCategory]:
    return list(_load()[0])


def list_structures(category: str | None = None) -> list[JokeStructure]:
    structures = _load()[1]
    if category is None:
        return list(structures)
    return [s for s in structures if s.category == category]


def get_structure(structure_id: str) -> JokeStructure | None:
    for structure in _load()[1]:
        if structure.id == structure_id:
            return structure
    return None


def get_part(structure: JokeStructure, part_id: str) -> tuple[int, JokeStructurePart] | None:
    """Return (index, part) for part_id within structure, or None."""
    for index, part in enumerate(structure.parts):
        if part.id == part_id:
            return index, part
    return None
