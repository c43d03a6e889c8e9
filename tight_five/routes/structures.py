"""Read-only joke structure templates."""

from fastapi import APIRouter, HTTPException

from tight_five import structures

router = APIRouter()


@router.get("/structures")
async def list_structures(category: str | None = None):
    """All templates plus the category list; ?category= narrows the templates."""
    return {
        "categories": structures.list_categories(),
        "structures": structures.list_structures(category),
    }


@router.get("/structures/{structure_id}")
async def get_structure(structure_id: str):
    structure = structures.get_structure(structure_id)
    if not structure:
        raise HTTPException(404, "Structure not found")
    return structure
