"""Health check and export/import endpoints."""

from fastapi import APIRouter

from .deps import OwnerDep, StorageDep
from .models import ImportBody

router = APIRouter()


@router.get("/health")
async def health():
    """Health check."""
    return {"status": "ok"}


@router.get("/export")
async def export_data(owner: OwnerDep, storage: StorageDep):
    """Dump the caller's jokes, routines and premises."""
    return storage.export_data(owner)


@router.post("/import")
async def import_data(body: ImportBody, owner: OwnerDep, storage: StorageDep):
    """Merge an export into the caller's data; existing ids are kept as-is."""
    return {"imported": storage.import_data(owner, body.model_dump())}
