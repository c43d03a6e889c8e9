"""Premise notebook endpoints."""

from fastapi import APIRouter, HTTPException

from tight_five.models import Premise

from .deps import OwnerDep, StorageDep
from .models import CreatePremise

router = APIRouter()


@router.get("/premises")
async def list_premises(owner: OwnerDep, storage: StorageDep):
    return storage.list_premises(owner)


@router.post("/premises", status_code=201)
async def create_premise(body: CreatePremise, owner: OwnerDep, storage: StorageDep):
    return storage.create_premise(owner, Premise(**body.model_dump()))


@router.delete("/premises/{premise_id}")
async def delete_premise(premise_id: str, owner: OwnerDep, storage: StorageDep):
    if not storage.delete_premise(owner, premise_id):
        raise HTTPException(404, "Premise not found")
    return {"ok": True}
