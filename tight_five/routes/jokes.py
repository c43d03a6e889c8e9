"""Joke CRUD + query + versions + performances endpoints."""

from fastapi import APIRouter, HTTPException

from tight_five import metrics
from tight_five.models import Joke

from .deps import OwnerDep, StorageDep
from .models import CreateJoke, CreatePerformance, JokeQuery, UpdateJoke

router = APIRouter()


@router.get("/jokes")
async def list_jokes(owner: OwnerDep, storage: StorageDep):
    """List all of the caller's jokes in creation order."""
    return storage.list_jokes(owner)


@router.post("/jokes", status_code=201)
async def create_joke(body: CreateJoke, owner: OwnerDep, storage: StorageDep):
    return storage.create_joke(owner, Joke(**body.model_dump()))


@router.post("/jokes/query")
async def query_jokes(body: JokeQuery, owner: OwnerDep, storage: StorageDep):
    """Filter, then stably sort, the caller's jokes."""
    jokes = metrics.filter_jokes(storage.list_jokes(owner), body.filters)
    if body.sort is not None:
        jokes = metrics.sort_jokes(jokes, body.sort.field, body.sort.direction)
    return jokes


@router.get("/jokes/{joke_id}")
async def get_joke(joke_id: str, owner: OwnerDep, storage: StorageDep):
    joke = storage.get_joke(owner, joke_id)
    if not joke:
        raise HTTPException(404, "Joke not found")
    return joke


@router.patch("/jokes/{joke_id}")
async def update_joke(joke_id: str, body: UpdateJoke, owner: OwnerDep, storage: StorageDep):
    """Partial update. Changing setup or punchline snapshots the old text as a version."""
    updated = storage.update_joke(owner, joke_id, body.model_dump(exclude_unset=True))
    if not updated:
        raise HTTPException(404, "Joke not found")
    return updated


@router.delete("/jokes/{joke_id}")
async def delete_joke(joke_id: str, owner: OwnerDep, storage: StorageDep):
    """Delete a joke, its performances, and its slots in every routine."""
    if not storage.delete_joke(owner, joke_id):
        raise HTTPException(404, "Joke not found")
    return {"ok": True}


@router.post("/jokes/{joke_id}/versions/{version_id}/restore")
async def restore_version(joke_id: str, version_id: str, owner: OwnerDep, storage: StorageDep):
    restored = storage.restore_version(owner, joke_id, version_id)
    if not restored:
        raise HTTPException(404, "Version not found")
    return restored


@router.post("/jokes/{joke_id}/performances", status_code=201)
async def add_performance(
    joke_id: str, body: CreatePerformance, owner: OwnerDep, storage: StorageDep,
):
    """Record one delivery of a joke."""
    performance = storage.add_performance(owner, joke_id, body.model_dump(exclude_none=True))
    if not performance:
        raise HTTPException(404, "Joke not found")
    return performance


@router.delete("/jokes/{joke_id}/performances/{performance_id}")
async def delete_performance(
    joke_id: str, performance_id: str, owner: OwnerDep, storage: StorageDep,
):
    if not storage.delete_performance(owner, joke_id, performance_id):
        raise HTTPException(404, "Performance not found")
    return {"ok": True}
