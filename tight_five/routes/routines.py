"""Routine CRUD + ordering + routine-level AI endpoints."""

from fastapi import APIRouter, HTTPException

from tight_five import metrics
from tight_five.models import Routine
from tight_five.prompts import RoutineFlowRequest, RoutineOptimizationRequest

from .deps import AssistantDep, LimitedOwnerDep, OwnerDep, StorageDep
from .models import CreateRoutine, InsertRoutineJoke, MoveRoutineJoke, UpdateRoutine

router = APIRouter()


@router.get("/routines")
async def list_routines(owner: OwnerDep, storage: StorageDep):
    return storage.list_routines(owner)


@router.post("/routines", status_code=201)
async def create_routine(body: CreateRoutine, owner: OwnerDep, storage: StorageDep):
    """Create a routine. Joke ids that don't exist are dropped."""
    return storage.create_routine(owner, Routine(**body.model_dump()))


@router.get("/routines/{routine_id}")
async def get_routine(routine_id: str, owner: OwnerDep, storage: StorageDep):
    routine = storage.get_routine(owner, routine_id)
    if not routine:
        raise HTTPException(404, "Routine not found")
    return routine


@router.patch("/routines/{routine_id}")
async def update_routine(
    routine_id: str, body: UpdateRoutine, owner: OwnerDep, storage: StorageDep,
):
    updated = storage.update_routine(owner, routine_id, body.model_dump(exclude_unset=True))
    if not updated:
        raise HTTPException(404, "Routine not found")
    return updated


@router.delete("/routines/{routine_id}")
async def delete_routine(routine_id: str, owner: OwnerDep, storage: StorageDep):
    """Delete a routine and every performance recorded against it."""
    if not storage.delete_routine(owner, routine_id):
        raise HTTPException(404, "Routine not found")
    return {"ok": True}


@router.get("/routines/{routine_id}/jokes")
async def list_routine_jokes(routine_id: str, owner: OwnerDep, storage: StorageDep):
    """Resolve the routine's jokes in stage order."""
    routine = storage.get_routine(owner, routine_id)
    if not routine:
        raise HTTPException(404, "Routine not found")
    return metrics.routine_jokes(routine.joke_ids, storage.joke_index(owner))


@router.post("/routines/{routine_id}/jokes")
async def insert_routine_joke(
    routine_id: str, body: InsertRoutineJoke, owner: OwnerDep, storage: StorageDep,
):
    """Add a joke at a position (clamped), or at the end."""
    if not storage.get_joke(owner, body.joke_id):
        raise HTTPException(404, "Joke not found")
    updated = storage.add_joke_to_routine(owner, routine_id, body.joke_id, body.position)
    if not updated:
        raise HTTPException(404, "Routine not found")
    return updated


@router.delete("/routines/{routine_id}/jokes/{joke_id}")
async def remove_routine_joke(
    routine_id: str, joke_id: str, owner: OwnerDep, storage: StorageDep,
):
    updated = storage.remove_joke_from_routine(owner, routine_id, joke_id)
    if not updated:
        raise HTTPException(404, "Routine not found")
    return updated


@router.post("/routines/{routine_id}/move")
async def move_routine_joke(
    routine_id: str, body: MoveRoutineJoke, owner: OwnerDep, storage: StorageDep,
):
    """Drag-and-drop reorder of one slot."""
    try:
        updated = storage.move_routine_joke(owner, routine_id, body.from_index, body.to_index)
    except IndexError:
        raise HTTPException(422, "Routine position out of range")
    if not updated:
        raise HTTPException(404, "Routine not found")
    return updated


# ── AI over a stored routine ─────────────────────────────


def _summaries_or_error(storage, owner: str, routine_id: str):
    routine = storage.get_routine(owner, routine_id)
    if not routine:
        raise HTTPException(404, "Routine not found")
    summaries = metrics.routine_summaries(routine.joke_ids, storage.joke_index(owner))
    if not summaries:
        raise HTTPException(400, "Routine has no jokes")
    return summaries


@router.post("/routines/{routine_id}/analyze")
async def analyze_routine(
    routine_id: str, owner: LimitedOwnerDep, storage: StorageDep, assistant: AssistantDep,
):
    """Run flow analysis and store the score and suggestions on the routine."""
    summaries = _summaries_or_error(storage, owner, routine_id)
    analysis = await assistant.run(RoutineFlowRequest(jokes=summaries))
    storage.update_routine(owner, routine_id, {
        "flow_score": analysis.flow_score,
        "ai_suggestions": [s.model_dump() for s in analysis.suggestions],
    })
    return analysis


@router.post("/routines/{routine_id}/optimize")
async def optimize_routine(
    routine_id: str,
    owner: LimitedOwnerDep,
    storage: StorageDep,
    assistant: AssistantDep,
    apply: bool = False,
):
    """Ask for a better running order; with ?apply=true, save it."""
    summaries = _summaries_or_error(storage, owner, routine_id)
    optimization = await assistant.run(RoutineOptimizationRequest(jokes=summaries))
    if apply:
        storage.update_routine(owner, routine_id, {"joke_ids": optimization.optimized_order})
    return optimization
