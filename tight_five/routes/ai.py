"""AI task endpoint: one POST per task kind, body is the task's context."""

from typing import Any

from fastapi import APIRouter, Body

from tight_five.prompts import TaskKind, parse_task

from .deps import AssistantDep, LimitedOwnerDep

router = APIRouter()


@router.post("/ai/{kind}")
async def run_task(
    kind: TaskKind,
    owner: LimitedOwnerDep,
    assistant: AssistantDep,
    body: dict[str, Any] | None = Body(default=None),
):
    """Validate the body against the task kind, then run it through the assistant."""
    request = parse_task({**(body or {}), "kind": kind.value})
    return await assistant.run(request)
