"""Assistant: runs one AI task end-to-end.

Task flow:
  1. Guardrail over the request's free-text fields (no model call on reject).
  2. Prompt pipeline → (system, user) pair.
  3. LLM call under a hard timeout.
  4. Decode: suggestion list for generation tasks, JSON object validated
     into the result model for structured tasks.

Setup, punchline and structure-part generation fall back once to local
templates when the model call fails. Every other task lets LLMError
propagate. A decode failure is never masked by the fallback.
"""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from collections.abc import Callable, Sequence
from typing import TypeVar, Union

from pydantic import BaseModel, ValidationError

from tight_five import fallback
from tight_five.decoder import MAX_GENERATED_SUGGESTIONS, decode_object, decode_suggestions
from tight_five.errors import DecodeError
from tight_five.guardrail import require_on_topic
from tight_five.llm import LLM, LLMError
from tight_five.models import (
    FlowAnalysis,
    JokeImprovement,
    PerformanceInsights,
    PlacementSuggestions,
    RoutineJokeSummary,
    RoutineOptimization,
    Suggestions,
    WeaknessReport,
)
from tight_five.prompts import (
    JokeAnalysisRequest,
    JokeImprovementRequest,
    PerformanceAnalysisRequest,
    PlacementRequest,
    PromptError,
    PunchlineGenerationRequest,
    RoutineFlowRequest,
    RoutineOptimizationRequest,
    SetupGenerationRequest,
    StructurePartRequest,
    TagSuggestionRequest,
    TaskRequest,
    build_prompt,
)
from tight_five.structures import get_part, get_structure

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60.0

TaskResult = Union[
    Suggestions,
    JokeImprovement,
    WeaknessReport,
    FlowAnalysis,
    RoutineOptimization,
    PlacementSuggestions,
    PerformanceInsights,
]

M = TypeVar("M", bound=BaseModel)


class Assistant:
    """Wires guardrail, prompt pipeline, LLM and decoder for every task kind."""

    def __init__(self, llm: LLM, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._llm = llm
        self._timeout = timeout

    async def run(self, request: TaskRequest) -> TaskResult:
        if isinstance(request, SetupGenerationRequest):
            require_on_topic(request.premise)
            return await self._generate(request, lambda: fallback.fallback_setups(request.premise))
        if isinstance(request, PunchlineGenerationRequest):
            require_on_topic(request.setup)
            return await self._generate(request, lambda: fallback.fallback_punchlines(request.setup))
        if isinstance(request, StructurePartRequest):
            return await self._structure_part(request)
        if isinstance(request, TagSuggestionRequest):
            require_on_topic(request.setup, request.punchline)
            return await self._generate(request, None)
        if isinstance(request, JokeImprovementRequest):
            require_on_topic(request.setup, request.punchline, request.direction)
            return await self._structured(request, JokeImprovement)
        if isinstance(request, JokeAnalysisRequest):
            require_on_topic(request.setup, request.punchline)
            return await self._structured(request, WeaknessReport)
        if isinstance(request, RoutineFlowRequest):
            return await self._structured(request, FlowAnalysis)
        if isinstance(request, RoutineOptimizationRequest):
            result = await self._structured(request, RoutineOptimization)
            order = normalize_order(result.optimized_order, request.jokes)
            return result.model_copy(update={"optimized_order": order})
        if isinstance(request, PlacementRequest):
            result = await self._structured(request, PlacementSuggestions)
            return _clamp_positions(result, len(request.jokes))
        if isinstance(request, PerformanceAnalysisRequest):
            return await self._structured(request, PerformanceInsights)
        raise PromptError(f"Unsupported task {type(request).__name__}")

    # ── Model call ───────────────────────────────────────

    async def _call(self, request: TaskRequest) -> str:
        prompt = build_prompt(request)
        try:
            return await asyncio.wait_for(
                self._llm(request.kind, prompt.system, prompt.user), timeout=self._timeout,
            )
        except asyncio.TimeoutError as e:
            raise LLMError(f"LLM call timed out after {self._timeout}s") from e

    # ── Generation tasks ─────────────────────────────────

    async def _generate(
        self, request: TaskRequest, make_fallback: Callable[[], list[str]] | None,
    ) -> Suggestions:
        try:
            raw = await self._call(request)
        except LLMError as e:
            if make_fallback is None:
                raise
            logger.warning("LLM call failed for %s, using fallback suggestions: %s", request.kind, e)
            return Suggestions(suggestions=make_fallback(), source="fallback")
        items = decode_suggestions(raw, limit=MAX_GENERATED_SUGGESTIONS)
        return Suggestions(suggestions=items, source="model")

    async def _structure_part(self, request: StructurePartRequest) -> Suggestions:
        custom = [text for s in request.prior_selections for text in (s.custom_inputs or [])]
        require_on_topic(request.premise, *custom)
        structure = get_structure(request.structure_id)
        if structure is None:
            raise PromptError(f"Unknown structure {request.structure_id!r}")
        found = get_part(structure, request.part_id)
        if found is None:
            raise PromptError(f"Structure {structure.id!r} has no part {request.part_id!r}")
        _, part = found
        return await self._generate(
            request, lambda: fallback.fallback_part_options(part, request.premise),
        )

    # ── Structured tasks ─────────────────────────────────

    async def _structured(self, request: TaskRequest, model: type[M]) -> M:
        raw = await self._call(request)
        data = decode_object(raw)
        try:
            return model.model_validate(data)
        except ValidationError as e:
            logger.warning("Model output for %s failed validation: %s", request.kind, e)
            raise DecodeError(f"Model output for {request.kind} has the wrong shape") from e


def normalize_order(proposed: Sequence[str], jokes: Sequence[RoutineJokeSummary]) -> list[str]:
    """Coerce a model-proposed order into a permutation of the input ids.

    Unknown ids are dropped, extra repeats collapse, and ids the model left
    out are appended in their original order.
    """
    remaining = Counter(j.id for j in jokes)
    order: list[str] = []
    for joke_id in proposed:
        if remaining[joke_id] > 0:
            remaining[joke_id] -= 1
            order.append(joke_id)
    for joke in jokes:
        if remaining[joke.id] > 0:
            remaining[joke.id] -= 1
            order.append(joke.id)
    if list(proposed) != order:
        logger.info("Normalized optimized order (%d proposed, %d jokes)", len(proposed), len(jokes))
    return order


def _clamp_positions(result: PlacementSuggestions, routine_length: int) -> PlacementSuggestions:
    suggestions = [
        s.model_copy(update={"position": min(s.position, routine_length)})
        for s in result.suggestions
    ]
    return result.model_copy(update={"suggestions": suggestions})
