"""Task requests and prompt dispatch.

Each task kind is one variant of a discriminated union keyed on ``kind``.
``build_prompt`` maps a variant to its (system, user) pair; the routes and
the assistant only ever see ``TaskRequest``.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, NamedTuple, Union

from pydantic import Field, TypeAdapter

from tight_five.models import (
    CamelModel,
    PerformanceSummary,
    RoutineJokeSummary,
    SelectedPartOption,
)
from tight_five.prompts import builders
from tight_five.prompts.render import PromptError
from tight_five.prompts.system import SYSTEM_PROMPTS
from tight_five.structures import get_structure


class TaskKind(str, Enum):
    SETUP_GENERATION = "setup-generation"
    PUNCHLINE_GENERATION = "punchline-generation"
    STRUCTURE_PART_GENERATION = "structure-part-generation"
    JOKE_IMPROVEMENT = "joke-improvement"
    JOKE_ANALYSIS = "joke-analysis"
    TAG_SUGGESTION = "tag-suggestion"
    ROUTINE_FLOW_ANALYSIS = "routine-flow-analysis"
    ROUTINE_OPTIMIZATION = "routine-optimization"
    PLACEMENT_SUGGESTION = "placement-suggestion"
    PERFORMANCE_ANALYSIS = "performance-analysis"


Text = Annotated[str, Field(min_length=1, max_length=5000)]


class SetupGenerationRequest(CamelModel):
    kind: Literal["setup-generation"] = "setup-generation"
    premise: Text


class PunchlineGenerationRequest(CamelModel):
    kind: Literal["punchline-generation"] = "punchline-generation"
    setup: Text


class StructurePartRequest(CamelModel):
    kind: Literal["structure-part-generation"] = "structure-part-generation"
    structure_id: str
    part_id: str
    premise: Text
    prior_selections: list[SelectedPartOption] = Field(default_factory=list)


class JokeImprovementRequest(CamelModel):
    kind: Literal["joke-improvement"] = "joke-improvement"
    setup: Text
    punchline: Text
    direction: str = Field(min_length=1, max_length=1000)


class JokeAnalysisRequest(CamelModel):
    kind: Literal["joke-analysis"] = "joke-analysis"
    setup: Text
    punchline: Text
    tags: list[str] = Field(default_factory=list)


class TagSuggestionRequest(CamelModel):
    kind: Literal["tag-suggestion"] = "tag-suggestion"
    setup: Text
    punchline: Text


class RoutineFlowRequest(CamelModel):
    kind: Literal["routine-flow-analysis"] = "routine-flow-analysis"
    jokes: list[RoutineJokeSummary] = Field(min_length=1)


class RoutineOptimizationRequest(CamelModel):
    kind: Literal["routine-optimization"] = "routine-optimization"
    jokes: list[RoutineJokeSummary] = Field(min_length=1)


class PlacementRequest(CamelModel):
    kind: Literal["placement-suggestion"] = "placement-suggestion"
    new_joke: RoutineJokeSummary
    jokes: list[RoutineJokeSummary] = Field(default_factory=list)


class PerformanceAnalysisRequest(CamelModel):
    kind: Literal["performance-analysis"] = "performance-analysis"
    performances: list[PerformanceSummary] = Field(min_length=1)


TaskRequest = Annotated[
    Union[
        SetupGenerationRequest,
        PunchlineGenerationRequest,
        StructurePartRequest,
        JokeImprovementRequest,
        JokeAnalysisRequest,
        TagSuggestionRequest,
        RoutineFlowRequest,
        RoutineOptimizationRequest,
        PlacementRequest,
        PerformanceAnalysisRequest,
    ],
    Field(discriminator="kind"),
]

task_request_adapter: TypeAdapter[TaskRequest] = TypeAdapter(TaskRequest)


def parse_task(data: dict) -> TaskRequest:
    """Validate a raw dict (camelCase or snake_case keys) into its task variant."""
    return task_request_adapter.validate_python(data)


class Prompt(NamedTuple):
    system: str
    user: str


def build_prompt(request: TaskRequest) -> Prompt:
    """Return the (system, user) prompt pair for a task request."""
    if isinstance(request, SetupGenerationRequest):
        return Prompt(SYSTEM_PROMPTS["joke-generation"], builders.setup_prompt(request.premise))
    if isinstance(request, PunchlineGenerationRequest):
        return Prompt(SYSTEM_PROMPTS["joke-generation"], builders.punchline_prompt(request.setup))
    if isinstance(request, StructurePartRequest):
        structure = get_structure(request.structure_id)
        if structure is None:
            raise PromptError(f"Unknown structure {request.structure_id!r}")
        user = builders.structure_part_prompt(
            structure, request.part_id, request.premise, request.prior_selections,
        )
        return Prompt(SYSTEM_PROMPTS["joke-generation"], user)
    if isinstance(request, JokeImprovementRequest):
        user = builders.improve_prompt(request.setup, request.punchline, request.direction)
        return Prompt(SYSTEM_PROMPTS["joke-improvement"], user)
    if isinstance(request, JokeAnalysisRequest):
        user = builders.analyze_prompt(request.setup, request.punchline, request.tags)
        return Prompt(SYSTEM_PROMPTS["joke-analysis"], user)
    if isinstance(request, TagSuggestionRequest):
        return Prompt(SYSTEM_PROMPTS["joke-generation"], builders.tags_prompt(request.setup, request.punchline))
    if isinstance(request, RoutineFlowRequest):
        return Prompt(SYSTEM_PROMPTS["routine-analysis"], builders.flow_prompt(request.jokes))
    if isinstance(request, RoutineOptimizationRequest):
        return Prompt(SYSTEM_PROMPTS["routine-optimization"], builders.optimize_prompt(request.jokes))
    if isinstance(request, PlacementRequest):
        user = builders.placement_prompt(request.new_joke, request.jokes)
        return Prompt(SYSTEM_PROMPTS["routine-analysis"], user)
    if isinstance(request, PerformanceAnalysisRequest):
        return Prompt(SYSTEM_PROMPTS["performance-analysis"], builders.performance_prompt(request.performances))
    raise PromptError(f"Unsupported task {type(request).__name__}")
