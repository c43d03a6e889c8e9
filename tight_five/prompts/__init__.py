"""Prompt pipeline: system personas, per-task builders, Handlebars rendering."""

from tight_five.prompts.builders import sanitize
from tight_five.prompts.render import PromptError, render_prompt
from tight_five.prompts.system import SYSTEM_PROMPTS
from tight_five.prompts.tasks import (
    JokeAnalysisRequest,
    JokeImprovementRequest,
    PerformanceAnalysisRequest,
    PlacementRequest,
    Prompt,
    PunchlineGenerationRequest,
    RoutineFlowRequest,
    RoutineOptimizationRequest,
    SetupGenerationRequest,
    StructurePartRequest,
    TagSuggestionRequest,
    TaskKind,
    TaskRequest,
    build_prompt,
    parse_task,
)

__all__ = [
    "JokeAnalysisRequest",
    "JokeImprovementRequest",
    "PerformanceAnalysisRequest",
    "PlacementRequest",
    "Prompt",
    "PromptError",
    "PunchlineGenerationRequest",
    "RoutineFlowRequest",
    "RoutineOptimizationRequest",
    "SYSTEM_PROMPTS",
    "SetupGenerationRequest",
    "StructurePartRequest",
    "TagSuggestionRequest",
    "TaskKind",
    "TaskRequest",
    "build_prompt",
    "parse_task",
    "render_prompt",
    "sanitize",
]
