"""Core domain models.

Storage, metrics, prompt builders and routes all operate on these types.
Pydantic validates every boundary: closed enumerations are Literal types, so
an unknown status/energy/type/outcome is rejected, never coerced.

Field names are snake_case in Python and camelCase on the wire
(``estimatedTime``, ``flowScore`` ...); both spellings are accepted on input.
"""

from __future__ import annotations

import math
import time
import uuid
from typing import Annotated, Any, Literal

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel

Energy = Literal["low", "medium", "high"]
JokeType = Literal["observational", "one-liner", "story", "callback", "crowd-work"]
JokeStatus = Literal["draft", "working", "polished", "retired"]
Outcome = Literal["killed", "worked", "bombed", "neutral"]
Technique = Literal["irony-sarcasm", "character-voice", "benign-violation"]
Severity = Literal["low", "medium", "high"]

MAX_ESTIMATED_TIME = 600
MAX_TARGET_TIME = 3600
DEFAULT_TARGET_TIME = 300


def new_id() -> str:
    return uuid.uuid4().hex


def now_ms() -> int:
    return int(time.time() * 1000)


def _clamp_score(value: Any) -> Any:
    """Pull a model-reported score into 0..100. Non-numbers fall through to int validation."""
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        return value
    if isinstance(value, int):
        return max(0, min(100, value))
    try:
        number = float(value)
    except ValueError:
        return value
    if not math.isfinite(number):
        return value
    return max(0, min(100, int(round(number))))


Score = Annotated[int, BeforeValidator(_clamp_score)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FrozenCamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


# ---------------------------------------------------------------------------
# Jokes
# ---------------------------------------------------------------------------

class JokeVersion(FrozenCamelModel):
    """Snapshot of a joke's text taken before its setup or punchline changed."""

    id: str = Field(default_factory=new_id)
    setup: str
    punchline: str
    tags: tuple[str, ...] = ()
    notes: str = ""
    created_at: int = Field(default_factory=now_ms)


class Performance(FrozenCamelModel):
    """One delivery of a joke, optionally as part of a routine."""

    id: str = Field(default_factory=new_id)
    joke_id: str
    routine_id: str | None = None
    date: int = Field(default_factory=now_ms)
    actual_time: int = Field(ge=0)
    outcome: Outcome
    notes: str = ""
    venue: str | None = None


class StructurePartSelection(CamelModel):
    part_id: str
    label: str
    selected: list[str] = Field(default_factory=list)
    custom_inputs: list[str] | None = None


class JokeStructureSelection(CamelModel):
    """Which structure template built a joke, and what was picked per part."""

    structure_id: str
    structure_name: str
    parts: list[StructurePartSelection] = Field(default_factory=list)


class Joke(CamelModel):
    id: str = Field(default_factory=new_id)
    premise_id: str | None = None
    title: str = Field(min_length=1, max_length=200)
    setup: str = Field(min_length=1, max_length=5000)
    punchline: str = Field(min_length=1, max_length=5000)
    tags: list[str] = Field(default_factory=list)
    estimated_time: int = Field(default=60, ge=0, le=MAX_ESTIMATED_TIME)
    energy: Energy = "medium"
    type: JokeType = "observational"
    status: JokeStatus = "draft"
    notes: str = ""
    versions: list[JokeVersion] = Field(default_factory=list)  # newest first
    performances: list[Performance] = Field(default_factory=list)
    structure: JokeStructureSelection | None = None
    techniques: list[Technique] | None = None
    created_at: int = Field(default_factory=now_ms)
    updated_at: int = Field(default_factory=now_ms)


class Premise(CamelModel):
    id: str = Field(default_factory=new_id)
    content: str = Field(min_length=1)
    tags: list[str] = Field(default_factory=list)
    created_at: int = Field(default_factory=now_ms)


# ---------------------------------------------------------------------------
# Routines
# ---------------------------------------------------------------------------

class RoutineSuggestion(CamelModel):
    type: Literal["placement", "callback", "reorder", "remove"]
    joke_id: str
    position: int | None = None
    reason: str = ""
    confidence: Score = 0


class Routine(CamelModel):
    """An ordered set of jokes. ``joke_ids`` order is stage order; repeats are allowed."""

    id: str = Field(default_factory=new_id)
    name: str = Field(min_length=1, max_length=200)
    joke_ids: list[str] = Field(default_factory=list)
    target_time: int = Field(default=DEFAULT_TARGET_TIME, ge=0, le=MAX_TARGET_TIME)
    current_time: int = 0
    flow_score: int | None = Field(default=None, ge=0, le=100)
    ai_suggestions: list[RoutineSuggestion] | None = None
    created_at: int = Field(default_factory=now_ms)
    updated_at: int = Field(default_factory=now_ms)


class RoutineJokeSummary(CamelModel):
    """The slice of a joke that routine prompts need."""

    id: str = ""
    title: str
    energy: Energy
    type: JokeType
    estimated_time: int = Field(default=0, ge=0)


class PerformanceSummary(CamelModel):
    date: int
    outcome: Outcome
    actual_time: int = Field(ge=0)
    joke_title: str


# ---------------------------------------------------------------------------
# Structure templates (static reference data)
# ---------------------------------------------------------------------------

class JokeStructurePart(FrozenCamelModel):
    id: str
    label: str
    description: str
    allows_multiple: bool = False


class JokeStructure(FrozenCamelModel):
    id: str
    name: str
    summary: str
    example: str
    category: str
    parts: tuple[JokeStructurePart, ...]


class StructureCategory(FrozenCamelModel):
    id: str
    name: str
    description: str


class SelectedPartOption(CamelModel):
    part_id: str
    selected: list[str] = Field(default_factory=list)
    custom_inputs: list[str] | None = None


# ---------------------------------------------------------------------------
# Filtering / sorting
# ---------------------------------------------------------------------------

SortField = Literal["title", "estimated_time", "created_at", "updated_at", "performance_rating"]
SortDirection = Literal["asc", "desc"]


class JokeFilters(CamelModel):
    status: list[JokeStatus] | None = None
    energy: list[Energy] | None = None
    type: list[JokeType] | None = None
    tags: list[str] | None = None
    search: str | None = None


class JokeSort(CamelModel):
    field: SortField = "created_at"
    direction: SortDirection = "asc"


# ---------------------------------------------------------------------------
# AI results
# ---------------------------------------------------------------------------

SuggestionSource = Literal["model", "fallback"]


class Suggestions(CamelModel):
    suggestions: list[str]
    source: SuggestionSource = "model"


class Weakness(CamelModel):
    type: Literal["setup-too-long", "unclear-punchline", "weak-tag", "timing", "structure"]
    description: str
    location: Literal["setup", "punchline", "tags"]
    severity: Severity


class WeaknessReport(CamelModel):
    weaknesses: list[Weakness] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)
    overall_score: Score = 0
    recommended_tags: list[str] = Field(default_factory=list)


class JokeImprovement(CamelModel):
    setup: str
    punchline: str
    explanation: str = ""


class CallbackOpportunity(CamelModel):
    joke_id1: str = Field(alias="jokeId1")
    joke_id2: str = Field(alias="jokeId2")
    reason: str = ""
    confidence: Score = 0
    suggested_callback: str | None = None


class FlowIssue(CamelModel):
    type: Literal["repetitive-topic", "energy-drop", "timing-issue", "weak-opening", "weak-closing"]
    description: str
    affected_joke_ids: list[str] = Field(default_factory=list)
    severity: Severity


class FlowAnalysis(CamelModel):
    flow_score: Score = 0
    energy_progression: list[Score] = Field(default_factory=list)
    topic_diversity: Score = 0
    callbacks: list[CallbackOpportunity] = Field(default_factory=list)
    suggestions: list[RoutineSuggestion] = Field(default_factory=list)
    issues: list[FlowIssue] = Field(default_factory=list)


class RoutineOptimization(CamelModel):
    optimized_order: list[str]
    reasoning: str = ""


class PlacementSuggestion(CamelModel):
    position: int = Field(ge=0)
    score: Score = 0
    reasoning: str = ""
    pros: list[str] = Field(default_factory=list)
    cons: list[str] = Field(default_factory=list)


class PlacementSuggestions(CamelModel):
    suggestions: list[PlacementSuggestion] = Field(default_factory=list)


class PerformancePattern(CamelModel):
    pattern: str
    description: str = ""
    frequency: int = 0
    impact: Literal["positive", "negative", "neutral"] = "neutral"


class PerformanceInsights(CamelModel):
    overall_rating: Score = 0
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    patterns: list[PerformancePattern] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    best_jokes: list[str] = Field(default_factory=list)
    worst_jokes: list[str] = Field(default_factory=list)
