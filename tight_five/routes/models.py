"""Pydantic request models for API endpoints."""

from pydantic import Field

from tight_five.models import (
    MAX_ESTIMATED_TIME,
    MAX_TARGET_TIME,
    CamelModel,
    Energy,
    JokeFilters,
    JokeSort,
    JokeStatus,
    JokeStructureSelection,
    JokeType,
    Outcome,
    RoutineSuggestion,
    Technique,
)


class CreateJoke(CamelModel):
    title: str = Field(min_length=1, max_length=200)
    setup: str = Field(min_length=1, max_length=5000)
    punchline: str = Field(min_length=1, max_length=5000)
    tags: list[str] = Field(default_factory=list)
    estimated_time: int = Field(default=60, ge=0, le=MAX_ESTIMATED_TIME)
    energy: Energy = "medium"
    type: JokeType = "observational"
    status: JokeStatus = "draft"
    notes: str = ""
    structure: JokeStructureSelection | None = None
    techniques: list[Technique] | None = None
    premise_id: str | None = None


class UpdateJoke(CamelModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    setup: str | None = Field(default=None, min_length=1, max_length=5000)
    punchline: str | None = Field(default=None, min_length=1, max_length=5000)
    tags: list[str] | None = None
    estimated_time: int | None = Field(default=None, ge=0, le=MAX_ESTIMATED_TIME)
    energy: Energy | None = None
    type: JokeType | None = None
    status: JokeStatus | None = None
    notes: str | None = None
    structure: JokeStructureSelection | None = None
    techniques: list[Technique] | None = None
    premise_id: str | None = None


class JokeQuery(CamelModel):
    filters: JokeFilters | None = None
    sort: JokeSort | None = None


class CreatePerformance(CamelModel):
    actual_time: int = Field(ge=0)
    outcome: Outcome
    routine_id: str | None = None
    date: int | None = None
    notes: str = ""
    venue: str | None = None


class CreateRoutine(CamelModel):
    name: str = Field(min_length=1, max_length=200)
    joke_ids: list[str] = Field(default_factory=list)
    target_time: int = Field(default=300, ge=0, le=MAX_TARGET_TIME)


class UpdateRoutine(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    joke_ids: list[str] | None = None
    target_time: int | None = Field(default=None, ge=0, le=MAX_TARGET_TIME)
    flow_score: int | None = Field(default=None, ge=0, le=100)
    ai_suggestions: list[RoutineSuggestion] | None = None


class InsertRoutineJoke(CamelModel):
    joke_id: str
    position: int | None = Field(default=None, ge=0)


class MoveRoutineJoke(CamelModel):
    from_index: int = Field(ge=0)
    to_index: int = Field(ge=0)


class CreatePremise(CamelModel):
    content: str = Field(min_length=1, max_length=5000)
    tags: list[str] = Field(default_factory=list)


class ImportBody(CamelModel):
    jokes: list[dict] = Field(default_factory=list)
    routines: list[dict] = Field(default_factory=list)
    premises: list[dict] = Field(default_factory=list)
