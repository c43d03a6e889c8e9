"""Tests for tight_five.models."""

import pytest
from pydantic import ValidationError

from tight_five.models import (
    CallbackOpportunity,
    FlowAnalysis,
    Joke,
    Performance,
    Routine,
    RoutineJokeSummary,
    Suggestions,
    WeaknessReport,
)


class TestJoke:
    def test_defaults(self) -> None:
        j = Joke(title="Airports", setup="s", punchline="p")
        assert j.estimated_time == 60
        assert j.energy == "medium"
        assert j.type == "observational"
        assert j.status == "draft"
        assert j.versions == []
        assert j.performances == []
        assert j.structure is None
        assert j.created_at > 0

    def test_ids_are_unique(self) -> None:
        a = Joke(title="A", setup="s", punchline="p")
        b = Joke(title="B", setup="s", punchline="p")
        assert a.id != b.id

    def test_invalid_energy_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Joke(title="A", setup="s", punchline="p", energy="extreme")

    def test_invalid_status_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Joke(title="A", setup="s", punchline="p", status="published")

    def test_empty_title_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Joke(title="", setup="s", punchline="p")

    def test_estimated_time_bounds(self) -> None:
        with pytest.raises(ValidationError):
            Joke(title="A", setup="s", punchline="p", estimated_time=-1)
        with pytest.raises(ValidationError):
            Joke(title="A", setup="s", punchline="p", estimated_time=601)

    def test_camel_case_aliases(self) -> None:
        j = Joke.model_validate({
            "title": "A", "setup": "s", "punchline": "p", "estimatedTime": 45, "premiseId": "x",
        })
        assert j.estimated_time == 45
        dumped = j.model_dump(by_alias=True)
        assert dumped["estimatedTime"] == 45
        assert dumped["premiseId"] == "x"

    def test_snake_case_accepted(self) -> None:
        j = Joke.model_validate({"title": "A", "setup": "s", "punchline": "p", "estimated_time": 10})
        assert j.estimated_time == 10


class TestPerformance:
    def test_invalid_outcome_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Performance(joke_id="j", actual_time=30, outcome="meh")

    def test_frozen(self) -> None:
        p = Performance(joke_id="j", actual_time=30, outcome="killed")
        with pytest.raises(ValidationError):
            p.outcome = "bombed"


class TestRoutine:
    def test_defaults(self) -> None:
        r = Routine(name="Friday")
        assert r.joke_ids == []
        assert r.target_time == 300
        assert r.current_time == 0
        assert r.flow_score is None

    def test_target_time_bounds(self) -> None:
        with pytest.raises(ValidationError):
            Routine(name="x", target_time=3601)


class TestScores:
    def test_scores_clamped(self) -> None:
        report = WeaknessReport.model_validate({"overallScore": 250})
        assert report.overall_score == 100
        report = WeaknessReport.model_validate({"overallScore": -3})
        assert report.overall_score == 0

    def test_float_scores_rounded(self) -> None:
        assert WeaknessReport.model_validate({"overallScore": 72.6}).overall_score == 73

    def test_numeric_string_score(self) -> None:
        assert WeaknessReport.model_validate({"overallScore": "88"}).overall_score == 88

    def test_non_numeric_score_rejected(self) -> None:
        with pytest.raises(ValidationError):
            WeaknessReport.model_validate({"overallScore": "great"})

    def test_non_finite_score_rejected(self) -> None:
        for value in (float("inf"), float("-inf"), float("nan"), "Infinity"):
            with pytest.raises(ValidationError):
                WeaknessReport.model_validate({"overallScore": value})

    def test_huge_int_score_clamped(self) -> None:
        assert WeaknessReport.model_validate({"overallScore": 10 ** 400}).overall_score == 100

    def test_energy_progression_clamped(self) -> None:
        flow = FlowAnalysis.model_validate({"energyProgression": [-10, 50, 500]})
        assert flow.energy_progression == [0, 50, 100]


class TestAiResults:
    def test_callback_ids_alias(self) -> None:
        cb = CallbackOpportunity.model_validate({"jokeId1": "a", "jokeId2": "b"})
        assert (cb.joke_id1, cb.joke_id2) == ("a", "b")
        assert cb.model_dump(by_alias=True)["jokeId1"] == "a"

    def test_suggestions_default_source(self) -> None:
        assert Suggestions(suggestions=["x"]).source == "model"

    def test_summary_rejects_unknown_type(self) -> None:
        with pytest.raises(ValidationError):
            RoutineJokeSummary(title="A", energy="low", type="limerick")
