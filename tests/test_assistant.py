"""Tests for tight_five.assistant: guardrail ordering, fallback policy,
timeouts, structured decoding and order normalization."""

import asyncio
import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from tight_five.assistant import Assistant, normalize_order
from tight_five.errors import DecodeError, OffTopicError
from tight_five.llm import HttpLLM, LLMError
from tight_five.models import (
    FlowAnalysis,
    JokeImprovement,
    PerformanceInsights,
    PerformanceSummary,
    RoutineJokeSummary,
    SelectedPartOption,
    WeaknessReport,
)
from tight_five.prompts import (
    SYSTEM_PROMPTS,
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
)


def _summary(jid: str, title: str = "t") -> RoutineJokeSummary:
    return RoutineJokeSummary(id=jid, title=title, energy="medium", type="story", estimated_time=30)


@pytest.fixture
def assistant(stub_llm) -> Assistant:
    return Assistant(stub_llm, timeout=5)


# ── Generation ───────────────────────────────────────────


async def test_setup_generation_from_model(assistant, stub_llm):
    stub_llm.queue('```json\n["one", "two", "three"]\n```')
    result = await assistant.run(SetupGenerationRequest(premise="airports"))
    assert result.suggestions == ["one", "two", "three"]
    assert result.source == "model"
    stage, system, prompt = stub_llm.calls[0]
    assert stage == "setup-generation"
    assert system == SYSTEM_PROMPTS["joke-generation"]
    assert '"airports"' in prompt


async def test_generation_capped_at_five(assistant, stub_llm):
    stub_llm.queue(json.dumps([str(i) for i in range(8)]))
    result = await assistant.run(PunchlineGenerationRequest(setup="My dentist is a poet."))
    assert result.suggestions == ["0", "1", "2", "3", "4"]


async def test_generation_line_fallback(assistant, stub_llm):
    stub_llm.queue("1. First\n2. Second")
    result = await assistant.run(PunchlineGenerationRequest(setup="setup"))
    assert result.suggestions == ["First", "Second"]


async def test_setup_falls_back_once_on_llm_error(assistant, stub_llm):
    stub_llm.queue(LLMError("backend down"))
    result = await assistant.run(SetupGenerationRequest(premise="airports are chaos"))
    assert result.source == "fallback"
    assert 1 <= len(result.suggestions) <= 5
    assert any("airports" in s for s in result.suggestions)
    assert len(stub_llm.calls) == 1


async def test_punchline_falls_back_on_llm_error(assistant, stub_llm):
    stub_llm.queue(LLMError("backend down"))
    result = await assistant.run(PunchlineGenerationRequest(setup="My dentist is a poet."))
    assert result.source == "fallback"
    assert result.suggestions


async def test_decode_failure_not_masked_by_fallback(assistant, stub_llm):
    stub_llm.queue("   ")
    with pytest.raises(DecodeError):
        await assistant.run(SetupGenerationRequest(premise="airports"))


async def test_tag_suggestion_has_no_fallback(assistant, stub_llm):
    stub_llm.queue(LLMError("backend down"))
    with pytest.raises(LLMError):
        await assistant.run(TagSuggestionRequest(setup="s", punchline="p"))


async def test_tag_suggestion_from_model(assistant, stub_llm):
    stub_llm.queue('["tag 1", "tag 2", "tag 3"]')
    result = await assistant.run(TagSuggestionRequest(setup="s", punchline="p"))
    assert result.suggestions == ["tag 1", "tag 2", "tag 3"]


# ── Guardrail ordering ───────────────────────────────────


async def test_off_topic_never_calls_model(assistant, stub_llm):
    with pytest.raises(OffTopicError):
        await assistant.run(SetupGenerationRequest(premise="what's the weather tomorrow"))
    assert stub_llm.calls == []


async def test_off_topic_direction_rejected(assistant, stub_llm):
    req = JokeImprovementRequest(setup="s", punchline="p", direction="give me legal advice instead")
    with pytest.raises(OffTopicError):
        await assistant.run(req)
    assert stub_llm.calls == []


async def test_off_topic_structure_premise_rejected(assistant, stub_llm):
    req = StructurePartRequest(structure_id="rule-of-three", part_id="beat-a", premise="a recipe")
    with pytest.raises(OffTopicError):
        await assistant.run(req)
    assert stub_llm.calls == []


async def test_off_topic_custom_input_rejected(assistant, stub_llm):
    req = StructurePartRequest(
        structure_id="rule-of-three",
        part_id="surprise-c",
        premise="dieting",
        prior_selections=[
            SelectedPartOption(part_id="beat-a", selected=["denial"], custom_inputs=["share a recipe"]),
        ],
    )
    with pytest.raises(OffTopicError):
        await assistant.run(req)
    assert stub_llm.calls == []


# ── Timeouts ─────────────────────────────────────────────


class _SlowLLM:
    async def __call__(self, stage, system, prompt):
        await asyncio.sleep(1)
        return "[]"


async def test_timeout_triggers_fallback_for_generation():
    assistant = Assistant(_SlowLLM(), timeout=0.01)
    result = await assistant.run(SetupGenerationRequest(premise="airports"))
    assert result.source == "fallback"


async def test_transport_failure_triggers_fallback():
    llm = HttpLLM(provider_url="http://localhost:8080")
    mock_post = AsyncMock(side_effect=httpx.RemoteProtocolError("Server disconnected"))
    with patch("httpx.AsyncClient.post", mock_post):
        result = await Assistant(llm).run(SetupGenerationRequest(premise="airports"))
    assert result.source == "fallback"


async def test_timeout_raises_for_structured_tasks():
    assistant = Assistant(_SlowLLM(), timeout=0.01)
    with pytest.raises(LLMError, match="timed out"):
        await assistant.run(JokeAnalysisRequest(setup="s", punchline="p"))


# ── Structure parts ──────────────────────────────────────


async def test_structure_part_from_model(assistant, stub_llm):
    stub_llm.queue('["denial", "anger"]')
    req = StructurePartRequest(structure_id="rule-of-three", part_id="beat-a", premise="dieting")
    result = await assistant.run(req)
    assert result.suggestions == ["denial", "anger"]
    assert stub_llm.calls[0][0] == "structure-part-generation"


async def test_structure_part_fallback_mentions_part(assistant, stub_llm):
    stub_llm.queue(LLMError("down"))
    req = StructurePartRequest(structure_id="rule-of-three", part_id="surprise-c", premise="dieting")
    result = await assistant.run(req)
    assert result.source == "fallback"
    assert all(s.startswith("Surprise C:") for s in result.suggestions)


async def test_structure_part_unknown_part_never_calls_model(assistant, stub_llm):
    req = StructurePartRequest(structure_id="rule-of-three", part_id="beat-z", premise="dieting")
    with pytest.raises(PromptError):
        await assistant.run(req)
    assert stub_llm.calls == []


# ── Structured tasks ─────────────────────────────────────


async def test_improvement(assistant, stub_llm):
    stub_llm.queue(json.dumps({"setup": "s2", "punchline": "p2", "explanation": "tighter"}))
    result = await assistant.run(JokeImprovementRequest(setup="s", punchline="p", direction="shorter"))
    assert result == JokeImprovement(setup="s2", punchline="p2", explanation="tighter")


async def test_analysis_scores_clamped(assistant, stub_llm):
    stub_llm.queue("```json\n" + json.dumps({
        "weaknesses": [{
            "type": "timing", "description": "slow", "location": "setup", "severity": "low",
        }],
        "suggestions": ["cut the first line"],
        "overallScore": 140,
        "recommendedTags": ["tag"],
    }) + "\n```")
    result = await assistant.run(JokeAnalysisRequest(setup="s", punchline="p"))
    assert isinstance(result, WeaknessReport)
    assert result.overall_score == 100
    assert result.weaknesses[0].type == "timing"


async def test_analysis_wrong_shape_is_decode_error(assistant, stub_llm):
    stub_llm.queue(json.dumps({"weaknesses": [{"type": "vibes"}]}))
    with pytest.raises(DecodeError):
        await assistant.run(JokeAnalysisRequest(setup="s", punchline="p"))


@pytest.mark.parametrize("score", ["Infinity", "-Infinity", "NaN", "1e999"])
async def test_analysis_non_finite_score_is_decode_error(assistant, stub_llm, score):
    stub_llm.queue('{"overallScore": ' + score + "}")
    with pytest.raises(DecodeError):
        await assistant.run(JokeAnalysisRequest(setup="s", punchline="p"))


async def test_analysis_non_json_is_decode_error(assistant, stub_llm):
    stub_llm.queue("That joke is great!")
    with pytest.raises(DecodeError):
        await assistant.run(JokeAnalysisRequest(setup="s", punchline="p"))


async def test_flow_analysis(assistant, stub_llm):
    stub_llm.queue(json.dumps({
        "flowScore": -5,
        "energyProgression": [40, 120],
        "topicDiversity": 80,
        "callbacks": [{"jokeId1": "a", "jokeId2": "b", "reason": "planes", "confidence": 85}],
        "issues": [],
        "suggestions": [{"type": "reorder", "jokeId": "b", "position": 0, "reason": "opener", "confidence": 70}],
    }))
    result = await assistant.run(RoutineFlowRequest(jokes=[_summary("a"), _summary("b")]))
    assert isinstance(result, FlowAnalysis)
    assert result.flow_score == 0
    assert result.energy_progression == [40, 100]
    assert result.callbacks[0].joke_id1 == "a"
    assert result.suggestions[0].joke_id == "b"


async def test_optimization_normalized(assistant, stub_llm):
    stub_llm.queue(json.dumps({"optimizedOrder": ["c", "zzz", "a", "c"], "reasoning": "closer last"}))
    jokes = [_summary("a"), _summary("b"), _summary("c")]
    result = await assistant.run(RoutineOptimizationRequest(jokes=jokes))
    assert result.optimized_order == ["c", "a", "b"]
    assert result.reasoning == "closer last"


async def test_placement_positions_clamped(assistant, stub_llm):
    stub_llm.queue(json.dumps({"suggestions": [
        {"position": 7, "score": 90, "reasoning": "closer", "pros": ["big"], "cons": []},
        {"position": 0, "score": 60},
    ]}))
    req = PlacementRequest(new_joke=_summary("n"), jokes=[_summary("a")])
    result = await assistant.run(req)
    assert [s.position for s in result.suggestions] == [1, 0]


async def test_performance_analysis(assistant, stub_llm):
    stub_llm.queue(json.dumps({
        "overallRating": 72,
        "strengths": ["openers"],
        "weaknesses": [],
        "patterns": [{"pattern": "long bits bomb", "description": "", "frequency": 2, "impact": "negative"}],
        "recommendations": ["trim"],
        "bestJokes": ["Airports"],
        "worstJokes": [],
    }))
    perfs = [PerformanceSummary(date=0, outcome="killed", actual_time=40, joke_title="Airports")]
    result = await assistant.run(PerformanceAnalysisRequest(performances=perfs))
    assert isinstance(result, PerformanceInsights)
    assert result.best_jokes == ["Airports"]
    assert result.patterns[0].impact == "negative"


async def test_structured_task_llm_error_propagates(assistant, stub_llm):
    stub_llm.queue(LLMError("down"))
    with pytest.raises(LLMError):
        await assistant.run(RoutineFlowRequest(jokes=[_summary("a")]))


# ── normalize_order ──────────────────────────────────────


def test_normalize_order_identity():
    jokes = [_summary("a"), _summary("b")]
    assert normalize_order(["b", "a"], jokes) == ["b", "a"]


def test_normalize_order_appends_missing_in_input_order():
    jokes = [_summary("a"), _summary("b"), _summary("c")]
    assert normalize_order(["c"], jokes) == ["c", "a", "b"]


def test_normalize_order_keeps_intentional_repeats():
    jokes = [_summary("a"), _summary("a"), _summary("b")]
    assert normalize_order(["b", "a"], jokes) == ["b", "a", "a"]
    assert normalize_order(["a", "a", "a", "b"], jokes) == ["a", "a", "b"]


def test_normalize_order_empty_proposal():
    jokes = [_summary("a"), _summary("b")]
    assert normalize_order([], jokes) == ["a", "b"]
