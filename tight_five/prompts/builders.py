"""User-content builders, one per task kind.

Every builder is pure: same input, same text. User-supplied strings go
through ``sanitize`` before they are embedded so they cannot close the quoted
fields or open a markdown fence, and every prompt ends by asking for bare
JSON.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

from tight_five.models import (
    JokeStructure,
    PerformanceSummary,
    RoutineJokeSummary,
    SelectedPartOption,
)
from tight_five.prompts.render import PromptError, render_prompt
from tight_five.structures import get_part

_FENCE_RE = re.compile(r"`{3,}[A-Za-z]*")
_ANGLE_RE = re.compile(r"[<>]")

STRUCTURE_PART_OPTIONS = 5


def sanitize(text: str) -> str:
    """Strip angle brackets and code fences, swap double quotes for single, trim."""
    text = _ANGLE_RE.sub("", text or "")
    text = _FENCE_RE.sub("", text)
    return text.replace('"', "'").strip()


def _joke_items(jokes: Sequence[RoutineJokeSummary]) -> list[dict[str, Any]]:
    return [
        {
            "id": sanitize(j.id),
            "title": sanitize(j.title),
            "energy": j.energy,
            "type": j.type,
            "estimated_time": j.estimated_time,
        }
        for j in jokes
    ]


def _format_date(epoch_ms: int) -> str:
    return datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc).strftime("%Y-%m-%d")


# ── Generation ───────────────────────────────────────────

SETUP_TEMPLATE = """Based on this premise: "{{{premise}}}"

Generate 3 different joke setups that could lead to funny punchlines.

Each setup should:
- Be clear and concise
- Set up the audience's expectation
- Lead naturally to a punchline
- Be different in approach (observational, storytelling, or direct)

Return ONLY a JSON array (no markdown, no code blocks):
["setup 1", "setup 2", "setup 3"]"""


PUNCHLINE_TEMPLATE = """For this joke setup: "{{{setup}}}"

Generate 5 different punchlines that subvert expectations and get laughs.

Each punchline should:
- Subvert the expectation set up by the setup
- Use comedy techniques (misdirection, exaggeration, callback, etc.)
- Be punchy and concise
- Vary in approach and style

Return ONLY a JSON array (no markdown, no code blocks):
["punchline 1", "punchline 2", "punchline 3", "punchline 4", "punchline 5"]"""


STRUCTURE_PART_TEMPLATE = """Premise: "{{{premise}}}"

We are building a joke with the "{{{structure.name}}}" structure.
{{{structure.summary}}}
Example: "{{{structure.example}}}"

{{#if prior}}Parts written so far, in order:
{{#numbered prior}}{{{n}}}. {{{label}}}: "{{{text}}}"
{{/numbered}}
{{else}}No earlier parts have been chosen yet.

{{/if}}Now write the "{{{part.label}}}" part: {{{part.description}}}

Generate {{{count}}} different options for this part only.
Each option should:
- Follow naturally from the premise and the parts written so far
- Fit the structure's rhythm
- Be punchy and concise
{{#if part.allows_multiple}}- Work as one of several stacked lines
{{/if}}
Return ONLY a JSON array (no markdown, no code blocks):
["option 1", "option 2", "option 3"]"""


TAGS_TEMPLATE = """For this joke:
Setup: "{{{setup}}}"
Punchline: "{{{punchline}}}"

Suggest 3-5 tags (additional punchlines that build on the main punchline).

Each tag should:
- Build on the previous punchline
- Escalate or pivot the joke
- Be funnier than the last

Return ONLY a JSON array (no markdown, no code blocks):
["tag 1", "tag 2", "tag 3"]"""


def setup_prompt(premise: str) -> str:
    return render_prompt(SETUP_TEMPLATE, {"premise": sanitize(premise)})


def punchline_prompt(setup: str) -> str:
    return render_prompt(PUNCHLINE_TEMPLATE, {"setup": sanitize(setup)})


def structure_part_prompt(
    structure: JokeStructure,
    part_id: str,
    premise: str,
    prior_selections: Sequence[SelectedPartOption] = (),
) -> str:
    """Ask for options for one part, given everything chosen before it.

    Only parts that come before ``part_id`` in the template's order and have
    at least one selection are shown. Selections for the target part, for
    later parts, or for ids the template doesn't have are ignored.
    """
    found = get_part(structure, part_id)
    if found is None:
        raise PromptError(f"Structure {structure.id!r} has no part {part_id!r}")
    index, part = found

    chosen: dict[str, list[str]] = {}
    for selection in prior_selections:
        picks = [*selection.selected, *(selection.custom_inputs or [])]
        picks = [sanitize(p) for p in picks]
        chosen.setdefault(selection.part_id, []).extend(p for p in picks if p)

    prior = [
        {"label": earlier.label, "text": " / ".join(chosen[earlier.id])}
        for earlier in structure.parts[:index]
        if chosen.get(earlier.id)
    ]

    ctx = {
        "premise": sanitize(premise),
        "structure": structure.model_dump(),
        "part": part.model_dump(),
        "prior": prior,
        "count": STRUCTURE_PART_OPTIONS,
    }
    return render_prompt(STRUCTURE_PART_TEMPLATE, ctx)


def tags_prompt(setup: str, punchline: str) -> str:
    return render_prompt(TAGS_TEMPLATE, {"setup": sanitize(setup), "punchline": sanitize(punchline)})


# ── Single-joke editing ──────────────────────────────────

IMPROVE_TEMPLATE = """Current joke:
Setup: "{{{setup}}}"
Punchline: "{{{punchline}}}"

Improvement direction: {{{direction}}}

Provide an improved version of this joke focusing on the requested direction.

Return ONLY a JSON object (no markdown, no code blocks):
{
  "setup": "improved setup",
  "punchline": "improved punchline",
  "explanation": "brief explanation of changes made"
}"""


ANALYZE_TEMPLATE = """Analyze this joke:
Setup: "{{{setup}}}"
Punchline: "{{{punchline}}}"
Tags: {{{tags}}}

Provide detailed analysis including:
1. Weaknesses in setup or punchline
2. Suggestions for improvement
3. Rating (0-100)
4. Recommended tags or toppers

Return ONLY a JSON object (no markdown, no code blocks):
{
  "weaknesses": [
    {
      "type": "setup-too-long" | "unclear-punchline" | "weak-tag" | "timing" | "structure",
      "description": "description",
      "location": "setup" | "punchline" | "tags",
      "severity": "low" | "medium" | "high"
    }
  ],
  "suggestions": ["suggestion 1", "suggestion 2"],
  "overallScore": 75,
  "recommendedTags": ["tag 1", "tag 2"]
}"""


def improve_prompt(setup: str, punchline: str, direction: str) -> str:
    return render_prompt(IMPROVE_TEMPLATE, {
        "setup": sanitize(setup),
        "punchline": sanitize(punchline),
        "direction": sanitize(direction),
    })


def analyze_prompt(setup: str, punchline: str, tags: Sequence[str] = ()) -> str:
    clean_tags = [t for t in (sanitize(tag) for tag in tags) if t]
    return render_prompt(ANALYZE_TEMPLATE, {
        "setup": sanitize(setup),
        "punchline": sanitize(punchline),
        "tags": ", ".join(clean_tags) if clean_tags else "none",
    })


# ── Routines ─────────────────────────────────────────────

FLOW_TEMPLATE = """Analyze this standup routine:

{{#numbered jokes}}{{{n}}}. "{{{title}}}" (ID: {{{id}}}, {{{energy}}} energy, {{{type}}}, {{{estimated_time}}}s)
{{/numbered}}
Provide analysis of:
1. Flow score (0-100) - How well jokes transition
2. Energy progression - Should build up
3. Topic diversity - Avoid repetition
4. Callback opportunities - Which jokes could reference each other
5. Issues and suggestions

Return ONLY a JSON object (no markdown, no code blocks):
{
  "flowScore": 75,
  "energyProgression": [50, 60, 70, 80, 90],
  "topicDiversity": 80,
  "callbacks": [
    {
      "jokeId1": "id1",
      "jokeId2": "id2",
      "reason": "Both about flying",
      "confidence": 85,
      "suggestedCallback": "Remember that thing about planes?"
    }
  ],
  "issues": [
    {
      "type": "energy-drop" | "repetitive-topic" | "timing-issue" | "weak-opening" | "weak-closing",
      "description": "description",
      "affectedJokeIds": ["id1", "id2"],
      "severity": "low" | "medium" | "high"
    }
  ],
  "suggestions": [
    {
      "type": "placement" | "callback" | "reorder" | "remove",
      "jokeId": "id",
      "position": 3,
      "reason": "Would work better here",
      "confidence": 80
    }
  ]
}"""


OPTIMIZE_TEMPLATE = """Reorder these jokes for optimal routine flow:

{{#numbered jokes}}{{{n}}}. ID: {{{id}}}, Title: "{{{title}}}" ({{{energy}}} energy, {{{type}}})
{{/numbered}}
Provide the optimal order considering:
- Strong opening (hook the audience)
- Energy progression (build up)
- Topic diversity (avoid repetition)
- Strong closing (leave them laughing)
- Callback opportunities

Use every ID exactly once. Do not add or remove jokes.

Return ONLY a JSON object (no markdown, no code blocks):
{
  "optimizedOrder": ["id3", "id1", "id5", "id2", "id4"],
  "reasoning": "Explanation of why this order works better"
}"""


PLACEMENT_TEMPLATE = """Where should this new joke fit in the routine?

New joke: "{{{new_joke.title}}}" ({{{new_joke.energy}}} energy, {{{new_joke.type}}})

Current routine:
{{#numbered jokes}}{{{n}}}. "{{{title}}}" ({{{energy}}} energy, {{{type}}})
{{/numbered}}
Suggest the top 3 positions for this joke. Position 0 means before the first joke.

Return ONLY a JSON object (no markdown, no code blocks):
{
  "suggestions": [
    {
      "position": 0,
      "score": 85,
      "reasoning": "Great opener because...",
      "pros": ["pro 1", "pro 2"],
      "cons": ["con 1"]
    }
  ]
}"""


def flow_prompt(jokes: Sequence[RoutineJokeSummary]) -> str:
    return render_prompt(FLOW_TEMPLATE, {"jokes": _joke_items(jokes)})


def optimize_prompt(jokes: Sequence[RoutineJokeSummary]) -> str:
    return render_prompt(OPTIMIZE_TEMPLATE, {"jokes": _joke_items(jokes)})


def placement_prompt(new_joke: RoutineJokeSummary, jokes: Sequence[RoutineJokeSummary]) -> str:
    return render_prompt(PLACEMENT_TEMPLATE, {
        "new_joke": _joke_items([new_joke])[0],
        "jokes": _joke_items(jokes),
    })


# ── Performances ─────────────────────────────────────────

PERFORMANCE_TEMPLATE = """Analyze these performance results:

{{#numbered performances}}{{{n}}}. "{{{joke_title}}}" - {{{outcome}}} ({{{actual_time}}}s) on {{{date}}}
{{/numbered}}
Identify:
1. Overall performance rating (0-100)
2. Strengths (what worked well)
3. Weaknesses (what needs improvement)
4. Patterns (recurring issues or successes)
5. Recommendations

Return ONLY a JSON object (no markdown, no code blocks):
{
  "overallRating": 75,
  "strengths": ["strength 1", "strength 2"],
  "weaknesses": ["weakness 1", "weakness 2"],
  "patterns": [
    {
      "pattern": "Longer jokes tend to bomb",
      "description": "Jokes over 60s performed poorly",
      "frequency": 5,
      "impact": "negative"
    }
  ],
  "recommendations": ["recommendation 1", "recommendation 2"],
  "bestJokes": ["joke title 1"],
  "worstJokes": ["joke title 2"]
}"""


def performance_prompt(performances: Sequence[PerformanceSummary]) -> str:
    items = [
        {
            "joke_title": sanitize(p.joke_title),
            "outcome": p.outcome,
            "actual_time": p.actual_time,
            "date": _format_date(p.date),
        }
        for p in performances
    ]
    return render_prompt(PERFORMANCE_TEMPLATE, {"performances": items})
