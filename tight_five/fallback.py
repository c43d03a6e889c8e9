"""Offline suggestions used when the model call fails.

Deterministic templates seeded with keywords pulled from the user's own
text. They are scaffolding for the writer, never finished jokes, and the
assistant labels them ``source="fallback"``.
"""

from __future__ import annotations

import re

from tight_five.decoder import MAX_GENERATED_SUGGESTIONS
from tight_five.models import JokeStructurePart

_WORD_RE = re.compile(r"[a-zA-Z0-9][a-zA-Z0-9'_-]*")

_STOPWORDS = frozenset({
    "the", "and", "for", "that", "with", "this", "you", "your", "are", "was",
    "but", "not", "have", "has", "had", "they", "them", "their", "about",
    "just", "like", "when", "what", "why", "how", "who", "its", "it's",
    "from", "into", "out", "all", "can", "get", "got", "one", "our",
})

_SETUP_TEMPLATES = (
    "You ever notice how {topic} is basically {other} with better marketing?",
    "I tried {topic} for the first time last week.",
    "Nobody warns you about {topic} until it's too late.",
    "My relationship with {topic} is complicated.",
    "Here's what they don't tell you about {topic}.",
)

_PUNCHLINE_TEMPLATES = (
    "Turns out {topic} was the sensible option.",
    "And that's how {topic} ended up with my Netflix password.",
    "Which explains why {topic} now has a restraining order against me.",
    "So now I just call it {other} and hope nobody checks.",
    "Anyway, that's why I'm not allowed near {topic} anymore.",
)

_PART_TEMPLATES = (
    "{label}: start from {topic} and push it one step further.",
    "{label}: put {topic} next to {other} and see what breaks.",
    "{label}: say the quiet part about {topic} out loud.",
    "{label}: act out how {topic} would describe itself.",
    "{label}: flip what the audience expects {topic} to mean.",
)


def _extract_keywords(text: str, *, limit: int = 3) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for token in _WORD_RE.findall(text.lower()):
        if len(token) < 3 or token in _STOPWORDS or token in seen:
            continue
        seen.add(token)
        out.append(token)
        if len(out) >= limit:
            break
    return out


def _fill(templates: tuple[str, ...], text: str, **extra: str) -> list[str]:
    keywords = _extract_keywords(text) or ["this"]
    topic = keywords[0]
    other = keywords[1] if len(keywords) > 1 else "a group project"
    return [t.format(topic=topic, other=other, **extra) for t in templates][:MAX_GENERATED_SUGGESTIONS]


def fallback_setups(premise: str) -> list[str]:
    return _fill(_SETUP_TEMPLATES, premise)


def fallback_punchlines(setup: str) -> list[str]:
    return _fill(_PUNCHLINE_TEMPLATES, setup)


def fallback_part_options(part: JokeStructurePart, premise: str) -> list[str]:
    return _fill(_PART_TEMPLATES, premise, label=part.label)
