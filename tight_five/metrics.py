"""Derived metrics over joke and routine collections.

Everything here is pure: inputs are already-validated models fetched from
storage, outputs are new values. Nothing reads or writes storage.

Routines hold joke ids by reference, so a routine can outlive one of its
jokes; missing ids contribute nothing to sums and are skipped in lookups.
"""

from collections.abc import Iterable, Mapping, Sequence

from tight_five.models import Joke, JokeFilters, Performance, RoutineJokeSummary

# Frozen contract constants; do not retune.
OUTCOME_SCORES: dict[str, int] = {
    "killed": 100,
    "worked": 70,
    "neutral": 50,
    "bombed": 20,
}

SORT_FIELDS = ("title", "estimated_time", "created_at", "updated_at", "performance_rating")


# ── Timing ───────────────────────────────────────────────


def total_duration(joke_ids: Iterable[str], jokes: Mapping[str, Joke]) -> int:
    """Sum of estimated_time for each id; unknown ids count as 0."""
    total = 0
    for joke_id in joke_ids:
        joke = jokes.get(joke_id)
        if joke is not None:
            total += joke.estimated_time
    return total


def routine_jokes(joke_ids: Iterable[str], jokes: Mapping[str, Joke]) -> list[Joke]:
    """Resolve ids to jokes in stage order, skipping deleted ones."""
    return [jokes[jid] for jid in joke_ids if jid in jokes]


def routine_summaries(
    joke_ids: Iterable[str], jokes: Mapping[str, Joke]
) -> list[RoutineJokeSummary]:
    return [
        RoutineJokeSummary(
            id=joke.id,
            title=joke.title,
            energy=joke.energy,
            type=joke.type,
            estimated_time=joke.estimated_time,
        )
        for joke in routine_jokes(joke_ids, jokes)
    ]


# ── Ratings ──────────────────────────────────────────────


def performance_rating(performances: Sequence[Performance]) -> float:
    """Mean outcome score in [0, 100]; 0 when there is no history."""
    if not performances:
        return 0
    return sum(OUTCOME_SCORES[p.outcome] for p in performances) / len(performances)


# ── Sort / filter ────────────────────────────────────────


def _sort_key(field: str):
    if field == "title":
        return lambda j: j.title.lower()
    if field == "estimated_time":
        return lambda j: j.estimated_time
    if field == "created_at":
        return lambda j: j.created_at
    if field == "updated_at":
        return lambda j: j.updated_at
    if field == "performance_rating":
        return lambda j: performance_rating(j.performances)
    raise ValueError(f"Unknown sort field {field!r}; expected one of {', '.join(SORT_FIELDS)}")


def sort_jokes(jokes: Iterable[Joke], field: str, direction: str = "asc") -> list[Joke]:
    """Stable sort. ``desc`` flips the order of keys but never of equal keys."""
    if direction not in ("asc", "desc"):
        raise ValueError(f"Unknown sort direction {direction!r}")
    # sorted(reverse=True) keeps equal elements in their original order.
    return sorted(jokes, key=_sort_key(field), reverse=direction == "desc")


def _matches(joke: Joke, filters: JokeFilters) -> bool:
    if filters.status and joke.status not in filters.status:
        return False
    if filters.energy and joke.energy not in filters.energy:
        return False
    if filters.type and joke.type not in filters.type:
        return False
    if filters.tags and not any(tag in joke.tags for tag in filters.tags):
        return False
    if filters.search:
        needle = filters.search.lower()
        haystacks = (joke.title, joke.setup, joke.punchline, joke.notes)
        if not any(needle in text.lower() for text in haystacks):
            return False
    return True


def filter_jokes(jokes: Iterable[Joke], filters: JokeFilters | None = None) -> list[Joke]:
    """AND across fields; ``tags`` is satisfied by any one tag."""
    if filters is None:
        return list(jokes)
    return [j for j in jokes if _matches(j, filters)]


# ── Routine ordering ─────────────────────────────────────


def insert_joke(joke_ids: Sequence[str], joke_id: str, position: int | None = None) -> list[str]:
    """Insert at position (clamped into range), or append when position is None."""
    result = list(joke_ids)
    if position is None:
        result.append(joke_id)
    else:
        result.insert(max(0, min(position, len(result))), joke_id)
    return result


def remove_joke(joke_ids: Sequence[str], joke_id: str) -> list[str]:
    """Drop every occurrence of joke_id."""
    return [jid for jid in joke_ids if jid != joke_id]


def move_joke(joke_ids: Sequence[str], from_index: int, to_index: int) -> list[str]:
    """Drag-and-drop reorder: take the item at from_index and drop it at to_index."""
    if not 0 <= from_index < len(joke_ids):
        raise IndexError(f"Routine index {from_index} out of range")
    result = list(joke_ids)
    item = result.pop(from_index)
    result.insert(max(0, min(to_index, len(result))), item)
    return result
