"""JSON file storage.

All state is stored in flat JSON files under a configurable base directory,
one directory per owner. There is no database or ORM; reads and writes go
through plain helper methods that load and dump JSON.

Directory layout:

    {base}/
      users/
        {owner}/
          jokes.json      ← list of Joke objects (versions + performances inline)
          routines.json   ← list of Routine objects (joke ids by reference)
          premises.json   ← list of Premise objects

Cascades:
  - deleting a joke deletes its performances and removes every occurrence of
    its id from every routine;
  - deleting a routine deletes every performance recorded against it.

Lookups that miss return None (or False for deletes); callers decide what a
miss means.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any

from tight_five import metrics
from tight_five.models import (
    Joke,
    JokeVersion,
    Performance,
    Premise,
    Routine,
    now_ms,
)

logger = logging.getLogger(__name__)

_OWNER_RE = re.compile(r"^[A-Za-z0-9_.@-]{1,128}$")

# Fields a caller may never overwrite through an update.
_JOKE_PROTECTED = {"id", "versions", "performances", "created_at", "updated_at"}
_ROUTINE_PROTECTED = {"id", "current_time", "created_at", "updated_at"}


def valid_owner(owner: str) -> bool:
    return bool(_OWNER_RE.match(owner)) and owner not in (".", "..")


class Storage:
    def __init__(self, base_path: Path) -> None:
        self._base = base_path
        self._users_root = base_path / "users"
        self._users_root.mkdir(parents=True, exist_ok=True)

    # ------------------------------------------------------------------
    # Internal path helpers
    # ------------------------------------------------------------------

    def _owner_dir(self, owner: str) -> Path:
        if not valid_owner(owner):
            raise ValueError(f"Invalid owner id {owner!r}")
        path = self._users_root / owner
        path.mkdir(exist_ok=True)
        return path

    def _read_json(self, path: Path) -> Any:
        return json.loads(path.read_text(encoding="utf-8"))

    def _write_json(self, path: Path, data: Any) -> None:
        path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    def _load(self, owner: str, name: str) -> list[dict]:
        path = self._owner_dir(owner) / name
        if not path.exists():
            return []
        return self._read_json(path)

    def _save_jokes(self, owner: str, jokes: list[Joke]) -> None:
        self._write_json(
            self._owner_dir(owner) / "jokes.json",
            [j.model_dump(mode="json") for j in jokes],
        )

    def _save_routines(self, owner: str, routines: list[Routine]) -> None:
        self._write_json(
            self._owner_dir(owner) / "routines.json",
            [r.model_dump(mode="json") for r in routines],
        )

    def _save_premises(self, owner: str, premises: list[Premise]) -> None:
        self._write_json(
            self._owner_dir(owner) / "premises.json",
            [p.model_dump(mode="json") for p in premises],
        )

    # ------------------------------------------------------------------
    # Jokes
    # ------------------------------------------------------------------

    def list_jokes(self, owner: str) -> list[Joke]:
        return [Joke.model_validate(j) for j in self._load(owner, "jokes.json")]

    def joke_index(self, owner: str) -> dict[str, Joke]:
        return {j.id: j for j in self.list_jokes(owner)}

    def get_joke(self, owner: str, joke_id: str) -> Joke | None:
        for joke in self.list_jokes(owner):
            if joke.id == joke_id:
                return joke
        return None

    def create_joke(self, owner: str, joke: Joke) -> Joke:
        now = now_ms()
        joke = joke.model_copy(update={"created_at": now, "updated_at": now})
        jokes = self.list_jokes(owner)
        jokes.append(joke)
        self._save_jokes(owner, jokes)
        return joke

    def update_joke(self, owner: str, joke_id: str, changes: dict[str, Any]) -> Joke | None:
        """Apply changes; snapshot the old text first if setup or punchline changes."""
        jokes = self.list_jokes(owner)
        for i, old in enumerate(jokes):
            if old.id == joke_id:
                break
        else:
            return None

        changes = {k: v for k, v in changes.items() if k not in _JOKE_PROTECTED}
        data = old.model_dump()
        data.update(changes)
        updated = Joke.model_validate(data)

        versions = list(old.versions)
        if updated.setup != old.setup or updated.punchline != old.punchline:
            versions.insert(0, JokeVersion(
                setup=old.setup,
                punchline=old.punchline,
                tags=tuple(old.tags),
                notes=old.notes,
            ))
        updated = updated.model_copy(update={"versions": versions, "updated_at": now_ms()})
        jokes[i] = updated
        self._save_jokes(owner, jokes)
        return updated

    def restore_version(self, owner: str, joke_id: str, version_id: str) -> Joke | None:
        """Re-apply an old version's text as a normal update (which snapshots the current text)."""
        joke = self.get_joke(owner, joke_id)
        if joke is None:
            return None
        for version in joke.versions:
            if version.id == version_id:
                break
        else:
            return None
        return self.update_joke(owner, joke_id, {
            "setup": version.setup,
            "punchline": version.punchline,
            "tags": list(version.tags),
        })

    def delete_joke(self, owner: str, joke_id: str) -> bool:
        jokes = self.list_jokes(owner)
        remaining = [j for j in jokes if j.id != joke_id]
        if len(remaining) == len(jokes):
            return False
        self._save_jokes(owner, remaining)

        routines = self._load_routines(owner)
        touched = False
        for i, routine in enumerate(routines):
            if joke_id in routine.joke_ids:
                routines[i] = routine.model_copy(update={
                    "joke_ids": metrics.remove_joke(routine.joke_ids, joke_id),
                    "updated_at": now_ms(),
                })
                touched = True
        if touched:
            self._save_routines(owner, routines)
        logger.info("Deleted joke %s for %s", joke_id, owner)
        return True

    # ------------------------------------------------------------------
    # Performances (stored inline on their joke)
    # ------------------------------------------------------------------

    def add_performance(self, owner: str, joke_id: str, data: dict[str, Any]) -> Performance | None:
        jokes = self.list_jokes(owner)
        for i, joke in enumerate(jokes):
            if joke.id == joke_id:
                break
        else:
            return None
        performance = Performance.model_validate({**data, "joke_id": joke_id})
        jokes[i] = joke.model_copy(update={
            "performances": [*joke.performances, performance],
            "updated_at": now_ms(),
        })
        self._save_jokes(owner, jokes)
        return performance

    def delete_performance(self, owner: str, joke_id: str, performance_id: str) -> bool:
        jokes = self.list_jokes(owner)
        for i, joke in enumerate(jokes):
            if joke.id == joke_id:
                break
        else:
            return False
        kept = [p for p in joke.performances if p.id != performance_id]
        if len(kept) == len(joke.performances):
            return False
        jokes[i] = joke.model_copy(update={"performances": kept, "updated_at": now_ms()})
        self._save_jokes(owner, jokes)
        return True

    # ------------------------------------------------------------------
    # Routines
    # ------------------------------------------------------------------

    def _load_routines(self, owner: str) -> list[Routine]:
        return [Routine.model_validate(r) for r in self._load(owner, "routines.json")]

    def _with_time(self, routine: Routine, jokes: dict[str, Joke]) -> Routine:
        return routine.model_copy(update={
            "current_time": metrics.total_duration(routine.joke_ids, jokes),
        })

    def list_routines(self, owner: str) -> list[Routine]:
        jokes = self.joke_index(owner)
        return [self._with_time(r, jokes) for r in self._load_routines(owner)]

    def get_routine(self, owner: str, routine_id: str) -> Routine | None:
        for routine in self.list_routines(owner):
            if routine.id == routine_id:
                return routine
        return None

    def create_routine(self, owner: str, routine: Routine) -> Routine:
        jokes = self.joke_index(owner)
        now = now_ms()
        routine = routine.model_copy(update={
            "joke_ids": [jid for jid in routine.joke_ids if jid in jokes],
            "created_at": now,
            "updated_at": now,
        })
        routine = self._with_time(routine, jokes)
        routines = self._load_routines(owner)
        routines.append(routine)
        self._save_routines(owner, routines)
        return routine

    def update_routine(self, owner: str, routine_id: str, changes: dict[str, Any]) -> Routine | None:
        """Apply changes. Joke ids that don't name an existing joke are dropped."""
        routines = self._load_routines(owner)
        for i, old in enumerate(routines):
            if old.id == routine_id:
                break
        else:
            return None

        jokes = self.joke_index(owner)
        changes = {k: v for k, v in changes.items() if k not in _ROUTINE_PROTECTED}
        data = old.model_dump()
        data.update(changes)
        updated = Routine.model_validate(data)
        updated = updated.model_copy(update={
            "joke_ids": [jid for jid in updated.joke_ids if jid in jokes],
            "updated_at": now_ms(),
        })
        updated = self._with_time(updated, jokes)
        routines[i] = updated
        self._save_routines(owner, routines)
        return updated

    def delete_routine(self, owner: str, routine_id: str) -> bool:
        routines = self._load_routines(owner)
        remaining = [r for r in routines if r.id != routine_id]
        if len(remaining) == len(routines):
            return False
        self._save_routines(owner, remaining)

        jokes = self.list_jokes(owner)
        touched = False
        for i, joke in enumerate(jokes):
            kept = [p for p in joke.performances if p.routine_id != routine_id]
            if len(kept) != len(joke.performances):
                jokes[i] = joke.model_copy(update={"performances": kept})
                touched = True
        if touched:
            self._save_jokes(owner, jokes)
        logger.info("Deleted routine %s for %s", routine_id, owner)
        return True

    def add_joke_to_routine(
        self, owner: str, routine_id: str, joke_id: str, position: int | None = None,
    ) -> Routine | None:
        routine = self.get_routine(owner, routine_id)
        if routine is None or self.get_joke(owner, joke_id) is None:
            return None
        joke_ids = metrics.insert_joke(routine.joke_ids, joke_id, position)
        return self.update_routine(owner, routine_id, {"joke_ids": joke_ids})

    def remove_joke_from_routine(self, owner: str, routine_id: str, joke_id: str) -> Routine | None:
        routine = self.get_routine(owner, routine_id)
        if routine is None:
            return None
        joke_ids = metrics.remove_joke(routine.joke_ids, joke_id)
        return self.update_routine(owner, routine_id, {"joke_ids": joke_ids})

    def move_routine_joke(
        self, owner: str, routine_id: str, from_index: int, to_index: int,
    ) -> Routine | None:
        """Reorder one entry. Raises IndexError for an out-of-range from_index."""
        routine = self.get_routine(owner, routine_id)
        if routine is None:
            return None
        joke_ids = metrics.move_joke(routine.joke_ids, from_index, to_index)
        return self.update_routine(owner, routine_id, {"joke_ids": joke_ids})

    # ------------------------------------------------------------------
    # Premises
    # ------------------------------------------------------------------

    def list_premises(self, owner: str) -> list[Premise]:
        return [Premise.model_validate(p) for p in self._load(owner, "premises.json")]

    def create_premise(self, owner: str, premise: Premise) -> Premise:
        premises = self.list_premises(owner)
        premises.append(premise)
        self._save_premises(owner, premises)
        return premise

    def delete_premise(self, owner: str, premise_id: str) -> bool:
        premises = self.list_premises(owner)
        remaining = [p for p in premises if p.id != premise_id]
        if len(remaining) == len(premises):
            return False
        self._save_premises(owner, remaining)
        return True

    # ------------------------------------------------------------------
    # Export / import
    # ------------------------------------------------------------------

    def export_data(self, owner: str) -> dict[str, list[dict]]:
        return {
            "jokes": [j.model_dump(mode="json", by_alias=True) for j in self.list_jokes(owner)],
            "routines": [r.model_dump(mode="json", by_alias=True) for r in self.list_routines(owner)],
            "premises": [p.model_dump(mode="json", by_alias=True) for p in self.list_premises(owner)],
        }

    def import_data(self, owner: str, data: dict[str, Any]) -> dict[str, int]:
        """Merge exported data. Records whose id already exists are skipped.

        Everything is validated before anything is written, so a bad record
        leaves storage untouched.
        """
        new_jokes = [Joke.model_validate(j) for j in data.get("jokes", [])]
        new_routines = [Routine.model_validate(r) for r in data.get("routines", [])]
        new_premises = [Premise.model_validate(p) for p in data.get("premises", [])]

        jokes = self.list_jokes(owner)
        seen = {j.id for j in jokes}
        added_jokes = 0
        for joke in new_jokes:
            if joke.id not in seen:
                jokes.append(joke)
                seen.add(joke.id)
                added_jokes += 1

        routines = self._load_routines(owner)
        seen_routines = {r.id for r in routines}
        added_routines = 0
        for routine in new_routines:
            if routine.id not in seen_routines:
                routine = routine.model_copy(update={
                    "joke_ids": [jid for jid in routine.joke_ids if jid in seen],
                })
                routines.append(routine)
                seen_routines.add(routine.id)
                added_routines += 1

        premises = self.list_premises(owner)
        seen_premises = {p.id for p in premises}
        added_premises = 0
        for premise in new_premises:
            if premise.id not in seen_premises:
                premises.append(premise)
                seen_premises.add(premise.id)
                added_premises += 1

        self._save_jokes(owner, jokes)
        self._save_routines(owner, routines)
        self._save_premises(owner, premises)
        logger.info(
            "Imported %d jokes, %d routines, %d premises for %s",
            added_jokes, added_routines, added_premises, owner,
        )
        return {"jokes": added_jokes, "routines": added_routines, "premises": added_premises}
