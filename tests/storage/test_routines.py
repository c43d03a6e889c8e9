"""Tests for routine, premise and export/import storage."""

import pytest

from tight_five.models import Joke, Premise, Routine
from tight_five.storage import Storage


def _joke(title: str, t: int = 60) -> Joke:
    return Joke(title=title, setup="s", punchline="p", estimated_time=t)


@pytest.fixture
def jokes(storage: Storage) -> list[Joke]:
    return [
        storage.create_joke("alice", _joke("A", 30)),
        storage.create_joke("alice", _joke("B", 45)),
        storage.create_joke("alice", _joke("C", 60)),
    ]


# ── Routines ─────────────────────────────────────────────


def test_create_routine_derives_current_time(storage: Storage, jokes):
    routine = storage.create_routine("alice", Routine(name="Set", joke_ids=[jokes[0].id, jokes[1].id]))
    assert routine.current_time == 75


def test_create_routine_drops_unknown_ids(storage: Storage, jokes):
    routine = storage.create_routine("alice", Routine(name="Set", joke_ids=[jokes[0].id, "ghost"]))
    assert routine.joke_ids == [jokes[0].id]


def test_current_time_tracks_joke_edits(storage: Storage, jokes):
    routine = storage.create_routine("alice", Routine(name="Set", joke_ids=[jokes[0].id]))
    storage.update_joke("alice", jokes[0].id, {"estimated_time": 90})
    assert storage.get_routine("alice", routine.id).current_time == 90


def test_update_routine(storage: Storage, jokes):
    routine = storage.create_routine("alice", Routine(name="Set"))
    updated = storage.update_routine("alice", routine.id, {
        "name": "Friday", "joke_ids": [jokes[2].id, "ghost"], "current_time": 9999,
    })
    assert updated.name == "Friday"
    assert updated.joke_ids == [jokes[2].id]
    assert updated.current_time == 60
    assert storage.update_routine("alice", "missing", {"name": "x"}) is None


def test_add_joke_to_routine(storage: Storage, jokes):
    routine = storage.create_routine("alice", Routine(name="Set", joke_ids=[jokes[0].id]))
    updated = storage.add_joke_to_routine("alice", routine.id, jokes[1].id, position=0)
    assert updated.joke_ids == [jokes[1].id, jokes[0].id]
    updated = storage.add_joke_to_routine("alice", routine.id, jokes[2].id)
    assert updated.joke_ids[-1] == jokes[2].id
    assert storage.add_joke_to_routine("alice", routine.id, "ghost") is None
    assert storage.add_joke_to_routine("alice", "missing", jokes[0].id) is None


def test_remove_joke_from_routine(storage: Storage, jokes):
    ids = [jokes[0].id, jokes[1].id, jokes[0].id]
    routine = storage.create_routine("alice", Routine(name="Set", joke_ids=ids))
    updated = storage.remove_joke_from_routine("alice", routine.id, jokes[0].id)
    assert updated.joke_ids == [jokes[1].id]
    assert storage.get_joke("alice", jokes[0].id) is not None


def test_move_routine_joke(storage: Storage, jokes):
    ids = [j.id for j in jokes]
    routine = storage.create_routine("alice", Routine(name="Set", joke_ids=ids))
    updated = storage.move_routine_joke("alice", routine.id, 0, 2)
    assert updated.joke_ids == [ids[1], ids[2], ids[0]]


def test_move_routine_joke_out_of_range(storage: Storage, jokes):
    routine = storage.create_routine("alice", Routine(name="Set", joke_ids=[jokes[0].id]))
    with pytest.raises(IndexError):
        storage.move_routine_joke("alice", routine.id, 5, 0)


def test_delete_routine_cascades_performances(storage: Storage, jokes):
    routine = storage.create_routine("alice", Routine(name="Set", joke_ids=[jokes[0].id]))
    storage.add_performance("alice", jokes[0].id, {
        "actual_time": 30, "outcome": "killed", "routine_id": routine.id,
    })
    storage.add_performance("alice", jokes[0].id, {"actual_time": 30, "outcome": "worked"})
    assert storage.delete_routine("alice", routine.id)
    perfs = storage.get_joke("alice", jokes[0].id).performances
    assert [p.outcome for p in perfs] == ["worked"]
    assert storage.get_routine("alice", routine.id) is None
    assert not storage.delete_routine("alice", routine.id)


# ── Premises ─────────────────────────────────────────────


def test_premises(storage: Storage):
    premise = storage.create_premise("alice", Premise(content="Self-checkout machines judge me"))
    assert storage.list_premises("alice") == [premise]
    assert storage.delete_premise("alice", premise.id)
    assert storage.list_premises("alice") == []
    assert not storage.delete_premise("alice", premise.id)


# ── Export / import ──────────────────────────────────────


def test_export_uses_camel_case(storage: Storage, jokes):
    storage.create_routine("alice", Routine(name="Set", joke_ids=[jokes[0].id]))
    data = storage.export_data("alice")
    assert len(data["jokes"]) == 3
    assert "estimatedTime" in data["jokes"][0]
    assert data["routines"][0]["jokeIds"] == [jokes[0].id]
    assert data["premises"] == []


def test_import_into_other_owner(storage: Storage, jokes):
    storage.create_routine("alice", Routine(name="Set", joke_ids=[jokes[0].id]))
    storage.create_premise("alice", Premise(content="idea"))
    counts = storage.import_data("bob", storage.export_data("alice"))
    assert counts == {"jokes": 3, "routines": 1, "premises": 1}
    assert [j.title for j in storage.list_jokes("bob")] == ["A", "B", "C"]
    assert storage.list_routines("bob")[0].current_time == 30


def test_import_skips_existing_ids(storage: Storage, jokes):
    counts = storage.import_data("alice", storage.export_data("alice"))
    assert counts == {"jokes": 0, "routines": 0, "premises": 0}
    assert len(storage.list_jokes("alice")) == 3


def test_import_drops_unknown_routine_jokes(storage: Storage):
    routine = Routine(name="Set", joke_ids=["ghost"]).model_dump(by_alias=True)
    storage.import_data("alice", {"routines": [routine]})
    assert storage.list_routines("alice")[0].joke_ids == []


def test_import_invalid_record_writes_nothing(storage: Storage):
    good = _joke("Good").model_dump(by_alias=True)
    bad = {"title": "Bad", "setup": "s", "punchline": "p", "energy": "extreme"}
    with pytest.raises(ValueError):
        storage.import_data("alice", {"jokes": [good, bad]})
    assert storage.list_jokes("alice") == []
