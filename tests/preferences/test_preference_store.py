"""Tests for PreferenceStore."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from preferences import PreferenceStore
from shared_types import OutcomeAction


def test_get_missing_returns_none(pref_store):
    assert pref_store.get("nobody") is None


def test_get_or_create_persists_defaults(pref_store, db_path):
    created = pref_store.get_or_create("u1")
    assert created.confidence_threshold == 0.7
    assert PreferenceStore(db_path).get("u1") is not None


def test_mutate_returns_change_value(pref_store):
    prefs, value = pref_store.mutate("u1", lambda p: "ok")
    assert value == "ok"
    assert prefs.user_id == "u1"


def test_failed_mutation_writes_nothing(pref_store):
    pref_store.get_or_create("u1")

    def boom(p):
        p.confidence_threshold = 0.1
        raise RuntimeError("nope")

    with pytest.raises(RuntimeError):
        pref_store.mutate("u1", boom)
    assert pref_store.get("u1").confidence_threshold == 0.7


def test_delete(pref_store):
    pref_store.get_or_create("u1")
    assert pref_store.delete("u1")
    assert not pref_store.delete("u1")


def test_concurrent_mutations_do_not_lose_updates(db_path):
    """Each worker opens its own connection, like separate requests would."""
    PreferenceStore(db_path).get_or_create("u1")

    def accept(_):
        PreferenceStore(db_path).mutate(
            "u1", lambda p: p.record_outcome("todo", OutcomeAction.ACCEPTED, 0.8)
        )

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(accept, range(40)))

    prefs = PreferenceStore(db_path).get("u1")
    assert prefs.acceptance_patterns["todo"].accepted == 40
