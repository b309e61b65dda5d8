"""Tests for the file-backed local store."""

import hashlib

import pytest

from snap_merch.adapters.file_local_store import FileLocalStore
from snap_merch.services.local_store import InMemoryLocalStore, StorageCapacityError


def test_file_store_round_trip(tmp_path) -> None:
    store = FileLocalStore(tmp_path / "store")

    assert store.get_item("snapmerch_event_session:vendor/1") is None
    store.set_item("snapmerch_event_session:vendor/1", '{"id": "e"}')

    assert store.get_item("snapmerch_event_session:vendor/1") == '{"id": "e"}'
    digest = hashlib.sha256(b"snapmerch_event_session:vendor/1").hexdigest()
    assert [path.name for path in (tmp_path / "store").iterdir()] == [
        f"{digest}.json"
    ]

    store.remove_item("snapmerch_event_session:vendor/1")
    assert store.get_item("snapmerch_event_session:vendor/1") is None


def test_file_store_keeps_similar_keys_apart(tmp_path) -> None:
    store = FileLocalStore(tmp_path)
    store.set_item("snapmerch_event_session:a_b", "colon")
    store.set_item("snapmerch_event_session:a:b", "nested")
    store.set_item("snapmerch_event_session_a_b", "underscore")

    assert store.get_item("snapmerch_event_session:a_b") == "colon"
    assert store.get_item("snapmerch_event_session:a:b") == "nested"
    assert store.get_item("snapmerch_event_session_a_b") == "underscore"

    store.remove_item("snapmerch_event_session:a:b")
    assert store.get_item("snapmerch_event_session:a_b") == "colon"

def test_file_store_enforces_capacity(tmp_path) -> None:
    store = FileLocalStore(tmp_path, capacity_bytes=100)
    store.set_item("a", "x" * 60)

    with pytest.raises(StorageCapacityError):
        store.set_item("b", "y" * 60)

    store.set_item("a", "z" * 90)
    assert store.get_item("a") == "z" * 90


def test_memory_store_enforces_capacity() -> None:
    store = InMemoryLocalStore(capacity_bytes=20)
    store.set_item("k", "v" * 10)

    with pytest.raises(OSError):
        store.set_item("other", "v" * 10)

    store.remove_item("k")
    store.set_item("other", "v" * 10)
    assert store.get_item("other") == "v" * 10
