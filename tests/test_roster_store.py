from __future__ import annotations

import itertools
import threading
import time
import sys
from pathlib import Path

import pytest

# Make the roster package importable during local test runs
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from roster.domain.students import StudentFields  # noqa: E402
from roster.repositories.kv_store import MemoryStore, StorageError  # noqa: E402
from roster.repositories.roster_storage import RosterStorage  # noqa: E402
from roster.services.roster_store import RosterStore, new_record_id  # noqa: E402


class CountingStore(MemoryStore):
    def __init__(self, initial=None):
        super().__init__(initial)
        self.writes = 0
        self.fail_writes = False

    def set(self, key, value):
        if self.fail_writes:
            raise StorageError("read-only")
        self.writes += 1
        super().set(key, value)


def _fields(sid: str = "1001", name: str = "Ann Lee") -> StudentFields:
    return StudentFields(name=name, sid=sid, email="a@b.com", contact="1234567890")


@pytest.fixture()
def kv():
    return CountingStore()


@pytest.fixture()
def store(kv):
    return RosterStore(RosterStorage(kv))


def test_add_appends_and_persists(store, kv):
    first = store.add(_fields("1001"))
    second = store.add(_fields("1002"))
    assert [r.id for r in store.records] == [first.id, second.id]
    assert kv.writes == 2
    assert RosterStorage(kv).load() == list(store.records)


def test_new_store_loads_existing_slot(store, kv):
    record = store.add(_fields())
    reloaded = RosterStore(RosterStorage(kv))
    assert reloaded.records == (record,)


def test_ids_are_unique_even_if_factory_repeats(kv):
    ids = itertools.chain(["dup", "dup", "dup"], (f"id{n}" for n in itertools.count()))
    store = RosterStore(RosterStorage(kv), id_factory=lambda: next(ids))
    a = store.add(_fields("1"))
    b = store.add(_fields("2"))
    assert a.id == "dup"
    assert b.id != "dup"


def test_default_ids_are_uuid_hex():
    value = new_record_id()
    assert len(value) == 32
    int(value, 16)


def test_update_preserves_id_and_position(store):
    a = store.add(_fields("1001"))
    b = store.add(_fields("1002"))
    updated = store.update(a.id, _fields("1001", name="Ann M Lee"))
    assert updated is not None
    assert updated.id == a.id
    assert [r.id for r in store.records] == [a.id, b.id]
    assert store.find_by_id(a.id).name == "Ann M Lee"


def test_update_unknown_id_is_silent_noop(store, kv):
    store.add(_fields())
    writes = kv.writes
    assert store.update("missing", _fields("9")) is None
    assert kv.writes == writes


def test_delete_requires_confirmation(store, kv):
    record = store.add(_fields())
    writes = kv.writes
    assert store.delete(record.id, lambda: False) is False
    assert len(store) == 1
    assert kv.writes == writes

    assert store.delete(record.id, lambda: True) is True
    assert len(store) == 0
    assert kv.writes == writes + 1


def test_delete_unknown_id_does_not_write(store, kv):
    store.add(_fields())
    writes = kv.writes
    assert store.delete("missing", lambda: True) is False
    assert kv.writes == writes


def test_duplicate_sid_check_honours_exclusion(store):
    record = store.add(_fields("1001"))
    assert store.has_duplicate_sid("1001")
    assert not store.has_duplicate_sid("1001", excluding_id=record.id)
    assert not store.has_duplicate_sid("2002")


def test_listeners_see_every_mutation(store):
    seen = []
    unsubscribe = store.subscribe(lambda records: seen.append(len(records)))
    record = store.add(_fields())
    store.update(record.id, _fields(name="Bo"))
    store.delete(record.id, lambda: True)
    unsubscribe()
    store.add(_fields())
    assert seen == [1, 1, 0]


def test_failed_write_leaves_memory_unchanged(store, kv):
    record = store.add(_fields())
    kv.fail_writes = True
    with pytest.raises(StorageError):
        store.add(_fields("1002"))
    with pytest.raises(StorageError):
        store.delete(record.id, lambda: True)
    assert store.records == (record,)


def test_edit_marker(store):
    record = store.add(_fields())
    assert store.begin_edit("missing") is None
    assert store.editing_id is None
    assert store.begin_edit(record.id) == record
    assert store.editing_id == record.id
    store.end_edit()
    assert store.editing_id is None


def test_concurrent_adds_are_serialized():
    class SlowStore(MemoryStore):
        def set(self, key, value):
            time.sleep(0.05)
            super().set(key, value)

    kv = SlowStore()
    store = RosterStore(RosterStorage(kv))
    threads = [threading.Thread(target=store.add, args=(_fields(sid),)) for sid in ("1", "2", "3")]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(r.sid for r in store.records) == ["1", "2", "3"]
    assert sorted(r.sid for r in RosterStorage(kv).load()) == ["1", "2", "3"]
