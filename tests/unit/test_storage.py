"""
Unit tests for the in-memory storage module.

Covers:
    - SequenceAllocator (first value, per-name counters, concurrent callers)
    - insert (new, duplicate active code, reuse after soft delete)
    - find_active_by_code / find_active_by_id
    - increment_visit_count (valid, unknown, concurrent)
    - soft_delete, update_original_url
    - owner listing order and counts
"""

from concurrent.futures import ThreadPoolExecutor

import pytest

from shortlink.errors import DuplicateCode
from shortlink.storage.models import ShortUrlRecord
from shortlink.storage.storage import SequenceAllocator, Storage


def _record(code="000001", url="https://example.com", owner=None):
    return ShortUrlRecord(original_url=url, code=code, owner_id=owner)


def test_allocator_starts_at_one_and_increments(allocator):
    assert allocator.next_value("short_url") == 1
    assert allocator.next_value("short_url") == 2
    assert allocator.next_value("short_url") == 3


def test_allocator_counters_are_per_name(allocator):
    assert allocator.next_value("a") == 1
    assert allocator.next_value("b") == 1
    assert allocator.next_value("a") == 2


def test_allocator_concurrent_values_are_contiguous():
    allocator = SequenceAllocator()
    allocator.next_value("short_url")  # previous value: 1

    with ThreadPoolExecutor(max_workers=16) as ex:
        values = list(ex.map(lambda _: allocator.next_value("short_url"), range(500)))

    assert len(set(values)) == 500
    assert sorted(values) == list(range(2, 502))


def test_insert_and_find(storage):
    saved = storage.insert(_record())
    found = storage.find_active_by_code("000001")
    assert found is not None
    assert found.id == saved.id
    assert found.original_url == "https://example.com"
    assert found.visit_count == 0
    assert storage.find_active_by_id(saved.id).code == "000001"


def test_find_missing_returns_none(storage):
    assert storage.find_active_by_code("zzzzzz") is None
    assert storage.find_active_by_id("nope") is None


def test_insert_duplicate_active_code_rejected(storage):
    storage.insert(_record(url="https://one.com"))
    with pytest.raises(DuplicateCode):
        storage.insert(_record(url="https://two.com"))
    assert storage.find_active_by_code("000001").original_url == "https://one.com"


def test_soft_deleted_code_can_be_reused(storage):
    first = storage.insert(_record(url="https://one.com"))
    assert storage.soft_delete(first.id) is True
    second = storage.insert(_record(url="https://two.com"))
    assert storage.find_active_by_code("000001").id == second.id


def test_returned_records_are_detached(storage):
    saved = storage.insert(_record())
    saved.visit_count = 99
    found = storage.find_active_by_code("000001")
    found.original_url = "https://mutated.example"
    again = storage.find_active_by_code("000001")
    assert again.visit_count == 0
    assert again.original_url == "https://example.com"


def test_increment_visit_count(storage):
    saved = storage.insert(_record())
    assert storage.increment_visit_count(saved.id) is True
    assert storage.increment_visit_count(saved.id) is True
    assert storage.find_active_by_code("000001").visit_count == 2


def test_increment_unknown_id(storage):
    assert storage.increment_visit_count("missing") is False


def test_concurrent_increments_are_not_lost(storage):
    saved = storage.insert(_record())
    with ThreadPoolExecutor(max_workers=16) as ex:
        results = list(ex.map(lambda _: storage.increment_visit_count(saved.id), range(1000)))
    assert all(results)
    assert storage.find_active_by_code("000001").visit_count == 1000


def test_soft_delete_hides_record_but_keeps_row(storage):
    saved = storage.insert(_record())
    assert storage.soft_delete(saved.id) is True
    assert storage.find_active_by_code("000001") is None
    assert storage.find_active_by_id(saved.id) is None
    row = storage.records[saved.id]
    assert row.deleted_at is not None
    assert row.status == "deleted"


def test_soft_delete_twice(storage):
    saved = storage.insert(_record())
    assert storage.soft_delete(saved.id) is True
    assert storage.soft_delete(saved.id) is False
    assert storage.soft_delete("missing") is False


def test_update_original_url(storage):
    saved = storage.insert(_record())
    updated = storage.update_original_url(saved.id, "https://new.example")
    assert updated.original_url == "https://new.example"
    assert updated.code == saved.code
    assert updated.updated_at >= saved.updated_at
    assert storage.find_active_by_code("000001").original_url == "https://new.example"


def test_update_deleted_record_returns_none(storage):
    saved = storage.insert(_record())
    storage.soft_delete(saved.id)
    assert storage.update_original_url(saved.id, "https://new.example") is None


def test_list_and_count_by_owner():
    storage = Storage()
    for i in range(1, 6):
        storage.insert(_record(code=f"00000{i}", url=f"https://x.com/{i}", owner="alice"))
    storage.insert(_record(code="00000a", owner="bob"))
    deleted = storage.list_active_by_owner("alice", limit=1)[0]
    storage.soft_delete(deleted.id)

    assert storage.count_active_by_owner("alice") == 4
    assert storage.count_active_by_owner("bob") == 1
    assert storage.count_active_by_owner("carol") == 0

    page = storage.list_active_by_owner("alice", offset=0, limit=10)
    assert [r.code for r in page] == ["000004", "000003", "000002", "000001"]
    assert [r.code for r in storage.list_active_by_owner("alice", offset=1, limit=2)] == ["000003", "000002"]
