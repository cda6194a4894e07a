from __future__ import annotations

import asyncio

import pytest

from fakes import ETHER, BrokenLedger, FakeLedger, make_entry
from shop_assistant.services.catalog_reader import read_catalog_snapshot
from shop_assistant.services.errors import SnapshotUnavailableError


def test_snapshot_buckets_entries_and_skips_empty_slots(ledger):
    snapshot = asyncio.run(read_catalog_snapshot(ledger))

    assert ledger.reads == [1, 2, 3, 4, 5, 6]
    assert list(snapshot.categories) == ["electronics", "clothing", "toys"]
    assert [entry.name for entry in snapshot.categories["electronics"]] == ["Camera", "Drone"]
    assert [entry.id for entry in snapshot.categories["clothing"]] == [3, 4]
    assert len(snapshot) == 5


def test_unknown_categories_follow_known_ones():
    ledger = FakeLedger(
        {
            1: make_entry(1, "Novel", "books", ETHER, 3, 2),
            2: make_entry(2, "Camera", "electronics", ETHER, 4, 1),
            3: make_entry(3, "Lamp", "home", ETHER, 2, 9),
        }
    )

    snapshot = asyncio.run(read_catalog_snapshot(ledger))

    assert list(snapshot.categories) == ["electronics", "clothing", "toys", "books", "home"]
    assert snapshot.categories["clothing"] == []


def test_single_read_failure_fails_whole_snapshot(catalog_entries):
    ledger = FakeLedger(catalog_entries, fail_on={3})

    with pytest.raises(SnapshotUnavailableError):
        asyncio.run(read_catalog_snapshot(ledger))

    assert ledger.reads == [1, 2, 3]


def test_unreachable_ledger_is_snapshot_unavailable():
    with pytest.raises(SnapshotUnavailableError) as exc_info:
        asyncio.run(read_catalog_snapshot(BrokenLedger()))

    assert isinstance(exc_info.value.__cause__, ConnectionError)


def test_zero_count_gives_empty_snapshot_not_failure():
    snapshot = asyncio.run(read_catalog_snapshot(FakeLedger({}, count=0)))

    assert len(snapshot) == 0
