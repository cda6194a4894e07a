"""Shared pytest fixtures for all tests."""

from __future__ import annotations

from typing import Dict, List

import pytest

from fakes import ETHER, FakeLedger, make_entry
from shop_assistant.models import CatalogEntry, SearchResult
from shop_assistant.services.metrics import MetricsService


@pytest.fixture
def metrics() -> MetricsService:
    return MetricsService()


@pytest.fixture
def catalog_entries() -> Dict[int, CatalogEntry | None]:
    return {
        1: make_entry(1, "Camera", "electronics", ETHER, 4, 10),
        2: make_entry(2, "Drone", "electronics", 2 * ETHER, 5, 6),
        3: make_entry(3, "Shoes", "clothing", ETHER // 4, 5, 3),
        4: make_entry(4, "Watch", "clothing", 5 * ETHER // 4, 4, 0),
        5: None,
        6: make_entry(6, "Robot Set", "toys", 15 * ETHER // 100, 3, 12),
    }


@pytest.fixture
def ledger(catalog_entries) -> FakeLedger:
    return FakeLedger(catalog_entries)


@pytest.fixture
def search_results() -> List[SearchResult]:
    return [
        SearchResult(title="ETH hôm nay", link="https://example.com/1", snippet="ETH tăng 3%"),
        SearchResult(title="Giá Ethereum", link="https://example.com/2", snippet="Giá ETH 3.000 USD"),
        SearchResult(title="Tin crypto", link="https://example.com/3", snippet="Thị trường ổn định"),
    ]
