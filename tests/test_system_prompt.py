from __future__ import annotations

import asyncio

from fakes import ETHER, BrokenLedger, FakeLedger, make_entry
from shop_assistant.models import CatalogSnapshot
from shop_assistant.prompts.system_prompt import (
    FALLBACK_SYSTEM_PROMPT,
    build_system_prompt,
    render_entry,
)
from shop_assistant.services.prompt_composer import PromptComposer


def test_entry_line_has_price_stars_and_stock():
    line = render_entry(make_entry(2, "Drone", "electronics", 2 * ETHER, 5, 6))

    assert line == "- Drone (2 ETH) - Đánh giá ⭐⭐⭐⭐⭐, còn 6 sản phẩm"


def test_out_of_stock_entry_is_marked():
    line = render_entry(make_entry(4, "Watch", "clothing", 5 * ETHER // 4, 4, 0))

    assert "(1.25 ETH)" in line
    assert line.endswith("HẾT HÀNG")
    assert "còn" not in line


def test_fractional_prices_have_no_trailing_zeros():
    assert "(0.15 ETH)" in render_entry(make_entry(9, "Robot Set", "toys", 15 * ETHER // 100, 3, 12))
    assert "(0 ETH)" in render_entry(make_entry(10, "Free Sticker", "toys", 0, 1, 1))


def test_live_prompt_lists_catalog_and_action_grammar(ledger):
    prompt = asyncio.run(PromptComposer(ledger).compose())

    assert "📱 Electronics & Gadgets:" in prompt
    assert "👔 Clothing & Jewelry:" in prompt
    assert "🎮 Toys & Gaming:" in prompt
    assert "- Camera (1 ETH) - Đánh giá ⭐⭐⭐⭐, còn 10 sản phẩm" in prompt
    assert "Hướng dẫn mua hàng" in prompt
    assert "Camera = 1, Drone = 2, Shoes = 3, Watch = 4, Robot Set = 6" in prompt
    for kind in ("VIEW_PRODUCT", "VIEW_CATEGORY", "GO_HOME", "GO_CART", "WEB_SEARCH"):
        assert f"[ACTION:{kind}" in prompt
    assert "WEB_SEARCH_RESULTS" not in prompt
    assert "[ACTION:VIEW_PRODUCT:1]" in prompt


def test_snapshot_failure_yields_exact_fallback_prompt(metrics):
    prompt = asyncio.run(PromptComposer(BrokenLedger(), metrics=metrics).compose())

    assert prompt == FALLBACK_SYSTEM_PROMPT
    assert "[ACTION:" not in prompt
    assert "ACTION" not in prompt
    assert metrics.snapshot().snapshot_fallbacks == 1


def test_partial_read_failure_also_falls_back(catalog_entries, metrics):
    prompt = asyncio.run(PromptComposer(FakeLedger(catalog_entries, fail_on={6}), metrics=metrics).compose())

    assert prompt == FALLBACK_SYSTEM_PROMPT


def test_empty_category_still_gets_header():
    snapshot = CatalogSnapshot.from_entries([make_entry(1, "Camera", "electronics", ETHER, 4, 10)])

    prompt = build_system_prompt(snapshot)

    assert "🎮 Toys & Gaming:\n- (chưa có sản phẩm)" in prompt
    assert "(electronics)" in prompt


def test_extra_category_gets_generated_header():
    snapshot = CatalogSnapshot.from_entries([make_entry(1, "Lamp", "home_decor", ETHER, 2, 1)])

    assert "🛍️ Home Decor:" in build_system_prompt(snapshot)
