from __future__ import annotations

import asyncio

import httpx
import pytest

from fakes import FakeProvider, FakeSearch, rate_limited
from shop_assistant.config import Settings
from shop_assistant.models import ConversationMessage, SearchResult
from shop_assistant.services.completion_provider import SamplingConfig
from shop_assistant.services.errors import FollowUpError, ProviderError
from shop_assistant.services.model_cascade import ModelCascade
from shop_assistant.services.search_augmentation import SearchAugmentation
from shop_assistant.services.web_search import SerpApiSearchClient

SEARCH_REPLY = "Để tôi tìm kiếm giá ETH mới nhất cho bạn... [ACTION:WEB_SEARCH:ethereum price today]"
HISTORY = [
    ConversationMessage(role="user", content="Chào"),
    ConversationMessage(role="assistant", content="Xin chào!"),
]


def _augmentation(provider, search, metrics, models=("A", "B")) -> SearchAugmentation:
    return SearchAugmentation(
        cascade=ModelCascade(provider, list(models), metrics=metrics),
        provider=provider,
        search_provider=search,
        sampling=SamplingConfig(max_tokens=500),
        followup_sampling=SamplingConfig(max_tokens=600),
        metrics=metrics,
    )


def _run(augmentation, message="Giá ETH hôm nay?"):
    return asyncio.run(augmentation.run(system_prompt="SYSTEM", history=HISTORY, message=message))


def test_no_search_action_returns_first_round_unchanged(metrics):
    provider = FakeProvider({"A": ["Đây là Drone! [ACTION:VIEW_PRODUCT:2]"]})
    search = FakeSearch()

    reply = _run(_augmentation(provider, search, metrics), message="Cho xem Drone")

    assert reply.text == "Đây là Drone!"
    assert [(a.type, a.payload) for a in reply.actions] == [("VIEW_PRODUCT", "2")]
    assert search.queries == []
    assert len(provider.calls) == 1
    roles = [m.role for m in provider.calls[0]["messages"]]
    assert roles == ["system", "user", "assistant", "user"]


def test_search_results_replace_actions(search_results, metrics):
    provider = FakeProvider({"A": [SEARCH_REPLY, "ETH đang ở mức 3.000 USD. [ACTION:GO_HOME]"]})
    search = FakeSearch(search_results)

    reply = _run(_augmentation(provider, search, metrics))

    assert search.queries == ["ethereum price today"]
    assert len(reply.actions) == 1
    assert reply.actions[0].type == "WEB_SEARCH_RESULTS"
    assert reply.actions[0].payload == search_results
    assert all(action.type != "WEB_SEARCH" for action in reply.actions)
    assert reply.text == "ETH đang ở mức 3.000 USD."
    assert reply.usage["total_tokens"] == 30
    assert metrics.snapshot().searches_executed == 1


def test_followup_reuses_model_and_embeds_results(search_results, metrics):
    provider = FakeProvider({"A": [rate_limited("A")], "B": [SEARCH_REPLY, "Tóm tắt"]})

    reply = _run(_augmentation(provider, FakeSearch(search_results), metrics))

    assert provider.models_called == ["A", "B", "B"]
    assert reply.model_id == "B"
    followup = provider.calls[-1]
    assert followup["sampling"].max_tokens == 600
    messages = followup["messages"]
    assert [m.role for m in messages] == ["system", "user", "assistant", "user", "assistant", "user"]
    assert messages[-2].content == SEARCH_REPLY
    assert "1. ETH hôm nay\n   ETH tăng 3%\n   Link: https://example.com/1" in messages[-1].content
    assert "3. Tin crypto" in messages[-1].content


def test_zero_results_keep_original_search_action(metrics):
    provider = FakeProvider({"A": [SEARCH_REPLY]})

    reply = _run(_augmentation(provider, FakeSearch([]), metrics))

    assert [(a.type, a.payload) for a in reply.actions] == [("WEB_SEARCH", "ethereum price today")]
    assert reply.text == "Để tôi tìm kiếm giá ETH mới nhất cho bạn..."
    assert len(provider.calls) == 1
    assert metrics.snapshot().searches_degraded == 1


def test_unavailable_search_keeps_original_search_action(metrics):
    provider = FakeProvider({"A": [SEARCH_REPLY]})

    reply = _run(_augmentation(provider, FakeSearch(unavailable=True), metrics))

    assert reply.actions[0].type == "WEB_SEARCH"
    assert len(provider.calls) == 1


def test_only_first_search_is_executed(search_results, metrics):
    text = "Tìm nhé [ACTION:WEB_SEARCH:giá ETH] [ACTION:WEB_SEARCH:tin crypto] [ACTION:VIEW_PRODUCT:1]"
    provider = FakeProvider({"A": [text, "Tóm tắt"]})
    search = FakeSearch(search_results)

    reply = _run(_augmentation(provider, search, metrics))

    assert search.queries == ["giá ETH"]
    assert [a.type for a in reply.actions] == ["WEB_SEARCH_RESULTS"]


def test_results_are_capped_at_five(metrics):
    many = [SearchResult(title=f"r{i}", link=f"https://e/{i}", snippet="s") for i in range(8)]
    provider = FakeProvider({"A": [SEARCH_REPLY, "Tóm tắt"]})

    reply = _run(_augmentation(provider, FakeSearch(many), metrics))

    assert len(reply.actions[0].payload) == 5


def test_rate_limited_followup_fails_without_fallback(search_results, metrics):
    provider = FakeProvider({"A": [SEARCH_REPLY, rate_limited("A")], "B": ["never"]})

    with pytest.raises(FollowUpError):
        _run(_augmentation(provider, FakeSearch(search_results), metrics))

    assert provider.models_called == ["A", "A"]


def test_followup_provider_error_is_surfaced(search_results, metrics):
    provider = FakeProvider({"A": [SEARCH_REPLY, ProviderError("boom")]})

    with pytest.raises(FollowUpError) as exc_info:
        _run(_augmentation(provider, FakeSearch(search_results), metrics))

    assert isinstance(exc_info.value.__cause__, ProviderError)


def test_empty_followup_text_keeps_first_round_text(search_results, metrics):
    provider = FakeProvider({"A": [SEARCH_REPLY, ""]})

    reply = _run(_augmentation(provider, FakeSearch(search_results), metrics))

    assert reply.text == "Để tôi tìm kiếm giá ETH mới nhất cho bạn..."
    assert reply.actions[0].type == "WEB_SEARCH_RESULTS"


def test_malformed_search_body_keeps_original_search_action(metrics):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"organic_results": {"error": "weird"}})

    search = SerpApiSearchClient(Settings(serpapi_key="serp-key"), transport=httpx.MockTransport(handler))
    provider = FakeProvider({"A": ["Tìm [ACTION:WEB_SEARCH:eth]"]})

    reply = _run(_augmentation(provider, search, metrics))

    assert [(a.type, a.payload) for a in reply.actions] == [("WEB_SEARCH", "eth")]
    assert reply.text == "Tìm"
    assert len(provider.calls) == 1
    assert metrics.snapshot().searches_degraded == 1


def test_followup_transport_error_is_wrapped(search_results, metrics):
    provider = FakeProvider({"A": [SEARCH_REPLY, httpx.ConnectError("down")]})

    with pytest.raises(FollowUpError) as exc_info:
        _run(_augmentation(provider, FakeSearch(search_results), metrics))

    assert exc_info.value.reason == "follow_up_failed"
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
