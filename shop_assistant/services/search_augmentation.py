from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from ..models import Action, ConversationMessage, SearchResult
from ..prompts.search_prompt import build_search_summary_instruction
from .action_parser import extract_actions
from .completion_provider import CompletionProvider, SamplingConfig
from .errors import AppError, FollowUpError, SearchUnavailableError
from .metrics import MetricsService, get_metrics_service
from .model_cascade import ModelCascade
from .web_search import WebSearchProvider

logger = logging.getLogger(__name__)

EMPTY_REPLY_TEXT = "Xin lỗi, tôi không thể trả lời lúc này."


@dataclass
class AugmentedReply:
    text: str
    actions: List[Action]
    model_id: str
    usage: Dict[str, int] = field(default_factory=dict)
    search_results: List[SearchResult] | None = None


class SearchAugmentation:
    """Two-round completion: answer, then re-answer grounded in web results when asked to search."""

    def __init__(
        self,
        *,
        cascade: ModelCascade,
        provider: CompletionProvider,
        search_provider: WebSearchProvider,
        sampling: SamplingConfig,
        followup_sampling: SamplingConfig,
        max_results: int = 5,
        metrics: MetricsService | None = None,
    ) -> None:
        self._cascade = cascade
        self._provider = provider
        self._search_provider = search_provider
        self._sampling = sampling
        self._followup_sampling = followup_sampling
        self._max_results = max_results
        self._metrics = metrics or get_metrics_service()

    async def run(
        self,
        *,
        system_prompt: str,
        history: Sequence[ConversationMessage],
        message: str,
    ) -> AugmentedReply:
        base_messages = [
            ConversationMessage(role="system", content=system_prompt),
            *history,
            ConversationMessage(role="user", content=message),
        ]
        first = await self._cascade.complete(base_messages, self._sampling)
        raw_text = first.completion.text or EMPTY_REPLY_TEXT
        extracted = extract_actions(raw_text)
        reply = AugmentedReply(
            text=extracted.clean_text,
            actions=extracted.actions,
            model_id=first.model_id,
            usage=dict(first.completion.usage),
        )

        query = extracted.first_search_query()
        if query is None:
            return reply

        results = await self._search(query)
        if not results:
            self._metrics.record_search(executed=False)
            return reply
        self._metrics.record_search(executed=True)

        followup_messages = [
            *base_messages,
            ConversationMessage(role="assistant", content=raw_text),
            ConversationMessage(role="user", content=build_search_summary_instruction(results)),
        ]
        # Same model as round one, no cascade.
        try:
            followup = await self._provider.complete(followup_messages, first.model_id, self._followup_sampling)
        except Exception as exc:
            logger.error("Search follow-up failed model=%s: %s", first.model_id, exc)
            reason = exc.reason if isinstance(exc, AppError) and exc.reason else "follow_up_failed"
            raise FollowUpError(
                "search follow-up completion failed",
                reason=reason,
                debug={"model": first.model_id},
            ) from exc
        self._metrics.record_llm_call(model_id=first.model_id, token_usage=followup.usage)

        if followup.text:
            reply.text = extract_actions(followup.text).clean_text
        reply.actions = [Action.search_results(results)]
        reply.usage = _merge_usage(reply.usage, followup.usage)
        reply.search_results = results
        return reply

    async def _search(self, query: str) -> List[SearchResult]:
        try:
            results = await self._search_provider.search(query)
        except SearchUnavailableError as exc:
            logger.warning("Web search unavailable, keeping WEB_SEARCH action: %s", exc)
            return []
        return list(results)[: self._max_results]


def _merge_usage(first: Dict[str, int], second: Dict[str, int]) -> Dict[str, int]:
    merged = dict(first)
    for key, value in second.items():
        merged[key] = merged.get(key, 0) + value
    return merged
