from __future__ import annotations

import logging
import time
from typing import Sequence

from langsmith import traceable

from ..models import ConversationMessage, TurnResult
from ..utils.logging import get_request_logger
from .errors import InvalidInputError
from .metrics import MetricsService, get_metrics_service
from .prompt_composer import PromptComposer
from .search_augmentation import SearchAugmentation

logger = logging.getLogger(__name__)


class TurnOrchestrator:
    """Runs one chat turn: prompt from live catalog, completion, actions, optional search round."""

    def __init__(
        self,
        *,
        prompt_composer: PromptComposer,
        augmentation: SearchAugmentation,
        history_window: int = 10,
        metrics: MetricsService | None = None,
    ) -> None:
        self._prompt_composer = prompt_composer
        self._augmentation = augmentation
        self._history_window = max(history_window, 0)
        self._metrics = metrics or get_metrics_service()

    def trim_history(self, history: Sequence[ConversationMessage]) -> list[ConversationMessage]:
        if self._history_window == 0:
            return []
        return list(history)[-self._history_window:]

    @traceable(run_type="chain", name="chat_turn")
    async def run_turn(
        self,
        message: str,
        history: Sequence[ConversationMessage] = (),
        *,
        trace_id: str | None = None,
    ) -> TurnResult:
        if not message or not message.strip():
            raise InvalidInputError("Message is required", reason="empty_message")

        request_logger = get_request_logger(logger, trace_id=trace_id)
        start = time.perf_counter()
        window = self.trim_history(history)
        if len(window) < len(history):
            request_logger.info("History truncated from %s to %s messages", len(history), len(window))

        try:
            system_prompt = await self._prompt_composer.compose()
            reply = await self._augmentation.run(
                system_prompt=system_prompt,
                history=window,
                message=message,
            )
        except Exception:
            self._metrics.record_turn(failed=True)
            raise

        latency_ms = (time.perf_counter() - start) * 1000
        self._metrics.record_turn()
        self._metrics.record_response_latency(latency_ms)
        request_logger.info(
            "Turn completed model=%s actions=%s latency_ms=%.1f",
            reply.model_id,
            [action.type for action in reply.actions],
            latency_ms,
        )
        return TurnResult(
            text=reply.text,
            actions=reply.actions,
            model_used=reply.model_id,
            usage=reply.usage,
        )
