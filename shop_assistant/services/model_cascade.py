from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from ..models import ConversationMessage
from .completion_provider import CompletionProvider, CompletionResult, SamplingConfig
from .errors import AllModelsRateLimitedError, ModelRateLimitedError
from .metrics import MetricsService, get_metrics_service

logger = logging.getLogger(__name__)


@dataclass
class CascadeResult:
    completion: CompletionResult
    model_id: str


class ModelCascade:
    """Tries models strictly in order, moving on only when one is rate limited.

    Any other provider failure aborts the cascade: a malformed request will not
    be fixed by a different model. Calls are never issued in parallel.
    """

    def __init__(
        self,
        provider: CompletionProvider,
        model_ids: Sequence[str],
        *,
        metrics: MetricsService | None = None,
    ) -> None:
        if not model_ids:
            raise ValueError("model cascade requires at least one model id")
        self._provider = provider
        self._model_ids = tuple(model_ids)
        self._metrics = metrics or get_metrics_service()

    @property
    def model_ids(self) -> tuple[str, ...]:
        return self._model_ids

    async def complete(
        self,
        messages: Sequence[ConversationMessage],
        sampling: SamplingConfig,
    ) -> CascadeResult:
        attempted: list[str] = []
        for model_id in self._model_ids:
            attempted.append(model_id)
            try:
                completion = await self._provider.complete(messages, model_id, sampling)
            except ModelRateLimitedError:
                logger.warning("Rate limit on %s, trying next model...", model_id)
                self._metrics.record_rate_limited()
                continue
            self._metrics.record_llm_call(model_id=model_id, token_usage=completion.usage)
            logger.info("Using model: %s", model_id)
            return CascadeResult(completion=completion, model_id=model_id)

        self._metrics.record_cascade_exhausted()
        logger.error("All models are rate limited attempted=%s", attempted)
        raise AllModelsRateLimitedError(attempted)
