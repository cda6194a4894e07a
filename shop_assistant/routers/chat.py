from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any
from uuid import uuid4

from fastapi import APIRouter, Depends

from ..config import Settings, get_settings
from ..models import ChatRequest, ChatResponse
from ..services.completion_provider import ChatCompletionProvider, CompletionProvider, SamplingConfig
from ..services.ledger_client import CatalogLedger, LedgerClient
from ..services.metrics import MetricsService, get_metrics_service
from ..services.model_cascade import ModelCascade
from ..services.orchestrator import TurnOrchestrator
from ..services.prompt_composer import PromptComposer
from ..services.search_augmentation import SearchAugmentation
from ..services.web_search import SerpApiSearchClient, WebSearchProvider
from ..utils.logging import get_request_logger

router = APIRouter(prefix="/api/chat", tags=["chat"])
logger = logging.getLogger(__name__)


def get_ledger(settings: Settings = Depends(get_settings)) -> CatalogLedger:
    return LedgerClient(settings)


def get_completion_provider(settings: Settings = Depends(get_settings)) -> CompletionProvider:
    return ChatCompletionProvider(settings)


def get_search_provider(settings: Settings = Depends(get_settings)) -> WebSearchProvider:
    return SerpApiSearchClient(settings)


def get_metrics() -> MetricsService:
    return get_metrics_service()


def get_orchestrator(
    settings: Settings = Depends(get_settings),
    ledger: CatalogLedger = Depends(get_ledger),
    provider: CompletionProvider = Depends(get_completion_provider),
    search_provider: WebSearchProvider = Depends(get_search_provider),
    metrics: MetricsService = Depends(get_metrics),
) -> TurnOrchestrator:
    cascade = ModelCascade(provider, settings.chat_models, metrics=metrics)
    augmentation = SearchAugmentation(
        cascade=cascade,
        provider=provider,
        search_provider=search_provider,
        sampling=SamplingConfig(
            temperature=settings.chat_temperature,
            max_tokens=settings.chat_max_tokens,
            top_p=settings.chat_top_p,
        ),
        followup_sampling=SamplingConfig(
            temperature=settings.chat_temperature,
            max_tokens=settings.followup_max_tokens,
            top_p=settings.chat_top_p,
        ),
        max_results=settings.search_max_results,
        metrics=metrics,
    )
    return TurnOrchestrator(
        prompt_composer=PromptComposer(ledger, metrics=metrics),
        augmentation=augmentation,
        history_window=settings.history_window,
        metrics=metrics,
    )


@router.post("", response_model=ChatResponse)
async def post_chat(
    request: ChatRequest,
    orchestrator: TurnOrchestrator = Depends(get_orchestrator),
) -> ChatResponse:
    trace_id = request.trace_id or uuid4().hex
    request_logger = get_request_logger(logger, trace_id=trace_id)
    request_logger.info(
        "Incoming chat message text=%s history=%s",
        request.message,
        len(request.conversation_history),
    )
    turn = await orchestrator.run_turn(
        request.message,
        request.conversation_history,
        trace_id=trace_id,
    )
    return ChatResponse.from_turn(turn)


@router.get("/metrics")
async def get_chat_metrics(metrics: MetricsService = Depends(get_metrics)) -> dict[str, Any]:
    return asdict(metrics.snapshot())
