from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Protocol, Sequence

import openai
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI
from langsmith import traceable

from ..config import Settings
from ..models import ConversationMessage
from .errors import ModelRateLimitedError, ProviderError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SamplingConfig:
    temperature: float = 0.7
    max_tokens: int = 500
    top_p: float = 1.0


@dataclass
class CompletionResult:
    text: str
    model_id: str
    usage: Dict[str, int] = field(default_factory=dict)


class CompletionProvider(Protocol):
    async def complete(
        self,
        messages: Sequence[ConversationMessage],
        model_id: str,
        sampling: SamplingConfig,
    ) -> CompletionResult: ...


LLMFactory = Callable[[str, SamplingConfig], BaseChatModel]


class ChatCompletionProvider:
    """LangChain chat client bound to an OpenAI-compatible endpoint (Groq by default).

    One chat model instance is kept per (model, sampling) pair. SDK retries are
    disabled so that rate limiting surfaces immediately to the cascade.
    """

    def __init__(self, settings: Settings, *, llm_factory: LLMFactory | None = None) -> None:
        self._settings = settings
        self._llm_factory = llm_factory or self._build_llm
        self._llms: Dict[tuple[str, SamplingConfig], BaseChatModel] = {}

    def _build_llm(self, model_id: str, sampling: SamplingConfig) -> BaseChatModel:
        if not self._settings.groq_api_key:
            raise ProviderError("GROQ_API_KEY is not configured", reason="provider_not_configured")
        return ChatOpenAI(
            model=model_id,
            api_key=self._settings.groq_api_key,
            base_url=self._settings.groq_base_url,
            temperature=sampling.temperature,
            max_tokens=sampling.max_tokens,
            top_p=sampling.top_p,
            timeout=self._settings.http_timeout_seconds,
            max_retries=0,
        )

    def _get_llm(self, model_id: str, sampling: SamplingConfig) -> BaseChatModel:
        key = (model_id, sampling)
        if key not in self._llms:
            self._llms[key] = self._llm_factory(model_id, sampling)
        return self._llms[key]

    @traceable(run_type="llm", name="chat_completion")
    async def complete(
        self,
        messages: Sequence[ConversationMessage],
        model_id: str,
        sampling: SamplingConfig,
    ) -> CompletionResult:
        llm = self._get_llm(model_id, sampling)
        try:
            message = await llm.ainvoke(to_langchain_messages(messages))
        except Exception as exc:
            if is_rate_limit_error(exc):
                raise ModelRateLimitedError(model_id) from exc
            logger.error("Completion failed model=%s error=%s", model_id, exc)
            raise ProviderError(
                f"completion failed on {model_id}: {exc}",
                reason="completion_failed",
                debug={"model": model_id},
            ) from exc
        usage = _extract_usage(message)
        logger.debug("Completion model=%s tokens=%s", model_id, usage)
        return CompletionResult(
            text=_extract_message_content(message),
            model_id=model_id,
            usage=usage,
        )


def is_rate_limit_error(exc: BaseException) -> bool:
    if isinstance(exc, (openai.RateLimitError, ModelRateLimitedError)):
        return True
    status_code = getattr(exc, "status_code", None)
    if status_code is None:
        status_code = getattr(getattr(exc, "response", None), "status_code", None)
    return status_code == 429


def to_langchain_messages(messages: Sequence[ConversationMessage]) -> List[BaseMessage]:
    result: List[BaseMessage] = []
    for item in messages:
        if item.role == "system":
            result.append(SystemMessage(content=item.content))
        elif item.role == "assistant":
            result.append(AIMessage(content=item.content))
        else:
            result.append(HumanMessage(content=item.content))
    return result


def _extract_usage(message: Any) -> Dict[str, int]:
    metadata = getattr(message, "response_metadata", {}) or {}
    usage = metadata.get("token_usage") or {}
    return {k: int(v) for k, v in usage.items() if isinstance(v, (int, float))}


def _extract_message_content(message: Any) -> str:
    content = getattr(message, "content", message)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        # OpenAI-style providers can return list[dict]; join textual segments
        return " ".join(
            part.get("text", "")
            for part in content
            if isinstance(part, dict) and part.get("type") == "text"
        )
    return str(content)


def configure_tracing(settings: Settings) -> bool:
    """Export LangSmith settings so @traceable runs are recorded. Returns True when enabled."""

    if not (settings.langsmith_api_key and settings.langsmith_tracing_v2):
        return False
    os.environ.setdefault("LANGCHAIN_TRACING_V2", "true")
    os.environ.setdefault("LANGSMITH_API_KEY", settings.langsmith_api_key)
    os.environ.setdefault("LANGSMITH_PROJECT", settings.langsmith_project or "shop-assistant-gateway")
    if settings.langsmith_endpoint:
        os.environ.setdefault("LANGSMITH_ENDPOINT", settings.langsmith_endpoint)
    return True
