from __future__ import annotations

from typing import Any, Sequence

from fastapi import status


class AppError(Exception):
    """Base application error for unified handling."""

    code: str = "INTERNAL_ERROR"
    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    retryable: bool = False

    def __init__(
        self,
        message: str | None = None,
        *,
        reason: str | None = None,
        http_status: int | None = None,
        debug: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message or reason or "")
        self.reason = reason
        if http_status is not None:
            self.http_status = http_status
        self.debug = debug or {}


class InvalidInputError(AppError):
    """Raised when the chat request cannot be processed as given."""

    code = "INVALID_INPUT"
    http_status = status.HTTP_400_BAD_REQUEST


class SnapshotUnavailableError(AppError):
    """Raised when the catalog snapshot cannot be read in full from the ledger."""

    code = "SNAPSHOT_UNAVAILABLE"
    http_status = status.HTTP_502_BAD_GATEWAY


class LedgerReadError(SnapshotUnavailableError):
    """Raised when a single ledger call fails."""


class ProviderError(AppError):
    """Raised when the completion provider fails for a reason other than rate limiting."""

    code = "PROVIDER_ERROR"
    http_status = status.HTTP_502_BAD_GATEWAY


class ModelRateLimitedError(ProviderError):
    """Raised when the provider rejects a call for one model with a rate-limit signal."""

    code = "MODEL_RATE_LIMITED"
    http_status = status.HTTP_503_SERVICE_UNAVAILABLE
    retryable = True

    def __init__(self, model_id: str, message: str | None = None, **kwargs: Any) -> None:
        super().__init__(message or f"model {model_id} is rate limited", reason="rate_limited", **kwargs)
        self.model_id = model_id


class AllModelsRateLimitedError(AppError):
    """Raised when every model in the cascade was rate limited."""

    code = "ALL_MODELS_RATE_LIMITED"
    http_status = status.HTTP_503_SERVICE_UNAVAILABLE
    retryable = True

    def __init__(self, attempted: Sequence[str]) -> None:
        super().__init__(
            "All models are rate limited. Please try again later.",
            reason="all_models_rate_limited",
            debug={"attempted_models": list(attempted)},
        )
        self.attempted = list(attempted)


class FollowUpError(AppError):
    """Raised when the search-grounded follow-up completion fails."""

    code = "FOLLOW_UP_FAILED"
    http_status = status.HTTP_502_BAD_GATEWAY


class SearchUnavailableError(AppError):
    """Raised when the web search provider is unreachable or not configured."""

    code = "SEARCH_UNAVAILABLE"
    http_status = status.HTTP_502_BAD_GATEWAY
