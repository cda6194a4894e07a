from __future__ import annotations

import logging
import traceback
import uuid
from typing import Any, Tuple

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .errors import AppError

logger = logging.getLogger(__name__)

SAFE_ERROR_TEXT = "Xin lỗi, tôi không thể trả lời lúc này. Vui lòng thử lại sau."


def _detail_to_reason(detail: Any) -> str:
    if isinstance(detail, dict):
        return detail.get("reason") or detail.get("message") or "unknown"
    if isinstance(detail, list):
        return detail[0] if detail else "unknown"
    if detail:
        return str(detail)
    return "unknown"


def _format_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "request_validation_error"
    first_error = errors[0]
    loc = ".".join(str(part) for part in first_error.get("loc", []) if part is not None)
    msg = first_error.get("msg") or "validation_error"
    return f"{loc}: {msg}" if loc else msg


def map_exception_to_error_code(exc: Exception) -> Tuple[str, str, int]:
    """Return normalized error code, reason, and HTTP status for the given exception."""

    if isinstance(exc, AppError):
        return (
            exc.code,
            exc.reason or str(exc) or exc.code.lower(),
            exc.http_status,
        )

    if isinstance(exc, RequestValidationError):
        return ("INVALID_INPUT", _format_validation_error(exc), status.HTTP_422_UNPROCESSABLE_ENTITY)

    if isinstance(exc, HTTPException):
        status_code = exc.status_code or status.HTTP_500_INTERNAL_SERVER_ERROR
        reason = _detail_to_reason(exc.detail)
        if status.HTTP_400_BAD_REQUEST <= status_code < status.HTTP_500_INTERNAL_SERVER_ERROR:
            return ("INVALID_INPUT", reason or "bad_request", status_code)
        if status_code in {
            status.HTTP_502_BAD_GATEWAY,
            status.HTTP_503_SERVICE_UNAVAILABLE,
            status.HTTP_504_GATEWAY_TIMEOUT,
        }:
            return ("UPSTREAM_UNAVAILABLE", reason or "upstream_error", status_code)
        return ("INTERNAL_ERROR", reason or "internal_error", status_code)

    return (
        "INTERNAL_ERROR",
        exc.__class__.__name__,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def build_error_response(
    *,
    error_code: str,
    reason: str,
    status_code: int,
    retryable: bool = False,
    debug_payload: dict[str, Any] | None = None,
) -> JSONResponse:
    content: dict[str, Any] = {
        "error": {
            "code": error_code,
            "reason": reason,
            "message": SAFE_ERROR_TEXT,
            "retryable": retryable,
        },
        "meta": debug_payload or {},
    }
    headers = {"Retry-After": "30"} if retryable else None
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def new_trace_id() -> str:
    return uuid.uuid4().hex


def log_exception(
    *,
    request: Request,
    exc: Exception,
    trace_id: str,
    handled: bool,
) -> None:
    log_message = "Handled application error" if handled else "Unhandled application error"
    log_method = logger.warning if handled else logger.exception
    log_method(
        "%s trace_id=%s path=%s reason=%s",
        log_message,
        trace_id,
        request.url.path,
        getattr(exc, "reason", None) or exc.__class__.__name__,
        exc_info=exc if not handled else None,
    )
    if handled:
        logger.debug(
            "Full traceback for trace_id=%s\n%s",
            trace_id,
            "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
        )
