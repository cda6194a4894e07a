from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Protocol

import httpx

from ..config import Settings
from ..models import SearchResult
from .errors import SearchUnavailableError

logger = logging.getLogger(__name__)


class WebSearchProvider(Protocol):
    async def search(self, query: str) -> List[SearchResult]: ...


class SerpApiSearchClient:
    """Google organic results through SerpApi."""

    def __init__(
        self,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    async def search(self, query: str) -> List[SearchResult]:
        if not self._settings.serpapi_key:
            raise SearchUnavailableError("SERPAPI_KEY not configured", reason="search_not_configured")

        limit = self._settings.search_max_results
        params: Dict[str, Any] = {
            "q": query,
            "api_key": self._settings.serpapi_key,
            "engine": "google",
            "num": limit,
            "hl": self._settings.search_language,
        }
        timeout = httpx.Timeout(self._settings.http_timeout_seconds)
        start = time.perf_counter()
        async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
            try:
                response = await client.get(self._settings.serpapi_url, params=params)
                response.raise_for_status()
                data = response.json()
            except httpx.HTTPError as exc:
                logger.error("SerpApi error query=%r error=%s", query, exc)
                raise SearchUnavailableError(str(exc), reason="search_failed") from exc
            except ValueError as exc:
                logger.error("SerpApi returned a non-JSON body query=%r", query)
                raise SearchUnavailableError("invalid search response", reason="search_failed") from exc

        if not isinstance(data, dict):
            logger.error("SerpApi returned a non-object body query=%r", query)
            raise SearchUnavailableError("invalid search response", reason="search_failed")
        organic = data.get("organic_results") or []
        if not isinstance(organic, list):
            logger.error("SerpApi organic_results is not a list query=%r", query)
            raise SearchUnavailableError("invalid search response", reason="search_failed")
        results = [_to_result(item) for item in organic[:limit] if isinstance(item, dict)]
        logger.info(
            "serpapi.search results=%s latency_ms=%.1f",
            len(results),
            (time.perf_counter() - start) * 1000,
        )
        return results


def _to_result(item: Dict[str, Any]) -> SearchResult:
    return SearchResult(
        title=str(item.get("title") or ""),
        link=str(item.get("link") or ""),
        snippet=str(item.get("snippet") or ""),
    )
