from __future__ import annotations

import logging

from ..prompts.system_prompt import FALLBACK_SYSTEM_PROMPT, build_system_prompt
from .catalog_reader import read_catalog_snapshot
from .errors import SnapshotUnavailableError
from .ledger_client import CatalogLedger
from .metrics import MetricsService, get_metrics_service

logger = logging.getLogger(__name__)


class PromptComposer:
    """Builds the system prompt from a fresh catalog snapshot."""

    def __init__(self, ledger: CatalogLedger, *, metrics: MetricsService | None = None) -> None:
        self._ledger = ledger
        self._metrics = metrics or get_metrics_service()

    async def compose(self) -> str:
        try:
            snapshot = await read_catalog_snapshot(self._ledger)
        except SnapshotUnavailableError as exc:
            # Action tags are only advertised against a verified live catalog.
            logger.warning("Catalog snapshot unavailable, serving fallback prompt: %s", exc.__cause__ or exc)
            self._metrics.record_snapshot_fallback()
            return FALLBACK_SYSTEM_PROMPT
        return build_system_prompt(snapshot)
