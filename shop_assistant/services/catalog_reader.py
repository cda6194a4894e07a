from __future__ import annotations

import logging
import time

from ..models import CatalogSnapshot
from .errors import SnapshotUnavailableError
from .ledger_client import CatalogLedger

logger = logging.getLogger(__name__)


async def read_catalog_snapshot(ledger: CatalogLedger) -> CatalogSnapshot:
    """Read every listing 1..N from the ledger and bucket it by category.

    Reads are issued one after another. A failure anywhere aborts the whole
    snapshot with SnapshotUnavailableError; an empty slot (id 0) is skipped.
    """

    start = time.perf_counter()
    try:
        total = await ledger.get_entry_count()
        entries = []
        for entry_id in range(1, total + 1):
            entry = await ledger.get_entry(entry_id)
            if entry is not None:
                entries.append(entry)
    except SnapshotUnavailableError:
        raise
    except Exception as exc:
        raise SnapshotUnavailableError(
            "catalog snapshot unavailable", reason="snapshot_unavailable"
        ) from exc

    snapshot = CatalogSnapshot.from_entries(entries)
    logger.info(
        "catalog.snapshot slots=%s entries=%s latency_ms=%.1f",
        total,
        len(snapshot),
        (time.perf_counter() - start) * 1000,
    )
    return snapshot
