from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Protocol, Sequence

from web3 import AsyncHTTPProvider, AsyncWeb3

from ..config import Settings
from ..models import CatalogEntry
from .errors import LedgerReadError

logger = logging.getLogger(__name__)

# Only the read the gateway needs: items(uint256) on the marketplace contract.
MARKETPLACE_ABI: list[dict[str, Any]] = [
    {
        "inputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "name": "items",
        "outputs": [
            {"internalType": "uint256", "name": "id", "type": "uint256"},
            {"internalType": "string", "name": "name", "type": "string"},
            {"internalType": "string", "name": "category", "type": "string"},
            {"internalType": "string", "name": "image", "type": "string"},
            {"internalType": "uint256", "name": "cost", "type": "uint256"},
            {"internalType": "uint256", "name": "rating", "type": "uint256"},
            {"internalType": "uint256", "name": "stock", "type": "uint256"},
        ],
        "stateMutability": "view",
        "type": "function",
    }
]


class CatalogLedger(Protocol):
    async def get_entry(self, entry_id: int) -> CatalogEntry | None: ...

    async def get_entry_count(self) -> int: ...


class LedgerClient:
    """Read-only view of the marketplace contract."""

    def __init__(self, settings: Settings, *, contract: Any | None = None) -> None:
        self._settings = settings
        if contract is None:
            web3 = AsyncWeb3(
                AsyncHTTPProvider(
                    settings.blockchain_rpc_url,
                    request_kwargs={"timeout": settings.http_timeout_seconds},
                )
            )
            contract = web3.eth.contract(
                address=AsyncWeb3.to_checksum_address(settings.contract_address),
                abi=MARKETPLACE_ABI,
            )
        self._contract = contract

    async def get_entry(self, entry_id: int) -> CatalogEntry | None:
        """Return the listing stored under ``entry_id``, or None for a never-listed slot."""
        try:
            raw = await self._contract.functions.items(entry_id).call()
        except Exception as exc:
            logger.error("Ledger read failed for item_id=%s: %s", entry_id, exc)
            raise LedgerReadError(
                f"failed to read item {entry_id}", reason="ledger_read_failed"
            ) from exc
        return decode_item(raw)

    async def get_entry_count(self) -> int:
        if self._settings.catalog_size is not None:
            return self._settings.catalog_size
        return load_listing_count(self._settings.catalog_items_path)


def decode_item(raw: Sequence[Any]) -> CatalogEntry | None:
    """Convert the ``items()`` tuple into a CatalogEntry; id zero marks an empty slot."""
    try:
        item_id, name, category, image, cost, rating, stock = raw
    except (TypeError, ValueError) as exc:
        raise LedgerReadError("unexpected items() return shape", reason="ledger_decode_failed") from exc
    if int(item_id) == 0:
        return None
    try:
        return CatalogEntry(
            id=int(item_id),
            name=name,
            category=category,
            image=image or None,
            price_wei=int(cost),
            rating=int(rating),
            stock=int(stock),
        )
    except ValueError as exc:
        raise LedgerReadError(
            f"item {item_id} failed validation", reason="ledger_decode_failed"
        ) from exc


def load_listing_count(path: str) -> int:
    """Count listings in the deployment manifest (``{"items": [...]}``).

    The manifest is parsed once per modification time; later turns only stat it.
    """
    try:
        mtime_ns = Path(path).stat().st_mtime_ns
    except OSError as exc:
        raise LedgerReadError(
            f"cannot read listing manifest {path}", reason="catalog_size_unavailable"
        ) from exc
    return _count_listings(path, mtime_ns)


@lru_cache(maxsize=8)
def _count_listings(path: str, mtime_ns: int) -> int:
    try:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise LedgerReadError(
            f"cannot read listing manifest {path}", reason="catalog_size_unavailable"
        ) from exc
    items = payload.get("items") if isinstance(payload, dict) else payload
    if not isinstance(items, list):
        raise LedgerReadError(
            f"listing manifest {path} has no items list", reason="catalog_size_unavailable"
        )
    return len(items)
