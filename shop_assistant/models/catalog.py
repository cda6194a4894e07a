from __future__ import annotations

from decimal import Decimal
from typing import Dict, Iterator, List, Optional

from pydantic import BaseModel, ConfigDict, Field

WEI_PER_ETHER_EXPONENT = 18

KNOWN_CATEGORIES: tuple[str, ...] = ("electronics", "clothing", "toys")


class CatalogEntry(BaseModel):
    """Point-in-time copy of one listing read from the ledger."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(ge=0)
    name: str
    category: str
    price_wei: int = Field(ge=0)
    rating: int = Field(ge=0, le=5)
    stock: int = Field(ge=0)
    image: Optional[str] = None

    @property
    def price_ether(self) -> Decimal:
        return Decimal(self.price_wei).scaleb(-WEI_PER_ETHER_EXPONENT)

    @property
    def in_stock(self) -> bool:
        return self.stock > 0


class CatalogSnapshot(BaseModel):
    """Entries bucketed by category, known categories first."""

    categories: Dict[str, List[CatalogEntry]] = Field(default_factory=dict)

    @classmethod
    def from_entries(cls, entries: List[CatalogEntry]) -> "CatalogSnapshot":
        buckets: Dict[str, List[CatalogEntry]] = {name: [] for name in KNOWN_CATEGORIES}
        for entry in entries:
            buckets.setdefault(entry.category, []).append(entry)
        return cls(categories=buckets)

    def entries(self) -> Iterator[CatalogEntry]:
        for bucket in self.categories.values():
            yield from bucket

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self.categories.values())


def format_ether(value: Decimal) -> str:
    """Render an ether amount without exponent or trailing zeros (2 -> "2", 0.250 -> "0.25")."""
    return f"{value.normalize():f}"
