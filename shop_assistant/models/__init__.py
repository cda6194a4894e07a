from __future__ import annotations

from .catalog import KNOWN_CATEGORIES, CatalogEntry, CatalogSnapshot, format_ether
from .chat import (
    Action,
    ChatRequest,
    ChatResponse,
    ConversationMessage,
    MessageRole,
    SearchResult,
    TurnResult,
)

__all__ = [
    "Action",
    "CatalogEntry",
    "CatalogSnapshot",
    "ChatRequest",
    "ChatResponse",
    "ConversationMessage",
    "KNOWN_CATEGORIES",
    "MessageRole",
    "SearchResult",
    "TurnResult",
    "format_ether",
]
