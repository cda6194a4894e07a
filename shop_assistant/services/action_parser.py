from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List

from ..actions import ActionType
from ..models import Action

# [ACTION:KIND] or [ACTION:KIND:payload]; payload runs up to the first "]".
ACTION_TAG_PATTERN = re.compile(r"\[ACTION:(\w+)(?::([^\]]*))?\]")


@dataclass
class ExtractionResult:
    clean_text: str
    actions: List[Action] = field(default_factory=list)

    def first_search_query(self) -> str | None:
        """Payload of the first WEB_SEARCH action that carries a query."""
        for action in self.actions:
            if action.kind is ActionType.WEB_SEARCH and isinstance(action.payload, str) and action.payload:
                return action.payload
        return None


def extract_actions(text: str) -> ExtractionResult:
    """Pull every action tag out of ``text``.

    Kinds are not validated here; unrecognized kinds come back as opaque
    actions and decode to ActionType.UNKNOWN through ``Action.kind``.
    """

    actions = [
        Action(type=match.group(1), payload=match.group(2) or None)
        for match in ACTION_TAG_PATTERN.finditer(text or "")
    ]
    clean_text = ACTION_TAG_PATTERN.sub("", text or "").strip()
    return ExtractionResult(clean_text=clean_text, actions=actions)
