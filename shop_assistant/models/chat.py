from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from ..actions import ActionType

MessageRole = Literal["system", "user", "assistant"]


class ConversationMessage(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    role: MessageRole
    content: str


class SearchResult(BaseModel):
    """Single organic web result reduced to what the UI renders."""

    title: str = ""
    link: str = ""
    snippet: str = ""


class Action(BaseModel):
    """UI directive decoded from an action tag or produced by a search round."""

    type: str
    payload: Optional[Union[str, List[SearchResult]]] = None

    @property
    def kind(self) -> ActionType:
        return ActionType.decode(self.type)

    @classmethod
    def search_results(cls, results: List[SearchResult]) -> "Action":
        return cls(type=ActionType.WEB_SEARCH_RESULTS.value, payload=list(results))


class TurnResult(BaseModel):
    """Outcome of one chat turn as handed back to the caller."""

    model_config = ConfigDict(protected_namespaces=())

    text: str
    actions: List[Action] = Field(default_factory=list)
    model_used: str
    usage: Dict[str, Any] = Field(default_factory=dict)


class ChatRequest(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    message: str
    conversation_history: List[ConversationMessage] = Field(
        default_factory=list,
        validation_alias=AliasChoices("conversationHistory", "conversation_history"),
    )
    trace_id: Optional[str] = None


class ChatResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    text: str
    actions: List[Action] = Field(default_factory=list)
    model_used: str = Field(serialization_alias="modelUsed")
    usage: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_turn(cls, turn: TurnResult) -> "ChatResponse":
        return cls(
            text=turn.text,
            actions=turn.actions,
            model_used=turn.model_used,
            usage=turn.usage,
        )
