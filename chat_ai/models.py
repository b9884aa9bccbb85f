from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .coercion import coerce_to_text

HISTORY_ROLES = ("user", "assistant", "system")


class ConversationTurn(BaseModel):
    """One prior message of the conversation."""
    role: Any = ""
    content: Any = ""


class ChatRequest(BaseModel):
    """Request payload for chat API."""
    model_config = ConfigDict(populate_by_name=True)

    message: Optional[str] = None
    conversation_history: List[ConversationTurn] = Field(default_factory=list, alias="conversationHistory")

    @field_validator("conversation_history", mode="before")
    @classmethod
    def _keep_object_turns(cls, value: Any) -> Any:
        # Non-object entries are dropped instead of failing the request.
        if value is None:
            return []
        if isinstance(value, list):
            return [turn for turn in value if isinstance(turn, Mapping)]
        return value

    def history_turns(self) -> List[Dict[str, str]]:
        """Usable prior turns as role/content dicts; unknown roles are dropped."""
        return [
            {"role": turn.role, "content": coerce_to_text(turn.content)}
            for turn in self.conversation_history
            if turn.role in HISTORY_ROLES
        ]


class ChatResponse(BaseModel):
    """Response payload returned by the chat API."""
    response: str
    tokens: int = 0


class ErrorResponse(BaseModel):
    """Error payload returned when a request fails."""
    error: str


class HealthResponse(BaseModel):
    status: str
    provider: str
    document_store: str
