from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from indexer_intent.models.resolution_models import Turn


class ChatRequest(BaseModel):
    """An inbound chat message together with the caller-owned history."""

    model_config = ConfigDict(populate_by_name=True)

    message: str
    conversation_history: List[Turn] = Field(default_factory=list, alias="conversationHistory")

    @field_validator("message")
    @classmethod
    def message_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Message is required")
        return value
