from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class MissingKind(str, Enum):
    """A signal class that must be present before a query can be synthesized."""

    SUBJECT = "subject"
    ACTION = "action"
    SCOPE = "scope"


class Turn(BaseModel):
    """A single message in the caller-owned conversation history."""

    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant"]
    content: str


class ResolutionResult(BaseModel):
    """
    The single structured answer produced for each user turn.

    A result is either ready (it carries the canonical query to hand to the job
    creation facility) or not ready (it lists the missing signal classes and
    asks the user for the most useful one).
    """

    message: str = Field(..., description="Human-readable reply for the user.")
    is_ready: bool = Field(..., description="True when a complete query could be synthesized.")
    confidence: float = Field(..., description="Weighted completeness score.")
    combined_query: Optional[str] = Field(
        None, description="The canonical query. Present if and only if is_ready is true."
    )
    missing: Optional[List[str]] = Field(
        None, description="Missing signal classes. Present and non-empty if and only if is_ready is false."
    )
    suggestions: Optional[List[str]] = Field(
        None, description="Example follow-up messages the user could send."
    )

    @model_validator(mode="after")
    def check_fields(self):
        """Ensures the readiness flag and the optional fields agree."""
        if self.is_ready:
            if not self.combined_query:
                raise ValueError("Field 'combined_query' is required when is_ready is true.")
            if self.missing:
                raise ValueError("Field 'missing' must be absent when is_ready is true.")
        else:
            if self.combined_query is not None:
                raise ValueError("Field 'combined_query' must be absent when is_ready is false.")
            if not self.missing:
                raise ValueError("Field 'missing' is required when is_ready is false.")
        return self

    def to_response(self) -> Dict[str, Any]:
        """Renders the result with the externally-visible field names."""
        response: Dict[str, Any] = {
            "message": self.message,
            "isQueryReady": self.is_ready,
            "confidence": self.confidence,
        }
        if self.is_ready:
            response["suggestedQuery"] = self.combined_query
        else:
            response["needsMoreInfo"] = list(self.missing)
        if self.suggestions:
            response["suggestions"] = list(self.suggestions)
        return response
