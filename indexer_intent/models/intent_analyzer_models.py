import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from indexer_intent.models.resolution_models import ResolutionResult


class ModelAnalysisResponse(BaseModel):
    """The structured reply the language model must produce for each turn."""

    is_ready: bool = Field(
        ...,
        description="True only if the conversation names a token or contract address, an action (index, track, monitor...) and a block range or recency qualifier.",
    )
    confidence: float = Field(
        ...,
        description="How complete the request is, between 0.0 and 1.0.",
    )
    message: str = Field(
        ...,
        description="The reply to show the user. When not ready, ask ONE question about the most important missing piece.",
    )
    missing: Optional[List[str]] = Field(
        None,
        description="When not ready, the missing pieces using only 'subject', 'action' and 'scope'.",
    )
    combined_query: Optional[str] = Field(
        None,
        description="When ready, the canonical query, e.g. 'index USDC transfers from latest blocks'. This MUST be populated if is_ready is true.",
    )
    suggestions: List[str] = Field(
        default_factory=list,
        description="Up to four short example messages the user could send next.",
    )

    @field_validator("is_ready", mode="before")
    @classmethod
    def coerce_ready(cls, value: Any) -> bool:
        if isinstance(value, str):
            return value.strip().lower() in ("true", "yes", "1", "ready")
        return bool(value)

    @field_validator("confidence", mode="before")
    @classmethod
    def clamp_confidence(cls, value: Any) -> float:
        if isinstance(value, bool):
            raise ValueError("confidence must be a number, not a boolean.")
        confidence = float(value)
        if math.isnan(confidence):
            raise ValueError("confidence must not be NaN.")
        return min(max(confidence, 0.0), 1.0)

    @field_validator("missing", mode="before")
    @classmethod
    def accept_string_sequences(cls, value: Any) -> Optional[List[str]]:
        if isinstance(value, (list, tuple)) and all(isinstance(item, str) for item in value):
            return list(value)
        return None

    @field_validator("suggestions", mode="before")
    @classmethod
    def default_suggestions(cls, value: Any) -> List[str]:
        if isinstance(value, (list, tuple)):
            return [item for item in value if isinstance(item, str)]
        return []


class FailureKind(str, Enum):
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"
    PROVIDER_ERROR = "provider_error"
    MALFORMED_RESPONSE = "malformed_response"
    DISABLED = "disabled"


@dataclass(frozen=True)
class ModelAnalysisSuccess:
    result: ResolutionResult


@dataclass(frozen=True)
class ModelAnalysisFailure:
    kind: FailureKind
    detail: str = ""


ModelAnalysisOutcome = Union[ModelAnalysisSuccess, ModelAnalysisFailure]
