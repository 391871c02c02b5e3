from .resolution_models import MissingKind, Turn, ResolutionResult
from .intent_analyzer_models import (
    FailureKind,
    ModelAnalysisFailure,
    ModelAnalysisOutcome,
    ModelAnalysisResponse,
    ModelAnalysisSuccess,
)
from .chat_models import ChatRequest

__all__ = [
    "MissingKind",
    "Turn",
    "ResolutionResult",
    "FailureKind",
    "ModelAnalysisFailure",
    "ModelAnalysisOutcome",
    "ModelAnalysisResponse",
    "ModelAnalysisSuccess",
    "ChatRequest",
]
