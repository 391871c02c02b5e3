from .signals import ExtractedSignals, extract
from .context import AccumulatedContext, accumulate
from .scoring import READINESS_THRESHOLD, ScoringWeights, identify_missing, is_ready, score
from .synthesis import synthesize
from .guidance import guide, suggest
from .pipeline import resolve_by_rules, trouble_result

__all__ = [
    "ExtractedSignals",
    "extract",
    "AccumulatedContext",
    "accumulate",
    "READINESS_THRESHOLD",
    "ScoringWeights",
    "identify_missing",
    "is_ready",
    "score",
    "synthesize",
    "guide",
    "suggest",
    "resolve_by_rules",
    "trouble_result",
]
