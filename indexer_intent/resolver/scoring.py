from dataclasses import dataclass
from typing import List, Tuple

from indexer_intent.models.resolution_models import MissingKind
from indexer_intent.resolver.context import AccumulatedContext

# A conversation is ready to become an indexing job once its confidence
# reaches this value.
READINESS_THRESHOLD = 0.7

# Sums of float weights carry representation noise.
_THRESHOLD_TOLERANCE = 1e-9


@dataclass(frozen=True)
class ScoringWeights:
    subject: float = 0.4
    action: float = 0.4
    scope: float = 0.2
    conversation_bonus: float = 0.1


DEFAULT_WEIGHTS = ScoringWeights()


def is_ready(confidence: float, threshold: float = READINESS_THRESHOLD) -> bool:
    return confidence >= threshold - _THRESHOLD_TOLERANCE


def score(
    ctx: AccumulatedContext,
    turn_count: int,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
    threshold: float = READINESS_THRESHOLD,
) -> Tuple[float, bool]:
    """
    Weighs the signal classes present in `ctx`.

    The conversation bonus applies from the second utterance on and may push
    the score above 1.0; it is not clamped. Readiness is decided on the raw
    sum, and only the reported value is rounded.
    """
    confidence = 0.0
    if ctx.has_subject:
        confidence += weights.subject
    if ctx.has_action:
        confidence += weights.action
    if ctx.has_scope:
        confidence += weights.scope
    if turn_count > 0:
        confidence += weights.conversation_bonus

    return round(confidence, 4), is_ready(confidence, threshold)


def identify_missing(ctx: AccumulatedContext) -> List[MissingKind]:
    """Lists the absent signal classes in fixed subject, action, scope order."""
    missing = []
    if not ctx.has_subject:
        missing.append(MissingKind.SUBJECT)
    if not ctx.has_action:
        missing.append(MissingKind.ACTION)
    if not ctx.has_scope:
        missing.append(MissingKind.SCOPE)
    return missing
