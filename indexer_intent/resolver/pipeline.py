import logging
from typing import Optional, Sequence

from indexer_intent.models.resolution_models import MissingKind, ResolutionResult, Turn
from indexer_intent.resolver.context import accumulate
from indexer_intent.resolver.guidance import guide, suggest
from indexer_intent.resolver.scoring import (
    DEFAULT_WEIGHTS,
    READINESS_THRESHOLD,
    ScoringWeights,
    identify_missing,
    score,
)
from indexer_intent.resolver.synthesis import describe, synthesize

logger = logging.getLogger(__name__)

TROUBLE_MESSAGE = (
    "I'm having trouble understanding your request right now. "
    "Could you try rephrasing what you'd like to index?"
)
TROUBLE_CONFIDENCE = 0.1


def resolve_by_rules(
    utterance: str,
    turns: Optional[Sequence[Turn]] = None,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
    threshold: float = READINESS_THRESHOLD,
) -> ResolutionResult:
    """
    Runs the deterministic pipeline: accumulate, score, then synthesize or guide.

    Identical inputs always produce the same readiness decision and missing set.
    """
    turns = list(turns or [])
    ctx = accumulate(turns, utterance)
    confidence, ready = score(ctx, turn_count=len(turns), weights=weights, threshold=threshold)
    missing = identify_missing(ctx)

    if ready:
        combined_query = synthesize(ctx)
        logger.info(f"Query ready for execution: '{combined_query}' (confidence {confidence})")
        return ResolutionResult(
            message=describe(ctx),
            is_ready=True,
            confidence=confidence,
            combined_query=combined_query,
        )

    # Custom weights can leave a complete context below the threshold.
    reported_missing = missing or list(MissingKind)
    logger.info(
        f"Query needs more info: {', '.join(kind.value for kind in reported_missing)} "
        f"(confidence {confidence})"
    )
    return ResolutionResult(
        message=guide(missing, ctx, turn_count=len(turns)),
        is_ready=False,
        confidence=confidence,
        missing=[kind.value for kind in reported_missing],
        suggestions=suggest(missing) or None,
    )


def trouble_result() -> ResolutionResult:
    """The worst-case reply: a low-confidence, fully generic clarification request."""
    return ResolutionResult(
        message=TROUBLE_MESSAGE,
        is_ready=False,
        confidence=TROUBLE_CONFIDENCE,
        missing=[kind.value for kind in MissingKind],
    )
