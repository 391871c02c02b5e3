import asyncio
from typing import TypedDict, List, Optional

from indexer_intent.models.intent_analyzer_models import ModelAnalysisOutcome
from indexer_intent.models.resolution_models import ResolutionResult, Turn


class ResolverState(TypedDict):
    """
    The state of a single resolver invocation.
    It is created at the start of `resolve` and discarded once the result is returned.
    """

    # -- Inputs --
    utterance: str
    turns: List[Turn]
    cancel_event: Optional[asyncio.Event]

    # -- Model path --
    model_outcome: Optional[ModelAnalysisOutcome]

    # -- Final Output --
    result: Optional[ResolutionResult]
