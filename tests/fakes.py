import asyncio
from typing import Any, Dict, List, Optional

from indexer_intent.agents.intent_analyzer import IntentAnalyzer
from indexer_intent.models.intent_analyzer_models import ModelAnalysisResponse
from indexer_intent.models.resolution_models import Turn


class FakeLLMService:
    """
    Stands in for LLMService. Returns `response`, raises `error`, or sleeps for
    `delay` seconds first; every call is recorded.
    """

    def __init__(self, response: Any = None, error: Optional[BaseException] = None, delay: float = 0.0):
        self.response = response
        self.error = error
        self.delay = delay
        self.calls: List[Dict[str, Any]] = []
        self.was_cancelled = False

    async def agenerate_structured(self, variables, response_model, conversation=None):
        self.calls.append(
            {"variables": variables, "response_model": response_model, "conversation": list(conversation or [])}
        )
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.was_cancelled = True
            raise
        if self.error is not None:
            raise self.error
        return self.response


def ready_response(**overrides) -> ModelAnalysisResponse:
    fields = {
        "is_ready": True,
        "confidence": 0.93,
        "message": "On it! Indexing USDC transfers from the latest blocks.",
        "combined_query": "index USDC transfers from latest blocks",
        "suggestions": [],
    }
    fields.update(overrides)
    return ModelAnalysisResponse(**fields)


def make_analyzer(service: FakeLLMService, timeout_seconds: float = 2.0) -> IntentAnalyzer:
    return IntentAnalyzer(llm_service=service, name="Test Analyzer", timeout_seconds=timeout_seconds)


def user_turns(*contents: str) -> List[Turn]:
    return [Turn(role="user", content=content) for content in contents]


