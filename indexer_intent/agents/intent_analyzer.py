from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional, Sequence

from langchain_core.exceptions import OutputParserException
from omegaconf import DictConfig
from pydantic import ValidationError

from indexer_intent.llm import LLMService
from indexer_intent.models.intent_analyzer_models import (
    FailureKind,
    ModelAnalysisFailure,
    ModelAnalysisOutcome,
    ModelAnalysisResponse,
    ModelAnalysisSuccess,
)
from indexer_intent.models.resolution_models import ResolutionResult, Turn
from indexer_intent.resolver.context import accumulate
from indexer_intent.resolver.scoring import identify_missing

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0


class IntentAnalyzer:
    """
    Asks a language model whether the conversation describes a complete
    indexing request.

    The analyzer never raises for model-side problems. Timeouts, cancellation,
    provider errors and replies that break the response contract all come back
    as a `ModelAnalysisFailure`, leaving the caller to decide how to fall back.
    """

    def __init__(
        self,
        llm_service: LLMService,
        name: str = "Intent Analyzer",
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.llm_service = llm_service
        self.name = name
        self.timeout_seconds = timeout_seconds

    @classmethod
    def from_config(
        cls,
        agent_key: str,
        app_config: DictConfig,
        prompts_base_path: Path,
    ) -> IntentAnalyzer:
        agent_config = app_config.agents.get(agent_key)
        if not agent_config:
            raise ValueError(
                f"Agent key '{agent_key}' not found in agents configuration."
            )

        llm_service = LLMService.from_config(
            agent_prompts_dir=agent_config.prompts_dir,
            provider_key=agent_config.llm_provider_key,
            llm_config=app_config.llms,
            prompts_base_path=prompts_base_path,
        )
        return cls(
            llm_service=llm_service,
            name=agent_config.name,
            timeout_seconds=float(agent_config.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS)),
        )

    async def _request_analysis(
        self, utterance: str, turns: Sequence[Turn]
    ) -> Optional[ModelAnalysisResponse]:
        llm_variables = {
            "user_message": utterance,
            "turn_count": len(turns),
        }
        return await self.llm_service.agenerate_structured(
            variables=llm_variables,
            response_model=ModelAnalysisResponse,
            conversation=turns,
        )

    async def analyze(
        self,
        utterance: str,
        turns: Optional[Sequence[Turn]] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ModelAnalysisOutcome:
        """
        Runs one bounded model call.

        Args:
            utterance: The newest user message.
            turns: The prior conversation, oldest first.
            cancel_event: Optional signal (e.g. client disconnect); when set the
                in-flight call is abandoned.

        Returns:
            A success carrying a validated `ResolutionResult`, or a failure
            describing why the model path could not be used.
        """
        turns = list(turns or [])
        logger.info(f"--- {self.name}: analyzing turn {len(turns) + 1} ---")

        request = asyncio.ensure_future(self._request_analysis(utterance, turns))
        waiters = {request}
        cancel_waiter = None
        if cancel_event is not None:
            cancel_waiter = asyncio.ensure_future(cancel_event.wait())
            waiters.add(cancel_waiter)

        try:
            done, _ = await asyncio.wait(
                waiters, timeout=self.timeout_seconds, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            for waiter in waiters:
                if not waiter.done():
                    waiter.cancel()

        if request not in done:
            if cancel_waiter is not None and cancel_waiter in done:
                return self._failure(FailureKind.CANCELLED, "Model call abandoned by the caller.")
            return self._failure(
                FailureKind.TIMEOUT, f"No reply within {self.timeout_seconds} seconds."
            )

        if request.cancelled():
            return self._failure(FailureKind.CANCELLED, "Model call was cancelled.")

        try:
            response = request.result()
        except (ValidationError, OutputParserException) as e:
            return self._failure(FailureKind.MALFORMED_RESPONSE, str(e))
        except Exception as e:  # Any client/transport error from the provider.
            return self._failure(FailureKind.PROVIDER_ERROR, f"{type(e).__name__}: {e}")

        return self._to_outcome(response, utterance, turns)

    def _to_outcome(
        self,
        response: Optional[ModelAnalysisResponse],
        utterance: str,
        turns: Sequence[Turn],
    ) -> ModelAnalysisOutcome:
        """Maps the model's reply onto a `ResolutionResult`, enforcing its invariants."""
        if not isinstance(response, ModelAnalysisResponse):
            return self._failure(
                FailureKind.MALFORMED_RESPONSE,
                f"Expected ModelAnalysisResponse, got {type(response).__name__}.",
            )
        if not response.message.strip():
            return self._failure(FailureKind.MALFORMED_RESPONSE, "Reply has an empty message.")

        suggestions = response.suggestions or None
        if response.is_ready:
            combined_query = (response.combined_query or "").strip()
            if not combined_query:
                return self._failure(
                    FailureKind.MALFORMED_RESPONSE, "Reply is marked ready but has no combined_query."
                )
            result = ResolutionResult(
                message=response.message,
                is_ready=True,
                confidence=response.confidence,
                combined_query=combined_query,
                suggestions=suggestions,
            )
        else:
            missing = list(dict.fromkeys(item for item in response.missing or [] if item.strip()))
            if not missing:
                # The model did not say what is missing; derive it from the text.
                ctx = accumulate(turns, utterance)
                missing = [kind.value for kind in identify_missing(ctx)]
            if not missing:
                return self._failure(
                    FailureKind.MALFORMED_RESPONSE,
                    "Reply is marked not ready but nothing is missing from the conversation.",
                )
            result = ResolutionResult(
                message=response.message,
                is_ready=False,
                confidence=response.confidence,
                missing=missing,
                suggestions=suggestions,
            )

        logger.info(
            f"{self.name} reply: ready={result.is_ready}, confidence={result.confidence}"
        )
        return ModelAnalysisSuccess(result=result)

    def _failure(self, kind: FailureKind, detail: str) -> ModelAnalysisFailure:
        logger.warning(f"{self.name} failed ({kind.value}): {detail}")
        return ModelAnalysisFailure(kind=kind, detail=detail)
