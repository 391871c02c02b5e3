from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from langgraph.graph import StateGraph, END
from omegaconf import DictConfig

from indexer_intent.agents.intent_analyzer import IntentAnalyzer
from indexer_intent.models.intent_analyzer_models import (
    FailureKind,
    ModelAnalysisFailure,
    ModelAnalysisSuccess,
)
from indexer_intent.models.resolution_models import ResolutionResult, Turn
from indexer_intent.resolver.pipeline import resolve_by_rules, trouble_result
from indexer_intent.resolver.scoring import (
    DEFAULT_WEIGHTS,
    READINESS_THRESHOLD,
    ScoringWeights,
)
from indexer_intent.workflows.state import ResolverState

logger = logging.getLogger(__name__)


class ConversationalIntentResolver:
    """
    Decides, once per user turn, whether the conversation is ready to become an
    indexing job.

    The workflow is a small LangGraph graph: the model-assisted analyzer runs
    first and, whenever it fails or is not configured, the deterministic
    rule-based pipeline produces the answer instead. The resolver keeps no
    conversation state; every call receives the full history.
    """

    def __init__(
        self,
        analyzer: Optional[IntentAnalyzer] = None,
        weights: ScoringWeights = DEFAULT_WEIGHTS,
        readiness_threshold: float = READINESS_THRESHOLD,
    ):
        self.analyzer = analyzer
        self.weights = weights
        self.readiness_threshold = readiness_threshold
        self.workflow = self._build_graph()
        self.app = self.workflow.compile()

    @classmethod
    def from_config(
        cls,
        app_config: DictConfig,
        prompts_base_path: Path,
        analyzer: Optional[IntentAnalyzer] = None,
    ) -> ConversationalIntentResolver:
        """
        Builds the resolver from `resolver.yaml`. When `use_model` is set and no
        analyzer is given, one is created from the configured agent key.
        """
        resolver_config = app_config.get("resolver") or {}
        weights_config = resolver_config.get("weights") or {}
        weights = ScoringWeights(
            subject=float(weights_config.get("subject", DEFAULT_WEIGHTS.subject)),
            action=float(weights_config.get("action", DEFAULT_WEIGHTS.action)),
            scope=float(weights_config.get("scope", DEFAULT_WEIGHTS.scope)),
            conversation_bonus=float(
                weights_config.get("conversation_bonus", DEFAULT_WEIGHTS.conversation_bonus)
            ),
        )

        if analyzer is None and resolver_config.get("use_model", False):
            analyzer = IntentAnalyzer.from_config(
                agent_key=resolver_config.get("analyzer_agent_key", "intent_analyzer"),
                app_config=app_config,
                prompts_base_path=prompts_base_path,
            )

        return cls(
            analyzer=analyzer,
            weights=weights,
            readiness_threshold=float(
                resolver_config.get("readiness_threshold", READINESS_THRESHOLD)
            ),
        )

    @property
    def model_enabled(self) -> bool:
        return self.analyzer is not None

    def _build_graph(self) -> StateGraph:
        graph = StateGraph(ResolverState)
        graph.add_node("model_analysis", self.model_analysis_node)
        graph.add_node("accept_model_result", self.accept_model_result_node)
        graph.add_node("rule_based_fallback", self.rule_based_fallback_node)
        graph.set_entry_point("model_analysis")
        graph.add_conditional_edges(
            "model_analysis",
            self.decide_after_model,
            {"accept": "accept_model_result", "fallback": "rule_based_fallback"},
        )
        graph.add_edge("accept_model_result", END)
        graph.add_edge("rule_based_fallback", END)
        return graph

    async def model_analysis_node(self, state: ResolverState) -> Dict[str, Any]:
        """Runs the model-assisted analyzer, if one is configured."""
        if self.analyzer is None:
            return {
                "model_outcome": ModelAnalysisFailure(
                    kind=FailureKind.DISABLED, detail="No analyzer configured."
                )
            }
        outcome = await self.analyzer.analyze(
            state["utterance"], state["turns"], cancel_event=state.get("cancel_event")
        )
        return {"model_outcome": outcome}

    def decide_after_model(self, state: ResolverState) -> str:
        """Accepts a successful model reply; anything else falls back to rules."""
        outcome = state.get("model_outcome")
        if isinstance(outcome, ModelAnalysisSuccess):
            return "accept"
        if isinstance(outcome, ModelAnalysisFailure) and outcome.kind != FailureKind.DISABLED:
            logger.info(f"--- Falling back to rule-based analysis ({outcome.kind.value}) ---")
        return "fallback"

    def accept_model_result_node(self, state: ResolverState) -> Dict[str, Any]:
        return {"result": state["model_outcome"].result}

    def rule_based_fallback_node(self, state: ResolverState) -> Dict[str, Any]:
        result = resolve_by_rules(
            state["utterance"],
            state["turns"],
            weights=self.weights,
            threshold=self.readiness_threshold,
        )
        return {"result": result}

    def resolve_with_rules(
        self, utterance: str, turns: Optional[Sequence[Turn]] = None
    ) -> ResolutionResult:
        """Synchronous, deterministic resolution that skips the model path."""
        try:
            return resolve_by_rules(
                utterance, turns, weights=self.weights, threshold=self.readiness_threshold
            )
        except Exception:
            logger.exception("Rule-based resolution failed unexpectedly.")
            return trouble_result()

    async def resolve(
        self,
        utterance: str,
        turns: Optional[Sequence[Turn]] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ResolutionResult:
        """
        Resolves one user turn. This is the public interface of the resolver.

        Args:
            utterance: The newest user message.
            turns: The full prior conversation, oldest first.
            cancel_event: Optional signal that abandons an in-flight model call
                and proceeds straight to the rule-based path.

        Returns:
            A `ResolutionResult`. Failures never propagate; the worst case is a
            low-confidence, generic clarification request.
        """
        initial_state: ResolverState = {
            "utterance": utterance or "",
            "turns": list(turns or []),
            "cancel_event": cancel_event,
            "model_outcome": None,
            "result": None,
        }
        try:
            final_state = await self.app.ainvoke(initial_state)
        except Exception:
            logger.exception("Resolver workflow failed unexpectedly.")
            return trouble_result()

        result = final_state.get("result")
        if result is None:
            logger.error("Resolver workflow ended without a result.")
            return trouble_result()
        return result
