import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Protocol, Union

from pydantic import ValidationError

from indexer_intent.models.chat_models import ChatRequest
from indexer_intent.resolver.pipeline import trouble_result
from indexer_intent.workflows.resolver_graph import ConversationalIntentResolver

logger = logging.getLogger(__name__)

STARTER_SUGGESTIONS = [
    "Index USDC transfers from the latest 1000 blocks",
    "Track WETH transfers for a specific address",
    "Monitor USDT transfers above $10,000",
    "Index all transfers from block 18000000 to 18001000",
    "Track transfers for address 0x742d35cc44b75c42b4b6c5a8b964b08d2a6f6c42",
]
HEALTH_PROBE_MESSAGE = "test message"


class JobSubmitter(Protocol):
    """The external job-creation facility. Returns an opaque job identifier."""

    def submit(self, query: str) -> str:
        ...


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class ChatService:
    """
    The request/response boundary around the resolver.

    It validates inbound chat payloads, wraps every answer in an envelope and
    makes sure the user never sees a raw error.
    """

    def __init__(self, resolver: ConversationalIntentResolver):
        self.resolver = resolver

    async def process_message(
        self,
        payload: Union[ChatRequest, Dict[str, Any]],
        cancel_event: Optional[asyncio.Event] = None,
    ) -> Dict[str, Any]:
        """
        Handles one chat message.

        Args:
            payload: A `ChatRequest` or its JSON form
                     ({"message": ..., "conversationHistory": [...]}).
            cancel_event: Optional disconnect signal forwarded to the resolver.

        Returns:
            {"success": bool, "response": {...}, "error": str, "timestamp": str}
        """
        try:
            request = payload if isinstance(payload, ChatRequest) else ChatRequest.model_validate(payload)
        except ValidationError as e:
            logger.warning(f"Rejected chat request: {e.errors()[0].get('msg', e)}")
            return {"success": False, "error": "Message is required", "timestamp": _timestamp()}

        logger.info(f"Processing chat message: '{request.message}'")
        history = request.conversation_history
        try:
            result = await self.resolver.resolve(request.message, history, cancel_event=cancel_event)
        except Exception as e:
            logger.error(f"Chat processing failed: {e}", exc_info=True)
            return {
                "success": False,
                "error": "Failed to process message",
                "response": trouble_result().to_response(),
                "timestamp": _timestamp(),
            }

        logger.info(f"Chat response ready: {'READY' if result.is_ready else 'NEEDS_MORE_INFO'}")
        response = result.to_response()
        response["conversationContext"] = {
            "totalMessages": len(history) + 1,
            "lastUserMessage": request.message,
        }
        return {"success": True, "response": response, "timestamp": _timestamp()}

    def get_suggestions(self, context: Optional[str] = None) -> List[str]:
        """Starter prompts; when `context` is given, matching ones come first."""
        if not context:
            return list(STARTER_SUGGESTIONS)
        needle = context.casefold()
        matching = [s for s in STARTER_SUGGESTIONS if needle in s.casefold()]
        return matching + [s for s in STARTER_SUGGESTIONS if s not in matching]

    async def health_check(self) -> Dict[str, Any]:
        """Runs the resolver on a probe message to confirm it answers."""
        try:
            await self.resolver.resolve(HEALTH_PROBE_MESSAGE, [])
        except Exception as e:
            logger.error(f"Chat health check failed: {e}", exc_info=True)
            return {
                "success": False,
                "status": "unhealthy",
                "error": str(e),
                "timestamp": _timestamp(),
            }
        return {
            "success": True,
            "status": "healthy",
            "aiService": "configured" if self.resolver.model_enabled else "rules-only",
            "timestamp": _timestamp(),
        }

    def execute_query(self, suggested_query: str, submitter: JobSubmitter) -> Dict[str, Any]:
        """
        Hands a ready query, verbatim, to the job-creation facility.

        The returned job identifier is opaque to this service.
        """
        if not suggested_query or not suggested_query.strip():
            return {
                "success": False,
                "jobId": None,
                "message": "A ready query is required to create an indexing job.",
                "timestamp": _timestamp(),
            }

        try:
            job_id = submitter.submit(suggested_query)
        except Exception as e:
            logger.error(f"Job submission failed for '{suggested_query}': {e}", exc_info=True)
            return {
                "success": False,
                "jobId": None,
                "message": "The indexing job could not be created. Please try again.",
                "timestamp": _timestamp(),
            }

        logger.info(f"Created indexing job {job_id} for '{suggested_query}'")
        return {
            "success": True,
            "jobId": job_id,
            "message": f"Indexing job started for: {suggested_query}",
            "timestamp": _timestamp(),
        }
