import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List

from dotenv import load_dotenv

from indexer_intent.models.resolution_models import Turn
from indexer_intent.services.chat_service import ChatService
from indexer_intent.utils.config_parser import DEFAULT_PROMPTS_DIR, load_app_config
from indexer_intent.workflows.resolver_graph import ConversationalIntentResolver

# --- LOGGING AND ENVIRONMENT SETUP ---
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stdout,
)
# Suppress excessively noisy logs from underlying HTTP libraries for cleaner output
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("openai").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)

MAX_HISTORY_TURNS = 10

load_dotenv(Path(__file__).resolve().parent / ".env")


def print_welcome_message():
    """Prints the welcome message and instructions."""
    print("\n--- EthIndexer Assistant: CLI Test Harness ---")
    print("Type 'exit' or 'quit' to end the session.")
    print("Example conversations to try:")
    print('  - One shot: "Index USDC transfers from the latest 1000 blocks"')
    print('  - Multi-turn: "I want to index something" -> "USDC transfers" -> "from latest blocks"')
    print("----------------------------------------------------------\n")


def display_response(envelope: Dict[str, Any]):
    """Prints the chat service's envelope in a readable way."""
    response = envelope.get("response") or {}
    if not envelope.get("success"):
        print(f"\n>> AI Response (Error): {envelope.get('error')}")
        if response.get("message"):
            print(response["message"])
        return

    print(f"\n>> AI Response (confidence {response.get('confidence')}): {response.get('message')}")
    if response.get("isQueryReady"):
        print(f"\n--- Suggested Query ---\n{response['suggestedQuery']}")
    else:
        print(f"\n(needs: {', '.join(response.get('needsMoreInfo', []))})")
    print()


def build_resolver(app_config) -> ConversationalIntentResolver:
    """Builds the resolver, degrading to rules-only when the model path cannot be set up."""
    try:
        return ConversationalIntentResolver.from_config(
            app_config=app_config, prompts_base_path=DEFAULT_PROMPTS_DIR
        )
    except (ValueError, TypeError, RuntimeError, ImportError, AttributeError, FileNotFoundError) as e:
        logger.warning(f"Model-assisted analysis unavailable, using rules only: {e}")
        app_config.resolver.use_model = False
        return ConversationalIntentResolver.from_config(
            app_config=app_config, prompts_base_path=DEFAULT_PROMPTS_DIR
        )


async def run_conversation():
    """Runs an interactive loop; the caller (this loop) owns the conversation history."""
    logger.info("Initializing intent resolver...")
    app_config = load_app_config()
    chat_service = ChatService(resolver=build_resolver(app_config))
    print_welcome_message()

    history: List[Turn] = []
    while True:
        try:
            prompt = input("You: ")
        except (KeyboardInterrupt, EOFError):
            print("\n\nSession ended. Goodbye!")
            break

        if prompt.lower() in ["exit", "quit"]:
            print("\nGoodbye!")
            break
        if not prompt.strip():
            continue

        envelope = await chat_service.process_message(
            {"message": prompt, "conversationHistory": [turn.model_dump() for turn in history]}
        )
        display_response(envelope)

        # Assistant replies quote example tokens and block ranges, so only
        # user turns are sent back as history.
        history.append(Turn(role="user", content=prompt))
        history = history[-MAX_HISTORY_TURNS:]

        if (envelope.get("response") or {}).get("isQueryReady"):
            # A ready query starts a fresh conversation.
            history = []


def main():
    asyncio.run(run_conversation())


if __name__ == "__main__":
    main()
