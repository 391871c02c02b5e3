"""
Follow-up questions for conversations that are not ready yet.

Only one question is asked per turn: the rules below are checked top to bottom
and the first one that matches wins.
"""

from typing import List, Sequence

from indexer_intent.models.resolution_models import MissingKind
from indexer_intent.resolver.context import AccumulatedContext

STARTER_EXAMPLES = [
    "Index USDC transfers",
    "Track WETH transfers",
    "Monitor USDT transfers",
]
SUBJECT_EXAMPLES = [
    "USDC transfers",
    "USDT transfers",
    "WETH transfers",
    "Or provide a contract address (0x...)",
]
ACTION_EXAMPLES = [
    "Index all transfers",
    "Track transfers for a specific address",
    "Monitor transfers above a certain value",
]
SCOPE_EXAMPLES = [
    "From the latest 1000 blocks",
    "From block 18000000 to latest",
    "Just say 'latest' for ongoing monitoring",
]


def _bullets(examples: Sequence[str]) -> str:
    return "\n".join(f"• {example}" for example in examples)


def guide(missing: Sequence[MissingKind], ctx: AccumulatedContext, turn_count: int) -> str:
    """Returns the single most useful question given what is still missing."""
    subject = ctx.subjects.first()
    action = ctx.actions.first()

    if MissingKind.SUBJECT in missing and MissingKind.ACTION in missing:
        opener = (
            "I'd be happy to help you index blockchain data!"
            if turn_count == 0
            else "Let's pin down what you'd like to index."
        )
        return f"{opener} What would you like to do? For example:\n\n{_bullets(STARTER_EXAMPLES)}"

    if MissingKind.SUBJECT in missing:
        return f"Which token would you like to track? For example:\n\n{_bullets(SUBJECT_EXAMPLES)}"

    if MissingKind.ACTION in missing:
        subject_text = f" {subject}" if subject else ""
        return (
            f"What would you like me to do with{subject_text} transfers? For example:\n\n"
            f"{_bullets(ACTION_EXAMPLES)}"
        )

    if MissingKind.SCOPE in missing:
        subject_text = f" {subject}" if subject else ""
        return (
            f"What block range should I {action or 'index'}{subject_text} transfers from? For example:\n\n"
            f"{_bullets(SCOPE_EXAMPLES)}"
        )

    return "I'd be happy to help you index blockchain data! Could you tell me more about what you'd like to track?"


def suggest(missing: Sequence[MissingKind]) -> List[str]:
    """Example follow-ups matching the question `guide` asks."""
    if MissingKind.SUBJECT in missing and MissingKind.ACTION in missing:
        return list(STARTER_EXAMPLES)
    if MissingKind.SUBJECT in missing:
        return list(SUBJECT_EXAMPLES[:3])
    if MissingKind.ACTION in missing:
        return list(ACTION_EXAMPLES)
    if MissingKind.SCOPE in missing:
        return list(SCOPE_EXAMPLES[:2])
    return []
