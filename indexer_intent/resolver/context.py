import logging
from dataclasses import dataclass, field
from typing import Sequence

from indexer_intent.models.resolution_models import Turn
from indexer_intent.resolver.signals import extract
from indexer_intent.utils.ordered_set import OrderedSet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccumulatedContext:
    """
    Everything the conversation has established so far.

    Recomputed on every call from the full history plus the new utterance; it
    is never stored. The first element of each set is the earliest mention and
    is the one used when a query is synthesized.
    """

    subjects: OrderedSet = field(default_factory=OrderedSet)
    actions: OrderedSet = field(default_factory=OrderedSet)
    scopes: OrderedSet = field(default_factory=OrderedSet)
    has_subject: bool = False
    has_action: bool = False
    has_scope: bool = False


def accumulate(turns: Sequence[Turn], current_utterance: str) -> AccumulatedContext:
    """
    Merges the signals of every prior turn and the current utterance.

    Extraction runs over the whole conversation as one blob, so a token named in
    the first turn and a block range given in the third combine even when no
    single message is complete on its own.
    """
    contents = [turn.content for turn in turns] + [current_utterance or ""]
    combined_text = " ".join(contents).lower()

    aggregate = extract(combined_text)

    has_subject = aggregate.has_subject
    has_action = aggregate.has_action
    has_scope = aggregate.has_scope
    for content in contents:
        per_turn = extract(content.lower())
        has_subject = has_subject or per_turn.has_subject
        has_action = has_action or per_turn.has_action
        has_scope = has_scope or per_turn.has_scope

    context = AccumulatedContext(
        subjects=aggregate.found_subjects,
        actions=aggregate.found_actions,
        scopes=aggregate.found_scopes,
        has_subject=has_subject,
        has_action=has_action,
        has_scope=has_scope,
    )
    logger.debug(
        f"Accumulated context: subjects={context.subjects.to_list()}, "
        f"actions={context.actions.to_list()}, scopes={context.scopes.to_list()}"
    )
    return context
