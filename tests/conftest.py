import pytest

from tests.fakes import user_turns


@pytest.fixture
def three_turn_conversation():
    """The multi-turn walkthrough conversation: two prior turns plus the current utterance."""
    return user_turns("I want to index something", "USDC transfers"), "Index USDC transfers from latest blocks"
