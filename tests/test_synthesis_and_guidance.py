from indexer_intent.models.resolution_models import MissingKind
from indexer_intent.resolver.context import AccumulatedContext
from indexer_intent.resolver.guidance import guide, suggest
from indexer_intent.resolver.synthesis import describe, synthesize
from indexer_intent.utils.ordered_set import OrderedSet


def make_context(subjects=(), actions=(), scopes=()) -> AccumulatedContext:
    return AccumulatedContext(
        subjects=OrderedSet(subjects),
        actions=OrderedSet(actions),
        scopes=OrderedSet(scopes),
        has_subject=bool(subjects),
        has_action=bool(actions),
        has_scope=bool(scopes),
    )


class TestSynthesize:
    def test_full_context(self):
        ctx = make_context(["USDC"], ["index"], ["latest blocks"])
        assert synthesize(ctx) == "index USDC transfers from latest blocks"

    def test_uses_first_element_of_each_set(self):
        ctx = make_context(["WETH", "USDC"], ["track", "index"], ["block 18000000", "latest blocks"])
        assert synthesize(ctx) == "track WETH transfers from block 18000000"

    def test_is_deterministic(self):
        ctx = make_context(["USDT"], ["monitor"], ["recent blocks"])
        assert len({synthesize(ctx) for _ in range(5)}) == 1

    def test_partial_contexts_do_not_fail(self):
        assert synthesize(make_context(["USDC"], [], ["latest blocks"])) == "USDC transfers from latest blocks"
        assert synthesize(make_context([], ["index"], [])) == "index"
        assert synthesize(make_context()) == ""

    def test_describe_mentions_the_query_parts(self):
        message = describe(make_context(["USDC"], ["index"], ["latest blocks"]))
        assert "index USDC transfers from latest blocks" in message


class TestGuide:
    def test_subject_and_action_missing_asks_what_to_do(self):
        missing = [MissingKind.SUBJECT, MissingKind.ACTION, MissingKind.SCOPE]
        message = guide(missing, make_context(), turn_count=0)
        assert "What would you like to do?" in message
        for example in ("Index USDC transfers", "Track WETH transfers", "Monitor USDT transfers"):
            assert example in message

    def test_subject_missing_asks_which_token(self):
        message = guide([MissingKind.SUBJECT, MissingKind.SCOPE], make_context(actions=["track"]), turn_count=0)
        assert message.startswith("Which token")
        for example in ("USDC", "USDT", "WETH", "0x"):
            assert example in message

    def test_action_missing_names_known_subject(self):
        message = guide([MissingKind.ACTION, MissingKind.SCOPE], make_context(subjects=["USDC"]), turn_count=0)
        assert "What would you like me to do with USDC transfers?" in message

    def test_scope_missing_names_action_and_subject(self):
        ctx = make_context(subjects=["WETH"], actions=["monitor"])
        message = guide([MissingKind.SCOPE], ctx, turn_count=2)
        assert "What block range should I monitor WETH transfers from?" in message

    def test_scope_missing_without_recorded_phrases(self):
        ctx = AccumulatedContext(has_subject=True, has_action=True)
        message = guide([MissingKind.SCOPE], ctx, turn_count=1)
        assert "What block range should I index transfers from?" in message

    def test_fallback_is_generic(self):
        message = guide([], make_context(), turn_count=0)
        assert "Could you tell me more" in message

    def test_one_question_per_turn(self):
        message = guide([MissingKind.SUBJECT, MissingKind.SCOPE], make_context(actions=["index"]), turn_count=0)
        assert "block range" not in message


class TestSuggest:
    def test_suggestions_follow_the_question(self):
        assert suggest([MissingKind.SUBJECT, MissingKind.ACTION]) == [
            "Index USDC transfers",
            "Track WETH transfers",
            "Monitor USDT transfers",
        ]
        assert "USDC transfers" in suggest([MissingKind.SUBJECT])
        assert "Index all transfers" in suggest([MissingKind.ACTION])
        assert "From the latest 1000 blocks" in suggest([MissingKind.SCOPE])
        assert suggest([]) == []
