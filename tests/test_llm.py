import asyncio
import json

import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage
from omegaconf import OmegaConf

from indexer_intent.llm import LLMFactory, LLMService, PromptManager
from indexer_intent.models.intent_analyzer_models import ModelAnalysisResponse
from indexer_intent.models.resolution_models import Turn
from indexer_intent.utils.config_parser import load_app_config
from tests.fakes import ready_response, user_turns

FAKE_CHAT_CLASS = "langchain_core.language_models.fake_chat_models.FakeListChatModel"


def providers(**entries):
    return OmegaConf.create({"llm_providers": entries})


class TestLLMFactory:
    def test_creates_configured_client(self):
        factory = LLMFactory(providers(fake={"class": FAKE_CHAT_CLASS, "params": {"responses": ["hi"]}}))
        client = factory.create_llm_client("fake")
        assert isinstance(client, FakeListChatModel)
        assert client.responses == ["hi"]

    def test_config_without_providers_is_rejected(self):
        with pytest.raises(ValueError):
            LLMFactory(OmegaConf.create({"something_else": {}}))

    def test_unknown_provider(self):
        factory = LLMFactory(providers(fake={"class": FAKE_CHAT_CLASS, "params": {"responses": ["a"]}}))
        with pytest.raises(ValueError, match="not found in the configuration"):
            factory.create_llm_client("missing")

    def test_provider_without_class_or_params(self):
        factory = LLMFactory(providers(broken={"params": {}}))
        with pytest.raises(ValueError, match="missing 'class' or 'params'"):
            factory.create_llm_client("broken")

    def test_unimportable_module(self):
        factory = LLMFactory(providers(bad={"class": "no_such_module_here.Client", "params": {}}))
        with pytest.raises(ImportError):
            factory.create_llm_client("bad")

    def test_unknown_class(self):
        factory = LLMFactory(
            providers(bad={"class": "langchain_core.language_models.fake_chat_models.NoSuchModel", "params": {}})
        )
        with pytest.raises(AttributeError):
            factory.create_llm_client("bad")

    def test_unset_environment_params_are_dropped(self, tmp_path, monkeypatch):
        monkeypatch.delenv("INDEXER_INTENT_TEST_UNSET", raising=False)
        (tmp_path / "llms.yaml").write_text(
            "llm_providers:\n"
            "  fake:\n"
            f"    class: {FAKE_CHAT_CLASS}\n"
            "    params:\n"
            "      responses: [hi]\n"
            "      sleep: ${env:INDEXER_INTENT_TEST_UNSET}\n"
        )
        app_config = load_app_config(tmp_path)
        client = LLMFactory(app_config.llms).create_llm_client("fake")
        assert client.sleep is None


class TestPromptManager:
    def test_missing_base_directory(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            PromptManager(tmp_path / "nope")

    def test_user_prompt_is_optional(self, tmp_path):
        (tmp_path / "agent").mkdir()
        (tmp_path / "agent" / "system.prompt").write_text("system text")
        system_prompt, user_prompt = PromptManager(tmp_path).get_standard_prompts("agent")
        assert system_prompt == "system text"
        assert user_prompt is None

    def test_missing_system_prompt(self, tmp_path):
        (tmp_path / "agent").mkdir()
        with pytest.raises(FileNotFoundError):
            PromptManager(tmp_path).get_standard_prompts("agent")

    def test_missing_agent_directory(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            PromptManager(tmp_path).load_prompt("ghost", "system.prompt")

    def test_few_shot_examples(self, tmp_path):
        (tmp_path / "agent").mkdir()
        manager = PromptManager(tmp_path)
        assert manager.get_few_shot_examples("agent") is None

        examples = [{"user": "hi", "assistant": "{}"}]
        (tmp_path / "agent" / "few_shot_examples.json").write_text(json.dumps(examples))
        assert manager.get_few_shot_examples("agent") == examples

    def test_invalid_few_shot_examples(self, tmp_path):
        (tmp_path / "agent").mkdir()
        examples_path = tmp_path / "agent" / "few_shot_examples.json"
        manager = PromptManager(tmp_path)

        examples_path.write_text("{not json")
        with pytest.raises(ValueError):
            manager.get_few_shot_examples("agent")

        examples_path.write_text('{"user": "hi"}')
        with pytest.raises(ValueError, match="JSON list"):
            manager.get_few_shot_examples("agent")


class StubStructuredClient:
    """Mimics the `with_structured_output(...).ainvoke(...)` chain of a chat model."""

    def __init__(self, reply):
        self.reply = reply
        self.schema = None
        self.messages = None

    def with_structured_output(self, schema):
        self.schema = schema
        return self

    async def ainvoke(self, messages):
        self.messages = messages
        return self.reply


class TestLLMService:
    def test_message_order(self):
        service = LLMService(
            llm_client=FakeListChatModel(responses=["unused"]),
            system_prompt_template="Classify requests. Turn {turn_count}.",
            human_prompt_template="User: {user_message}",
            few_shot_examples=[{"user": "USDC", "assistant": '{"is_ready": false}'}],
        )
        turns = user_turns("I want to index something") + [Turn(role="assistant", content="Which token?")]
        messages = service._build_messages({"user_message": "USDC", "turn_count": 2}, turns)

        assert [type(m) for m in messages] == [
            SystemMessage,
            HumanMessage,
            AIMessage,
            HumanMessage,
            AIMessage,
            HumanMessage,
        ]
        assert messages[0].content == "Classify requests. Turn 2."
        assert messages[2].content == '{"is_ready": false}'
        assert messages[3].content == "I want to index something"
        assert messages[4].content == "Which token?"
        assert messages[-1].content == "User: USDC"

    def test_without_user_template(self):
        service = LLMService(FakeListChatModel(responses=["x"]), "sys")
        with pytest.raises(ValueError, match="No user prompt template"):
            service._build_messages({"user_message": "hi"})

    def test_generate_structured(self):
        reply = ready_response()
        client = StubStructuredClient(reply)
        service = LLMService(client, "sys", "{user_message}")

        result = asyncio.run(
            service.agenerate_structured({"user_message": "index USDC"}, ModelAnalysisResponse)
        )
        assert result is reply
        assert client.schema is ModelAnalysisResponse
        assert client.messages[-1].content == "index USDC"
