import logging
from pathlib import Path
from typing import Dict, Any, List, Type, Optional, Sequence

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import SystemMessage, HumanMessage, AIMessage, BaseMessage
from pydantic import BaseModel
from omegaconf import DictConfig

from indexer_intent.llm.llm_factory import LLMFactory
from indexer_intent.llm.prompt_manager import PromptManager
from indexer_intent.models.resolution_models import Turn

logger = logging.getLogger(__name__)


class LLMService:
    """
    A high-level interface for agents to talk to a chat model.

    The service owns one client and one agent's prompt templates. The client is
    passed in, so callers (and tests) decide which provider backs it.
    """

    def __init__(
        self,
        llm_client: BaseChatModel,
        system_prompt_template: str,
        human_prompt_template: Optional[str] = None,
        few_shot_examples: Optional[List[Dict[str, str]]] = None,
    ):
        self.llm_client = llm_client
        self.system_prompt_template = system_prompt_template
        self.human_prompt_template = human_prompt_template
        self.few_shot_examples = few_shot_examples

    @classmethod
    def from_config(
        cls,
        agent_prompts_dir: str,
        provider_key: str,
        llm_config: DictConfig,
        prompts_base_path: Path,
    ) -> "LLMService":
        """Initializes the complete LLM stack for a specific agent."""
        llm_factory = LLMFactory(llm_config=llm_config)
        llm_client = llm_factory.create_llm_client(provider_key)
        prompt_manager = PromptManager(prompts_base_path=prompts_base_path)

        system_prompt_template, human_prompt_template = prompt_manager.get_standard_prompts(agent_prompts_dir)
        few_shot_examples = prompt_manager.get_few_shot_examples(agent_prompts_dir)
        return cls(
            llm_client=llm_client,
            system_prompt_template=system_prompt_template,
            human_prompt_template=human_prompt_template,
            few_shot_examples=few_shot_examples,
        )

    def _build_messages(
        self,
        variables: Dict[str, Any],
        conversation: Optional[Sequence[Turn]] = None,
    ) -> List[BaseMessage]:
        """
        Builds the message list: system prompt, few-shot pairs, the prior
        conversation as human/AI messages, then the formatted user prompt.
        """
        messages: List[BaseMessage] = [
            SystemMessage(content=self.system_prompt_template.format(**variables))
        ]

        # Few-shot answers are JSON, so they are used verbatim rather than formatted.
        for example in self.few_shot_examples or []:
            if "user" in example and "assistant" in example:
                messages.append(HumanMessage(content=example["user"]))
                messages.append(AIMessage(content=example["assistant"]))

        for turn in conversation or []:
            if turn.role == "user":
                messages.append(HumanMessage(content=turn.content))
            else:
                messages.append(AIMessage(content=turn.content))

        if self.human_prompt_template is None:
            raise ValueError("No user prompt template available. Provide a 'user.prompt' for this agent.")

        messages.append(HumanMessage(content=self.human_prompt_template.format(**variables)))
        return messages

    async def agenerate_structured(
        self,
        variables: Dict[str, Any],
        response_model: Type[BaseModel],
        conversation: Optional[Sequence[Turn]] = None,
    ) -> Optional[BaseModel]:
        """
        Generates a structured response parsed into `response_model`.

        Raises whatever the provider or the output parser raises; returns None
        when the model declined to produce the structure.
        """
        messages = self._build_messages(variables, conversation)
        structured_llm = self.llm_client.with_structured_output(response_model)
        logger.debug(f"Sending {len(messages)} messages for structured output '{response_model.__name__}'.")
        return await structured_llm.ainvoke(messages)
