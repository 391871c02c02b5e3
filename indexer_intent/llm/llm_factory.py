import importlib
import logging

from omegaconf import OmegaConf, DictConfig
from langchain_core.language_models.chat_models import BaseChatModel

logger = logging.getLogger(__name__)


class LLMFactory:
    """
    A factory class for creating LangChain chat model clients using OmegaConf.

    Each provider entry names a client class by its dotted import path and the
    keyword arguments to build it with:

        llm_providers:
          openai-gpt-4o:
            class: langchain_openai.ChatOpenAI
            params: {model: gpt-4o, api_key: "${env:OPENAI_API_KEY}"}
    """

    def __init__(self, llm_config: DictConfig):
        """
        Initializes the factory with the LLM provider configuration.

        Args:
            llm_config: OmegaConf DictConfig containing an 'llm_providers' mapping.
        """
        if (
            not isinstance(llm_config, DictConfig)
            or "llm_providers" not in llm_config
            or not isinstance(llm_config.llm_providers, DictConfig)
        ):
            raise ValueError("LLM config must be a dictionary and contain a 'llm_providers' dictionary.")
        self._config = llm_config.llm_providers

    def create_llm_client(self, provider_key: str) -> BaseChatModel:
        """
        Creates an LLM client instance based on the provider key.

        Args:
            provider_key: The key from llms.yaml (e.g., 'openai-gpt-4o').

        Returns:
            An instance of the specified LangChain chat model client.
        """
        if not self._config or provider_key not in self._config:
            raise ValueError(f"Provider '{provider_key}' not found in the configuration. "
                             f"Available providers: {list(self._config.keys() if self._config else [])}")

        provider_config = self._config.get(provider_key)

        if "class" not in provider_config or "params" not in provider_config:
            raise ValueError(f"Provider '{provider_key}' configuration is missing 'class' or 'params'.")

        resolved_params = OmegaConf.to_container(provider_config.params, resolve=True)
        # Unset environment variables resolve to None; let the client apply its own defaults.
        resolved_params = {key: value for key, value in resolved_params.items() if value is not None}

        module_path, class_name = provider_config["class"].rsplit(".", 1)
        try:
            module = importlib.import_module(module_path)
            llm_class = getattr(module, class_name)
        except ImportError as e:
            raise ImportError(f"Could not import module '{module_path}' for LLM provider '{provider_key}'.") from e
        except AttributeError as e:
            raise AttributeError(f"Could not find class '{class_name}' in module '{module_path}'.") from e

        try:
            client = llm_class(**resolved_params)
        except TypeError as e:
            raise TypeError(f"Failed to instantiate LLM client for '{provider_key}'. "
                            f"Check if the parameters in the config match the class constructor. Error: {e}") from e
        except Exception as e:
            raise RuntimeError(f"Failed to instantiate LLM client for '{provider_key}': {e}") from e

        logger.info(f"Created LLM client '{class_name}' for provider '{provider_key}'.")
        return client
