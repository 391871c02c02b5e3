import json
from pathlib import Path
from typing import Tuple, List, Dict, Optional


class PromptManager:
    """
    Loads prompt templates for the agents from per-agent folders:

        prompts/<agent>/system.prompt
        prompts/<agent>/user.prompt              (optional)
        prompts/<agent>/few_shot_examples.json   (optional)
    """

    def __init__(self, prompts_base_path: Path):
        if not prompts_base_path.is_dir():
            raise FileNotFoundError(f"Prompts base directory not found at: {prompts_base_path}")
        self.prompts_base_path = prompts_base_path

    def _read_file(self, path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise FileNotFoundError(f"Prompt file not found at: {path}")
        except OSError as e:
            raise IOError(f"Error reading prompt file at {path}: {e}") from e

    def load_prompt(self, prompts_dir: str, filename: str) -> str:
        """
        Loads a single prompt file from an agent's prompt directory.

        Args:
            prompts_dir: The name of the agent's prompt directory.
            filename: The name of the file to load (e.g., 'system.prompt').

        Returns:
            The content of the prompt file as a string.
        """
        agent_prompt_dir = self.prompts_base_path / prompts_dir
        if not agent_prompt_dir.is_dir():
            raise FileNotFoundError(f"Prompt directory for agent '{prompts_dir}' not found at {agent_prompt_dir}")

        return self._read_file(agent_prompt_dir / filename)

    def get_standard_prompts(
        self,
        prompts_dir: str,
        system_filename: str = "system.prompt",
        user_filename: str = "user.prompt"
    ) -> Tuple[str, Optional[str]]:
        """
        Loads the system prompt and the optional user prompt template.

        Returns:
            A tuple of the system prompt and the user prompt, or None when the
            agent ships no user prompt.
        """
        system_prompt = self.load_prompt(prompts_dir, system_filename)
        user_prompt = None
        try:
            user_prompt = self.load_prompt(prompts_dir, user_filename)
        except FileNotFoundError:
            pass

        return system_prompt, user_prompt

    def get_few_shot_examples(self, prompts_dir: str) -> Optional[List[Dict[str, str]]]:
        """Loads optional few-shot examples, a JSON list of {"user", "assistant"} pairs."""
        examples_path = self.prompts_base_path / prompts_dir / "few_shot_examples.json"
        if not examples_path.exists():
            return None

        try:
            with examples_path.open("r", encoding="utf-8") as f:
                examples = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Error decoding JSON from {examples_path}: {e}") from e

        if not isinstance(examples, list):
            raise ValueError("Few-shot examples file must contain a JSON list.")
        return examples
