import os
from pathlib import Path
from typing import Optional, Union

from omegaconf import DictConfig, OmegaConf


# --- Package-wide Constants ---

# Bundled YAML configuration and prompt templates ship inside the package.
PACKAGE_ROOT = Path(__file__).resolve().parent.parent
DEFAULT_CONFIG_DIR = PACKAGE_ROOT / "config"
DEFAULT_PROMPTS_DIR = PACKAGE_ROOT / "prompts"


def load_app_config(config_dir: Optional[Union[str, Path]] = None) -> DictConfig:
    """
    Loads all YAML configuration files from a directory into a single,
    namespaced OmegaConf DictConfig object.

    Each YAML file is loaded under a key corresponding to its filename stem.
    For example, `llms.yaml` will be accessible under the `llms` key
    in the returned config object. This prevents key collisions between different
    configuration files.

    It also registers a resolver to read environment variables with `${env:VAR_NAME}`.

    Args:
        config_dir: Directory holding the YAML files. Defaults to the
                    configuration bundled with the package.

    Returns:
        A single, merged OmegaConf DictConfig object containing all configurations.

    Raises:
        FileNotFoundError: If the specified configuration directory does not exist.
    """
    # This check prevents errors if the function is called multiple times.
    if not OmegaConf.has_resolver("env"):
        OmegaConf.register_new_resolver("env", lambda name: os.environ.get(name))

    config_path = Path(config_dir) if config_dir is not None else DEFAULT_CONFIG_DIR
    if not config_path.is_dir():
        raise FileNotFoundError(f"Configuration directory not found at '{config_path.resolve()}'")

    merged_config = OmegaConf.create()

    # Load each YAML file under a key corresponding to its filename
    for p in sorted(config_path.glob("*.yaml")):
        key = p.stem  # 'agents.yaml' -> 'agents'
        try:
            conf = OmegaConf.load(p)
            merged_config[key] = conf
        except Exception as e:
            # Provide more context on which file failed to load
            raise RuntimeError(f"Failed to load or parse configuration file '{p.name}': {e}") from e

    return merged_config
