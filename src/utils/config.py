import os
import yaml
from typing import Any, Dict, Optional
from pathlib import Path
import logging

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "CRYPTO_DASHBOARD_CONFIG"
DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent.parent / "configs" / "dashboard_config.yaml"


def resolve_config_path(config_path: Optional[str] = None) -> str:
    """
    Pick the config file to load.

    Precedence: explicit argument, then the CRYPTO_DASHBOARD_CONFIG
    environment variable, then configs/dashboard_config.yaml.
    """
    if config_path:
        return str(config_path)
    return os.environ.get(CONFIG_ENV_VAR) or str(DEFAULT_CONFIG_PATH)


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load a YAML configuration file.

    Args:
        config_path (str): Path to the YAML config file.

    Returns:
        Dict[str, Any]: Configuration dictionary (empty for an empty file).

    Raises:
        FileNotFoundError: If config file does not exist.
        yaml.YAMLError: If YAML parsing fails.
    """
    path = Path(config_path)
    if not path.is_file():
        logger.error(f"Config file not found: {config_path}")
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with open(path, "r") as file:
            config = yaml.safe_load(file)
        logger.info(f"Successfully loaded config from {config_path}")
        return config or {}
    except yaml.YAMLError as e:
        logger.error(f"Error parsing YAML config file: {e}")
        raise
