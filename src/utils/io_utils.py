"""
I/O utilities for loading run configuration files.
"""

import logging
from pathlib import Path
from typing import Dict, Union

import yaml

logger = logging.getLogger(__name__)


def load_config(config_path: Union[str, Path]) -> Dict:
    """
    Loads a run configuration from a YAML file.

    Args:
        config_path (str | Path): Path to the YAML configuration file.

    Returns:
        Dict: The loaded configuration (empty if the file is empty).

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the top level of the file is not a mapping.
    """
    with open(config_path, 'r') as f:
        config = yaml.safe_load(f)

    if config is None:
        config = {}
    if not isinstance(config, dict):
        raise ValueError(
            f"Config file {config_path} must contain a mapping, got {type(config).__name__}."
        )
    logger.info(f"Loaded config from {config_path}: {sorted(config)}")
    return config
