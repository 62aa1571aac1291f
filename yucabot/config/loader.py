"""YAML configuration loader.

Configuration is layered (later layers override earlier ones):

    1. built-in defaults  -- ``_DEFAULT_CONFIG`` below
    2. config/config.yaml -- static settings checked into the repo

The YAML file holds structured settings that do not fit in a flat env var,
mainly the ordered list of answer-generation candidates.  Credentials and
scalar tuning values never live in YAML; they come from
:class:`~yucabot.config.settings.Settings`.
"""

import copy
from pathlib import Path
from typing import Any

import yaml

DEFAULT_CONFIG_PATH = "config/config.yaml"

# Used for any section config.yaml leaves out.
_DEFAULT_CONFIG: dict[str, Any] = {
    "generation": {
        "candidates": [
            {"provider": "huggingface"},
            {"provider": "openai"},
            {"provider": "anthropic"},
        ],
    },
}


def load_config(path: str = DEFAULT_CONFIG_PATH) -> dict:
    """Load the YAML config over the built-in defaults.

    Args:
        path: Path to the YAML configuration file.  A missing or empty file
              is not an error; the built-in defaults are used instead.

    Returns:
        Fully resolved configuration dictionary.
    """
    config = copy.deepcopy(_DEFAULT_CONFIG)

    config_path = Path(path)
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            yaml_config = yaml.safe_load(f) or {}
        _deep_merge(config, yaml_config)

    return config


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
