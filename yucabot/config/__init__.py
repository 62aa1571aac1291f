"""Configuration module: Settings model and the YAML loader."""

from yucabot.config.loader import load_config
from yucabot.config.settings import Settings

__all__ = ["Settings", "load_config"]
