"""Configuration module for neousage."""

from neousage.config.loader import get_config_path, load_config
from neousage.config.schema import Config

__all__ = ["Config", "load_config", "get_config_path"]
