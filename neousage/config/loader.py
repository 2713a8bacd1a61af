"""Configuration loading utilities."""

import json
from pathlib import Path

from loguru import logger
from pydantic import ValidationError

from neousage.config.schema import Config


def get_config_path() -> Path:
    """Get the default configuration file path."""
    return Path.home() / ".neousage" / "config.json"


def load_config(config_path: Path | None = None) -> Config:
    """
    Load configuration from file, falling back to defaults.
    
    Values from ``NEOUSAGE_*`` environment variables apply to any key the
    file does not set.
    
    Args:
        config_path: Optional path to config file. Uses default if not provided.
    
    Returns:
        Loaded configuration object.
    """
    path = config_path or get_config_path()
    
    if path.exists():
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return Config(**data)
        except (json.JSONDecodeError, OSError, TypeError, ValidationError) as e:
            logger.warning(f"Failed to load config from {path}: {e}")
            logger.warning("Using default configuration.")
    
    return Config()
