"""Configuration schema using Pydantic."""

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


class Config(BaseSettings):
    """Root configuration for neousage."""
    projects_dir: str = "~/.neovate/projects"  # Root of the session log tree
    session_extension: str = ".jsonl"
    summary_max_length: int = 50  # Session summaries longer than this get "..."
    log_level: str = "WARNING"
    
    model_config = SettingsConfigDict(env_prefix="NEOUSAGE_")
    
    @field_validator("session_extension")
    @classmethod
    def validate_extension(cls, v: str) -> str:
        """Validate the extension looks like a file suffix."""
        if not v.startswith(".") or len(v) < 2:
            raise ValueError("session_extension must start with '.', e.g. '.jsonl'")
        return v
    
    @field_validator("summary_max_length")
    @classmethod
    def validate_summary_length(cls, v: int) -> int:
        """Validate summary_max_length is positive."""
        if v < 1:
            raise ValueError("summary_max_length must be at least 1")
        return v
    
    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log_level is a loguru level name."""
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level
    
    @property
    def projects_path(self) -> Path:
        """Get expanded projects directory path."""
        return Path(self.projects_dir).expanduser()
