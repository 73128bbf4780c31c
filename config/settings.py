"""Workspace check settings with environment variable support."""

import logging
from typing import Optional, Any, List
from pydantic_settings import BaseSettings
from pydantic import field_validator
from functools import lru_cache


DEFAULT_CLIPPY_ARGS = [
    "--fix",
    "--allow-dirty",
    "--allow-staged",
    "--all-features",
    "-Zunstable-options",
    "--",
    "-D",
    "warnings",
]


class Settings(BaseSettings):
    """Settings for change-impact analysis and the check runners."""

    model_config = {
        "env_prefix": "WORKSPACE_CHECK_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore"
    }

    # Version control
    git_executable: str = "git"
    git_remote: str = "origin"

    # Workspace layout
    manifest_filename: str = "Cargo.toml"
    lockfile_filename: str = "Cargo.lock"
    source_extension: str = ".rs"
    manifest_kind: str = "cargo"

    # Check runners
    cargo_executable: str = "cargo"
    clippy_args: List[str] = DEFAULT_CLIPPY_ARGS
    eslint_executable: str = "eslint"
    pre_commit_config_path: str = ".pre-commit-config.yaml"

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None
    verbose: bool = False

    @field_validator('source_extension', mode='before')
    @classmethod
    def normalize_extension(cls, v: Any) -> str:
        """Make sure the extension carries its leading dot."""
        v = str(v).strip()
        if v and not v.startswith('.'):
            return f".{v}"
        return v

    @field_validator('log_level', mode='before')
    @classmethod
    def validate_log_level(cls, v: Any) -> str:
        """Reject level names the logging module does not know."""
        level = str(v).strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Invalid log level: {v}")
        return level


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings instance
    """
    return Settings()


def clear_settings_cache() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    get_settings.cache_clear()
