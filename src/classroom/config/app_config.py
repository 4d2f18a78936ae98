"""Application configuration loader.

Loads centralized configuration from data/config/classroom_v1.yaml,
falling back to built-in defaults when the file is absent. Values missing
from the file take their default.

Usage:
    from classroom.config.app_config import load_app_config

    config = load_app_config()
    delay = config.quiz.feedback_seconds
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger(__name__)

# Config file path (relative to project root)
CONFIG_FILE = Path("data/config/classroom_v1.yaml")

# Overrides paths.db_path when set
DB_PATH_ENV = "CLASSROOM_DB"


@dataclass
class LLMSettings:
    """Chat assistant provider settings."""

    provider: str = "openai"
    base_url: str | None = None
    model: str = "gpt-4"
    api_key_env: str | None = "OPENAI_API_KEY"
    temperature: float = 0.7
    timeout: int = 60

    def get_api_key(self) -> str | None:
        """Get API key from environment variable."""
        if self.api_key_env:
            return os.environ.get(self.api_key_env)
        return None


@dataclass
class QuizConfig:
    """Quiz session settings."""

    feedback_seconds: float = 2.0


@dataclass
class AppConfig:
    """Application-wide configuration."""

    llm: LLMSettings = field(default_factory=LLMSettings)
    quiz: QuizConfig = field(default_factory=QuizConfig)
    paths: dict[str, str] = field(default_factory=dict)

    @property
    def db_path(self) -> Path:
        env_path = os.environ.get(DB_PATH_ENV)
        if env_path:
            return Path(env_path)
        return Path(self.paths.get("db_path", "db/classroom.db"))


# Module-level cache
_cached_config: AppConfig | None = None


def _get_defaults() -> dict[str, Any]:
    """Get default configuration values."""
    return {
        "llm": {
            "provider": "openai",
            "base_url": None,
            "model": "gpt-4",
            "api_key_env": "OPENAI_API_KEY",
            "temperature": 0.7,
            "timeout": 60,
        },
        "quiz": {
            "feedback_seconds": 2.0,
        },
        "paths": {
            "db_path": "db/classroom.db",
        },
    }


def _parse_config(data: dict[str, Any]) -> AppConfig:
    """Parse configuration dictionary into AppConfig object."""
    defaults = _get_defaults()

    llm_data = {**defaults["llm"], **(data.get("llm") or {})}
    llm = LLMSettings(
        provider=llm_data["provider"],
        base_url=llm_data["base_url"],
        model=llm_data["model"],
        api_key_env=llm_data["api_key_env"],
        temperature=float(llm_data["temperature"]),
        timeout=int(llm_data["timeout"]),
    )

    quiz_data = {**defaults["quiz"], **(data.get("quiz") or {})}
    quiz = QuizConfig(feedback_seconds=float(quiz_data["feedback_seconds"]))

    paths = {**defaults["paths"], **(data.get("paths") or {})}

    return AppConfig(llm=llm, quiz=quiz, paths=paths)


def load_app_config(force_reload: bool = False) -> AppConfig:
    """Load application config.

    Args:
        force_reload: If True, ignore cached config and reload from file.

    Returns:
        AppConfig object with all settings.
    """
    global _cached_config

    if _cached_config is not None and not force_reload:
        return _cached_config

    if CONFIG_FILE.exists():
        logger.debug("loading_app_config", source=str(CONFIG_FILE))
        data = yaml.safe_load(CONFIG_FILE.read_text(encoding="utf-8")) or {}
    else:
        logger.info("using_default_config")
        data = _get_defaults()

    _cached_config = _parse_config(data)
    return _cached_config


def clear_config_cache() -> None:
    """Clear the configuration cache.

    Useful for testing or when config is modified at runtime.
    """
    global _cached_config
    _cached_config = None
