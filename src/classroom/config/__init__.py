"""Configuration package for the classroom engine."""

from classroom.config.app_config import (
    AppConfig,
    LLMSettings,
    QuizConfig,
    clear_config_cache,
    load_app_config,
)

__all__ = [
    "AppConfig",
    "LLMSettings",
    "QuizConfig",
    "clear_config_cache",
    "load_app_config",
]
