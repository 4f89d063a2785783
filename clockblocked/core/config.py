"""
Application configuration using Pydantic Settings.

Centralizes all configuration with environment variable support.
Precedence: init kwargs > environment > .env > config/settings.yaml >
config/defaults.yaml > field defaults.
"""

from functools import lru_cache
from pathlib import Path
from typing import List, Tuple, Type

from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    YamlConfigSettingsSource,
)

from .phrases import MOTIVATIONAL_PHRASES


def get_project_root() -> Path:
    """Get the project root directory."""
    # Navigate up from clockblocked/core/config.py
    return Path(__file__).parent.parent.parent


CONFIG_DIR = get_project_root() / "config"
YAML_FILES = [CONFIG_DIR / "defaults.yaml", CONFIG_DIR / "settings.yaml"]


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Database
    database_url: str = "sqlite+aiosqlite:///./data/clockblocked.db"

    # Logging
    log_level: str = "INFO"
    log_to_file: bool = True
    logs_dir: str = "logs"

    # Reminder burst
    notification_repeats: int = 10
    repeat_interval_seconds: float = 17.5
    notification_title: str = "ClockBlocked Alarm"
    notification_sound: str = "alarm.wav"

    # Verification challenge
    challenge_timeout_minutes: int = 15
    countdown_tick_seconds: float = 1.0
    phrase_match_threshold: float = 0.8
    challenge_phrases: List[str] = list(MOTIVATIONAL_PHRASES)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"  # Ignore extra env vars

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=YAML_FILES),
        )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
