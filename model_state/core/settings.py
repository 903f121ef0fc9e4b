"""model_state - Configuration system with Pydantic Settings"""

from __future__ import annotations
from typing import Optional
from pathlib import Path, PurePath
import logging
import os
import pydantic_settings
from pydantic import Field, field_validator
from pydantic_settings.main import SettingsConfigDict
from pydantic_settings import (
    PydanticBaseSettingsSource,
    EnvSettingsSource,
    DotEnvSettingsSource,
)

from model_state.core.paths import resolve_state_path

__all__ = [
    "Settings",
    "settings",
    "get_settings",
    "reload_settings",
]

ENV_PREFIX = "MODEL_STATE_"
OUTPUT_FORMATS = ("text", "json")


class Settings(pydantic_settings.BaseSettings):
    """Application settings with type-safe validation"""

    debug: bool = Field(default=False)
    log_level: str = Field(default="WARNING")

    # Overrides the platform-resolved location when set
    state_file: Optional[str] = Field(default=None)

    output_format: str = Field(default="text")

    model_config = SettingsConfigDict(
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("output_format")
    @classmethod
    def validate_output_format(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in OUTPUT_FORMATS:
            raise ValueError(f"output_format must be one of {', '.join(OUTPUT_FORMATS)}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.strip().upper()
        if not isinstance(logging.getLevelName(v), int):
            raise ValueError(f"Unknown log level: {v}")
        return v

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[pydantic_settings.BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        del env_settings, dotenv_settings

        model_case_sensitive = settings_cls.model_config.get("case_sensitive")
        case_sensitive = model_case_sensitive if isinstance(model_case_sensitive, bool) else None

        return (
            init_settings,
            EnvSettingsSource(
                settings_cls,
                env_prefix=ENV_PREFIX,
                case_sensitive=case_sensitive,
            ),
            DotEnvSettingsSource(
                settings_cls,
                env_prefix=ENV_PREFIX,
                env_file=_dotenv_paths(settings_cls),
                case_sensitive=case_sensitive,
            ),
            file_secret_settings,
        )

    def state_file_path(self, platform: Optional[str] = None) -> PurePath:
        """
        Get the state file location.

        Args:
            platform: Optional ``sys.platform`` style identifier used when
                no override is configured. Defaults to the running platform.

        Returns:
            The configured override with ~ expanded, or the
            platform-resolved opencode state file path.
        """
        if self.state_file:
            return Path(self.state_file).expanduser()
        return resolve_state_path(platform)


APP_DIR_NAME = "model-state"


def _config_dir() -> Path:
    env_value = os.getenv("XDG_CONFIG_HOME")
    base = Path(env_value).expanduser() if env_value else Path.home() / ".config"
    return base / APP_DIR_NAME


def _dotenv_paths(settings_cls: type[pydantic_settings.BaseSettings]) -> tuple[Path | str, ...]:
    explicit_env_files = settings_cls.model_config.get("env_file")
    if explicit_env_files is not None:
        if isinstance(explicit_env_files, (str, Path)):
            return (explicit_env_files,)
        return tuple(explicit_env_files)

    return (".env", _config_dir() / ".env")


settings: Settings = Settings()


def get_settings() -> Settings:
    """
    Get the global settings singleton instance.

    Returns:
        The global Settings instance.
    """
    return settings


def reload_settings() -> Settings:
    """
    Reload settings by creating a new Settings instance.

    Returns:
        A new Settings instance with current environment values.
    """
    return Settings()
