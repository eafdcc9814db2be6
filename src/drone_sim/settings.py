"""Application settings loaded from the environment and .env via pydantic-settings."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


logger = logging.getLogger(__name__)


class SimulatorSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    output_root: Path = Field(default=Path("outputs"), validation_alias="DRONE_SIM_OUTPUTS")
    frame_rate_hz: float = Field(default=60.0, gt=0, validation_alias="DRONE_SIM_FRAME_RATE")

    @field_validator("output_root", mode="before")
    @classmethod
    def _expand_root(cls, value: Path) -> Path:
        return Path(value).expanduser().resolve()


_settings: Optional[SimulatorSettings] = None


def get_settings() -> SimulatorSettings:
    global _settings
    if _settings is None:
        _settings = SimulatorSettings()
        logger.debug("Loaded settings: %s", _settings)
    return _settings


def output_root() -> Path:
    return get_settings().output_root


def default_frame_rate() -> float:
    return get_settings().frame_rate_hz


def reset_settings_cache() -> None:
    global _settings
    _settings = None
