"""Configuration system using pydantic-settings with environment variable loading."""

from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

HERMES_BASE_URL = "https://hermes.pyth.network"
DEFAULT_SELECTED_INDICES = [0, 4, 8, 12, 16]


class HermesSettings(BaseSettings):
    """Hermes price service connection settings."""

    model_config = SettingsConfigDict(env_prefix="HERMES_")

    base_url: str = HERMES_BASE_URL
    timeout: float = 30.0  # seconds
    retry_attempts: int = Field(default=3, ge=1)
    retry_delay: float = Field(default=1.0, ge=0)  # seconds between attempts
    user_agent: str = "pyth-oracle-processor/1.0.0"
    batch_size: int = Field(default=10, ge=1)  # feed ids per request in the fallback path


class PipelineSettings(BaseSettings):
    """Selection and on-chain submission parameters."""

    model_config = SettingsConfigDict(env_prefix="PIPELINE_")

    selected_indices: list[int] = Field(default_factory=lambda: list(DEFAULT_SELECTED_INDICES))
    entry_point: Literal["single_bytes", "accumulator_array"] = "single_bytes"
    gas_safety_multiplier: float = 1.25  # gas model is a floor, callers pad 1.2-1.3x

    @field_validator("gas_safety_multiplier")
    @classmethod
    def _multiplier_not_below_one(cls, value: float) -> float:
        if value < 1.0:
            raise ValueError("gas_safety_multiplier must be >= 1.0")
        return value


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    hermes: HermesSettings = HermesSettings()
    pipeline: PipelineSettings = PipelineSettings()
