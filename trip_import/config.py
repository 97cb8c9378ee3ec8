"""Centralized configuration using Pydantic Settings.

This module provides a single source of truth for the tunable values of
the import flow: the dismissal delay before a closed wizard is reset,
haptics, the timeout applied to asynchronous steps, and the delays of
the simulated step operations.

Configuration can be overridden via environment variables:
- TRIP_IMPORT_FLOW_RESET_DELAY_SECONDS=0.5
- TRIP_IMPORT_FLOW_HAPTICS_ENABLED=false
- TRIP_IMPORT_TIMING_SCANNING_SECONDS=1.5
- TRIP_IMPORT_LOG_LEVEL=DEBUG
- etc.
"""

from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .domain.models import StepId
from .graph.step_graph import is_async_step


class FlowConfig(BaseSettings):
    """Flow controller and wizard shell configuration.

    Environment variables prefixed with TRIP_IMPORT_FLOW_.
    """

    model_config = SettingsConfigDict(env_prefix="TRIP_IMPORT_FLOW_")

    # Matches the sheet's dismissal animation.
    reset_delay_seconds: float = Field(default=0.3, ge=0.0)
    haptics_enabled: bool = True
    operation_timeout_seconds: Optional[float] = Field(default=30.0, gt=0.0)


class TimingConfig(BaseSettings):
    """Delays of the simulated step operations.

    Environment variables prefixed with TRIP_IMPORT_TIMING_.
    """

    model_config = SettingsConfigDict(env_prefix="TRIP_IMPORT_TIMING_")

    connecting_seconds: float = Field(default=2.0, ge=0.0)
    scanning_seconds: float = Field(default=3.0, ge=0.0)
    fetching_seconds: float = Field(default=2.0, ge=0.0)
    failing_steps: List[StepId] = Field(default_factory=list)

    @field_validator("failing_steps")
    @classmethod
    def check_failing_steps(cls, value: List[StepId]) -> List[StepId]:
        invalid = [step.value for step in value if not is_async_step(step)]
        if invalid:
            raise ValueError(f"Not asynchronous steps: {', '.join(invalid)}")
        return value

    def delay_for(self, step: StepId) -> float:
        """Return the simulated delay of an asynchronous step."""
        if step.value.endswith("-connecting"):
            return self.connecting_seconds
        if step.value.endswith("-scanning"):
            return self.scanning_seconds
        return self.fetching_seconds


class ObservabilityConfig(BaseSettings):
    """Logging and observability configuration.

    Environment variables prefixed with TRIP_IMPORT_LOG_.
    """

    model_config = SettingsConfigDict(env_prefix="TRIP_IMPORT_LOG_")

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    structured: bool = False  # Set True for JSON logging


class AppConfig(BaseSettings):
    """Main application configuration aggregating all sub-configs.

    This is the main entry point for configuration. Sub-configurations
    can be accessed via attributes:

        config = get_config()
        print(config.flow.reset_delay_seconds)
        print(config.timing.delay_for(StepId.EMAIL_SCANNING))

    Environment variables prefixed with TRIP_IMPORT_.
    """

    model_config = SettingsConfigDict(env_prefix="TRIP_IMPORT_")

    flow: FlowConfig = Field(default_factory=FlowConfig)
    timing: TimingConfig = Field(default_factory=TimingConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Get the singleton application configuration.

    Configuration is loaded once and cached. To reload configuration
    (e.g., in tests), use reset_config() first.

    Returns:
        The application configuration instance.
    """
    return AppConfig()


def reset_config() -> None:
    """Reset the configuration cache.

    Call this in tests to ensure a fresh configuration is loaded.
    """
    get_config.cache_clear()
