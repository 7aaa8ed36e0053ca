from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Process-level configuration.

    This class is the single source of truth for:
    - environment selection
    - logging behavior
    - the defaults used when a debouncer is built without explicit parameters
    """

    model_config = SettingsConfigDict(
        env_prefix="TICKDEBOUNCE_",
        env_file=".env",
        extra="ignore",
    )

    # ---- Environment -------------------------------------------------

    env: Literal["local", "staging", "prod"] = "local"

    # ---- Logging -----------------------------------------------------

    log_level: str = "INFO"

    # ---- Debouncer defaults ------------------------------------------

    default_interval: float = Field(
        default=1.0,
        gt=0,
        description="Seconds between two ticks when no interval is given",
    )

    default_null_iterations_to_shutdown: int | None = Field(
        default=3,
        ge=0,
        description="Null ticks before auto-shutdown (0 or None disables it)",
    )

    default_only_count_contiguous_iterations: bool = True

    default_shutdown_after_error: bool = True


# Singleton settings object
settings = AppSettings()
