"""Configuration management.

Loads from TOML config files + environment variables.
Uses pydantic-settings for validation and env var overriding.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings

from .clock import resolve_timezone
from .errors import ConfigError


# ---------------------------------------------------------------------------
# Sub-configs
# ---------------------------------------------------------------------------

class ClassifierConfig(BaseModel):
    batch_size: int = Field(default=50, gt=0)
    timeout_seconds: float = Field(default=60.0, gt=0)  # per batch


class RecommendationConfig(BaseModel):
    recent_history_limit: int = Field(default=20, gt=0)
    timeout_seconds: float = Field(default=60.0, gt=0)


class PerformanceConfig(BaseModel):
    # Calendar months (1 = January) included in the market/league rollup
    months: list[int] = Field(default_factory=lambda: list(range(1, 10)))

    @field_validator("months")
    @classmethod
    def _check_months(cls, value: list[int]) -> list[int]:
        if any(m < 1 or m > 12 for m in value):
            raise ValueError("months must be between 1 and 12")
        return value


class ObservabilityConfig(BaseModel):
    log_level: str = "INFO"
    log_format: str = "console"  # "json" or "console"


# ---------------------------------------------------------------------------
# Top-level settings
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    """Top-level application settings.

    Loaded from TOML config files, overridden by environment variables.
    """

    unit_percentage: float = Field(default=0.01, gt=0, le=1)  # 1U = 1% of bankroll
    default_initial_bankroll: float = Field(default=100.0, gt=0)
    stake_ladder: list[float] = Field(default_factory=lambda: [0.5, 1.0, 2.0, 3.0])

    # Calendar day boundaries; empty = process local time zone
    timezone: str = ""

    # Sub-configs
    classifier: ClassifierConfig = Field(default_factory=ClassifierConfig)
    recommendation: RecommendationConfig = Field(default_factory=RecommendationConfig)
    performance: PerformanceConfig = Field(default_factory=PerformanceConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    # Storage
    data_dir: str = "data"
    ledger_file: str = "ledger.json"

    model_config = {"env_prefix": "BANKROLL_", "env_nested_delimiter": "__"}

    @field_validator("timezone")
    @classmethod
    def _check_timezone(cls, value: str) -> str:
        try:
            resolve_timezone(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"unknown time zone {value!r}") from exc
        return value

    @property
    def ledger_path(self) -> Path:
        return Path(self.data_dir) / self.ledger_file


def load_settings(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Settings:
    """Load settings from TOML file + env vars.

    Args:
        config_path: Path to TOML config file (optional).
        overrides: Dict of overrides to apply on top.
    """
    data: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            import tomli

            with open(path, "rb") as f:
                try:
                    data = tomli.load(f)
                except tomli.TOMLDecodeError as exc:
                    raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc

    if overrides:
        data.update(overrides)

    try:
        return Settings(**data)
    except PydanticValidationError as exc:
        raise ConfigError(str(exc)) from exc
