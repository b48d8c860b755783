"""
Configuration management for dexwatch.

Two sources:
- Environment / .env file: process-level settings (log level, database, file paths)
- YAML config: the venues, token path and detection parameters
"""

import os
from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import (
    BaseModel,
    Field,
    PositiveInt,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from dexwatch.core.errors import ConfigurationError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==============================================
    # Environment
    # ==============================================
    dexwatch_env: str = Field(default="local", description="Environment: local/cloud")
    log_level: str = Field(default="INFO")

    # ==============================================
    # Files
    # ==============================================
    dexwatch_config_path: str = Field(default="config/config.yaml")
    dexwatch_abi_path: str = Field(default="abi/uniswap_v2_router02_abi.json")

    # ==============================================
    # Database
    # ==============================================
    database_url: str = Field(default="sqlite:///arbitrage.db")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v = v.upper()
        if v not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# ==============================================
# YAML bot config
# ==============================================

class TokensConfig(BaseModel):
    """
    Fixed swap path. The first token is sold, the last is the quote token.

    Given either as `path` (input first) or as an `input`/`output` pair;
    after validation all three fields are filled.
    """

    input: Optional[str] = None
    output: Optional[str] = None
    path: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def resolve_path(self) -> "TokensConfig":
        pair_given = self.input is not None or self.output is not None
        if self.path:
            if pair_given:
                raise ValueError("Give either tokens.path or tokens.input/output, not both")
            if len(self.path) < 2:
                raise ValueError("tokens.path needs at least two addresses")
            self.input, self.output = self.path[0], self.path[-1]
        elif self.input and self.output:
            self.path = [self.input, self.output]
        else:
            raise ValueError("tokens needs either path or both input and output")
        return self


class BotSettings(BaseModel):
    """Detection parameters. Amounts in quote-token units unless noted."""

    trade_size: PositiveInt                 # smallest unit of the input token
    min_profit: Decimal = Field(ge=0)
    cost_estimate: Decimal = Field(ge=0)
    refresh_rate: float = Field(gt=0)       # seconds between ticks
    quote_decimals: int = Field(default=6, ge=0, le=36)
    quote_timeout: Optional[float] = Field(default=None, gt=0)
    quote_retries: int = Field(default=2, ge=0, le=10)   # after the first attempt

    @field_validator("min_profit", "cost_estimate", mode="before")
    @classmethod
    def decimal_from_text(cls, v: Any) -> Any:
        # YAML gives floats; go through str so 0.05 stays 0.05
        if isinstance(v, float):
            return str(v)
        return v

    @model_validator(mode="after")
    def check_timeout(self) -> "BotSettings":
        if self.quote_timeout is None:
            self.quote_timeout = self.refresh_rate / 2
        elif self.quote_timeout >= self.refresh_rate:
            raise ValueError(
                f"quote_timeout ({self.quote_timeout}s) must be below "
                f"refresh_rate ({self.refresh_rate}s)"
            )
        return self


class BotConfig(BaseModel):
    """Validated contents of config.yaml."""

    rpc_url: str
    venues: dict[str, str]                  # name -> router address, in order
    tokens: TokensConfig
    settings: BotSettings

    @field_validator("rpc_url")
    @classmethod
    def validate_rpc_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Invalid RPC URL format: {v}")
        return v

    @field_validator("venues")
    @classmethod
    def validate_venues(cls, v: dict[str, str]) -> dict[str, str]:
        if len(v) < 2:
            raise ValueError("At least two venues are required")
        return v


def load_yaml_config(config_path: Optional[str] = None) -> dict[str, Any]:
    """
    Load YAML configuration file.

    Args:
        config_path: Path to config file. Defaults to settings / config/config.yaml

    Returns:
        Configuration dictionary
    """
    if config_path is None:
        config_path = os.getenv("DEXWATCH_CONFIG_PATH") or get_settings().dexwatch_config_path

    path = Path(config_path)
    if not path.exists():
        raise ConfigurationError(
            f"Config file not found: {config_path}",
            details={"path": str(path)},
        )

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {config_path} must contain a mapping")
    return data


def load_bot_config(config_path: Optional[str] = None) -> BotConfig:
    """Load and validate the bot config. Raises ConfigurationError on any problem."""
    raw = load_yaml_config(config_path)
    try:
        return BotConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid configuration: {e.error_count()} error(s)",
            details={"errors": e.errors(include_url=False)},
        ) from e
