"""
Centralized Configuration for the Backtest Engine
Uses Pydantic Settings with .env loading.
"""

from decimal import Decimal
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BacktestSettings(BaseSettings):
    """Capital, sizing and friction for a backtest run."""
    model_config = SettingsConfigDict(env_prefix="BACKTEST_", extra="ignore")

    initial_capital: Decimal = Decimal("1000000")
    position_size_fraction: Decimal = Decimal("0.02")  # 2% of value per position
    transaction_cost: Decimal = Decimal("0.001")  # 0.1% per trade

    @field_validator("initial_capital")
    @classmethod
    def validate_capital(cls, v: Decimal) -> Decimal:
        """Capital must be strictly positive."""
        if v <= 0:
            raise ValueError(f"initial_capital must be positive, got {v}")
        return v

    @field_validator("position_size_fraction")
    @classmethod
    def validate_fraction(cls, v: Decimal) -> Decimal:
        """Fraction must lie in (0, 1]."""
        if not Decimal("0") < v <= Decimal("1"):
            raise ValueError(f"position_size_fraction must be in (0, 1], got {v}")
        return v

    @field_validator("transaction_cost")
    @classmethod
    def validate_cost(cls, v: Decimal) -> Decimal:
        """Cost must lie in [0, 1)."""
        if not Decimal("0") <= v < Decimal("1"):
            raise ValueError(f"transaction_cost must be in [0, 1), got {v}")
        return v


class LoggingSettings(BaseSettings):
    """Logging settings."""
    model_config = SettingsConfigDict(extra="ignore")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(
        default="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        alias="LOG_FORMAT",
    )


class Settings(BaseSettings):
    """Root settings object."""
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    backtest: BacktestSettings = Field(default_factory=BacktestSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def reload_settings() -> Settings:
    """Force reload settings (clears cache)."""
    get_settings.cache_clear()
    return get_settings()
