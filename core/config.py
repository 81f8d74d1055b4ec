"""Application configuration using Pydantic settings."""
from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration for the application."""

    model_config = SettingsConfigDict(
        env_prefix="PVFIN_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    horizon_years: int = Field(default=15, ge=1)
    subsidy_grant_ratio: float = Field(default=0.10, ge=0)
    balance_payoff_threshold: float = Field(default=1.0, ge=0)
    max_period_months: int = Field(default=600, ge=1)

    default_reference_rate: float = 4.27
    default_energy_inflation_rate: float = 3.0
    default_installed_capacity: float = 45.0
    default_yield_per_unit_capacity: float = 1000.0
    default_energy_price_buy: float = 0.70
    default_energy_price_sell: float = 0.25
    default_self_consumption_percent: float = 30.0

    log_level: str = "INFO"
    cors_allow_origins: List[str] = ["*"]


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()
