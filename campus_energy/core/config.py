"""Application configuration settings."""

import os
from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict


def _get_default_database_url() -> str:
    """Get the default database URL, using a mounted volume path if available."""
    if os.path.isdir("/data"):
        return "sqlite:////data/campus_energy.db"
    return "sqlite:///./campus_energy.db"


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
    )

    PROJECT_NAME: str = "Campus Energy"
    VERSION: str = "0.1.0"
    DEBUG: bool = True
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str = _get_default_database_url()

    # JWT Authentication
    SECRET_KEY: str = "your-secret-key-change-this-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    # Alerting
    LOW_BALANCE_RATIO: Decimal = Decimal("0.2")
    # 0 disables de-duplication: every qualifying report raises an alert
    LOW_BALANCE_ALERT_COOLDOWN_MINUTES: int = 0

    # Prediction
    PREDICTION_WINDOW_DAYS: int = 7
    PREDICTION_SENTINEL_DAYS: int = 999
    BUDGET_DAYS: int = 30
    HIGH_USAGE_KWH: Decimal = Decimal("10")

    # Device defaults applied to new lines
    DEFAULT_MAX_CURRENT_A: Decimal = Decimal("20")
    DEFAULT_MAX_POWER_W: Decimal = Decimal("4400")
    DEFAULT_IDLE_LIMIT_HOURS: int = 24
    DEVICE_OFFLINE_AFTER_SECONDS: int = 300


settings = Settings()
