"""Application settings, read from NETWORTH_* environment variables or a .env file."""
import logging
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from networth.charts import RANGE_PRESETS

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="NETWORTH_",
        env_file=".env",
        extra="ignore",
    )

    data_path: str = Field("data/ledger.json", description="On-device ledger file")
    seed_path: str = Field("data/seed.json", description="Ledger used when data_path does not exist yet")
    default_range: str = Field("30d", description="Initial history chart window")
    currency: str = "USD"
    balance_alert_threshold: float = Field(0.0, ge=0)
    log_level: str = "INFO"

    @field_validator("default_range")
    @classmethod
    def validate_range(cls, v: str) -> str:
        if v not in RANGE_PRESETS:
            raise ValueError(f"default_range must be one of {RANGE_PRESETS}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level {v}")
        return v


@lru_cache
def get_settings() -> Settings:
    return Settings()


def configure_logging(level: str = "INFO") -> None:
    if logging.root.handlers:
        return
    logging.basicConfig(level=level, format=LOG_FORMAT)
