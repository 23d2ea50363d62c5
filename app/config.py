from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # OpenAI
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4.1-mini"

    # Engine defaults
    default_industry: str = "mining"
    default_forecast_periods: int = 12
    carbon_price_usd: float = 50.0  # per tCO2e, used by scenario analysis

    # Service
    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
