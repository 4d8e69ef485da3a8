# src/brrrr/adapters/config.py
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    # App & logging
    ENV: str = Field(default="dev")
    LOG_LEVEL: str = Field(default="INFO")

    # persistence
    DB_URI: str = Field(default="sqlite:///brrrr.db")

    # -----------------------------
    # Saved deals
    # -----------------------------
    DEALS_DEFAULT_LIMIT: int = Field(default=50)
    MAX_COMPARE_DEALS: int = Field(default=3)

    # -----------------------------
    # Reports
    # -----------------------------
    REPORT_TITLE: str = Field(default="BRRRR Deal Analysis Report")

    model_config = SettingsConfigDict(
        env_prefix="BRRRR_",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def _upper_level(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator("DEALS_DEFAULT_LIMIT", "MAX_COMPARE_DEALS", mode="before")
    @classmethod
    def _positive_int(cls, v: Any) -> Any:
        try:
            i = int(v)
        except Exception as err:
            raise ValueError("limit must be an integer") from err
        if i <= 0:
            raise ValueError("limit must be > 0")
        return i


config = AppConfig()
