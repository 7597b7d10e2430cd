# src/dealscope/adapters/config.py
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    # App & logging
    ENV: str = Field(default="dev")
    LOG_LEVEL: str = Field(default="INFO")

    # persistence
    DB_URI: str = Field(default="sqlite:///dealscope.db")

    # Saved deals
    DEALS_DEFAULT_LIMIT: int = Field(default=50)

    # -----------------------------
    # Spreadsheet import
    # -----------------------------
    IMPORT_BATCH_SIZE: int = Field(default=50)
    DEFAULT_STATE: str = Field(default="NY")

    # -----------------------------
    # Investor funnel
    # -----------------------------
    INVESTOR_MIN_INVESTMENT: float = Field(default=50_000.0)
    INVESTOR_VIP_INVESTMENT: float = Field(default=500_000.0)

    model_config = SettingsConfigDict(
        env_prefix="DEALSCOPE_",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("IMPORT_BATCH_SIZE", "DEALS_DEFAULT_LIMIT", mode="before")
    @classmethod
    def _positive_int(cls, v: Any) -> Any:
        try:
            n = int(v)
        except (TypeError, ValueError) as err:
            raise ValueError("must be an integer") from err
        if n <= 0:
            raise ValueError("must be > 0")
        return n

    @field_validator("INVESTOR_MIN_INVESTMENT", "INVESTOR_VIP_INVESTMENT", mode="before")
    @classmethod
    def _to_amount(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip().replace("$", "").replace(",", "")
        f = float(v)
        if f < 0:
            raise ValueError("amount must be non-negative")
        return f

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def _upper_level(cls, v: Any) -> Any:
        return str(v).strip().upper()


config = AppConfig()
