"""Settings for Invoice Ledger, read with pydantic-settings.

Every field can be set through an ``INVL_``-prefixed environment variable or a
``.env`` file in the working directory. Settings are read only at the edges
(CLI, drafting service factory); the summary engine and the lineage resolver
receive explicit config values built from them.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from invoice_ledger.domain.value_objects import (
    Currency,
    DateBase,
    NegativeTotalPolicy,
    ReceiptDateSource,
)

NumberStrategyName = Literal["date", "increment"]


class Environment(str, Enum):
    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Settings(BaseSettings):
    """Invoice Ledger settings.

    Examples:
        INVL_INVOICE_NUMBER_STRATEGY=increment
        INVL_NUMBER_DIGITS=5
        INVL_INVOICE_NET_DAYS=14
        INVL_RECEIPT_DATE_SOURCE=invoice_issue_date
        INVL_NEGATIVE_TOTALS=clamp
    """

    model_config = SettingsConfigDict(
        env_prefix="INVL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "Invoice Ledger"
    app_version: str = "0.1.0"
    environment: Environment = Environment.DEVELOPMENT

    # Logging
    log_level: LogLevel = LogLevel.INFO
    log_format: Literal["json", "console"] = Field(
        default="console",
        description="'json' for log shippers, 'console' for terminals",
    )
    log_file: Path | None = Field(default=None, description="Also append logs to this file")

    # Display currency of amounts in minor units
    currency: Currency = Currency.EUR

    # Numbering
    quote_number_strategy: NumberStrategyName = "date"
    invoice_number_strategy: NumberStrategyName = "date"
    number_digits: int | None = Field(
        default=None,
        ge=1,
        le=12,
        description="Zero-padding width of the counter, strategy default when unset",
    )
    date_number_base: DateBase = Field(
        default=DateBase.YYYYMMDD,
        description="Bucket key format of date based numbers",
    )

    # Drafting
    quote_validity_days: int = Field(default=30, ge=0)
    invoice_net_days: int = Field(default=30, ge=0)

    # Lineage and summaries
    receipt_date_source: ReceiptDateSource = ReceiptDateSource.RECEIPT_DATE
    negative_totals: NegativeTotalPolicy = NegativeTotalPolicy.ALLOW

    @field_validator("log_format", mode="before")
    @classmethod
    def log_format_for_environment(cls, v: str | None, info) -> str:
        """An explicit ``None`` picks JSON in production and console elsewhere."""
        if v is None and info.data.get("environment") == Environment.PRODUCTION:
            return "json"
        return v or "console"

    @property
    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION


@lru_cache
def get_settings() -> Settings:
    """Load settings once per process; ``get_settings.cache_clear()`` reloads."""
    return Settings()
