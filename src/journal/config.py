"""Configuration system using pydantic-settings with environment variable loading."""

from decimal import Decimal
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Trade record and screenshot storage locations."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    db_path: str = "data/journal.db"
    screenshot_dir: str = "data/screenshots"
    screenshot_base_url: str = "/screenshots"


class ServerSettings(BaseSettings):
    """HTTP API server configuration."""

    model_config = SettingsConfigDict(env_prefix="SERVER_")

    host: str = "0.0.0.0"
    port: int = 8080


class JournalSettings(BaseSettings):
    """Aggregation and reporting parameters.

    ROI for every view (week, month, year) is computed against ONE baseline:
    - "account": the active account's capital (passed by the caller)
    - "reference": the fixed reference_capital below
    """

    model_config = SettingsConfigDict(env_prefix="JOURNAL_")

    roi_baseline: Literal["account", "reference"] = "account"
    reference_capital: Decimal = Decimal("100000")
    recent_trades_limit: int = 4
    aggregate_cache_enabled: bool = True


class MarketSettings(BaseSettings):
    """Static market data snapshot.

    Conversion rates into the USD base currency. Overriding one currency
    requires supplying the whole table (MARKET_EXCHANGE_RATES as JSON).
    """

    model_config = SettingsConfigDict(env_prefix="MARKET_")

    exchange_rates: dict[str, Decimal] = {
        "USD": Decimal("1"),
        "USDT": Decimal("1"),
        "JPY": Decimal("1") / Decimal("150"),
        "CAD": Decimal("1") / Decimal("1.35"),
        "EUR": Decimal("1.08"),
        "GBP": Decimal("1.25"),
        "CHF": Decimal("1") / Decimal("0.88"),
    }


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"
    storage: StorageSettings = StorageSettings()
    server: ServerSettings = ServerSettings()
    journal: JournalSettings = JournalSettings()
    market: MarketSettings = MarketSettings()
