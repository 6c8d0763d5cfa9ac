"""Shared test fixtures for the trade journal."""

from pathlib import Path

import pytest

from journal.config import AppSettings, JournalSettings, StorageSettings
from journal.instruments import ExchangeRateTable, InstrumentCatalog
from journal.risk import RiskCalculator


@pytest.fixture
def mock_settings(tmp_path: Path) -> AppSettings:
    """AppSettings with storage under tmp_path and account-capital ROI."""
    return AppSettings(
        log_level="DEBUG",
        storage=StorageSettings(
            db_path=str(tmp_path / "journal.db"),
            screenshot_dir=str(tmp_path / "screenshots"),
        ),
        journal=JournalSettings(roi_baseline="account"),
    )


@pytest.fixture
def catalog() -> InstrumentCatalog:
    """Built-in instrument catalog."""
    return InstrumentCatalog.default()


@pytest.fixture
def rates(mock_settings: AppSettings) -> ExchangeRateTable:
    """Default exchange-rate snapshot (JPY 1/150, EUR 1.08, ...)."""
    return ExchangeRateTable.from_settings(mock_settings.market)


@pytest.fixture
def calculator(catalog: InstrumentCatalog, rates: ExchangeRateTable) -> RiskCalculator:
    return RiskCalculator(catalog, rates)
