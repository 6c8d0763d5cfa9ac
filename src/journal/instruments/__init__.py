"""Instrument specifications and exchange-rate snapshot."""

from journal.instruments.catalog import DEFAULT_OFFERED, DEFAULT_SPECS, InstrumentCatalog
from journal.instruments.rates import BASE_CURRENCY, ExchangeRateTable

__all__ = [
    "BASE_CURRENCY",
    "DEFAULT_OFFERED",
    "DEFAULT_SPECS",
    "ExchangeRateTable",
    "InstrumentCatalog",
]
