"""Exchange-rate snapshot used to convert quote-currency pip value into USD.

The table is a fixed snapshot, not live data. It is built from
MarketSettings.exchange_rates and injected into the risk calculator, so tests
and deployments can swap it without touching process globals.
"""

from collections.abc import Mapping
from decimal import Decimal
from types import MappingProxyType

from journal.config import MarketSettings
from journal.exceptions import UnknownInstrument

BASE_CURRENCY = "USD"


class ExchangeRateTable:
    """Immutable currency -> USD-per-unit conversion table.

    A currency missing from the table is an error: converting with an
    assumed 1.0 rate would silently misstate every money figure.

    Args:
        rates: Currency code -> USD value of one unit of that currency.
    """

    def __init__(self, rates: Mapping[str, Decimal]) -> None:
        normalized: dict[str, Decimal] = {}
        for currency, rate in rates.items():
            rate = Decimal(rate)
            if not rate.is_finite() or rate <= 0:
                raise ValueError(f"Exchange rate for {currency} must be positive")
            normalized[currency.upper()] = rate
        normalized.setdefault(BASE_CURRENCY, Decimal("1"))
        self._rates: Mapping[str, Decimal] = MappingProxyType(normalized)

    @classmethod
    def from_settings(cls, settings: MarketSettings) -> "ExchangeRateTable":
        return cls(settings.exchange_rates)

    def rate(self, currency: str) -> Decimal:
        """USD value of one unit of currency.

        Raises:
            UnknownInstrument: If the currency has no rate in the snapshot.
        """
        rate = self._rates.get(currency.upper())
        if rate is None:
            raise UnknownInstrument(currency)
        return rate

    def __contains__(self, currency: object) -> bool:
        return isinstance(currency, str) and currency.upper() in self._rates

    def as_dict(self) -> dict[str, Decimal]:
        return dict(self._rates)
