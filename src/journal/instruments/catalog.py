"""Instrument specifications and the offered-symbol catalog.

Contract specifications are static configuration injected into the risk
calculator. Lookups fail closed: an unknown symbol raises UnknownInstrument
(or returns None from get()); there is no default pip size.

All values are Decimal. Pip value per lot in quote currency is
contract_size * pip_size, e.g. EUR/USD 100000 * 0.0001 = 10 USD,
XAU/USD 100 * 0.01 = 1 USD, XAG/USD 5000 * 0.01 = 50 USD.
"""

from collections.abc import Iterable, Mapping
from decimal import Decimal
from types import MappingProxyType

from journal.exceptions import UnknownInstrument
from journal.models import AssetClass, InstrumentSpec


def _spec(
    symbol: str,
    pip_size: str,
    contract_size: str,
    quote_currency: str,
    asset_class: AssetClass,
) -> InstrumentSpec:
    return InstrumentSpec(
        symbol=symbol,
        pip_size=Decimal(pip_size),
        contract_size=Decimal(contract_size),
        quote_currency=quote_currency,
        asset_class=asset_class,
    )


_FX = AssetClass.FOREX
_CMDTY = AssetClass.COMMODITY
_IDX = AssetClass.INDEX
_CRYPTO = AssetClass.CRYPTO

DEFAULT_SPECS: tuple[InstrumentSpec, ...] = (
    # Forex: 0.0001 pip, JPY quotes 0.01 pip, standard lot = 100k units
    _spec("EUR/USD", "0.0001", "100000", "USD", _FX),
    _spec("GBP/USD", "0.0001", "100000", "USD", _FX),
    _spec("AUD/USD", "0.0001", "100000", "USD", _FX),
    _spec("NZD/USD", "0.0001", "100000", "USD", _FX),
    _spec("EUR/GBP", "0.0001", "100000", "GBP", _FX),
    _spec("USD/CAD", "0.0001", "100000", "CAD", _FX),
    _spec("USD/CHF", "0.0001", "100000", "CHF", _FX),
    _spec("USD/JPY", "0.01", "100000", "JPY", _FX),
    _spec("EUR/JPY", "0.01", "100000", "JPY", _FX),
    _spec("GBP/JPY", "0.01", "100000", "JPY", _FX),
    _spec("AUD/JPY", "0.01", "100000", "JPY", _FX),
    _spec("CAD/JPY", "0.01", "100000", "JPY", _FX),
    _spec("CHF/JPY", "0.01", "100000", "JPY", _FX),
    # Commodities
    _spec("XAU/USD", "0.01", "100", "USD", _CMDTY),
    _spec("XAG/USD", "0.01", "5000", "USD", _CMDTY),
    _spec("UKOIL", "0.01", "1000", "USD", _CMDTY),
    _spec("USOIL", "0.01", "1000", "USD", _CMDTY),
    _spec("NGAS", "0.001", "10000", "USD", _CMDTY),
    # Indices: one point per pip, one unit per lot
    _spec("US30", "1", "1", "USD", _IDX),
    _spec("NAS100", "1", "1", "USD", _IDX),
    _spec("SPX500", "0.1", "1", "USD", _IDX),
    _spec("GER40", "1", "1", "EUR", _IDX),
    _spec("UK100", "1", "1", "GBP", _IDX),
    _spec("JP225", "1", "1", "JPY", _IDX),
    # Crypto: one coin per lot
    _spec("BTC/USD", "1", "1", "USD", _CRYPTO),
    _spec("ETH/USD", "1", "1", "USD", _CRYPTO),
    _spec("BTC/USDT", "1", "1", "USDT", _CRYPTO),
    _spec("ETH/USDT", "1", "1", "USDT", _CRYPTO),
    _spec("SOL/USDT", "0.01", "1", "USDT", _CRYPTO),
    _spec("BNB/USDT", "0.01", "1", "USDT", _CRYPTO),
    _spec("XRP/USDT", "0.0001", "1", "USDT", _CRYPTO),
    _spec("ADA/USDT", "0.0001", "1", "USDT", _CRYPTO),
)

# Symbols the entry form offers, per asset class and in display order.
DEFAULT_OFFERED: dict[AssetClass, tuple[str, ...]] = {
    AssetClass.FOREX: (
        "EUR/USD", "GBP/USD", "USD/JPY", "USD/CAD", "AUD/USD", "NZD/USD",
        "EUR/JPY", "GBP/JPY", "AUD/JPY", "CAD/JPY", "CHF/JPY", "EUR/GBP",
        "USD/CHF",
    ),
    AssetClass.CRYPTO: (
        "BTC/USD", "ETH/USD", "BTC/USDT", "ETH/USDT", "SOL/USDT", "XRP/USDT",
        "BNB/USDT", "ADA/USDT",
    ),
    AssetClass.INDEX: ("US30", "SPX500", "NAS100", "GER40", "UK100", "JP225"),
    AssetClass.COMMODITY: ("XAU/USD", "XAG/USD", "UKOIL", "USOIL", "NGAS"),
}


class InstrumentCatalog:
    """Immutable symbol -> InstrumentSpec lookup plus the offered-symbol lists.

    Construction fails if any offered symbol lacks a specification, or is
    offered under a different asset class than its spec declares.

    Args:
        specs: Instrument specifications (symbols must be unique).
        offered: Asset class -> symbols offered for entry. Defaults to every
            spec grouped by its asset class.
    """

    def __init__(
        self,
        specs: Iterable[InstrumentSpec],
        offered: Mapping[AssetClass, Iterable[str]] | None = None,
    ) -> None:
        by_symbol: dict[str, InstrumentSpec] = {}
        for spec in specs:
            if spec.symbol in by_symbol:
                raise ValueError(f"Duplicate instrument specification: {spec.symbol}")
            if spec.pip_size <= 0 or spec.contract_size <= 0:
                raise ValueError(f"Non-positive pip or contract size: {spec.symbol}")
            by_symbol[spec.symbol] = spec
        self._specs: Mapping[str, InstrumentSpec] = MappingProxyType(by_symbol)

        if offered is None:
            grouped: dict[AssetClass, list[str]] = {}
            for spec in by_symbol.values():
                grouped.setdefault(spec.asset_class, []).append(spec.symbol)
            offered = grouped

        offered_lists: dict[AssetClass, tuple[str, ...]] = {}
        for asset_class, symbols in offered.items():
            symbols = tuple(symbols)
            for symbol in symbols:
                spec = by_symbol.get(symbol)
                if spec is None:
                    raise UnknownInstrument(symbol)
                if spec.asset_class != asset_class:
                    raise ValueError(
                        f"{symbol} offered as {asset_class.value} "
                        f"but specified as {spec.asset_class.value}"
                    )
            offered_lists[asset_class] = symbols
        self._offered: Mapping[AssetClass, tuple[str, ...]] = MappingProxyType(offered_lists)

    @classmethod
    def default(cls) -> "InstrumentCatalog":
        """Catalog of the built-in specifications and offered symbols."""
        return cls(DEFAULT_SPECS, DEFAULT_OFFERED)

    def get(self, symbol: str) -> InstrumentSpec | None:
        """Return the spec for symbol, or None if unknown."""
        return self._specs.get(symbol)

    def require(self, symbol: str) -> InstrumentSpec:
        """Return the spec for symbol.

        Raises:
            UnknownInstrument: If the symbol has no specification.
        """
        spec = self._specs.get(symbol)
        if spec is None:
            raise UnknownInstrument(symbol)
        return spec

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._specs

    def __len__(self) -> int:
        return len(self._specs)

    @property
    def symbols(self) -> list[str]:
        return list(self._specs)

    def offered(self, asset_class: AssetClass) -> tuple[str, ...]:
        """Symbols offered for entry under asset_class (empty if none)."""
        return self._offered.get(asset_class, ())

    def offered_by_class(self) -> dict[AssetClass, tuple[str, ...]]:
        return dict(self._offered)
