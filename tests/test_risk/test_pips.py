"""Tests for pip distance, realized pips and pip value per lot.

Reference pip values (USD per pip per standard lot):
  EUR/USD: 100000 * 0.0001 * 1     = 10
  USD/JPY: 100000 * 0.01   * 1/150 = 6.666...
  XAU/USD: 100    * 0.01   * 1     = 1
  XAG/USD: 5000   * 0.01   * 1     = 50
  US30:    1      * 1      * 1     = 1
  GER40:   1      * 1      * 1.08  = 1.08
"""

from decimal import Decimal

import pytest

from journal.exceptions import UnknownInstrument
from journal.formatting import quantize_2
from journal.instruments import ExchangeRateTable, InstrumentCatalog
from journal.models import Direction, TradeStatus
from journal.risk import pip_distance, pip_value_per_lot, realized_pips


class TestPipDistance:
    """pip_distance: unsigned, direction-independent."""

    def test_eurusd_stop_distance(self, catalog: InstrumentCatalog) -> None:
        spec = catalog.require("EUR/USD")
        # |1.0850 - 1.0820| / 0.0001 = 30
        assert pip_distance(Decimal("1.0850"), Decimal("1.0820"), spec) == Decimal("30")

    def test_distance_is_unsigned(self, catalog: InstrumentCatalog) -> None:
        spec = catalog.require("EUR/USD")
        above = pip_distance(Decimal("1.0850"), Decimal("1.0880"), spec)
        below = pip_distance(Decimal("1.0850"), Decimal("1.0820"), spec)
        assert above == below == Decimal("30")

    def test_jpy_pair_uses_001_pip(self, catalog: InstrumentCatalog) -> None:
        spec = catalog.require("USD/JPY")
        # |150.00 - 149.50| / 0.01 = 50
        assert pip_distance(Decimal("150.00"), Decimal("149.50"), spec) == Decimal("50")

    def test_missing_price_is_none(self, catalog: InstrumentCatalog) -> None:
        spec = catalog.require("EUR/USD")
        assert pip_distance(Decimal("1.0850"), None, spec) is None
        assert pip_distance(None, Decimal("1.0850"), spec) is None


class TestRealizedPips:
    """realized_pips: signed by direction, None when open or incomplete."""

    def test_long_winner(self, catalog: InstrumentCatalog) -> None:
        spec = catalog.require("EUR/USD")
        # (1.0865 - 1.0850) / 0.0001 = 15
        assert realized_pips(
            Decimal("1.0850"), Decimal("1.0865"), Direction.LONG, spec
        ) == Decimal("15")

    def test_short_is_negated(self, catalog: InstrumentCatalog) -> None:
        spec = catalog.require("EUR/USD")
        # (1.0850 - 1.0865) / 0.0001 = -15
        assert realized_pips(
            Decimal("1.0850"), Decimal("1.0865"), Direction.SHORT, spec
        ) == Decimal("-15")

    @pytest.mark.parametrize(
        "entry,exit_",
        [
            ("1.0850", "1.0865"),
            ("1.2000", "1.1937"),
            ("0.6543", "0.6543"),
        ],
    )
    def test_swapping_entry_and_exit_negates(
        self, catalog: InstrumentCatalog, entry: str, exit_: str
    ) -> None:
        spec = catalog.require("EUR/USD")
        forward = realized_pips(Decimal(entry), Decimal(exit_), Direction.LONG, spec)
        backward = realized_pips(Decimal(exit_), Decimal(entry), Direction.LONG, spec)
        assert forward == -backward

    def test_open_trade_has_no_realized_pips(self, catalog: InstrumentCatalog) -> None:
        spec = catalog.require("EUR/USD")
        assert realized_pips(
            Decimal("1.0850"), Decimal("1.0865"), Direction.LONG, spec, TradeStatus.OPEN
        ) is None

    def test_missing_exit_is_none(self, catalog: InstrumentCatalog) -> None:
        spec = catalog.require("EUR/USD")
        assert realized_pips(Decimal("1.0850"), None, Direction.LONG, spec) is None

    def test_residue_below_noise_floor_snaps_to_zero(self, catalog: InstrumentCatalog) -> None:
        spec = catalog.require("EUR/USD")
        # 1e-13 / 0.0001 = 1e-9 pips, below the 1e-6 floor
        result = realized_pips(
            Decimal("1.0850"), Decimal("1.0850000000001"), Direction.LONG, spec
        )
        assert result == Decimal("0")


class TestPipValuePerLot:
    """pip_value_per_lot: contract_size * pip_size * rate(quote)."""

    @pytest.mark.parametrize(
        "symbol,expected",
        [
            ("EUR/USD", Decimal("10")),
            ("XAU/USD", Decimal("1")),
            ("XAG/USD", Decimal("50")),
            ("US30", Decimal("1")),
            ("BTC/USDT", Decimal("1")),
            ("GER40", Decimal("1.08")),
            ("EUR/GBP", Decimal("12.5")),
        ],
    )
    def test_reference_values(
        self,
        catalog: InstrumentCatalog,
        rates: ExchangeRateTable,
        symbol: str,
        expected: Decimal,
    ) -> None:
        assert pip_value_per_lot(catalog.require(symbol), rates) == expected

    def test_usdjpy_converted_from_yen(
        self, catalog: InstrumentCatalog, rates: ExchangeRateTable
    ) -> None:
        value = pip_value_per_lot(catalog.require("USD/JPY"), rates)
        # 100000 * 0.01 = 1000 JPY; 1000 / 150 = 6.666... USD
        assert quantize_2(value) == Decimal("6.67")
        assert value > Decimal("6.666")

    def test_missing_quote_currency_raises(self, catalog: InstrumentCatalog) -> None:
        usd_only = ExchangeRateTable({"USD": Decimal("1")})
        with pytest.raises(UnknownInstrument):
            pip_value_per_lot(catalog.require("USD/JPY"), usd_only)
