"""Tests for RiskCalculator: the full derivation pipeline.

Every stage output is rounded to 0.01 before the next stage uses it, so the
expected values below follow the rounded intermediate figures.
"""

from decimal import Decimal

import pytest

from journal.exceptions import InputIncomplete
from journal.models import (
    Direction,
    Outcome,
    RiskMode,
    RiskSpecification,
    TradeInput,
    TradeStatus,
)
from journal.risk import INPUT_INCOMPLETE, UNKNOWN_INSTRUMENT, RiskCalculator

ONE_LOT = RiskSpecification(mode=RiskMode.LOT, value=Decimal("1"))


def _trade(**overrides) -> TradeInput:  # type: ignore[no-untyped-def]
    """EUR/USD long, 1 lot, SL 20 pips, TP 40 pips, closed +15 pips."""
    defaults = {
        "symbol": "EUR/USD",
        "direction": Direction.LONG,
        "entry_price": Decimal("1.0850"),
        "risk": ONE_LOT,
        "status": TradeStatus.CLOSED,
        "exit_price": Decimal("1.0865"),
        "stop_loss": Decimal("1.0830"),
        "take_profit": Decimal("1.0890"),
        "account_capital": Decimal("10000"),
    }
    defaults.update(overrides)
    return TradeInput(**defaults)


class TestClosedTradeScenarios:
    """Worked examples with known results."""

    def test_eurusd_long_15_pips_one_lot(self, calculator: RiskCalculator) -> None:
        calc = calculator.calculate(_trade())
        # 15 pips * $10/pip * 1 lot = $150
        assert calc.realized_pips == Decimal("15.00")
        assert calc.gross_pnl == Decimal("150.00")
        assert calc.realized_pnl == Decimal("150.00")
        assert calc.outcome == Outcome.WIN
        assert calc.issues == {}

    def test_eurusd_risk_and_projections(self, calculator: RiskCalculator) -> None:
        calc = calculator.calculate(_trade())
        # SL 20 pips, TP 40 pips, 1 lot at $10/pip
        assert calc.stop_loss_pips == Decimal("20.00")
        assert calc.take_profit_pips == Decimal("40.00")
        assert calc.pip_value_per_lot == Decimal("10.00")
        assert calc.lot_size == Decimal("1.00")
        assert calc.risk_money == Decimal("200.00")
        assert calc.projected_pnl_at_tp == Decimal("400.00")
        assert calc.projected_pnl_at_sl == Decimal("200.00")
        assert calc.reward_risk_ratio == Decimal("2.00")

    def test_usdjpy_short_50_pips(self, calculator: RiskCalculator) -> None:
        calc = calculator.calculate(
            _trade(
                symbol="USD/JPY",
                direction=Direction.SHORT,
                entry_price=Decimal("150.00"),
                exit_price=Decimal("149.50"),
                stop_loss=Decimal("150.30"),
                take_profit=Decimal("149.00"),
            )
        )
        # 50 pips * (1000 / 150) * 1 lot = 333.333... -> 333.33
        assert calc.realized_pips == Decimal("50.00")
        assert calc.pip_value_per_lot == Decimal("6.67")
        assert calc.realized_pnl == Decimal("333.33")
        # 30 pips * 6.666... = 200.00
        assert calc.risk_money == Decimal("200.00")
        assert calc.outcome == Outcome.WIN

    def test_xauusd_long_10_dollars(self, calculator: RiskCalculator) -> None:
        calc = calculator.calculate(
            _trade(
                symbol="XAU/USD",
                entry_price=Decimal("2000.00"),
                exit_price=Decimal("2010.00"),
                stop_loss=Decimal("1995.00"),
                take_profit=Decimal("2020.00"),
            )
        )
        # $10 move = 1000 pips at $1/pip
        assert calc.realized_pips == Decimal("1000.00")
        assert calc.realized_pnl == Decimal("1000.00")

    def test_losing_short(self, calculator: RiskCalculator) -> None:
        calc = calculator.calculate(
            _trade(direction=Direction.SHORT, stop_loss=Decimal("1.0870"))
        )
        # short from 1.0850 exited 1.0865: -15 pips -> -$150
        assert calc.realized_pips == Decimal("-15.00")
        assert calc.realized_pnl == Decimal("-150.00")
        assert calc.outcome == Outcome.LOSS

    def test_exit_at_entry_is_breakeven(self, calculator: RiskCalculator) -> None:
        calc = calculator.calculate(_trade(exit_price=Decimal("1.0850")))
        assert calc.realized_pips == Decimal("0")
        assert calc.realized_pnl == Decimal("0.00")
        assert calc.outcome == Outcome.BREAKEVEN

    def test_commission_deducted_from_realized(self, calculator: RiskCalculator) -> None:
        calc = calculator.calculate(_trade(commission=Decimal("7")))
        # gross 150.00 - commission 7 = 143.00
        assert calc.gross_pnl == Decimal("150.00")
        assert calc.realized_pnl == Decimal("143.00")
        assert calc.outcome == Outcome.WIN

    def test_commission_can_turn_win_into_loss(self, calculator: RiskCalculator) -> None:
        calc = calculator.calculate(_trade(commission=Decimal("160")))
        assert calc.realized_pnl == Decimal("-10.00")
        assert calc.outcome == Outcome.LOSS


class TestSizingThroughPipeline:
    def test_percentage_mode(self, calculator: RiskCalculator) -> None:
        calc = calculator.calculate(
            _trade(risk=RiskSpecification(mode=RiskMode.PERCENTAGE, value=Decimal("1")))
        )
        # risk = 10000 * 1% = 100; lot = 100 / (10 * 20) = 0.5
        assert calc.risk_money == Decimal("100.00")
        assert calc.lot_size == Decimal("0.50")
        # 15 pips * 10 * 0.5 = 75
        assert calc.realized_pnl == Decimal("75.00")

    def test_rounded_lot_feeds_projections(self, calculator: RiskCalculator) -> None:
        calc = calculator.calculate(
            _trade(
                risk=RiskSpecification(mode=RiskMode.PERCENTAGE, value=Decimal("1")),
                stop_loss=Decimal("1.0820"),
            )
        )
        # lot = 100 / (10 * 30) = 0.333... -> 0.33
        # projected at SL = 30 * 10 * 0.33 = 99.00 (not 100.00)
        assert calc.lot_size == Decimal("0.33")
        assert calc.risk_money == Decimal("100.00")
        assert calc.projected_pnl_at_sl == Decimal("99.00")

    def test_money_mode_matches_lot_mode(self, calculator: RiskCalculator) -> None:
        by_money = calculator.calculate(
            _trade(risk=RiskSpecification(mode=RiskMode.MONEY, value=Decimal("100")))
        )
        by_lot = calculator.calculate(
            _trade(risk=RiskSpecification(mode=RiskMode.LOT, value=by_money.lot_size))
        )
        assert by_money.lot_size == Decimal("0.50")
        assert by_lot.risk_money == Decimal("100.00")
        assert by_lot.realized_pnl == by_money.realized_pnl

    def test_money_mode_zero_is_zero_lot(self, calculator: RiskCalculator) -> None:
        calc = calculator.calculate(
            _trade(risk=RiskSpecification(mode=RiskMode.MONEY, value=Decimal("0")))
        )
        assert calc.lot_size == Decimal("0.00")
        assert calc.realized_pnl == Decimal("0.00")
        assert calc.outcome == Outcome.BREAKEVEN


class TestNotComputable:
    """Missing inputs mark dependent fields None; nothing defaults to zero."""

    def test_missing_stop_loss(self, calculator: RiskCalculator) -> None:
        calc = calculator.calculate(_trade(stop_loss=None))
        assert calc.stop_loss_pips is None
        assert calc.lot_size is None
        assert calc.risk_money is None
        assert calc.realized_pnl is None
        assert calc.reward_risk_ratio is None
        # pips do not depend on the stop
        assert calc.realized_pips == Decimal("15.00")
        assert calc.take_profit_pips == Decimal("40.00")
        assert calc.issues["lot_size"] == INPUT_INCOMPLETE
        assert "realized_pips" not in calc.issues

    def test_stop_at_entry_gives_no_lot(self, calculator: RiskCalculator) -> None:
        calc = calculator.calculate(_trade(stop_loss=Decimal("1.0850")))
        assert calc.stop_loss_pips == Decimal("0.00")
        assert calc.lot_size is None
        assert calc.reward_risk_ratio is None

    def test_missing_take_profit(self, calculator: RiskCalculator) -> None:
        calc = calculator.calculate(_trade(take_profit=None))
        assert calc.projected_pnl_at_tp is None
        assert calc.reward_risk_ratio is None
        assert calc.realized_pnl == Decimal("150.00")

    def test_open_trade(self, calculator: RiskCalculator) -> None:
        calc = calculator.calculate(_trade(status=TradeStatus.OPEN))
        assert calc.realized_pips is None
        assert calc.gross_pnl is None
        assert calc.realized_pnl is None
        assert calc.outcome is None
        assert calc.projected_pnl_at_tp == Decimal("400.00")
        assert set(calc.issues) == {"realized_pips", "gross_pnl", "realized_pnl", "outcome"}

    def test_missing_entry_price(self, calculator: RiskCalculator) -> None:
        calc = calculator.calculate(_trade(entry_price=None))
        assert calc.stop_loss_pips is None
        assert calc.realized_pips is None
        assert calc.pip_value_per_lot == Decimal("10.00")

    def test_require_raises_for_missing_field(self, calculator: RiskCalculator) -> None:
        calc = calculator.calculate(_trade(stop_loss=None))
        with pytest.raises(InputIncomplete) as exc_info:
            calc.require("realized_pnl")
        assert exc_info.value.field == "realized_pnl"
        assert exc_info.value.reason == INPUT_INCOMPLETE
        assert calc.require("realized_pips") == Decimal("15.00")


class TestUnknownInstrument:
    def test_unknown_symbol_is_all_none(self, calculator: RiskCalculator) -> None:
        calc = calculator.calculate(_trade(symbol="DOGE/EUR"))
        for name, value in calc.derived_fields().items():
            assert value is None, name
            assert calc.issues[name] == UNKNOWN_INSTRUMENT

    def test_require_reports_unknown_instrument(self, calculator: RiskCalculator) -> None:
        calc = calculator.calculate(_trade(symbol="DOGE/EUR"))
        with pytest.raises(InputIncomplete) as exc_info:
            calc.require("lot_size")
        assert exc_info.value.reason == UNKNOWN_INSTRUMENT


class TestPurity:
    def test_same_input_same_output(self, calculator: RiskCalculator) -> None:
        trade = _trade(commission=Decimal("3.5"))
        assert calculator.calculate(trade) == calculator.calculate(trade)

    def test_to_dict_serializes_decimals_as_strings(self, calculator: RiskCalculator) -> None:
        data = calculator.calculate(_trade(status=TradeStatus.OPEN)).to_dict()
        assert data["realized_pnl"] is None
        assert data["lot_size"] == "1.00"
        assert data["outcome"] is None
        assert data["issues"]["realized_pnl"] == INPUT_INCOMPLETE
