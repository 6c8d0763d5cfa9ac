"""Trade risk and P&L calculator: the ordered derivation pipeline.

Stages, each consuming the previous stage's frozen output:
1. Pip distances   -- stop-loss pips, take-profit pips
2. Sizing          -- lot size, money at risk
3. Realized pips   -- closed trades only
4. Money           -- projected P&L at TP/SL, realized P&L, reward:risk, outcome

Every stage output is rounded to 0.01 (half up) before the next stage reads
it, so a stored record re-derives to exactly the figures shown at entry.
The pip value per lot is kept at full precision; only its displayed value is
rounded.

A field that cannot be derived is None with a reason in
TradeCalculation.issues. One missing input never aborts the other fields.
"""

from decimal import Decimal

from journal.exceptions import UnknownInstrument
from journal.formatting import quantize_2
from journal.instruments.catalog import InstrumentCatalog
from journal.instruments.rates import ExchangeRateTable
from journal.logging import get_logger
from journal.models import Outcome, TradeCalculation, TradeInput, TradeStatus
from journal.risk.pips import pip_distance, pip_value_per_lot, realized_pips
from journal.risk.sizing import resolve_lot_size_and_risk

logger = get_logger(__name__)

INPUT_INCOMPLETE = "input_incomplete"
UNKNOWN_INSTRUMENT = "unknown_instrument"

_DERIVED_FIELDS = tuple(
    name for name in TradeCalculation.__dataclass_fields__ if name != "issues"
)


def projected_outcome(
    pips: Decimal | None,
    pip_value: Decimal | None,
    lot_size: Decimal | None,
) -> Decimal | None:
    """Money outcome of a pip move: pips * pip_value_per_lot * lot_size.

    Shared by projected-at-TP (take-profit pips), projected-at-SL (stop-loss
    pips) and realized P&L (realized pips).
    """
    if pips is None or pip_value is None or lot_size is None:
        return None
    return pips * pip_value * lot_size


def reward_risk_ratio(
    take_profit_pips: Decimal | None,
    stop_loss_pips: Decimal | None,
) -> Decimal | None:
    """Take-profit distance over stop-loss distance; None unless both are > 0."""
    if take_profit_pips is None or stop_loss_pips is None:
        return None
    if take_profit_pips <= 0 or stop_loss_pips <= 0:
        return None
    return take_profit_pips / stop_loss_pips


class RiskCalculator:
    """Derives pip, size and money figures for a TradeInput.

    Instrument specs and exchange rates are injected; the calculator holds
    no other state and calculate() is a pure function of its input.

    Args:
        catalog: Instrument specifications.
        rates: Exchange-rate snapshot for pip value conversion.
    """

    def __init__(self, catalog: InstrumentCatalog, rates: ExchangeRateTable) -> None:
        self._catalog = catalog
        self._rates = rates

    @property
    def catalog(self) -> InstrumentCatalog:
        return self._catalog

    def pip_value_for(self, symbol: str) -> Decimal:
        """USD pip value per lot for symbol.

        Raises:
            UnknownInstrument: If the symbol or its quote currency is unknown.
        """
        return pip_value_per_lot(self._catalog.require(symbol), self._rates)

    def calculate(self, trade: TradeInput) -> TradeCalculation:
        """Run the full derivation pipeline for one trade.

        Args:
            trade: Raw trade input.

        Returns:
            TradeCalculation with every derivable field filled in and a
            reason for every field that is not.
        """
        spec = self._catalog.get(trade.symbol)
        try:
            pip_value = (
                pip_value_per_lot(spec, self._rates) if spec is not None else None
            )
        except UnknownInstrument:
            pip_value = None

        if spec is None or pip_value is None:
            logger.warning("calculation_unknown_instrument", symbol=trade.symbol)
            return TradeCalculation(
                issues={name: UNKNOWN_INSTRUMENT for name in _DERIVED_FIELDS}
            )

        # 1. Pip distances
        stop_loss_pips = quantize_2(pip_distance(trade.entry_price, trade.stop_loss, spec))
        take_profit_pips = quantize_2(
            pip_distance(trade.entry_price, trade.take_profit, spec)
        )

        # 2. Sizing
        sizing = resolve_lot_size_and_risk(
            trade.risk, stop_loss_pips, pip_value, trade.account_capital
        )
        lot_size = quantize_2(sizing.lot_size)
        risk_money = quantize_2(sizing.risk_money)

        # 3. Realized pips
        pips = quantize_2(
            realized_pips(
                trade.entry_price, trade.exit_price, trade.direction, spec, trade.status
            )
        )

        # 4. Money
        projected_tp = quantize_2(projected_outcome(take_profit_pips, pip_value, lot_size))
        projected_sl = quantize_2(projected_outcome(stop_loss_pips, pip_value, lot_size))
        ratio = quantize_2(reward_risk_ratio(take_profit_pips, stop_loss_pips))

        gross_pnl: Decimal | None = None
        realized_pnl: Decimal | None = None
        outcome: Outcome | None = None
        if trade.status == TradeStatus.CLOSED:
            gross_pnl = quantize_2(projected_outcome(pips, pip_value, lot_size))
            if gross_pnl is not None:
                realized_pnl = quantize_2(gross_pnl - trade.commission)
                outcome = Outcome.from_pnl(realized_pnl)

        derived: dict = {
            "stop_loss_pips": stop_loss_pips,
            "take_profit_pips": take_profit_pips,
            "pip_value_per_lot": quantize_2(pip_value),
            "lot_size": lot_size,
            "risk_money": risk_money,
            "projected_pnl_at_tp": projected_tp,
            "projected_pnl_at_sl": projected_sl,
            "reward_risk_ratio": ratio,
            "realized_pips": pips,
            "gross_pnl": gross_pnl,
            "realized_pnl": realized_pnl,
            "outcome": outcome,
        }
        issues = {name: INPUT_INCOMPLETE for name, value in derived.items() if value is None}
        calculation = TradeCalculation(**derived, issues=issues)

        logger.debug(
            "trade_calculated",
            symbol=trade.symbol,
            direction=trade.direction.value,
            status=trade.status.value,
            lot_size=str(lot_size) if lot_size is not None else None,
            realized_pnl=str(realized_pnl) if realized_pnl is not None else None,
            not_computable=sorted(issues),
        )
        return calculation
