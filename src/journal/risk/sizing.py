"""Lot size and money-at-risk resolution from a RiskSpecification.

All calculations use Decimal arithmetic exclusively -- no float conversions.

Sizing flow:
1. Require a positive stop-loss distance (no stop -> no size, in every mode)
2. Branch on risk mode:
   - percentage: risk = capital * value / 100, lot = risk / risk_per_lot
   - money:      risk = value,                 lot = risk / risk_per_lot
   - lot:        lot = value,                  risk = lot * risk_per_lot
   where risk_per_lot = pip_value_per_lot * stop_loss_pips
3. Return LotSizing with None fields when the inputs are insufficient

There is no fallback lot size. Insufficient data is never treated as
"risk nothing".
"""

from dataclasses import dataclass
from decimal import Decimal

from journal.models import RiskMode, RiskSpecification

_ZERO = Decimal("0")


@dataclass(frozen=True)
class LotSizing:
    """Resolved position size and money at risk (None = not computable)."""

    lot_size: Decimal | None
    risk_money: Decimal | None

    @property
    def is_computable(self) -> bool:
        return self.lot_size is not None and self.risk_money is not None


NOT_COMPUTABLE = LotSizing(lot_size=None, risk_money=None)


def resolve_lot_size_and_risk(
    risk: RiskSpecification,
    stop_loss_pips: Decimal | None,
    pip_value_per_lot: Decimal | None,
    account_capital: Decimal | None,
) -> LotSizing:
    """Resolve lot size and money at risk for one risk specification.

    Money mode treats a zero or negative amount as a zero-lot trade (lot 0,
    risk 0) rather than deriving a negative lot. Percentage and lot modes
    with a non-positive value are not computable.

    Args:
        risk: Active risk mode and its value.
        stop_loss_pips: Stop-loss distance in pips.
        pip_value_per_lot: USD per pip per standard lot.
        account_capital: Account capital snapshot (percentage mode only).

    Returns:
        LotSizing; both fields None when the inputs cannot support a size.
    """
    if stop_loss_pips is None or stop_loss_pips <= _ZERO:
        return NOT_COMPUTABLE
    if pip_value_per_lot is None or pip_value_per_lot <= _ZERO:
        return NOT_COMPUTABLE

    risk_per_lot = pip_value_per_lot * stop_loss_pips

    if risk.mode == RiskMode.PERCENTAGE:
        if account_capital is None or account_capital <= _ZERO:
            return NOT_COMPUTABLE
        if risk.value <= _ZERO:
            return NOT_COMPUTABLE
        risk_money = account_capital * risk.value / Decimal("100")
        return LotSizing(lot_size=risk_money / risk_per_lot, risk_money=risk_money)

    if risk.mode == RiskMode.MONEY:
        if risk.value <= _ZERO:
            return LotSizing(lot_size=_ZERO, risk_money=_ZERO)
        return LotSizing(lot_size=risk.value / risk_per_lot, risk_money=risk.value)

    if risk.mode == RiskMode.LOT:
        if risk.value <= _ZERO:
            return NOT_COMPUTABLE
        return LotSizing(lot_size=risk.value, risk_money=risk.value * risk_per_lot)

    raise ValueError(f"Unsupported risk mode: {risk.mode!r}")
