"""Pip distance, realized pips and pip value conversion.

All calculations use Decimal arithmetic exclusively -- no float conversions.
Every function is total: a missing input yields None ("not computable"),
never a zero that could pass for a real measurement.
"""

from decimal import Decimal

from journal.instruments.rates import ExchangeRateTable
from journal.models import Direction, InstrumentSpec, TradeStatus

# Realized pip magnitudes below this are floating-point residue from
# user-entered prices and are reported as exactly zero.
PIP_NOISE_FLOOR = Decimal("0.000001")


def pip_distance(
    entry: Decimal | None,
    other: Decimal | None,
    spec: InstrumentSpec,
) -> Decimal | None:
    """Unsigned distance between entry and another price, in pips.

    Used identically for stop-loss and take-profit distance, independent
    of trade direction.

    Args:
        entry: Entry price.
        other: Stop-loss or take-profit price.
        spec: Instrument specification providing pip_size.

    Returns:
        |entry - other| / pip_size, or None if either price is missing.
    """
    if entry is None or other is None:
        return None
    return abs(entry - other) / spec.pip_size


def realized_pips(
    entry: Decimal | None,
    exit_: Decimal | None,
    direction: Direction,
    spec: InstrumentSpec,
    status: TradeStatus = TradeStatus.CLOSED,
) -> Decimal | None:
    """Signed pips captured between entry and exit.

    Long: (exit - entry) / pip_size. Short: (entry - exit) / pip_size.
    Reversing entry and exit negates the result.

    Args:
        entry: Entry price.
        exit_: Exit price.
        direction: Trade direction.
        spec: Instrument specification providing pip_size.
        status: Open trades have no realized pips.

    Returns:
        Signed pip count (magnitudes below 1e-6 snapped to 0), or None when
        the trade is open or a price is missing.
    """
    if status == TradeStatus.OPEN or entry is None or exit_ is None:
        return None

    if direction == Direction.LONG:
        pips = (exit_ - entry) / spec.pip_size
    else:
        pips = (entry - exit_) / spec.pip_size

    if abs(pips) < PIP_NOISE_FLOOR:
        return Decimal("0")
    return pips


def pip_value_per_lot(spec: InstrumentSpec, rates: ExchangeRateTable) -> Decimal:
    """USD value of a one-pip move on one standard lot.

    contract_size * pip_size * rate(quote_currency). This is the single
    conversion point from instrument pips to base-currency money.

    Examples:
        EUR/USD: 100000 * 0.0001 * 1 = 10
        USD/JPY: 100000 * 0.01 * (1/150) = 6.666...
        XAU/USD: 100 * 0.01 * 1 = 1

    Raises:
        UnknownInstrument: If the quote currency has no exchange rate.
    """
    return spec.contract_size * spec.pip_size * rates.rate(spec.quote_currency)
