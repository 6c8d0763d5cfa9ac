"""Shared data models for the trade journal.

CRITICAL: All monetary values, prices, pips and ratios use Decimal. Never use
float. A value that cannot be derived is None ("not yet known"), never zero.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from datetime import date, time
from decimal import Decimal
from enum import Enum

from journal.exceptions import InputIncomplete


class AssetClass(str, Enum):
    """Instrument family, as offered in the entry form's asset picker."""

    FOREX = "forex"
    COMMODITY = "commodity"
    INDEX = "index"
    CRYPTO = "crypto"


class Direction(str, Enum):
    """Trade direction."""

    LONG = "long"
    SHORT = "short"


class TradeStatus(str, Enum):
    """Trade lifecycle state."""

    OPEN = "open"
    CLOSED = "closed"


class Outcome(str, Enum):
    """Classification of a closed trade by realized P&L sign."""

    WIN = "win"
    LOSS = "loss"
    BREAKEVEN = "breakeven"

    @classmethod
    def from_pnl(cls, pnl: Decimal) -> Outcome:
        if pnl > 0:
            return cls.WIN
        if pnl < 0:
            return cls.LOSS
        return cls.BREAKEVEN


class TradeDuration(str, Enum):
    """Day trades open and close on the trade date; swing trades carry their own dates."""

    DAY = "day"
    SWING = "swing"


class RiskMode(str, Enum):
    """How the position size is specified."""

    PERCENTAGE = "percentage"  # percent of account capital
    MONEY = "money"  # fixed base-currency amount
    LOT = "lot"  # explicit lot size


@dataclass(frozen=True)
class InstrumentSpec:
    """Static contract specification for one tradable symbol."""

    symbol: str
    pip_size: Decimal
    contract_size: Decimal
    quote_currency: str
    asset_class: AssetClass


@dataclass(frozen=True)
class RiskSpecification:
    """One active risk mode and its value for a trade-entry session."""

    mode: RiskMode
    value: Decimal


@dataclass(frozen=True)
class TradeInput:
    """Raw user-entered values the risk calculator derives from."""

    symbol: str
    direction: Direction
    entry_price: Decimal | None
    risk: RiskSpecification
    status: TradeStatus = TradeStatus.OPEN
    exit_price: Decimal | None = None
    stop_loss: Decimal | None = None
    take_profit: Decimal | None = None
    account_capital: Decimal | None = None
    commission: Decimal = Decimal("0")  # commission/swap, deducted from realized P&L


@dataclass(frozen=True)
class TradeCalculation:
    """Output of the risk calculator pipeline.

    Every derived field is Decimal or None. ``issues`` maps each None field
    to the reason it could not be computed ("input_incomplete" or
    "unknown_instrument").
    """

    stop_loss_pips: Decimal | None = None
    take_profit_pips: Decimal | None = None
    pip_value_per_lot: Decimal | None = None
    lot_size: Decimal | None = None
    risk_money: Decimal | None = None
    projected_pnl_at_tp: Decimal | None = None
    projected_pnl_at_sl: Decimal | None = None
    reward_risk_ratio: Decimal | None = None
    realized_pips: Decimal | None = None
    gross_pnl: Decimal | None = None
    realized_pnl: Decimal | None = None
    outcome: Outcome | None = None
    issues: dict[str, str] = field(default_factory=dict)

    def require(self, name: str) -> Decimal | Outcome:
        """Return a derived field, raising InputIncomplete if it is not computable."""
        value = getattr(self, name)
        if value is None:
            raise InputIncomplete(name, self.issues.get(name, "input_incomplete"))
        return value

    def derived_fields(self) -> dict[str, Decimal | Outcome | None]:
        """Derived values keyed by field name (issues excluded)."""
        return {f.name: getattr(self, f.name) for f in fields(self) if f.name != "issues"}

    def to_dict(self) -> dict:
        """Serialize for JSON: Decimals as str, None preserved."""
        result: dict = {}
        for name, value in self.derived_fields().items():
            if isinstance(value, Outcome):
                result[name] = value.value
            else:
                result[name] = str(value) if value is not None else None
        result["issues"] = dict(self.issues)
        return result


# Derived fields frozen into a TradeRecord at save time. pip_value_per_lot is
# a property of the instrument, not of the trade, and is not persisted.
FROZEN_DERIVED_FIELDS: tuple[str, ...] = (
    "stop_loss_pips",
    "take_profit_pips",
    "lot_size",
    "risk_money",
    "projected_pnl_at_tp",
    "projected_pnl_at_sl",
    "reward_risk_ratio",
    "realized_pips",
    "gross_pnl",
    "realized_pnl",
    "outcome",
)


@dataclass
class TradeRecord:
    """A persisted journal entry: trade input, frozen derived fields, metadata.

    Derived fields are only ever replaced as a whole by re-running the
    calculator (with_calculation); they are never patched individually.
    """

    id: str
    user_id: str
    account_id: str
    trade_date: date
    symbol: str
    asset_class: AssetClass
    direction: Direction
    status: TradeStatus
    entry_price: Decimal
    risk_mode: RiskMode
    risk_value: Decimal
    capital: Decimal
    account_name: str = ""
    exit_price: Decimal | None = None
    stop_loss: Decimal | None = None
    take_profit: Decimal | None = None
    commission: Decimal = Decimal("0")

    duration: TradeDuration = TradeDuration.DAY
    entry_time: time | None = None
    exit_time: time | None = None
    entry_date: date | None = None
    exit_date: date | None = None

    # Frozen derived fields
    stop_loss_pips: Decimal | None = None
    take_profit_pips: Decimal | None = None
    lot_size: Decimal | None = None
    risk_money: Decimal | None = None
    projected_pnl_at_tp: Decimal | None = None
    projected_pnl_at_sl: Decimal | None = None
    reward_risk_ratio: Decimal | None = None
    realized_pips: Decimal | None = None
    gross_pnl: Decimal | None = None
    realized_pnl: Decimal | None = None
    outcome: Outcome | None = None

    notes: str = ""
    setup: str = ""
    strategy: str = ""
    before_screenshot: str | None = None
    after_screenshot: str | None = None
    created_at: float = 0.0
    updated_at: float = 0.0

    @property
    def is_closed(self) -> bool:
        return self.status == TradeStatus.CLOSED

    def to_input(self) -> TradeInput:
        """Rebuild the calculator input this record was derived from."""
        return TradeInput(
            symbol=self.symbol,
            direction=self.direction,
            entry_price=self.entry_price,
            risk=RiskSpecification(mode=self.risk_mode, value=self.risk_value),
            status=self.status,
            exit_price=self.exit_price,
            stop_loss=self.stop_loss,
            take_profit=self.take_profit,
            account_capital=self.capital,
            commission=self.commission,
        )

    def with_calculation(self, calculation: TradeCalculation) -> TradeRecord:
        """Return a copy with every frozen derived field taken from calculation."""
        derived = calculation.derived_fields()
        return replace(self, **{name: derived[name] for name in FROZEN_DERIVED_FIELDS})

    def to_dict(self) -> dict:
        """Serialize to dict for JSON output (Decimals, dates, enums as str)."""
        result: dict = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                result[f.name] = None
            elif isinstance(value, Enum):
                result[f.name] = value.value
            elif isinstance(value, Decimal):
                result[f.name] = str(value)
            elif isinstance(value, (date, time)):
                result[f.name] = value.isoformat()
            else:
                result[f.name] = value
        return result
