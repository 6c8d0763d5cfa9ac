"""Form and JSON field parsing for the journal API.

Handlers read raw string fields (multipart forms or JSON bodies) through
FieldParser, which collects one message per bad field instead of failing on
the first. Empty strings are treated as "not entered".
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, time
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, TypeVar

from journal.exceptions import TradeValidationError
from journal.models import (
    Direction,
    RiskMode,
    RiskSpecification,
    TradeDuration,
    TradeInput,
    TradeStatus,
)
from journal.service import TradeSubmission

E = TypeVar("E", bound=Enum)

# Text fields echoed back to the client when a save fails in storage.
FORM_FIELDS = (
    "user_id",
    "account_id",
    "account_name",
    "trade_date",
    "symbol",
    "direction",
    "status",
    "entry_price",
    "exit_price",
    "stop_loss",
    "take_profit",
    "risk_mode",
    "risk_value",
    "capital",
    "commission",
    "duration",
    "entry_time",
    "exit_time",
    "entry_date",
    "exit_date",
    "notes",
    "setup",
    "strategy",
)


class FieldParser:
    """Typed access to raw request fields with error collection."""

    def __init__(self, data: Mapping[str, Any]) -> None:
        self._data = data
        self.errors: dict[str, str] = {}

    def _raw(self, name: str) -> str:
        value = self._data.get(name)
        if value is None or not isinstance(value, (str, int, float, Decimal)):
            return ""
        return str(value).strip()

    def text(self, name: str, default: str = "", required: bool = False) -> str:
        value = self._raw(name)
        if not value and required:
            self.errors[name] = f"{name} is required"
        return value or default

    def decimal(self, name: str, default: Decimal | None = None) -> Decimal | None:
        value = self._raw(name)
        if not value:
            return default
        try:
            parsed = Decimal(value)
        except InvalidOperation:
            self.errors[name] = f"Invalid number: {value!r}"
            return default
        if not parsed.is_finite():
            self.errors[name] = f"Invalid number: {value!r}"
            return default
        return parsed

    def date(self, name: str) -> date | None:
        value = self._raw(name)
        if not value:
            return None
        try:
            return date.fromisoformat(value)
        except ValueError:
            self.errors[name] = f"Invalid date: {value!r}"
            return None

    def time(self, name: str) -> time | None:
        value = self._raw(name)
        if not value:
            return None
        try:
            return time.fromisoformat(value)
        except ValueError:
            self.errors[name] = f"Invalid time: {value!r}"
            return None

    def enum(self, name: str, enum_cls: type[E], default: E) -> E:
        value = self._raw(name).lower()
        if not value:
            return default
        try:
            return enum_cls(value)
        except ValueError:
            allowed = ", ".join(m.value for m in enum_cls)
            self.errors[name] = f"Invalid value {value!r} (expected one of: {allowed})"
            return default

    def raise_for_errors(self) -> None:
        if self.errors:
            raise TradeValidationError(dict(self.errors))


def _risk(parser: FieldParser) -> RiskSpecification:
    mode = parser.enum("risk_mode", RiskMode, RiskMode.PERCENTAGE)
    value = parser.decimal("risk_value", Decimal("0"))
    assert value is not None
    return RiskSpecification(mode=mode, value=value)


def parse_trade_input(data: Mapping[str, Any]) -> TradeInput:
    """Calculator input from a live-preview request.

    Raises:
        TradeValidationError: If a field cannot be parsed.
    """
    parser = FieldParser(data)
    trade = TradeInput(
        symbol=parser.text("symbol", required=True),
        direction=parser.enum("direction", Direction, Direction.LONG),
        entry_price=parser.decimal("entry_price"),
        risk=_risk(parser),
        status=parser.enum("status", TradeStatus, TradeStatus.OPEN),
        exit_price=parser.decimal("exit_price"),
        stop_loss=parser.decimal("stop_loss"),
        take_profit=parser.decimal("take_profit"),
        account_capital=parser.decimal("capital"),
        commission=parser.decimal("commission", Decimal("0")) or Decimal("0"),
    )
    parser.raise_for_errors()
    return trade


def parse_submission(data: Mapping[str, Any]) -> TradeSubmission:
    """Trade submission from a create or edit form.

    Raises:
        TradeValidationError: If a field cannot be parsed.
    """
    parser = FieldParser(data)
    submission = TradeSubmission(
        user_id=parser.text("user_id", required=True),
        account_id=parser.text("account_id", required=True),
        account_name=parser.text("account_name"),
        trade_date=parser.date("trade_date"),
        symbol=parser.text("symbol"),
        direction=parser.enum("direction", Direction, Direction.LONG),
        status=parser.enum("status", TradeStatus, TradeStatus.OPEN),
        entry_price=parser.decimal("entry_price"),
        exit_price=parser.decimal("exit_price"),
        stop_loss=parser.decimal("stop_loss"),
        take_profit=parser.decimal("take_profit"),
        risk=_risk(parser),
        capital=parser.decimal("capital", Decimal("0")) or Decimal("0"),
        commission=parser.decimal("commission", Decimal("0")) or Decimal("0"),
        duration=parser.enum("duration", TradeDuration, TradeDuration.DAY),
        entry_time=parser.time("entry_time"),
        exit_time=parser.time("exit_time"),
        entry_date=parser.date("entry_date"),
        exit_date=parser.date("exit_date"),
        notes=parser.text("notes"),
        setup=parser.text("setup"),
        strategy=parser.text("strategy"),
    )
    parser.raise_for_errors()
    return submission


def echo_form(data: Mapping[str, Any]) -> dict[str, str]:
    """Text fields of a submitted form, returned so a failed save loses no input."""
    parser = FieldParser(data)
    return {name: parser.text(name) for name in FORM_FIELDS if parser.text(name)}
