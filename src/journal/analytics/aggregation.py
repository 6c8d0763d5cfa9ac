"""Calendar aggregation of closed-trade P&L: day, week, month, year.

Aggregates are pure functions of the closed entries for a period and the
capital baseline. Weeks are calendar rows of a Sunday-start month grid:
week_index = (day_of_month + first_weekday - 1) // 7, where first_weekday is
the weekday of the 1st (Sunday = 0). Trades in a partial row at either end
of the month belong to that row only.
"""

from __future__ import annotations

import calendar
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from journal.analytics.metrics import (
    PnlEntry,
    TradeTally,
    profit_factor,
    win_rate,
)
from journal.formatting import percent_of

_ZERO = Decimal("0")


def sunday_weekday(day: date) -> int:
    """Weekday with Sunday = 0 ... Saturday = 6."""
    return (day.weekday() + 1) % 7


def week_index(day: date) -> int:
    """Row of day in its month's Sunday-start calendar grid (0-based)."""
    first_weekday = sunday_weekday(day.replace(day=1))
    return (day.day + first_weekday - 1) // 7


def week_count(year: int, month: int) -> int:
    """Number of Sunday-start calendar rows month spans (4 to 6)."""
    days_in_month = calendar.monthrange(year, month)[1]
    return week_index(date(year, month, days_in_month)) + 1


@dataclass(frozen=True)
class DayAggregate:
    """Closed-trade totals for one calendar date."""

    trade_date: date
    pnl: Decimal
    trade_count: int
    wins: int
    losses: int
    breakeven: int
    win_rate: Decimal

    def to_dict(self) -> dict:
        return {
            "date": self.trade_date.isoformat(),
            "pnl": str(self.pnl),
            "trade_count": self.trade_count,
            "wins": self.wins,
            "losses": self.losses,
            "breakeven": self.breakeven,
            "win_rate": str(self.win_rate),
        }


@dataclass(frozen=True)
class WeekAggregate:
    """Totals for one calendar row of a month."""

    week_index: int
    pnl: Decimal
    trading_days: int
    trade_count: int
    roi_percent: Decimal

    def to_dict(self) -> dict:
        return {
            "week_index": self.week_index,
            "pnl": str(self.pnl),
            "trading_days": self.trading_days,
            "trade_count": self.trade_count,
            "roi_percent": str(self.roi_percent),
        }


@dataclass(frozen=True)
class MonthAggregate:
    """Month view: per-day cells, weekly rows and trade-level statistics.

    wins, losses and breakeven count trades, not days. win_rate excludes
    breakevens. profit_factor is Decimal("Infinity") with wins and no losses.
    """

    year: int
    month: int
    total_pnl: Decimal
    total_trades: int
    trading_days: int
    wins: int
    losses: int
    breakeven: int
    win_rate: Decimal
    profit_factor: Decimal
    gross_profit: Decimal
    gross_loss: Decimal
    roi_percent: Decimal
    days: dict[date, DayAggregate]
    weeks: list[WeekAggregate]

    def to_dict(self) -> dict:
        return {
            "year": self.year,
            "month": self.month,
            "total_pnl": str(self.total_pnl),
            "total_trades": self.total_trades,
            "trading_days": self.trading_days,
            "wins": self.wins,
            "losses": self.losses,
            "breakeven": self.breakeven,
            "win_rate": str(self.win_rate),
            "profit_factor": str(self.profit_factor),
            "gross_profit": str(self.gross_profit),
            "gross_loss": str(self.gross_loss),
            "roi_percent": str(self.roi_percent),
            "days": [self.days[d].to_dict() for d in sorted(self.days)],
            "weeks": [w.to_dict() for w in self.weeks],
        }


@dataclass(frozen=True)
class QuarterAggregate:
    """Sum of three consecutive month aggregates."""

    quarter: int
    pnl: Decimal
    trade_count: int

    def to_dict(self) -> dict:
        return {"quarter": self.quarter, "pnl": str(self.pnl), "trade_count": self.trade_count}


@dataclass(frozen=True)
class YearAggregate:
    """Twelve month aggregates plus year and quarter totals."""

    year: int
    months: list[MonthAggregate]
    quarters: list[QuarterAggregate]
    total_pnl: Decimal
    total_trades: int
    trading_days: int
    wins: int
    losses: int
    breakeven: int
    win_rate: Decimal
    profit_factor: Decimal
    roi_percent: Decimal

    def to_dict(self) -> dict:
        return {
            "year": self.year,
            "total_pnl": str(self.total_pnl),
            "total_trades": self.total_trades,
            "trading_days": self.trading_days,
            "wins": self.wins,
            "losses": self.losses,
            "breakeven": self.breakeven,
            "win_rate": str(self.win_rate),
            "profit_factor": str(self.profit_factor),
            "roi_percent": str(self.roi_percent),
            "quarters": [q.to_dict() for q in self.quarters],
            "months": [
                {
                    "month": m.month,
                    "total_pnl": str(m.total_pnl),
                    "total_trades": m.total_trades,
                    "win_rate": str(m.win_rate),
                    "roi_percent": str(m.roi_percent),
                }
                for m in self.months
            ],
        }


def day_aggregates(entries: Iterable[PnlEntry]) -> dict[date, DayAggregate]:
    """Group entries by calendar date. Dates without trades are absent."""
    tallies: dict[date, TradeTally] = {}
    for entry in entries:
        tallies.setdefault(entry.trade_date, TradeTally()).add(entry.pnl)
    return {
        d: DayAggregate(
            trade_date=d,
            pnl=t.pnl,
            trade_count=t.trades,
            wins=t.wins,
            losses=t.losses,
            breakeven=t.breakeven,
            win_rate=win_rate(t.wins, t.losses),
        )
        for d, t in tallies.items()
    }


def month_aggregate(
    year: int,
    month: int,
    entries: Iterable[PnlEntry],
    capital: Decimal,
) -> MonthAggregate:
    """Aggregate the entries that fall inside year/month.

    Entries outside the month are ignored, so callers may pass a whole
    journal. The result does not depend on entry order.

    Args:
        year: Calendar year.
        month: Calendar month (1-12).
        entries: Closed-trade P&L entries.
        capital: ROI baseline; ROI is 0.00 when capital is not positive.

    Returns:
        MonthAggregate with one WeekAggregate per calendar row.
    """
    in_month = [
        e for e in entries if e.trade_date.year == year and e.trade_date.month == month
    ]

    tally = TradeTally()
    for entry in in_month:
        tally.add(entry.pnl)

    days = day_aggregates(in_month)

    rows = week_count(year, month)
    week_pnl = [_ZERO] * rows
    week_days = [0] * rows
    week_trades = [0] * rows
    for day in days.values():
        idx = week_index(day.trade_date)
        week_pnl[idx] += day.pnl
        week_days[idx] += 1
        week_trades[idx] += day.trade_count

    weeks = [
        WeekAggregate(
            week_index=i,
            pnl=week_pnl[i],
            trading_days=week_days[i],
            trade_count=week_trades[i],
            roi_percent=percent_of(week_pnl[i], capital),
        )
        for i in range(rows)
    ]

    return MonthAggregate(
        year=year,
        month=month,
        total_pnl=tally.pnl,
        total_trades=tally.trades,
        trading_days=len(days),
        wins=tally.wins,
        losses=tally.losses,
        breakeven=tally.breakeven,
        win_rate=win_rate(tally.wins, tally.losses),
        profit_factor=profit_factor(tally.gross_profit, tally.gross_loss),
        gross_profit=tally.gross_profit,
        gross_loss=tally.gross_loss,
        roi_percent=percent_of(tally.pnl, capital),
        days=days,
        weeks=weeks,
    )


def year_aggregate(
    year: int,
    entries: Iterable[PnlEntry],
    capital: Decimal,
) -> YearAggregate:
    """Aggregate a year as twelve month aggregates and four quarters.

    Year totals are sums of the month totals, so a year view always agrees
    with the month views it is built from.
    """
    in_year = [e for e in entries if e.trade_date.year == year]
    months = [month_aggregate(year, m, in_year, capital) for m in range(1, 13)]

    tally = TradeTally()
    for m in months:
        tally.merge(
            TradeTally(
                pnl=m.total_pnl,
                trades=m.total_trades,
                wins=m.wins,
                losses=m.losses,
                breakeven=m.breakeven,
                gross_profit=m.gross_profit,
                gross_loss=m.gross_loss,
            )
        )

    quarters = [
        QuarterAggregate(
            quarter=q + 1,
            pnl=sum((m.total_pnl for m in months[q * 3 : q * 3 + 3]), _ZERO),
            trade_count=sum(m.total_trades for m in months[q * 3 : q * 3 + 3]),
        )
        for q in range(4)
    ]

    return YearAggregate(
        year=year,
        months=months,
        quarters=quarters,
        total_pnl=tally.pnl,
        total_trades=tally.trades,
        trading_days=sum(m.trading_days for m in months),
        wins=tally.wins,
        losses=tally.losses,
        breakeven=tally.breakeven,
        win_rate=win_rate(tally.wins, tally.losses),
        profit_factor=profit_factor(tally.gross_profit, tally.gross_loss),
        roi_percent=percent_of(tally.pnl, capital),
    )
