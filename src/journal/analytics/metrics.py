"""Performance ratios and whole-journal analytics.

Pure Decimal analytics over PnlEntry values: win_rate, profit_factor,
overall_stats, equity_curve, available_months. No pandas/numpy.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from journal.formatting import percent_of, quantize_2
from journal.models import TradeRecord

_ZERO = Decimal("0")

# Profit factor when there are winning trades and no losing trades.
PROFIT_FACTOR_INFINITE = Decimal("Infinity")


@dataclass(frozen=True)
class PnlEntry:
    """One closed trade as the aggregation engine sees it."""

    trade_date: date
    pnl: Decimal


def closed_entries(records: Iterable[TradeRecord]) -> list[PnlEntry]:
    """Project trade records onto aggregation entries.

    Open trades and closed trades without a realized P&L are skipped;
    records are not modified.
    """
    return [
        PnlEntry(trade_date=r.trade_date, pnl=r.realized_pnl)
        for r in records
        if r.is_closed and r.realized_pnl is not None
    ]


def win_rate(wins: int, losses: int) -> Decimal:
    """wins / (wins + losses) * 100, rounded to 0.01. Breakevens are excluded.

    Returns 0.00 when there are neither wins nor losses.
    """
    decided = wins + losses
    if decided == 0:
        return Decimal("0.00")
    return quantize_2(Decimal(wins) / Decimal(decided) * Decimal("100"))


def profit_factor(gross_profit: Decimal, gross_loss: Decimal) -> Decimal:
    """Sum of winning P&L over absolute sum of losing P&L.

    Args:
        gross_profit: Sum of positive trade P&L.
        gross_loss: Absolute sum of negative trade P&L (>= 0).

    Returns:
        Ratio rounded to 0.01; PROFIT_FACTOR_INFINITE when there are
        profits but no losses; 0.00 when there are neither.
    """
    if gross_loss > _ZERO:
        return quantize_2(gross_profit / gross_loss)
    if gross_profit > _ZERO:
        return PROFIT_FACTOR_INFINITE
    return Decimal("0.00")


@dataclass
class TradeTally:
    """Trade-level win/loss/breakeven counts and P&L sums."""

    pnl: Decimal = _ZERO
    trades: int = 0
    wins: int = 0
    losses: int = 0
    breakeven: int = 0
    gross_profit: Decimal = _ZERO
    gross_loss: Decimal = _ZERO

    def add(self, pnl: Decimal) -> None:
        self.pnl += pnl
        self.trades += 1
        if pnl > _ZERO:
            self.wins += 1
            self.gross_profit += pnl
        elif pnl < _ZERO:
            self.losses += 1
            self.gross_loss += -pnl
        else:
            self.breakeven += 1

    def merge(self, other: TradeTally) -> None:
        self.pnl += other.pnl
        self.trades += other.trades
        self.wins += other.wins
        self.losses += other.losses
        self.breakeven += other.breakeven
        self.gross_profit += other.gross_profit
        self.gross_loss += other.gross_loss


@dataclass(frozen=True)
class OverallStats:
    """Totals across every closed trade in a journal."""

    total_pnl: Decimal
    total_trades: int
    wins: int
    losses: int
    breakeven: int
    win_rate: Decimal
    profit_factor: Decimal
    trading_days: int
    roi_percent: Decimal

    def to_dict(self) -> dict:
        return {
            "total_pnl": str(self.total_pnl),
            "total_trades": self.total_trades,
            "wins": self.wins,
            "losses": self.losses,
            "breakeven": self.breakeven,
            "win_rate": str(self.win_rate),
            "profit_factor": str(self.profit_factor),
            "trading_days": self.trading_days,
            "roi_percent": str(self.roi_percent),
        }


def overall_stats(entries: Iterable[PnlEntry], capital: Decimal) -> OverallStats:
    """Summarize all entries against one capital baseline."""
    tally = TradeTally()
    days: set[date] = set()
    for entry in entries:
        tally.add(entry.pnl)
        days.add(entry.trade_date)

    return OverallStats(
        total_pnl=tally.pnl,
        total_trades=tally.trades,
        wins=tally.wins,
        losses=tally.losses,
        breakeven=tally.breakeven,
        win_rate=win_rate(tally.wins, tally.losses),
        profit_factor=profit_factor(tally.gross_profit, tally.gross_loss),
        trading_days=len(days),
        roi_percent=percent_of(tally.pnl, capital),
    )


@dataclass(frozen=True)
class EquityPoint:
    """Cumulative P&L after all trades up to and including trade_date.

    The first point of a curve has trade_date None and zero P&L (start).
    cumulative_percent is cumulative_pnl against the ROI baseline capital.
    """

    trade_date: date | None
    cumulative_pnl: Decimal
    cumulative_percent: Decimal = _ZERO

    def to_dict(self) -> dict:
        return {
            "date": self.trade_date.isoformat() if self.trade_date else "start",
            "cumulative_pnl": str(self.cumulative_pnl),
            "cumulative_percent": str(self.cumulative_percent),
        }


def equity_curve(
    entries: Iterable[PnlEntry], capital: Decimal = _ZERO
) -> list[EquityPoint]:
    """Cumulative daily P&L, oldest first, preceded by a zero starting point.

    Each point also carries the running total as a percent of capital
    (0.00 when capital is not positive).
    """
    daily: dict[date, Decimal] = defaultdict(lambda: _ZERO)
    for entry in entries:
        daily[entry.trade_date] += entry.pnl

    curve = [EquityPoint(trade_date=None, cumulative_pnl=_ZERO, cumulative_percent=_ZERO)]
    cumulative = _ZERO
    for day in sorted(daily):
        cumulative += daily[day]
        curve.append(
            EquityPoint(
                trade_date=day,
                cumulative_pnl=cumulative,
                cumulative_percent=percent_of(cumulative, capital),
            )
        )
    return curve


def available_months(entries: Iterable[PnlEntry]) -> list[tuple[int, int]]:
    """Distinct (year, month) pairs that contain closed trades, ascending."""
    return sorted({(e.trade_date.year, e.trade_date.month) for e in entries})
