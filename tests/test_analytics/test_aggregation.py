"""Tests for calendar aggregation: days, Sunday-start weeks, months, years.

Calendar facts used below:
  2024-03-01 is a Friday  -> March 2024 spans 6 rows
  2015-02-01 is a Sunday  -> February 2015 spans exactly 4 rows
"""

from datetime import date
from decimal import Decimal

import pytest

from journal.analytics import (
    PROFIT_FACTOR_INFINITE,
    PnlEntry,
    day_aggregates,
    month_aggregate,
    week_count,
    week_index,
    year_aggregate,
)


def _entry(day: str, pnl: str) -> PnlEntry:
    return PnlEntry(trade_date=date.fromisoformat(day), pnl=Decimal(pnl))


@pytest.fixture
def march_entries() -> list[PnlEntry]:
    """[+500, -200, +300] in March 2024."""
    return [
        _entry("2024-03-01", "500.00"),
        _entry("2024-03-04", "-200.00"),
        _entry("2024-03-04", "300.00"),
    ]


class TestWeekIndex:
    """Sunday-start calendar rows."""

    def test_month_starting_friday(self) -> None:
        # Fri 1st and Sat 2nd share row 0; Sun 3rd starts row 1
        assert week_index(date(2024, 3, 1)) == 0
        assert week_index(date(2024, 3, 2)) == 0
        assert week_index(date(2024, 3, 3)) == 1
        assert week_index(date(2024, 3, 31)) == 5

    def test_month_starting_sunday(self) -> None:
        assert week_index(date(2015, 2, 1)) == 0
        assert week_index(date(2015, 2, 7)) == 0
        assert week_index(date(2015, 2, 8)) == 1
        assert week_index(date(2015, 2, 28)) == 3

    def test_week_count(self) -> None:
        assert week_count(2024, 3) == 6
        assert week_count(2015, 2) == 4
        # June 2024 starts on a Saturday: 30 days over 6 rows
        assert week_count(2024, 6) == 6


class TestDayAggregates:
    def test_groups_by_date(self, march_entries: list[PnlEntry]) -> None:
        days = day_aggregates(march_entries)
        assert set(days) == {date(2024, 3, 1), date(2024, 3, 4)}
        monday = days[date(2024, 3, 4)]
        assert monday.pnl == Decimal("100.00")
        assert monday.trade_count == 2
        assert monday.wins == 1
        assert monday.losses == 1
        assert monday.win_rate == Decimal("50.00")

    def test_empty(self) -> None:
        assert day_aggregates([]) == {}


class TestMonthAggregate:
    def test_reference_month(self, march_entries: list[PnlEntry]) -> None:
        month = month_aggregate(2024, 3, march_entries, Decimal("10000"))
        assert month.total_pnl == Decimal("600.00")
        assert month.wins == 2
        assert month.losses == 1
        assert month.breakeven == 0
        assert month.total_trades == 3
        assert month.trading_days == 2
        # 2 / 3 * 100 = 66.666... -> 66.67
        assert month.win_rate == Decimal("66.67")
        # (500 + 300) / 200 = 4
        assert month.profit_factor == Decimal("4.00")
        # 600 / 10000 * 100 = 6
        assert month.roi_percent == Decimal("6.00")

    def test_weeks(self, march_entries: list[PnlEntry]) -> None:
        month = month_aggregate(2024, 3, march_entries, Decimal("10000"))
        assert len(month.weeks) == 6
        assert [w.week_index for w in month.weeks] == [0, 1, 2, 3, 4, 5]
        assert month.weeks[0].pnl == Decimal("500.00")
        assert month.weeks[0].roi_percent == Decimal("5.00")
        assert month.weeks[1].pnl == Decimal("100.00")
        assert month.weeks[1].trading_days == 1
        assert month.weeks[1].trade_count == 2
        assert all(w.pnl == 0 and w.trade_count == 0 for w in month.weeks[2:])

    def test_weeks_sum_to_month(self, march_entries: list[PnlEntry]) -> None:
        month = month_aggregate(2024, 3, march_entries, Decimal("10000"))
        assert sum(w.pnl for w in month.weeks) == month.total_pnl
        assert sum(w.trade_count for w in month.weeks) == month.total_trades

    def test_wins_only_gives_infinite_profit_factor(self) -> None:
        entries = [_entry("2024-03-05", "120"), _entry("2024-03-06", "80")]
        month = month_aggregate(2024, 3, entries, Decimal("10000"))
        assert month.profit_factor == PROFIT_FACTOR_INFINITE
        assert month.profit_factor.is_infinite()
        assert month.to_dict()["profit_factor"] == "Infinity"

    def test_empty_month(self) -> None:
        month = month_aggregate(2015, 2, [], Decimal("10000"))
        assert month.total_pnl == Decimal("0")
        assert month.win_rate == Decimal("0.00")
        assert month.profit_factor == Decimal("0.00")
        assert month.roi_percent == Decimal("0.00")
        assert len(month.weeks) == 4
        assert month.days == {}

    def test_breakeven_excluded_from_win_rate(self) -> None:
        entries = [
            _entry("2024-03-05", "100"),
            _entry("2024-03-05", "0"),
            _entry("2024-03-06", "-100"),
        ]
        month = month_aggregate(2024, 3, entries, Decimal("10000"))
        assert month.breakeven == 1
        assert month.total_trades == 3
        # 1 win / (1 win + 1 loss)
        assert month.win_rate == Decimal("50.00")

    def test_entries_outside_month_ignored(self, march_entries: list[PnlEntry]) -> None:
        others = [_entry("2024-02-29", "999"), _entry("2023-03-15", "-999")]
        month = month_aggregate(2024, 3, march_entries + others, Decimal("10000"))
        assert month.total_pnl == Decimal("600.00")
        assert month.total_trades == 3

    def test_zero_capital_roi_is_zero(self, march_entries: list[PnlEntry]) -> None:
        month = month_aggregate(2024, 3, march_entries, Decimal("0"))
        assert month.roi_percent == Decimal("0.00")
        assert all(w.roi_percent == Decimal("0.00") for w in month.weeks)

    def test_order_independent(self, march_entries: list[PnlEntry]) -> None:
        forward = month_aggregate(2024, 3, march_entries, Decimal("10000"))
        backward = month_aggregate(2024, 3, list(reversed(march_entries)), Decimal("10000"))
        assert forward == backward

    def test_idempotent_and_input_untouched(self, march_entries: list[PnlEntry]) -> None:
        before = list(march_entries)
        first = month_aggregate(2024, 3, march_entries, Decimal("10000"))
        second = month_aggregate(2024, 3, march_entries, Decimal("10000"))
        assert first == second
        assert march_entries == before

    def test_to_dict(self, march_entries: list[PnlEntry]) -> None:
        data = month_aggregate(2024, 3, march_entries, Decimal("10000")).to_dict()
        assert data["total_pnl"] == "600.00"
        assert data["win_rate"] == "66.67"
        assert [d["date"] for d in data["days"]] == ["2024-03-01", "2024-03-04"]
        assert len(data["weeks"]) == 6


class TestYearAggregate:
    @pytest.fixture
    def year_entries(self) -> list[PnlEntry]:
        return [
            _entry("2024-01-15", "1000"),
            _entry("2024-02-10", "-500"),
            _entry("2024-04-02", "2000"),
            _entry("2024-12-31", "250"),
            _entry("2025-01-01", "77777"),
        ]

    def test_totals(self, year_entries: list[PnlEntry]) -> None:
        year = year_aggregate(2024, year_entries, Decimal("100000"))
        assert year.total_pnl == Decimal("2750")
        assert year.total_trades == 4
        assert year.wins == 3
        assert year.losses == 1
        assert year.win_rate == Decimal("75.00")
        # 3250 / 500 = 6.5
        assert year.profit_factor == Decimal("6.50")
        # 2750 / 100000 * 100 = 2.75
        assert year.roi_percent == Decimal("2.75")

    def test_twelve_months_agree_with_year(self, year_entries: list[PnlEntry]) -> None:
        year = year_aggregate(2024, year_entries, Decimal("100000"))
        assert [m.month for m in year.months] == list(range(1, 13))
        assert sum(m.total_pnl for m in year.months) == year.total_pnl
        assert year.months[3].total_pnl == Decimal("2000")

    def test_quarters(self, year_entries: list[PnlEntry]) -> None:
        year = year_aggregate(2024, year_entries, Decimal("100000"))
        assert [q.pnl for q in year.quarters] == [
            Decimal("500"),
            Decimal("2000"),
            Decimal("0"),
            Decimal("250"),
        ]
        assert [q.trade_count for q in year.quarters] == [2, 1, 0, 1]

    def test_month_roi_uses_same_baseline(self, year_entries: list[PnlEntry]) -> None:
        year = year_aggregate(2024, year_entries, Decimal("100000"))
        # 1000 / 100000 * 100 = 1.00
        assert year.months[0].roi_percent == Decimal("1.00")
