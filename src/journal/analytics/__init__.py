"""Aggregation engine: calendar views and performance statistics."""

from journal.analytics.aggregation import (
    DayAggregate,
    MonthAggregate,
    QuarterAggregate,
    WeekAggregate,
    YearAggregate,
    day_aggregates,
    month_aggregate,
    sunday_weekday,
    week_count,
    week_index,
    year_aggregate,
)
from journal.analytics.cache import AggregateCache
from journal.analytics.metrics import (
    PROFIT_FACTOR_INFINITE,
    EquityPoint,
    OverallStats,
    PnlEntry,
    available_months,
    closed_entries,
    equity_curve,
    overall_stats,
    profit_factor,
    win_rate,
)

__all__ = [
    "AggregateCache",
    "DayAggregate",
    "EquityPoint",
    "MonthAggregate",
    "OverallStats",
    "PROFIT_FACTOR_INFINITE",
    "PnlEntry",
    "QuarterAggregate",
    "WeekAggregate",
    "YearAggregate",
    "available_months",
    "closed_entries",
    "day_aggregates",
    "equity_curve",
    "month_aggregate",
    "overall_stats",
    "profit_factor",
    "sunday_weekday",
    "week_count",
    "week_index",
    "win_rate",
]
