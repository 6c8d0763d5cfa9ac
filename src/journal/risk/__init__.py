"""Instrument & risk calculator: pips, position size, money at risk, P&L."""

from journal.risk.calculator import (
    INPUT_INCOMPLETE,
    UNKNOWN_INSTRUMENT,
    RiskCalculator,
    projected_outcome,
    reward_risk_ratio,
)
from journal.risk.pips import PIP_NOISE_FLOOR, pip_distance, pip_value_per_lot, realized_pips
from journal.risk.sizing import LotSizing, resolve_lot_size_and_risk

__all__ = [
    "INPUT_INCOMPLETE",
    "LotSizing",
    "PIP_NOISE_FLOOR",
    "RiskCalculator",
    "UNKNOWN_INSTRUMENT",
    "pip_distance",
    "pip_value_per_lot",
    "projected_outcome",
    "realized_pips",
    "resolve_lot_size_and_risk",
    "reward_risk_ratio",
]
