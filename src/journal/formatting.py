"""Shared Decimal rounding and display formatting helpers.

Rounding is ROUND_HALF_UP to two places everywhere a figure is frozen or
shown. Display helpers never raise on None: they render "-" so a value that
is not computable is never shown as a zero.
"""

from decimal import ROUND_HALF_UP, Decimal

TWO_PLACES = Decimal("0.01")
NOT_AVAILABLE = "-"


def quantize_2(value: Decimal | None) -> Decimal | None:
    """Round to 0.01 (half up). None and non-finite values pass through."""
    if value is None or not value.is_finite():
        return value
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def percent_of(part: Decimal, whole: Decimal) -> Decimal:
    """part / whole * 100 rounded to 0.01; 0.00 when whole is not positive."""
    if whole <= 0:
        return Decimal("0.00")
    return quantize_2(part / whole * Decimal("100"))


def format_signed_currency(value: Decimal | None) -> str:
    """Format as "+$1,234.50" / "-$200.00"; zero has no sign."""
    if value is None:
        return NOT_AVAILABLE
    amount = quantize_2(abs(value))
    sign = "+" if value > 0 else "-" if value < 0 else ""
    return f"{sign}${amount:,.2f}"


def _one_decimal(value: Decimal) -> str:
    """One decimal place, dropping a trailing ".0" (108.0 -> "108")."""
    text = str(value.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))
    return text[:-2] if text.endswith(".0") else text


def format_large_pnl(value: Decimal | None) -> str:
    """Compact magnitude for calendar tiles: $96.8K, $108K, $1.2M, $32.

    Sign is not included; callers color the tile by sign.
    """
    if value is None:
        return NOT_AVAILABLE
    amount = abs(value)
    if amount == 0:
        return "$0"
    if amount >= Decimal("1000000"):
        return f"${_one_decimal(amount / Decimal('1000000'))}M"
    if amount >= Decimal("1000"):
        return f"${_one_decimal(amount / Decimal('1000'))}K"
    return f"${amount:.0f}"


def format_percent(value: Decimal | None) -> str:
    if value is None:
        return NOT_AVAILABLE
    return f"{quantize_2(value)}%"


def format_profit_factor(value: Decimal | None) -> str:
    """Two decimals, or "INF" for the no-losses sentinel."""
    if value is None:
        return NOT_AVAILABLE
    if value.is_infinite():
        return "INF"
    return f"{quantize_2(value)}"
