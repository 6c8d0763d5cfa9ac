"""Tests for Decimal rounding and display formatting."""

from decimal import Decimal

import pytest

from journal.formatting import (
    NOT_AVAILABLE,
    format_large_pnl,
    format_percent,
    format_profit_factor,
    format_signed_currency,
    percent_of,
    quantize_2,
)


class TestQuantize:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("2.345", "2.35"),
            ("2.335", "2.34"),
            ("-2.345", "-2.35"),
            ("10", "10.00"),
        ],
    )
    def test_half_up(self, value: str, expected: str) -> None:
        assert str(quantize_2(Decimal(value))) == expected

    def test_none_and_infinity_pass_through(self) -> None:
        assert quantize_2(None) is None
        assert quantize_2(Decimal("Infinity")).is_infinite()


class TestPercentOf:
    def test_roi(self) -> None:
        assert percent_of(Decimal("600"), Decimal("10000")) == Decimal("6.00")

    def test_non_positive_whole(self) -> None:
        assert percent_of(Decimal("600"), Decimal("0")) == Decimal("0.00")
        assert percent_of(Decimal("600"), Decimal("-5")) == Decimal("0.00")


class TestLargePnl:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("96800", "$96.8K"),
            ("108000", "$108K"),
            ("1234567", "$1.2M"),
            ("2000000", "$2M"),
            ("10550", "$10.6K"),
            ("10000", "$10K"),
            ("1500", "$1.5K"),
            ("32", "$32"),
            ("-32", "$32"),
            ("0", "$0"),
        ],
    )
    def test_compact(self, value: str, expected: str) -> None:
        assert format_large_pnl(Decimal(value)) == expected

    def test_none(self) -> None:
        assert format_large_pnl(None) == NOT_AVAILABLE


class TestSignedCurrency:
    def test_positive(self) -> None:
        assert format_signed_currency(Decimal("1234.5")) == "+$1,234.50"

    def test_negative(self) -> None:
        assert format_signed_currency(Decimal("-200")) == "-$200.00"

    def test_zero_has_no_sign(self) -> None:
        assert format_signed_currency(Decimal("0")) == "$0.00"

    def test_not_computable_is_never_zero(self) -> None:
        assert format_signed_currency(None) == NOT_AVAILABLE


class TestRatioFormatting:
    def test_percent(self) -> None:
        assert format_percent(Decimal("66.666")) == "66.67%"

    def test_profit_factor(self) -> None:
        assert format_profit_factor(Decimal("4")) == "4.00"
        assert format_profit_factor(Decimal("Infinity")) == "INF"
        assert format_profit_factor(None) == NOT_AVAILABLE
