"""
Decimal precision helpers: conversion, rounding, line totals, formatting
"""
import pytest
from decimal import Decimal

from pos_ledger.financial_precision import (
    FinancialPrecisionError,
    NegativeValueError,
    calculate_change,
    calculate_line_total,
    format_currency,
    format_litres,
    round_currency,
    round_litres,
    sum_currency,
    to_decimal,
)


class TestConversion:
    """to_decimal input handling"""

    def test_float_goes_through_string(self):
        assert to_decimal(0.1) == Decimal("0.1")

    def test_int_and_str(self):
        assert to_decimal(3) == Decimal("3")
        assert to_decimal(" 12.50 ") == Decimal("12.50")

    def test_rejects_garbage(self):
        with pytest.raises(FinancialPrecisionError):
            to_decimal("twelve")
        with pytest.raises(FinancialPrecisionError):
            to_decimal(None)
        with pytest.raises(FinancialPrecisionError):
            to_decimal(True)

    def test_rejects_non_finite(self):
        with pytest.raises(FinancialPrecisionError):
            to_decimal("NaN")
        with pytest.raises(FinancialPrecisionError):
            to_decimal(float("inf"))


class TestRounding:
    """Half-up rounding at 2 dp (money) and 3 dp (litres)"""

    def test_currency_half_up(self):
        assert round_currency("2.345") == Decimal("2.35")
        assert round_currency("2.344") == Decimal("2.34")
        assert round_currency(1) == Decimal("1.00")

    def test_litres_half_up(self):
        assert round_litres("10.0005") == Decimal("10.001")
        assert round_litres(40) == Decimal("40.000")

    def test_sum_rounds_once(self):
        assert sum_currency(["0.005", "0.005"]) == Decimal("0.01")
        assert sum_currency([]) == Decimal("0.00")


class TestLineTotals:
    """Line total and change calculation"""

    def test_retail_total(self):
        assert calculate_line_total("2.50", 3) == Decimal("7.50")

    def test_fuel_total_rounds_to_cents(self):
        # 1.659 * 12.345 = 20.480355
        assert calculate_line_total("1.659", "12.345") == Decimal("20.48")

    def test_negative_price_rejected(self):
        with pytest.raises(NegativeValueError):
            calculate_line_total("-1.00", 1)

    def test_zero_quantity_rejected(self):
        with pytest.raises(NegativeValueError):
            calculate_line_total("1.00", 0)

    def test_change(self):
        assert calculate_change("12.50", "20.00") == Decimal("7.50")
        assert calculate_change("10", "10") == Decimal("0.00")

    def test_change_never_negative(self):
        with pytest.raises(NegativeValueError):
            calculate_change("10.00", "5.00")


class TestFormatting:

    def test_currency(self):
        assert format_currency("12.5") == "$12.50"
        assert format_currency(0) == "$0.00"

    def test_litres(self):
        assert format_litres(40) == "40.000"
        assert format_litres("12.3456") == "12.346"
