"""
POS LEDGER: DECIMAL PRECISION & FINANCIAL UTILITIES

This module provides:
1. Decimal precision lock (2-decimal currency, 3-decimal litres)
2. Safe line total calculations
3. Value validation (no negative amounts)
4. Rounding at calculation boundary only
5. Receipt display formatting
"""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Iterable, Union
import logging

logger = logging.getLogger(__name__)

# Precision configuration
CURRENCY_DECIMAL_PLACES = 2
LITRES_DECIMAL_PLACES = 3
CURRENCY_QUANTIZE = Decimal('0.01')
LITRES_QUANTIZE = Decimal('0.001')
ZERO = Decimal('0.00')

Numeric = Union[float, int, str, Decimal]


class FinancialPrecisionError(Exception):
    """Raised when financial precision validation fails"""
    pass


class NegativeValueError(Exception):
    """Raised when a negative financial value is detected"""
    pass


def to_decimal(value: Numeric) -> Decimal:
    """
    Convert any numeric value to Decimal.
    Does NOT round - preserves full precision for intermediate calculations.
    """
    if isinstance(value, bool):
        raise FinancialPrecisionError(f"Cannot convert {type(value)} to Decimal")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        # Convert via string to avoid float precision issues
        result = Decimal(str(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation:
            raise FinancialPrecisionError(f"Cannot convert '{value}' to Decimal")
    else:
        raise FinancialPrecisionError(f"Cannot convert {type(value)} to Decimal")

    if not result.is_finite():
        raise FinancialPrecisionError(f"Non-finite value not allowed: {value}")
    return result


def round_currency(value: Numeric) -> Decimal:
    """
    Round a value to 2 decimal places (half up).
    This should be called ONLY at calculation boundaries.
    """
    return to_decimal(value).quantize(CURRENCY_QUANTIZE, rounding=ROUND_HALF_UP)


def round_litres(value: Numeric) -> Decimal:
    """Round a fuel volume to 3 decimal places (half up)."""
    return to_decimal(value).quantize(LITRES_QUANTIZE, rounding=ROUND_HALF_UP)


def validate_non_negative(value: Numeric, field_name: str) -> None:
    """
    Validate that a financial value is not negative.
    Raises NegativeValueError if validation fails.
    """
    decimal_value = to_decimal(value)
    if decimal_value < Decimal('0'):
        raise NegativeValueError(
            f"Financial value '{field_name}' cannot be negative: {value}"
        )


def validate_positive(value: Numeric, field_name: str) -> None:
    """
    Validate that a value is strictly positive (> 0).
    Raises NegativeValueError if validation fails.
    """
    decimal_value = to_decimal(value)
    if decimal_value <= Decimal('0'):
        raise NegativeValueError(
            f"Value '{field_name}' must be positive: {value}"
        )


def safe_multiply(a: Numeric, b: Numeric) -> Decimal:
    """Safe multiplication preserving precision"""
    return to_decimal(a) * to_decimal(b)


def safe_subtract(a: Numeric, b: Numeric) -> Decimal:
    """Safe subtraction preserving precision"""
    return to_decimal(a) - to_decimal(b)


def sum_currency(values: Iterable[Numeric]) -> Decimal:
    """Sum values at full precision, rounding once at the end."""
    result = Decimal('0')
    for v in values:
        result += to_decimal(v)
    return round_currency(result)


def calculate_line_total(price: Numeric, quantity: Numeric) -> Decimal:
    """
    Calculate a line item total.

    LOCKED FORMULA:
    - total_price = round_currency(price * quantity)

    Used for both retail (unit price x units) and fuel
    (price per litre x litres dispensed).
    """
    validate_non_negative(price, 'price')
    validate_positive(quantity, 'quantity')
    return round_currency(safe_multiply(price, quantity))


def calculate_change(total_amount: Numeric, tendered_amount: Numeric) -> Decimal:
    """Change owed to the customer. Never negative."""
    change = round_currency(safe_subtract(tendered_amount, total_amount))
    validate_non_negative(change, 'change_amount')
    return change


def format_currency(value: Numeric) -> str:
    """Format as a dollar amount with exactly 2 decimals: $12.50"""
    return f"${round_currency(value):.2f}"


def format_litres(value: Numeric) -> str:
    """Format a litre quantity with exactly 3 decimals: 40.000"""
    return f"{round_litres(value):.3f}"
