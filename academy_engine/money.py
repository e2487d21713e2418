"""
Money helpers shared by the calculators and the payload builder.

Form values arrive as whatever the dashboard typed: numbers, numeric
strings, blanks or None. They are coerced to Decimal here and never rejected.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, getcontext

ZERO = Decimal("0")
ONE = Decimal("1")
CENT = Decimal("0.01")

# Inputs beyond 10^±MAX_EXPONENT are treated like non-finite values. Products
# and quotients of two such inputs stay far inside the Decimal exponent range
# and the float range used for JSON output.
MAX_EXPONENT = 100


def to_decimal(value) -> Decimal:
    """Coerce a form value to Decimal.

    Blank, non-numeric, non-finite or out-of-range input becomes 0.
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            return ZERO
    if not result.is_finite() or abs(result.adjusted()) > MAX_EXPONENT:
        return ZERO
    return result


def to_optional_decimal(value) -> Decimal | None:
    """Like to_decimal, but keeps None/blank as None for optional fields."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return to_decimal(value)


def to_count(value) -> int:
    """Coerce a headcount to a non-negative int."""
    return max(0, int(to_decimal(value)))


def quantize_money(value: Decimal) -> Decimal:
    """Round to 2 decimal places using ROUND_HALF_UP.

    Amounts too large to carry cents within the context precision are
    returned unrounded.
    """
    if value.adjusted() + 3 > getcontext().prec:
        return value
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def to_money(value: Decimal) -> float:
    """Convert Decimal to float with 2 decimal places."""
    return float(quantize_money(value))


def fmt(value) -> str:
    """Format a number as currency string for descriptions."""
    return f"${value:,.2f}"
