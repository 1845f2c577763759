"""
Decimal helpers for cart amounts.

Prices, tax rates and totals stay Decimal inside the cart; floats only appear
at the HTTP boundary through to_float().
"""
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Union

Number = Union[str, int, float, Decimal]

# Cents
MONEY_PRECISION = Decimal("0.01")

HUNDRED = Decimal("100")


def to_decimal(value: Union[Number, None]) -> Decimal:
    """Lenient conversion: None and unparsable input become Decimal("0")."""
    if value is None:
        return Decimal("0")

    if isinstance(value, Decimal):
        return value

    try:
        if isinstance(value, float):
            # Go through str so 10.00 becomes Decimal("10.0"), not its binary expansion
            return Decimal(str(value))
        return Decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        return Decimal("0")


def parse_amount(value: object) -> Decimal:
    """
    Strict counterpart of to_decimal for user supplied amounts.

    Raises:
        ValueError: If value is None, a bool, not numeric, NaN or infinite
    """
    if value is None or isinstance(value, bool):
        raise ValueError(f"Not a numeric amount: {value!r}")
    if isinstance(value, str):
        value = value.strip()
    try:
        amount = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    except (InvalidOperation, ValueError, TypeError) as e:
        raise ValueError(f"Not a numeric amount: {value!r}") from e
    if not amount.is_finite():
        raise ValueError(f"Not a finite amount: {value!r}")
    return amount


def round_money(value: Number, places: int = 2) -> Decimal:
    """Round half-up to ``places`` decimals, as number_format does."""
    precision = MONEY_PRECISION if places == 2 else Decimal(1).scaleb(-places)
    return to_decimal(value).quantize(precision, rounding=ROUND_HALF_UP)


def format_number(
    value: Number,
    decimals: int = 2,
    decimal_point: str = ".",
    thousands_separator: str = ",",
) -> str:
    """
    Format a number with explicit separators, like PHP's number_format.

    >>> format_number(Decimal("6000"), 2, ",", ".")
    '6.000,00'
    """
    decimals = max(int(decimals), 0)
    amount = round_money(value, decimals)
    sign = "-" if amount < 0 else ""
    whole, _, fraction = f"{abs(amount):,.{decimals}f}".partition(".")
    formatted = whole.replace(",", thousands_separator)
    if decimals:
        formatted = f"{formatted}{decimal_point}{fraction}"
    return sign + formatted


def percent(value: Number, percent_value: Number) -> Decimal:
    """``percent_value`` percent of ``value``, unrounded."""
    return to_decimal(value) * to_decimal(percent_value) / HUNDRED


def to_float(value: Number) -> float:
    """JSON-friendly float for API responses; never feed it back into cart math."""
    return float(to_decimal(value))


__all__ = [
    "Number",
    "to_decimal",
    "parse_amount",
    "round_money",
    "format_number",
    "percent",
    "to_float",
]
