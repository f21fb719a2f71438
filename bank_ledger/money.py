"""
Money Handling Module

Fixed-point monetary values for the ledger. Every amount is a Decimal
quantized to exactly two fractional digits with ROUND_HALF_UP.
NEVER uses float for monetary values.
"""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation, getcontext
from typing import Any, Union
import re

from .errors import InvalidAmountError

# Set global decimal context for financial precision
getcontext().prec = 28

CENT = Decimal('0.01')
ZERO = Decimal('0.00')

MoneyLike = Union[Decimal, int, float, str]

CURRENCY_SYMBOLS = "$€£"

# "1,234" is grouped thousands, "12,5" is a decimal comma
_GROUPED_AMOUNT = re.compile(r'[+-]?[0-9]{1,3}(,[0-9]{3})+(\.[0-9]+)?')
_PLAIN_AMOUNT = re.compile(r'[+-]?[0-9]+([.,][0-9]+)?')


def quantize(value: Decimal) -> Decimal:
    """Round a Decimal to two places, half-up"""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def to_money(value: Any) -> Decimal:
    """
    Convert an input value to a 2-dp Decimal

    Args:
        value: Decimal, int, float or numeric string

    Returns:
        Quantized Decimal

    Raises:
        InvalidAmountError: If the value is missing or not a finite number
    """
    if value is None:
        raise InvalidAmountError("Amount is required")

    if isinstance(value, bool):
        raise InvalidAmountError(f"Not a monetary amount: {value!r}")

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        # Go through str() so binary float noise never reaches the ledger
        amount = Decimal(str(value))
    elif isinstance(value, str):
        amount = decimal_from_string(value)
    else:
        raise InvalidAmountError(f"Not a monetary amount: {value!r}")

    if not amount.is_finite():
        raise InvalidAmountError(f"Amount must be a finite number: {value!r}")

    try:
        return quantize(amount)
    except InvalidOperation:
        raise InvalidAmountError(f"Amount out of range: {value!r}")


def to_positive_money(value: Any) -> Decimal:
    """Convert to money and require it to be strictly positive after rounding"""
    amount = to_money(value)
    if amount <= ZERO:
        raise InvalidAmountError("Amount must be positive.")
    return amount


def decimal_from_string(value: str) -> Decimal:
    """
    Safely convert string to Decimal, handling common formats

    Accepts one leading currency symbol, surrounding whitespace, comma
    thousands separators ("$1,250.50") and a single decimal comma ("12,5").
    Anything else, including exponents and embedded letters, is rejected.

    Raises:
        InvalidAmountError: If string cannot be converted to valid Decimal
    """
    if not value or not value.strip():
        raise InvalidAmountError("Amount must be a non-empty string")

    clean_value = value.strip()
    if clean_value[0] in CURRENCY_SYMBOLS:
        clean_value = clean_value[1:].lstrip()

    if _GROUPED_AMOUNT.fullmatch(clean_value):
        clean_value = clean_value.replace(',', '')
    elif _PLAIN_AMOUNT.fullmatch(clean_value):
        clean_value = clean_value.replace(',', '.')
    else:
        raise InvalidAmountError(f"Cannot convert '{value}' to an amount")

    try:
        return Decimal(clean_value)
    except InvalidOperation:
        raise InvalidAmountError(f"Cannot convert '{value}' to an amount")


def format_money(amount: Decimal) -> str:
    """Plain 2-dp rendering used in ledgers and statements"""
    return f"{quantize(amount):.2f}"


def format_display(amount: Decimal) -> str:
    """Grouped rendering for interactive display"""
    return f"{quantize(amount):,.2f}"
