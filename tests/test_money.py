"""
Test suite for money module

Tests 2-dp quantization, half-up rounding and input parsing.
All monetary values must be Decimal, never float.
"""

import pytest
from decimal import Decimal

from bank_ledger.errors import InvalidAmountError
from bank_ledger.money import (
    to_money, to_positive_money, decimal_from_string,
    format_money, format_display, quantize
)


class TestToMoney:
    """Test conversion of inputs to money"""

    def test_decimal_is_quantized(self):
        """Test Decimal inputs are rounded to 2 places"""
        assert to_money(Decimal('100')) == Decimal('100.00')
        assert to_money(Decimal('100')).as_tuple().exponent == -2

    def test_round_half_up(self):
        """Test half-up rounding at the third decimal"""
        assert to_money(Decimal('100.555')) == Decimal('100.56')
        assert to_money(Decimal('100.554')) == Decimal('100.55')
        assert to_money(Decimal('0.005')) == Decimal('0.01')
        assert to_money(Decimal('-1.005')) == Decimal('-1.01')

    def test_int_and_string_inputs(self):
        """Test int and string inputs"""
        assert to_money(50) == Decimal('50.00')
        assert to_money("75.5") == Decimal('75.50')
        assert to_money("$1,250.50") == Decimal('1250.50')

    def test_float_goes_through_str(self):
        """Test floats do not leak binary representation errors"""
        assert to_money(0.1) == Decimal('0.10')
        assert to_money(2.675) == Decimal('2.68')

    def test_invalid_inputs(self):
        """Test missing and non-numeric inputs are rejected"""
        for bad in [None, "", "abc", "-", True, [1], Decimal('NaN'), float('inf')]:
            with pytest.raises(InvalidAmountError):
                to_money(bad)

    def test_out_of_range(self):
        """Test values too large to quantize are rejected"""
        with pytest.raises(InvalidAmountError):
            to_money(Decimal('1E+40'))

    def test_positive_money(self):
        """Test positivity is checked after rounding"""
        assert to_positive_money("0.01") == Decimal('0.01')

        for bad in ["0", "-5", Decimal('0.004')]:
            with pytest.raises(InvalidAmountError, match="positive"):
                to_positive_money(bad)


class TestDecimalFromString:
    """Test string parsing"""

    def test_comma_as_decimal_separator(self):
        assert decimal_from_string("12,5") == Decimal('12.5')

    def test_comma_as_thousands_separator(self):
        assert decimal_from_string("1,234") == Decimal('1234')
        assert decimal_from_string("1,234.56") == Decimal('1234.56')

    def test_whitespace(self):
        assert decimal_from_string("  42.00 ") == Decimal('42.00')

    def test_currency_symbol(self):
        assert decimal_from_string("€ 12.50") == Decimal('12.50')
        assert decimal_from_string("£-3") == Decimal('-3')

    @pytest.mark.parametrize("raw", [
        "12abc34",       # embedded letters
        "1e3",           # exponent notation
        "1E+3",
        "1.000,50",      # mixed separators
        "1,2,3",
        "12.34.56",
        "$$5",
        "5$",
        "1 000",
        "NaN",
        "Infinity",
        "0x10",
    ])
    def test_malformed_strings_rejected(self, raw):
        """Test malformed input is rejected instead of reinterpreted"""
        with pytest.raises(InvalidAmountError):
            decimal_from_string(raw)


class TestFormatting:
    """Test money rendering"""

    def test_plain_format(self):
        assert format_money(Decimal('1234.5')) == "1234.50"
        assert format_money(Decimal('0')) == "0.00"

    def test_display_format(self):
        assert format_display(Decimal('1234.5')) == "1,234.50"

    def test_quantize(self):
        assert quantize(Decimal('3.14159')) == Decimal('3.14')
