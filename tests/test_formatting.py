"""
Unit tests for formatting helpers.
"""
import sys
import os
from decimal import Decimal

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from explorer_core.services.decoders.base import Amount
from explorer_core.services.decoders.formatting import (
    format_amount,
    format_duration,
    format_price,
    format_units,
    truncate_hex,
)


class TestTruncateHex:
    """Test address shortening."""

    def test_truncate_address(self):
        assert truncate_hex("0x1234567890abcdef1234567890abcdef12345678") == "0x1234…5678"

    def test_custom_width(self):
        assert truncate_hex("0x1234567890abcdef1234567890abcdef12345678", 8) == "0x12345678…12345678"

    def test_short_values_untouched(self):
        assert truncate_hex("0x1234") == "0x1234"
        assert truncate_hex(None) == ""


class TestFormatPrice:
    """Test USD price formatting."""

    def test_full_format(self):
        assert format_price(1234560000, 6) == "$1,234.56"
        assert format_price(150000, 6) == "$0.15"
        assert format_price(2000000, 6) == "$2"

    def test_negative(self):
        assert format_price(-3000000, 6) == "-$3"

    def test_below_one_cent(self):
        assert format_price(5000, 6) == "<$0.01"

    def test_negative_below_one_cent(self):
        assert format_price(-1, 6) == "-<$0.01"
        assert format_price(-5000, 6, short=True) == "-<$0.01"

    def test_zero(self):
        assert format_price(0, 6) == "$0"

    def test_unknown_decimals(self):
        assert format_price(123, None) == "-"

    def test_short_format(self):
        assert format_price(1234560000, 6, short=True) == "$1.23K"
        assert format_price(3400000000000, 6, short=True) == "$3.4M"
        assert format_price(999000000, 6, short=True) == "$999"

    def test_short_rounds_into_next_unit(self):
        assert format_price(Decimal("999999.999"), short=True) == "$1M"

    def test_decimal_input(self):
        assert format_price(Decimal("12.345")) == "$12.35"


class TestFormatUnits:
    """Test exact unit formatting."""

    def test_trailing_zeros_dropped(self):
        assert format_units(150000, 6) == "0.15"
        assert format_units(100000000, 6) == "100"

    def test_large_values_exact(self):
        assert format_units(2**256 - 1, 18) == "115792089237316195423570985008687907853269984665640564039457.584007913129639935"

    def test_unknown_decimals_raw(self):
        assert format_units(150000, None) == "150000"

    def test_amount_with_symbol(self):
        assert format_amount(Amount(value=150000, token="0x20c0000000000000000000000000000000000001",
                                    decimals=6, symbol="AUSD")) == "0.15 AUSD"


class TestFormatDuration:
    """Test duration formatting."""

    def test_full(self):
        assert format_duration(93784) == "1 day 2h 3m 4s"

    def test_plural_days(self):
        assert format_duration(2 * 86400) == "2 days"

    def test_zero(self):
        assert format_duration(0) == "0s"
