"""Tests for currency formatting."""

import math

import pytest

from rar_analytics.formatting import CURRENCY_SYMBOLS, currency_symbol, format_currency


class TestFormatCurrency:
    """Test amount formatting."""

    @pytest.mark.parametrize(
        "amount,currency,expected",
        [
            (5000, "dollar", "$5,000"),
            (1234.5, "euro", "€1,234.5"),
            (17333.3333333, "dollar", "$17,333.333"),
            (0.1, "pound", "£0.1"),
            (0, "dollar", "$0"),
            (1_000_000, "yen", "¥1,000,000"),
            (-250, "dollar", "-$250"),
        ],
    )
    def test_amounts(self, amount, currency, expected):
        """Thousands separators, at most three decimals, trailing zeros dropped."""
        assert format_currency(amount, currency) == expected

    @pytest.mark.parametrize("amount", [None, math.nan, math.inf, -math.inf])
    def test_not_available(self, amount):
        """Missing or non-finite amounts print as N/A."""
        assert format_currency(amount) == "N/A"

    def test_tiny_negative_rounds_to_zero(self):
        """A negative amount that rounds to zero has no sign."""
        assert format_currency(-0.0001) == "$0"

    def test_max_decimals(self):
        """The number of fractional digits can be limited."""
        assert format_currency(2.71828, max_decimals=1) == "$2.7"


class TestCurrencySymbol:
    """Test symbol lookup."""

    def test_known(self):
        """Known keys map to their symbols."""
        assert currency_symbol("euro") == "€"
        assert CURRENCY_SYMBOLS["dollar"] == "$"

    def test_unknown(self):
        """Unknown keys fall back to the generic currency sign."""
        assert currency_symbol("doubloon") == "¤"
        assert format_currency(10, "doubloon") == "¤10"
