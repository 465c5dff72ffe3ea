"""
Tests for money parsing and formatting.
"""

from decimal import Decimal

import pytest

from expense_ocr.utils.money import (
    SUPPORTED_CURRENCIES,
    SUPPORTED_CURRENCY_CODES,
    format_money,
    get_currency,
    parse_money,
)


class TestParseMoney:
    """Reading amounts captured from receipt text."""

    @pytest.mark.parametrize("raw,expected", [
        ("$1,234.56", Decimal('1234.56')),
        ("R$ 12.00", Decimal('12.00')),
        ("₹ 250", Decimal('250')),
        ("€8.40", Decimal('8.40')),
        ("  45.99 ", Decimal('45.99')),
        ("0.00", Decimal('0.00')),
    ])
    def test_us_format(self, raw, expected):
        assert parse_money(raw) == expected

    @pytest.mark.parametrize("raw", ["", ",", "abc", "$", "NaN", "Infinity", "-5.00", None])
    def test_unparsable_or_negative_is_none(self, raw):
        assert parse_money(raw) is None

    @pytest.mark.parametrize("raw,expected", [
        ("45,90", Decimal('4590')),
        ("1.234,56", Decimal('1.23456')),
        ("1 234.56", Decimal('1234.56')),
    ])
    def test_comma_is_always_a_thousands_separator(self, raw, expected):
        assert parse_money(raw) == expected


class TestFormatMoney:
    """Display strings for amounts."""

    @pytest.mark.parametrize("amount,currency,expected", [
        (Decimal('1234.5'), 'USD', '$1,234.50'),
        (Decimal('12'), 'BRL', 'R$12.00'),
        (Decimal('0.5'), 'eur', '€0.50'),
        (Decimal('5'), 'XYZ', 'XYZ5.00'),
        (20.0, 'USD', '$20.00'),
    ])
    def test_format(self, amount, currency, expected):
        assert format_money(amount, currency) == expected

    def test_missing_amount(self):
        assert format_money(None) == 'N/A'


class TestSupportedCurrencies:
    """The currency list offered on expense reports."""

    def test_codes(self):
        assert [c.code for c in SUPPORTED_CURRENCIES] == [
            'USD', 'EUR', 'GBP', 'BRL', 'CAD', 'MXN', 'JPY', 'CNY', 'INR', 'AUD',
        ]
        assert SUPPORTED_CURRENCY_CODES == {c.code for c in SUPPORTED_CURRENCIES}

    def test_lookup_is_case_insensitive(self):
        assert get_currency('brl').symbol == 'R$'
        assert get_currency('CAD').name == 'Canadian Dollar'

    @pytest.mark.parametrize("code", ['XYZ', '', None])
    def test_unknown_lookup(self, code):
        assert get_currency(code) is None
