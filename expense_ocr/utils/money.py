"""
Shared money utilities for receipt amounts.

Handles the number shapes OCR produces on receipts:
- Plain: 1,234.56 (comma thousands separator, dot decimal separator)
- Symbol-prefixed: $45.99, R$ 12.00, ₹1,200.00
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Optional, Union
import re


@dataclass(frozen=True)
class CurrencyOption:
    """A currency the portal accepts on expense reports."""
    code: str
    name: str
    symbol: str


SUPPORTED_CURRENCIES = (
    CurrencyOption('USD', 'US Dollar', '$'),
    CurrencyOption('EUR', 'Euro', '€'),
    CurrencyOption('GBP', 'British Pound', '£'),
    CurrencyOption('BRL', 'Brazilian Real', 'R$'),
    CurrencyOption('CAD', 'Canadian Dollar', 'CA$'),
    CurrencyOption('MXN', 'Mexican Peso', 'MX$'),
    CurrencyOption('JPY', 'Japanese Yen', '¥'),
    CurrencyOption('CNY', 'Chinese Yuan', '¥'),
    CurrencyOption('INR', 'Indian Rupee', '₹'),
    CurrencyOption('AUD', 'Australian Dollar', 'A$'),
)

SUPPORTED_CURRENCY_CODES = frozenset(c.code for c in SUPPORTED_CURRENCIES)

# Symbols OCR leaves glued to amounts. R$ must be tried before the bare $.
_CURRENCY_SYMBOLS = re.compile(r'R\$|[£$€¥₹]')


def get_currency(code: str) -> Optional[CurrencyOption]:
    """Look up a supported currency by ISO code (case-insensitive)."""
    if not code:
        return None
    code = code.upper()
    for option in SUPPORTED_CURRENCIES:
        if option.code == code:
            return option
    return None


def parse_money(amount_str: str) -> Optional[Decimal]:
    """
    Parse a money string captured from receipt text.

    Currency symbols, whitespace and comma thousands separators are stripped
    before the number is read. A comma is never a decimal separator here, so
    "45,90" reads as 4590. Only finite, non-negative values come back;
    anything else is None.

    Args:
        amount_str: String containing amount (e.g., "$1,234.56", "R$ 12.00")

    Returns:
        Decimal amount or None if parsing fails

    Examples:
        >>> parse_money("$1,234.56")
        Decimal('1234.56')
        >>> parse_money(",")
    """
    if not amount_str or not isinstance(amount_str, str):
        return None

    cleaned = _CURRENCY_SYMBOLS.sub('', amount_str)
    cleaned = re.sub(r'[\s,]+', '', cleaned)

    if not cleaned:
        return None

    try:
        result = Decimal(cleaned)
    except (InvalidOperation, ValueError):
        return None

    if not result.is_finite() or result < 0:
        return None

    return result


def format_money(amount: Optional[Union[Decimal, float]], currency: str = 'USD') -> str:
    """
    Format an amount with the currency's display symbol.

    Unknown currency codes are used as their own prefix.

    Examples:
        >>> format_money(Decimal('1234.56'))
        '$1,234.56'
        >>> format_money(Decimal('12'), 'BRL')
        'R$12.00'
    """
    if amount is None:
        return 'N/A'

    option = get_currency(currency)
    symbol = option.symbol if option else currency

    return f"{symbol}{float(amount):,.2f}"
