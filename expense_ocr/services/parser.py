"""
Receipt parser service for extracting structured data from OCR text.
"""

import re
import logging
import datetime as dt
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Callable, List, Optional, Tuple

from expense_ocr.models.parsed_receipt import ParsedReceipt
from expense_ocr.utils.money import parse_money
from expense_ocr.utils.scoring import score_confidence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PatternSpec:
    """A named regex pattern with example and notes for documentation."""
    name: str
    pattern: str
    example: str
    label: Optional[str] = None  # Value produced when this pattern wins
    notes: Optional[str] = None
    flags: int = re.IGNORECASE
    compiled: re.Pattern = field(default=None, init=False, compare=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, 'compiled', re.compile(self.pattern, self.flags))


# Optional currency symbol in front of an amount. R$ before the bare $.
# Numbers only start at the beginning of a digit run.
_SYMBOL = r'(?:(?:R\$|[£$€¥₹])\s*)?'
_NUMBER_START = r'(?<![\d,])'
_LABELED_NUMBER = r'(' + _SYMBOL + _NUMBER_START + r'[\d,]+\.?\d{0,2})'
_TWO_DECIMAL_NUMBER = r'(' + _SYMBOL + _NUMBER_START + r'[\d,]+\.\d{2})'

_MONTH_NAMES = (
    'january', 'february', 'march', 'april', 'may', 'june',
    'july', 'august', 'september', 'october', 'november', 'december',
)
_MONTH_WORD = r'((?:JAN|FEB|MAR|APR|MAY|JUN|JUL|AUG|SEP|OCT|NOV|DEC)[A-Z]*)\.?'

GENERIC_HEADERS = ('receipt', 'invoice', 'bill')

VENDOR_SCAN_LINES = 5
VENDOR_MIN_LENGTH = 3

DEFAULT_CURRENCY = 'USD'
UNKNOWN_PAYMENT = 'Unknown'


def _word(pattern: str) -> str:
    """Match ``pattern`` only when it is not glued to other letters."""
    return r'(?<![A-Z])(?:' + pattern + r')(?![A-Z])'


def _one_year_before(day: dt.date) -> dt.date:
    try:
        return day.replace(year=day.year - 1)
    except ValueError:
        # Feb 29 -> Feb 28
        return day.replace(year=day.year - 1, day=28)


def _safe_date(year: int, month: int, day: int) -> Optional[dt.date]:
    try:
        return dt.date(year, month, day)
    except ValueError:
        return None


def _month_number(word: str) -> Optional[int]:
    """Resolve an abbreviated or full month name ("Mar", "Sept", "March")."""
    word = word.lower()
    for index, name in enumerate(_MONTH_NAMES, start=1):
        if name.startswith(word):
            return index
    return None


class ReceiptParser:
    """Service for parsing receipt text and extracting structured data."""

    def __init__(self, today: Optional[Callable[[], dt.date]] = None):
        """
        Initialize parser with regex patterns.

        Args:
            today: Clock returning the current date. Dates later than today or
                more than a year before it are rejected.
        """
        self._today = today or dt.date.today
        self._init_patterns()

    def _init_patterns(self):
        """Initialize regex patterns for parsing."""

        # Amount patterns run against uppercased text, strongest label first.
        self.amount_patterns = [
            PatternSpec(
                name='grand_total',
                pattern=r'GRAND\s+TOTAL[:\s]*' + _LABELED_NUMBER,
                example='GRAND TOTAL: $45.99',
            ),
            PatternSpec(
                name='total',
                pattern=r'(?<!SUB)(?<!SUB )TOTAL[:\s]*' + _LABELED_NUMBER,
                example='TOTAL $45.99',
                notes='Excludes the TOTAL inside SUBTOTAL',
            ),
            PatternSpec(
                name='amount_due',
                pattern=r'AMOUNT\s+DUE[:\s]*' + _LABELED_NUMBER,
                example='AMOUNT DUE: 45.99',
            ),
            PatternSpec(
                name='balance',
                pattern=r'BALANCE[:\s]*' + _LABELED_NUMBER,
                example='BALANCE 45.99',
            ),
            PatternSpec(
                name='amount',
                pattern=r'AMOUNT[:\s]*' + _LABELED_NUMBER,
                example='AMOUNT: R$ 45,99',
            ),
            PatternSpec(
                name='subtotal',
                pattern=r'SUB\s?TOTAL[:\s]*' + _LABELED_NUMBER,
                example='SUBTOTAL 42.49',
                notes='Weakest label; only used when no real total is printed',
            ),
            PatternSpec(
                name='amount_before_label',
                pattern=_TWO_DECIMAL_NUMBER + r'\s*(?:TOTAL|AMOUNT\s+DUE)',
                example='45.99 TOTAL',
            ),
        ]

        # Any two-decimal figure; the largest is taken when nothing is labeled
        self.fallback_amount_pattern = PatternSpec(
            name='two_decimal_figure',
            pattern=_NUMBER_START + r'[\d,]+\.\d{2}',
            example='1,234.56',
            flags=0,
        )

        # Currency signatures in priority order; table order breaks ties.
        self.currency_patterns = [
            PatternSpec(
                name='usd',
                pattern=r'(?<![RAX])\$|' + _word(r'US\$|USD|US\s*DOLLARS?'),
                example='$45.99',
                label='USD',
                notes='R$, CA$, MX$ and A$ belong to other currencies; TOTAL$4.50 is still USD',
            ),
            PatternSpec(name='eur', pattern=r'€|' + _word(r'EUR|EUROS?'), example='€ 12,00', label='EUR'),
            PatternSpec(name='gbp', pattern=r'£|' + _word(r'GBP|POUNDS?'), example='£9.99', label='GBP'),
            PatternSpec(name='brl', pattern=r'R\$|' + _word(r'BRL|REAL|REAIS'), example='R$ 45,90', label='BRL'),
            PatternSpec(
                name='cad',
                pattern=r'CA\$|' + _word(r'CAD|CANADIAN\s*DOLLARS?'),
                example='CA$ 12.00',
                label='CAD',
            ),
            PatternSpec(name='mxn', pattern=r'MX\$|' + _word(r'MXN|PESOS?'), example='MX$ 150.00', label='MXN'),
            PatternSpec(name='jpy', pattern=r'¥|' + _word(r'JPY|YEN'), example='¥1,200', label='JPY'),
            PatternSpec(name='cny', pattern=_word(r'CNY|YUAN|RMB'), example='RMB 88.00', label='CNY'),
            PatternSpec(name='inr', pattern=r'₹|' + _word(r'INR|RUPEES?'), example='₹ 250.00', label='INR'),
            PatternSpec(
                name='aud',
                pattern=r'A\$|' + _word(r'AUD|AUSTRALIAN\s*DOLLARS?'),
                example='A$ 19.95',
                label='AUD',
            ),
        ]

        # Date shapes in priority order; only the first match of each is tried.
        self.date_patterns = [
            PatternSpec(
                name='numeric_date',
                pattern=r'(?<!\d)(\d{1,2})[/-](\d{1,2})[/-](\d{4}|\d{2})(?!\d)',
                example='03/15/2024',
                label='mdy',
                notes='Month first; day first when month first is not a real date',
            ),
            PatternSpec(
                name='iso_date',
                pattern=r'(?<!\d)(\d{4})[/-](\d{1,2})[/-](\d{1,2})(?!\d)',
                example='2024-03-15',
                label='ymd',
            ),
            PatternSpec(
                name='month_name_date',
                pattern=r'\b' + _MONTH_WORD + r'\s+(\d{1,2}),?\s+(\d{4})\b',
                example='Mar 15, 2024',
                label='month_day_year',
            ),
            PatternSpec(
                name='day_month_name_date',
                pattern=r'\b(\d{1,2})\s+' + _MONTH_WORD + r'\s+(\d{4})\b',
                example='15 March 2024',
                label='day_month_year',
            ),
        ]

        # Payment signatures in priority order, run against uppercased text.
        self.payment_patterns = [
            PatternSpec(name='visa', pattern=r'VISA', example='VISA ****1234', label='Visa'),
            PatternSpec(name='mastercard', pattern=r'MASTERCARD|M/C', example='M/C 5555', label='Mastercard'),
            PatternSpec(
                name='amex',
                pattern=r'AMEX|AMERICAN\s*EXPRESS',
                example='AMERICAN EXPRESS',
                label='American Express',
            ),
            PatternSpec(name='discover', pattern=r'DISCOVER', example='DISCOVER', label='Discover'),
            PatternSpec(name='debit', pattern=r'DEBIT', example='DEBIT CARD', label='Debit Card'),
            PatternSpec(name='credit', pattern=r'CREDIT', example='CREDIT', label='Credit Card'),
            PatternSpec(name='cash', pattern=r'CASH', example='CASH TEND', label='Cash'),
            PatternSpec(name='check', pattern=r'CHECK|CHEQUE', example='CHEQUE', label='Check'),
        ]

    def parse(self, text: str) -> ParsedReceipt:
        """
        Parse receipt text and extract all available fields.

        Never raises: every field falls back to None, "" or its default.

        Args:
            text: OCR-extracted text from receipt

        Returns:
            ParsedReceipt with amount, currency, date, vendor, payment method
            and per-field confidence
        """
        text = text or ''
        lines = self._split_lines(text)

        parsed = ParsedReceipt(
            amount=self.extract_amount(text),
            currency=self.detect_currency(text),
            date=self.extract_date(text),
            vendor_name=self.extract_vendor(text, lines=lines),
            payment_method=self.extract_payment_method(text),
            confidence=score_confidence(text, lines),
        )

        logger.debug("Parsed receipt text", extra={
            "text_length": len(text),
            "amount": str(parsed.amount) if parsed.amount is not None else None,
            "currency": parsed.currency,
            "date": parsed.date.isoformat() if parsed.date else None,
            "vendor": parsed.vendor_name,
            "payment_method": parsed.payment_method,
        })

        return parsed

    @staticmethod
    def _split_lines(text: str) -> List[str]:
        """Non-blank lines, untrimmed."""
        return [line for line in text.split('\n') if line.strip()]

    def extract_amount(self, text: str) -> Optional[Decimal]:
        """
        Extract total amount from receipt.

        Labeled amounts win in pattern order. Without a usable label, the
        largest two-decimal figure anywhere in the text is taken, since
        receipts usually print the total as their biggest number.

        Returns:
            Amount as Decimal or None
        """
        text = text or ''
        normalized = text.upper()

        for spec in self.amount_patterns:
            match = spec.compiled.search(normalized)
            if not match:
                continue

            amount = parse_money(match.group(1))
            if amount is not None and amount > 0:
                logger.debug("Amount matched %s: %s", spec.name, amount)
                return amount

        candidates = [
            parse_money(raw)
            for raw in self.fallback_amount_pattern.compiled.findall(text)
        ]
        candidates = [amount for amount in candidates if amount is not None and amount > 0]

        if candidates:
            return max(candidates)

        return None

    def detect_currency(self, text: str) -> str:
        """Return the first currency in priority order whose signature appears, else USD."""
        text = text or ''
        for spec in self.currency_patterns:
            if spec.compiled.search(text):
                return spec.label
        return DEFAULT_CURRENCY

    def extract_date(self, text: str) -> Optional[dt.date]:
        """
        Extract the receipt date.

        Each shape contributes only its first match. A match that is not a
        real calendar date, or lies outside the last year, is skipped in
        favour of the next shape.
        """
        text = text or ''
        today = self._today()
        earliest = _one_year_before(today)

        for spec in self.date_patterns:
            match = spec.compiled.search(text)
            if not match:
                continue

            candidate = self._build_date(spec.label, match.groups())
            if candidate is None:
                continue

            if earliest <= candidate <= today:
                return candidate

            logger.debug("Date %s out of range (%s..%s)", candidate, earliest, today)

        return None

    def _build_date(self, shape: str, groups: Tuple[str, ...]) -> Optional[dt.date]:
        if shape == 'mdy':
            first, second, year = int(groups[0]), int(groups[1]), int(groups[2])
            if year < 100:
                year += 2000
            return _safe_date(year, first, second) or _safe_date(year, second, first)

        if shape == 'ymd':
            return _safe_date(int(groups[0]), int(groups[1]), int(groups[2]))

        if shape == 'month_day_year':
            month_word, day, year = groups
        else:
            day, month_word, year = groups

        month = _month_number(month_word)
        if month is None:
            return None
        return _safe_date(int(year), month, int(day))

    def extract_vendor(self, text: str, lines: Optional[List[str]] = None) -> str:
        """
        Extract vendor name from the receipt header.

        The business name is usually the longest meaningful line among the
        first few. Numbers, dates/times and generic document titles are
        skipped. Lines are compared as printed, indentation included, and
        only the winner is trimmed.

        Returns:
            Vendor name, or "" when no header line qualifies
        """
        if lines is None:
            lines = self._split_lines(text or '')

        best = None
        for line in lines[:VENDOR_SCAN_LINES]:
            candidate = line.strip()
            if len(candidate) < VENDOR_MIN_LENGTH:
                continue
            if re.fullmatch(r'\d+', candidate):
                continue
            if re.fullmatch(r'[\d/\-:]+', candidate):
                continue
            if candidate.lower() in GENERIC_HEADERS:
                continue
            if best is None or len(line) > len(best):
                best = line

        return best.strip() if best is not None else ''

    def extract_payment_method(self, text: str) -> str:
        """Return the first payment method in priority order, else "Unknown"."""
        normalized = (text or '').upper()
        for spec in self.payment_patterns:
            if spec.compiled.search(normalized):
                return spec.label
        return UNKNOWN_PAYMENT
