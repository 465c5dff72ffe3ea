"""
Confidence scoring and acceptance gates for parsed receipts.

Per-field scores come from signal patterns in the raw text. The overall
score is a fixed weighted average of the four per-field scores.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional
import re

from expense_ocr.models.parsed_receipt import ConfidenceScores, ParsedReceipt

__all__ = [
    'CONFIDENCE_WEIGHTS', 'FIELD_SCORES',
    'REJECT_INVALID', 'REJECT_LOW_CONFIDENCE',
    'score_confidence', 'is_valid', 'overall_confidence', 'evaluate',
]

# Weights sum to 1; amount matters most for reimbursement.
CONFIDENCE_WEIGHTS = {
    'amount': Decimal('0.5'),
    'date': Decimal('0.2'),
    'vendor': Decimal('0.2'),
    'payment': Decimal('0.1'),
}

# (score when the signal is present, score when it is absent)
FIELD_SCORES = {
    'amount': (90, 60),
    'date': (85, 50),
    'vendor': (80, 40),
    'payment': (85, 30),
}

AMOUNT_SIGNAL = re.compile(r'TOTAL|AMOUNT\s+DUE|BALANCE', re.IGNORECASE)
DATE_SIGNAL = re.compile(r'\d{1,2}[/-]\d{1,2}[/-]\d{2,4}')
PAYMENT_SIGNAL = re.compile(r'VISA|MASTERCARD|AMEX|DEBIT|CREDIT|CASH', re.IGNORECASE)

REJECT_INVALID = 'invalid'
REJECT_LOW_CONFIDENCE = 'low_confidence'


def _pick(field_name: str, present: bool) -> int:
    high, low = FIELD_SCORES[field_name]
    return high if present else low


def score_confidence(text: str, lines: Optional[List[str]] = None) -> ConfidenceScores:
    """
    Score how strongly the text carries each field's signal.

    Args:
        text: Raw OCR text
        lines: Non-blank lines of ``text``; derived when not given

    Returns:
        ConfidenceScores with all four fields populated
    """
    text = text or ''
    if lines is None:
        lines = [line for line in text.split('\n') if line.strip()]

    upper = text.upper()

    return ConfidenceScores(
        amount=_pick('amount', AMOUNT_SIGNAL.search(upper) is not None),
        date=_pick('date', DATE_SIGNAL.search(text) is not None),
        vendor=_pick('vendor', bool(lines) and len(lines[0].strip()) > 3),
        payment=_pick('payment', PAYMENT_SIGNAL.search(upper) is not None),
    )


def is_valid(parsed: ParsedReceipt) -> bool:
    """A receipt is usable when it has a positive amount; nothing else is required."""
    return parsed.amount is not None and parsed.amount > 0


def overall_confidence(parsed: ParsedReceipt) -> int:
    """
    Weighted average of the per-field confidence scores, rounded half up.

    Only ``parsed.confidence`` is read; extracted values do not affect it.
    """
    scores = parsed.confidence.as_dict()
    total = sum(Decimal(scores[name]) * weight for name, weight in CONFIDENCE_WEIGHTS.items())
    return int(total.quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def evaluate(parsed: ParsedReceipt, threshold: int) -> Optional[str]:
    """
    Apply the caller's acceptance policy.

    Returns:
        None when the receipt is acceptable, otherwise REJECT_INVALID or
        REJECT_LOW_CONFIDENCE
    """
    if not is_valid(parsed):
        return REJECT_INVALID
    if overall_confidence(parsed) < threshold:
        return REJECT_LOW_CONFIDENCE
    return None
