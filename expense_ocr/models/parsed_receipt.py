"""
Immutable result of one receipt text extraction.
"""

import datetime as dt
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class ConfidenceScores:
    """
    Per-field confidence, each an int in [0, 100].

    Scores say whether the text carried the signal a field is usually printed
    with, such as a TOTAL label or a card brand. They are heuristic and
    do not say whether the field was actually extracted.
    """
    amount: int
    date: int
    vendor: int
    payment: int

    def as_dict(self) -> dict:
        return {
            'amount': self.amount,
            'date': self.date,
            'vendor': self.vendor,
            'payment': self.payment,
        }


@dataclass(frozen=True)
class ParsedReceipt:
    """Structured data extracted from receipt OCR text."""
    amount: Optional[Decimal]
    currency: str
    date: Optional[dt.date]
    vendor_name: str
    payment_method: str
    confidence: ConfidenceScores
